"""Status lines and the terminal progress bar."""

import os
import shutil
import sys
import threading
import time

import colorama

colorama.just_fix_windows_console()

PROGRESS_BAR_WIDTH = 30


def status(message: str, *, silent: bool = False) -> None:
    if silent:
        return
    print(message)


def error(message: str, *, silent: bool = False) -> None:
    if silent:
        return
    print(message, file=sys.stderr)


class ProgressReporter:
    """Single-line overall progress bar.

    Instances are callables with the ``(stage, item, index, total)``
    signature expected by :func:`omoridec.decryptor.decrypt_all`.
    """

    def __init__(self, stream=None, min_interval: float = 0.1, plain: bool = False):
        self.stream = stream or sys.stdout
        self._min_interval = max(0.0, float(min_interval))
        self._is_tty = bool(getattr(self.stream, "isatty", lambda: False)())
        self._printed = False
        self._last_render = 0.0
        self._lock = threading.Lock()
        self._term_width = shutil.get_terminal_size((80, 24)).columns
        self._green = "" if plain else colorama.Fore.GREEN
        self._reset = "" if plain else colorama.Fore.RESET
        self._supports_ansi = self._is_tty and os.getenv("TERM") != "dumb"

    def _render_bar(self, fraction: float) -> str:
        fraction = max(0.0, min(1.0, fraction))
        filled = int(fraction * PROGRESS_BAR_WIDTH)
        if filled >= PROGRESS_BAR_WIDTH:
            return f"({self._green}{'❚' * PROGRESS_BAR_WIDTH}{self._reset})"
        return f"({'❚' * filled}{' ' * (PROGRESS_BAR_WIDTH - filled)})"

    def _write(self, line: str, force: bool = False) -> None:
        now = time.monotonic()
        if not force and self._printed and (now - self._last_render) < self._min_interval:
            return
        if len(line) > self._term_width:
            line = line[: self._term_width]
        if self._is_tty and self._supports_ansi:
            self.stream.write("\r\x1b[2K" + line)
            self.stream.flush()
        elif force:
            # Non-TTY output only gets the final line.
            self.stream.write(line + "\n")
            self.stream.flush()
        else:
            return
        self._printed = True
        self._last_render = now

    def __call__(self, stage: str, item: str, index: int, total: int) -> None:
        total = max(total, 1)
        fraction = index / total
        with self._lock:
            bar = self._render_bar(fraction)
            line = f"{stage} {bar} {fraction * 100:3.0f}% {index}/{total} [{item}]"
            self._write(line.replace("\n", " "), force=index >= total)

    def reset_terminal_state(self) -> None:
        with self._lock:
            if self._printed and self._is_tty:
                self.stream.write("\n")
                self.stream.flush()
            self._printed = False
