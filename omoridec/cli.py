import argparse

import colorama

from . import config
from .decryptor import decrypt_all
from .errors import DecryptError
from .keys import init, key_from_launch_options, locate_asset_root
from .mods import detect_mods
from .progress import ProgressReporter


class _CliTheme:
    # level -> (colour, marker)
    LEVELS = {
        "ok": (colorama.Fore.GREEN, "✅"),
        "warn": (colorama.Fore.YELLOW, "⚠️"),
        "err": (colorama.Fore.RED, "❌"),
        "mod": (colorama.Fore.MAGENTA, "🧩"),
    }

    def __init__(self, plain: bool):
        self.plain = plain

    def paint(self, level: str, msg: str) -> str:
        if self.plain:
            return msg
        colour, marker = self.LEVELS[level]
        return f"{colorama.Style.BRIGHT}{colour}{marker} {msg}{colorama.Style.RESET_ALL}"


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="omoridec", description="Decrypt OMORI game assets in place")
    parser.add_argument(
        "folder",
        help="Game folder (or its www/ folder) containing encrypted assets"
    )
    parser.add_argument(
        "-k", "--key",
        default=config.DEFAULT_KEY,
        help="Decryption key or Steam launch option (--<key>); defaults to $OMORIDEC_KEY"
    )
    parser.add_argument(
        "--asset-root",
        default=None,
        help="Folder holding js/main.js and mods/ (default: auto-detected)"
    )
    parser.add_argument(
        "--no-beautify",
        dest="beautify",
        action="store_false",
        help="Write decrypted JSON exactly as stored instead of re-indenting it"
    )
    parser.add_argument(
        "-t", "--threads",
        type=int,
        default=None,
        help="Worker threads (default: $OMORIDEC_MAX_THREADS or CPU count)"
    )
    parser.add_argument(
        "--mods",
        action="store_true",
        help="List detected mods before decrypting"
    )
    parser.add_argument(
        "--silent",
        action="store_true",
        help="Suppress status output and the progress bar"
    )
    parser.add_argument(
        "--plain",
        action="store_true",
        help="Disable colours and emoji"
    )
    return parser


def cli(argv=None) -> int:
    args = _build_parser().parse_args(argv)
    theme = _CliTheme(args.plain or config.cli_plain_mode())
    candidate = key_from_launch_options(args.key) or args.key

    try:
        context = init(args.folder, candidate, args.asset_root, silent=args.silent)
    except (DecryptError, OSError) as exc:
        print(theme.paint("err", f"Key resolution failed: {exc}"))
        return 2

    if args.mods:
        root = locate_asset_root(context.folder) if args.asset_root is None else args.asset_root
        mods = detect_mods(root, silent=args.silent)
        if mods:
            for label in sorted(mods):
                print(theme.paint("mod", label))
        else:
            print(theme.paint("warn", "No mods detected"))

    reporter = None if args.silent else ProgressReporter(plain=theme.plain)
    try:
        report = decrypt_all(
            context,
            beautify=args.beautify,
            progress_callback=reporter,
            max_workers=args.threads,
            silent=args.silent,
        )
    except (DecryptError, OSError) as exc:
        print(theme.paint("err", str(exc)))
        return 2
    finally:
        if reporter:
            reporter.reset_terminal_state()

    for failure in report.failed:
        print(theme.paint("err", f"{failure.source}: FAIL! ({failure.error})"))
    summary = f"Decrypted {len(report.succeeded)}/{report.total} files"
    print(theme.paint("ok", summary) if report.ok else theme.paint("warn", summary))
    return 0 if report.ok else 1


def main(argv=None) -> int:
    try:
        return cli(argv)
    except KeyboardInterrupt:
        print("Exiting...")
        return 130


if __name__ == "__main__":
    raise SystemExit(main())
