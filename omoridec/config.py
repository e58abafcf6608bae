"""Environment driven settings.

Every value is read once at import time. Integers that fail to parse or are
not positive are ignored and the default is used instead.
"""

import os as _os_module

STREAM_CHUNK_SIZE_DEFAULT = 1 << 20  # 1 MiB streaming blocks
JSON_INDENT_DEFAULT = 2


def _env_int(name: str) -> int | None:
    value = _os_module.getenv(name)
    if not value:
        return None
    try:
        parsed = int(value)
    except (TypeError, ValueError):
        return None
    if parsed <= 0:
        return None
    return parsed


def _env_flag(name: str) -> bool:
    raw = _os_module.getenv(name)
    if not raw:
        return False
    return raw.strip().lower() in ("1", "true", "yes", "on")


DEFAULT_KEY = _os_module.getenv("OMORIDEC_KEY", "")

_MAX_THREADS_ENV = _env_int("OMORIDEC_MAX_THREADS")
CPU_COUNT = _MAX_THREADS_ENV if _MAX_THREADS_ENV is not None else max(1, _os_module.cpu_count() or 1)

STREAM_CHUNK_SIZE = _env_int("OMORIDEC_CHUNK_SIZE") or STREAM_CHUNK_SIZE_DEFAULT
JSON_INDENT = _env_int("OMORIDEC_JSON_INDENT") or JSON_INDENT_DEFAULT


def cli_plain_mode() -> bool:
    if _env_flag("OMORIDEC_CLI_PLAIN"):
        return True
    if _os_module.getenv("NO_COLOR"):
        return True
    return False
