"""Decryption key discovery.

OMORI shipped with two key regimes. The 1.0.0 release embeds its key in
``js/main.js``; later releases receive it through a Steam launch option
(``--<32 hex chars>``). The regimes are told apart only by the SHA-256
fingerprint of a key, compared against the known hashes below.
"""

import dataclasses
import hashlib
import os
import pathlib
import re
import typing

from . import progress
from .errors import InvalidKeyError
from .files import normalize_path

OLD_KEY_HASH = "06494167914dab96fc9e58b5e2ee9eb98ad230edd6048d2134b8e18a0726f7c4"
KEY_HASH = "b1d50d2686248fc493b71cd490cb88ac75e71caff236fdb4ab9fa78a36319e11"

# --6bdb2e585882fbd48826ef9cffd4c511 is the 1.0.8 launch option
FALLBACK_KEY = "6bdb2e585882fbd48826ef9cffd4c511"

KEY_PATTERN = re.compile(r"--([0-9a-f]{32})")
EMBEDDED_KEY_MARKER = "let key='"
EMBEDDED_KEY_END = "';"
MAIN_JS = pathlib.Path("js") / "main.js"

ScriptLookup = typing.Callable[[], typing.Optional[str]]


@dataclasses.dataclass(frozen=True)
class DecryptionContext:
    folder: pathlib.Path
    key: str


def fingerprint(candidate: str) -> str:
    return hashlib.sha256(str(candidate).encode("utf-8")).hexdigest()


def key_from_launch_options(text: str) -> str | None:
    match = KEY_PATTERN.search(text or "")
    return match.group(1) if match else None


def extract_embedded_key(script_text: str) -> str | None:
    if EMBEDDED_KEY_MARKER not in script_text:
        return None
    tail = script_text.split(EMBEDDED_KEY_MARKER, 1)[1]
    return tail.split(EMBEDDED_KEY_END, 1)[0]


def locate_asset_root(folder: "str | os.PathLike[str]") -> pathlib.Path:
    root = normalize_path(folder)
    www = root / "www"
    if (www / "js").is_dir():
        return www
    return root


def main_js_lookup(asset_root: "str | os.PathLike[str]") -> ScriptLookup:
    path = normalize_path(asset_root) / MAIN_JS

    def _lookup() -> str | None:
        if not path.is_file():
            return None
        with open(path, "r", encoding="utf-8", errors="replace") as handle:
            return "\n".join(line.rstrip("\r\n") for line in handle)

    return _lookup


class KeyResolver:
    """Reconcile a user key, a script-embedded key and the fallback key.

    Each tier returns a verified key, ``None`` when it cannot decide, or
    raises :class:`InvalidKeyError`. The first tier that returns a key wins.
    """

    def __init__(
        self,
        old_key_hash: str = OLD_KEY_HASH,
        key_hash: str = KEY_HASH,
        fallback_key: str = FALLBACK_KEY,
        *,
        silent: bool = False,
    ):
        self.old_key_hash = old_key_hash
        self.key_hash = key_hash
        self.fallback_key = fallback_key
        self.silent = silent

    def _direct(self, candidate: str, script_lookup: ScriptLookup | None) -> str | None:
        if fingerprint(candidate) == self.key_hash:
            return candidate
        return None

    def _embedded(self, candidate: str, script_lookup: ScriptLookup | None) -> str | None:
        # A 1.0.0 candidate never consults main.js; it goes on to the fallback.
        if script_lookup is None or fingerprint(candidate) == self.old_key_hash:
            return None
        script = script_lookup()
        if script is None:
            return None
        embedded = extract_embedded_key(script)
        if embedded is None:
            return None
        if fingerprint(embedded) != self.old_key_hash:
            raise InvalidKeyError("Invalid OMORI 1.0.0 decryption key in main.js")
        progress.status("OMORI 1.0.0 decryption key found", silent=self.silent)
        return embedded

    def _fallback(self, candidate: str, script_lookup: ScriptLookup | None) -> str | None:
        # The supplied key did not verify; assume the current release's key.
        progress.status("Found decryption key.", silent=self.silent)
        return self.fallback_key

    def tiers(self) -> list[typing.Callable[[str, ScriptLookup | None], str | None]]:
        return [self._direct, self._embedded, self._fallback]

    def resolve(self, candidate: str, script_lookup: ScriptLookup | None = None) -> str:
        candidate = "" if candidate is None else str(candidate)
        for tier in self.tiers():
            key = tier(candidate, script_lookup)
            if key is not None:
                return key
        raise InvalidKeyError("No decryption key could be resolved")


def resolve_key(
    candidate: str,
    script_lookup: ScriptLookup | None = None,
    *,
    old_key_hash: str = OLD_KEY_HASH,
    key_hash: str = KEY_HASH,
    fallback_key: str = FALLBACK_KEY,
    silent: bool = False,
) -> str:
    resolver = KeyResolver(old_key_hash, key_hash, fallback_key, silent=silent)
    return resolver.resolve(candidate, script_lookup)


def init(
    folder: "str | os.PathLike[str]",
    candidate: str,
    asset_root: "str | os.PathLike[str] | None" = None,
    *,
    resolver: KeyResolver | None = None,
    silent: bool = False,
) -> DecryptionContext:
    """Run the resolution phase and bind its key to ``folder``."""
    folder_path = normalize_path(folder)
    root = locate_asset_root(folder_path) if asset_root is None else normalize_path(asset_root)
    resolver = resolver or KeyResolver(silent=silent)
    key = resolver.resolve(candidate, main_js_lookup(root))
    return DecryptionContext(folder=folder_path, key=key)
