"""Encrypted asset naming rules and the recursive file finder."""

import os
import pathlib
import typing

IV_LENGTH = 16
BACKUP_SUFFIX = ".BASIL"

# Encrypted suffix -> engine-native suffix
ENCRYPTED_EXTENSIONS: dict[str, str] = {
    ".OMORI": ".js",
    ".KEL": ".json",
    ".AUBREY": ".json",
    ".HERO": ".yaml",
    ".PLUTO": ".yaml",
}

DEFAULT_EXCLUSIONS: tuple[str, ...] = ()


def normalize_path(path_like: "str | os.PathLike[str]") -> pathlib.Path:
    path = pathlib.Path(path_like).expanduser()
    try:
        return path.resolve(strict=False)
    except OSError:
        return path


def is_encrypted(path: pathlib.Path, extensions: typing.Iterable[str] | None = None) -> bool:
    suffixes = ENCRYPTED_EXTENSIONS if extensions is None else extensions
    return any(path.name.endswith(ext) for ext in suffixes)


def native_path(path: pathlib.Path) -> pathlib.Path:
    """Map ``Foo.KEL`` to ``Foo.json`` and so on."""
    for ext, native in ENCRYPTED_EXTENSIONS.items():
        if path.name.endswith(ext):
            return path.with_name(path.name[: -len(ext)] + native)
    raise ValueError(f"Not an encrypted asset: {path}")


def backup_path(path: pathlib.Path) -> pathlib.Path:
    return path.with_name(path.name + BACKUP_SUFFIX)


def ciphertext_source(path: pathlib.Path) -> pathlib.Path:
    backup = backup_path(path)
    return backup if backup.is_file() else path


def find_encrypted_files(
    folder: "str | os.PathLike[str]",
    exclusions: typing.Iterable[str] = DEFAULT_EXCLUSIONS,
    extensions: typing.Iterable[str] | None = None,
) -> list[pathlib.Path]:
    root = normalize_path(folder)
    if not root.is_dir():
        raise FileNotFoundError(f"Folder not found: {root}")
    excluded = set(exclusions)
    suffixes = tuple(ENCRYPTED_EXTENSIONS if extensions is None else extensions)
    found: list[pathlib.Path] = []
    for dirpath, dirnames, filenames in os.walk(root):
        # prune in place so os.walk never descends into excluded folders
        dirnames[:] = sorted(d for d in dirnames if d not in excluded)
        for name in filenames:
            candidate = pathlib.Path(dirpath) / name
            if is_encrypted(candidate, suffixes):
                found.append(candidate)
    found.sort()
    return found
