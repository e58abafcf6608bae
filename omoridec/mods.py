"""Inventory of installed OMORI mods."""

import json
import os
import pathlib
import zipfile

from . import progress
from .files import normalize_path

MOD_MANIFEST = "mod.json"


def _describe(config: dict, fallback_name: str) -> tuple[str, str]:
    mod_id = str(config.get("id") or fallback_name)
    name = config.get("name") or fallback_name
    version = config.get("version") or "???"
    return mod_id, f"{name} v{version} ({mod_id})"


def _loose_manifests(mods_dir: pathlib.Path) -> list[pathlib.Path]:
    return sorted(p for p in mods_dir.rglob("*") if p.is_file() and p.name.endswith(MOD_MANIFEST))


def _archives(mods_dir: pathlib.Path) -> list[pathlib.Path]:
    return sorted(p for p in mods_dir.rglob("*.zip") if p.is_file())


def detect_mods(asset_root: "str | os.PathLike[str]", *, silent: bool = False) -> set[str]:
    """Return ``"<name> v<version> (<id>)"`` for every distinct mod id found."""
    mods_dir = normalize_path(asset_root) / "mods"
    out: set[str] = set()
    seen: set[str] = set()
    if not mods_dir.is_dir():
        return out

    def _add(config, fallback_name: str) -> None:
        if not isinstance(config, dict):
            raise ValueError("mod.json is not an object")
        mod_id, label = _describe(config, fallback_name)
        if mod_id not in seen:
            seen.add(mod_id)
            out.add(label)

    for manifest in _loose_manifests(mods_dir):
        progress.status(str(manifest), silent=silent)
        try:
            _add(json.loads(manifest.read_text(encoding="utf-8")), manifest.name)
        except (OSError, ValueError) as exc:
            progress.error(f"Skipping {manifest}: {exc}", silent=silent)

    for archive in _archives(mods_dir):
        try:
            with zipfile.ZipFile(archive) as zf:
                for entry in zf.infolist():
                    if entry.is_dir() or not entry.filename.endswith(MOD_MANIFEST):
                        continue
                    progress.status(f"{archive}:{entry.filename}", silent=silent)
                    _add(json.loads(zf.read(entry).decode("utf-8")), archive.name)
        except (OSError, ValueError, zipfile.BadZipFile) as exc:
            progress.error(f"Skipping {archive}: {exc}", silent=silent)
    return out
