import json
import unittest
import zipfile
from pathlib import Path
from tempfile import TemporaryDirectory

from omoridec.mods import detect_mods


class DetectModsTests(unittest.TestCase):
    def setUp(self) -> None:
        self.tmpdir = TemporaryDirectory()
        self.tmp_path = Path(self.tmpdir.name)
        self.mods = self.tmp_path / "mods"

    def tearDown(self) -> None:
        self.tmpdir.cleanup()

    def _loose(self, folder: str, config) -> None:
        path = self.mods / folder / "mod.json"
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(json.dumps(config), encoding="utf-8")

    def _zipped(self, name: str, config) -> None:
        self.mods.mkdir(parents=True, exist_ok=True)
        with zipfile.ZipFile(self.mods / name, "w") as zf:
            zf.writestr("inner/mod.json", json.dumps(config))
            zf.writestr("inner/readme.txt", "hello")

    def test_no_mods_folder(self):
        self.assertEqual(detect_mods(self.tmp_path, silent=True), set())

    def test_loose_and_zipped_mods(self):
        self._loose("oneloader", {"id": "oneloader", "name": "OneLoader", "version": "1.5"})
        self._zipped("extra.zip", {"id": "extra", "name": "Extra Content", "version": "2.0"})
        found = detect_mods(self.tmp_path, silent=True)
        self.assertEqual(found, {"OneLoader v1.5 (oneloader)", "Extra Content v2.0 (extra)"})

    def test_duplicate_ids_counted_once(self):
        self._loose("a", {"id": "same", "name": "First", "version": "1"})
        self._zipped("b.zip", {"id": "same", "name": "Second", "version": "2"})
        self.assertEqual(len(detect_mods(self.tmp_path, silent=True)), 1)

    def test_missing_fields_use_defaults(self):
        self._loose("bare", {})
        self.assertEqual(detect_mods(self.tmp_path, silent=True), {"mod.json v??? (mod.json)"})

    def test_broken_mods_are_skipped(self):
        broken = self.mods / "broken" / "mod.json"
        broken.parent.mkdir(parents=True)
        broken.write_text("{not json", encoding="utf-8")
        (self.mods / "bad.zip").write_bytes(b"not a zip")
        self._loose("good", {"id": "good", "name": "Good", "version": "0.1"})
        self.assertEqual(detect_mods(self.tmp_path, silent=True), {"Good v0.1 (good)"})


if __name__ == "__main__":
    unittest.main()
