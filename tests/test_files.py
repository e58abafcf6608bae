import unittest
from pathlib import Path
from tempfile import TemporaryDirectory

from omoridec.files import (
    backup_path,
    ciphertext_source,
    find_encrypted_files,
    is_encrypted,
    native_path,
)


class FileRulesTests(unittest.TestCase):
    def setUp(self) -> None:
        self.tmpdir = TemporaryDirectory()
        self.tmp_path = Path(self.tmpdir.name).resolve()

    def tearDown(self) -> None:
        self.tmpdir.cleanup()

    def _touch(self, relative: str) -> Path:
        path = self.tmp_path / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(b"\x00" * 32)
        return path

    def test_native_path_mapping(self):
        expected = {
            "Core.OMORI": "Core.js",
            "Actors.KEL": "Actors.json",
            "Map001.AUBREY": "Map001.json",
            "dialogue.HERO": "dialogue.yaml",
            "Atlas.PLUTO": "Atlas.yaml",
        }
        for name, native in expected.items():
            self.assertEqual(native_path(self.tmp_path / name), self.tmp_path / native)

    def test_native_path_rejects_plain_files(self):
        with self.assertRaises(ValueError):
            native_path(self.tmp_path / "readme.txt")
        # suffixes are case sensitive
        with self.assertRaises(ValueError):
            native_path(self.tmp_path / "core.omori")

    def test_backup_resolution(self):
        src = self._touch("data/Items.KEL")
        self.assertEqual(backup_path(src).name, "Items.KEL.BASIL")
        self.assertEqual(ciphertext_source(src), src)
        backup = self._touch("data/Items.KEL.BASIL")
        self.assertEqual(ciphertext_source(src), backup)

    def test_find_encrypted_files(self):
        wanted = [
            self._touch("www/data/Items.KEL"),
            self._touch("www/js/plugins/A.OMORI"),
            self._touch("www/maps/Map001.AUBREY"),
        ]
        self._touch("www/data/Items.KEL.BASIL")
        self._touch("www/img/pic.png")
        self._touch("www/node_modules/dep/x.OMORI")
        found = find_encrypted_files(self.tmp_path, exclusions=["node_modules"])
        self.assertEqual(found, sorted(wanted))
        self.assertTrue(all(is_encrypted(p) for p in found))

    def test_find_with_custom_extensions(self):
        keep = self._touch("a.KEL")
        self._touch("b.OMORI")
        self.assertEqual(find_encrypted_files(self.tmp_path, extensions=[".KEL"]), [keep])

    def test_find_missing_folder(self):
        with self.assertRaises(FileNotFoundError):
            find_encrypted_files(self.tmp_path / "missing")


if __name__ == "__main__":
    unittest.main()
