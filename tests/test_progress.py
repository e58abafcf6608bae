import io
import unittest
from contextlib import redirect_stderr, redirect_stdout

from omoridec import progress
from omoridec.progress import ProgressReporter


class ProgressTests(unittest.TestCase):
    def test_non_tty_prints_only_final_line(self):
        stream = io.StringIO()
        reporter = ProgressReporter(stream=stream, plain=True)
        reporter("Decrypting", "a.KEL", 1, 3)
        reporter("Decrypting", "b.KEL", 2, 3)
        self.assertEqual(stream.getvalue(), "")
        reporter("Decrypting", "c.KEL", 3, 3)
        line = stream.getvalue()
        self.assertTrue(line.startswith("Decrypting ("))
        self.assertIn("100% 3/3 [c.KEL]", line)
        reporter.reset_terminal_state()
        self.assertEqual(stream.getvalue().count("\n"), 1)

    def test_status_lines_respect_silent(self):
        out, err = io.StringIO(), io.StringIO()
        with redirect_stdout(out), redirect_stderr(err):
            progress.status("hello")
            progress.status("hidden", silent=True)
            progress.error("boom")
            progress.error("hidden", silent=True)
        self.assertEqual(out.getvalue(), "hello\n")
        self.assertEqual(err.getvalue(), "boom\n")


if __name__ == "__main__":
    unittest.main()
