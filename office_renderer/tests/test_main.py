"""Tests for the command line entry point and debug dumps."""
import json
import tempfile
import unittest
from pathlib import Path

from office_renderer.errors import UnsupportedFormatError
from office_renderer.main import cli, detect_input_type, main
from office_renderer.providers.base import DocumentType
from office_renderer.tests.builders import docx_bytes


class MainTest(unittest.TestCase):
    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        self.tmp = Path(self._tmp.name)

    def tearDown(self) -> None:
        self._tmp.cleanup()

    def test_detect_input_type(self) -> None:
        self.assertIs(detect_input_type(Path("a.DOCX")), DocumentType.DOCX)
        self.assertIs(detect_input_type(Path("a.bin"), "rtf"), DocumentType.RTF)
        with self.assertRaises(UnsupportedFormatError):
            detect_input_type(Path("a.pdf"))

    def test_main_writes_html_next_to_input(self) -> None:
        source = self.tmp / "letter.rtf"
        source.write_bytes(rb"{\rtf1 {\i Dear} reader\par}")

        output = main(str(source))

        self.assertEqual(output, source.with_suffix(".html").resolve())
        self.assertIn("<p><em>Dear</em> reader</p>", output.read_text(encoding="utf-8"))

    def test_debug_dump(self) -> None:
        source = self.tmp / "doc.docx"
        source.write_bytes(docx_bytes("<w:p><w:r><w:t>dump me</w:t></w:r></w:p>"))

        main(str(source), str(self.tmp / "out" / "doc.html"), debug_dir=str(self.tmp / "debug"))

        payload = json.loads((self.tmp / "debug" / "document_model.json").read_text(encoding="utf-8"))
        self.assertEqual(payload["type"], "Document")
        paragraph = payload["blocks"][0]
        self.assertEqual(paragraph["type"], "Paragraph")
        self.assertEqual(paragraph["runs"][0]["text"], "dump me")
        self.assertFalse(paragraph["runs"][0]["formatting"]["bold"])
        self.assertTrue((self.tmp / "out" / "doc.html").exists())

    def test_cli_exit_codes(self) -> None:
        source = self.tmp / "broken.docx"
        source.write_bytes(b"not a zip")

        with self.assertLogs("office_renderer.main", level="ERROR"):
            self.assertEqual(cli([str(source)]), 1)
        self.assertEqual(cli([str(source), "--type", "rtf", "--output", str(self.tmp / "ok.html")]), 0)
        self.assertEqual(cli([str(self.tmp / "missing.odt")]), 1)


if __name__ == "__main__":
    unittest.main()
