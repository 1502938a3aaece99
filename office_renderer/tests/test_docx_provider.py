"""Tests for the DOCX provider working on whole archives."""
import unittest

from office_renderer.config import ConverterSettings
from office_renderer.errors import DocumentIoError, ProviderError
from office_renderer.model.elements import Heading, ListItem, ListKind, Paragraph, Run, RunFormatting, Table
from office_renderer.providers.docx_provider import DocxProvider
from office_renderer.tests.builders import docx_bytes, document_xml, numbering_xml, styles_xml, zip_bytes


class DocxProviderTest(unittest.TestCase):
    def setUp(self) -> None:
        self.provider = DocxProvider()

    def test_styles_and_numbering_parts_are_used(self) -> None:
        data = docx_bytes(
            '<w:p><w:pPr><w:pStyle w:val="Heading2"/></w:pPr><w:r><w:t>Intro</w:t></w:r></w:p>'
            '<w:p><w:pPr><w:pStyle w:val="ListNumber"/></w:pPr><w:r><w:t>Step</w:t></w:r></w:p>',
            styles=styles_xml(
                '<w:style w:type="paragraph" w:styleId="Heading2"><w:name w:val="heading 2"/></w:style>'
                '<w:style w:type="paragraph" w:styleId="ListNumber">'
                '<w:pPr><w:numPr><w:numId w:val="1"/></w:numPr></w:pPr></w:style>',
                defaults="<w:i/>",
            ),
            numbering=numbering_xml(
                '<w:abstractNum w:abstractNumId="0"><w:lvl w:ilvl="0"><w:numFmt w:val="decimal"/></w:lvl></w:abstractNum>'
                '<w:num w:numId="1"><w:abstractNumId w:val="0"/></w:num>'
            ),
        )

        document = self.provider.parse(data)

        italic = RunFormatting(italic=True)
        self.assertEqual(
            document.blocks,
            (
                Heading(level=2, runs=(Run("Intro", italic),)),
                ListItem(runs=(Run("Step", italic),), kind=ListKind.NUMBERED, depth=0),
            ),
        )

    def test_package_without_optional_parts(self) -> None:
        document = self.provider.parse(docx_bytes("<w:p><w:r><w:t>Hi</w:t></w:r></w:p>"))

        self.assertEqual(document.blocks, (Paragraph(runs=(Run("Hi"),)),))

    def test_main_part_found_without_package_rels(self) -> None:
        data = zip_bytes({"word/document.xml": document_xml("<w:p><w:r><w:t>x</w:t></w:r></w:p>")})

        self.assertEqual(self.provider.parse(data).text_content(), "x")

    def test_not_a_zip_is_io_error(self) -> None:
        with self.assertRaises(DocumentIoError) as ctx:
            self.provider.parse(b"plain text, not a package")
        self.assertEqual(ctx.exception.code, "invalid_archive")

    def test_missing_document_part_is_provider_error(self) -> None:
        with self.assertRaises(ProviderError) as ctx:
            self.provider.parse(zip_bytes({"word/other.xml": "<x/>"}))
        self.assertEqual(ctx.exception.code, "missing_part")

    def test_malformed_xml_is_io_error(self) -> None:
        data = zip_bytes({"word/document.xml": "<w:document"})

        with self.assertRaises(DocumentIoError) as ctx:
            self.provider.parse(data)
        self.assertEqual(ctx.exception.code, "invalid_xml")

    def test_grid_spans_are_capped(self) -> None:
        provider = DocxProvider(ConverterSettings(max_repeat=4))
        data = docx_bytes(
            "<w:tbl><w:tr>"
            '<w:trPr><w:gridBefore w:val="2000000"/></w:trPr>'
            '<w:tc><w:tcPr><w:gridSpan w:val="2000000"/></w:tcPr><w:p><w:r><w:t>wide</w:t></w:r></w:p></w:tc>'
            "</w:tr></w:tbl>"
        )

        table = provider.parse(data).blocks[0]

        self.assertIsInstance(table, Table)
        self.assertEqual(table.column_count, 8)
        self.assertEqual(table.rows[0].cells[4].blocks, (Paragraph(runs=(Run("wide"),)),))

    def test_deeply_nested_tables_are_rejected(self) -> None:
        body = "<w:p><w:r><w:t>deep</w:t></w:r></w:p>"
        for _ in range(100):
            body = f"<w:tbl><w:tr><w:tc>{body}</w:tc></w:tr></w:tbl>"

        with self.assertRaises(ProviderError) as ctx:
            self.provider.parse(docx_bytes(body))
        self.assertEqual(ctx.exception.code, "nesting_too_deep")

    def test_nesting_limit_is_configurable(self) -> None:
        provider = DocxProvider(ConverterSettings(max_nesting_depth=2))
        body = "<w:p>" + "<w:hyperlink>" * 3 + "<w:r><w:t>x</w:t></w:r>" + "</w:hyperlink>" * 3 + "</w:p>"

        with self.assertRaises(ProviderError) as ctx:
            provider.parse(docx_bytes(body))
        self.assertEqual(ctx.exception.code, "nesting_too_deep")
        self.assertEqual(self.provider.parse(docx_bytes(body)).text_content(), "x")

    def test_oversized_part_is_rejected(self) -> None:
        provider = DocxProvider(ConverterSettings(max_part_bytes=16))

        with self.assertRaises(ProviderError) as ctx:
            provider.parse(docx_bytes("<w:p><w:r><w:t>too large</w:t></w:r></w:p>"))
        self.assertEqual(ctx.exception.code, "part_too_large")


if __name__ == "__main__":
    unittest.main()
