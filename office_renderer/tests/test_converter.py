"""Tests for the conversion facade and its error taxonomy."""
import unittest
from unittest import mock

from office_renderer.config import ConverterSettings
from office_renderer.converter import DocumentConverter, resolve_document_type
from office_renderer.errors import ConversionError, DocumentIoError, ProviderError, UnsupportedFormatError
from office_renderer.providers.base import DocumentType
from office_renderer.providers.docx_provider import DocxProvider
from office_renderer.providers.factory import ProviderFactory
from office_renderer.tests.builders import docx_bytes, odt_bytes


class DocumentTypeTest(unittest.TestCase):
    def test_from_str_is_case_insensitive(self) -> None:
        self.assertIs(DocumentType.from_str("DOCX"), DocumentType.DOCX)
        self.assertIs(DocumentType.from_str(" rtf "), DocumentType.RTF)
        self.assertIs(DocumentType.from_str("Odt"), DocumentType.ODT)
        self.assertIsNone(DocumentType.from_str("pdf"))
        self.assertIsNone(DocumentType.from_str(None))

    def test_resolve_document_type(self) -> None:
        self.assertIs(resolve_document_type(DocumentType.ODT), DocumentType.ODT)
        self.assertIs(resolve_document_type("docx"), DocumentType.DOCX)
        with self.assertRaises(UnsupportedFormatError):
            resolve_document_type("doc")


class ProviderFactoryTest(unittest.TestCase):
    def test_one_instance_per_type(self) -> None:
        factory = ProviderFactory()

        first = factory.get_provider(DocumentType.DOCX)

        self.assertIsInstance(first, DocxProvider)
        self.assertIs(first, factory.get_provider(DocumentType.DOCX))
        self.assertEqual(
            {factory.get_provider(doc_type).document_type for doc_type in DocumentType},
            set(DocumentType),
        )


class DocumentConverterTest(unittest.TestCase):
    def setUp(self) -> None:
        self.converter = DocumentConverter()

    def test_docx_to_html(self) -> None:
        data = docx_bytes('<w:p><w:r><w:rPr><w:b/></w:rPr><w:t>Hello</w:t></w:r></w:p>')

        html = self.converter.convert_buffer_to_html(data, "docx")

        self.assertIn("<p><strong>Hello</strong></p>", html)

    def test_unknown_selector(self) -> None:
        with self.assertRaises(UnsupportedFormatError) as ctx:
            self.converter.convert_buffer_to_html(b"%PDF-1.7", "pdf")
        self.assertEqual(ctx.exception.kind, "unsupported_format")
        self.assertEqual(ctx.exception.selector, "pdf")
        self.assertIsInstance(ctx.exception, ConversionError)

    def test_unknown_selector_never_reaches_a_provider(self) -> None:
        with mock.patch.object(ProviderFactory, "get_provider") as get_provider:
            with self.assertRaises(UnsupportedFormatError):
                DocumentConverter().convert_buffer_to_html(b"", "txt")
        get_provider.assert_not_called()

    def test_non_zip_docx_is_io_error(self) -> None:
        with self.assertRaises(DocumentIoError) as ctx:
            self.converter.convert_buffer_to_html(b"not a zip archive", DocumentType.DOCX)
        self.assertEqual(ctx.exception.kind, "io")

    def test_non_zip_odt_is_io_error(self) -> None:
        with self.assertRaises(DocumentIoError):
            self.converter.convert_buffer_to_html(b"", "odt")

    def test_unterminated_rtf_is_provider_error(self) -> None:
        with self.assertRaises(ProviderError) as ctx:
            self.converter.convert_buffer_to_html(rb"{\rtf1 {\b oops", "rtf")
        self.assertEqual(ctx.exception.kind, "provider")

    def test_stray_parse_errors_are_translated(self) -> None:
        with mock.patch.object(DocxProvider, "parse", side_effect=UnicodeDecodeError("utf-8", b"\xff", 0, 1, "bad")):
            with self.assertRaises(DocumentIoError):
                DocumentConverter().convert_buffer_to_html(b"", "docx")

    def test_recursion_limit_becomes_provider_error(self) -> None:
        with mock.patch.object(DocxProvider, "parse", side_effect=RecursionError("maximum recursion depth exceeded")):
            with self.assertRaises(ProviderError) as ctx:
                DocumentConverter().convert_buffer_to_html(b"", "docx")
        self.assertEqual(ctx.exception.code, "nesting_too_deep")

    def test_settings_title_is_used(self) -> None:
        converter = DocumentConverter(ConverterSettings(title="Report"))

        html = converter.convert_buffer_to_html(odt_bytes("<text:p>x</text:p>"), "odt")

        self.assertIn("<title>Report</title>", html)

    def test_repeated_conversions_are_identical(self) -> None:
        data = docx_bytes("<w:p><w:r><w:t>same</w:t></w:r></w:p>")

        self.assertEqual(
            self.converter.convert_buffer_to_html(data, "docx"),
            self.converter.convert_buffer_to_html(data, "docx"),
        )

    def test_render_document(self) -> None:
        document = self.converter.convert_to_document(rb"{\rtf1 Hi\par}", "rtf")

        self.assertIn("<p>Hi</p>", self.converter.render_document(document))


if __name__ == "__main__":
    unittest.main()
