"""DOCX provider: WordprocessingML package to Document."""
from __future__ import annotations

from office_renderer.model.elements import Document
from office_renderer.parser.docx_loader import DocxPackage
from office_renderer.parser.document_parser import DocumentParser
from office_renderer.parser.numbering_parser import NumberingParser
from office_renderer.parser.styles_parser import StylesParser
from office_renderer.providers.base import DocumentProvider, DocumentType
from office_renderer.utils.logger import get_logger

LOGGER = get_logger(__name__)


class DocxProvider(DocumentProvider):
    """Load a DOCX package, resolve styles and numbering, then walk the body."""

    document_type = DocumentType.DOCX

    def parse(self, data: bytes) -> Document:
        package = DocxPackage.from_bytes(data, self.settings)
        document_xml = package.require_document_xml()
        styles_xml = package.get_styles_xml()
        if styles_xml is None:
            LOGGER.debug("DOCX package has no styles part; using unformatted defaults")
        styles = StylesParser(styles_xml).parse()
        numbering = NumberingParser(package.get_numbering_xml()).parse()
        LOGGER.debug("Parsing %s (%s root)", package.main_part, document_xml.getroot().tag)
        return DocumentParser(package, styles, numbering, self.settings).parse()
