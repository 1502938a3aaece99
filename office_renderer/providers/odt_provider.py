"""ODT provider: OpenDocument text package to Document."""
from __future__ import annotations

from office_renderer.model.elements import Document
from office_renderer.parser.odt_loader import OdtPackage
from office_renderer.parser.odt_parser import OdtParser
from office_renderer.parser.odt_styles_parser import OdtStylesParser
from office_renderer.providers.base import DocumentProvider, DocumentType


class OdtProvider(DocumentProvider):
    """Load an ODT package, collect its style families, then walk ``office:text``."""

    document_type = DocumentType.ODT

    def parse(self, data: bytes) -> Document:
        package = OdtPackage.from_bytes(data, self.settings)
        content_xml = package.require_content_xml()
        styles = OdtStylesParser(content_xml, package.get_styles_xml()).parse()
        return OdtParser(content_xml, styles, self.settings).parse()
