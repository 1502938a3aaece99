"""RTF provider: brace-delimited token stream to Document."""
from __future__ import annotations

from office_renderer.model.elements import Document
from office_renderer.parser.rtf_parser import RtfParser
from office_renderer.providers.base import DocumentProvider, DocumentType


class RtfProvider(DocumentProvider):
    """Tokenize the buffer and run it through the group-scoped state machine."""

    document_type = DocumentType.RTF

    def parse(self, data: bytes) -> Document:
        return RtfParser(data, self.settings).parse()
