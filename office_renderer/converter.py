"""Conversion facade: bytes plus a format selector in, HTML out."""
from __future__ import annotations

import zipfile
from typing import Optional, Union
from xml.etree import ElementTree as ET

from office_renderer.config import ConverterSettings
from office_renderer.errors import DocumentIoError, ProviderError, UnsupportedFormatError
from office_renderer.model.elements import Document
from office_renderer.providers.base import DocumentType
from office_renderer.providers.factory import ProviderFactory
from office_renderer.renderer.html_renderer import HtmlRenderer
from office_renderer.utils.logger import get_logger

LOGGER = get_logger(__name__)

FormatSelector = Union[DocumentType, str]


def resolve_document_type(selector: FormatSelector) -> DocumentType:
    """Normalise a selector to a DocumentType or raise UnsupportedFormatError."""
    if isinstance(selector, DocumentType):
        return selector
    doc_type = DocumentType.from_str(selector) if isinstance(selector, str) else None
    if doc_type is None:
        raise UnsupportedFormatError(selector)
    return doc_type


class DocumentConverter:
    """Single entry point of the pipeline; safe to share across threads."""

    def __init__(self, settings: Optional[ConverterSettings] = None) -> None:
        self._settings = settings or ConverterSettings()
        self._factory = ProviderFactory(self._settings)
        self._html_renderer = HtmlRenderer(title=self._settings.title)

    def convert_to_document(self, data: bytes, doc_type: FormatSelector) -> Document:
        """Parse ``data`` with the provider for ``doc_type``."""
        resolved = resolve_document_type(doc_type)
        provider = self._factory.get_provider(resolved)
        try:
            document = provider.parse(bytes(data))
        except (zipfile.BadZipFile, ET.ParseError, UnicodeDecodeError, OSError) as exc:
            raise DocumentIoError(f"Unable to read {resolved.value} buffer: {exc}", code="invalid_archive") from exc
        except RecursionError as exc:
            raise ProviderError(f"{resolved.value} content is nested too deeply", code="nesting_too_deep") from exc
        LOGGER.debug("Parsed %d bytes of %s into %d blocks", len(data), resolved.value, len(document.blocks))
        return document

    def convert_buffer_to_html(self, data: bytes, doc_type: FormatSelector) -> str:
        """Convert a document buffer to HTML.

        Raises UnsupportedFormatError for an unknown selector, ProviderError
        when the document content cannot be interpreted and DocumentIoError
        when the buffer is not a readable container of the declared type.
        """
        document = self.convert_to_document(data, doc_type)
        return self.render_document(document)

    def render_document(self, document: Document) -> str:
        return self._html_renderer.render(document)
