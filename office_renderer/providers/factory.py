"""Closed mapping from document type to the provider that parses it."""
from __future__ import annotations

from types import MappingProxyType
from typing import Mapping, Optional

from office_renderer.config import ConverterSettings
from office_renderer.providers.base import DocumentProvider, DocumentType
from office_renderer.providers.docx_provider import DocxProvider
from office_renderer.providers.odt_provider import OdtProvider
from office_renderer.providers.rtf_provider import RtfProvider


class ProviderFactory:
    """Holds one provider instance per document type, built once and shared across calls."""

    def __init__(self, settings: Optional[ConverterSettings] = None) -> None:
        settings = settings or ConverterSettings()
        self._providers: Mapping[DocumentType, DocumentProvider] = MappingProxyType(
            {
                DocumentType.DOCX: DocxProvider(settings),
                DocumentType.RTF: RtfProvider(settings),
                DocumentType.ODT: OdtProvider(settings),
            }
        )

    def get_provider(self, doc_type: DocumentType) -> DocumentProvider:
        return self._providers[doc_type]
