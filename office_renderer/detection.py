"""Guess a DocumentType from HTTP metadata when callers do not declare one."""
from __future__ import annotations

from typing import Optional
from urllib.parse import urlparse

from office_renderer.providers.base import DocumentType

CONTENT_TYPES = {
    "application/vnd.openxmlformats-officedocument.wordprocessingml.document": DocumentType.DOCX,
    "application/vnd.oasis.opendocument.text": DocumentType.ODT,
    "application/rtf": DocumentType.RTF,
    "text/rtf": DocumentType.RTF,
}
EXTENSIONS = {
    ".docx": DocumentType.DOCX,
    ".odt": DocumentType.ODT,
    ".rtf": DocumentType.RTF,
}


def document_type_from_content_type(content_type: Optional[str]) -> Optional[DocumentType]:
    if not content_type:
        return None
    lowered = content_type.lower()
    for mime, doc_type in CONTENT_TYPES.items():
        if mime in lowered:
            return doc_type
    return None


def document_type_from_url(url: Optional[str]) -> Optional[DocumentType]:
    """Match the extension of the URL path (or plain file path)."""
    if not url:
        return None
    path = urlparse(url).path or url
    lowered = path.lower()
    for extension, doc_type in EXTENSIONS.items():
        if lowered.endswith(extension):
            return doc_type
    return None


def detect_document_type(
    content_type: Optional[str] = None,
    url: Optional[str] = None,
    default: Optional[DocumentType] = DocumentType.DOCX,
) -> Optional[DocumentType]:
    """Prefer the declared content type, then the URL extension, then ``default``."""
    return document_type_from_content_type(content_type) or document_type_from_url(url) or default
