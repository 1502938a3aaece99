"""Capability contract shared by the format providers."""
from __future__ import annotations

from abc import ABC, abstractmethod
from enum import Enum
from typing import Optional

from office_renderer.config import ConverterSettings
from office_renderer.model.elements import Document


class DocumentType(str, Enum):
    """Closed set of container formats the converter understands."""

    DOCX = "docx"
    RTF = "rtf"
    ODT = "odt"

    @classmethod
    def from_str(cls, value: Optional[str]) -> Optional["DocumentType"]:
        """Map a raw selector such as ``"DOCX"`` onto a member, or None when unknown."""
        if value is None:
            return None
        normalized = value.strip().lower()
        for member in cls:
            if member.value == normalized:
                return member
        return None


class DocumentProvider(ABC):
    """Parses one container format's raw bytes into a Document.

    Implementations hold no per-call state, so one instance may serve
    concurrent calls.
    """

    document_type: DocumentType

    def __init__(self, settings: Optional[ConverterSettings] = None) -> None:
        self._settings = settings or ConverterSettings()

    @property
    def settings(self) -> ConverterSettings:
        return self._settings

    @abstractmethod
    def parse(self, data: bytes) -> Document:
        """Return the parsed Document or raise ProviderError / DocumentIoError."""
