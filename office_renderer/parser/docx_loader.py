"""DOCX package loader responsible for unpacking XML parts."""
from __future__ import annotations

import io
import zipfile
import zlib
from dataclasses import dataclass, field
from typing import Dict, Mapping, Optional
from xml.etree import ElementTree as ET

from office_renderer.config import ConverterSettings
from office_renderer.errors import DocumentIoError, ProviderError
from office_renderer.parser.rels_parser import Relationships
from office_renderer.utils.logger import get_logger
from office_renderer.utils.xml_utils import parse_xml

LOGGER = get_logger(__name__)

DOCUMENT_XML_PATH = "word/document.xml"
STYLES_XML_PATH = "word/styles.xml"
NUMBERING_XML_PATH = "word/numbering.xml"


def read_zip_parts(data: bytes, settings: ConverterSettings, label: str) -> Dict[str, bytes]:
    """Read every member of a zip container into memory, enforcing the part size ceiling."""
    try:
        with zipfile.ZipFile(io.BytesIO(data)) as archive:
            parts: Dict[str, bytes] = {}
            for info in archive.infolist():
                if info.is_dir():
                    continue
                if info.file_size > settings.max_part_bytes:
                    raise ProviderError(
                        f"{label} part {info.filename} exceeds {settings.max_part_bytes} bytes",
                        code="part_too_large",
                    )
                parts[info.filename] = archive.read(info)
    except zipfile.BadZipFile as exc:
        raise DocumentIoError(f"{label} buffer is not a valid zip archive: {exc}", code="invalid_archive") from exc
    except (zipfile.LargeZipFile, zlib.error, NotImplementedError, RuntimeError, OSError, EOFError) as exc:
        raise DocumentIoError(f"Unable to read {label} archive: {exc}", code="invalid_archive") from exc
    LOGGER.debug("Loaded %d parts from %s archive", len(parts), label)
    return parts


@dataclass(slots=True)
class DocxPackage:
    """Container for the XML parts extracted from a DOCX archive."""

    raw_parts: Mapping[str, bytes]
    xml_cache: Dict[str, ET.ElementTree] = field(default_factory=dict)
    relationships: Relationships = field(init=False)
    main_part: str = DOCUMENT_XML_PATH

    def __post_init__(self) -> None:
        self.relationships = Relationships.from_package(self.raw_parts)
        self.main_part = self.relationships.main_document_part() or DOCUMENT_XML_PATH
        if self.main_part not in self.raw_parts and DOCUMENT_XML_PATH in self.raw_parts:
            LOGGER.warning("officeDocument relationship points at missing %s; using %s", self.main_part, DOCUMENT_XML_PATH)
            self.main_part = DOCUMENT_XML_PATH

    @classmethod
    def from_bytes(cls, data: bytes, settings: Optional[ConverterSettings] = None) -> "DocxPackage":
        """Open a DOCX archive held in memory."""
        parts = read_zip_parts(data, settings or ConverterSettings(), "DOCX")
        return cls(raw_parts=parts)

    # ------------------------------------------------------------------
    # Public helpers
    def require_document_xml(self) -> ET.ElementTree:
        tree = self.get_xml_part(self.main_part)
        if tree is None:
            raise ProviderError(f"Primary document part missing from package: {self.main_part}", code="missing_part")
        return tree

    def get_styles_xml(self) -> Optional[ET.ElementTree]:
        return self.get_xml_part(self._sibling_part(STYLES_XML_PATH))

    def get_numbering_xml(self) -> Optional[ET.ElementTree]:
        return self.get_xml_part(self._sibling_part(NUMBERING_XML_PATH))

    def get_xml_part(self, name: str) -> Optional[ET.ElementTree]:
        if name in self.xml_cache:
            return self.xml_cache[name]
        data = self.raw_parts.get(name)
        if data is None:
            return None
        tree = parse_xml(data, name)
        self.xml_cache[name] = tree
        return tree

    def _sibling_part(self, default_path: str) -> str:
        """Place well-known parts next to the main part when it is not under ``word/``."""
        folder = self.main_part.rpartition("/")[0]
        candidate = f"{folder}/{default_path.rpartition('/')[2]}" if folder else default_path.rpartition("/")[2]
        if candidate in self.raw_parts:
            return candidate
        return default_path
