"""ODT package loader: content, styles and mimetype parts of an OpenDocument text file."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Mapping, Optional
from xml.etree import ElementTree as ET

from office_renderer.config import ConverterSettings
from office_renderer.errors import ProviderError
from office_renderer.parser.docx_loader import read_zip_parts
from office_renderer.utils.logger import get_logger
from office_renderer.utils.xml_utils import parse_xml

LOGGER = get_logger(__name__)

CONTENT_XML_PATH = "content.xml"
STYLES_XML_PATH = "styles.xml"
MIMETYPE_PATH = "mimetype"
ODT_MIMETYPE = "application/vnd.oasis.opendocument.text"


@dataclass(slots=True)
class OdtPackage:
    """Container for the XML parts extracted from an ODT archive."""

    raw_parts: Mapping[str, bytes]
    xml_cache: Dict[str, ET.ElementTree] = field(default_factory=dict)

    @classmethod
    def from_bytes(cls, data: bytes, settings: Optional[ConverterSettings] = None) -> "OdtPackage":
        """Open an ODT archive held in memory."""
        package = cls(raw_parts=read_zip_parts(data, settings or ConverterSettings(), "ODT"))
        package._check_mimetype()
        return package

    @property
    def mimetype(self) -> Optional[str]:
        raw = self.raw_parts.get(MIMETYPE_PATH)
        if raw is None:
            return None
        return raw.decode("ascii", errors="replace").strip()

    def require_content_xml(self) -> ET.ElementTree:
        tree = self.get_xml_part(CONTENT_XML_PATH)
        if tree is None:
            raise ProviderError(f"Content part missing from package: {CONTENT_XML_PATH}", code="missing_part")
        return tree

    def get_styles_xml(self) -> Optional[ET.ElementTree]:
        return self.get_xml_part(STYLES_XML_PATH)

    def get_xml_part(self, name: str) -> Optional[ET.ElementTree]:
        if name in self.xml_cache:
            return self.xml_cache[name]
        data = self.raw_parts.get(name)
        if data is None:
            return None
        tree = parse_xml(data, name)
        self.xml_cache[name] = tree
        return tree

    def _check_mimetype(self) -> None:
        mimetype = self.mimetype
        if mimetype is not None and mimetype != ODT_MIMETYPE:
            LOGGER.warning("Unexpected ODT mimetype %r; parsing content anyway", mimetype)
