"""Helper functions to work with XML namespaces and parsing."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Optional
from xml.etree import ElementTree as ET

from office_renderer.errors import DocumentIoError


@dataclass(frozen=True)
class Namespaces:
    """Namespace prefixes used across the DOCX and ODT parsers."""

    WORD: Dict[str, str] = None  # type: ignore[assignment]
    RELS: Dict[str, str] = None  # type: ignore[assignment]
    VML: Dict[str, str] = None  # type: ignore[assignment]
    ODF: Dict[str, str] = None  # type: ignore[assignment]

    def __post_init__(self) -> None:  # pragma: no cover
        raise RuntimeError("Namespaces should not be instantiated")


Namespaces.WORD = {  # type: ignore[attr-defined]
    "w": "http://schemas.openxmlformats.org/wordprocessingml/2006/main",
    "r": "http://schemas.openxmlformats.org/officeDocument/2006/relationships",
}
Namespaces.RELS = {  # type: ignore[attr-defined]
    "rel": "http://schemas.openxmlformats.org/package/2006/relationships",
}
Namespaces.VML = {  # type: ignore[attr-defined]
    "v": "urn:schemas-microsoft-com:vml",
    "o": "urn:schemas-microsoft-com:office:office",
}
Namespaces.ODF = {  # type: ignore[attr-defined]
    "office": "urn:oasis:names:tc:opendocument:xmlns:office:1.0",
    "style": "urn:oasis:names:tc:opendocument:xmlns:style:1.0",
    "text": "urn:oasis:names:tc:opendocument:xmlns:text:1.0",
    "table": "urn:oasis:names:tc:opendocument:xmlns:table:1.0",
    "fo": "urn:oasis:names:tc:opendocument:xmlns:xsl-fo-compatible:1.0",
    "xlink": "http://www.w3.org/1999/xlink",
}


def qualify(attr_name: str, namespaces: Dict[str, str]) -> str:
    """Expand a ``prefix:local`` name into ElementTree's ``{uri}local`` form."""
    prefix, local = attr_name.split(":", 1)
    return f"{{{namespaces[prefix]}}}{local}"


def local_name(tag: str) -> str:
    """Strip the namespace from an ElementTree tag."""
    return tag.split("}", 1)[-1]


def parse_xml(data: bytes, part_name: str = "<xml>") -> ET.ElementTree:
    """Parse XML from raw bytes, reporting malformed markup as an I/O failure."""
    try:
        return ET.ElementTree(ET.fromstring(data))
    except ET.ParseError as exc:
        raise DocumentIoError(f"Unable to parse {part_name}: {exc}", code="invalid_xml") from exc


def to_int(value: Optional[str]) -> Optional[int]:
    """Parse an integer attribute value; anything ``int()`` rejects gives None."""
    if value is None:
        return None
    try:
        return int(value.strip())
    except ValueError:
        return None
