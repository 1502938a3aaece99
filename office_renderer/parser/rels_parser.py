"""Utilities for reading Open Packaging Convention relationship parts."""
from __future__ import annotations

import posixpath
from dataclasses import dataclass
from pathlib import PurePosixPath
from typing import Dict, Mapping, Optional, Tuple
from xml.etree import ElementTree as ET

from office_renderer.utils.xml_utils import Namespaces, parse_xml

OFFICE_REL_NS = "http://schemas.openxmlformats.org/officeDocument/2006/relationships"
STRICT_OFFICE_REL_NS = "http://purl.oclc.org/ooxml/officeDocument/relationships"

RELTYPE_OFFICE_DOCUMENT = f"{OFFICE_REL_NS}/officeDocument"

_OFFICE_DOCUMENT_TYPES = frozenset({RELTYPE_OFFICE_DOCUMENT, f"{STRICT_OFFICE_REL_NS}/officeDocument"})

PACKAGE_REL_PATH = "_rels/.rels"


@dataclass(frozen=True)
class Relationship:
    """Represents a single OPC relationship."""

    source_part: str
    r_id: str
    target: str
    rel_type: str
    is_external: bool = False
    resolved_target: Optional[str] = None

    @property
    def link_target(self) -> str:
        """Target suitable for a hyperlink: external URIs verbatim, package parts resolved."""
        if self.is_external:
            return self.target
        return self.resolved_target or self.target


class Relationships:
    """Aggregated relationship mappings for an OPC package."""

    def __init__(self, relationships: Dict[str, Dict[str, Relationship]]) -> None:
        self._by_source = relationships

    @classmethod
    def from_package(cls, parts: Mapping[str, bytes]) -> "Relationships":
        """Collect relationships from all .rels parts within the package."""
        by_source: Dict[str, Dict[str, Relationship]] = {}
        for name, payload in parts.items():
            if not name.endswith(".rels"):
                continue
            source, base_dir = cls._source_and_base_from_rel_part(name)
            tree = parse_xml(payload, name)
            parsed = cls._parse_relationship_part(source, base_dir, tree)
            if parsed:
                by_source[source] = parsed
        return cls(by_source)

    def find(self, part_name: str, r_id: str) -> Optional[Relationship]:
        """Return a relationship by part and id if present."""
        source = self._normalize_source(part_name)
        return self._by_source.get(source, {}).get(r_id)

    def main_document_part(self) -> Optional[str]:
        """Return the part named by the package-level officeDocument relationship."""
        for rel in self._by_source.get("", {}).values():
            if rel.rel_type in _OFFICE_DOCUMENT_TYPES and rel.resolved_target:
                return rel.resolved_target
        return None

    def hyperlink_target(self, part_name: str, r_id: Optional[str]) -> Optional[str]:
        """Resolve a hyperlink relationship id to its URI, or None when unknown."""
        if not r_id:
            return None
        rel = self.find(part_name, r_id)
        if rel is None:
            return None
        return rel.link_target

    @classmethod
    def _parse_relationship_part(
        cls, source_part: str, base_dir: PurePosixPath, tree: ET.ElementTree
    ) -> Dict[str, Relationship]:
        result: Dict[str, Relationship] = {}
        for rel_el in tree.getroot().iter(f"{{{Namespaces.RELS['rel']}}}Relationship"):
            r_id = rel_el.attrib.get("Id")
            if not r_id:
                continue
            target = rel_el.attrib.get("Target", "")
            is_external = rel_el.attrib.get("TargetMode") == "External"
            result[r_id] = Relationship(
                source_part=source_part,
                r_id=r_id,
                target=target,
                rel_type=rel_el.attrib.get("Type", ""),
                is_external=is_external,
                resolved_target=cls._resolve_target_path(base_dir, target, is_external),
            )
        return result

    @staticmethod
    def _source_and_base_from_rel_part(rel_part: str) -> Tuple[str, PurePosixPath]:
        if rel_part == PACKAGE_REL_PATH:
            return "", PurePosixPath("")
        if "/_rels/" in rel_part:
            folder, suffix = rel_part.split("/_rels/", 1)
            return f"{folder}/{suffix[:-5]}", PurePosixPath(folder)
        if rel_part.startswith("_rels/"):
            return rel_part[len("_rels/") : -5], PurePosixPath("")
        return rel_part[:-5], PurePosixPath(rel_part).parent

    @staticmethod
    def _resolve_target_path(base_dir: PurePosixPath, target: str, is_external: bool) -> Optional[str]:
        if not target:
            return None
        if is_external:
            return target
        if target.startswith("/"):
            return posixpath.normpath(target.lstrip("/"))
        return posixpath.normpath(base_dir.joinpath(target).as_posix())

    @classmethod
    def _normalize_source(cls, part_name: str) -> str:
        if part_name.endswith(".rels"):
            source, _ = cls._source_and_base_from_rel_part(part_name)
            return source
        return part_name
