"""Parse numbering.xml into numbering model definitions."""
from __future__ import annotations

from typing import Dict, Optional
from xml.etree import ElementTree as ET

from office_renderer.model.numbering_model import (
    AbstractNumberingDefinition,
    NumberingCatalog,
    NumberingInstance,
    NumberingLevel,
    NumberingOverride,
)
from office_renderer.utils.xml_utils import Namespaces, qualify


class NumberingParser:
    """Parser for numbering definitions defined in numbering.xml."""

    def __init__(self, numbering_xml: Optional[ET.ElementTree]) -> None:
        self._numbering_xml = numbering_xml

    def parse(self) -> NumberingCatalog:
        if self._numbering_xml is None:
            return NumberingCatalog()

        root = self._numbering_xml.getroot()
        abstracts = self._parse_abstract_nums(root)
        instances = self._parse_nums(root)
        return NumberingCatalog(abstracts=abstracts, instances=instances)

    # ------------------------------------------------------------------
    def _parse_abstract_nums(self, root: ET.Element) -> Dict[int, AbstractNumberingDefinition]:
        abstracts: Dict[int, AbstractNumberingDefinition] = {}
        for abstract_el in root.findall("w:abstractNum", Namespaces.WORD):
            abstract_id = self._get_int_attr(abstract_el, None, "w:abstractNumId")
            if abstract_id is None:
                continue
            abstracts[abstract_id] = AbstractNumberingDefinition(
                abstract_num_id=abstract_id,
                levels=self._parse_levels(abstract_el),
            )
        return abstracts

    def _parse_levels(self, container: ET.Element) -> Dict[int, NumberingLevel]:
        levels: Dict[int, NumberingLevel] = {}
        for lvl_el in container.findall("w:lvl", Namespaces.WORD):
            level = self._parse_level(lvl_el)
            if level is not None:
                levels[level.level_index] = level
        return levels

    def _parse_level(self, lvl_el: ET.Element) -> Optional[NumberingLevel]:
        level_index = self._get_int_attr(lvl_el, None, "w:ilvl")
        if level_index is None:
            return None
        return NumberingLevel(
            level_index=level_index,
            num_format=self._get_attr(lvl_el, "w:numFmt", "w:val"),
        )

    def _parse_nums(self, root: ET.Element) -> Dict[int, NumberingInstance]:
        instances: Dict[int, NumberingInstance] = {}
        for num_el in root.findall("w:num", Namespaces.WORD):
            num_id = self._get_int_attr(num_el, None, "w:numId")
            if num_id is None:
                continue
            abstract_num_id = self._get_int_attr(num_el, "w:abstractNumId", "w:val")
            if abstract_num_id is None:
                continue
            instances[num_id] = NumberingInstance(
                num_id=num_id,
                abstract_num_id=abstract_num_id,
                overrides=self._parse_overrides(num_el),
            )
        return instances

    def _parse_overrides(self, num_el: ET.Element) -> Dict[int, NumberingOverride]:
        overrides: Dict[int, NumberingOverride] = {}
        for override_el in num_el.findall("w:lvlOverride", Namespaces.WORD):
            level_index = self._get_int_attr(override_el, None, "w:ilvl")
            if level_index is None:
                continue
            lvl_el = override_el.find("w:lvl", Namespaces.WORD)
            overrides[level_index] = NumberingOverride(
                level_index=level_index,
                level=self._parse_level(lvl_el) if lvl_el is not None else None,
            )
        return overrides

    # ------------------------------------------------------------------
    def _get_attr(self, element: ET.Element, child_name: Optional[str], attr_name: str) -> Optional[str]:
        target = element.find(child_name, Namespaces.WORD) if child_name else element
        if target is None:
            return None
        return target.attrib.get(qualify(attr_name, Namespaces.WORD))

    def _get_int_attr(self, element: ET.Element, child_name: Optional[str], attr_name: str) -> Optional[int]:
        value = self._get_attr(element, child_name, attr_name)
        if value is None:
            return None
        try:
            return int(value)
        except ValueError:
            return None
