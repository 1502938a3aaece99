"""Extract style definitions from styles.xml and produce a catalog."""
from __future__ import annotations

import re
from typing import Dict, Optional
from xml.etree import ElementTree as ET

from office_renderer.model.style_model import (
    NO_OVERRIDES,
    FormattingOverrides,
    NumberingReference,
    StyleDefinition,
    StylesCatalog,
)
from office_renderer.utils.logger import get_logger
from office_renderer.utils.xml_utils import Namespaces, qualify

LOGGER = get_logger(__name__)

_FALSE_VALUES = frozenset({"0", "false", "off"})
_HEADING_NAME = re.compile(r"^heading\s*(\d+)$", re.IGNORECASE)
_TITLE_NAMES = frozenset({"title"})


def read_toggle(element: Optional[ET.Element], *, off_values: frozenset = _FALSE_VALUES) -> Optional[bool]:
    """Read an OOXML on/off property element; absent elements are unset."""
    if element is None:
        return None
    value = element.attrib.get(qualify("w:val", Namespaces.WORD))
    if value is None:
        return True
    return value.strip().lower() not in off_values


def read_run_formatting(rpr: Optional[ET.Element]) -> FormattingOverrides:
    """Convert a ``w:rPr`` block into formatting overrides."""
    if rpr is None:
        return NO_OVERRIDES
    strike = read_toggle(rpr.find("w:strike", Namespaces.WORD))
    double_strike = read_toggle(rpr.find("w:dstrike", Namespaces.WORD))
    if strike is None:
        strike = double_strike
    elif double_strike:
        strike = True
    return FormattingOverrides(
        bold=read_toggle(rpr.find("w:b", Namespaces.WORD)),
        italic=read_toggle(rpr.find("w:i", Namespaces.WORD)),
        underline=read_toggle(rpr.find("w:u", Namespaces.WORD), off_values=_FALSE_VALUES | {"none"}),
        strikethrough=strike,
    )


def read_outline_level(ppr: Optional[ET.Element]) -> Optional[int]:
    """Return the zero-based ``w:outlineLvl``; level 9 means body text."""
    if ppr is None:
        return None
    value = _int_val(ppr.find("w:outlineLvl", Namespaces.WORD))
    if value is None or value >= 9 or value < 0:
        return None
    return value


def read_numbering(ppr: Optional[ET.Element]) -> Optional[NumberingReference]:
    """Return the ``w:numPr`` reference of a paragraph property block."""
    if ppr is None:
        return None
    num_pr = ppr.find("w:numPr", Namespaces.WORD)
    if num_pr is None:
        return None
    num_id = _int_val(num_pr.find("w:numId", Namespaces.WORD))
    if num_id is None:
        return None
    level = _int_val(num_pr.find("w:ilvl", Namespaces.WORD)) or 0
    return NumberingReference(num_id=num_id, level=max(level, 0))


def read_bottom_border(ppr: Optional[ET.Element]) -> bool:
    if ppr is None:
        return False
    bottom = ppr.find("w:pBdr/w:bottom", Namespaces.WORD)
    if bottom is None:
        return False
    return bottom.attrib.get(qualify("w:val", Namespaces.WORD), "single") not in {"nil", "none"}


def heading_level_from_name(*names: Optional[str]) -> Optional[int]:
    """Return a one-based heading level for ``Heading N`` / ``Title`` style names."""
    for name in names:
        if not name:
            continue
        candidate = name.strip()
        match = _HEADING_NAME.match(candidate)
        if match:
            return int(match.group(1))
        if candidate.lower() in _TITLE_NAMES:
            return 1
    return None


def _int_val(element: Optional[ET.Element]) -> Optional[int]:
    if element is None:
        return None
    value = element.attrib.get(qualify("w:val", Namespaces.WORD))
    if value is None:
        return None
    try:
        return int(value)
    except ValueError:
        return None


class StylesParser:
    """Parse Word styles and resolve inheritance."""

    def __init__(self, styles_xml: Optional[ET.ElementTree]) -> None:
        self._styles_xml = styles_xml

    def parse(self) -> StylesCatalog:
        """Parse the XML tree and return a resolved catalog."""
        if self._styles_xml is None:
            return StylesCatalog({})
        raw_styles = self._collect_styles()
        resolved = self._resolve_inheritance(raw_styles)
        return StylesCatalog(resolved, defaults=self._collect_defaults())

    def _collect_defaults(self) -> FormattingOverrides:
        root = self._styles_xml.getroot()
        rpr = root.find("w:docDefaults/w:rPrDefault/w:rPr", Namespaces.WORD)
        return read_run_formatting(rpr)

    def _collect_styles(self) -> Dict[str, StyleDefinition]:
        styles: Dict[str, StyleDefinition] = {}
        root = self._styles_xml.getroot()
        for style_el in root.findall("w:style", Namespaces.WORD):
            style_id = style_el.attrib.get(qualify("w:styleId", Namespaces.WORD))
            if not style_id:
                continue
            ppr = style_el.find("w:pPr", Namespaces.WORD)
            name = self._get_attr(style_el, "w:name", "w:val")
            outline_level = read_outline_level(ppr)
            if outline_level is None:
                named_level = heading_level_from_name(name, style_id)
                if named_level is not None:
                    outline_level = named_level - 1
            styles[style_id] = StyleDefinition(
                style_id=style_id,
                style_type=style_el.attrib.get(qualify("w:type", Namespaces.WORD), "paragraph"),
                name=name,
                formatting=read_run_formatting(style_el.find("w:rPr", Namespaces.WORD)),
                based_on=self._get_attr(style_el, "w:basedOn", "w:val"),
                outline_level=outline_level,
                numbering=read_numbering(ppr),
                is_default=style_el.attrib.get(qualify("w:default", Namespaces.WORD)) == "1",
                has_bottom_border=read_bottom_border(ppr),
            )
        return styles

    def _get_attr(self, element: ET.Element, child_name: str, attr_name: str) -> Optional[str]:
        child = element.find(child_name, Namespaces.WORD)
        if child is None:
            return None
        return child.attrib.get(qualify(attr_name, Namespaces.WORD))

    def _resolve_inheritance(self, raw_styles: Dict[str, StyleDefinition]) -> Dict[str, StyleDefinition]:
        resolved: Dict[str, StyleDefinition] = {}

        def resolve(style_id: str, stack: Optional[list[str]] = None) -> StyleDefinition:
            if style_id in resolved:
                return resolved[style_id]
            if stack is None:
                stack = []
            if style_id in stack:
                LOGGER.debug("Style inheritance cycle through %s", style_id)
                return raw_styles[style_id]
            stack.append(style_id)
            style = raw_styles[style_id]
            parent_style = None
            if style.based_on and style.based_on in raw_styles:
                parent_style = resolve(style.based_on, stack)
            resolved_style = StyleDefinition(
                style_id=style.style_id,
                style_type=style.style_type,
                name=style.name,
                formatting=style.formatting.layered_over(parent_style.formatting) if parent_style else style.formatting,
                based_on=style.based_on,
                outline_level=style.outline_level if style.outline_level is not None else (parent_style.outline_level if parent_style else None),
                numbering=style.numbering or (parent_style.numbering if parent_style else None),
                is_default=style.is_default,
                has_bottom_border=style.has_bottom_border,
            )
            resolved[style_id] = resolved_style
            stack.pop()
            return resolved_style

        for style_id in raw_styles:
            resolve(style_id)
        return resolved
