"""Extract ODF paragraph/text styles and list styles into a catalog."""
from __future__ import annotations

from typing import Dict, Iterable, Optional, Tuple
from xml.etree import ElementTree as ET

from office_renderer.model.style_model import (
    NO_OVERRIDES,
    FormattingOverrides,
    OdtListStyle,
    OdtStyle,
    OdtStylesCatalog,
)
from office_renderer.utils.xml_utils import Namespaces, local_name, qualify, to_int

_STYLE_CONTAINERS = ("office:styles", "office:automatic-styles")
_FAMILIES = frozenset({"paragraph", "text"})


def _attr(element: ET.Element, name: str) -> Optional[str]:
    return element.attrib.get(qualify(name, Namespaces.ODF))


def _font_weight(value: Optional[str]) -> Optional[bool]:
    if value is None:
        return None
    value = value.strip().lower()
    if value in {"bold", "bolder"}:
        return True
    weight = to_int(value)
    return weight is not None and weight >= 600


def _font_style(value: Optional[str]) -> Optional[bool]:
    if value is None:
        return None
    return value.strip().lower() in {"italic", "oblique"}


def _line_style(value: Optional[str]) -> Optional[bool]:
    if value is None:
        return None
    return value.strip().lower() != "none"


def read_text_properties(style_el: ET.Element) -> FormattingOverrides:
    """Convert a style's ``style:text-properties`` into formatting overrides."""
    props = style_el.find("style:text-properties", Namespaces.ODF)
    if props is None:
        return NO_OVERRIDES
    return FormattingOverrides(
        bold=_font_weight(_attr(props, "fo:font-weight")),
        italic=_font_style(_attr(props, "fo:font-style")),
        underline=_line_style(_attr(props, "style:text-underline-style")),
        strikethrough=_line_style(_attr(props, "style:text-line-through-style")),
    )


class OdtStylesParser:
    """Parse styles.xml and content.xml automatic styles; content wins on name clashes."""

    def __init__(self, content_xml: ET.ElementTree, styles_xml: Optional[ET.ElementTree] = None) -> None:
        self._content_xml = content_xml
        self._styles_xml = styles_xml

    def parse(self) -> OdtStylesCatalog:
        styles: Dict[Tuple[str, str], OdtStyle] = {}
        defaults: Dict[str, FormattingOverrides] = {}
        list_styles: Dict[str, OdtListStyle] = {}
        for root in self._roots():
            for element in self._style_elements(root):
                tag = local_name(element.tag)
                if tag == "style":
                    style = self._parse_style(element)
                    if style is not None:
                        styles[(style.family, style.name)] = style
                elif tag == "default-style":
                    family = _attr(element, "style:family")
                    if family in _FAMILIES:
                        defaults[family] = read_text_properties(element)
                elif tag == "list-style":
                    list_style = self._parse_list_style(element)
                    if list_style is not None:
                        list_styles[list_style.name] = list_style
        return OdtStylesCatalog(styles, defaults=defaults, list_styles=list_styles)

    def _roots(self) -> Iterable[ET.Element]:
        if self._styles_xml is not None:
            yield self._styles_xml.getroot()
        yield self._content_xml.getroot()

    def _style_elements(self, root: ET.Element) -> Iterable[ET.Element]:
        for container_name in _STYLE_CONTAINERS:
            container = root.find(container_name, Namespaces.ODF)
            if container is not None:
                yield from container

    def _parse_style(self, style_el: ET.Element) -> Optional[OdtStyle]:
        name = _attr(style_el, "style:name")
        family = _attr(style_el, "style:family")
        if not name or family not in _FAMILIES:
            return None
        return OdtStyle(
            name=name,
            family=family,
            formatting=read_text_properties(style_el),
            parent=_attr(style_el, "style:parent-style-name"),
            outline_level=to_int(_attr(style_el, "style:default-outline-level")),
            list_style=_attr(style_el, "style:list-style-name"),
        )

    def _parse_list_style(self, list_el: ET.Element) -> Optional[OdtListStyle]:
        name = _attr(list_el, "style:name")
        if not name:
            return None
        levels: Dict[int, bool] = {}
        for level_el in list_el:
            level = to_int(_attr(level_el, "text:level"))
            if level is None:
                continue
            levels[level] = local_name(level_el.tag) == "list-level-style-number"
        return OdtListStyle(name=name, numbered_levels=levels)
