"""Parse ODF content.xml into Document Model blocks."""
from __future__ import annotations

import re
from typing import Iterator, List, Optional, Tuple
from xml.etree import ElementTree as ET

from office_renderer.config import ConverterSettings
from office_renderer.errors import ProviderError
from office_renderer.model.elements import (
    Block,
    Document,
    DocumentBuilder,
    Heading,
    ListItem,
    ListKind,
    Paragraph,
    Run,
    Table,
    TableCell,
    TableRow,
    clamp_heading_level,
    merge_runs,
)
from office_renderer.model.style_model import FormattingOverrides, OdtStylesCatalog, resolve_formatting
from office_renderer.utils.logger import get_logger
from office_renderer.utils.xml_utils import Namespaces, local_name, qualify, to_int

LOGGER = get_logger(__name__)

_WHITESPACE = re.compile(r"[ \t\r\n]+")

_TRANSPARENT_BLOCKS = frozenset({"section", "index-body", "table-of-content", "alphabetical-index", "illustration-index",
                                 "bibliography", "user-index", "object-index", "table-index"})
_IGNORED_BLOCKS = frozenset({"sequence-decls", "variable-decls", "user-field-decls", "tracked-changes", "forms",
                             "soft-page-break", "index-title-template", "table-of-content-source", "bookmark",
                             "bookmark-start", "bookmark-end", "frame"})
_IGNORED_INLINE = frozenset({"note", "annotation", "annotation-end", "bookmark", "bookmark-start", "bookmark-end",
                             "reference-mark", "reference-mark-start", "reference-mark-end", "soft-page-break",
                             "frame", "custom-shape", "change", "change-start", "change-end", "toc-mark",
                             "alphabetical-index-mark", "ruby-text"})
_ROW_GROUPS = frozenset({"table-header-rows", "table-rows", "table-row-group"})


def _attr(element: ET.Element, name: str) -> Optional[str]:
    return element.attrib.get(qualify(name, Namespaces.ODF))


class OdtParser:
    """Transforms ODF text body markup into model elements."""

    def __init__(
        self,
        content_xml: ET.ElementTree,
        styles: OdtStylesCatalog,
        settings: Optional[ConverterSettings] = None,
    ) -> None:
        self._content_xml = content_xml
        self._styles = styles
        self._settings = settings or ConverterSettings()

    def parse(self) -> Document:
        root = self._content_xml.getroot()
        body = root.find("office:body/office:text", Namespaces.ODF)
        builder = DocumentBuilder()
        if body is None:
            LOGGER.warning("content.xml has no office:text body")
            return builder.build()
        builder.extend(self._parse_blocks(body))
        return builder.build()

    def _parse_blocks(self, container: ET.Element, depth: int = 0) -> Iterator[Block]:
        self._check_depth(depth)
        for child in container:
            tag = local_name(child.tag)
            if tag == "p":
                yield self._parse_paragraph(child)
            elif tag == "h":
                yield self._parse_heading(child)
            elif tag == "list":
                yield from self._parse_list(child, 0, None, depth)
            elif tag == "table":
                yield self._parse_table(child, depth)
            elif tag in _TRANSPARENT_BLOCKS:
                yield from self._parse_blocks(child, depth + 1)
            elif tag in _IGNORED_BLOCKS:
                continue
            else:
                LOGGER.debug("Skipping unsupported element: %s", tag)

    def _check_depth(self, depth: int) -> None:
        if depth > self._settings.max_nesting_depth:
            raise ProviderError(
                f"Element nesting exceeds {self._settings.max_nesting_depth} levels", code="nesting_too_deep"
            )

    # ------------------------------------------------------------------
    # Paragraph-like blocks
    def _parse_paragraph(self, paragraph_el: ET.Element) -> Block:
        style_name = _attr(paragraph_el, "text:style-name")
        runs = self._paragraph_runs(paragraph_el, style_name)
        outline_level = self._styles.outline_level(style_name)
        if outline_level is not None and outline_level > 0:
            return Heading(level=clamp_heading_level(outline_level), runs=runs)
        return Paragraph(runs=runs)

    def _parse_heading(self, heading_el: ET.Element) -> Heading:
        style_name = _attr(heading_el, "text:style-name")
        level = to_int(_attr(heading_el, "text:outline-level"))
        if level is None:
            level = self._styles.outline_level(style_name) or 1
        return Heading(level=clamp_heading_level(level), runs=self._paragraph_runs(heading_el, style_name))

    def _parse_list(
        self, list_el: ET.Element, depth: int, inherited_style: Optional[str], nesting: int
    ) -> Iterator[Block]:
        self._check_depth(nesting + depth)
        list_style = _attr(list_el, "text:style-name") or inherited_style
        for item_el in list_el:
            if local_name(item_el.tag) not in ("list-item", "list-header"):
                continue
            for child in item_el:
                tag = local_name(child.tag)
                if tag == "p":
                    style_name = _attr(child, "text:style-name")
                    kind = self._list_kind(list_style, style_name, depth)
                    yield ListItem(runs=self._paragraph_runs(child, style_name), kind=kind, depth=depth)
                elif tag == "h":
                    yield self._parse_heading(child)
                elif tag == "list":
                    yield from self._parse_list(child, depth + 1, list_style, nesting)
                elif tag == "table":
                    yield self._parse_table(child, nesting + depth + 1)
                elif tag not in _IGNORED_BLOCKS:
                    LOGGER.debug("Skipping list item child element: %s", tag)

    def _list_kind(self, list_style: Optional[str], paragraph_style: Optional[str], depth: int) -> ListKind:
        for name in (list_style, self._styles.list_style_for(paragraph_style)):
            definition = self._styles.list_style(name)
            if definition is None:
                continue
            numbered = definition.is_numbered(depth + 1)
            if numbered is not None:
                return ListKind.NUMBERED if numbered else ListKind.BULLET
        return ListKind.BULLET

    # ------------------------------------------------------------------
    # Inline content
    def _paragraph_runs(self, paragraph_el: ET.Element, style_name: Optional[str]) -> Tuple[Run, ...]:
        paragraph_tiers = (
            self._styles.formatting_of("paragraph", style_name),
            self._styles.default_formatting("text"),
            self._styles.default_formatting("paragraph"),
        )
        return merge_runs(self._parse_inline(paragraph_el, (), paragraph_tiers, None, 0))

    def _parse_inline(
        self,
        element: ET.Element,
        span_tiers: Tuple[FormattingOverrides, ...],
        paragraph_tiers: Tuple[FormattingOverrides, ...],
        hyperlink: Optional[str],
        depth: int,
    ) -> Iterator[Run]:
        self._check_depth(depth)
        formatting = resolve_formatting(span_tiers + paragraph_tiers)
        if element.text:
            yield Run(text=_WHITESPACE.sub(" ", element.text), formatting=formatting, hyperlink=hyperlink)
        for child in element:
            tag = local_name(child.tag)
            if tag == "span":
                span_style = self._styles.formatting_of("text", _attr(child, "text:style-name"))
                yield from self._parse_inline(child, (span_style,) + span_tiers, paragraph_tiers, hyperlink, depth + 1)
            elif tag == "a":
                target = _attr(child, "xlink:href") or hyperlink
                link_style = self._styles.formatting_of("text", _attr(child, "text:style-name"))
                yield from self._parse_inline(child, (link_style,) + span_tiers, paragraph_tiers, target, depth + 1)
            elif tag == "s":
                spaces = self._repeat(child, "text:c")
                yield Run(text=" " * spaces, formatting=formatting, hyperlink=hyperlink)
            elif tag == "tab":
                yield Run(text="\t", formatting=formatting, hyperlink=hyperlink)
            elif tag == "line-break":
                yield Run(text="\n", formatting=formatting, hyperlink=hyperlink)
            elif tag in _IGNORED_INLINE:
                pass
            else:
                # Fields (dates, page numbers, cross references) carry their displayed value as text.
                yield from self._parse_inline(child, span_tiers, paragraph_tiers, hyperlink, depth + 1)
            if child.tail:
                yield Run(text=_WHITESPACE.sub(" ", child.tail), formatting=formatting, hyperlink=hyperlink)

    # ------------------------------------------------------------------
    # Tables
    def _parse_table(self, table_el: ET.Element, depth: int) -> Table:
        return Table(rows=tuple(self._parse_rows(table_el, depth + 1)))

    def _parse_rows(self, container: ET.Element, depth: int) -> Iterator[TableRow]:
        self._check_depth(depth)
        for child in container:
            tag = local_name(child.tag)
            if tag == "table-row":
                row = TableRow(cells=tuple(self._parse_cells(child, depth)))
                for _ in range(self._repeat(child, "table:number-rows-repeated")):
                    yield row
            elif tag in _ROW_GROUPS:
                yield from self._parse_rows(child, depth + 1)

    def _parse_cells(self, row_el: ET.Element, depth: int) -> List[TableCell]:
        cells: List[TableCell] = []
        for cell_el in row_el:
            tag = local_name(cell_el.tag)
            if tag == "table-cell":
                cell = TableCell(blocks=tuple(self._parse_blocks(cell_el, depth + 1)))
            elif tag == "covered-table-cell":
                cell = TableCell()
            else:
                continue
            cells.extend([cell] * self._repeat(cell_el, "table:number-columns-repeated"))
        return cells

    def _repeat(self, element: ET.Element, attr_name: str) -> int:
        count = to_int(_attr(element, attr_name))
        if count is None:
            return 1
        if count > self._settings.max_repeat:
            LOGGER.debug("Capping %s=%d at %d", attr_name, count, self._settings.max_repeat)
            return self._settings.max_repeat
        return max(count, 1)
