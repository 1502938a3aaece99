"""Parse document.xml into Document Model blocks."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterator, List, Optional
from xml.etree import ElementTree as ET

from office_renderer.config import ConverterSettings
from office_renderer.errors import ProviderError
from office_renderer.model.elements import (
    Block,
    Document,
    DocumentBuilder,
    Heading,
    HorizontalRule,
    ListItem,
    Paragraph,
    Run,
    TableCell,
    TableRow,
    Table,
    clamp_heading_level,
    merge_runs,
)
from office_renderer.model.numbering_model import NumberingCatalog
from office_renderer.model.style_model import StyleDefinition, StylesCatalog
from office_renderer.parser.docx_loader import DocxPackage
from office_renderer.parser.fields import parse_hyperlink_instruction
from office_renderer.parser.styles_parser import (
    read_bottom_border,
    read_numbering,
    read_outline_level,
    read_run_formatting,
)
from office_renderer.utils.logger import get_logger
from office_renderer.utils.xml_utils import Namespaces, local_name, qualify, to_int

LOGGER = get_logger(__name__)

# Containers whose children belong to the enclosing paragraph/body as if unwrapped.
_TRANSPARENT_INLINE = frozenset({"ins", "smartTag", "customXml", "moveTo", "dir", "bdo"})
_IGNORED_INLINE = frozenset(
    {
        "pPr",
        "del",
        "moveFrom",
        "bookmarkStart",
        "bookmarkEnd",
        "proofErr",
        "permStart",
        "permEnd",
        "commentRangeStart",
        "commentRangeEnd",
        "moveFromRangeStart",
        "moveFromRangeEnd",
        "moveToRangeStart",
        "moveToRangeEnd",
    }
)
_IGNORED_BLOCK = frozenset({"sectPr", "tcPr", "bookmarkStart", "bookmarkEnd", "proofErr", "del", "moveFrom"})
_IGNORED_RUN_CHILDREN = frozenset(
    {"rPr", "softHyphen", "lastRenderedPageBreak", "drawing", "sym", "footnoteReference", "endnoteReference",
     "commentReference", "annotationRef", "delText", "delInstrText", "object"}
)


@dataclass(slots=True)
class _Field:
    instruction: str = ""
    separated: bool = False
    hyperlink: Optional[str] = None


@dataclass(slots=True)
class _FieldStack:
    """Tracks complex fields (``w:fldChar``) spanning several runs of a paragraph."""

    fields: List[_Field] = field(default_factory=list)

    @property
    def in_instruction(self) -> bool:
        return bool(self.fields) and not self.fields[-1].separated

    @property
    def hyperlink(self) -> Optional[str]:
        for active in reversed(self.fields):
            if active.hyperlink:
                return active.hyperlink
        return None

    def begin(self) -> None:
        self.fields.append(_Field())

    def separate(self) -> None:
        if self.fields:
            current = self.fields[-1]
            current.separated = True
            current.hyperlink = parse_hyperlink_instruction(current.instruction)

    def end(self) -> None:
        if self.fields:
            self.fields.pop()

    def add_instruction(self, text: str) -> None:
        if self.fields and not self.fields[-1].separated:
            self.fields[-1].instruction += text


class DocumentParser:
    """Transforms Word body XML into model elements."""

    def __init__(
        self,
        package: DocxPackage,
        styles: StylesCatalog,
        numbering: NumberingCatalog,
        settings: Optional[ConverterSettings] = None,
    ) -> None:
        self._package = package
        self._styles = styles
        self._numbering = numbering
        self._settings = settings or ConverterSettings()

    def parse(self) -> Document:
        """Parse the document body into high-level block elements."""
        root = self._package.require_document_xml().getroot()
        body = root.find("w:body", Namespaces.WORD)
        builder = DocumentBuilder()
        if body is None:
            LOGGER.warning("%s missing body element", self._package.main_part)
            return builder.build()
        builder.extend(self._parse_blocks(body))
        return builder.build()

    def _parse_blocks(self, container: ET.Element, depth: int = 0) -> Iterator[Block]:
        self._check_depth(depth)
        for child in container:
            tag = local_name(child.tag)
            if tag == "p":
                yield self._parse_paragraph(child)
            elif tag == "tbl":
                yield self._parse_table(child, depth + 1)
            elif tag == "sdt":
                content = child.find("w:sdtContent", Namespaces.WORD)
                if content is not None:
                    yield from self._parse_blocks(content, depth + 1)
            elif tag in _TRANSPARENT_INLINE:
                yield from self._parse_blocks(child, depth + 1)
            elif tag in _IGNORED_BLOCK:
                continue
            else:
                LOGGER.debug("Skipping unsupported element: %s", tag)

    def _check_depth(self, depth: int) -> None:
        if depth > self._settings.max_nesting_depth:
            raise ProviderError(
                f"Element nesting exceeds {self._settings.max_nesting_depth} levels", code="nesting_too_deep"
            )

    # ------------------------------------------------------------------
    # Paragraphs
    def _parse_paragraph(self, paragraph_el: ET.Element) -> Block:
        ppr = paragraph_el.find("w:pPr", Namespaces.WORD)
        style_id = self._get_style_id(ppr)
        style = self._styles.paragraph_style(style_id)
        runs = merge_runs(self._parse_inline(paragraph_el, style_id, None, _FieldStack(), 0))

        if self._is_horizontal_rule(paragraph_el, ppr, style_id, style, runs):
            return HorizontalRule()

        direct_numbering = read_numbering(ppr)
        if direct_numbering is not None and direct_numbering.num_id != 0:
            return self._list_item(runs, direct_numbering.num_id, direct_numbering.level)

        outline_level = read_outline_level(ppr)
        if outline_level is None and style is not None:
            outline_level = style.outline_level
        if outline_level is not None:
            return Heading(level=clamp_heading_level(outline_level + 1), runs=runs)

        if direct_numbering is None and style is not None and style.numbering is not None:
            if style.numbering.num_id != 0:
                return self._list_item(runs, style.numbering.num_id, style.numbering.level)
        return Paragraph(runs=runs)

    def _list_item(self, runs: tuple, num_id: int, level: int) -> ListItem:
        return ListItem(runs=runs, kind=self._numbering.list_kind(num_id, level), depth=level)

    def _is_horizontal_rule(
        self,
        paragraph_el: ET.Element,
        ppr: Optional[ET.Element],
        style_id: Optional[str],
        style: Optional[StyleDefinition],
        runs: tuple,
    ) -> bool:
        if any(run.text.strip() for run in runs):
            return False
        hr_attr = qualify("o:hr", Namespaces.VML)
        for rect in paragraph_el.iter(qualify("v:rect", Namespaces.VML)):
            if rect.attrib.get(hr_attr, "").lower() in {"t", "true"}:
                return True
        if read_bottom_border(ppr):
            return True
        return style_id is not None and style is not None and style.has_bottom_border

    def _parse_inline(
        self,
        container: ET.Element,
        paragraph_style_id: Optional[str],
        hyperlink: Optional[str],
        fields: _FieldStack,
        depth: int,
    ) -> Iterator[Run]:
        self._check_depth(depth)
        for child in container:
            tag = local_name(child.tag)
            if tag == "r":
                yield from self._parse_run(child, paragraph_style_id, hyperlink, fields)
            elif tag == "hyperlink":
                target = self._hyperlink_target(child)
                yield from self._parse_inline(child, paragraph_style_id, target or hyperlink, fields, depth + 1)
            elif tag == "fldSimple":
                instruction = child.attrib.get(qualify("w:instr", Namespaces.WORD), "")
                target = parse_hyperlink_instruction(instruction)
                yield from self._parse_inline(child, paragraph_style_id, target or hyperlink, fields, depth + 1)
            elif tag == "sdt":
                content = child.find("w:sdtContent", Namespaces.WORD)
                if content is not None:
                    yield from self._parse_inline(content, paragraph_style_id, hyperlink, fields, depth + 1)
            elif tag in _TRANSPARENT_INLINE:
                yield from self._parse_inline(child, paragraph_style_id, hyperlink, fields, depth + 1)
            elif tag in _IGNORED_INLINE:
                continue
            else:
                LOGGER.debug("Skipping paragraph child element: %s", tag)

    def _parse_run(
        self,
        run_el: ET.Element,
        paragraph_style_id: Optional[str],
        hyperlink: Optional[str],
        fields: _FieldStack,
    ) -> List[Run]:
        """Parse a run element, splitting it where complex fields begin or end."""
        rpr = run_el.find("w:rPr", Namespaces.WORD)
        formatting = self._styles.run_formatting(
            read_run_formatting(rpr),
            self._get_attr(rpr, "w:rStyle", "w:val"),
            paragraph_style_id,
        )
        runs: List[Run] = []
        current_text = ""

        def flush() -> None:
            nonlocal current_text
            if current_text:
                runs.append(Run(text=current_text, formatting=formatting, hyperlink=hyperlink or fields.hyperlink))
                current_text = ""

        for child in run_el:
            tag = local_name(child.tag)
            if tag == "fldChar":
                flush()
                field_type = child.attrib.get(qualify("w:fldCharType", Namespaces.WORD))
                if field_type == "begin":
                    fields.begin()
                elif field_type == "separate":
                    fields.separate()
                elif field_type == "end":
                    fields.end()
            elif tag == "instrText":
                fields.add_instruction(child.text or "")
            elif fields.in_instruction:
                continue
            elif tag == "t":
                current_text += child.text or ""
            elif tag in ("tab", "ptab"):
                current_text += "\t"
            elif tag == "br":
                if child.attrib.get(qualify("w:type", Namespaces.WORD), "textWrapping") == "textWrapping":
                    current_text += "\n"
            elif tag == "cr":
                current_text += "\n"
            elif tag == "noBreakHyphen":
                current_text += "-"
            elif tag == "pict":
                continue
            elif tag in _IGNORED_RUN_CHILDREN:
                continue
            else:
                LOGGER.debug("Skipping run child element: %s", tag)
        flush()
        return runs

    def _hyperlink_target(self, hyperlink_el: ET.Element) -> Optional[str]:
        r_id = hyperlink_el.attrib.get(qualify("r:id", Namespaces.WORD))
        anchor = hyperlink_el.attrib.get(qualify("w:anchor", Namespaces.WORD))
        target = self._package.relationships.hyperlink_target(self._package.main_part, r_id)
        if r_id and target is None:
            LOGGER.debug("Unresolved hyperlink relationship %s", r_id)
        if anchor:
            return f"{target or ''}#{anchor}"
        return target

    # ------------------------------------------------------------------
    # Tables
    def _parse_table(self, table_el: ET.Element, depth: int) -> Table:
        rows: List[TableRow] = []
        for row_el in self._iter_children(table_el, "tr", depth):
            cells: List[TableCell] = []
            cells.extend(TableCell() for _ in range(self._grid_count(row_el, "w:trPr/w:gridBefore", 0)))
            for cell_el in self._iter_children(row_el, "tc", depth):
                cells.append(TableCell(blocks=tuple(self._parse_blocks(cell_el, depth + 1))))
                span = self._grid_count(cell_el, "w:tcPr/w:gridSpan", 1)
                cells.extend(TableCell() for _ in range(span - 1))
            cells.extend(TableCell() for _ in range(self._grid_count(row_el, "w:trPr/w:gridAfter", 0)))
            rows.append(TableRow(cells=tuple(cells)))
        return Table(rows=tuple(rows))

    def _grid_count(self, element: ET.Element, child_name: str, default: int) -> int:
        count = self._get_int_attr(element, child_name, "w:val")
        if count is None or count < default:
            return default
        if count > self._settings.max_repeat:
            LOGGER.debug("Capping %s=%d at %d", child_name, count, self._settings.max_repeat)
            return self._settings.max_repeat
        return count

    def _iter_children(self, parent: ET.Element, wanted: str, depth: int) -> Iterator[ET.Element]:
        """Yield ``wanted`` children, looking through content controls and custom XML wrappers."""
        self._check_depth(depth)
        for child in parent:
            tag = local_name(child.tag)
            if tag == wanted:
                yield child
            elif tag == "sdt":
                content = child.find("w:sdtContent", Namespaces.WORD)
                if content is not None:
                    yield from self._iter_children(content, wanted, depth + 1)
            elif tag == "customXml":
                yield from self._iter_children(child, wanted, depth + 1)

    # ------------------------------------------------------------------
    # Attribute helpers
    def _get_style_id(self, ppr: Optional[ET.Element]) -> Optional[str]:
        return self._get_attr(ppr, "w:pStyle", "w:val")

    def _get_attr(self, element: Optional[ET.Element], child_name: Optional[str], attr_name: str) -> Optional[str]:
        """Get attribute value from element or its child."""
        if element is None:
            return None
        target = element.find(child_name, Namespaces.WORD) if child_name else element
        if target is None:
            return None
        return target.attrib.get(qualify(attr_name, Namespaces.WORD))

    def _get_int_attr(self, element: Optional[ET.Element], child_name: Optional[str], attr_name: str) -> Optional[int]:
        return to_int(self._get_attr(element, child_name, attr_name))
