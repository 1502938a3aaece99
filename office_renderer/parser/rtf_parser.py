"""Drive the RTF token stream through a group-scoped state machine into a Document."""
from __future__ import annotations

import codecs
import dataclasses
import sys
from dataclasses import dataclass, field
from typing import Dict, List, Optional

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
    RunFormatting,
    Table,
    TableCell,
    TableRow,
    clamp_heading_level,
    merge_runs,
)
from office_renderer.parser.fields import parse_hyperlink_instruction
from office_renderer.parser.rtf_tokenizer import RtfTokenizer, Token, TokenType
from office_renderer.parser.styles_parser import heading_level_from_name
from office_renderer.utils.logger import get_logger

LOGGER = get_logger(__name__)

DEFAULT_CODEPAGE = "cp1252"

BODY = None
FIELD_INSTRUCTION = "fldinst"
LIST_MARKER = "listtext"
PARAGRAPH_NUMBERING = "pn"
STYLESHEET = "stylesheet"
STYLESHEET_ENTRY = "stylesheet_entry"

# Destinations whose content is never part of the body text.
SKIPPED_DESTINATIONS = frozenset(
    {
        "fonttbl", "colortbl", "info", "pict", "object", "objdata", "nonshppict", "shp", "shpinst",
        "header", "headerl", "headerr", "headerf", "footer", "footerl", "footerr", "footerf",
        "footnote", "annotation", "atnid", "atnauthor", "listtable", "listoverridetable", "rsidtbl",
        "generator", "xmlnstbl", "themedata", "colorschememapping", "latentstyles", "datastore",
        "revtbl", "filetbl", "docvar", "mmathPr", "private", "userprops", "template", "xe", "tc", "txe",
    }
)
PARAGRAPH_BREAKS = frozenset({"par", "sect", "page"})
CHARACTER_WORDS: Dict[str, str] = {
    "tab": "\t",
    "line": "\n",
    "emdash": "\u2014",
    "endash": "\u2013",
    "emspace": "\u2003",
    "enspace": "\u2002",
    "qmspace": "\u2005",
    "bullet": "\u2022",
    "lquote": "\u2018",
    "rquote": "\u2019",
    "ldblquote": "\u201c",
    "rdblquote": "\u201d",
    "zwj": "\u200d",
    "zwnj": "\u200c",
}
CHARACTER_SYMBOLS: Dict[str, str] = {
    "\\": "\\",
    "{": "{",
    "}": "}",
    "~": "\u00a0",
    "_": "\u2011",
    "-": "",
}
CHARSET_WORDS = {"mac": "mac_roman", "pc": "cp437", "pca": "cp850"}
UNDERLINE_OFF = frozenset({"ulnone"})
NOT_UNDERLINE = frozenset({"ulc", "ulnone"})


@dataclass(slots=True)
class FieldContext:
    """Instruction text of an RTF ``\\field`` and the hyperlink it resolves to."""

    instruction: List[str] = field(default_factory=list)
    hyperlink: Optional[str] = None


@dataclass(slots=True)
class RtfState:
    """Formatting and destination snapshot; one per open group."""

    bold: bool = False
    italic: bool = False
    underline: bool = False
    strikethrough: bool = False
    hidden: bool = False
    destination: Optional[str] = BODY
    skip: bool = False
    uc: int = 1
    outline_level: Optional[int] = None
    style_index: Optional[int] = None
    in_list: bool = False
    list_level: int = 0
    in_table: bool = False
    active_field: Optional[FieldContext] = None
    hyperlink: Optional[str] = None

    def copy(self) -> "RtfState":
        return dataclasses.replace(self)

    @property
    def formatting(self) -> RunFormatting:
        return RunFormatting(
            bold=self.bold,
            italic=self.italic,
            underline=self.underline,
            strikethrough=self.strikethrough,
        )

    def reset_character(self) -> None:
        self.bold = self.italic = self.underline = self.strikethrough = self.hidden = False

    def reset_paragraph(self) -> None:
        self.outline_level = None
        self.style_index = None
        self.in_list = False
        self.list_level = 0
        self.in_table = False


class RtfParser:
    """Explicit state machine over RTF tokens.

    A copy of the current ``RtfState`` is pushed for every ``{`` and popped
    at the matching ``}``, so formatting set inside a group never reaches its
    siblings.
    """

    def __init__(self, data: bytes, settings: Optional[ConverterSettings] = None) -> None:
        self._data = data
        self._settings = settings or ConverterSettings()
        self._stack: List[RtfState] = [RtfState()]
        self._builder = DocumentBuilder()
        self._codepage = DEFAULT_CODEPAGE
        self._pending_bytes = bytearray()
        self._pending_text: List[str] = []
        self._fallback_skip = 0
        self._ignorable = False
        self._runs: List[Run] = []
        # Paragraph properties of the last root-level group closed with text still pending.
        self._paragraph_state: Optional[RtfState] = None
        self._list_marker: Optional[str] = None
        self._numbered_hint: Optional[bool] = None
        self._style_names: Dict[int, str] = {}
        self._stylesheet_index: Optional[int] = None
        self._stylesheet_text: List[str] = []
        self._cell_blocks: List[Block] = []
        self._row_cells: List[TableCell] = []
        self._table_rows: List[TableRow] = []

    @property
    def _state(self) -> RtfState:
        return self._stack[-1]

    def parse(self) -> Document:
        for token in RtfTokenizer(self._data):
            self._handle(token)
        if len(self._stack) > 1:
            raise ProviderError(
                f"Unterminated group: {len(self._stack) - 1} group(s) still open at end of input",
                code="unterminated_group",
            )
        self._flush_text()
        if any(run.text.strip() for run in self._runs):
            self._end_paragraph(self._paragraph_state or self._state)
        self._flush_table()
        return self._builder.build()

    # ------------------------------------------------------------------
    # Token dispatch
    def _handle(self, token: Token) -> None:
        if token.type is TokenType.GROUP_START:
            self._open_group()
        elif token.type is TokenType.GROUP_END:
            self._close_group()
        elif self._state.skip or token.type is TokenType.BINARY:
            return
        elif token.type is TokenType.TEXT:
            self._add_bytes(token.value)
        elif token.type is TokenType.HEX:
            self._add_bytes(token.value)
        elif token.type is TokenType.CONTROL_SYMBOL:
            self._control_symbol(token.value)
        elif token.type is TokenType.CONTROL_WORD:
            self._control_word(token.value, token.param)

    def _open_group(self) -> None:
        self._flush_text()
        self._fallback_skip = 0
        if len(self._stack) > self._settings.max_group_depth:
            raise ProviderError(
                f"Group nesting exceeds {self._settings.max_group_depth} levels", code="nesting_too_deep"
            )
        state = self._state.copy()
        if state.destination == STYLESHEET:
            state.destination = STYLESHEET_ENTRY
            self._stylesheet_index = 0
            self._stylesheet_text = []
        self._stack.append(state)

    def _close_group(self) -> None:
        self._flush_text()
        self._fallback_skip = 0
        self._ignorable = False
        if len(self._stack) == 1:
            raise ProviderError("Closing brace without a matching open group", code="unbalanced_group")
        closed = self._stack.pop()
        if closed.destination == FIELD_INSTRUCTION and closed.active_field is not None and not closed.skip:
            closed.active_field.hyperlink = parse_hyperlink_instruction("".join(closed.active_field.instruction))
        if len(self._stack) == 1 and self._runs:
            self._paragraph_state = closed

    def _control_symbol(self, symbol: str) -> None:
        if symbol == "*":
            self._ignorable = True
            return
        if symbol in ("\n", "\r"):
            self._paragraph_break()
        elif symbol in CHARACTER_SYMBOLS:
            self._add_text(CHARACTER_SYMBOLS[symbol])
        elif symbol == "'":
            LOGGER.debug("Ignoring malformed hex escape")

    def _control_word(self, word: str, param: Optional[int]) -> None:
        ignorable, self._ignorable = self._ignorable, False
        state = self._state
        if word == "u" and param is not None:
            code_point = param + 65536 if param < 0 else param
            if not 0 <= code_point <= sys.maxunicode:
                raise ProviderError(f"Unicode escape \\u{param} is out of range", code="malformed_markup")
            self._add_text(chr(code_point))
            self._fallback_skip = state.uc
            return
        if word in CHARACTER_WORDS:
            self._add_text(CHARACTER_WORDS[word])
            return
        self._flush_text()
        self._fallback_skip = 0
        if self._destination_word(word, ignorable):
            return
        if state.destination == STYLESHEET_ENTRY:
            self._stylesheet_word(word, param)
            return
        if state.destination == PARAGRAPH_NUMBERING:
            self._numbering_word(word)
            return
        if word in PARAGRAPH_BREAKS:
            self._paragraph_break()
        elif word == "cell":
            self._end_cell()
        elif word == "row":
            self._end_row()
        elif not self._property_word(state, word, param):
            LOGGER.debug("Ignoring control word \\%s", word)

    def _destination_word(self, word: str, ignorable: bool) -> bool:
        state = self._state
        if word == "fldinst":
            state.destination = FIELD_INSTRUCTION
            if state.active_field is None:
                state.active_field = FieldContext()
        elif word == "fldrslt":
            state.destination = BODY
            state.hyperlink = state.active_field.hyperlink if state.active_field is not None else state.hyperlink
        elif word == "field":
            state.active_field = FieldContext()
        elif word in ("listtext", "pntext"):
            state.destination = LIST_MARKER
            self._list_marker = self._list_marker or ""
        elif word == "pn":
            state.destination = PARAGRAPH_NUMBERING
        elif word == STYLESHEET:
            state.destination = STYLESHEET
        elif word in SKIPPED_DESTINATIONS or ignorable:
            state.skip = True
        else:
            return False
        return True

    def _property_word(self, state: RtfState, word: str, param: Optional[int]) -> bool:
        enabled = param != 0
        if word == "b":
            state.bold = enabled
        elif word == "i":
            state.italic = enabled
        elif word in ("strike", "striked"):
            state.strikethrough = enabled
        elif word in UNDERLINE_OFF:
            state.underline = False
        elif word.startswith("ul") and word not in NOT_UNDERLINE:
            state.underline = enabled
        elif word == "v":
            state.hidden = enabled
        elif word == "plain":
            state.reset_character()
        elif word == "pard":
            state.reset_paragraph()
        elif word == "outlinelevel" and param is not None:
            state.outline_level = param if 0 <= param < 9 else None
        elif word == "s" and param is not None:
            state.style_index = param
        elif word == "ls":
            state.in_list = True
        elif word == "ilvl" and param is not None:
            state.list_level = max(param, 0)
        elif word == "intbl":
            state.in_table = True
        elif word == "uc" and param is not None:
            state.uc = max(param, 0)
        elif word == "ansicpg" and param is not None:
            self._set_codepage(f"cp{param}")
        elif word in CHARSET_WORDS:
            self._set_codepage(CHARSET_WORDS[word])
        else:
            return False
        return True

    def _stylesheet_word(self, word: str, param: Optional[int]) -> None:
        if word == "s":
            self._stylesheet_index = param or 0
        elif word in ("cs", "ds", "ts", "tsrowd"):
            self._stylesheet_index = None

    def _numbering_word(self, word: str) -> None:
        if word == "pnlvlblt":
            self._numbered_hint = False
        elif word.startswith("pnlvl") or word in ("pndec", "pnucltr", "pnlcltr", "pnucrm", "pnlcrm"):
            self._numbered_hint = True

    def _set_codepage(self, name: str) -> None:
        try:
            codecs.lookup(name)
        except LookupError:
            LOGGER.warning("Unknown RTF code page %s; keeping %s", name, self._codepage)
            return
        self._codepage = name

    # ------------------------------------------------------------------
    # Text accumulation
    def _add_bytes(self, data: bytes) -> None:
        if self._fallback_skip:
            skipped = min(self._fallback_skip, len(data))
            data = data[skipped:]
            self._fallback_skip -= skipped
        self._pending_bytes.extend(data)

    def _add_text(self, text: str) -> None:
        self._decode_pending_bytes()
        self._fallback_skip = 0
        self._pending_text.append(text)

    def _decode_pending_bytes(self) -> None:
        if not self._pending_bytes:
            return
        raw = bytes(self._pending_bytes)
        self._pending_bytes.clear()
        try:
            self._pending_text.append(raw.decode(self._codepage))
        except UnicodeDecodeError as exc:
            raise ProviderError(f"Text is not valid {self._codepage}: {exc}", code="encoding") from exc

    def _flush_text(self) -> None:
        """Hand accumulated text to the current destination."""
        self._decode_pending_bytes()
        if not self._pending_text:
            return
        text = "".join(self._pending_text)
        self._pending_text = []
        if any("\ud800" <= ch <= "\udfff" for ch in text):
            text = text.encode("utf-16-le", "surrogatepass").decode("utf-16-le", "replace")
        state = self._state
        if state.skip:
            return
        if state.destination == FIELD_INSTRUCTION and state.active_field is not None:
            state.active_field.instruction.append(text)
        elif state.destination == LIST_MARKER:
            self._list_marker = (self._list_marker or "") + text
        elif state.destination == STYLESHEET_ENTRY:
            self._stylesheet_text.append(text)
            self._register_style_name()
        elif state.destination is BODY and not state.hidden:
            self._runs.append(Run(text=text, formatting=state.formatting, hyperlink=state.hyperlink))

    def _register_style_name(self) -> None:
        collected = "".join(self._stylesheet_text)
        if ";" not in collected:
            return
        name = collected.split(";", 1)[0].strip()
        if self._stylesheet_index is not None and name:
            self._style_names[self._stylesheet_index] = name
        self._stylesheet_text = []
        self._stylesheet_index = None

    # ------------------------------------------------------------------
    # Block assembly
    def _paragraph_break(self) -> None:
        self._flush_text()
        self._end_paragraph()

    def _end_paragraph(self, state: Optional[RtfState] = None) -> None:
        state = state or self._state
        self._paragraph_state = None
        block = self._make_block(state)
        if state.in_table:
            self._cell_blocks.append(block)
            return
        self._flush_table()
        self._builder.append(block)

    def _make_block(self, state: RtfState) -> Block:
        runs = list(self._runs)
        self._runs = []
        while runs and not runs[0].text.strip():
            runs.pop(0)
        merged = merge_runs(runs)
        marker, self._list_marker = self._list_marker, None
        numbered_hint, self._numbered_hint = self._numbered_hint, None
        if state.in_list or marker is not None or numbered_hint is not None:
            if numbered_hint is None:
                numbered_hint = marker is not None and any(ch.isdigit() for ch in marker)
            kind = ListKind.NUMBERED if numbered_hint else ListKind.BULLET
            return ListItem(runs=merged, kind=kind, depth=state.list_level)
        level = self._heading_level(state)
        if level is not None:
            return Heading(level=clamp_heading_level(level), runs=merged)
        return Paragraph(runs=merged)

    def _heading_level(self, state: RtfState) -> Optional[int]:
        if state.outline_level is not None:
            return state.outline_level + 1
        if state.style_index is not None:
            return heading_level_from_name(self._style_names.get(state.style_index))
        return None

    def _end_cell(self) -> None:
        self._flush_text()
        if self._runs:
            state = self._state.copy()
            state.in_table = True
            self._end_paragraph(state)
        self._row_cells.append(TableCell(blocks=tuple(self._cell_blocks)))
        self._cell_blocks = []

    def _end_row(self) -> None:
        self._flush_text()
        if self._cell_blocks:
            self._row_cells.append(TableCell(blocks=tuple(self._cell_blocks)))
            self._cell_blocks = []
        self._table_rows.append(TableRow(cells=tuple(self._row_cells)))
        self._row_cells = []

    def _flush_table(self) -> None:
        if self._row_cells or self._cell_blocks:
            self._end_row()
        if self._table_rows:
            self._builder.append(Table(rows=tuple(self._table_rows)))
            self._table_rows = []
