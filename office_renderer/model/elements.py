"""In-memory representation of parsed document content."""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Iterable, List, Optional, Sequence, Tuple

MIN_HEADING_LEVEL = 1
MAX_HEADING_LEVEL = 6


class ListKind(str, Enum):
    """Ordering kind of a list item."""

    BULLET = "bullet"
    NUMBERED = "numbered"


@dataclass(frozen=True, slots=True)
class RunFormatting:
    """Independent character formatting flags carried by a run."""

    bold: bool = False
    italic: bool = False
    underline: bool = False
    strikethrough: bool = False


PLAIN = RunFormatting()


@dataclass(frozen=True, slots=True)
class Run:
    """Represents a contiguous run of text with associated inline styling."""

    text: str
    formatting: RunFormatting = PLAIN
    hyperlink: Optional[str] = None

    def __post_init__(self) -> None:
        if self.text is None:
            raise ValueError("Run text must not be None")

    def continues(self, other: "Run") -> bool:
        """Return True when ``other`` can be appended to this run without a visible change."""
        return self.formatting == other.formatting and self.hyperlink == other.hyperlink


@dataclass(frozen=True, slots=True)
class Paragraph:
    """Plain body paragraph."""

    runs: Tuple[Run, ...] = ()


@dataclass(frozen=True, slots=True)
class Heading:
    """Heading paragraph with a level in [1, 6]."""

    level: int
    runs: Tuple[Run, ...] = ()

    def __post_init__(self) -> None:
        if not MIN_HEADING_LEVEL <= self.level <= MAX_HEADING_LEVEL:
            raise ValueError(f"Heading level out of range: {self.level}")


@dataclass(frozen=True, slots=True)
class ListItem:
    """Paragraph belonging to a bulleted or numbered list.

    ``depth`` is zero for the outermost list level.
    """

    runs: Tuple[Run, ...] = ()
    kind: ListKind = ListKind.BULLET
    depth: int = 0

    def __post_init__(self) -> None:
        if self.depth < 0:
            raise ValueError(f"List depth must not be negative: {self.depth}")


@dataclass(frozen=True, slots=True)
class TableCell:
    """Single table cell container."""

    blocks: Tuple["Block", ...] = ()


@dataclass(frozen=True, slots=True)
class TableRow:
    """Row with a sequence of cells."""

    cells: Tuple[TableCell, ...] = ()


@dataclass(frozen=True, slots=True)
class Table:
    """Tabular structure; every row holds the same number of cells."""

    rows: Tuple[TableRow, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "rows", pad_rows(self.rows))

    @property
    def column_count(self) -> int:
        return len(self.rows[0].cells) if self.rows else 0


@dataclass(frozen=True, slots=True)
class HorizontalRule:
    """Thematic break between blocks."""


Block = Paragraph | Heading | ListItem | Table | HorizontalRule


@dataclass(frozen=True, slots=True)
class Document:
    """Root of the parsed document: blocks in source reading order."""

    blocks: Tuple[Block, ...] = ()

    def text_content(self) -> str:
        """Return the plain text of every block, one line per paragraph-like block."""
        return "\n".join(_block_lines(self.blocks))


@dataclass(slots=True)
class DocumentBuilder:
    """Mutable accumulator used by providers before freezing a Document."""

    blocks: List[Block] = field(default_factory=list)

    def append(self, block: Block) -> None:
        self.blocks.append(block)

    def extend(self, blocks: Iterable[Block]) -> None:
        self.blocks.extend(blocks)

    def build(self) -> Document:
        return Document(blocks=tuple(self.blocks))


def clamp_heading_level(level: int) -> int:
    """Map any native outline level into the supported heading range."""
    return max(MIN_HEADING_LEVEL, min(MAX_HEADING_LEVEL, level))


def pad_rows(rows: Sequence[TableRow]) -> Tuple[TableRow, ...]:
    """Pad short rows with empty cells up to the widest row."""
    width = max((len(row.cells) for row in rows), default=0)
    padded = []
    for row in rows:
        missing = width - len(row.cells)
        if missing:
            row = TableRow(cells=tuple(row.cells) + tuple(TableCell() for _ in range(missing)))
        padded.append(row)
    return tuple(padded)


def merge_runs(runs: Iterable[Run]) -> Tuple[Run, ...]:
    """Merge adjacent runs that share formatting and hyperlink target."""
    merged: List[Run] = []
    for run in runs:
        if merged and merged[-1].continues(run):
            previous = merged.pop()
            run = Run(text=previous.text + run.text, formatting=previous.formatting, hyperlink=previous.hyperlink)
        merged.append(run)
    return tuple(merged)


def _block_lines(blocks: Iterable[Block]) -> Iterable[str]:
    for block in blocks:
        if isinstance(block, Table):
            for row in block.rows:
                yield "\t".join(" ".join(_block_lines(cell.blocks)) for cell in row.cells)
        elif isinstance(block, HorizontalRule):
            yield "---"
        else:
            yield "".join(run.text for run in block.runs)
