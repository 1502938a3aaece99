"""Render the Document Model into an HTML document."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, List, Sequence

from office_renderer.model.elements import (
    Block,
    Document,
    Heading,
    HorizontalRule,
    ListItem,
    ListKind,
    Paragraph,
    Run,
    Table,
)
from office_renderer.renderer.utils import escape_attribute, escape_text, formatting_to_tags


@dataclass(slots=True)
class _OpenList:
    tag: str
    item_open: bool = False


class HtmlRenderer:
    """Serialize a Document into semantic HTML.

    Output depends only on the Document, so rendering the same Document
    twice yields identical strings.
    """

    def __init__(self, title: str = "Document") -> None:
        self._title = title

    def render(self, document: Document) -> str:
        body = self.render_body(document)
        return f"""<!DOCTYPE html>
<html>
<head>
<meta charset="utf-8">
<title>{escape_text(self._title)}</title>
</head>
<body>
{body}
</body>
</html>
"""

    def render_body(self, document: Document) -> str:
        """Render only the block markup of the document."""
        return "\n".join(self._render_blocks(document.blocks))

    def _render_blocks(self, blocks: Sequence[Block]) -> List[str]:
        lines: List[str] = []
        index = 0
        while index < len(blocks):
            block = blocks[index]
            if isinstance(block, ListItem):
                end = index
                while end < len(blocks) and isinstance(blocks[end], ListItem):
                    end += 1
                lines.append(self._render_list(blocks[index:end]))
                index = end
                continue
            lines.append(self._render_block(block))
            index += 1
        return lines

    def _render_block(self, block: Block) -> str:
        if isinstance(block, Heading):
            return f"<h{block.level}>{self._render_runs(block.runs)}</h{block.level}>"
        if isinstance(block, Paragraph):
            return f"<p>{self._render_runs(block.runs)}</p>"
        if isinstance(block, Table):
            return self._render_table(block)
        if isinstance(block, HorizontalRule):
            return "<hr>"
        if isinstance(block, ListItem):
            return self._render_list([block])
        raise TypeError(f"Unsupported block type: {type(block).__name__}")

    def _render_list(self, items: Iterable[ListItem]) -> str:
        parts: List[str] = []
        stack: List[_OpenList] = []

        def close_top() -> None:
            top = stack.pop()
            if top.item_open:
                parts.append("</li>")
            parts.append(f"</{top.tag}>")

        for item in items:
            tag = "ol" if item.kind is ListKind.NUMBERED else "ul"
            target = item.depth + 1
            while len(stack) > target:
                close_top()
            if len(stack) == target and stack[-1].tag != tag:
                close_top()
            if len(stack) == target and stack[-1].item_open:
                parts.append("</li>")
                stack[-1].item_open = False
            while len(stack) < target:
                if stack and not stack[-1].item_open:
                    parts.append("<li>")
                    stack[-1].item_open = True
                parts.append(f"<{tag}>")
                stack.append(_OpenList(tag))
            parts.append(f"<li>{self._render_runs(item.runs)}")
            stack[-1].item_open = True
        while stack:
            close_top()
        return "".join(parts)

    def _render_table(self, table: Table) -> str:
        parts = ["<table>", "<tbody>"]
        for row in table.rows:
            parts.append("<tr>")
            for cell in row.cells:
                parts.append(f"<td>{''.join(self._render_blocks(cell.blocks))}</td>")
            parts.append("</tr>")
        parts.extend(["</tbody>", "</table>"])
        return "".join(parts)

    def _render_runs(self, runs: Iterable[Run]) -> str:
        return "".join(self._render_run(run) for run in runs)

    def _render_run(self, run: Run) -> str:
        if not run.text:
            return ""
        content = escape_text(run.text)
        for tag in reversed(formatting_to_tags(run.formatting)):
            content = f"<{tag}>{content}</{tag}>"
        if run.hyperlink is not None:
            content = f'<a href="{escape_attribute(run.hyperlink)}">{content}</a>'
        return content
