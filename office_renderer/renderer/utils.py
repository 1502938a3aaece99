"""Common helpers shared by renderer implementations."""
from __future__ import annotations

import html
from typing import List, Tuple

from office_renderer.model.elements import RunFormatting

# Outermost first; a run's enabled flags are always nested in this order.
INLINE_TAGS: Tuple[Tuple[str, str], ...] = (
    ("bold", "strong"),
    ("italic", "em"),
    ("underline", "u"),
    ("strikethrough", "s"),
)


def formatting_to_tags(formatting: RunFormatting) -> List[str]:
    """Return the inline element names for enabled flags, outermost first."""
    return [tag for flag, tag in INLINE_TAGS if getattr(formatting, flag)]


def escape_text(text: str) -> str:
    """Escape markup-reserved characters; line breaks become ``<br>``."""
    return html.escape(text, quote=True).replace("\r\n", "\n").replace("\n", "<br>")


def escape_attribute(value: str) -> str:
    return html.escape(value, quote=True)
