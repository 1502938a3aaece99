"""Field instruction helpers shared by the DOCX and RTF parsers."""
from __future__ import annotations

import re
from typing import List, Optional

_HYPERLINK_PREFIX = re.compile(r"^\s*HYPERLINK\b", re.IGNORECASE)
_FIELD_TOKEN = re.compile(r'"([^"]*)"|(\S+)')


def _tokens(instruction: str) -> List[str]:
    return [bare or quoted for quoted, bare in _FIELD_TOKEN.findall(instruction)]


def parse_hyperlink_instruction(instruction: str) -> Optional[str]:
    """Return the link target of a ``HYPERLINK`` field instruction.

    ``HYPERLINK "https://example.com"`` gives the URL, a ``\\l "name"`` switch
    appends (or alone yields) a ``#name`` fragment. Other fields give None.
    """
    if not instruction or not _HYPERLINK_PREFIX.match(instruction):
        return None
    target: Optional[str] = None
    anchor: Optional[str] = None
    args = iter(_tokens(instruction)[1:])
    for token in args:
        lowered = token.lower()
        if lowered == "\\l":
            anchor = next(args, None)
        elif lowered in {"\\o", "\\t"}:
            next(args, None)
        elif lowered.startswith("\\"):
            continue
        elif target is None and token:
            target = token
    if anchor:
        return f"{target or ''}#{anchor}"
    return target
