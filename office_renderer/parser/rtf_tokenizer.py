"""Split an RTF byte stream into group, control and text tokens."""
from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum
from typing import Iterator, Optional

from office_renderer.errors import ProviderError

_TOKEN_PATTERN = re.compile(
    rb"(?P<open>\{)"
    rb"|(?P<close>\})"
    rb"|\\(?P<word>[a-zA-Z]{1,32})(?P<param>-?\d{1,10})? ?"
    rb"|\\'(?P<hex>[0-9a-fA-F]{2})"
    rb"|\\(?P<symbol>[^a-zA-Z])"
    rb"|(?P<newline>[\r\n]+)"
    rb"|(?P<text>[^\\{}\r\n]+)"
)


class TokenType(Enum):
    GROUP_START = "group_start"
    GROUP_END = "group_end"
    CONTROL_WORD = "control_word"
    CONTROL_SYMBOL = "control_symbol"
    HEX = "hex"
    TEXT = "text"
    BINARY = "binary"


@dataclass(frozen=True, slots=True)
class Token:
    """A lexical unit of RTF.

    ``value`` is the control word/symbol name for control tokens and the raw
    bytes for text, hex and binary tokens.
    """

    type: TokenType
    value: object = None
    param: Optional[int] = None


class RtfTokenizer:
    """Iterate over the tokens of an RTF buffer; raw CR/LF bytes are dropped."""

    def __init__(self, data: bytes) -> None:
        self._data = data

    def __iter__(self) -> Iterator[Token]:
        data = self._data
        pos = 0
        length = len(data)
        while pos < length:
            match = _TOKEN_PATTERN.match(data, pos)
            if match is None:
                raise ProviderError(f"Dangling backslash at offset {pos}", code="malformed_markup")
            pos = match.end()
            if match.group("open") is not None:
                yield Token(TokenType.GROUP_START)
            elif match.group("close") is not None:
                yield Token(TokenType.GROUP_END)
            elif match.group("word") is not None:
                word = match.group("word").decode("ascii")
                raw_param = match.group("param")
                param = int(raw_param) if raw_param is not None else None
                if word == "bin" and param and param > 0:
                    yield Token(TokenType.BINARY, data[pos : pos + param])
                    pos += param
                    continue
                yield Token(TokenType.CONTROL_WORD, word, param)
            elif match.group("hex") is not None:
                yield Token(TokenType.HEX, bytes((int(match.group("hex"), 16),)))
            elif match.group("symbol") is not None:
                yield Token(TokenType.CONTROL_SYMBOL, match.group("symbol").decode("latin-1"))
            elif match.group("text") is not None:
                yield Token(TokenType.TEXT, match.group("text"))
