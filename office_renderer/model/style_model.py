"""Style model captures style definitions and character formatting resolution."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Mapping, Optional, Tuple

from office_renderer.model.elements import RunFormatting


@dataclass(frozen=True, slots=True)
class FormattingOverrides:
    """Partially specified character formatting.

    ``None`` means "not set at this tier"; the value is then taken from the
    next tier of the lookup chain.
    """

    bold: Optional[bool] = None
    italic: Optional[bool] = None
    underline: Optional[bool] = None
    strikethrough: Optional[bool] = None

    def layered_over(self, fallback: "FormattingOverrides") -> "FormattingOverrides":
        """Return overrides where unset flags are taken from ``fallback``."""
        return FormattingOverrides(
            bold=self.bold if self.bold is not None else fallback.bold,
            italic=self.italic if self.italic is not None else fallback.italic,
            underline=self.underline if self.underline is not None else fallback.underline,
            strikethrough=self.strikethrough if self.strikethrough is not None else fallback.strikethrough,
        )

    def resolve(self) -> RunFormatting:
        """Apply the hard default (off) to every flag still unset."""
        return RunFormatting(
            bold=bool(self.bold),
            italic=bool(self.italic),
            underline=bool(self.underline),
            strikethrough=bool(self.strikethrough),
        )


NO_OVERRIDES = FormattingOverrides()


def resolve_formatting(tiers: Iterable[FormattingOverrides]) -> RunFormatting:
    """Resolve formatting from tiers ordered from most to least specific."""
    resolved = NO_OVERRIDES
    for tier in tiers:
        resolved = resolved.layered_over(tier)
    return resolved.resolve()


@dataclass(frozen=True, slots=True)
class NumberingReference:
    """List membership declared by a paragraph or a paragraph style."""

    num_id: int
    level: int = 0


@dataclass(slots=True)
class StyleDefinition:
    """Style information after resolving ``basedOn`` inheritance."""

    style_id: str
    style_type: str
    name: Optional[str]
    formatting: FormattingOverrides = NO_OVERRIDES
    based_on: Optional[str] = None
    outline_level: Optional[int] = None
    numbering: Optional[NumberingReference] = None
    is_default: bool = False
    has_bottom_border: bool = False


class StylesCatalog:
    """Collection of resolved styles keyed by identifier, plus document defaults."""

    def __init__(
        self,
        styles: Mapping[str, StyleDefinition],
        defaults: FormattingOverrides = NO_OVERRIDES,
    ):
        self._styles = dict(styles)
        self._defaults = defaults

    def get(self, style_id: Optional[str]) -> Optional[StyleDefinition]:
        """Return the resolved style definition given its identifier."""
        if style_id is None:
            return None
        return self._styles.get(style_id)

    def default_for(self, style_type: str) -> Optional[StyleDefinition]:
        """Return the default style for the given style type if defined."""
        for style in self._styles.values():
            if style.style_type == style_type and style.is_default:
                return style
        return None

    def formatting_of(self, style_id: Optional[str]) -> FormattingOverrides:
        """Return a style's formatting, or no overrides when the id is unknown."""
        style = self.get(style_id)
        return style.formatting if style is not None else NO_OVERRIDES

    def paragraph_style(self, style_id: Optional[str]) -> Optional[StyleDefinition]:
        """Return the named paragraph style, falling back to the default paragraph style."""
        style = self.get(style_id)
        if style is None:
            style = self.default_for("paragraph")
        return style

    def run_formatting(
        self,
        direct: FormattingOverrides,
        character_style_id: Optional[str],
        paragraph_style_id: Optional[str],
    ) -> RunFormatting:
        """Resolve run formatting: direct, character style, paragraph style, defaults, off."""
        paragraph_style = self.paragraph_style(paragraph_style_id)
        tiers: List[FormattingOverrides] = [
            direct,
            self.formatting_of(character_style_id),
            paragraph_style.formatting if paragraph_style is not None else NO_OVERRIDES,
            self._defaults,
        ]
        return resolve_formatting(tiers)


@dataclass(slots=True)
class OdtStyle:
    """A named ODF style of the paragraph or text family."""

    name: str
    family: str
    formatting: FormattingOverrides = NO_OVERRIDES
    parent: Optional[str] = None
    outline_level: Optional[int] = None
    list_style: Optional[str] = None


@dataclass(slots=True)
class OdtListStyle:
    """Numbered/bulleted flag per level of a ``text:list-style`` (levels are 1-based)."""

    name: str
    numbered_levels: Dict[int, bool] = field(default_factory=dict)

    def is_numbered(self, level: int) -> Optional[bool]:
        return self.numbered_levels.get(level)


class OdtStylesCatalog:
    """ODF styles keyed by ``(family, name)`` with parent-chain resolution."""

    def __init__(
        self,
        styles: Mapping[Tuple[str, str], OdtStyle],
        defaults: Optional[Mapping[str, FormattingOverrides]] = None,
        list_styles: Optional[Mapping[str, OdtListStyle]] = None,
    ) -> None:
        self._styles = dict(styles)
        self._defaults = dict(defaults or {})
        self._list_styles = dict(list_styles or {})

    def get(self, family: str, name: Optional[str]) -> Optional[OdtStyle]:
        if name is None:
            return None
        return self._styles.get((family, name))

    def chain(self, family: str, name: Optional[str]) -> List[OdtStyle]:
        """Return the style followed by its ancestors; cycles and unknown parents end the chain."""
        chain: List[OdtStyle] = []
        seen = set()
        style = self.get(family, name)
        while style is not None and style.name not in seen:
            seen.add(style.name)
            chain.append(style)
            style = self.get(family, style.parent)
        return chain

    def formatting_of(self, family: str, name: Optional[str]) -> FormattingOverrides:
        """Formatting of a named style with its parents filled in; unknown names give no overrides."""
        resolved = NO_OVERRIDES
        for style in self.chain(family, name):
            resolved = resolved.layered_over(style.formatting)
        return resolved

    def default_formatting(self, family: str) -> FormattingOverrides:
        return self._defaults.get(family, NO_OVERRIDES)

    def outline_level(self, name: Optional[str]) -> Optional[int]:
        for style in self.chain("paragraph", name):
            if style.outline_level is not None:
                return style.outline_level
        return None

    def list_style_for(self, paragraph_style: Optional[str]) -> Optional[str]:
        for style in self.chain("paragraph", paragraph_style):
            if style.list_style is not None:
                return style.list_style
        return None

    def list_style(self, name: Optional[str]) -> Optional[OdtListStyle]:
        if name is None:
            return None
        return self._list_styles.get(name)
