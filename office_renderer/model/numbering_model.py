"""Numbering model captures list definitions extracted from numbering.xml."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Optional

from office_renderer.model.elements import ListKind

BULLET_FORMATS = frozenset({"bullet", "none"})


@dataclass(slots=True)
class NumberingLevel:
    """Defines numbering behavior for a specific indentation level."""

    level_index: int
    num_format: Optional[str] = None

    @property
    def kind(self) -> ListKind:
        if self.num_format is None or self.num_format in BULLET_FORMATS:
            return ListKind.BULLET
        return ListKind.NUMBERED


@dataclass(slots=True)
class NumberingOverride:
    """Overrides applied to a numbering instance for specific levels."""

    level_index: int
    level: Optional[NumberingLevel] = None


@dataclass(slots=True)
class AbstractNumberingDefinition:
    """Template describing multi-level numbering behavior."""

    abstract_num_id: int
    levels: Dict[int, NumberingLevel] = field(default_factory=dict)


@dataclass(slots=True)
class NumberingInstance:
    """Concrete numbering instance bound to an abstract definition."""

    num_id: int
    abstract_num_id: int
    overrides: Dict[int, NumberingOverride] = field(default_factory=dict)


@dataclass(slots=True)
class NumberingCatalog:
    """Collection of abstract definitions and concrete numbering instances."""

    abstracts: Dict[int, AbstractNumberingDefinition] = field(default_factory=dict)
    instances: Dict[int, NumberingInstance] = field(default_factory=dict)

    def get_abstract(self, abstract_num_id: Optional[int]) -> Optional[AbstractNumberingDefinition]:
        if abstract_num_id is None:
            return None
        return self.abstracts.get(abstract_num_id)

    def get_instance(self, num_id: Optional[int]) -> Optional[NumberingInstance]:
        if num_id is None:
            return None
        return self.instances.get(num_id)

    def get_level(self, num_id: int, level: int) -> Optional[NumberingLevel]:
        """Return the effective level definition, honouring per-instance overrides."""
        instance = self.get_instance(num_id)
        if instance is None:
            return None
        override = instance.overrides.get(level)
        if override is not None and override.level is not None:
            return override.level
        abstract = self.get_abstract(instance.abstract_num_id)
        if abstract is None:
            return None
        return abstract.levels.get(level)

    def list_kind(self, num_id: int, level: int) -> ListKind:
        """Return the ordering kind for a list level; unknown definitions are bullets."""
        level_def = self.get_level(num_id, level)
        if level_def is None:
            return ListKind.BULLET
        return level_def.kind
