"""Helpers to persist intermediate representations for debugging."""
from __future__ import annotations

import json
from dataclasses import fields, is_dataclass
from enum import Enum
from pathlib import Path
from typing import Any

from office_renderer.model.elements import Document


class DebugDumper:
    """Writes intermediate artifacts onto disk for inspection."""

    def __init__(self, directory: Path) -> None:
        self.directory = directory

    def dump(self, document: Document) -> Path:
        """Persist the document model as JSON for offline analysis."""
        self.directory.mkdir(parents=True, exist_ok=True)
        target = self.directory / "document_model.json"
        target.write_text(json.dumps(self._serialize(document), indent=2, ensure_ascii=False), encoding="utf-8")
        return target

    def _serialize(self, value: Any) -> Any:
        if is_dataclass(value):
            payload = {"type": type(value).__name__}
            payload.update({f.name: self._serialize(getattr(value, f.name)) for f in fields(value)})
            return payload
        if isinstance(value, Enum):
            return value.value
        if isinstance(value, dict):
            return {k: self._serialize(v) for k, v in value.items()}
        if isinstance(value, (list, tuple)):
            return [self._serialize(v) for v in value]
        return value
