"""Runtime limits and presentation settings for the conversion pipeline."""
from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Mapping, Optional

from office_renderer.utils.logger import get_logger

LOGGER = get_logger(__name__)

DEFAULT_MAX_PART_BYTES = 64 * 1024 * 1024
DEFAULT_MAX_GROUP_DEPTH = 1024
DEFAULT_MAX_REPEAT = 1024
DEFAULT_MAX_NESTING_DEPTH = 64
DEFAULT_TITLE = "Document"

ENV_MAX_PART_BYTES = "OFFICE_RENDERER_MAX_PART_BYTES"
ENV_MAX_GROUP_DEPTH = "OFFICE_RENDERER_MAX_GROUP_DEPTH"
ENV_MAX_REPEAT = "OFFICE_RENDERER_MAX_REPEAT"
ENV_MAX_NESTING_DEPTH = "OFFICE_RENDERER_MAX_NESTING_DEPTH"


@dataclass(frozen=True, slots=True)
class ConverterSettings:
    """Limits that bound the work done for a single conversion call."""

    max_part_bytes: int = DEFAULT_MAX_PART_BYTES
    max_group_depth: int = DEFAULT_MAX_GROUP_DEPTH
    max_repeat: int = DEFAULT_MAX_REPEAT
    max_nesting_depth: int = DEFAULT_MAX_NESTING_DEPTH
    title: str = DEFAULT_TITLE

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "ConverterSettings":
        """Build settings from ``OFFICE_RENDERER_*`` environment variables."""
        env = os.environ if environ is None else environ
        return cls(
            max_part_bytes=_int_setting(env, ENV_MAX_PART_BYTES, DEFAULT_MAX_PART_BYTES),
            max_group_depth=_int_setting(env, ENV_MAX_GROUP_DEPTH, DEFAULT_MAX_GROUP_DEPTH),
            max_repeat=_int_setting(env, ENV_MAX_REPEAT, DEFAULT_MAX_REPEAT),
            max_nesting_depth=_int_setting(env, ENV_MAX_NESTING_DEPTH, DEFAULT_MAX_NESTING_DEPTH),
        )


def _int_setting(env: Mapping[str, str], name: str, default: int) -> int:
    raw = env.get(name)
    if raw is None or not raw.strip():
        return default
    try:
        value = int(raw)
    except ValueError:
        LOGGER.warning("Ignoring non-integer %s=%r", name, raw)
        return default
    if value <= 0:
        LOGGER.warning("Ignoring non-positive %s=%r", name, raw)
        return default
    return value
