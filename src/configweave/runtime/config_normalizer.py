# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Normalize raw fragment values to string leaves.

After normalization a tree only holds strings, nested dicts with string keys,
and lists. Scalars are rendered in one canonical form so that placeholder
lookups and comparisons behave the same on every run:

========== ===================================
raw        normalized
========== ===================================
True/False ``"true"`` / ``"false"``
int        decimal text (``123``)
float      shortest round-trip text (``45.6``)
None       ``""``
date       ISO-8601 (``2024-01-31``)
========== ===================================
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from datetime import date

from configweave.errors import ConfigFragmentError, ModelConfigErrorContext
from configweave.types import ConfigValue


def normalize_scalar(value: object) -> str:
    """Render one scalar in canonical text form.

    Raises:
        ConfigFragmentError: For values that are not YAML scalars.
    """
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, int):
        return str(value)
    if isinstance(value, float):
        return repr(value)
    if isinstance(value, date):
        return value.isoformat()
    raise ConfigFragmentError(
        f"unsupported configuration value of type {type(value).__name__}",
        context=ModelConfigErrorContext(operation="normalize"),
    )


def normalize_value(value: object) -> ConfigValue:
    """Recursively normalize a raw value (mapping keys included)."""
    if isinstance(value, Mapping):
        return {normalize_scalar(k): normalize_value(v) for k, v in value.items()}
    if isinstance(value, Sequence) and not isinstance(value, (str, bytes, bytearray)):
        return [normalize_value(item) for item in value]
    return normalize_scalar(value)


__all__ = ["normalize_scalar", "normalize_value"]
