# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""
Configuration value type aliases.

Fragments arrive with whatever scalar types the loader produced
(``RawConfigValue``). Merging normalizes every scalar to text, so a resolved
tree is a closed variant of string leaves, nested trees and lists
(``ConfigValue``).
"""

from __future__ import annotations

from datetime import date, datetime

# Scalars a YAML loader can produce
type RawScalar = str | int | float | bool | date | datetime | None

# One parsed fragment before normalization
type RawConfigValue = RawScalar | dict[object, RawConfigValue] | list[RawConfigValue]
type ConfigFragment = dict[object, RawConfigValue]

# Normalized values after merging
type ConfigValue = str | dict[str, ConfigValue] | list[ConfigValue]
type ConfigTree = dict[str, ConfigValue]

# Path of a leaf inside a tree: mapping keys and list indexes
type LeafPath = tuple[str | int, ...]

__all__ = [
    "ConfigFragment",
    "ConfigTree",
    "ConfigValue",
    "LeafPath",
    "RawConfigValue",
    "RawScalar",
]
