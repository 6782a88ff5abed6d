# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Type aliases for configweave."""

from configweave.types.type_config_value import (
    ConfigFragment,
    ConfigTree,
    ConfigValue,
    LeafPath,
    RawConfigValue,
    RawScalar,
)

__all__ = [
    "ConfigFragment",
    "ConfigTree",
    "ConfigValue",
    "LeafPath",
    "RawConfigValue",
    "RawScalar",
]
