# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Pydantic models for configweave."""

from configweave.models.model_resolver_config import (
    DEFAULT_PROFILES_ENV_VAR,
    ModelResolverConfig,
)
from configweave.models.model_secret_reference import ModelSecretReference

__all__ = [
    "DEFAULT_PROFILES_ENV_VAR",
    "ModelResolverConfig",
    "ModelSecretReference",
]
