# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Resolver configuration model."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

DEFAULT_PROFILES_ENV_VAR = "SPRING_PROFILES_ACTIVE"


class ModelResolverConfig(BaseModel):
    """Settings for a ResolverContext.

    Attributes:
        strict_placeholders: Raise instead of warn when placeholders survive the pass bound
        register_vault_from_tree: Register Vault from the merged tree when it carries settings
        vault_config_path: Dotted location of the Vault settings inside the merged tree
        timeout_seconds: Per-call timeout handed to backend clients
        profiles_env_var: Environment variable holding the active profile list
    """

    model_config = ConfigDict(
        frozen=True,
        extra="forbid",
    )

    strict_placeholders: bool = Field(
        default=False,
        description="Raise PlaceholderResolutionError when the pass bound is hit",
    )
    register_vault_from_tree: bool = Field(
        default=True,
        description="Register the vault engine from settings found in the merged tree",
    )
    vault_config_path: str = Field(
        default="secrets.vault",
        min_length=1,
        description="Dotted path of the Vault settings inside the merged tree",
    )
    timeout_seconds: float = Field(
        default=30.0,
        gt=0,
        le=600,
        description="Timeout in seconds for each backend network call",
    )
    profiles_env_var: str = Field(
        default=DEFAULT_PROFILES_ENV_VAR,
        min_length=1,
        description="Environment variable with the comma-separated active profiles",
    )


__all__ = ["DEFAULT_PROFILES_ENV_VAR", "ModelResolverConfig"]
