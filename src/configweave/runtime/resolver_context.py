# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Resolver context: the entry point for producing a resolved configuration.

A ResolverContext owns the engine registry (and through it the Vault token
cache) and the resolver settings. Build one at process start and pass it to
every resolution call; nothing is kept in module globals.

Example:
    >>> context = ResolverContext()
    >>> tree = context.resolve([
    ...     {"db": {"host": "localhost", "url": "jdbc://${db.host}:5432"}},
    ...     {"db": {"password": "encrypted:noop!changeme"}},
    ... ])
    >>> tree["db"]["url"], tree["db"]["password"]
    ('jdbc://localhost:5432', 'changeme')
"""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping, Sequence

from configweave.engines import EngineRegistry
from configweave.engines.vault import ModelVaultConfig
from configweave.enums import EnumSecretBackendType
from configweave.errors import BackendConfigurationError
from configweave.models import ModelResolverConfig
from configweave.runtime.config_merger import merge_fragments
from configweave.runtime.placeholder_resolver import PlaceholderResolver
from configweave.runtime.profile_loader import (
    ProtocolFragmentSource,
    active_profiles,
    load_fragments,
)
from configweave.types import ConfigTree, ConfigValue

logger = logging.getLogger(__name__)


class ResolverContext:
    """Settings plus engine registry shared by resolution calls.

    Args:
        config: Resolver settings (defaults when None)
        registry: Engine registry; a registry with the built-in engines is
            created when None
        static_values: Mapping served by the ``static`` engine when the
            registry is created here
    """

    def __init__(
        self,
        config: ModelResolverConfig | None = None,
        registry: EngineRegistry | None = None,
        static_values: Mapping[str, str] | None = None,
    ) -> None:
        self._config = config or ModelResolverConfig()
        if registry is None:
            registry = EngineRegistry.with_builtin_engines(
                static_values=static_values,
                timeout_seconds=self._config.timeout_seconds,
            )
        self._registry = registry

    @property
    def config(self) -> ModelResolverConfig:
        return self._config

    @property
    def registry(self) -> EngineRegistry:
        return self._registry

    def resolve(
        self,
        fragments: Sequence[Mapping[object, object] | None],
        environ: Mapping[str, str] | None = None,
    ) -> ConfigTree:
        """Merge fragments and resolve placeholders and secret references.

        Vault settings found in the merged tree are registered first, so
        ``encrypted:vault!...`` references in the same tree can use them.

        Args:
            fragments: Parsed fragments, lowest precedence first
            environ: Environment for placeholders and VAULT_TOKEN (process
                env when None)

        Returns:
            Fully resolved tree

        Raises:
            ConfigResolutionError: The first failure encountered. No partial
                tree is returned.
        """
        env = os.environ if environ is None else environ
        tree = merge_fragments(fragments)
        self._register_vault_from_tree(tree, env)
        resolver = PlaceholderResolver(
            self._registry,
            environ=env,
            strict=self._config.strict_placeholders,
        )
        return resolver.resolve(tree)

    def load_properties(
        self,
        names: Sequence[str],
        source: ProtocolFragmentSource,
        environ: Mapping[str, str] | None = None,
    ) -> ConfigTree:
        """Load ``names`` plus their active-profile variants, then resolve."""
        env = os.environ if environ is None else environ
        profiles = active_profiles(env, self._config.profiles_env_var)
        logger.info(
            "Loading configuration",
            extra={"names": list(names), "profiles": profiles},
        )
        return self.resolve(load_fragments(names, source, profiles), env)

    def _register_vault_from_tree(
        self, tree: ConfigTree, environ: Mapping[str, str]
    ) -> None:
        if not self._config.register_vault_from_tree:
            return
        if self._registry.is_registered(EnumSecretBackendType.VAULT.value):
            return
        settings = _lookup_mapping(tree, self._config.vault_config_path)
        if settings is None:
            return

        try:
            vault_config = ModelVaultConfig.from_tree(settings)
            if not vault_config.enabled:
                logger.info("Vault secrets disabled, vault engine not registered")
                return
            self._registry.register_vault(vault_config, environ=environ)
        except BackendConfigurationError as e:
            # The engine stays unavailable; vault references then fail as
            # unregistered.
            logger.error(
                "Vault secret engine not registered",
                extra={"reason": e.message, "error_code": e.error_code.value},
            )


def _lookup_mapping(tree: ConfigTree, dotted_path: str) -> dict[str, ConfigValue] | None:
    node: ConfigValue = tree
    for segment in dotted_path.split("."):
        if not isinstance(node, dict) or segment not in node:
            return None
        node = node[segment]
    return node if isinstance(node, dict) else None


def resolve(
    fragments: Sequence[Mapping[object, object] | None],
    context: ResolverContext | None = None,
    environ: Mapping[str, str] | None = None,
) -> ConfigTree:
    """Resolve fragments with ``context`` (a default context when None)."""
    return (context or ResolverContext()).resolve(fragments, environ)


def load_properties(
    names: Sequence[str],
    source: ProtocolFragmentSource,
    context: ResolverContext | None = None,
    environ: Mapping[str, str] | None = None,
) -> ConfigTree:
    """Load and resolve named fragments with ``context`` (a default context when None)."""
    return (context or ResolverContext()).load_properties(names, source, environ)


__all__ = ["ResolverContext", "load_properties", "resolve"]
