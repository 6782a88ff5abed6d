# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Shared fixtures for configweave tests.

Fixtures:
    static_values: Mapping served by the static engine
    registry: EngineRegistry with the built-in engines
    context: ResolverContext built on ``registry``
    vault_client: MagicMock standing in for ProtocolVaultClient
    vault_settings: Minimal valid TOKEN-method Vault settings (camelCase keys)
"""

from __future__ import annotations

from unittest.mock import MagicMock

import pytest

from configweave.engines import EngineRegistry
from configweave.engines.vault import ProtocolVaultClient
from configweave.runtime import ResolverContext


@pytest.fixture
def static_values() -> dict[str, str]:
    return {"db-password": "hunter2", "api-key": "abc123"}


@pytest.fixture
def registry(static_values: dict[str, str]) -> EngineRegistry:
    return EngineRegistry.with_builtin_engines(static_values=static_values)


@pytest.fixture
def context(registry: EngineRegistry) -> ResolverContext:
    return ResolverContext(registry=registry)


@pytest.fixture
def vault_client() -> MagicMock:
    """Provide a mocked Vault client adapter."""
    client = MagicMock(spec=ProtocolVaultClient)
    client.url = "https://vault.example.com:8200"
    return client


@pytest.fixture
def vault_settings() -> dict[str, str]:
    return {
        "enabled": "true",
        "url": "https://vault.example.com:8200",
        "authMethod": "TOKEN",
        "token": "s.preset-token",
    }
