# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""HashiCorp Vault secret engine.

- ModelVaultConfig: settings, validated once at registration
- VaultEngine: token cache, versioned K/V reads, 403 refresh-and-retry
- Token fetchers for the TOKEN, KUBERNETES and USERPASS auth methods
- HvacVaultClient: hvac-backed client adapter
"""

from configweave.engines.vault.engine_vault import (
    VERSIONED_KV_WARNING,
    VaultDecrypter,
    VaultEngine,
)
from configweave.engines.vault.model_vault_config import (
    VAULT_TOKEN_ENV_VAR,
    ModelVaultConfig,
)
from configweave.engines.vault.vault_client import (
    HvacVaultClient,
    ProtocolVaultClient,
    connection_error_message,
)
from configweave.engines.vault.vault_token_fetcher import (
    SERVICE_ACCOUNT_TOKEN_PATH,
    EnvironmentTokenFetcher,
    KubernetesTokenFetcher,
    ProtocolTokenFetcher,
    UserpassTokenFetcher,
    create_token_fetcher,
)

__all__ = [
    "SERVICE_ACCOUNT_TOKEN_PATH",
    "VAULT_TOKEN_ENV_VAR",
    "VERSIONED_KV_WARNING",
    "EnvironmentTokenFetcher",
    "HvacVaultClient",
    "KubernetesTokenFetcher",
    "ModelVaultConfig",
    "ProtocolTokenFetcher",
    "ProtocolVaultClient",
    "UserpassTokenFetcher",
    "VaultDecrypter",
    "VaultEngine",
    "connection_error_message",
    "create_token_fetcher",
]
