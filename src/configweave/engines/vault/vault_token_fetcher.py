# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Vault token fetchers, one per auth method.

The fetcher is chosen once when the Vault engine is registered. Each one
returns a bearer token or raises SecretAuthenticationError whose message
starts with ``error fetching vault token - ``.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from pathlib import Path
from typing import Final, Protocol

from pydantic import SecretStr

from configweave.engines.vault.model_vault_config import (
    VAULT_TOKEN_ENV_VAR,
    ModelVaultConfig,
)
from configweave.engines.vault.vault_client import ProtocolVaultClient, VaultResponse
from configweave.enums import EnumSecretBackendType, EnumVaultAuthMethod
from configweave.errors import (
    ConfigResolutionError,
    ModelConfigErrorContext,
    SecretAuthenticationError,
)

logger = logging.getLogger(__name__)

SERVICE_ACCOUNT_TOKEN_PATH: Final[str] = (
    "/var/run/secrets/kubernetes.io/serviceaccount/token"
)
TOKEN_ERROR_PREFIX: Final[str] = "error fetching vault token - "


class ProtocolTokenFetcher(Protocol):
    def fetch_token(self, client: ProtocolVaultClient) -> str: ...


def _auth_error(
    detail: str, operation: str, target_name: str | None = None
) -> SecretAuthenticationError:
    return SecretAuthenticationError(
        f"{TOKEN_ERROR_PREFIX}{detail}",
        context=ModelConfigErrorContext(
            backend_type=EnumSecretBackendType.VAULT,
            operation=operation,
            target_name=target_name,
        ),
    )


def _extract_client_token(response: VaultResponse, login_path: str) -> str:
    auth = response.get("auth")
    token = auth.get("client_token") if isinstance(auth, dict) else None
    if not isinstance(token, str) or not token:
        raise _auth_error(f"no client token in login response from {login_path}", "login", login_path)
    return token


def _login(client: ProtocolVaultClient, login_path: str, payload: dict[str, str]) -> str:
    try:
        response = client.login(login_path, payload)
    except ConfigResolutionError as e:
        raise _auth_error(str(e), "login", login_path) from e
    return _extract_client_token(response, login_path)


class EnvironmentTokenFetcher:
    """TOKEN method: read the bearer token from the environment."""

    def __init__(self, environ: Mapping[str, str], env_var: str = VAULT_TOKEN_ENV_VAR) -> None:
        self._environ = environ
        self._env_var = env_var

    def fetch_token(self, client: ProtocolVaultClient) -> str:
        token = self._environ.get(self._env_var, "")
        if not token:
            raise _auth_error(f"{self._env_var} environment variable not set", "fetch_token")
        return token


class KubernetesTokenFetcher:
    """KUBERNETES method: exchange the pod's service-account JWT for a token."""

    def __init__(
        self,
        role: str,
        mount_path: str,
        token_path: str = SERVICE_ACCOUNT_TOKEN_PATH,
    ) -> None:
        self._role = role
        self._mount_path = mount_path
        self._token_path = token_path

    def fetch_token(self, client: ProtocolVaultClient) -> str:
        try:
            jwt = Path(self._token_path).read_text(encoding="utf-8").strip()
        except OSError as e:
            raise _auth_error(
                f"unable to read service account token from {self._token_path}",
                "read_service_account_token",
                self._token_path,
            ) from e

        login_path = f"auth/{self._mount_path}/login"
        logger.debug(
            "Exchanging service account token with Vault",
            extra={"login_path": login_path, "role": self._role},
        )
        return _login(client, login_path, {"role": self._role, "jwt": jwt})


class UserpassTokenFetcher:
    """USERPASS method: log in with username and password."""

    def __init__(self, username: str, password: SecretStr, mount_path: str) -> None:
        self._username = username
        self._password = password
        self._mount_path = mount_path

    def fetch_token(self, client: ProtocolVaultClient) -> str:
        login_path = f"auth/{self._mount_path}/login/{self._username}"
        logger.debug(
            "Logging in to Vault with username and password",
            extra={"login_path": login_path},
        )
        return _login(client, login_path, {"password": self._password.get_secret_value()})


def create_token_fetcher(
    config: ModelVaultConfig,
    method: EnumVaultAuthMethod,
    environ: Mapping[str, str],
) -> ProtocolTokenFetcher:
    """Select the fetcher for a validated config."""
    if method is EnumVaultAuthMethod.KUBERNETES:
        return KubernetesTokenFetcher(role=config.role, mount_path=config.path)
    if method is EnumVaultAuthMethod.USERPASS:
        assert config.password is not None  # checked by validate_for_registration
        return UserpassTokenFetcher(
            username=config.username,
            password=config.password,
            mount_path=config.user_auth_path,
        )
    return EnvironmentTokenFetcher(environ)


__all__ = [
    "SERVICE_ACCOUNT_TOKEN_PATH",
    "TOKEN_ERROR_PREFIX",
    "EnvironmentTokenFetcher",
    "KubernetesTokenFetcher",
    "ProtocolTokenFetcher",
    "UserpassTokenFetcher",
    "create_token_fetcher",
]
