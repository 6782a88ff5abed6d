# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Vault client adapter.

VaultEngine talks to Vault through :class:`ProtocolVaultClient`, a narrow
read/login capability. :class:`HvacVaultClient` implements it with hvac and
turns transport outcomes into structured errors:

- HTTP 403 -> :class:`VaultForbiddenError` (drives the token refresh path)
- HTTP 404 -> ``None``, or the response body when it carries warnings
- unreachable server or unparsable body -> :class:`SecretBackendConnectionError`
  naming the configured URL
"""

from __future__ import annotations

import logging
from typing import Protocol

import hvac
import hvac.exceptions
import requests

from configweave.engines.vault.model_vault_config import ModelVaultConfig
from configweave.enums import EnumSecretBackendType
from configweave.errors import (
    ModelConfigErrorContext,
    SecretAuthenticationError,
    SecretBackendConnectionError,
    SecretFetchError,
    VaultForbiddenError,
)

logger = logging.getLogger(__name__)

type VaultResponse = dict[str, object]


class ProtocolVaultClient(Protocol):
    """Minimal Vault capability used by the Vault engine."""

    @property
    def url(self) -> str:
        """Configured server URL, used in diagnostics."""
        ...

    def read(self, path: str, token: str) -> VaultResponse | None:
        """Read a logical path.

        Returns:
            The response body, or None when nothing exists at ``path``.
            A body may carry ``warnings`` and no ``data``.

        Raises:
            VaultForbiddenError: The token was rejected (HTTP 403).
            SecretBackendConnectionError: Server unreachable or body unparsable.
            SecretFetchError: Any other Vault error.
        """
        ...

    def login(self, path: str, payload: dict[str, str]) -> VaultResponse:
        """Write credentials to an auth login path without a token.

        Raises:
            SecretAuthenticationError: Vault rejected the login.
            SecretBackendConnectionError: Server unreachable or body unparsable.
        """
        ...


def connection_error_message(url: str) -> str:
    return f"error fetching secret from vault - check connection to the server: {url}"


class HvacVaultClient:
    """ProtocolVaultClient backed by ``hvac.Client``.

    A fresh hvac client is built per call so that concurrent reads with
    different tokens never share mutable client state.
    """

    def __init__(self, config: ModelVaultConfig) -> None:
        self._config = config

    @property
    def url(self) -> str:
        return self._config.url

    def _create_hvac_client(self, token: str | None = None) -> hvac.Client:
        return hvac.Client(
            url=self._config.url,
            token=token,
            namespace=self._config.namespace,
            verify=self._config.verify_ssl,
            timeout=self._config.timeout_seconds,
        )

    def _context(self, operation: str, path: str) -> ModelConfigErrorContext:
        return ModelConfigErrorContext(
            backend_type=EnumSecretBackendType.VAULT,
            operation=operation,
            target_name=path,
        )

    def _json_body(
        self, response: VaultResponse | requests.Response, operation: str, path: str
    ) -> VaultResponse | None:
        """Return the parsed body, or None when the server sent no content.

        hvac's JSON adapter only parses 200 responses and hands back the raw
        ``requests.Response`` otherwise, including a 200 whose body is not
        JSON (a proxy login page, for instance).

        Raises:
            SecretBackendConnectionError: If a body is present but is not a
                JSON object.
        """
        if isinstance(response, dict):
            return response
        if response.status_code == 204 or not response.content:
            return None
        logger.warning(
            "Vault returned a response that is not JSON",
            extra={
                "vault_url": self.url,
                "operation": operation,
                "status_code": response.status_code,
                "content_type": response.headers.get("Content-Type", ""),
            },
        )
        raise SecretBackendConnectionError(
            connection_error_message(self.url),
            context=self._context(operation, path),
            status=response.status_code,
        )

    def read(self, path: str, token: str) -> VaultResponse | None:
        client = self._create_hvac_client(token)
        try:
            response = client.adapter.get(f"/v1/{path}")
        except hvac.exceptions.Forbidden as e:
            raise VaultForbiddenError(
                "Vault operation forbidden - check token permissions",
                context=self._context("read", path),
                secret_path=path,
            ) from e
        except hvac.exceptions.InvalidPath as e:
            # A KV v1 style read against a v2 mount is a 404 whose body holds
            # the warning that tells us to retry under data/.
            body = getattr(e, "json", None)
            if isinstance(body, dict) and body.get("warnings"):
                return body
            return None
        except hvac.exceptions.VaultError as e:
            raise SecretFetchError(
                f"vault read failed at {path}: {type(e).__name__}",
                context=self._context("read", path),
            ) from e
        except requests.exceptions.RequestException as e:
            raise SecretBackendConnectionError(
                connection_error_message(self.url),
                context=self._context("read", path),
            ) from e

        return self._json_body(response, "read", path)

    def login(self, path: str, payload: dict[str, str]) -> VaultResponse:
        client = self._create_hvac_client()
        try:
            response = client.adapter.post(f"/v1/{path}", json=payload)
        except (hvac.exceptions.Forbidden, hvac.exceptions.InvalidRequest) as e:
            raise SecretAuthenticationError(
                f"vault login rejected at {path}",
                context=self._context("login", path),
            ) from e
        except hvac.exceptions.VaultError as e:
            raise SecretAuthenticationError(
                f"vault login failed at {path}: {type(e).__name__}",
                context=self._context("login", path),
            ) from e
        except requests.exceptions.RequestException as e:
            raise SecretBackendConnectionError(
                connection_error_message(self.url),
                context=self._context("login", path),
            ) from e

        body = self._json_body(response, "login", path)
        if body is None:
            raise SecretAuthenticationError(
                f"vault login at {path} returned no body",
                context=self._context("login", path),
            )
        return body


__all__ = [
    "HvacVaultClient",
    "ProtocolVaultClient",
    "VaultResponse",
    "connection_error_message",
]
