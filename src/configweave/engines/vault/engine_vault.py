# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""HashiCorp Vault engine.

``encrypted:vault!e:<secrets engine>!p:<path>!k:<key>[!b:true]``

``n`` is accepted as a deprecated alias of ``p``. ``b:true`` marks the stored
value as base64 and decodes it before use, which is how binary files are kept
in Vault.

Token lifecycle:
    The engine owns one cached bearer token guarded by a ``threading.Lock``.
    The first decrypt fetches it with the auth method's token fetcher. When a
    read is rejected with HTTP 403 the token is refreshed once and the read
    retried once; a second rejection is surfaced. Token values never appear in
    logs or error messages.

Versioned K/V:
    Reads go to ``<engine>/<path>`` first. If Vault answers with the
    "Invalid path for a versioned K/V secrets engine" warning, the read is
    repeated at ``<engine>/data/<path>`` and the extra ``data`` level unwrapped.
"""

from __future__ import annotations

import base64
import binascii
import json
import logging
import os
import threading
from collections.abc import Mapping
from typing import Final

from configweave.engines.secret_reference_parser import parse_params
from configweave.engines.util_temp_file import write_temp_file
from configweave.engines.vault.model_vault_config import ModelVaultConfig
from configweave.engines.vault.vault_client import (
    HvacVaultClient,
    ProtocolVaultClient,
    VaultResponse,
)
from configweave.engines.vault.vault_token_fetcher import (
    ProtocolTokenFetcher,
    create_token_fetcher,
)
from configweave.enums import EnumSecretBackendType, EnumVaultAuthMethod
from configweave.errors import (
    ModelConfigErrorContext,
    SecretFetchError,
    SecretKeyNotFoundError,
    SecretReferenceError,
    VaultForbiddenError,
)

logger = logging.getLogger(__name__)

VERSIONED_KV_WARNING: Final[str] = "Invalid path for a versioned K/V secrets engine"

_VAULT_PARAMS: Final[tuple[str, ...]] = ("e", "p", "n", "k", "b")


class VaultEngine:
    """Registered Vault backend: config, token cache and fetch logic.

    Thread Safety:
        ``_lock`` protects the cached token read/check/write sequence. Reads
        themselves run outside the lock.
    """

    def __init__(
        self,
        config: ModelVaultConfig,
        auth_method: EnumVaultAuthMethod,
        token_fetcher: ProtocolTokenFetcher,
        client: ProtocolVaultClient,
    ) -> None:
        self._config = config
        self._auth_method = auth_method
        self._token_fetcher = token_fetcher
        self._client = client
        self._token: str | None = (
            config.token.get_secret_value() if config.token is not None else None
        )
        self._lock = threading.Lock()

    @classmethod
    def from_config(
        cls,
        config: ModelVaultConfig,
        environ: Mapping[str, str] | None = None,
        client: ProtocolVaultClient | None = None,
    ) -> VaultEngine:
        """Validate ``config`` and build the engine.

        Raises:
            BackendConfigurationError: If the config is incomplete for its auth method.
        """
        env = os.environ if environ is None else environ
        method = config.validate_for_registration(env)
        return cls(
            config=config,
            auth_method=method,
            token_fetcher=create_token_fetcher(config, method, env),
            client=client or HvacVaultClient(config),
        )

    @property
    def auth_method(self) -> EnumVaultAuthMethod:
        return self._auth_method

    @property
    def url(self) -> str:
        return self._config.url

    # === Token cache ===

    def get_token(self) -> str:
        """Return the cached token, fetching one if none is cached."""
        with self._lock:
            if not self._token:
                self._token = self._token_fetcher.fetch_token(self._client)
                logger.info(
                    "Fetched Vault token",
                    extra={"auth_method": self._auth_method.value, "vault_url": self.url},
                )
            return self._token

    def refresh_token(self, rejected_token: str) -> str:
        """Replace a token Vault rejected.

        If another caller already replaced ``rejected_token`` the newer cached
        token is returned without a second fetch.
        """
        with self._lock:
            if not self._token or self._token == rejected_token:
                self._token = None
                self._token = self._token_fetcher.fetch_token(self._client)
                logger.info(
                    "Refreshed Vault token after authorization failure",
                    extra={"auth_method": self._auth_method.value, "vault_url": self.url},
                )
            return self._token

    def invalidate_token(self) -> None:
        with self._lock:
            self._token = None

    def has_token(self) -> bool:
        with self._lock:
            return bool(self._token)

    # === Fetch ===

    def fetch_secret(self, token: str, engine: str, path: str, key: str) -> str:
        """Read ``key`` from ``<engine>/<path>`` with versioned K/V fallback.

        Raises:
            VaultForbiddenError: Token rejected
            SecretFetchError: Nothing at the path
            SecretKeyNotFoundError: Path exists but lacks ``key``
            SecretBackendConnectionError: Server unreachable or response unparsable
        """
        response = self._read(token, engine, f"{engine}/{path}", path)
        data = response.get("data")

        if _has_versioned_warning(response):
            logger.debug(
                "Retrying Vault read against versioned K/V layout",
                extra={"engine": engine, "path": path},
            )
            response = self._read(token, engine, f"{engine}/data/{path}", path)
            outer = response.get("data")
            data = outer.get("data") if isinstance(outer, dict) else None

        secret_data = data if isinstance(data, dict) else {}
        if key not in secret_data:
            raise SecretKeyNotFoundError(
                f"error fetching secret from vault - key {key!r} not found at "
                f"path {path!r} under engine {engine!r}; "
                f"available keys: {', '.join(sorted(map(str, secret_data))) or 'none'}",
                available_keys=[str(k) for k in secret_data],
                context=_vault_context("fetch_secret", f"{engine}/{path}"),
            )
        value = secret_data[key]
        return value if isinstance(value, str) else json.dumps(value)

    def _read(self, token: str, engine: str, full_path: str, path: str) -> VaultResponse:
        response = self._client.read(full_path, token)
        if response is None:
            raise SecretFetchError(
                f"couldn't find vault path {path} under engine {engine}",
                context=_vault_context("fetch_secret", full_path),
            )
        return response

    def decrypt(self, engine: str, path: str, key: str) -> str:
        """Fetch a secret, refreshing the token and retrying once on HTTP 403."""
        token = self.get_token()
        try:
            return self.fetch_secret(token, engine, path, key)
        except VaultForbiddenError:
            logger.warning(
                "Vault rejected token, refreshing and retrying once",
                extra={"engine": engine, "path": path, "vault_url": self.url},
            )
        token = self.refresh_token(token)
        return self.fetch_secret(token, engine, path, key)

    def new_decrypter(self, is_file: bool, raw_params: str) -> VaultDecrypter:
        return VaultDecrypter(self, is_file, raw_params)


class VaultDecrypter:
    """One ``encrypted:vault!...`` reference bound to a VaultEngine."""

    def __init__(self, vault: VaultEngine, is_file: bool, raw_params: str) -> None:
        params = parse_params(
            raw_params,
            allowed=_VAULT_PARAMS,
            engine=EnumSecretBackendType.VAULT.value,
        )
        context = _vault_context("parse_reference", None)
        if not params.get("e"):
            raise SecretReferenceError(
                "secret format error - 'e' for engine is required", context=context
            )
        path = params.get("p") or params.get("n")
        if not path:
            raise SecretReferenceError(
                "secret format error - 'p' for path is required "
                "(replaces deprecated 'n' param)",
                context=context,
            )
        if not params.get("k"):
            raise SecretReferenceError(
                "secret format error - 'k' for key is required", context=context
            )
        if "n" in params and "p" not in params:
            logger.warning(
                "Vault secret reference uses deprecated 'n' parameter, use 'p' instead",
                extra={"engine": params["e"]},
            )

        self._vault = vault
        self._is_file = is_file
        self.engine = params["e"]
        self.path = path
        self.key = params["k"]
        self.base64_encoded = params.get("b", "").lower() == "true"

    def decrypt(self) -> str:
        value = self._vault.decrypt(self.engine, self.path, self.key)
        if not self.base64_encoded:
            return write_temp_file(value) if self._is_file else value

        target = f"{self.engine}/{self.path}"
        try:
            payload = base64.b64decode(value, validate=True)
        except (binascii.Error, ValueError) as e:
            raise SecretFetchError(
                f"vault secret {target} key {self.key!r} is not valid base64",
                context=_vault_context("decode", target),
            ) from e
        if self._is_file:
            return write_temp_file(payload)
        try:
            return payload.decode("utf-8")
        except UnicodeDecodeError as e:
            raise SecretFetchError(
                f"vault secret {target} key {self.key!r} is binary, use encryptedFile",
                context=_vault_context("decode", target),
            ) from e

    def is_file(self) -> bool:
        return self._is_file


def _has_versioned_warning(response: VaultResponse) -> bool:
    warnings = response.get("warnings")
    if not isinstance(warnings, list):
        return False
    return any(isinstance(w, str) and VERSIONED_KV_WARNING in w for w in warnings)


def _vault_context(operation: str, target_name: str | None) -> ModelConfigErrorContext:
    return ModelConfigErrorContext(
        backend_type=EnumSecretBackendType.VAULT,
        operation=operation,
        target_name=target_name,
    )


__all__ = ["VERSIONED_KV_WARNING", "VaultDecrypter", "VaultEngine"]
