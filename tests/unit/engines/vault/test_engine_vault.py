# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Unit tests for VaultEngine and VaultDecrypter.

The Vault client is a mock of ProtocolVaultClient; token fetchers are mocks
too, so these tests cover the token cache, the 403 refresh-and-retry rule,
versioned K/V fallback and parameter handling without any network.
"""

from __future__ import annotations

import base64
import logging
from pathlib import Path
from unittest.mock import MagicMock

import pytest

from configweave.engines.vault import (
    VERSIONED_KV_WARNING,
    EnvironmentTokenFetcher,
    ModelVaultConfig,
    VaultDecrypter,
    VaultEngine,
)
from configweave.enums import EnumVaultAuthMethod
from configweave.errors import (
    BackendConfigurationError,
    SecretFetchError,
    SecretKeyNotFoundError,
    SecretReferenceError,
    VaultForbiddenError,
)


@pytest.fixture
def token_fetcher() -> MagicMock:
    fetcher = MagicMock()
    fetcher.fetch_token.side_effect = ["s.first", "s.second", "s.third"]
    return fetcher


@pytest.fixture
def vault(vault_client: MagicMock, token_fetcher: MagicMock) -> VaultEngine:
    config = ModelVaultConfig.from_tree(
        {"enabled": "true", "url": vault_client.url, "authMethod": "KUBERNETES", "role": "r", "path": "k8s"}
    )
    return VaultEngine(
        config=config,
        auth_method=EnumVaultAuthMethod.KUBERNETES,
        token_fetcher=token_fetcher,
        client=vault_client,
    )


def _forbidden() -> VaultForbiddenError:
    return VaultForbiddenError("Vault operation forbidden - check token permissions")


class TestVaultEngineFromConfig:
    def test_builds_with_env_token_fetcher(
        self, vault_settings: dict[str, str], vault_client: MagicMock
    ) -> None:
        engine = VaultEngine.from_config(
            ModelVaultConfig.from_tree(vault_settings), environ={}, client=vault_client
        )

        assert engine.auth_method is EnumVaultAuthMethod.TOKEN
        assert engine.has_token()
        assert engine.get_token() == "s.preset-token"

    def test_invalid_config_rejected(self, vault_client: MagicMock) -> None:
        config = ModelVaultConfig.from_tree({"enabled": "true", "url": "u"})
        with pytest.raises(BackendConfigurationError, match="auth method required"):
            VaultEngine.from_config(config, environ={}, client=vault_client)

    def test_env_token_used_when_no_preset(self, vault_client: MagicMock) -> None:
        config = ModelVaultConfig.from_tree(
            {"enabled": "true", "url": "u", "authMethod": "TOKEN"}
        )
        engine = VaultEngine.from_config(
            config, environ={"VAULT_TOKEN": "s.env"}, client=vault_client
        )
        assert not engine.has_token()
        assert engine.get_token() == "s.env"


class TestVaultTokenCache:
    """Token fetch, reuse and refresh."""

    def test_token_fetched_once_and_cached(
        self, vault: VaultEngine, vault_client: MagicMock, token_fetcher: MagicMock
    ) -> None:
        vault_client.read.return_value = {"data": {"password": "pw"}}

        assert vault.decrypt("secret", "db", "password") == "pw"
        assert vault.decrypt("secret", "db", "password") == "pw"

        token_fetcher.fetch_token.assert_called_once_with(vault_client)
        assert [c.args[1] for c in vault_client.read.call_args_list] == ["s.first", "s.first"]

    def test_refresh_skipped_when_token_already_replaced(
        self, vault: VaultEngine, token_fetcher: MagicMock
    ) -> None:
        assert vault.get_token() == "s.first"
        assert vault.refresh_token("s.first") == "s.second"
        assert vault.refresh_token("s.first") == "s.second"
        assert token_fetcher.fetch_token.call_count == 2

    def test_invalidate(self, vault: VaultEngine) -> None:
        vault.get_token()
        vault.invalidate_token()
        assert not vault.has_token()
        assert vault.get_token() == "s.second"


class TestVaultForbiddenRetry:
    def test_single_refresh_and_retry(
        self, vault: VaultEngine, vault_client: MagicMock, token_fetcher: MagicMock
    ) -> None:
        vault_client.read.side_effect = [_forbidden(), {"data": {"password": "pw"}}]

        assert vault.decrypt("secret", "db", "password") == "pw"

        assert token_fetcher.fetch_token.call_count == 2
        assert [c.args[1] for c in vault_client.read.call_args_list] == ["s.first", "s.second"]

    def test_second_forbidden_surfaced(
        self, vault: VaultEngine, vault_client: MagicMock, token_fetcher: MagicMock
    ) -> None:
        vault_client.read.side_effect = [_forbidden(), _forbidden()]

        with pytest.raises(VaultForbiddenError):
            vault.decrypt("secret", "db", "password")

        assert vault_client.read.call_count == 2
        assert token_fetcher.fetch_token.call_count == 2

    def test_other_errors_not_retried(
        self, vault: VaultEngine, vault_client: MagicMock, token_fetcher: MagicMock
    ) -> None:
        vault_client.read.return_value = None

        with pytest.raises(SecretFetchError):
            vault.decrypt("secret", "db", "password")

        assert vault_client.read.call_count == 1
        token_fetcher.fetch_token.assert_called_once()

    def test_token_never_logged(
        self,
        vault: VaultEngine,
        vault_client: MagicMock,
        caplog: pytest.LogCaptureFixture,
    ) -> None:
        vault_client.read.side_effect = [_forbidden(), {"data": {"password": "pw"}}]

        with caplog.at_level(logging.DEBUG):
            vault.decrypt("secret", "db", "password")

        assert "s.first" not in caplog.text
        assert "s.second" not in caplog.text


class TestVaultFetchSecret:
    """Response shapes: plain K/V, versioned K/V, missing paths and keys."""

    def test_versioned_kv_fallback(self, vault: VaultEngine, vault_client: MagicMock) -> None:
        vault_client.read.side_effect = [
            {"warnings": [f"{VERSIONED_KV_WARNING}; use data/ prefix"]},
            {"data": {"data": {"password": "v2-pw"}, "metadata": {"version": 3}}},
        ]

        assert vault.fetch_secret("s.t", "secret", "app/db", "password") == "v2-pw"
        assert [c.args[0] for c in vault_client.read.call_args_list] == [
            "secret/app/db",
            "secret/data/app/db",
        ]

    def test_unrelated_warning_does_not_retry(
        self, vault: VaultEngine, vault_client: MagicMock
    ) -> None:
        vault_client.read.return_value = {"warnings": ["something else"], "data": {"k": "v"}}
        assert vault.fetch_secret("s.t", "secret", "p", "k") == "v"
        assert vault_client.read.call_count == 1

    def test_missing_path(self, vault: VaultEngine, vault_client: MagicMock) -> None:
        vault_client.read.return_value = None
        with pytest.raises(SecretFetchError, match="couldn't find vault path db under engine secret"):
            vault.fetch_secret("s.t", "secret", "db", "password")

    def test_missing_key_names_engine_and_path(
        self, vault: VaultEngine, vault_client: MagicMock
    ) -> None:
        vault_client.read.return_value = {"data": {"user": "admin", "host": "db"}}

        with pytest.raises(SecretKeyNotFoundError) as exc_info:
            vault.fetch_secret("s.t", "secret", "db", "password")

        message = str(exc_info.value)
        assert "'password'" in message
        assert "path 'db'" in message
        assert "engine 'secret'" in message
        assert "available keys: host, user" in message
        assert "admin" not in message

    def test_non_string_value_serialized(self, vault: VaultEngine, vault_client: MagicMock) -> None:
        vault_client.read.return_value = {"data": {"ports": [1, 2], "debug": True}}
        assert vault.fetch_secret("s.t", "secret", "p", "ports") == "[1, 2]"
        assert vault.fetch_secret("s.t", "secret", "p", "debug") == "true"


class TestVaultDecrypter:
    """Reference parameters and decoding."""

    @pytest.mark.parametrize(
        ("raw", "message"),
        [
            ("p:db!k:password", "'e' for engine is required"),
            ("e:secret!k:password", "'p' for path is required"),
            ("e:secret!p:db", "'k' for key is required"),
        ],
    )
    def test_required_params(self, raw: str, message: str, vault: VaultEngine) -> None:
        with pytest.raises(SecretReferenceError, match=message):
            VaultDecrypter(vault, False, raw)

    def test_unknown_param_rejected(self, vault: VaultEngine) -> None:
        with pytest.raises(SecretReferenceError, match="invalid key 'x'"):
            VaultDecrypter(vault, False, "e:secret!p:db!k:password!x:1")

    def test_deprecated_n_alias(
        self, vault: VaultEngine, caplog: pytest.LogCaptureFixture
    ) -> None:
        with caplog.at_level(logging.WARNING):
            decrypter = VaultDecrypter(vault, False, "e:secret!n:db!k:password")

        assert decrypter.path == "db"
        assert "deprecated 'n'" in caplog.text

    def test_p_wins_over_n(self, vault: VaultEngine) -> None:
        decrypter = VaultDecrypter(vault, False, "e:secret!n:old!p:new!k:password")
        assert decrypter.path == "new"

    def test_plain_value(self, vault: VaultEngine, vault_client: MagicMock) -> None:
        vault_client.read.return_value = {"data": {"password": "pw"}}
        decrypter = vault.new_decrypter(False, "e:secret!p:db!k:password")

        assert decrypter.decrypt() == "pw"
        assert not decrypter.is_file()

    def test_base64_value(self, vault: VaultEngine, vault_client: MagicMock) -> None:
        encoded = base64.b64encode(b"decoded-pw").decode("ascii")
        vault_client.read.return_value = {"data": {"password": encoded}}

        decrypter = VaultDecrypter(vault, False, "e:secret!p:db!k:password!b:true")

        assert decrypter.base64_encoded
        assert decrypter.decrypt() == "decoded-pw"

    def test_invalid_base64(self, vault: VaultEngine, vault_client: MagicMock) -> None:
        vault_client.read.return_value = {"data": {"password": "not base64!!"}}
        with pytest.raises(SecretFetchError, match="not valid base64"):
            VaultDecrypter(vault, False, "e:secret!p:db!k:password!b:true").decrypt()

    def test_binary_file(self, vault: VaultEngine, vault_client: MagicMock) -> None:
        payload = b"\x00\x01keystore"
        vault_client.read.return_value = {
            "data": {"jks": base64.b64encode(payload).decode("ascii")}
        }

        path = VaultDecrypter(vault, True, "e:secret!p:certs!k:jks!b:true").decrypt()

        assert Path(path).read_bytes() == payload
        Path(path).unlink()

    def test_env_token_fetcher_integration(self, vault_client: MagicMock) -> None:
        config = ModelVaultConfig.from_tree(
            {"enabled": "true", "url": "u", "authMethod": "TOKEN"}
        )
        engine = VaultEngine(
            config,
            EnumVaultAuthMethod.TOKEN,
            EnvironmentTokenFetcher({"VAULT_TOKEN": "s.env"}),
            vault_client,
        )
        vault_client.read.return_value = {"data": {"k": "v"}}

        assert engine.new_decrypter(False, "e:secret!p:p!k:k").decrypt() == "v"
        vault_client.read.assert_called_once_with("secret/p", "s.env")
