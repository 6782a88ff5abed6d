# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Unit tests for HvacVaultClient.

Most tests patch hvac.Client; TestHvacVaultClientHttp runs the real hvac
adapter against a local HTTP server to cover non-JSON responses.
"""

from __future__ import annotations

from collections.abc import Iterator
from unittest.mock import MagicMock, patch

import hvac.exceptions
import pytest
import requests
from pytest_httpserver import HTTPServer

from configweave.engines.vault import (
    VERSIONED_KV_WARNING,
    HvacVaultClient,
    ModelVaultConfig,
    connection_error_message,
)
from configweave.errors import (
    SecretAuthenticationError,
    SecretBackendConnectionError,
    SecretFetchError,
    VaultForbiddenError,
)

VAULT_URL = "https://vault.example.com:8200"


def _raw_response(status_code: int, content: bytes) -> requests.Response:
    response = requests.Response()
    response.status_code = status_code
    response._content = content
    return response


@pytest.fixture
def mock_hvac_client() -> Iterator[MagicMock]:
    with patch("configweave.engines.vault.vault_client.hvac.Client") as mock_cls:
        yield mock_cls


@pytest.fixture
def client() -> HvacVaultClient:
    config = ModelVaultConfig.from_tree(
        {"url": VAULT_URL, "namespace": "eng", "verify_ssl": "false", "timeout_seconds": "5"}
    )
    return HvacVaultClient(config)


class TestHvacVaultClientRead:
    """Mapping of hvac outcomes on reads."""

    def test_client_built_per_call_with_token(
        self, client: HvacVaultClient, mock_hvac_client: MagicMock
    ) -> None:
        mock_hvac_client.return_value.adapter.get.return_value = {"data": {"k": "v"}}

        assert client.read("secret/db", "s.token") == {"data": {"k": "v"}}

        mock_hvac_client.assert_called_once_with(
            url=VAULT_URL, token="s.token", namespace="eng", verify=False, timeout=5.0
        )
        mock_hvac_client.return_value.adapter.get.assert_called_once_with("/v1/secret/db")

    def test_forbidden(self, client: HvacVaultClient, mock_hvac_client: MagicMock) -> None:
        mock_hvac_client.return_value.adapter.get.side_effect = hvac.exceptions.Forbidden(
            "permission denied"
        )

        with pytest.raises(VaultForbiddenError) as exc_info:
            client.read("secret/db", "s.token")

        assert exc_info.value.extra_context["secret_path"] == "secret/db"
        assert "s.token" not in str(exc_info.value)

    def test_not_found_returns_none(
        self, client: HvacVaultClient, mock_hvac_client: MagicMock
    ) -> None:
        mock_hvac_client.return_value.adapter.get.side_effect = hvac.exceptions.InvalidPath()
        assert client.read("secret/missing", "s.token") is None

    def test_not_found_with_warnings_returns_body(
        self, client: HvacVaultClient, mock_hvac_client: MagicMock
    ) -> None:
        body = {"warnings": [VERSIONED_KV_WARNING]}
        mock_hvac_client.return_value.adapter.get.side_effect = hvac.exceptions.InvalidPath(
            json=body
        )
        assert client.read("secret/db", "s.token") == body

    def test_no_content_returns_none(
        self, client: HvacVaultClient, mock_hvac_client: MagicMock
    ) -> None:
        mock_hvac_client.return_value.adapter.get.return_value = _raw_response(204, b"")
        assert client.read("secret/db", "s.token") is None

    def test_non_json_body_is_connection_error(
        self, client: HvacVaultClient, mock_hvac_client: MagicMock
    ) -> None:
        mock_hvac_client.return_value.adapter.get.return_value = _raw_response(
            200, b"<html>proxy login</html>"
        )

        with pytest.raises(SecretBackendConnectionError) as exc_info:
            client.read("secret/db", "s.token")

        assert str(exc_info.value) == connection_error_message(VAULT_URL)

    @pytest.mark.parametrize(
        "error",
        [requests.exceptions.ConnectionError("refused"), requests.exceptions.ReadTimeout()],
    )
    def test_connection_errors_name_url(
        self, error: Exception, client: HvacVaultClient, mock_hvac_client: MagicMock
    ) -> None:
        mock_hvac_client.return_value.adapter.get.side_effect = error

        with pytest.raises(SecretBackendConnectionError) as exc_info:
            client.read("secret/db", "s.token")

        assert str(exc_info.value) == connection_error_message(VAULT_URL)

    def test_other_vault_error(self, client: HvacVaultClient, mock_hvac_client: MagicMock) -> None:
        mock_hvac_client.return_value.adapter.get.side_effect = hvac.exceptions.InternalServerError()
        with pytest.raises(SecretFetchError, match="InternalServerError"):
            client.read("secret/db", "s.token")


class TestHvacVaultClientLogin:
    def test_login_posts_without_token(
        self, client: HvacVaultClient, mock_hvac_client: MagicMock
    ) -> None:
        mock_hvac_client.return_value.adapter.post.return_value = {
            "auth": {"client_token": "s.new"}
        }

        response = client.login("auth/kubernetes/login", {"role": "r", "jwt": "j"})

        assert response["auth"] == {"client_token": "s.new"}
        assert mock_hvac_client.call_args.kwargs["token"] is None
        mock_hvac_client.return_value.adapter.post.assert_called_once_with(
            "/v1/auth/kubernetes/login", json={"role": "r", "jwt": "j"}
        )

    def test_login_rejected(self, client: HvacVaultClient, mock_hvac_client: MagicMock) -> None:
        mock_hvac_client.return_value.adapter.post.side_effect = hvac.exceptions.InvalidRequest(
            "invalid role"
        )
        with pytest.raises(SecretAuthenticationError, match="login rejected"):
            client.login("auth/kubernetes/login", {"role": "r", "jwt": "j"})

    def test_login_unreachable(self, client: HvacVaultClient, mock_hvac_client: MagicMock) -> None:
        mock_hvac_client.return_value.adapter.post.side_effect = requests.exceptions.Timeout()
        with pytest.raises(SecretBackendConnectionError):
            client.login("auth/userpass/login/svc", {"password": "pw"})


class TestHvacVaultClientHttp:
    """Real hvac adapter against a local server answering with non-JSON bodies."""

    @staticmethod
    def _client(httpserver: HTTPServer) -> HvacVaultClient:
        url = httpserver.url_for("/").rstrip("/")
        return HvacVaultClient(ModelVaultConfig.from_tree({"url": url}))

    def test_html_read_is_connection_error(self, httpserver: HTTPServer) -> None:
        httpserver.expect_request("/v1/secret/db", method="GET").respond_with_data(
            "<html>proxy login</html>", content_type="text/html"
        )
        client = self._client(httpserver)

        with pytest.raises(SecretBackendConnectionError) as exc_info:
            client.read("secret/db", "s.token")

        assert str(exc_info.value) == connection_error_message(client.url)
        assert exc_info.value.extra_context["status"] == 200

    def test_html_login_is_connection_error(self, httpserver: HTTPServer) -> None:
        httpserver.expect_request(
            "/v1/auth/kubernetes/login", method="POST"
        ).respond_with_data("<html>proxy login</html>", content_type="text/html")
        client = self._client(httpserver)

        with pytest.raises(SecretBackendConnectionError):
            client.login("auth/kubernetes/login", {"role": "r", "jwt": "j"})

    def test_json_read_parsed(self, httpserver: HTTPServer) -> None:
        httpserver.expect_request("/v1/secret/db", method="GET").respond_with_json(
            {"data": {"password": "pw"}}
        )
        assert self._client(httpserver).read("secret/db", "s.token") == {
            "data": {"password": "pw"}
        }

    def test_no_content_read_returns_none(self, httpserver: HTTPServer) -> None:
        httpserver.expect_request("/v1/secret/db", method="GET").respond_with_data(
            "", status=204
        )
        assert self._client(httpserver).read("secret/db", "s.token") is None

    def test_versioned_kv_warning_body(self, httpserver: HTTPServer) -> None:
        httpserver.expect_request("/v1/secret/db", method="GET").respond_with_json(
            {"errors": [], "warnings": [VERSIONED_KV_WARNING]}, status=404
        )
        body = self._client(httpserver).read("secret/db", "s.token")
        assert body is not None
        assert body["warnings"] == [VERSIONED_KV_WARNING]
