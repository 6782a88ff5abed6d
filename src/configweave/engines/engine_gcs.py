# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Google Cloud Storage object engine.

``encrypted:gcs!b:<bucket>!f:<object name>[!k:<dotted.yaml.key>]``
"""

from __future__ import annotations

import logging
from collections.abc import Callable

from google.api_core import exceptions as gcp_exceptions
from google.auth import exceptions as gcp_auth_exceptions
from google.cloud import storage

from configweave.engines.secret_reference_parser import parse_params
from configweave.engines.util_secret_file import extract_yaml_key
from configweave.engines.util_temp_file import write_temp_file
from configweave.enums import EnumSecretBackendType
from configweave.errors import (
    ModelConfigErrorContext,
    SecretAuthenticationError,
    SecretBackendConnectionError,
    SecretFetchError,
)

logger = logging.getLogger(__name__)

_ENGINE = EnumSecretBackendType.GCS


def default_gcs_client() -> object:
    return storage.Client()


class GcsDecrypter:
    """Downloads a GCS object with application default credentials."""

    def __init__(
        self,
        is_file: bool,
        raw_params: str,
        *,
        client_factory: Callable[[], object] = default_gcs_client,
        timeout_seconds: float = 30.0,
    ) -> None:
        params = parse_params(
            raw_params,
            required=("b", "f"),
            allowed=("b", "f", "k"),
            engine=_ENGINE.value,
        )
        self._is_file = is_file
        self._bucket = params["b"]
        self._file = params["f"]
        self._key = params.get("k", "")
        self._client_factory = client_factory
        self._timeout_seconds = timeout_seconds

    def decrypt(self) -> str:
        contents = self._download()
        if self._key:
            value = extract_yaml_key(
                contents,
                self._key,
                backend_type=_ENGINE,
                target_name=self._target,
            )
            return write_temp_file(value) if self._is_file else value
        if self._is_file:
            return write_temp_file(contents)
        return contents.decode("utf-8")

    def is_file(self) -> bool:
        return self._is_file

    @property
    def _target(self) -> str:
        return f"gs://{self._bucket}/{self._file}"

    def _download(self) -> bytes:
        context = ModelConfigErrorContext(
            backend_type=_ENGINE,
            operation="download",
            target_name=self._target,
        )
        try:
            client = self._client_factory()
            blob = client.bucket(self._bucket).blob(self._file)  # type: ignore[attr-defined]
            contents: bytes = blob.download_as_bytes(timeout=self._timeout_seconds)
        except gcp_exceptions.NotFound as e:
            raise SecretFetchError(
                f"unable to download item {self._file!r}: not found", context=context
            ) from e
        except (gcp_exceptions.Forbidden, gcp_exceptions.Unauthorized) as e:
            raise SecretAuthenticationError(
                f"access denied downloading {self._target}", context=context
            ) from e
        except gcp_auth_exceptions.DefaultCredentialsError as e:
            raise SecretAuthenticationError(
                "no Google Cloud credentials available", context=context
            ) from e
        except gcp_exceptions.GoogleAPIError as e:
            raise SecretBackendConnectionError(
                f"error downloading {self._target}: {type(e).__name__}", context=context
            ) from e

        if not contents:
            raise SecretFetchError(f"file {self._file!r} empty", context=context)
        logger.debug(
            "Downloaded secret object from GCS",
            extra={"bucket": self._bucket, "object": self._file, "size_bytes": len(contents)},
        )
        return contents


__all__ = ["GcsDecrypter", "default_gcs_client"]
