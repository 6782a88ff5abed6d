# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""AWS Secrets Manager engine.

Reference forms::

    encrypted:secrets-manager!r:us-west-2!s:my-secret                plain string secret
    encrypted:secrets-manager!r:us-west-2!s:my-secret!k:password     key of a JSON secret
    encryptedFile:secrets-manager!r:us-west-2!s:my-cert              binary secret as file

Parameters split on the first colon, so ``s`` may be a full ARN.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Callable

from botocore.exceptions import BotoCoreError, ClientError

from configweave.engines.secret_reference_parser import parse_params
from configweave.engines.util_aws import build_boto3_client, raise_for_aws_error
from configweave.engines.util_temp_file import write_temp_file
from configweave.enums import EnumSecretBackendType
from configweave.errors import (
    ModelConfigErrorContext,
    SecretFetchError,
    SecretKeyNotFoundError,
    SecretReferenceError,
)

logger = logging.getLogger(__name__)

_ENGINE = EnumSecretBackendType.SECRETS_MANAGER


def default_secrets_manager_client(region: str, timeout_seconds: float) -> object:
    return build_boto3_client("secretsmanager", region, timeout_seconds)


class SecretsManagerDecrypter:
    """Fetches a secret with ``GetSecretValue``."""

    def __init__(
        self,
        is_file: bool,
        raw_params: str,
        *,
        client_factory: Callable[[str, float], object] = default_secrets_manager_client,
        timeout_seconds: float = 30.0,
    ) -> None:
        params = parse_params(
            raw_params,
            required=("r", "s"),
            allowed=("r", "s", "k"),
            first_colon_only=True,
            engine=_ENGINE.value,
        )
        if is_file and params.get("k"):
            raise SecretReferenceError(
                "secret format error - 'k' cannot be combined with encryptedFile "
                "for secrets-manager references",
                context=self._context("parse_reference", params["s"]),
            )
        self._is_file = is_file
        self._region = params["r"]
        self._secret_name = params["s"]
        self._key = params.get("k", "")
        self._client_factory = client_factory
        self._timeout_seconds = timeout_seconds

    def decrypt(self) -> str:
        client = self._client_factory(self._region, self._timeout_seconds)
        try:
            response = client.get_secret_value(SecretId=self._secret_name)  # type: ignore[attr-defined]
        except (ClientError, BotoCoreError) as e:
            raise_for_aws_error(
                e,
                backend_type=_ENGINE,
                operation="fetch_secret",
                target_name=self._secret_name,
            )

        logger.debug(
            "Fetched secret from Secrets Manager",
            extra={"secret_name": self._secret_name, "region": self._region},
        )
        if self._is_file:
            payload = response.get("SecretBinary")
            if payload is None:
                payload = response.get("SecretString", "")
            return write_temp_file(payload)

        secret_string = response.get("SecretString")
        if secret_string is None:
            raise SecretFetchError(
                f"secret {self._secret_name!r} has no string value, "
                "use encryptedFile for binary secrets",
                context=self._context("fetch_secret", self._secret_name),
            )
        if not self._key:
            return str(secret_string)
        return self._select_key(secret_string)

    def is_file(self) -> bool:
        return self._is_file

    def _select_key(self, secret_string: str) -> str:
        context = self._context("parse_secret", self._secret_name)
        try:
            document = json.loads(secret_string)
        except json.JSONDecodeError as e:
            raise SecretFetchError(
                f"secret {self._secret_name!r} is not a JSON key/value document",
                context=context,
            ) from e
        if not isinstance(document, dict):
            raise SecretFetchError(
                f"secret {self._secret_name!r} is not a JSON key/value document",
                context=context,
            )
        if self._key not in document:
            raise SecretKeyNotFoundError(
                f"key {self._key!r} not found in secret {self._secret_name!r}",
                available_keys=list(document),
                context=context,
            )
        value = document[self._key]
        return value if isinstance(value, str) else json.dumps(value)

    @staticmethod
    def _context(operation: str, target_name: str) -> ModelConfigErrorContext:
        return ModelConfigErrorContext(
            backend_type=_ENGINE,
            operation=operation,
            target_name=target_name,
        )


__all__ = ["SecretsManagerDecrypter", "default_secrets_manager_client"]
