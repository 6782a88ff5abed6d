# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""boto3 client construction and botocore error mapping for the AWS engines."""

from __future__ import annotations

from typing import Final, NoReturn

import boto3
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError

from configweave.enums import EnumSecretBackendType
from configweave.errors import (
    ModelConfigErrorContext,
    SecretAuthenticationError,
    SecretBackendConnectionError,
    SecretFetchError,
)

MAX_API_RETRY: Final[int] = 10

_ACCESS_DENIED_CODES: Final[frozenset[str]] = frozenset(
    {"AccessDenied", "AccessDeniedException", "UnrecognizedClientException"}
)


def build_boto3_client(service_name: str, region: str, timeout_seconds: float) -> object:
    """Create a boto3 client honoring the resolver timeout."""
    return boto3.client(
        service_name,
        region_name=region,
        config=Config(
            connect_timeout=timeout_seconds,
            read_timeout=timeout_seconds,
            retries={"max_attempts": MAX_API_RETRY},
        ),
    )


def raise_for_aws_error(
    error: Exception,
    *,
    backend_type: EnumSecretBackendType,
    operation: str,
    target_name: str,
) -> NoReturn:
    """Translate a botocore failure into the configweave error taxonomy.

    Raises:
        SecretAuthenticationError: Access denied or bad credentials
        SecretBackendConnectionError: Transport-level botocore failure
        SecretFetchError: Anything else reported by the service
    """
    context = ModelConfigErrorContext(
        backend_type=backend_type,
        operation=operation,
        target_name=target_name,
    )
    if isinstance(error, ClientError):
        code = error.response.get("Error", {}).get("Code", "Unknown")
        if code in _ACCESS_DENIED_CODES:
            raise SecretAuthenticationError(
                f"access denied fetching {target_name!r} from {backend_type.value}",
                context=context,
                aws_error_code=code,
            ) from error
        raise SecretFetchError(
            f"unable to fetch {target_name!r} from {backend_type.value}: {code}",
            context=context,
            aws_error_code=code,
        ) from error
    if isinstance(error, BotoCoreError):
        raise SecretBackendConnectionError(
            f"error connecting to {backend_type.value}: {type(error).__name__}",
            context=context,
        ) from error
    raise error


__all__ = ["MAX_API_RETRY", "build_boto3_client", "raise_for_aws_error"]
