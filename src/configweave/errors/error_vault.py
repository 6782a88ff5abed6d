# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Vault-Specific Error Class.

This module defines VaultForbiddenError, the structured signal the Vault
backend uses to decide whether a token refresh and retry should happen.
"""

from __future__ import annotations

from configweave.enums import EnumConfigErrorCode
from configweave.errors.config_errors import SecretAuthenticationError
from configweave.errors.model_config_error_context import ModelConfigErrorContext


class VaultForbiddenError(SecretAuthenticationError):
    """Vault rejected a request with HTTP 403.

    Raised by the Vault client adapter. The Vault engine reacts by invalidating
    its cached token, fetching a new one and retrying the read exactly once; a
    second VaultForbiddenError is surfaced to the caller.

    Example:
        >>> context = ModelConfigErrorContext(
        ...     backend_type=EnumSecretBackendType.VAULT,
        ...     operation="read",
        ...     target_name="https://vault.example.com:8200",
        ... )
        >>> raise VaultForbiddenError(
        ...     "Vault operation forbidden - check token permissions",
        ...     context=context,
        ...     secret_path="secret/database",
        ... )
    """

    default_error_code = EnumConfigErrorCode.AUTHORIZATION_DENIED

    def __init__(
        self,
        message: str,
        context: ModelConfigErrorContext | None = None,
        secret_path: str | None = None,
        **extra_context: object,
    ) -> None:
        """Initialize VaultForbiddenError with Vault-specific context.

        Args:
            message: Human-readable error message
            context: Bundled error context (should use VAULT backend_type)
            secret_path: Optional path of the rejected request
            **extra_context: Additional context information
        """
        if secret_path is not None:
            extra_context["secret_path"] = secret_path

        super().__init__(
            message,
            context=context,
            **extra_context,
        )


__all__: list[str] = [
    "VaultForbiddenError",
]
