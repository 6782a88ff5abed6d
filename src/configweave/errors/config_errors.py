# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Configuration and Secret Resolution Error Classes.

Error Hierarchy:
    ConfigResolutionError (base)
    ├── ConfigFragmentError
    ├── PlaceholderResolutionError
    ├── SecretReferenceError
    ├── EngineNotRegisteredError
    ├── BackendConfigurationError
    ├── SecretAuthenticationError
    │   └── VaultForbiddenError (see error_vault)
    └── SecretFetchError
        ├── SecretKeyNotFoundError
        └── SecretBackendConnectionError

All errors:
    - Carry an EnumConfigErrorCode for classification
    - Support proper error chaining with ``raise ... from e``
    - Accept ModelConfigErrorContext for bundled context parameters
    - Keep additional keyword context in ``extra_context``

Grammar, registry and backend configuration errors are permanent. Only an
authorization failure raised while fetching from Vault triggers a retry, and
that retry happens exactly once.
"""

from __future__ import annotations

from uuid import UUID

from configweave.enums import EnumConfigErrorCode
from configweave.errors.model_config_error_context import ModelConfigErrorContext


class ConfigResolutionError(Exception):
    """Base error class for configweave.

    Structured Fields (via ModelConfigErrorContext):
        backend_type: Secret backend involved
        operation: Operation being performed
        target_name: Target resource name
        correlation_id: Correlation ID for tracking

    Example:
        >>> context = ModelConfigErrorContext(
        ...     operation="merge",
        ...     target_name="fragment[2]",
        ... )
        >>> raise ConfigResolutionError("Operation failed", context=context)
    """

    default_error_code: EnumConfigErrorCode = EnumConfigErrorCode.OPERATION_FAILED

    def __init__(
        self,
        message: str,
        error_code: EnumConfigErrorCode | None = None,
        context: ModelConfigErrorContext | None = None,
        **extra_context: object,
    ) -> None:
        """Initialize ConfigResolutionError with structured fields.

        Args:
            message: Human-readable error message
            error_code: Error code (defaults to the class default)
            context: Bundled error context (backend_type, operation, etc.)
            **extra_context: Additional context information
        """
        super().__init__(message)
        self.message = message
        self.error_code = error_code or self.default_error_code
        self.context = context
        self.correlation_id: UUID | None = (
            context.correlation_id if context is not None else None
        )

        structured_context: dict[str, object] = dict(extra_context)
        if context is not None:
            if context.backend_type is not None:
                structured_context["backend_type"] = context.backend_type
            if context.operation is not None:
                structured_context["operation"] = context.operation
            if context.target_name is not None:
                structured_context["target_name"] = context.target_name
        self.extra_context = structured_context

    def __str__(self) -> str:
        return self.message


class ConfigFragmentError(ConfigResolutionError):
    """Raised when a configuration fragment is malformed or unreadable."""

    default_error_code = EnumConfigErrorCode.MALFORMED_FRAGMENT


class PlaceholderResolutionError(ConfigResolutionError):
    """Raised in strict mode when placeholders survive the pass bound.

    Example:
        >>> raise PlaceholderResolutionError(
        ...     "Placeholders unresolved after 2 passes",
        ...     unresolved_paths=["a", "b.c"],
        ... )
    """

    default_error_code = EnumConfigErrorCode.UNRESOLVED_PLACEHOLDER


class SecretReferenceError(ConfigResolutionError):
    """Raised when a secret reference or its parameters are malformed.

    Permanent: the same reference always fails the same way.
    """

    default_error_code = EnumConfigErrorCode.INVALID_REFERENCE


class EngineNotRegisteredError(ConfigResolutionError):
    """Raised when a secret reference names an engine with no registered factory."""

    default_error_code = EnumConfigErrorCode.ENGINE_NOT_REGISTERED


class BackendConfigurationError(ConfigResolutionError):
    """Raised when backend settings are invalid or incomplete.

    Used for Vault registration validation as well as missing client
    prerequisites (e.g. no in-cluster Kubernetes configuration).
    """

    default_error_code = EnumConfigErrorCode.INVALID_CONFIGURATION


class SecretAuthenticationError(ConfigResolutionError):
    """Raised when credentials cannot be obtained or are rejected."""

    default_error_code = EnumConfigErrorCode.AUTHENTICATION_FAILED


class SecretFetchError(ConfigResolutionError):
    """Raised when a secret cannot be fetched from its backend.

    Example:
        >>> context = ModelConfigErrorContext(
        ...     backend_type=EnumSecretBackendType.S3,
        ...     operation="fetch_secret",
        ...     target_name="my-bucket",
        ... )
        >>> raise SecretFetchError(
        ...     "unable to download item 'app.yml'",
        ...     context=context,
        ... )
    """

    default_error_code = EnumConfigErrorCode.RESOURCE_NOT_FOUND


class SecretKeyNotFoundError(SecretFetchError):
    """Raised when a fetched secret payload lacks the requested key.

    The available keys are kept in ``available_keys`` for diagnostics.
    """

    default_error_code = EnumConfigErrorCode.KEY_NOT_FOUND

    def __init__(
        self,
        message: str,
        available_keys: list[str] | None = None,
        context: ModelConfigErrorContext | None = None,
        **extra_context: object,
    ) -> None:
        """Initialize SecretKeyNotFoundError.

        Args:
            message: Human-readable error message
            available_keys: Keys present in the payload
            context: Bundled error context
            **extra_context: Additional context information
        """
        self.available_keys = sorted(available_keys or [])
        super().__init__(
            message,
            context=context,
            available_keys=self.available_keys,
            **extra_context,
        )


class SecretBackendConnectionError(SecretFetchError):
    """Raised when a backend is unreachable or its response cannot be parsed."""

    default_error_code = EnumConfigErrorCode.CONNECTION_ERROR


__all__ = [
    "BackendConfigurationError",
    "ConfigFragmentError",
    "ConfigResolutionError",
    "EngineNotRegisteredError",
    "PlaceholderResolutionError",
    "SecretAuthenticationError",
    "SecretBackendConnectionError",
    "SecretFetchError",
    "SecretKeyNotFoundError",
    "SecretReferenceError",
]
