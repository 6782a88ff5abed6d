# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Configuration Error Context Model.

This module defines the model bundling the structured fields attached to every
configweave error, keeping error ``__init__`` signatures short while remaining
strongly typed.
"""

from __future__ import annotations

from uuid import UUID, uuid4

from pydantic import BaseModel, ConfigDict, Field

from configweave.enums import EnumSecretBackendType


class ModelConfigErrorContext(BaseModel):
    """Structured context for configuration and secret resolution errors.

    Attributes:
        backend_type: Secret backend involved (VAULT, S3, RUNTIME, etc.)
        operation: Operation being performed (merge, parse_reference, fetch_token, etc.)
        target_name: Target resource name (engine, path, bucket, URL)
        correlation_id: Correlation ID tying related log lines and errors together

    Example:
        >>> context = ModelConfigErrorContext(
        ...     backend_type=EnumSecretBackendType.VAULT,
        ...     operation="fetch_secret",
        ...     target_name="secret/database",
        ... )
        >>> raise SecretFetchError("Secret not found", context=context)
    """

    model_config = ConfigDict(
        frozen=True,
        extra="forbid",
    )

    backend_type: EnumSecretBackendType | None = Field(
        default=None,
        description="Secret backend involved in the failing operation",
    )
    operation: str | None = Field(
        default=None,
        description="Operation being performed (merge, fetch_secret, fetch_token, etc.)",
    )
    target_name: str | None = Field(
        default=None,
        description="Target resource name (engine, path, bucket, URL)",
    )
    correlation_id: UUID | None = Field(
        default=None,
        description="Correlation ID for tying log lines to the error",
    )

    @classmethod
    def with_correlation(
        cls,
        correlation_id: UUID | None = None,
        **kwargs: object,
    ) -> ModelConfigErrorContext:
        """Create a context, generating a correlation ID when none is given.

        Args:
            correlation_id: Existing correlation ID to reuse
            **kwargs: Remaining context fields

        Returns:
            New context with ``correlation_id`` always set
        """
        return cls(correlation_id=correlation_id or uuid4(), **kwargs)


__all__ = ["ModelConfigErrorContext"]
