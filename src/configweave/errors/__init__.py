# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""configweave error hierarchy and structured error context."""

from configweave.errors.config_errors import (
    BackendConfigurationError,
    ConfigFragmentError,
    ConfigResolutionError,
    EngineNotRegisteredError,
    PlaceholderResolutionError,
    SecretAuthenticationError,
    SecretBackendConnectionError,
    SecretFetchError,
    SecretKeyNotFoundError,
    SecretReferenceError,
)
from configweave.errors.error_vault import VaultForbiddenError
from configweave.errors.model_config_error_context import ModelConfigErrorContext

__all__ = [
    "BackendConfigurationError",
    "ConfigFragmentError",
    "ConfigResolutionError",
    "EngineNotRegisteredError",
    "ModelConfigErrorContext",
    "PlaceholderResolutionError",
    "SecretAuthenticationError",
    "SecretBackendConnectionError",
    "SecretFetchError",
    "SecretKeyNotFoundError",
    "SecretReferenceError",
    "VaultForbiddenError",
]
