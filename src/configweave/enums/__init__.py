# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Enumerations shared across configweave."""

from configweave.enums.enum_config_error_code import EnumConfigErrorCode
from configweave.enums.enum_secret_backend_type import EnumSecretBackendType
from configweave.enums.enum_vault_auth_method import EnumVaultAuthMethod

__all__ = [
    "EnumConfigErrorCode",
    "EnumSecretBackendType",
    "EnumVaultAuthMethod",
]
