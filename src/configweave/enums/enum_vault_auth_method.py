# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Vault authentication method enumeration."""

from enum import Enum


class EnumVaultAuthMethod(str, Enum):
    """Ways the Vault backend obtains its bearer token.

    Attributes:
        TOKEN: Pre-set token or the VAULT_TOKEN environment variable
        KUBERNETES: Service-account JWT exchanged at auth/<path>/login
        USERPASS: Username/password login at auth/<userAuthPath>/login/<username>
    """

    TOKEN = "TOKEN"
    KUBERNETES = "KUBERNETES"
    USERPASS = "USERPASS"


__all__ = ["EnumVaultAuthMethod"]
