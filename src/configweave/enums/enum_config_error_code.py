# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Configuration Resolution Error Code Enumeration.

Classifies every failure raised by configweave so callers can branch on a
stable code instead of parsing human-readable messages.
"""

from enum import Enum


class EnumConfigErrorCode(str, Enum):
    """Error codes for configuration and secret resolution failures.

    Attributes:
        OPERATION_FAILED: Generic failure (default for the base error)
        MALFORMED_FRAGMENT: A configuration fragment could not be read or merged
        UNRESOLVED_PLACEHOLDER: Placeholders remained after the pass bound (strict mode)
        INVALID_REFERENCE: Secret reference syntax or parameters are malformed
        ENGINE_NOT_REGISTERED: No backend is registered under the engine name
        INVALID_CONFIGURATION: Backend settings failed validation
        AUTHENTICATION_FAILED: Credentials could not be obtained or exchanged
        AUTHORIZATION_DENIED: Backend rejected the request (HTTP 403 semantics)
        RESOURCE_NOT_FOUND: Secret, path or object does not exist
        KEY_NOT_FOUND: Secret payload exists but lacks the requested key
        CONNECTION_ERROR: Backend unreachable or returned an unparsable response
    """

    OPERATION_FAILED = "operation_failed"
    MALFORMED_FRAGMENT = "malformed_fragment"
    UNRESOLVED_PLACEHOLDER = "unresolved_placeholder"
    INVALID_REFERENCE = "invalid_reference"
    ENGINE_NOT_REGISTERED = "engine_not_registered"
    INVALID_CONFIGURATION = "invalid_configuration"
    AUTHENTICATION_FAILED = "authentication_failed"
    AUTHORIZATION_DENIED = "authorization_denied"
    RESOURCE_NOT_FOUND = "resource_not_found"
    KEY_NOT_FOUND = "key_not_found"
    CONNECTION_ERROR = "connection_error"


__all__ = ["EnumConfigErrorCode"]
