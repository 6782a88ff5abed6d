# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Decrypter protocol and factory signature shared by every secret engine."""

from __future__ import annotations

from collections.abc import Callable
from typing import Protocol, runtime_checkable


@runtime_checkable
class ProtocolDecrypter(Protocol):
    """Turns one secret reference into secret material.

    Implementations validate their parameters at construction time so that
    malformed references fail before any network call.
    """

    def decrypt(self) -> str:
        """Fetch the secret.

        Returns:
            The secret value, or the path of a temporary file holding it
            when :meth:`is_file` is true.

        Raises:
            ConfigResolutionError: Any fetch, auth or connection failure.
        """
        ...

    def is_file(self) -> bool:
        """Whether :meth:`decrypt` returns a temporary file path."""
        ...


# (is_file, raw_params) -> decrypter; raises SecretReferenceError on bad params
type DecrypterFactory = Callable[[bool, str], ProtocolDecrypter]

__all__ = ["DecrypterFactory", "ProtocolDecrypter"]
