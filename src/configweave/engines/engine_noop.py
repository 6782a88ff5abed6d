# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Pass-through engine: ``encrypted:noop!<value>`` resolves to ``<value>``."""

from __future__ import annotations

from configweave.engines.util_temp_file import write_temp_file


class NoopDecrypter:
    """Returns its raw parameter text unchanged.

    Useful for local development and tests, where a reference shape is needed
    but no backend is available.
    """

    def __init__(self, is_file: bool, raw_params: str) -> None:
        self._is_file = is_file
        self._value = raw_params

    def decrypt(self) -> str:
        if self._is_file:
            return write_temp_file(self._value)
        return self._value

    def is_file(self) -> bool:
        return self._is_file


__all__ = ["NoopDecrypter"]
