# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Fixed key/value engine: ``encrypted:static!k:<name>``.

Values come from an in-memory mapping supplied when the registry is built,
which makes it the natural stand-in for a real backend in tests and local
profiles.
"""

from __future__ import annotations

from collections.abc import Mapping

from configweave.engines.secret_reference_parser import parse_params
from configweave.engines.util_temp_file import write_temp_file
from configweave.enums import EnumSecretBackendType
from configweave.errors import ModelConfigErrorContext, SecretKeyNotFoundError


class StaticDecrypter:
    """Looks up ``k`` in a fixed mapping."""

    def __init__(
        self,
        is_file: bool,
        raw_params: str,
        *,
        values: Mapping[str, str],
    ) -> None:
        params = parse_params(
            raw_params,
            required=("k",),
            allowed=("k",),
            engine=EnumSecretBackendType.STATIC.value,
        )
        self._is_file = is_file
        self._key = params["k"]
        self._values = values

    def decrypt(self) -> str:
        try:
            value = self._values[self._key]
        except KeyError:
            raise SecretKeyNotFoundError(
                f"static secret {self._key!r} not found",
                available_keys=list(self._values),
                context=ModelConfigErrorContext(
                    backend_type=EnumSecretBackendType.STATIC,
                    operation="fetch_secret",
                    target_name=self._key,
                ),
            ) from None
        if self._is_file:
            return write_temp_file(value)
        return value

    def is_file(self) -> bool:
        return self._is_file


__all__ = ["StaticDecrypter"]
