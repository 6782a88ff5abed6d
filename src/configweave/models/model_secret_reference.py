# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Parsed secret reference model."""

from __future__ import annotations

from typing import Final

from pydantic import BaseModel, ConfigDict, Field

PREFIX_ENCRYPTED: Final[str] = "encrypted"
PREFIX_ENCRYPTED_FILE: Final[str] = "encryptedFile"
PARAM_SEPARATOR: Final[str] = "!"


class ModelSecretReference(BaseModel):
    """A leaf value of the form ``encrypted[File]:<engine>[!k:v]*``.

    Parameters are kept as their raw text because each backend decides how to
    split them (the noop backend takes the text verbatim, identifier-bearing
    backends split on the first colon only).

    Attributes:
        engine: Engine name used for registry lookup
        is_file: True for ``encryptedFile`` references
        raw_params: Everything after the first ``!`` (empty when absent)
    """

    model_config = ConfigDict(
        frozen=True,
        extra="forbid",
    )

    engine: str = Field(
        ...,
        min_length=1,
        description="Engine name used for registry lookup",
    )
    is_file: bool = Field(
        default=False,
        description="Materialize the secret as a temporary file and yield its path",
    )
    raw_params: str = Field(
        default="",
        description="Parameter text after the first '!' separator",
    )

    @property
    def prefix(self) -> str:
        return PREFIX_ENCRYPTED_FILE if self.is_file else PREFIX_ENCRYPTED

    def to_reference(self) -> str:
        """Serialize back to canonical reference text.

        Parsing the returned string yields an equal model.
        """
        reference = f"{self.prefix}:{self.engine}"
        if self.raw_params:
            reference += f"{PARAM_SEPARATOR}{self.raw_params}"
        return reference

    def __str__(self) -> str:
        # Never print parameter values; static and noop params are the secret.
        return f"{self.prefix}:{self.engine}"


__all__ = [
    "PARAM_SEPARATOR",
    "PREFIX_ENCRYPTED",
    "PREFIX_ENCRYPTED_FILE",
    "ModelSecretReference",
]
