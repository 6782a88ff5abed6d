# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Secret reference grammar.

A secret reference is a whole leaf value::

    secretRef := ("encrypted" | "encryptedFile") ":" engine ("!" key ":" value)*

Anything not starting with one of the two prefixes is plain configuration,
which is how "not a secret" is told apart from "a misconfigured secret".
Engine names are not checked here; unknown engines fail later at registry
lookup.
"""

from __future__ import annotations

from collections.abc import Collection

from configweave.enums import EnumSecretBackendType
from configweave.errors import ModelConfigErrorContext, SecretReferenceError
from configweave.models.model_secret_reference import (
    PARAM_SEPARATOR,
    PREFIX_ENCRYPTED,
    PREFIX_ENCRYPTED_FILE,
    ModelSecretReference,
)

_PREFIXES: tuple[tuple[str, bool], ...] = (
    (f"{PREFIX_ENCRYPTED_FILE}:", True),
    (f"{PREFIX_ENCRYPTED}:", False),
)


def is_secret_reference(value: str) -> bool:
    """Return True if ``value`` uses the ``encrypted:``/``encryptedFile:`` prefix."""
    return any(value.startswith(prefix) for prefix, _ in _PREFIXES)


def parse_secret_reference(value: str) -> ModelSecretReference:
    """Split a secret reference into engine, file flag and raw parameters.

    Args:
        value: Leaf value starting with ``encrypted:`` or ``encryptedFile:``

    Returns:
        The parsed reference

    Raises:
        SecretReferenceError: If ``value`` is not a secret reference or the
            engine name is empty.
    """
    for prefix, is_file in _PREFIXES:
        if value.startswith(prefix):
            body = value[len(prefix) :]
            break
    else:
        raise SecretReferenceError(
            "not a secret reference: expected 'encrypted:' or 'encryptedFile:' prefix",
            context=_parse_context(),
        )

    engine, _, raw_params = body.partition(PARAM_SEPARATOR)
    if not engine:
        raise SecretReferenceError(
            "secret format error - engine name is required",
            context=_parse_context(),
        )
    return ModelSecretReference(engine=engine, is_file=is_file, raw_params=raw_params)


def parse_params(
    raw_params: str,
    *,
    required: Collection[str] = (),
    allowed: Collection[str] | None = None,
    first_colon_only: bool = False,
    engine: str | None = None,
) -> dict[str, str]:
    """Split ``k1:v1!k2:v2`` parameter text into a mapping.

    Args:
        raw_params: Text after the engine name's ``!``
        required: Keys that must be present
        allowed: Accepted keys; None accepts any key
        first_colon_only: Split each token on its first ``:`` so values may
            contain colons (ARNs, URLs). Otherwise a token needs exactly one.
        engine: Engine name for error context

    Returns:
        Mapping of short keys to values. A repeated key keeps its last value.

    Raises:
        SecretReferenceError: On a malformed token, an unknown key, or a
            missing required key. Parameter values never appear in messages.
    """
    params: dict[str, str] = {}
    for token in raw_params.split(PARAM_SEPARATOR):
        if not token:
            continue
        if first_colon_only:
            key, sep, value = token.partition(":")
            malformed = not sep
        else:
            parts = token.split(":")
            malformed = len(parts) != 2
            key, value = parts[0], parts[-1]
        if malformed or not key:
            raise SecretReferenceError(
                f"secret format error - malformed parameter in {engine or 'secret'} reference, "
                "expected key:value",
                context=_parse_context(engine),
            )
        if allowed is not None and key not in allowed:
            raise SecretReferenceError(
                f"secret format error - invalid key {key!r} for {engine or 'secret'} reference",
                context=_parse_context(engine),
            )
        params[key] = value

    missing = [key for key in required if not params.get(key)]
    if missing:
        raise SecretReferenceError(
            f"secret format error - {engine or 'secret'} reference missing required "
            f"parameter(s): {', '.join(missing)}",
            context=_parse_context(engine),
            missing_params=missing,
        )
    return params


def _parse_context(engine: str | None = None) -> ModelConfigErrorContext:
    backend_type: EnumSecretBackendType | None = None
    if engine is not None:
        try:
            backend_type = EnumSecretBackendType(engine)
        except ValueError:
            backend_type = None
    return ModelConfigErrorContext(
        backend_type=backend_type,
        operation="parse_reference",
        target_name=engine,
    )


__all__ = ["is_secret_reference", "parse_params", "parse_secret_reference"]
