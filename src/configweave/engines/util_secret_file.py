# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Select a value from a YAML secret file by dotted key.

Object-store engines (S3, GCS) may point at a whole YAML document and pick a
single value with ``k:some.nested.key``.
"""

from __future__ import annotations

import yaml

from configweave.enums import EnumSecretBackendType
from configweave.errors import (
    ModelConfigErrorContext,
    SecretFetchError,
    SecretKeyNotFoundError,
)


def extract_yaml_key(
    contents: bytes,
    key: str,
    *,
    backend_type: EnumSecretBackendType,
    target_name: str,
) -> str:
    """Return the scalar at dotted ``key`` inside a YAML document.

    Args:
        contents: Raw file bytes
        key: Dotted path, e.g. ``database.password``
        backend_type: Engine the file came from (error context)
        target_name: Bucket/object name (error context)

    Raises:
        SecretFetchError: If the document cannot be parsed or the key lands on
            a mapping or list.
        SecretKeyNotFoundError: If a path segment is missing.
    """
    context = ModelConfigErrorContext(
        backend_type=backend_type,
        operation="parse_secret_file",
        target_name=target_name,
    )
    try:
        node: object = yaml.safe_load(contents)
    except yaml.YAMLError as e:
        raise SecretFetchError(
            "error parsing secret file: invalid yaml", context=context
        ) from e

    for segment in key.split("."):
        if not isinstance(node, dict) or segment not in node:
            available = [str(k) for k in node] if isinstance(node, dict) else []
            raise SecretKeyNotFoundError(
                f"error parsing secret file: couldn't find key {key!r} in yaml",
                available_keys=available,
                context=context,
            )
        node = node[segment]

    if isinstance(node, bool):
        return "true" if node else "false"
    if isinstance(node, (str, int, float)):
        return str(node)
    raise SecretFetchError(
        f"error parsing secret file: key {key!r} is not a scalar value",
        context=context,
    )


__all__ = ["extract_yaml_key"]
