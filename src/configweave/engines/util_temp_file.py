# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Materialize secret payloads as temporary files for ``encryptedFile`` references."""

from __future__ import annotations

import logging
import os
import tempfile

from configweave.errors import ConfigResolutionError, ModelConfigErrorContext

logger = logging.getLogger(__name__)

TEMP_FILE_PREFIX = "configweave-secret-"


def write_temp_file(payload: bytes | str, directory: str | None = None) -> str:
    """Write ``payload`` to a new owner-only temporary file.

    The file is not deleted automatically; its lifetime is the consumer's
    concern.

    Args:
        payload: Secret bytes, or text encoded as UTF-8
        directory: Directory for the file (system default when None)

    Returns:
        Absolute path of the new file

    Raises:
        ConfigResolutionError: If the file cannot be written.
    """
    data = payload.encode("utf-8") if isinstance(payload, str) else payload
    try:
        fd, path = tempfile.mkstemp(prefix=TEMP_FILE_PREFIX, dir=directory)
        with os.fdopen(fd, "wb") as handle:
            handle.write(data)
    except OSError as e:
        raise ConfigResolutionError(
            f"unable to write secret to temporary file: {e.strerror}",
            context=ModelConfigErrorContext(operation="write_temp_file"),
        ) from e

    logger.debug(
        "Secret materialized as temporary file",
        extra={"path": path, "size_bytes": len(data)},
    )
    return path


__all__ = ["TEMP_FILE_PREFIX", "write_temp_file"]
