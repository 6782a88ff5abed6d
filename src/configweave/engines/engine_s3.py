# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""S3 object engine.

``encrypted:s3!r:<region>!b:<bucket>!f:<object key>[!k:<dotted.yaml.key>]``

Without ``k`` the whole object is the secret; with ``k`` the object is read as
YAML and the dotted key selected.
"""

from __future__ import annotations

import logging
from collections.abc import Callable

from botocore.exceptions import BotoCoreError, ClientError

from configweave.engines.secret_reference_parser import parse_params
from configweave.engines.util_aws import build_boto3_client, raise_for_aws_error
from configweave.engines.util_secret_file import extract_yaml_key
from configweave.engines.util_temp_file import write_temp_file
from configweave.enums import EnumSecretBackendType
from configweave.errors import ModelConfigErrorContext, SecretFetchError

logger = logging.getLogger(__name__)

_ENGINE = EnumSecretBackendType.S3


def default_s3_client(region: str, timeout_seconds: float) -> object:
    return build_boto3_client("s3", region, timeout_seconds)


class S3Decrypter:
    """Downloads an S3 object with ``GetObject``."""

    def __init__(
        self,
        is_file: bool,
        raw_params: str,
        *,
        client_factory: Callable[[str, float], object] = default_s3_client,
        timeout_seconds: float = 30.0,
    ) -> None:
        params = parse_params(
            raw_params,
            required=("r", "b", "f"),
            allowed=("r", "b", "f", "k"),
            engine=_ENGINE.value,
        )
        self._is_file = is_file
        self._region = params["r"]
        self._bucket = params["b"]
        self._file = params["f"]
        self._key = params.get("k", "")
        self._client_factory = client_factory
        self._timeout_seconds = timeout_seconds

    def decrypt(self) -> str:
        contents = self._download()
        if self._key:
            value = extract_yaml_key(
                contents,
                self._key,
                backend_type=_ENGINE,
                target_name=f"{self._bucket}/{self._file}",
            )
            return write_temp_file(value) if self._is_file else value
        if self._is_file:
            return write_temp_file(contents)
        return contents.decode("utf-8")

    def is_file(self) -> bool:
        return self._is_file

    def _download(self) -> bytes:
        client = self._client_factory(self._region, self._timeout_seconds)
        try:
            response = client.get_object(Bucket=self._bucket, Key=self._file)  # type: ignore[attr-defined]
            contents: bytes = response["Body"].read()
        except (ClientError, BotoCoreError) as e:
            raise_for_aws_error(
                e,
                backend_type=_ENGINE,
                operation="download",
                target_name=f"{self._bucket}/{self._file}",
            )

        if not contents:
            raise SecretFetchError(
                f"file {self._file!r} empty",
                context=ModelConfigErrorContext(
                    backend_type=_ENGINE,
                    operation="download",
                    target_name=f"{self._bucket}/{self._file}",
                ),
            )
        logger.debug(
            "Downloaded secret object from S3",
            extra={"bucket": self._bucket, "object": self._file, "size_bytes": len(contents)},
        )
        return contents


__all__ = ["S3Decrypter", "default_s3_client"]
