# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Secret engines.

Secret references (``encrypted:<engine>!k:v...`` and
``encryptedFile:<engine>!k:v...``) are parsed by
:mod:`~configweave.engines.secret_reference_parser` and dispatched through an
:class:`EngineRegistry` to one of the built-in engines:

- ``noop``: returns the parameter text
- ``static``: fixed in-memory mapping
- ``secrets-manager``: AWS Secrets Manager (boto3)
- ``s3``: AWS S3 objects (boto3)
- ``gcs``: Google Cloud Storage objects
- ``kubernetes``: Kubernetes Secret objects
- ``vault``: HashiCorp Vault (hvac), registered from its settings
"""

from configweave.engines.engine_aws_secrets_manager import SecretsManagerDecrypter
from configweave.engines.engine_gcs import GcsDecrypter
from configweave.engines.engine_kubernetes import KubernetesDecrypter
from configweave.engines.engine_noop import NoopDecrypter
from configweave.engines.engine_registry import EngineRegistry
from configweave.engines.engine_s3 import S3Decrypter
from configweave.engines.engine_static import StaticDecrypter
from configweave.engines.protocol_decrypter import DecrypterFactory, ProtocolDecrypter
from configweave.engines.secret_reference_parser import (
    is_secret_reference,
    parse_params,
    parse_secret_reference,
)
from configweave.engines.util_temp_file import write_temp_file

__all__ = [
    "DecrypterFactory",
    "EngineRegistry",
    "GcsDecrypter",
    "KubernetesDecrypter",
    "NoopDecrypter",
    "ProtocolDecrypter",
    "S3Decrypter",
    "SecretsManagerDecrypter",
    "StaticDecrypter",
    "is_secret_reference",
    "parse_params",
    "parse_secret_reference",
    "write_temp_file",
]
