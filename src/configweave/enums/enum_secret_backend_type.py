# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Secret Backend Type Enumeration.

Defines the built-in secret backends. Used for error context and to name the
engines registered by default.
"""

from enum import Enum


class EnumSecretBackendType(str, Enum):
    """Built-in secret backends.

    The value of each member is the engine name used in secret references
    (``encrypted:<engine>!...``).

    Attributes:
        NOOP: Pass-through backend returning its parameter text
        STATIC: Fixed in-memory key/value backend
        SECRETS_MANAGER: AWS Secrets Manager
        S3: AWS S3 object store
        GCS: Google Cloud Storage object store
        KUBERNETES: Kubernetes Secret objects
        VAULT: HashiCorp Vault server
        RUNTIME: Resolver internals (merge, placeholder passes)
    """

    NOOP = "noop"
    STATIC = "static"
    SECRETS_MANAGER = "secrets-manager"
    S3 = "s3"
    GCS = "gcs"
    KUBERNETES = "kubernetes"
    VAULT = "vault"
    RUNTIME = "runtime"


__all__ = ["EnumSecretBackendType"]
