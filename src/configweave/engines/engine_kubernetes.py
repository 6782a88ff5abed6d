# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Kubernetes Secret engine.

``encrypted:kubernetes!n:<secret name>!k:<data key>[!ns:<namespace>]``

The namespace defaults to the pod's own namespace, read from the mounted
service-account directory. Parameters split on the first colon.
"""

from __future__ import annotations

import base64
import binascii
import logging
from collections.abc import Callable
from pathlib import Path
from typing import Final

from kubernetes import client as k8s_client
from kubernetes import config as k8s_config
from kubernetes.client.rest import ApiException
from kubernetes.config.config_exception import ConfigException

from configweave.engines.secret_reference_parser import parse_params
from configweave.engines.util_temp_file import write_temp_file
from configweave.enums import EnumSecretBackendType
from configweave.errors import (
    BackendConfigurationError,
    ModelConfigErrorContext,
    SecretAuthenticationError,
    SecretBackendConnectionError,
    SecretFetchError,
    SecretKeyNotFoundError,
)

logger = logging.getLogger(__name__)

_ENGINE = EnumSecretBackendType.KUBERNETES

SERVICE_ACCOUNT_NAMESPACE_PATH: Final[str] = (
    "/var/run/secrets/kubernetes.io/serviceaccount/namespace"
)


def default_kubernetes_client() -> object:
    """Build a CoreV1Api from the in-cluster service-account configuration."""
    try:
        k8s_config.load_incluster_config()
    except ConfigException as e:
        raise BackendConfigurationError(
            "kubernetes secrets require in-cluster configuration",
            context=ModelConfigErrorContext(backend_type=_ENGINE, operation="connect"),
        ) from e
    return k8s_client.CoreV1Api()


def read_current_namespace(namespace_path: str = SERVICE_ACCOUNT_NAMESPACE_PATH) -> str:
    """Return the namespace this pod runs in.

    Raises:
        BackendConfigurationError: If the service-account file is unreadable or empty.
    """
    context = ModelConfigErrorContext(
        backend_type=_ENGINE,
        operation="read_namespace",
        target_name=namespace_path,
    )
    try:
        namespace = Path(namespace_path).read_text(encoding="utf-8").strip()
    except OSError as e:
        raise BackendConfigurationError(
            f"no 'ns' parameter and unable to read namespace from {namespace_path}",
            context=context,
        ) from e
    if not namespace:
        raise BackendConfigurationError(
            f"no 'ns' parameter and {namespace_path} is empty", context=context
        )
    return namespace


class KubernetesDecrypter:
    """Reads one key of a Kubernetes Secret."""

    def __init__(
        self,
        is_file: bool,
        raw_params: str,
        *,
        client_factory: Callable[[], object] = default_kubernetes_client,
        timeout_seconds: float = 30.0,
        namespace_path: str = SERVICE_ACCOUNT_NAMESPACE_PATH,
    ) -> None:
        params = parse_params(
            raw_params,
            required=("n", "k"),
            allowed=("n", "k", "ns"),
            first_colon_only=True,
            engine=_ENGINE.value,
        )
        self._is_file = is_file
        self._name = params["n"]
        self._key = params["k"]
        self._namespace = params.get("ns") or read_current_namespace(namespace_path)
        self._client_factory = client_factory
        self._timeout_seconds = timeout_seconds

    def decrypt(self) -> str:
        payload = self._fetch()
        if self._is_file:
            return write_temp_file(payload)
        return payload.decode("utf-8")

    def is_file(self) -> bool:
        return self._is_file

    def _fetch(self) -> bytes:
        target = f"{self._namespace}/{self._name}"
        context = ModelConfigErrorContext(
            backend_type=_ENGINE,
            operation="fetch_secret",
            target_name=target,
        )
        api = self._client_factory()
        try:
            secret = api.read_namespaced_secret(  # type: ignore[attr-defined]
                self._name,
                self._namespace,
                _request_timeout=self._timeout_seconds,
            )
        except ApiException as e:
            if e.status in (401, 403):
                raise SecretAuthenticationError(
                    f"access denied reading kubernetes secret {target}",
                    context=context,
                    status=e.status,
                ) from e
            if e.status == 404:
                raise SecretFetchError(
                    f"kubernetes secret {target} not found", context=context
                ) from e
            raise SecretBackendConnectionError(
                f"error reading kubernetes secret {target}: HTTP {e.status}",
                context=context,
            ) from e

        data = secret.data or {}
        if not data:
            raise SecretFetchError(f"no data in kubernetes secret {target}", context=context)
        if self._key not in data:
            raise SecretKeyNotFoundError(
                f"key {self._key!r} not found in kubernetes secret {target}; "
                f"keys present: {', '.join(sorted(data))}",
                available_keys=list(data),
                context=context,
            )
        try:
            payload = base64.b64decode(data[self._key], validate=True)
        except (binascii.Error, ValueError) as e:
            raise SecretFetchError(
                f"kubernetes secret {target} key {self._key!r} is not valid base64",
                context=context,
            ) from e
        logger.debug(
            "Fetched kubernetes secret",
            extra={"namespace": self._namespace, "secret_name": self._name},
        )
        return payload


__all__ = [
    "SERVICE_ACCOUNT_NAMESPACE_PATH",
    "KubernetesDecrypter",
    "default_kubernetes_client",
    "read_current_namespace",
]
