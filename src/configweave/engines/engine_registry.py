# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Engine registry: engine name -> decrypter factory.

The registry is an explicit object owned by a ResolverContext rather than
module-level state, so tests build their own with fake engines.

Thread Safety:
    Registration and lookup are guarded by a ``threading.Lock``. Decryption
    runs outside the lock.
"""

from __future__ import annotations

import functools
import logging
import threading
from collections.abc import Mapping

from configweave.engines.engine_aws_secrets_manager import SecretsManagerDecrypter
from configweave.engines.engine_gcs import GcsDecrypter
from configweave.engines.engine_kubernetes import KubernetesDecrypter
from configweave.engines.engine_noop import NoopDecrypter
from configweave.engines.engine_s3 import S3Decrypter
from configweave.engines.engine_static import StaticDecrypter
from configweave.engines.protocol_decrypter import DecrypterFactory, ProtocolDecrypter
from configweave.engines.secret_reference_parser import parse_secret_reference
from configweave.engines.vault import ModelVaultConfig, ProtocolVaultClient, VaultEngine
from configweave.enums import EnumSecretBackendType
from configweave.errors import (
    BackendConfigurationError,
    EngineNotRegisteredError,
    ModelConfigErrorContext,
)
from configweave.models.model_secret_reference import ModelSecretReference

logger = logging.getLogger(__name__)


class EngineRegistry:
    """Name-keyed table of decrypter factories.

    Example:
        >>> registry = EngineRegistry()
        >>> registry.register("noop", NoopDecrypter)
        >>> registry.decrypt("encrypted:noop!asdf1234")
        'asdf1234'
    """

    def __init__(self) -> None:
        self._factories: dict[str, DecrypterFactory] = {}
        self._vault: VaultEngine | None = None
        self._lock = threading.Lock()

    @classmethod
    def with_builtin_engines(
        cls,
        static_values: Mapping[str, str] | None = None,
        timeout_seconds: float = 30.0,
    ) -> EngineRegistry:
        """Build a registry with every built-in engine except Vault.

        Vault needs server settings and is added with :meth:`register_vault`.

        Args:
            static_values: Mapping served by the ``static`` engine
            timeout_seconds: Timeout handed to network-backed engines
        """
        registry = cls()
        registry.register(EnumSecretBackendType.NOOP.value, NoopDecrypter)
        registry.register(
            EnumSecretBackendType.STATIC.value,
            functools.partial(StaticDecrypter, values=dict(static_values or {})),
        )
        registry.register(
            EnumSecretBackendType.SECRETS_MANAGER.value,
            functools.partial(SecretsManagerDecrypter, timeout_seconds=timeout_seconds),
        )
        registry.register(
            EnumSecretBackendType.S3.value,
            functools.partial(S3Decrypter, timeout_seconds=timeout_seconds),
        )
        registry.register(
            EnumSecretBackendType.GCS.value,
            functools.partial(GcsDecrypter, timeout_seconds=timeout_seconds),
        )
        registry.register(
            EnumSecretBackendType.KUBERNETES.value,
            functools.partial(KubernetesDecrypter, timeout_seconds=timeout_seconds),
        )
        return registry

    # === Registration ===

    def register(self, name: str, factory: DecrypterFactory) -> None:
        """Register ``factory`` under ``name``, replacing any previous entry."""
        if not name:
            raise BackendConfigurationError(
                "engine name must not be empty",
                context=ModelConfigErrorContext(operation="register"),
            )
        with self._lock:
            replaced = name in self._factories
            self._factories[name] = factory
        logger.debug(
            "Registered secret engine",
            extra={"engine": name, "replaced": replaced},
        )

    def unregister(self, name: str) -> bool:
        """Remove ``name``. Returns True if it was registered."""
        with self._lock:
            removed = self._factories.pop(name, None) is not None
            if name == EnumSecretBackendType.VAULT.value:
                self._vault = None
        return removed

    def register_vault(
        self,
        config: ModelVaultConfig | None,
        environ: Mapping[str, str] | None = None,
        client: ProtocolVaultClient | None = None,
    ) -> VaultEngine:
        """Validate Vault settings and register the ``vault`` engine.

        Args:
            config: Vault settings; None means no settings were provided
            environ: Environment for VAULT_TOKEN lookups (process env when None)
            client: Client adapter override (hvac-backed when None)

        Returns:
            The registered engine

        Raises:
            BackendConfigurationError: If ``config`` is missing or invalid.
                Nothing is registered in that case.
        """
        if config is None:
            raise BackendConfigurationError(
                "vault secrets not configured",
                context=ModelConfigErrorContext(
                    backend_type=EnumSecretBackendType.VAULT,
                    operation="register",
                ),
            )
        engine = VaultEngine.from_config(config, environ=environ, client=client)
        with self._lock:
            self._factories[EnumSecretBackendType.VAULT.value] = engine.new_decrypter
            self._vault = engine
        logger.info(
            "Registered vault secret engine",
            extra={"vault_url": config.url, "auth_method": engine.auth_method.value},
        )
        return engine

    # === Lookup ===

    def is_registered(self, name: str) -> bool:
        with self._lock:
            return name in self._factories

    def engine_names(self) -> list[str]:
        with self._lock:
            return sorted(self._factories)

    @property
    def vault(self) -> VaultEngine | None:
        with self._lock:
            return self._vault

    def get_factory(self, name: str) -> DecrypterFactory:
        """Return the factory for ``name``.

        Raises:
            EngineNotRegisteredError: If no factory is registered under ``name``.
        """
        with self._lock:
            factory = self._factories.get(name)
            known = sorted(self._factories)
        if factory is None:
            raise EngineNotRegisteredError(
                f"secret engine {name!r} is not registered",
                context=ModelConfigErrorContext(operation="lookup_engine", target_name=name),
                registered_engines=known,
            )
        return factory

    def new_decrypter(self, reference: ModelSecretReference | str) -> ProtocolDecrypter:
        """Build the decrypter for a reference.

        Parameter validation happens here, before any network call.

        Raises:
            SecretReferenceError: Malformed reference or parameters
            EngineNotRegisteredError: Unknown engine
        """
        if isinstance(reference, str):
            reference = parse_secret_reference(reference)
        factory = self.get_factory(reference.engine)
        return factory(reference.is_file, reference.raw_params)

    def decrypt(self, reference: ModelSecretReference | str) -> str:
        """Resolve a reference to its secret value (or temp-file path)."""
        return self.new_decrypter(reference).decrypt()


__all__ = ["EngineRegistry"]
