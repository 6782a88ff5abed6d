# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Vault Backend Configuration Model.

This module provides the Pydantic model for the Vault secret backend. The
settings usually live in the merged configuration tree under
``secrets.vault`` and use the camelCase keys services already ship with
(``authMethod``, ``userAuthPath``).

Security Note:
    The token and password fields use SecretStr to prevent accidental
    logging of credentials.
"""

from __future__ import annotations

from collections.abc import Mapping

from pydantic import BaseModel, ConfigDict, Field, SecretStr, ValidationError

from configweave.enums import EnumSecretBackendType, EnumVaultAuthMethod
from configweave.errors import BackendConfigurationError, ModelConfigErrorContext

VAULT_TOKEN_ENV_VAR = "VAULT_TOKEN"


class ModelVaultConfig(BaseModel):
    """Connection and authentication settings for the Vault backend.

    Which fields are required depends on ``auth_method``:

    - ``TOKEN``: ``token`` or the VAULT_TOKEN environment variable
    - ``KUBERNETES``: ``role`` and ``path`` (the auth mount)
    - ``USERPASS``: ``username``, ``password`` and ``user_auth_path``

    Requirements are checked by :meth:`validate_for_registration`, not at
    construction, so a disabled or partial block can still be loaded and
    reported on.

    Example:
        >>> config = ModelVaultConfig.from_tree({
        ...     "enabled": "true",
        ...     "url": "https://vault.example.com:8200",
        ...     "authMethod": "KUBERNETES",
        ...     "role": "my-service",
        ...     "path": "kubernetes",
        ... })
        >>> config.validate_for_registration({})
        <EnumVaultAuthMethod.KUBERNETES: 'KUBERNETES'>
    """

    model_config = ConfigDict(
        frozen=True,
        extra="ignore",
        populate_by_name=True,
    )

    enabled: bool = Field(
        default=False,
        description="Whether the Vault backend should be registered",
    )
    url: str = Field(
        default="",
        description="Vault server URL (e.g., 'https://vault.example.com:8200')",
    )
    auth_method: str = Field(
        default="",
        alias="authMethod",
        description="TOKEN, KUBERNETES or USERPASS",
    )
    role: str = Field(
        default="",
        description="Vault role for Kubernetes service-account login",
    )
    path: str = Field(
        default="",
        description="Mount path of the Kubernetes auth method",
    )
    username: str = Field(
        default="",
        description="Username for USERPASS login",
    )
    password: SecretStr | None = Field(
        default=None,
        description="Password for USERPASS login",
    )
    user_auth_path: str = Field(
        default="",
        alias="userAuthPath",
        description="Mount path of the userpass auth method",
    )
    namespace: str | None = Field(
        default=None,
        description="Vault namespace for Vault Enterprise",
    )
    token: SecretStr | None = Field(
        default=None,
        description="Pre-set token for the TOKEN auth method",
    )
    timeout_seconds: float = Field(
        default=30.0,
        gt=0,
        le=300.0,
        description="Timeout in seconds for each Vault call",
    )
    verify_ssl: bool = Field(
        default=True,
        description="Whether to verify SSL certificates",
    )

    @classmethod
    def from_tree(cls, values: Mapping[str, object]) -> ModelVaultConfig:
        """Build the config from a (normalized) configuration subtree.

        Empty strings are treated as unset so that ``enabled:`` with no value
        means "disabled" rather than a validation failure.

        Raises:
            BackendConfigurationError: If a value has the wrong shape. The
                message names the offending fields but never their values.
        """
        cleaned = {key: value for key, value in values.items() if value != ""}
        try:
            return cls.model_validate(cleaned)
        except ValidationError as e:
            fields = sorted({".".join(str(part) for part in err["loc"]) for err in e.errors()})
            raise BackendConfigurationError(
                f"invalid vault configuration: bad value for {', '.join(fields)}",
                context=_registration_context(),
            ) from e

    def validate_for_registration(
        self, environ: Mapping[str, str]
    ) -> EnumVaultAuthMethod:
        """Check that the settings are complete for the chosen auth method.

        Args:
            environ: Environment used to look up VAULT_TOKEN

        Returns:
            The parsed auth method

        Raises:
            BackendConfigurationError: If Vault is disabled, the URL or auth
                method is missing, the method is unknown, or a field the
                method needs is missing.
        """
        context = _registration_context(self.url or None)
        if not self.enabled:
            raise BackendConfigurationError("vault secrets disabled", context=context)
        if not self.url:
            raise BackendConfigurationError("vault url required", context=context)
        if not self.auth_method:
            raise BackendConfigurationError("auth method required", context=context)

        try:
            method = EnumVaultAuthMethod(self.auth_method.upper())
        except ValueError as e:
            raise BackendConfigurationError(
                f"unknown auth method {self.auth_method!r}, "
                f"expected one of {', '.join(m.value for m in EnumVaultAuthMethod)}",
                context=context,
            ) from e

        if method is EnumVaultAuthMethod.TOKEN:
            if self.token is None and not environ.get(VAULT_TOKEN_ENV_VAR):
                raise BackendConfigurationError(
                    f"{VAULT_TOKEN_ENV_VAR} environment variable not set",
                    context=context,
                )
        elif method is EnumVaultAuthMethod.KUBERNETES:
            if not self.path or not self.role:
                raise BackendConfigurationError(
                    "path and role both required for KUBERNETES auth method",
                    context=context,
                )
        elif not self.username or self.password is None or not self.user_auth_path:
            raise BackendConfigurationError(
                "username, password and userAuthPath are required for USERPASS auth method",
                context=context,
            )
        return method


def _registration_context(target_name: str | None = None) -> ModelConfigErrorContext:
    return ModelConfigErrorContext(
        backend_type=EnumSecretBackendType.VAULT,
        operation="register",
        target_name=target_name,
    )


__all__: list[str] = ["VAULT_TOKEN_ENV_VAR", "ModelVaultConfig"]
