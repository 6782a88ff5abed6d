# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Profile-ordered fragment selection and YAML fragment loading.

For property names ``["spinnaker", "gate"]`` and active profiles
``"armory,local"`` the fragments are loaded in this order (lowest precedence
first)::

    spinnaker, gate,
    spinnaker-local, spinnaker-armory,
    gate-local, gate-armory

Profiles are applied in reverse-declared order, so the first declared
profile has the highest precedence.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping, Sequence
from pathlib import Path
from typing import Final, Protocol

import yaml

from configweave.errors import ConfigFragmentError, ModelConfigErrorContext
from configweave.models import DEFAULT_PROFILES_ENV_VAR
from configweave.types import ConfigFragment

logger = logging.getLogger(__name__)

# Maximum fragment size in bytes (10MB)
MAX_CONFIG_FILE_SIZE: Final[int] = 10 * 1024 * 1024

FRAGMENT_EXTENSIONS: Final[tuple[str, ...]] = (".yml", ".yaml")


def active_profiles(
    environ: Mapping[str, str] | None = None,
    env_var: str = DEFAULT_PROFILES_ENV_VAR,
) -> list[str]:
    """Return the comma-separated profile list from the environment.

    Blank entries are dropped and surrounding whitespace stripped.
    """
    env = os.environ if environ is None else environ
    raw = env.get(env_var, "")
    return [profile.strip() for profile in raw.split(",") if profile.strip()]


def fragment_names(names: Sequence[str], profiles: Sequence[str]) -> list[str]:
    """Fragment names to load, lowest precedence first."""
    ordered = list(names)
    for name in names:
        ordered.extend(f"{name}-{profile}" for profile in reversed(profiles))
    return ordered


class ProtocolFragmentSource(Protocol):
    """Loads one parsed fragment by name."""

    def load(self, name: str) -> ConfigFragment:
        """Return the fragment, or an empty mapping if it does not exist.

        Raises:
            ConfigFragmentError: If the fragment exists but is malformed.
        """
        ...


class YamlFragmentSource:
    """Reads ``<config_dir>/<name>.yml`` (or ``.yaml``) with ``yaml.safe_load``."""

    def __init__(self, config_dir: Path | str) -> None:
        self._config_dir = Path(config_dir)

    def load(self, name: str) -> ConfigFragment:
        for extension in FRAGMENT_EXTENSIONS:
            path = self._config_dir / f"{name}{extension}"
            if path.is_file():
                return self._load_file(path)

        logger.info(
            "Configuration fragment not found, skipping",
            extra={"fragment": name, "config_dir": str(self._config_dir)},
        )
        return {}

    def _load_file(self, path: Path) -> ConfigFragment:
        context = ModelConfigErrorContext.with_correlation(
            operation="load_fragment",
            target_name=path.name,
        )
        try:
            with path.open("r", encoding="utf-8") as f:
                content = f.read(MAX_CONFIG_FILE_SIZE + 1)
        except OSError as e:
            raise ConfigFragmentError(
                f"unable to read configuration fragment {path.name}: {e.strerror}",
                context=context,
            ) from e
        if len(content) > MAX_CONFIG_FILE_SIZE:
            raise ConfigFragmentError(
                f"configuration fragment {path.name} exceeds size limit",
                context=context,
            )

        try:
            data = yaml.safe_load(content)
        except yaml.YAMLError as e:
            raise ConfigFragmentError(
                f"invalid YAML in configuration fragment {path.name}",
                context=context,
            ) from e

        if data is None:
            return {}
        if not isinstance(data, dict):
            raise ConfigFragmentError(
                f"configuration fragment {path.name} must be a mapping, "
                f"got {type(data).__name__}",
                context=context,
            )
        logger.debug(
            "Loaded configuration fragment",
            extra={"path": str(path), "top_level_keys": len(data)},
        )
        return data


def load_fragments(
    names: Sequence[str],
    source: ProtocolFragmentSource,
    profiles: Sequence[str] = (),
) -> list[ConfigFragment]:
    """Load every name/profile combination from ``source`` in precedence order."""
    return [source.load(name) for name in fragment_names(names, profiles)]


__all__ = [
    "FRAGMENT_EXTENSIONS",
    "MAX_CONFIG_FILE_SIZE",
    "ProtocolFragmentSource",
    "YamlFragmentSource",
    "active_profiles",
    "fragment_names",
    "load_fragments",
]
