# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""configweave: layered configuration with placeholder and secret resolution.

Typical use::

    from configweave import ResolverContext, YamlFragmentSource

    context = ResolverContext()
    config = context.load_properties(
        ["spinnaker", "gate"],
        YamlFragmentSource("/opt/spinnaker/config"),
    )
"""

from configweave.engines import EngineRegistry
from configweave.engines.vault import ModelVaultConfig
from configweave.errors import ConfigResolutionError
from configweave.models import ModelResolverConfig
from configweave.runtime import (
    ResolverContext,
    YamlFragmentSource,
    load_properties,
    merge_fragments,
    resolve,
)

__version__ = "0.1.0"

__all__ = [
    "ConfigResolutionError",
    "EngineRegistry",
    "ModelResolverConfig",
    "ModelVaultConfig",
    "ResolverContext",
    "YamlFragmentSource",
    "__version__",
    "load_properties",
    "merge_fragments",
    "resolve",
]
