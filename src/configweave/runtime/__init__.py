# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Configuration resolution runtime.

- merge_fragments: precedence-ordered recursive merge with value normalization
- PlaceholderResolver: ``${path[:default]}`` substitution and secret injection
- Profile loading: fragment ordering from the active profile list, YAML source
- ResolverContext: ties the above to an engine registry
"""

from configweave.runtime.config_merger import deep_merge, merge_fragments
from configweave.runtime.config_normalizer import normalize_scalar, normalize_value
from configweave.runtime.placeholder_resolver import (
    PLACEHOLDER_PATTERN,
    PlaceholderResolver,
    lookup_flat_key,
)
from configweave.runtime.profile_loader import (
    ProtocolFragmentSource,
    YamlFragmentSource,
    active_profiles,
    fragment_names,
    load_fragments,
)
from configweave.runtime.resolver_context import (
    ResolverContext,
    load_properties,
    resolve,
)

__all__ = [
    "PLACEHOLDER_PATTERN",
    "PlaceholderResolver",
    "ProtocolFragmentSource",
    "ResolverContext",
    "YamlFragmentSource",
    "active_profiles",
    "deep_merge",
    "fragment_names",
    "load_fragments",
    "load_properties",
    "lookup_flat_key",
    "merge_fragments",
    "normalize_scalar",
    "normalize_value",
    "resolve",
]
