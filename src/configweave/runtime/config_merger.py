# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Precedence-ordered merge of configuration fragments.

Fragments are folded lowest precedence first:

- mapping + mapping: merged recursively
- anything else: the later value replaces the earlier one (lists included)
- a later ``None`` (an empty YAML section) keeps the earlier value

Inputs are never mutated. The merged tree is normalized to string leaves.
"""

from __future__ import annotations

import copy
import logging
from collections.abc import Mapping, Sequence

from configweave.errors import ConfigFragmentError, ModelConfigErrorContext
from configweave.runtime.config_normalizer import normalize_scalar, normalize_value
from configweave.types import ConfigTree

logger = logging.getLogger(__name__)


def deep_merge(base: Mapping[str, object], override: Mapping[object, object]) -> dict[str, object]:
    """Return a new mapping with ``override`` merged over ``base``.

    Keys of ``override`` are normalized to text so that ``1`` and ``"1"`` land
    on the same entry.
    """
    result: dict[str, object] = dict(base)
    for raw_key, value in override.items():
        key = normalize_scalar(raw_key)
        if value is None and key in result:
            continue
        existing = result.get(key)
        if isinstance(value, Mapping):
            base_mapping = existing if isinstance(existing, Mapping) else {}
            result[key] = deep_merge(base_mapping, value)
        else:
            result[key] = copy.deepcopy(value)
    return result


def merge_fragments(fragments: Sequence[Mapping[object, object] | None]) -> ConfigTree:
    """Merge fragments (lowest precedence first) into one normalized tree.

    Args:
        fragments: Parsed fragments; None entries (empty documents) are skipped

    Returns:
        Normalized merged tree owned by the caller

    Raises:
        ConfigFragmentError: If a fragment is not a mapping or holds a value
            that cannot be normalized.
    """
    merged: dict[str, object] = {}
    for index, fragment in enumerate(fragments):
        if fragment is None:
            continue
        if not isinstance(fragment, Mapping):
            raise ConfigFragmentError(
                f"configuration fragment {index} is not a mapping "
                f"(got {type(fragment).__name__})",
                context=ModelConfigErrorContext(
                    operation="merge",
                    target_name=f"fragment[{index}]",
                ),
            )
        merged = deep_merge(merged, fragment)

    logger.debug(
        "Merged configuration fragments",
        extra={"fragment_count": len(fragments), "top_level_keys": len(merged)},
    )
    tree = normalize_value(merged)
    assert isinstance(tree, dict)
    return tree


__all__ = ["deep_merge", "merge_fragments"]
