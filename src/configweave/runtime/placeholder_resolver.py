# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Placeholder and secret-reference resolution over a merged tree.

Every string leaf is visited once per pass:

1. A leaf that is a secret reference (``encrypted:...``/``encryptedFile:...``)
   is replaced by the decrypted value and sealed. Sealed leaves are never
   scanned or decrypted again.
2. Otherwise each ``${path}`` / ``${path:default}`` is replaced by, in order:
   the string leaf at dotted ``path`` in the tree, the environment variable
   named exactly ``path``, the default text. With none of these the token is
   left as is. A leaf found at ``path`` that is still a secret reference is
   decrypted and sealed first, so the reference text is never copied.

Substituted text can itself hold placeholders or point at leaves not visited
yet, so passes repeat until one changes nothing, or until as many passes as
the tree has top-level keys have run.

Bound exhaustion:
    If the final allowed pass still changed leaves and placeholders remain,
    a WARNING lists the affected leaf paths. With ``strict=True`` a
    PlaceholderResolutionError is raised instead. Placeholders that are simply
    unresolvable (stable across a pass) are left in place and only logged at
    DEBUG.
"""

from __future__ import annotations

import logging
import os
import re
from collections.abc import Mapping
from typing import Final

from configweave.engines import EngineRegistry, is_secret_reference
from configweave.enums import EnumSecretBackendType
from configweave.errors import ModelConfigErrorContext, PlaceholderResolutionError
from configweave.types import ConfigTree, ConfigValue, LeafPath

logger = logging.getLogger(__name__)

PLACEHOLDER_PATTERN: Final[re.Pattern[str]] = re.compile(r"\$\{(.*?)}")


def lookup_flat_key(tree: ConfigTree, dotted_path: str) -> str | None:
    """Return the string leaf at ``a.b.c``, or None if absent or not a string."""
    node: ConfigValue = tree
    for segment in dotted_path.split("."):
        if not isinstance(node, dict) or segment not in node:
            return None
        node = node[segment]
    return node if isinstance(node, str) else None


def format_leaf_path(path: LeafPath) -> str:
    text = ""
    for part in path:
        if isinstance(part, int):
            text += f"[{part}]"
        else:
            text += f".{part}" if text else part
    return text


class PlaceholderResolver:
    """Rewrites placeholders and secret references in a tree, in place.

    Args:
        registry: Engine registry used for secret references
        environ: Environment for placeholder fallback (process env when None)
        strict: Raise instead of warn when the pass bound is exhausted

    Example:
        >>> tree = {"mock": {"somekey": "${mock.flat.otherkey.value}",
        ...                  "flat": {"otherkey": {"value": "V"}}}}
        >>> PlaceholderResolver(EngineRegistry()).resolve(tree)["mock"]["somekey"]
        'V'
    """

    def __init__(
        self,
        registry: EngineRegistry,
        environ: Mapping[str, str] | None = None,
        strict: bool = False,
    ) -> None:
        self._registry = registry
        self._environ = os.environ if environ is None else environ
        self._strict = strict

    def resolve(self, tree: ConfigTree) -> ConfigTree:
        """Resolve ``tree`` in place and return it.

        Raises:
            ConfigResolutionError: The first secret reference that fails to
                decrypt, or PlaceholderResolutionError in strict mode.
        """
        sealed: set[LeafPath] = set()
        bound = max(1, len(tree))
        passes = 0
        changed = True
        while changed and passes < bound:
            passes += 1
            changed = self._resolve_node(tree, tree, (), sealed)

        logger.debug(
            "Placeholder resolution finished",
            extra={"passes": passes, "bound": bound, "secrets_resolved": len(sealed)},
        )
        if changed:
            self._report_exhaustion(tree, sealed, bound)
        return tree

    def _resolve_node(
        self,
        root: ConfigTree,
        node: dict[str, ConfigValue] | list[ConfigValue],
        prefix: LeafPath,
        sealed: set[LeafPath],
    ) -> bool:
        changed = False
        keys: list[str | int] = list(node) if isinstance(node, dict) else list(range(len(node)))
        for key in keys:
            value = node[key]  # type: ignore[index]
            path = (*prefix, key)
            if isinstance(value, str):
                resolved = self._resolve_leaf(root, value, path, sealed)
                if resolved != value:
                    node[key] = resolved  # type: ignore[index]
                    changed = True
            elif self._resolve_node(root, value, path, sealed):
                changed = True
        return changed

    def _resolve_leaf(
        self,
        root: ConfigTree,
        value: str,
        path: LeafPath,
        sealed: set[LeafPath],
    ) -> str:
        if path in sealed:
            return value
        if is_secret_reference(value):
            return self._decrypt(value, path, sealed)
        return PLACEHOLDER_PATTERN.sub(
            lambda match: self._substitute(root, match, sealed), value
        )

    def _decrypt(self, reference: str, path: LeafPath, sealed: set[LeafPath]) -> str:
        secret = self._registry.decrypt(reference)
        sealed.add(path)
        logger.debug(
            "Resolved secret reference",
            extra={"leaf_path": format_leaf_path(path)},
        )
        return secret

    def _substitute(
        self, root: ConfigTree, match: re.Match[str], sealed: set[LeafPath]
    ) -> str:
        dotted_path, has_default, default = match.group(1).partition(":")
        found = lookup_flat_key(root, dotted_path)
        if found is not None:
            target: LeafPath = tuple(dotted_path.split("."))
            if target not in sealed and is_secret_reference(found):
                # referenced leaf not visited yet: decrypt and seal it in place
                found = self._decrypt(found, target, sealed)
                _set_leaf(root, target, found)
            return found
        env_value = self._environ.get(dotted_path)
        if env_value is not None:
            return env_value
        if has_default:
            return default
        logger.debug("Placeholder unresolved", extra={"placeholder": dotted_path})
        return match.group(0)

    def _report_exhaustion(
        self, tree: ConfigTree, sealed: set[LeafPath], bound: int
    ) -> None:
        unresolved = [
            format_leaf_path(path)
            for path, value in _iter_leaves(tree, ())
            if path not in sealed and PLACEHOLDER_PATTERN.search(value)
        ]
        if not unresolved:
            return
        if self._strict:
            raise PlaceholderResolutionError(
                f"placeholders still unresolved after {bound} passes: {', '.join(unresolved)}",
                context=ModelConfigErrorContext(
                    backend_type=EnumSecretBackendType.RUNTIME,
                    operation="resolve_placeholders",
                ),
                unresolved_paths=unresolved,
            )
        logger.warning(
            "Placeholder resolution stopped at pass bound with placeholders remaining",
            extra={"bound": bound, "unresolved_paths": unresolved},
        )


def _set_leaf(tree: ConfigTree, path: LeafPath, value: str) -> None:
    node: ConfigValue = tree
    for segment in path[:-1]:
        node = node[segment]  # type: ignore[index,call-overload]
    node[path[-1]] = value  # type: ignore[index,call-overload]


def _iter_leaves(
    node: ConfigValue, prefix: LeafPath
) -> list[tuple[LeafPath, str]]:
    if isinstance(node, str):
        return [(prefix, node)]
    items = node.items() if isinstance(node, dict) else enumerate(node)
    leaves: list[tuple[LeafPath, str]] = []
    for key, child in items:
        leaves.extend(_iter_leaves(child, (*prefix, key)))
    return leaves


__all__ = [
    "PLACEHOLDER_PATTERN",
    "PlaceholderResolver",
    "format_leaf_path",
    "lookup_flat_key",
]
