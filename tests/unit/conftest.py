# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Marker configuration for the unit suite.

Every test collected below this directory gets the ``unit`` marker, so the
fast suite can be selected without each module declaring ``pytestmark``:

    # Only unit tests
    pytest -m unit

Unit tests never reach real backends. Cloud and Kubernetes SDK clients are
injected as mocks, hvac is either patched or pointed at a local
``pytest-httpserver`` instance, and files live under ``tmp_path``.

Related:
    - pyproject.toml: marker registration (``--strict-markers`` is on)
    - tests/conftest.py: shared registry, context and Vault fixtures
"""

from pathlib import Path

import pytest

UNIT_TEST_ROOT = Path(__file__).parent


def pytest_collection_modifyitems(
    config: pytest.Config,
    items: list[pytest.Item],
) -> None:
    """Mark items whose module lives under the unit test root."""
    for item in items:
        if item.path.is_relative_to(UNIT_TEST_ROOT) and item.get_closest_marker("unit") is None:
            item.add_marker(pytest.mark.unit)
