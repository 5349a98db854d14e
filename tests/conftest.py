from __future__ import annotations

from pathlib import Path
import sys

import pytest

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from moddef.config import RegistrySettings  # noqa: E402
from moddef.registry import ModuleRegistry  # noqa: E402


@pytest.fixture(autouse=True)
def _reset_global_registry_state() -> None:
    """Ensure the process-wide registry is isolated across tests."""
    from moddef.registry import reset_registry_for_tests

    reset_registry_for_tests()
    yield
    reset_registry_for_tests()


@pytest.fixture
def registry() -> ModuleRegistry:
    return ModuleRegistry()


@pytest.fixture
def strict_registry() -> ModuleRegistry:
    return ModuleRegistry(settings=RegistrySettings(strict_ids=True))


def make_adder_factory(key: str = "add"):
    """Create a factory that exports a two-argument adder under ``key``."""

    def factory(require, exports, module, *deps):
        exports[key] = lambda x, y: x + y

    return factory
