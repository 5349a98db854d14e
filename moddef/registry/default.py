"""Process-wide registry behind the module-level ``define``/``require``.

The registry is created on first use from ``RegistrySettings.from_env()``
and lives for the rest of the process.
"""

import threading
from typing import Any, Optional

from ..config import RegistrySettings
from ..models import Outcome
from .core import Callback, ModuleIds, ModuleRegistry

# Global registry instance
_registry: Optional[ModuleRegistry] = None
_registry_lock = threading.Lock()


def get_registry() -> ModuleRegistry:
    """Get or create the global module registry.

    Returns:
        ModuleRegistry: The process-wide registry.
    """
    global _registry

    with _registry_lock:
        if _registry is None:
            _registry = ModuleRegistry(settings=RegistrySettings.from_env())

    return _registry


def reset_registry_for_tests() -> None:
    """Drop the global registry so the next call starts from an empty one."""
    global _registry

    with _registry_lock:
        _registry = None


def define(*args: Any) -> Any:
    """Define a module on the global registry. See ``ModuleRegistry.define``."""
    return get_registry().define(*args)


def require(module_ids: ModuleIds, callback: Optional[Callback] = None) -> Any:
    """Look up modules on the global registry. See ``ModuleRegistry.require``."""
    return get_registry().require(module_ids, callback)


def try_define(*args: Any) -> Outcome:
    return get_registry().try_define(*args)


def try_require(module_ids: ModuleIds, callback: Optional[Callback] = None) -> Outcome:
    return get_registry().try_require(module_ids, callback)
