from .config import RegistrySettings
from .logging_utils import RegistryLogHandler, capture_registry_logs, configure_logging
from .models import ErrorKind, Failure, RegistrySnapshot, Success
from .registry import (
    DependencyNotLoadedError,
    DuplicateModuleError,
    Exports,
    ModuleNotBuiltError,
    ModuleRegistry,
    RegistryError,
    define,
    get_registry,
    require,
    try_define,
    try_require,
)

__all__ = [
    "define",
    "require",
    "try_define",
    "try_require",
    "get_registry",
    "ModuleRegistry",
    "Exports",
    "RegistrySettings",
    "RegistrySnapshot",
    "RegistryError",
    "DependencyNotLoadedError",
    "DuplicateModuleError",
    "ModuleNotBuiltError",
    "ErrorKind",
    "Success",
    "Failure",
    "RegistryLogHandler",
    "capture_registry_logs",
    "configure_logging",
]
