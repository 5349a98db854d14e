"""Module registry with eager dependency resolution."""

from .core import (
    DependencyNotLoadedError,
    DuplicateModuleError,
    Exports,
    InvalidModuleIdError,
    ModuleDescriptor,
    ModuleNotBuiltError,
    ModuleRecord,
    ModuleRegistry,
    RegistryError,
    merge_exports,
)
from .default import define, get_registry, require, reset_registry_for_tests, try_define, try_require
from .dispatch import DefinitionCall, DefinitionKind, resolve_definition

__all__ = [
    "DefinitionCall",
    "DefinitionKind",
    "DependencyNotLoadedError",
    "DuplicateModuleError",
    "Exports",
    "InvalidModuleIdError",
    "ModuleDescriptor",
    "ModuleNotBuiltError",
    "ModuleRecord",
    "ModuleRegistry",
    "RegistryError",
    "define",
    "get_registry",
    "merge_exports",
    "require",
    "reset_registry_for_tests",
    "resolve_definition",
    "try_define",
    "try_require",
]
