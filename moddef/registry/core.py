from __future__ import annotations
import logging
import threading
from collections.abc import Mapping
from dataclasses import dataclass, field
from types import SimpleNamespace
from typing import Any, Callable, Dict, Iterator, Optional, Sequence, Tuple, Union

from ..config import RegistrySettings
from ..constants import (
    MSG_DEPENDENCY_NOT_LOADED,
    MSG_INVALID_MODULE_ID,
    MSG_MODULE_EXISTS,
    MSG_MODULE_NOT_BUILT,
    RELATIVE_ID_PREFIXES,
)
from ..models import ErrorKind, Failure, ModuleSummary, Outcome, RegistrySnapshot, Success
from .dispatch import DefinitionKind, is_dependency_list, resolve_definition

logger = logging.getLogger(__name__)

ModuleIds = Union[str, Sequence[str]]
Factory = Callable[..., Any]
Callback = Callable[[Any], Any]


class RegistryError(RuntimeError):
    """Base exception raised for registry-related issues."""

    kind: ErrorKind
    template: str = "{module_id}"

    def __init__(self, module_id: Any, message: Optional[str] = None) -> None:
        self.module_id = module_id
        super().__init__(message or self.template.format(module_id=module_id))

    def to_failure(self) -> Failure:
        """Convert the exception into an explicit failure outcome.

        Returns:
            Failure: Tagged outcome carrying the error kind and module id.
        """
        module_id = None if self.module_id is None else str(self.module_id)
        return Failure(kind=self.kind, module_id=module_id, message=str(self))


class DependencyNotLoadedError(RegistryError):
    """Raised when a definition names a dependency that is not registered yet."""

    kind = ErrorKind.UNRESOLVED_DEPENDENCY
    template = MSG_DEPENDENCY_NOT_LOADED


class DuplicateModuleError(RegistryError):
    """Raised when a definition reuses an id that is already registered."""

    kind = ErrorKind.DUPLICATE_REGISTRATION
    template = MSG_MODULE_EXISTS


class ModuleNotBuiltError(RegistryError):
    """Raised when requiring an id that has not been defined."""

    kind = ErrorKind.UNBUILT_MODULE
    template = MSG_MODULE_NOT_BUILT


class InvalidModuleIdError(RegistryError, ValueError):
    """Raised when a module id is not a usable string."""

    kind = ErrorKind.INVALID_MODULE_ID

    def __init__(self, module_id: Any, reason: str) -> None:
        super().__init__(module_id, MSG_INVALID_MODULE_ID.format(module_id=module_id, reason=reason))


class Exports(SimpleNamespace):
    """Mutable public surface handed to a factory.

    Supports attribute access (``exports.add``) as well as item access
    (``exports["add"]``) so dependents can use whichever reads better.
    An exported name such as ``to_dict`` shadows the helper of the same
    name; ``dict(vars(exports))`` always returns the exported names.
    """

    def __getitem__(self, name: str) -> Any:
        return vars(self)[name]

    def __setitem__(self, name: str, value: Any) -> None:
        setattr(self, name, value)

    def __contains__(self, name: object) -> bool:
        return name in vars(self)

    def __iter__(self) -> Iterator[str]:
        return iter(list(vars(self)))

    def to_dict(self) -> Dict[str, Any]:
        return dict(vars(self))


@dataclass(frozen=True)
class ModuleRecord:
    """A committed registry entry. Never replaced or removed."""

    id: str
    dependency_ids: Tuple[str, ...]
    exports: Any


@dataclass
class ModuleDescriptor:
    """Candidate module handed to ``ModuleRegistry.build``.

    ``dependency_ids`` is ``None`` when the definition declared no dependency
    list at all. The factory receives the descriptor itself and may assign
    ``id`` to register an otherwise anonymous module.
    """

    factory: Factory
    id: Optional[str] = None
    dependency_ids: Optional[Tuple[str, ...]] = None
    exports: Optional[Exports] = None


def merge_exports(exports: Exports, returned: Any) -> Exports:
    """Copy the own properties of a factory's return value onto ``exports``.

    Keys on ``returned`` win over like-named keys already on ``exports``.
    Mappings contribute their items (keys converted with ``str``) and
    objects their instance attributes; anything else (numbers, strings)
    contributes nothing.

    Args:
        exports: Exports object populated by the factory.
        returned: Truthy value returned by the factory.

    Returns:
        Exports: The same ``exports`` object, updated in place.
    """
    if returned is exports:
        return exports
    if isinstance(returned, Mapping):
        items = list(returned.items())
    elif hasattr(returned, "__dict__") and not isinstance(returned, type):
        items = list(vars(returned).items())
    else:
        return exports
    for name, value in items:
        setattr(exports, str(name), value)
    return exports


@dataclass
class ModuleRegistry:
    """Append-only table of module records, populated by ``define``.

    All dependencies must be registered before a dependent is defined.
    Read-modify-write sequences run under one re-entrant lock so factories
    may call ``require`` (or ``define``) while their own build is in progress.
    """

    settings: RegistrySettings = field(default_factory=RegistrySettings)
    _records: Dict[str, ModuleRecord] = field(default_factory=dict, init=False, repr=False)
    _lock: threading.RLock = field(default_factory=threading.RLock, init=False, repr=False, compare=False)

    def __contains__(self, module_id: object) -> bool:
        try:
            return module_id in self._records
        except TypeError:
            return False

    def __len__(self) -> int:
        return len(self._records)

    def ids(self) -> list[str]:
        """Return registered module ids in registration order."""
        with self._lock:
            return list(self._records)

    def get_record(self, module_id: str) -> ModuleRecord:
        """Fetch the committed record for a module.

        Args:
            module_id: Registered module identifier.

        Returns:
            ModuleRecord: The stored record.

        Raises:
            ModuleNotBuiltError: If the id is not registered. Unhashable ids
            can never be registered and fail the same way.
        """
        try:
            return self._records[module_id]
        except (KeyError, TypeError) as exc:
            raise ModuleNotBuiltError(module_id) from exc

    def snapshot(self) -> RegistrySnapshot:
        """Return summary information about registered modules.

        Returns:
            RegistrySnapshot: Ids and dependency lists in registration order.
        """
        with self._lock:
            return RegistrySnapshot(
                modules=[
                    ModuleSummary(id=record.id, dependency_ids=list(record.dependency_ids))
                    for record in self._records.values()
                ]
            )

    def validate_dependencies(self, dependency_ids: Sequence[str]) -> Tuple[str, ...]:
        """Deduplicate a dependency list and check every id is registered.

        Args:
            dependency_ids: Requested ids, possibly with repeats.

        Returns:
            Tuple[str, ...]: Distinct ids in first-occurrence order.

        Raises:
            TypeError: If ``dependency_ids`` is not a list or tuple.
            DependencyNotLoadedError: If any id is not registered.
        """
        if not is_dependency_list(dependency_ids):
            raise TypeError(
                f"Dependencies must be a list or tuple of module ids, got {type(dependency_ids).__name__}."
            )
        validated: list[str] = []
        with self._lock:
            for module_id in dependency_ids:
                if module_id in validated:
                    logger.debug("Skipping duplicate dependency '%s'", module_id)
                    continue
                if module_id not in self:
                    raise DependencyNotLoadedError(module_id)
                validated.append(module_id)
        return tuple(validated)

    def build(self, descriptor: ModuleDescriptor) -> Any:
        """Run a descriptor's factory and commit the module if it has an id.

        The factory is called as ``factory(require, exports, descriptor,
        *dependency_exports)``. A truthy return value is merged over
        ``exports`` with the returned keys taking precedence; callers that
        both fill ``exports`` and return an object should keep that in mind.

        Args:
            descriptor: Candidate module with validated dependencies.

        Returns:
            Any: The module's final exports object.

        Raises:
            DuplicateModuleError: If the descriptor's id is already registered.
            InvalidModuleIdError: If the descriptor's id is not usable.
        """
        with self._lock:
            exports = Exports()
            descriptor.exports = exports
            arguments: list[Any] = [self.require, exports, descriptor]
            if descriptor.dependency_ids is not None:
                arguments.extend(self._records[dep].exports for dep in descriptor.dependency_ids)

            returned = descriptor.factory(*arguments)
            if returned:
                merge_exports(exports, returned)

            if descriptor.id is None:
                logger.debug("Built anonymous module with dependencies %s", list(descriptor.dependency_ids or ()))
                return exports
            return self._commit(descriptor.id, descriptor.dependency_ids or (), exports).exports

    def define(self, *args: Any) -> Any:
        """Define a module, choosing the form from the argument shape.

        Accepted shapes are ``(id, deps, factory)``, ``(deps, factory)``,
        ``(id, factory)``, ``(id, value)`` and ``(factory)``; anything else
        is returned unchanged.

        Returns:
            Any: The module's exports, the registered raw value, or the
            argument itself for the identity fallback.
        """
        call = resolve_definition(args)
        if call.kind is DefinitionKind.NAMED:
            return self.define_named(call.module_id, call.target, call.dependencies)
        if call.kind is DefinitionKind.ANONYMOUS:
            return self.define_anonymous(call.target, call.dependencies)
        if call.kind is DefinitionKind.VALUE:
            return self.define_value(call.module_id, call.target)
        return call.target

    def define_named(
        self,
        module_id: str,
        factory: Factory,
        dependencies: Optional[Sequence[str]] = None,
    ) -> Any:
        """Build a module from a factory and register it under ``module_id``.

        Args:
            module_id: Identifier to register.
            factory: Callable producing the exports.
            dependencies: Ids that must already be registered, or ``None``.

        Returns:
            Any: The registered exports.
        """
        self._check_id(module_id)
        return self._define(factory, dependencies, module_id=module_id)

    def define_anonymous(self, factory: Factory, dependencies: Optional[Sequence[str]] = None) -> Any:
        """Build a module without registering it, unless the factory names it.

        Args:
            factory: Callable producing the exports.
            dependencies: Ids that must already be registered, or ``None``.

        Returns:
            Any: The built exports.
        """
        return self._define(factory, dependencies)

    def define_value(self, module_id: str, value: Any) -> Any:
        """Register ``value`` as a module's exports without calling anything.

        Args:
            module_id: Identifier to register.
            value: Object exposed as the module's exports.

        Returns:
            Any: ``value`` itself.
        """
        self._check_id(module_id)
        with self._lock:
            return self._commit(module_id, (), value).exports

    def require(self, module_ids: ModuleIds, callback: Optional[Callback] = None) -> Any:
        """Look up the exports of one module or a list of modules.

        Args:
            module_ids: A single id, or a list/tuple of ids.
            callback: Called with each resolved exports object when callable.

        Returns:
            Any: The exports for a single id, or a dict keyed by id in input
            order for a list.

        Raises:
            ModuleNotBuiltError: If any requested id is not registered.
        """
        if is_dependency_list(module_ids):
            with self._lock:
                resolved: Dict[str, Any] = {}
                for module_id in module_ids:
                    resolved[module_id] = self.require(module_id, callback)
                return resolved

        with self._lock:
            record = self.get_record(module_ids)
        logger.debug("Resolved module '%s'", module_ids)
        if callable(callback):
            callback(record.exports)
        return record.exports

    def try_define(self, *args: Any) -> Outcome:
        """``define`` that reports registry errors as a ``Failure`` outcome."""
        try:
            value = self.define(*args)
        except RegistryError as exc:
            return exc.to_failure()
        return Success(value=value)

    def try_require(self, module_ids: ModuleIds, callback: Optional[Callback] = None) -> Outcome:
        """``require`` that reports registry errors as a ``Failure`` outcome."""
        try:
            value = self.require(module_ids, callback)
        except RegistryError as exc:
            return exc.to_failure()
        return Success(value=value)

    def _define(
        self,
        factory: Factory,
        dependencies: Optional[Sequence[str]],
        *,
        module_id: Optional[str] = None,
    ) -> Any:
        if not callable(factory):
            raise TypeError(f"Module factory must be callable, got {type(factory).__name__}.")
        with self._lock:
            validated = None if dependencies is None else self.validate_dependencies(dependencies)
            descriptor = ModuleDescriptor(factory=factory, id=module_id, dependency_ids=validated)
            return self.build(descriptor)

    def _commit(self, module_id: str, dependency_ids: Tuple[str, ...], exports: Any) -> ModuleRecord:
        """Insert a new record, refusing to overwrite an existing one.

        Raises:
            DuplicateModuleError: If the id already exists.
            InvalidModuleIdError: If the id is not usable.
        """
        self._check_id(module_id)
        if module_id in self._records:
            raise DuplicateModuleError(module_id)
        record = ModuleRecord(id=module_id, dependency_ids=tuple(dependency_ids), exports=exports)
        self._records[module_id] = record
        logger.info("Registered module '%s' with dependencies %s", module_id, list(record.dependency_ids))
        return record

    def _check_id(self, module_id: Any) -> None:
        if not isinstance(module_id, str):
            raise InvalidModuleIdError(module_id, "module ids must be strings")
        if not self.settings.strict_ids:
            return
        if not module_id.strip():
            raise InvalidModuleIdError(module_id, "module ids must not be empty")
        if module_id != module_id.strip():
            raise InvalidModuleIdError(module_id, "module ids must not have surrounding whitespace")
        if module_id.startswith(RELATIVE_ID_PREFIXES):
            raise InvalidModuleIdError(module_id, "relative module ids are not supported")
