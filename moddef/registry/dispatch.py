from __future__ import annotations
from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional, Sequence

DEPENDENCY_LIST_TYPES = (list, tuple)


class DefinitionKind(str, Enum):
    """Which construction operation a ``define`` call maps onto."""

    NAMED = "named"
    ANONYMOUS = "anonymous"
    VALUE = "value"
    IDENTITY = "identity"


@dataclass(frozen=True)
class DefinitionCall:
    """Describe how a ``define`` argument tuple should be handled.

    ``target`` is the factory for ``NAMED``/``ANONYMOUS``, the raw exports
    for ``VALUE`` and the returned object for ``IDENTITY``. ``dependencies``
    stays ``None`` when the call declared no dependency list.
    """

    kind: DefinitionKind
    target: Any = None
    module_id: Optional[str] = None
    dependencies: Optional[Sequence[str]] = None


def is_dependency_list(value: Any) -> bool:
    """Return whether ``value`` is shaped like a list of module ids.

    Args:
        value: Candidate argument.

    Returns:
        bool: True for lists and tuples.
    """

    return isinstance(value, DEPENDENCY_LIST_TYPES)


def resolve_definition(args: Sequence[Any]) -> DefinitionCall:
    """Map ``define`` arguments onto a construction operation.

    Args:
        args: Positional arguments passed to ``define``.

    Returns:
        DefinitionCall: The chosen operation and its operands.
    """

    if len(args) == 3:
        module_id, dependencies, factory = args
        return DefinitionCall(DefinitionKind.NAMED, factory, module_id, dependencies)
    if len(args) == 2:
        return _resolve_pair(*args)
    if args and callable(args[0]):
        return DefinitionCall(DefinitionKind.ANONYMOUS, args[0])
    return DefinitionCall(DefinitionKind.IDENTITY, args[0] if args else None)


def _resolve_pair(first: Any, second: Any) -> DefinitionCall:
    """Resolve the two-argument forms.

    Args:
        first: Dependency list or module id.
        second: Factory or raw exports value.

    Returns:
        DefinitionCall: Anonymous, named or raw-value definition.
    """

    if is_dependency_list(first):
        return DefinitionCall(DefinitionKind.ANONYMOUS, second, dependencies=first)
    if callable(second):
        return DefinitionCall(DefinitionKind.NAMED, second, first)
    return DefinitionCall(DefinitionKind.VALUE, second, first)
