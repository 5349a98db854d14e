"""Tests for module construction, registration and dependency validation."""
from __future__ import annotations

import threading
from types import SimpleNamespace

import pytest

from conftest import make_adder_factory
from moddef.models import ModuleSummary
from moddef.registry import (
    DependencyNotLoadedError,
    DuplicateModuleError,
    Exports,
    InvalidModuleIdError,
    ModuleDescriptor,
    ModuleNotBuiltError,
    RegistryError,
)


# ---------------------------------------------------------------------------
# Uniqueness
# ---------------------------------------------------------------------------


def test_duplicate_id_rejected_and_first_exports_kept(registry) -> None:
    first = registry.define("a", make_adder_factory())

    with pytest.raises(DuplicateModuleError) as excinfo:
        registry.define("a", make_adder_factory("other"))

    assert excinfo.value.module_id == "a"
    assert "Module already exists: 'a'" in str(excinfo.value)
    assert registry.require("a") is first
    assert "other" not in registry.require("a")
    assert len(registry) == 1


def test_duplicate_raw_value_rejected(registry) -> None:
    registry.define("cfg", {"debug": False})

    with pytest.raises(DuplicateModuleError):
        registry.define("cfg", {"debug": True})

    assert registry.require("cfg") == {"debug": False}


def test_anonymous_module_can_name_itself_once(registry) -> None:
    def factory(require, exports, module):
        module.id = "late"
        exports.value = 1

    registry.define(factory)
    with pytest.raises(DuplicateModuleError):
        registry.define(factory)

    assert registry.require("late").value == 1


# ---------------------------------------------------------------------------
# Dependency gating
# ---------------------------------------------------------------------------


def test_missing_dependency_blocks_definition(registry) -> None:
    registry.define("a", {"ok": True})
    calls = []

    def factory(require, exports, module, *deps):
        calls.append(deps)

    with pytest.raises(DependencyNotLoadedError) as excinfo:
        registry.define("b", ["a", "missing", "also-missing"], factory)

    assert excinfo.value.module_id == "missing"
    assert "Dependency not fully loaded: 'missing'" in str(excinfo.value)
    assert calls == []
    assert "b" not in registry
    assert registry.ids() == ["a"]


def test_missing_dependency_blocks_anonymous_definition(registry) -> None:
    with pytest.raises(DependencyNotLoadedError):
        registry.define(["nope"], lambda require, exports, module, nope: {"x": 1})
    assert len(registry) == 0


def test_dependency_list_must_be_a_list(registry) -> None:
    registry.define("HMY", {"version": "4.0"})

    with pytest.raises(TypeError):
        registry.define("tool", "HMY", make_adder_factory())


def test_validate_dependencies_has_no_side_effects(registry) -> None:
    registry.define("a", {})
    registry.define("b", {})

    assert registry.validate_dependencies(["b", "a", "b"]) == ("b", "a")
    assert registry.validate_dependencies([]) == ()
    assert registry.ids() == ["a", "b"]


# ---------------------------------------------------------------------------
# Deduplication and factory arguments
# ---------------------------------------------------------------------------


def test_duplicate_dependencies_injected_once(registry) -> None:
    a = registry.define("a", make_adder_factory())
    b = registry.define("b", {"name": "b"})
    received = []

    def factory(require, exports, module, *deps):
        received.extend(deps)

    registry.define("c", ["a", "a", "b", "a"], factory)

    assert len(received) == 2
    assert received[0] is a
    assert received[1] is b
    assert registry.get_record("c").dependency_ids == ("a", "b")


def test_factory_receives_require_exports_and_descriptor(registry) -> None:
    hmy = registry.define("HMY", {"version": "4.0"})
    captured = {}

    def factory(*args):
        captured["args"] = args

    registry.define("tool", ["HMY"], factory)

    require, exports, module, injected = captured["args"]
    assert require("HMY") is hmy
    assert injected is hmy
    assert isinstance(exports, Exports)
    assert isinstance(module, ModuleDescriptor)
    assert module.exports is exports
    assert module.id == "tool"
    assert module.dependency_ids == ("HMY",)


def test_factory_without_dependency_list_gets_three_arguments(registry) -> None:
    captured = []
    registry.define("solo", lambda *args: captured.append(args))
    registry.define([], lambda *args: captured.append(args))

    assert [len(args) for args in captured] == [3, 3]
    assert registry.get_record("solo").dependency_ids == ()


def test_factory_errors_propagate_without_registering(registry) -> None:
    def factory(require, exports, module):
        exports.partial = True
        raise ValueError("boom")

    with pytest.raises(ValueError, match="boom"):
        registry.define("broken", factory)

    assert "broken" not in registry


def test_factory_may_define_other_modules(registry) -> None:
    def outer(require, exports, module):
        registry.define("inner", {"depth": 1})
        exports.inner = require("inner")

    registry.define("outer", outer)

    assert registry.require("outer").inner is registry.require("inner")
    assert registry.ids() == ["inner", "outer"]


# ---------------------------------------------------------------------------
# Export merge semantics
# ---------------------------------------------------------------------------


def test_returned_object_merged_over_exports(registry) -> None:
    def factory(require, exports, module):
        exports.a = 1
        exports.shared = "exports"
        return {"b": 2, "shared": "returned"}

    result = registry.define("m", factory)

    assert isinstance(result, Exports)
    assert result.to_dict() == {"a": 1, "b": 2, "shared": "returned"}


def test_returned_instance_attributes_merged(registry) -> None:
    def factory(require, exports, module):
        exports.a = 1
        return SimpleNamespace(c=3)

    assert registry.define("m", factory).to_dict() == {"a": 1, "c": 3}


def test_returned_mapping_keys_converted_to_strings(registry) -> None:
    result = registry.define("m", lambda require, exports, module: {1: "one", "a": 2})

    assert result["1"] == "one"
    assert result.a == 2
    assert dict(vars(registry.require("m"))) == {"1": "one", "a": 2}


def test_exported_name_may_shadow_helper(registry) -> None:
    registry.define("m", lambda require, exports, module: {"to_dict": "x", "b": 2})

    exported = registry.require("m")
    assert exported["to_dict"] == "x"
    assert dict(vars(exported)) == {"to_dict": "x", "b": 2}


@pytest.mark.parametrize("returned", [None, {}, 0, "", False, 5, "text"])
def test_returned_value_without_properties_leaves_exports(registry, returned) -> None:
    def factory(require, exports, module):
        exports.a = 1
        return returned

    assert registry.define(factory).to_dict() == {"a": 1}


def test_returned_exports_object_is_kept(registry) -> None:
    def factory(require, exports, module):
        exports.a = 1
        return exports

    assert registry.define("m", factory).to_dict() == {"a": 1}


# ---------------------------------------------------------------------------
# Raw values, anonymous modules, records
# ---------------------------------------------------------------------------


def test_raw_value_registered_without_factory(registry) -> None:
    value = {"version": "4.0"}

    assert registry.define("X", value) is value
    assert registry.require("X") == {"version": "4.0"}
    assert registry.get_record("X").dependency_ids == ()


def test_anonymous_module_not_registered(registry) -> None:
    exports = registry.define(lambda require, exports, module: {"x": 1})

    assert exports.x == 1
    assert len(registry) == 0


def test_records_are_frozen(registry) -> None:
    registry.define("a", {})
    record = registry.get_record("a")

    with pytest.raises(AttributeError):
        record.id = "b"


def test_get_record_missing(registry) -> None:
    with pytest.raises(ModuleNotBuiltError):
        registry.get_record("ghost")


def test_unhashable_ids_are_never_registered(registry) -> None:
    assert {"a": 1} not in registry
    with pytest.raises(ModuleNotBuiltError):
        registry.get_record(["a"])
    with pytest.raises(DependencyNotLoadedError):
        registry.define("b", [{"a": 1}], make_adder_factory())
    assert len(registry) == 0


def test_snapshot_lists_modules_in_registration_order(registry) -> None:
    registry.define("b", {})
    registry.define("a", ["b"], make_adder_factory())

    snapshot = registry.snapshot()

    assert snapshot.modules == [
        ModuleSummary(id="b", dependency_ids=[]),
        ModuleSummary(id="a", dependency_ids=["b"]),
    ]
    assert snapshot.ids() == ["b", "a"]


def test_exports_item_and_attribute_access() -> None:
    exports = Exports()
    exports.add = 1
    exports["sub"] = 2

    assert exports["add"] == 1
    assert exports.sub == 2
    assert "add" in exports
    assert "mul" not in exports
    assert list(exports) == ["add", "sub"]
    assert bool(exports)
    with pytest.raises(KeyError):
        exports["mul"]


# ---------------------------------------------------------------------------
# Module ids
# ---------------------------------------------------------------------------


@pytest.mark.parametrize("module_registry", ["registry", "strict_registry"])
def test_non_string_id_rejected_in_any_mode(request, module_registry) -> None:
    target = request.getfixturevalue(module_registry)

    with pytest.raises(InvalidModuleIdError, match="module ids must be strings"):
        target.define(5, {"a": 1})
    with pytest.raises(ValueError):
        target.define_named(None, make_adder_factory())
    assert len(target) == 0


def test_lenient_ids_accept_empty_string(registry) -> None:
    registry.define("", {"ok": True})
    assert registry.require("") == {"ok": True}


def test_namespaced_ids_are_opaque(registry) -> None:
    registry.define("HMY/tools/parse", {"kind": "slash"})
    registry.define("HMY.tools.parse", {"kind": "dot"})

    assert registry.require("HMY/tools/parse")["kind"] == "slash"
    assert registry.require("HMY.tools.parse")["kind"] == "dot"


@pytest.mark.parametrize("module_id", ["", "   ", " padded", "./local", "../parent"])
def test_strict_ids_reject_unusable_ids(strict_registry, module_id) -> None:
    with pytest.raises(InvalidModuleIdError):
        strict_registry.define(module_id, {})
    assert len(strict_registry) == 0


def test_strict_ids_checked_for_self_named_modules(strict_registry) -> None:
    def factory(require, exports, module):
        module.id = "./relative"

    with pytest.raises(InvalidModuleIdError):
        strict_registry.define(factory)


def test_lenient_ids_accept_relative_looking_strings(registry) -> None:
    registry.define("./local", {"ok": True})
    assert registry.require("./local") == {"ok": True}


def test_error_hierarchy() -> None:
    for error_type in (DependencyNotLoadedError, DuplicateModuleError, ModuleNotBuiltError):
        assert issubclass(error_type, RegistryError)
        assert issubclass(error_type, RuntimeError)
    assert not issubclass(DependencyNotLoadedError, ModuleNotBuiltError)


# ---------------------------------------------------------------------------
# Concurrency
# ---------------------------------------------------------------------------


def test_concurrent_definitions_register_once(registry) -> None:
    barrier = threading.Barrier(8)
    outcomes = []

    def worker(index: int) -> None:
        barrier.wait()
        outcomes.append(registry.try_define("shared", {"winner": index}))

    threads = [threading.Thread(target=worker, args=(i,)) for i in range(8)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert sum(1 for outcome in outcomes if outcome.ok) == 1
    assert len(registry) == 1
