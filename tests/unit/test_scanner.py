"""Tests for opal.catalog.scanner module."""

import types
from datetime import datetime, timedelta
from pathlib import Path

import pytest

from opal.catalog.loader import load_module
from opal.catalog.marker import callable_method
from opal.catalog.scanner import (
    exported_types,
    scan_instance,
    scan_module,
    scan_modules,
    scan_type,
    scan_types,
)
from opal.errors import DuplicateMethodNameError, InvalidArgumentError


FIXTURES = Path(__file__).resolve().parent.parent / "fixtures"


class SampleOps:
    @callable_method("Public callable method", read_only=True)
    def public_callable_method(self) -> None:
        pass

    @callable_method("Public callable method with parameters", read_only=False)
    def public_callable_with_params(self, id: int, name: str) -> str:
        return f"{id}: {name}"

    def public_non_callable_method(self) -> None:
        pass

    @callable_method("Private callable method", read_only=True)
    def _private_callable_method(self) -> None:
        pass

    @callable_method("Mangled callable method", read_only=True)
    def __mangled_callable_method(self) -> None:
        pass

    @staticmethod
    @callable_method("Static callable method", read_only=True)
    def static_callable_method() -> None:
        pass

    @staticmethod
    def static_non_callable_method() -> None:
        pass

    @staticmethod
    @callable_method("Private static callable method", read_only=True)
    def _private_static_callable_method() -> None:
        pass

    @classmethod
    @callable_method("Class callable method")
    def class_callable_method(cls, count: int) -> list[str]:
        return [cls.__name__] * count

    @property
    def some_property(self) -> int:
        return 1

    class Nested:
        @callable_method("Nested class method")
        def nested(self) -> None:
            pass


class ComplexParamsOps:
    @callable_method("Method with complex parameters")
    def complex_params(self, date: datetime, duration: timedelta, path: Path) -> None:
        pass


class OverloadedOps:
    @callable_method("First overload")
    def overloaded_method(self) -> None:
        pass

    @callable_method("Unrelated method")
    def other_method(self) -> None:
        pass

    @callable_method("Second overload")
    def overloaded_method(self, param: int) -> None:  # noqa: F811
        pass


class OuterOps:
    @callable_method("Outer operation")
    def outer_op(self) -> None:
        pass

    class InnerOps:
        @callable_method("Inner operation", read_only=True)
        def inner_op(self) -> None:
            pass

        class DeepOps:
            @callable_method("Deep operation")
            def deep_op(self) -> None:
                pass

    class _PrivateOps:
        @callable_method("Private nested operation")
        def private_op(self) -> None:
            pass

    AliasOps = ComplexParamsOps


class EmptyOps:
    def nothing_marked(self) -> None:
        pass


class BaseOps:
    @callable_method("Inherited callable")
    def inherited(self) -> str:
        return "base"

    @callable_method("Overridden without marker")
    def hidden(self) -> None:
        pass

    @callable_method("Overridden with marker")
    def replaced(self) -> None:
        pass


class DerivedOps(BaseOps):
    @callable_method("Derived callable")
    def derived(self) -> None:
        pass

    def hidden(self) -> None:
        pass

    @callable_method("Replacement callable", read_only=True)
    def replaced(self) -> None:
        pass


def _by_name(descriptors):
    return {d.method_name: d for d in descriptors}


class TestScanType:
    """Tests for scan_type."""

    def test_finds_public_callable_methods(self):
        methods = scan_type(SampleOps)

        assert sorted(d.method_name for d in methods) == [
            "class_callable_method",
            "public_callable_method",
            "public_callable_with_params",
            "static_callable_method",
        ]

    def test_includes_static_methods(self):
        static = _by_name(scan_type(SampleOps))["static_callable_method"]

        assert static.description == "Static callable method"
        assert static.read_only is True
        assert static.parameters == ()
        assert static.invocation_handle is SampleOps.static_callable_method

    def test_includes_class_methods_bound_to_class(self):
        method = _by_name(scan_type(SampleOps))["class_callable_method"]

        assert [p.name for p in method.parameters] == ["count"]
        assert method.return_type == list[str]
        assert method.invocation_handle(2) == ["SampleOps", "SampleOps"]

    def test_excludes_private_methods(self):
        names = _by_name(scan_type(SampleOps))

        assert "_private_callable_method" not in names
        assert "_SampleOps__mangled_callable_method" not in names
        assert "_private_static_callable_method" not in names

    def test_excludes_non_callable_methods(self):
        names = _by_name(scan_type(SampleOps))

        assert "public_non_callable_method" not in names
        assert "static_non_callable_method" not in names
        assert "some_property" not in names
        assert "nested" not in names

    def test_correctly_captures_method_info(self):
        method = _by_name(scan_type(SampleOps))["public_callable_method"]

        assert method.declaring_type_name == "SampleOps"
        assert method.description == "Public callable method"
        assert method.read_only is True
        assert method.parameters == ()
        assert method.return_type is type(None)

    def test_correctly_captures_parameters(self):
        method = _by_name(scan_type(SampleOps))["public_callable_with_params"]

        assert len(method.parameters) == 2
        assert method.parameters[0].name == "id"
        assert method.parameters[0].parameter_type is int
        assert method.parameters[1].name == "name"
        assert method.parameters[1].parameter_type is str
        assert method.return_type is str
        assert method.read_only is False

    def test_instance_method_handle_expects_instance(self):
        method = _by_name(scan_type(SampleOps))["public_callable_with_params"]
        assert method.invocation_handle(SampleOps(), 7, "seven") == "7: seven"

    def test_handles_complex_parameter_types(self):
        methods = scan_type(ComplexParamsOps)

        assert len(methods) == 1
        assert [p.parameter_type for p in methods[0].parameters] == [datetime, timedelta, Path]

    def test_raises_on_overloaded_methods(self):
        with pytest.raises(DuplicateMethodNameError) as exc_info:
            scan_type(OverloadedOps)

        assert "Method overloading is not supported" in str(exc_info.value)
        assert "OverloadedOps.overloaded_method" in str(exc_info.value)
        assert exc_info.value.type_name == "OverloadedOps"
        assert exc_info.value.method_name == "overloaded_method"

    def test_no_marked_methods_returns_empty_list(self):
        assert scan_type(EmptyOps) == []

    def test_rejects_none(self):
        with pytest.raises(InvalidArgumentError):
            scan_type(None)

    def test_rejects_non_class(self):
        with pytest.raises(InvalidArgumentError, match="expected a class"):
            scan_type(SampleOps())

    def test_repeated_scans_are_equal_but_fresh(self):
        first = scan_type(SampleOps)
        second = scan_type(SampleOps)

        assert first == second
        assert all(a is not b for a, b in zip(first, second))


class TestInheritance:
    """Marked methods surface from base classes."""

    def test_includes_inherited_methods(self):
        methods = _by_name(scan_type(DerivedOps))

        assert methods["inherited"].declaring_type_name == "BaseOps"
        assert methods["derived"].declaring_type_name == "DerivedOps"

    def test_unmarked_override_hides_base_marker(self):
        assert "hidden" not in _by_name(scan_type(DerivedOps))

    def test_marked_override_is_reported_once(self):
        methods = scan_type(DerivedOps)
        replaced = [d for d in methods if d.method_name == "replaced"]

        assert len(replaced) == 1
        assert replaced[0].description == "Replacement callable"
        assert replaced[0].declaring_type_name == "DerivedOps"

    def test_subclass_members_come_first(self):
        names = [d.method_name for d in scan_type(DerivedOps)]
        assert names == ["derived", "replaced", "inherited"]


class TestScanInstance:
    """Tests for scan_instance."""

    def test_handles_are_bound(self):
        ops = SampleOps()
        method = _by_name(scan_instance(ops))["public_callable_with_params"]

        assert method.parameters[0].name == "id"
        assert method.invocation_handle(1, "one") == "1: one"
        assert method.invocation_handle.__self__ is ops

    def test_same_descriptors_as_type_scan_apart_from_handles(self):
        by_type = scan_type(SampleOps)
        by_instance = scan_instance(SampleOps())

        assert [d.method_name for d in by_type] == [d.method_name for d in by_instance]
        assert [d.parameters for d in by_type] == [d.parameters for d in by_instance]

    def test_rejects_none(self):
        with pytest.raises(InvalidArgumentError):
            scan_instance(None)

    def test_rejects_class(self):
        with pytest.raises(InvalidArgumentError, match="use scan_type"):
            scan_instance(SampleOps)


class TestScanTypes:
    """Tests for scan_types."""

    def test_empty_input_returns_empty_list(self):
        assert scan_types([]) == []

    def test_rejects_none(self):
        with pytest.raises(InvalidArgumentError):
            scan_types(None)

    def test_concatenates_in_input_order(self):
        methods = scan_types([ComplexParamsOps, EmptyOps, DerivedOps])

        assert [d.method_name for d in methods] == ["complex_params", "derived", "replaced", "inherited"]

    def test_accepts_generators(self):
        methods = scan_types(cls for cls in [ComplexParamsOps])
        assert len(methods) == 1

    def test_duplicate_aborts_whole_batch(self):
        with pytest.raises(DuplicateMethodNameError):
            scan_types([ComplexParamsOps, OverloadedOps, DerivedOps])

    def test_none_element_is_rejected(self):
        with pytest.raises(InvalidArgumentError):
            scan_types([ComplexParamsOps, None])


class TestModules:
    """Tests for exported_types, scan_module and scan_modules."""

    def test_scan_module_from_file(self):
        module = load_module(FIXTURES / "user_ops.py")
        methods = scan_module(module)

        assert sorted(str(d) for d in methods) == [
            "get_user_details [ReadOnly=True]: Get user information",
            "reimport_user [ReadOnly=False]: Triggers a manual user reimport",
        ]

    def test_imported_classes_are_not_exported(self):
        module = types.ModuleType("fake_ops")
        module.SampleOps = SampleOps

        assert exported_types(module) == []
        assert scan_module(module) == []

    def test_dunder_all_controls_exports(self):
        module = types.ModuleType("fake_ops")
        module.SampleOps = SampleOps
        module.ComplexParamsOps = ComplexParamsOps
        module.helper = lambda: None
        module.__all__ = ["ComplexParamsOps", "helper", "missing"]

        assert exported_types(module) == [ComplexParamsOps]

    def test_nested_public_classes_are_exported(self):
        module = types.ModuleType("fake_ops")
        module.OuterOps = OuterOps
        module.__all__ = ["OuterOps"]

        assert exported_types(module) == [OuterOps, OuterOps.InnerOps, OuterOps.InnerOps.DeepOps]

    def test_scan_module_finds_nested_methods(self):
        module = types.ModuleType("fake_ops")
        module.OuterOps = OuterOps
        module.__all__ = ["OuterOps"]

        methods = scan_module(module)

        assert [(d.declaring_type_name, d.method_name) for d in methods] == [
            ("OuterOps", "outer_op"),
            ("InnerOps", "inner_op"),
            ("DeepOps", "deep_op"),
        ]

    def test_nested_classes_of_module_defined_types(self):
        module = types.ModuleType(__name__)
        module.OuterOps = OuterOps

        assert OuterOps.InnerOps in exported_types(module)

    def test_private_classes_are_not_exported(self):
        module = types.ModuleType(__name__)

        class _Hidden:
            @callable_method("Hidden")
            def run(self) -> None:
                pass

        _Hidden.__module__ = module.__name__
        module._Hidden = _Hidden

        assert exported_types(module) == []

    def test_scan_module_rejects_none(self):
        with pytest.raises(InvalidArgumentError):
            scan_module(None)

    def test_scan_module_rejects_non_module(self):
        with pytest.raises(InvalidArgumentError, match="expected a module"):
            scan_module(SampleOps)

    def test_scan_modules_concatenates(self):
        user_ops = load_module(FIXTURES / "user_ops.py")
        fake = types.ModuleType("fake_ops")
        fake.ComplexParamsOps = ComplexParamsOps
        fake.__all__ = ["ComplexParamsOps"]

        methods = scan_modules([user_ops, fake])

        assert len(methods) == 3
        assert methods[-1].method_name == "complex_params"

    def test_scan_modules_empty(self):
        assert scan_modules([]) == []

    def test_scan_modules_rejects_none(self):
        with pytest.raises(InvalidArgumentError):
            scan_modules(None)

    def test_scan_modules_aborts_on_duplicate(self):
        user_ops = load_module(FIXTURES / "user_ops.py")
        overloaded = load_module(FIXTURES / "overloaded_ops.py")

        with pytest.raises(DuplicateMethodNameError, match="OverloadedOps.overloaded_method"):
            scan_modules([user_ops, overloaded])
