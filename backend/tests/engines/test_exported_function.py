"""Unit tests for engines.script.exported: ExportedFunction and ExportCollector."""

import pytest

from scriptbridge.bootstrap import load_functions
from scriptbridge.core.permission import PermissionLevel
from scriptbridge.engines.script import ScriptFunctionEvaluator
from scriptbridge.engines.script.exported import (
    ConfigurationError,
    ExportCollector,
    ExportedFunction,
    bind_exporter,
)
from scriptbridge.functions.registry import DuplicateFunctionError, FunctionRegistry
from scriptbridge.models_datavalue import DataType


class TestExportedFunctionInit:
    def test_defaults(self) -> None:
        f = ExportedFunction("listSum", ExportedFunction.DATA_TYPE_DOUBLE, "do_list_sum")
        assert f.name == "listSum"
        assert f.return_type == DataType.DOUBLE
        assert f.function_name == "do_list_sum"
        assert f.permission == PermissionLevel.OBSERVER
        assert f.has_varargs is False
        assert f.parameter_list == []

    @pytest.mark.parametrize(
        "name,return_type,function_name",
        [
            ("", "LONG", "fn"),
            ("f", "", "fn"),
            ("f", "LONG", ""),
            (None, "LONG", "fn"),
        ],
    )
    def test_empty_required_field(self, name: str, return_type: str, function_name: str) -> None:
        with pytest.raises(ConfigurationError):
            ExportedFunction(name, return_type, function_name)

    @pytest.mark.parametrize("name,function_name", [(5, "fn"), ("f", 7), (["f"], "fn")])
    def test_non_string_names(self, name: object, function_name: object) -> None:
        with pytest.raises(ConfigurationError, match="must be a string"):
            ExportedFunction(name, "LONG", function_name)  # type: ignore[arg-type]

    def test_return_type_aliases(self) -> None:
        assert ExportedFunction("f", ExportedFunction.DATA_TYPE_INT, "fn").return_type == DataType.LONG
        assert ExportedFunction("f", "dict", "fn").return_type == DataType.DICTIONARY

    def test_varargs_return_type_rejected(self) -> None:
        with pytest.raises(ConfigurationError, match="Varargs"):
            ExportedFunction("f", ExportedFunction.DATA_TYPE_LIST_VARARGS, "fn")

    def test_unknown_return_type(self) -> None:
        with pytest.raises(ConfigurationError, match="Unknown function return type"):
            ExportedFunction("f", "Widget", "fn")

    def test_permission(self) -> None:
        f = ExportedFunction("f", "LONG", "fn", ExportedFunction.PERM_GM)
        assert f.permission == PermissionLevel.GM
        with pytest.raises(ConfigurationError):
            ExportedFunction("f", "LONG", "fn", "ADMIN")


class TestAddParameter:
    def test_plain_and_default(self) -> None:
        f = ExportedFunction("rollSomeDice", "RESULT", "roll")
        f.add_parameter("num", ExportedFunction.DATA_TYPE_LONG, 1)
        f.add_parameter("sides", ExportedFunction.DATA_TYPE_LONG)
        assert [(p.name, p.param_type, p.vararg_flag, p.default_val) for p in f.parameter_list] == [
            ("num", DataType.LONG, False, 1),
            ("sides", DataType.LONG, False, None),
        ]
        assert f.has_varargs is False

    def test_list_varargs_normalized(self) -> None:
        f = ExportedFunction("listSum", "DOUBLE", "fn")
        f.add_parameter("nums", ExportedFunction.DATA_TYPE_LIST_VARARGS)
        p = f.parameter_list[0]
        assert p.param_type == DataType.LIST
        assert p.vararg_flag is True
        assert f.has_varargs is True

    def test_dictionary_varargs_normalized(self) -> None:
        f = ExportedFunction("f", "STRING", "fn")
        f.add_parameter("opts", "dictionary*")
        p = f.parameter_list[0]
        assert p.param_type == DataType.DICTIONARY
        assert p.vararg_flag is True

    def test_nothing_after_varargs(self) -> None:
        f = ExportedFunction("f", "LONG", "fn")
        f.add_parameter("nums", ExportedFunction.DATA_TYPE_LIST_VARARGS)
        with pytest.raises(ConfigurationError, match="last"):
            f.add_parameter("x", "LONG")
        assert len(f.parameter_list) == 1

    def test_empty_name_or_type(self) -> None:
        f = ExportedFunction("f", "LONG", "fn")
        with pytest.raises(ConfigurationError):
            f.add_parameter("", "LONG")
        with pytest.raises(ConfigurationError):
            f.add_parameter("x", "")

    def test_duplicate_name(self) -> None:
        f = ExportedFunction("f", "LONG", "fn")
        f.add_parameter("x", "LONG")
        with pytest.raises(ConfigurationError, match="already defined"):
            f.add_parameter("x", "STRING")

    def test_varargs_default_rejected(self) -> None:
        f = ExportedFunction("f", "LONG", "fn")
        with pytest.raises(ConfigurationError, match="default"):
            f.add_parameter("nums", "List*", [1])

    def test_default_accepted_when_it_fits(self) -> None:
        f = ExportedFunction("f", "LONG", "fn")
        f.add_parameter("count", "LONG", "3")
        f.add_parameter("ratio", "DOUBLE", 1)
        assert [p.default_val for p in f.parameter_list] == ["3", 1]

    def test_default_that_does_not_fit(self) -> None:
        f = ExportedFunction("f", "LONG", "fn")
        with pytest.raises(ConfigurationError, match="Invalid default value for parameter 'x'"):
            f.add_parameter("x", "LONG", "abc")
        with pytest.raises(ConfigurationError):
            f.add_parameter("y", "DICTIONARY", 5)
        with pytest.raises(ConfigurationError):
            f.add_parameter("z", "LONG", object())
        assert f.parameter_list == []

    def test_non_string_parameter_name(self) -> None:
        f = ExportedFunction("f", "LONG", "fn")
        with pytest.raises(ConfigurationError, match="must be a string"):
            f.add_parameter(3, "LONG")  # type: ignore[arg-type]

    def test_unknown_type(self) -> None:
        f = ExportedFunction("f", "LONG", "fn")
        with pytest.raises(ConfigurationError, match="Unknown parameter type"):
            f.add_parameter("x", "Widget")


class TestSetName:
    def test_does_not_rename(self) -> None:
        f = ExportedFunction("f", "LONG", "fn")
        f.set_name("g")
        assert f.name == "f"

    def test_empty_rejected(self) -> None:
        with pytest.raises(ConfigurationError):
            ExportedFunction("f", "LONG", "fn").set_name("")


class TestExport:
    def test_without_exporter(self) -> None:
        with pytest.raises(ConfigurationError, match="No export mechanism"):
            ExportedFunction("f", "LONG", "fn").export()

    def test_registers_once_with_fields_unchanged(self) -> None:
        collector = ExportCollector()
        f = ExportedFunction("listSum", "DOUBLE", "do_list_sum", "PLAYER", exporter=collector)
        f.add_parameter("nums", ExportedFunction.DATA_TYPE_LIST_VARARGS)
        spec = f.export()
        assert collector.exported == (spec,)
        assert spec.name == "listSum"
        assert spec.return_type == DataType.DOUBLE
        assert spec.function_name == "do_list_sum"
        assert spec.permission == PermissionLevel.PLAYER
        assert spec.has_varargs is True
        assert [p.name for p in spec.parameter_list] == ["nums"]

    def test_spec_is_a_snapshot(self) -> None:
        collector = ExportCollector()
        f = ExportedFunction("f", "LONG", "fn", exporter=collector)
        f.add_parameter("a", "LONG")
        spec = f.export()
        f.add_parameter("b", "LONG")
        assert [p.name for p in spec.parameter_list] == ["a"]

    def test_bind_exporter(self) -> None:
        collector = ExportCollector()
        bound = bind_exporter(collector)
        assert issubclass(bound, ExportedFunction)
        bound("f", "LONG", "fn").export()
        assert [s.name for s in collector.exported] == ["f"]
        assert ExportedFunction.exporter is None

    def test_clear(self) -> None:
        collector = ExportCollector()
        ExportedFunction("f", "LONG", "fn", exporter=collector).export()
        collector.clear()
        assert collector.exported == ()

    def test_export_twice_exports_twice(self) -> None:
        collector = ExportCollector()
        f = ExportedFunction("f", "LONG", "fn", exporter=collector)
        f.add_parameter("a", "LONG")
        first = f.export()
        second = f.export()
        assert collector.exported == (first, second)
        assert first == second

    def test_export_twice_fails_registration(self) -> None:
        script = (
            "f = ExportedFunction('twice', 'LONG', 'twice')\n"
            "f.export()\n"
            "f.export()\n"
            "def twice(args):\n"
            "    return 2\n"
        )
        evaluator = ScriptFunctionEvaluator()
        assert [fn.definition.name for fn in evaluator.load_script("twice", script)] == ["twice", "twice"]
        registry = FunctionRegistry()
        with pytest.raises(DuplicateFunctionError, match="twice"):
            load_functions(registry, evaluator, {"twice": script})
        assert registry.names() == []

    def test_closed_collector_rejects_export(self) -> None:
        collector = ExportCollector()
        collector.close()
        assert collector.is_open is False
        with pytest.raises(ConfigurationError, match="while scripts load"):
            ExportedFunction("late", "LONG", "fn", exporter=collector).export()
        assert collector.exported == ()
