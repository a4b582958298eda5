"""Unit tests for engines.script.marshal: host <-> script value conversion."""

from types import SimpleNamespace

import pytest

from scriptbridge.engines.script.marshal import (
    ConversionError,
    ScriptArgs,
    convert_args,
    convert_data_value,
    convert_to_data_value,
)
from scriptbridge.engines.script.result import Result
from scriptbridge.models_datavalue import (
    DataType,
    boolean_value,
    dictionary_value,
    double_value,
    list_value,
    long_value,
    null_value,
    result_value,
    string_value,
)


class TestConvertDataValue:
    def test_scalars(self) -> None:
        assert convert_data_value(long_value(3)) == 3
        assert isinstance(convert_data_value(long_value(3)), int)
        assert convert_data_value(double_value(2.5)) == 2.5
        assert convert_data_value(string_value("abc")) == "abc"
        assert convert_data_value(boolean_value(False)) is False
        assert convert_data_value(null_value()) is None

    def test_nested_structure_preserved(self) -> None:
        dv = list_value(
            [
                long_value(1),
                dictionary_value({"a": list_value([string_value("x"), boolean_value(True)])}),
            ]
        )
        assert convert_data_value(dv) == [1, {"a": ["x", True]}]

    def test_dictionary(self) -> None:
        dv = dictionary_value({"hp": long_value(10), "name": string_value("orc")})
        assert convert_data_value(dv) == {"hp": 10, "name": "orc"}

    def test_result(self) -> None:
        dv = result_value(long_value(7), string_value("3 + 4"), [long_value(3), long_value(4)])
        res = convert_data_value(dv)
        assert isinstance(res, Result)
        assert res.value == 7
        assert res.details == "3 + 4"
        assert res.individual == (3, 4)

    def test_unknown_tag_uses_string_accessor(self) -> None:
        dv = SimpleNamespace(data_type="COLOR", as_string=lambda: "#ff0000")
        assert convert_data_value(dv) == "#ff0000"


class TestConvertArgs:
    def test_orders_by_parameter_names(self) -> None:
        args = {"sides": long_value(6), "num": long_value(2)}
        out = convert_args(args, ["num", "sides"])
        assert isinstance(out, ScriptArgs)
        assert list(out) == ["num", "sides"]
        assert out.num == 2
        assert out["sides"] == 6

    def test_unlisted_names_follow(self) -> None:
        out = convert_args({"b": long_value(1), "a": long_value(2)}, ["a"])
        assert list(out) == ["a", "b"]

    def test_missing_attribute(self) -> None:
        out = convert_args({"a": long_value(1)})
        assert len(out) == 1
        with pytest.raises(AttributeError):
            out.b
        with pytest.raises(AttributeError):
            out._values_copy

    def test_parameter_names_win_over_mapping_methods(self) -> None:
        args = {name: long_value(i) for i, name in enumerate(["keys", "values", "items", "get"])}
        out = convert_args(args)
        assert (out.keys, out.values, out.items, out.get) == (0, 1, 2, 3)
        assert "values" in out
        assert "other" not in out

    def test_converts_back_to_dictionary(self) -> None:
        out = convert_args({"a": long_value(1), "b": string_value("x")})
        expected = dictionary_value({"a": long_value(1), "b": string_value("x")})
        assert convert_to_data_value(out) == expected
        assert convert_to_data_value(out, DataType.DICTIONARY) == expected

    def test_read_only(self) -> None:
        out = convert_args({"a": long_value(1)})
        with pytest.raises(TypeError):
            out["a"] = 2  # type: ignore[index]


class TestConvertToDataValue:
    def test_best_fit(self) -> None:
        assert convert_to_data_value(None) == null_value()
        assert convert_to_data_value(True) == boolean_value(True)
        assert convert_to_data_value(4) == long_value(4)
        assert convert_to_data_value(4.5) == double_value(4.5)
        assert convert_to_data_value("s") == string_value("s")
        assert convert_to_data_value([1, "a"]) == list_value([long_value(1), string_value("a")])
        assert convert_to_data_value({"k": 1}) == dictionary_value({"k": long_value(1)})

    def test_data_value_passes_through(self) -> None:
        dv = long_value(1)
        assert convert_to_data_value(dv) is dv

    def test_best_fit_unsupported(self) -> None:
        with pytest.raises(ConversionError):
            convert_to_data_value(object())

    def test_long(self) -> None:
        assert convert_to_data_value(3.0, DataType.LONG) == long_value(3)
        with pytest.raises(ConversionError):
            convert_to_data_value(3.5, DataType.LONG)
        with pytest.raises(ConversionError):
            convert_to_data_value(True, DataType.LONG)
        with pytest.raises(ConversionError):
            convert_to_data_value("3", DataType.LONG)

    def test_double(self) -> None:
        assert convert_to_data_value(10, "DOUBLE") == double_value(10.0)
        with pytest.raises(ConversionError):
            convert_to_data_value("x", "DOUBLE")

    def test_string(self) -> None:
        assert convert_to_data_value("a", DataType.STRING) == string_value("a")
        assert convert_to_data_value(False, DataType.STRING) == string_value("false")
        assert convert_to_data_value(5, DataType.STRING) == string_value("5")
        with pytest.raises(ConversionError):
            convert_to_data_value([1], DataType.STRING)

    def test_boolean(self) -> None:
        assert convert_to_data_value(True, DataType.BOOLEAN) == boolean_value(True)
        with pytest.raises(ConversionError):
            convert_to_data_value(1, DataType.BOOLEAN)

    def test_list_wraps_scalar(self) -> None:
        assert convert_to_data_value(5, DataType.LIST) == list_value([long_value(5)])
        assert convert_to_data_value((1, 2), DataType.LIST) == list_value([long_value(1), long_value(2)])

    def test_dictionary(self) -> None:
        dv = convert_to_data_value({"a": [1, {"b": None}]}, DataType.DICTIONARY)
        assert convert_data_value(dv) == {"a": [1, {"b": None}]}
        with pytest.raises(ConversionError):
            convert_to_data_value([1], DataType.DICTIONARY)

    def test_result_from_result(self) -> None:
        dv = convert_to_data_value(Result(value=10, details="2 + 3 + 5", individual=[2, 3, 5]), DataType.RESULT)
        res = dv.as_result()
        assert res.value == long_value(10)
        assert res.detailed_result == string_value("2 + 3 + 5")
        assert res.values == (long_value(2), long_value(3), long_value(5))

    def test_result_from_mapping(self) -> None:
        dv = convert_to_data_value({"value": 4, "individual": [4]}, DataType.RESULT)
        res = dv.as_result()
        assert res.value == long_value(4)
        assert res.detailed_result == string_value("4")
        assert res.values == (long_value(4),)

    def test_result_errors(self) -> None:
        with pytest.raises(ConversionError, match="'value'"):
            convert_to_data_value({"details": "x"}, DataType.RESULT)
        with pytest.raises(ConversionError, match="individual"):
            convert_to_data_value({"value": 1, "individual": 3}, DataType.RESULT)
        with pytest.raises(ConversionError):
            convert_to_data_value(7, DataType.RESULT)

    def test_null(self) -> None:
        assert convert_to_data_value("anything", DataType.NULL) == null_value()

    def test_unknown_return_type(self) -> None:
        with pytest.raises(ConversionError):
            convert_to_data_value(1, "Widget")
