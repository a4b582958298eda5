"""
Marshalling between host DataValues and native script values.

Forward (host -> script): convert_data_value / convert_args.
Reverse (script -> host): convert_to_data_value, dispatched on the declared
return type and, inside containers, on the native runtime type.

Forward conversion never fails: a tag it does not recognize is read through
the value's string accessor. Reverse conversion raises ConversionError when
a native value can not be represented under the requested DataType.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Iterator, Mapping
from typing import Any

from scriptbridge.models_datavalue import (
    DataType,
    DataValue,
    boolean_value,
    dictionary_value,
    double_value,
    list_value,
    long_value,
    null_value,
    result_value,
    string_value,
)

from .result import Result

RESULT_VALUE_ID = "value"
RESULT_DETAILS_ID = "details"
RESULT_INDIVIDUAL_ID = "individual"


class ConversionError(ValueError):
    """Raised when a native value can not be represented as the requested DataType."""

    pass


# ---------------------------------------------------------------------------
# Host -> script
# ---------------------------------------------------------------------------


def convert_data_value(dv: Any) -> Any:
    """
    Convert a host tagged value into native values, recursively.

    LIST -> list, DICTIONARY -> dict, RESULT -> Result, BOOLEAN -> bool,
    NULL -> None, LONG -> int, DOUBLE -> float; STRING and any other tag ->
    str via as_string().
    """
    t = dv.data_type
    if t == DataType.LIST:
        return [convert_data_value(v) for v in dv.as_list()]
    if t == DataType.DICTIONARY:
        return {name: convert_data_value(v) for name, v in dv.as_dictionary().items()}
    if t == DataType.RESULT:
        res = dv.as_result()
        value = convert_data_value(res.value)
        details = convert_data_value(res.detailed_result) if res.detailed_result is not None else None
        individual = [convert_data_value(v) for v in res.values]
        return Result(value=value, details=details, individual=individual)
    if t == DataType.BOOLEAN:
        return dv.as_boolean()
    if t == DataType.NULL:
        return None
    if t == DataType.LONG:
        return dv.as_long()
    if t == DataType.DOUBLE:
        return dv.as_double()
    return dv.as_string()


class ScriptArgs:
    """
    The single argument an exported function receives.

    Parameter name -> native value in declaration order, readable as
    attributes (args.nums) or items (args["nums"]). It has no public methods,
    so every parameter name, including keys, values, items and get, resolves
    to its argument. Supports iteration over names, len() and "in".
    """

    def __init__(self, values: Mapping[str, Any]) -> None:
        self._values = dict(values)

    def __getitem__(self, name: str) -> Any:
        return self._values[name]

    def __iter__(self) -> Iterator[str]:
        return iter(self._values)

    def __len__(self) -> int:
        return len(self._values)

    def __contains__(self, name: object) -> bool:
        return name in self._values

    def __getattr__(self, name: str) -> Any:
        if name.startswith("_"):
            raise AttributeError(name)
        try:
            return self._values[name]
        except KeyError:
            raise AttributeError(f"No argument named {name!r}") from None

    def __repr__(self) -> str:
        return f"ScriptArgs({self._values!r})"


def convert_args(
    args: Mapping[str, Any],
    parameter_names: Iterable[str] | None = None,
) -> ScriptArgs:
    """
    Convert every host argument with convert_data_value.

    When parameter_names is given, arguments follow that order; any name not
    listed keeps its original position after them.
    """
    ordered: dict[str, Any] = {}
    if parameter_names is not None:
        for name in parameter_names:
            if name in args:
                ordered[name] = convert_data_value(args[name])
    for name, dv in args.items():
        if name not in ordered:
            ordered[name] = convert_data_value(dv)
    return ScriptArgs(ordered)


# ---------------------------------------------------------------------------
# Script -> host
# ---------------------------------------------------------------------------


def _type_name(value: Any) -> str:
    return type(value).__name__


def _is_sequence(value: Any) -> bool:
    return isinstance(value, (list, tuple))


def _to_long(value: Any) -> DataValue:
    if isinstance(value, bool):
        raise ConversionError("Can not convert bool to LONG")
    if isinstance(value, int):
        return long_value(value)
    if isinstance(value, float):
        if not value.is_integer():
            raise ConversionError(f"Can not convert non-integral float {value} to LONG")
        return long_value(int(value))
    raise ConversionError(f"Can not convert {_type_name(value)} to LONG")


def _to_double(value: Any) -> DataValue:
    if isinstance(value, bool):
        raise ConversionError("Can not convert bool to DOUBLE")
    if isinstance(value, (int, float)):
        return double_value(float(value))
    raise ConversionError(f"Can not convert {_type_name(value)} to DOUBLE")


def _to_string(value: Any) -> DataValue:
    if isinstance(value, str):
        return string_value(value)
    if isinstance(value, bool):
        return string_value("true" if value else "false")
    if isinstance(value, (int, float)):
        return string_value(str(value))
    raise ConversionError(f"Can not convert {_type_name(value)} to STRING")


def _to_boolean(value: Any) -> DataValue:
    if isinstance(value, bool):
        return boolean_value(value)
    raise ConversionError(f"Can not convert {_type_name(value)} to BOOLEAN")


def _to_list(value: Any) -> DataValue:
    if _is_sequence(value):
        return list_value(_best_fit(v) for v in value)
    # A single value becomes a one element list
    return list_value([_best_fit(value)])


def _to_dictionary(value: Any) -> DataValue:
    if isinstance(value, ScriptArgs):
        value = value._values
    if isinstance(value, Mapping):
        return dictionary_value({str(k): _best_fit(v) for k, v in value.items()})
    raise ConversionError(f"Can not convert {_type_name(value)} to DICTIONARY")


def _to_result(value: Any) -> DataValue:
    if isinstance(value, Result):
        val, details, individual = value.value, value.details, value.individual
    elif isinstance(value, Mapping):
        if RESULT_VALUE_ID not in value:
            raise ConversionError(f"Mapping without a {RESULT_VALUE_ID!r} key can not be converted to RESULT")
        val = value[RESULT_VALUE_ID]
        details = value.get(RESULT_DETAILS_ID)
        individual = value.get(RESULT_INDIVIDUAL_ID)
    else:
        raise ConversionError(f"Can not convert {_type_name(value)} to RESULT")

    if individual is None:
        individual = ()
    elif not _is_sequence(individual):
        raise ConversionError(f"Result individual values must be a list, got {_type_name(individual)}")

    return result_value(
        _best_fit(val),
        _best_fit(details) if details is not None else None,
        [_best_fit(v) for v in individual],
    )


def _to_null(value: Any) -> DataValue:
    return null_value()


_CONVERTERS: dict[DataType, Callable[[Any], DataValue]] = {
    DataType.LONG: _to_long,
    DataType.DOUBLE: _to_double,
    DataType.STRING: _to_string,
    DataType.BOOLEAN: _to_boolean,
    DataType.LIST: _to_list,
    DataType.DICTIONARY: _to_dictionary,
    DataType.RESULT: _to_result,
    DataType.NULL: _to_null,
}


def _best_fit(value: Any) -> DataValue:
    """Pick the DataType from the native runtime type."""
    if isinstance(value, DataValue):
        return value
    if value is None:
        return null_value()
    if isinstance(value, bool):
        return boolean_value(value)
    if isinstance(value, int):
        return long_value(value)
    if isinstance(value, float):
        return double_value(value)
    if isinstance(value, str):
        return string_value(value)
    if isinstance(value, Result):
        return _to_result(value)
    if isinstance(value, (Mapping, ScriptArgs)):
        return _to_dictionary(value)
    if _is_sequence(value):
        return _to_list(value)
    raise ConversionError(f"Can not convert {_type_name(value)} to a data value")


def convert_to_data_value(value: Any, return_type: DataType | str | None = None) -> DataValue:
    """
    Convert a native script value into a host DataValue.

    With return_type the value must fit that type (ConversionError otherwise);
    without it the type follows the value's runtime type.
    """
    if return_type is None:
        return _best_fit(value)
    try:
        dtype = DataType.parse(return_type)
    except ValueError as e:
        raise ConversionError(str(e)) from e
    return _CONVERTERS[dtype](value)
