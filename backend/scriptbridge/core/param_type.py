"""
Parameter type coercion.

Coerces DataValue arguments to the DataType a function parameter declares.
Runs after arguments are bound to parameters and before the function is
called; also applied to return values by the dispatcher.
"""

from __future__ import annotations

from collections.abc import Callable

from scriptbridge.models_datavalue import (
    DataType,
    DataValue,
    boolean_value,
    double_value,
    list_value,
    long_value,
    null_value,
    result_value,
    string_value,
)


class ParamTypeError(ValueError):
    """Raised when a value can not be coerced to the declared data type."""

    pass


def _unwrap_result(value: DataValue) -> DataValue:
    if value.data_type == DataType.RESULT:
        return value.as_result().value
    return value


def _coerce_long(value: DataValue) -> DataValue:
    value = _unwrap_result(value)
    t = value.data_type
    if t == DataType.LONG:
        return value
    if t == DataType.DOUBLE:
        x = value.as_double()
        if not x.is_integer():
            raise ParamTypeError(f"Expected integer, got: {x}")
        return long_value(int(x))
    if t == DataType.STRING:
        s = value.as_string().strip()
        if not s:
            raise ParamTypeError("Value is empty")
        try:
            x = float(s)
        except ValueError as e:
            raise ParamTypeError(f"Invalid integer: {s!r}") from e
        if not x.is_integer():
            raise ParamTypeError(f"Expected integer, got: {s!r}")
        return long_value(int(x))
    raise ParamTypeError(f"Expected LONG, got {t}")


def _coerce_double(value: DataValue) -> DataValue:
    value = _unwrap_result(value)
    t = value.data_type
    if t == DataType.DOUBLE:
        return value
    if t == DataType.LONG:
        return double_value(value.as_double())
    if t == DataType.STRING:
        s = value.as_string().strip()
        if not s:
            raise ParamTypeError("Value is empty")
        try:
            return double_value(float(s))
        except ValueError as e:
            raise ParamTypeError(f"Invalid number: {s!r}") from e
    raise ParamTypeError(f"Expected DOUBLE, got {t}")


def _coerce_string(value: DataValue) -> DataValue:
    value = _unwrap_result(value)
    t = value.data_type
    if t == DataType.STRING:
        return value
    if t in (DataType.LIST, DataType.DICTIONARY):
        raise ParamTypeError(f"Can not convert {t} to STRING")
    return string_value(value.as_string())


def _coerce_boolean(value: DataValue) -> DataValue:
    value = _unwrap_result(value)
    t = value.data_type
    if t == DataType.BOOLEAN:
        return value
    if t == DataType.LONG:
        n = value.as_long()
        if n == 0:
            return boolean_value(False)
        if n == 1:
            return boolean_value(True)
        raise ParamTypeError(f"Expected boolean, got integer: {n}")
    if t == DataType.STRING:
        s = value.as_string().strip().lower()
        if s in ("true", "1", "yes"):
            return boolean_value(True)
        if s in ("false", "0", "no"):
            return boolean_value(False)
        raise ParamTypeError(f"Expected boolean (true/false, 1/0, yes/no), got: {s!r}")
    raise ParamTypeError(f"Expected BOOLEAN, got {t}")


def _coerce_list(value: DataValue) -> DataValue:
    if value.data_type == DataType.LIST:
        return value
    return list_value([value])


def _coerce_dictionary(value: DataValue) -> DataValue:
    if value.data_type == DataType.DICTIONARY:
        return value
    raise ParamTypeError(f"Expected DICTIONARY, got {value.data_type}")


def _coerce_result(value: DataValue) -> DataValue:
    if value.data_type == DataType.RESULT:
        return value
    return result_value(value, string_value(value.as_string()), [value])


def _coerce_null(value: DataValue) -> DataValue:
    return null_value()


_COERCERS: dict[DataType, Callable[[DataValue], DataValue]] = {
    DataType.LONG: _coerce_long,
    DataType.DOUBLE: _coerce_double,
    DataType.STRING: _coerce_string,
    DataType.BOOLEAN: _coerce_boolean,
    DataType.LIST: _coerce_list,
    DataType.DICTIONARY: _coerce_dictionary,
    DataType.RESULT: _coerce_result,
    DataType.NULL: _coerce_null,
}


def coerce_data_value(value: DataValue, data_type: DataType | str) -> DataValue:
    """
    Coerce value to data_type. Raises ParamTypeError when not possible.

    A RESULT passed where a scalar is expected is unwrapped to its value first.
    """
    dtype = DataType.parse(data_type)
    return _COERCERS[dtype](value)


def coerce_named_value(name: str, value: DataValue, data_type: DataType | str) -> DataValue:
    """coerce_data_value with the parameter name prefixed to any error."""
    try:
        return coerce_data_value(value, data_type)
    except ParamTypeError as e:
        raise ParamTypeError(f"Parameter '{name}' {e}") from e
