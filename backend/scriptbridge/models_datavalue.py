"""
Host tagged values.

DataType (closed tag set), DataValue (tag + payload) and HostResult (value,
detailed result, individual contributions). These are the values the macro
language evaluates; engines/script/marshal.py converts them to and from
native script values.
"""

from collections.abc import Iterable, Mapping
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict


class DataValueError(ValueError):
    """Raised when a DataValue is read through an accessor its tag does not support."""

    pass


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------


class DataType(str, Enum):
    """Tags of the host value representation."""

    LONG = "LONG"
    DOUBLE = "DOUBLE"
    STRING = "STRING"
    LIST = "LIST"
    DICTIONARY = "DICTIONARY"
    BOOLEAN = "BOOLEAN"
    RESULT = "RESULT"
    NULL = "NULL"

    @classmethod
    def parse(cls, name: "DataType | str") -> "DataType":
        """Resolve a case-insensitive type name or alias (int, float, dict)."""
        if isinstance(name, DataType):
            return name
        if not isinstance(name, str):
            raise ValueError(f"Invalid data type: {name!r}")
        key = name.strip().upper()
        key = _DATA_TYPE_ALIASES.get(key, key)
        try:
            return cls(key)
        except ValueError as e:
            raise ValueError(f"Invalid data type: {name!r}") from e

    def __str__(self) -> str:
        return self.value


_DATA_TYPE_ALIASES = {
    "INT": "LONG",
    "INTEGER": "LONG",
    "FLOAT": "DOUBLE",
    "DICT": "DICTIONARY",
    "BOOL": "BOOLEAN",
}


# ---------------------------------------------------------------------------
# Values
# ---------------------------------------------------------------------------


class DataValue(BaseModel):
    """
    A tagged host value. ``data_type`` decides which accessor is valid.

    Payload by tag: LONG int, DOUBLE float, STRING str, BOOLEAN bool,
    NULL None, LIST tuple[DataValue, ...], DICTIONARY dict[str, DataValue],
    RESULT HostResult.
    """

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    data_type: DataType
    value: Any = None

    def as_long(self) -> int:
        if self.data_type == DataType.LONG:
            return self.value
        if self.data_type == DataType.DOUBLE:
            return int(self.value)
        raise DataValueError(f"{self.data_type} value can not be read as LONG")

    def as_double(self) -> float:
        if self.data_type in (DataType.LONG, DataType.DOUBLE):
            return float(self.value)
        raise DataValueError(f"{self.data_type} value can not be read as DOUBLE")

    def as_boolean(self) -> bool:
        if self.data_type == DataType.BOOLEAN:
            return self.value
        raise DataValueError(f"{self.data_type} value can not be read as BOOLEAN")

    def as_list(self) -> tuple["DataValue", ...]:
        if self.data_type == DataType.LIST:
            return self.value
        raise DataValueError(f"{self.data_type} value can not be read as LIST")

    def as_dictionary(self) -> dict[str, "DataValue"]:
        if self.data_type == DataType.DICTIONARY:
            return self.value
        raise DataValueError(f"{self.data_type} value can not be read as DICTIONARY")

    def as_result(self) -> "HostResult":
        if self.data_type == DataType.RESULT:
            return self.value
        raise DataValueError(f"{self.data_type} value can not be read as RESULT")

    def as_string(self) -> str:
        """String rendering; valid for every tag."""
        t = self.data_type
        if t == DataType.STRING:
            return self.value
        if t == DataType.NULL:
            return ""
        if t == DataType.BOOLEAN:
            return "true" if self.value else "false"
        if t in (DataType.LONG, DataType.DOUBLE):
            return str(self.value)
        if t == DataType.LIST:
            return ", ".join(v.as_string() for v in self.value)
        if t == DataType.DICTIONARY:
            return "; ".join(f"{k}={v.as_string()}" for k, v in self.value.items())
        if t == DataType.RESULT:
            return self.value.value.as_string()
        return str(self.value)

    def __str__(self) -> str:
        return self.as_string()


class HostResult(BaseModel):
    """A host RESULT payload: value, how it was derived, and its contributions."""

    model_config = ConfigDict(frozen=True)

    value: DataValue
    detailed_result: DataValue
    values: tuple[DataValue, ...] = ()


# ---------------------------------------------------------------------------
# Factories
# ---------------------------------------------------------------------------


def long_value(n: int) -> DataValue:
    return DataValue(data_type=DataType.LONG, value=int(n))


def double_value(x: float) -> DataValue:
    return DataValue(data_type=DataType.DOUBLE, value=float(x))


def string_value(s: str) -> DataValue:
    return DataValue(data_type=DataType.STRING, value=str(s))


def boolean_value(b: bool) -> DataValue:
    return DataValue(data_type=DataType.BOOLEAN, value=bool(b))


def null_value() -> DataValue:
    return DataValue(data_type=DataType.NULL, value=None)


def list_value(items: Iterable[DataValue]) -> DataValue:
    return DataValue(data_type=DataType.LIST, value=tuple(items))


def dictionary_value(items: Mapping[str, DataValue]) -> DataValue:
    return DataValue(data_type=DataType.DICTIONARY, value={str(k): v for k, v in items.items()})


def result_value(
    value: DataValue,
    detailed_result: DataValue | None = None,
    values: Iterable[DataValue] | None = None,
) -> DataValue:
    """Create a RESULT value. Details default to the value's string rendering."""
    details = detailed_result if detailed_result is not None else string_value(value.as_string())
    individual = tuple(values) if values is not None else ()
    res = HostResult(value=value, detailed_result=details, values=individual)
    return DataValue(data_type=DataType.RESULT, value=res)
