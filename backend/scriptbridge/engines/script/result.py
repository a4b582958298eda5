"""
Result: a computed value, how it was derived, and the values that produced it.

Results are immutable. Scripts build them with ResultBuilder:

    ResultBuilder().set_value(10).set_details("2 + 3 + 5").set_individual_values([2, 3, 5]).build()
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import Any

from pydantic import BaseModel, ConfigDict, field_validator


class Result(BaseModel):
    """Native counterpart of a host RESULT value."""

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    value: Any = None
    details: Any = None
    individual: tuple[Any, ...] = ()

    @field_validator("individual", mode="before")
    @classmethod
    def _to_tuple(cls, v: Any) -> tuple[Any, ...]:
        if v is None:
            return ()
        if isinstance(v, (str, bytes)):
            return (v,)
        return tuple(v)

    def __str__(self) -> str:
        return str(self.value)


class ResultBuilder:
    """Fluent builder; every setter returns the builder."""

    def __init__(self) -> None:
        self._value: Any = None
        self._details: Any = None
        self._individual: list[Any] = []

    def set_value(self, value: Any) -> ResultBuilder:
        self._value = value
        return self

    def set_details(self, details: Any) -> ResultBuilder:
        self._details = details
        return self

    def set_individual_values(self, values: Iterable[Any] | None) -> ResultBuilder:
        self._individual = list(values or [])
        return self

    def build(self) -> Result:
        return Result(value=self._value, details=self._details, individual=self._individual)
