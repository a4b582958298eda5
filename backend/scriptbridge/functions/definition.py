"""
Function definitions: what the macro language knows about a callable.

FunctionParameter, FunctionDefinition (immutable) and FunctionDefinitionBuilder.
At most one parameter consumes remaining arguments (varargs) and it must be
the last one: a LIST consumer absorbs extra positional arguments, a
DICTIONARY consumer absorbs unknown named arguments.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Protocol

from pydantic import BaseModel, ConfigDict

from scriptbridge.core.permission import PermissionLevel
from scriptbridge.models_datavalue import DataType, DataValue


class FunctionDefinitionError(ValueError):
    """Raised when a function definition is incomplete or inconsistent."""

    pass


class ScriptFunctionError(RuntimeError):
    """Raised by HostFunction.call when the implementation fails."""

    pass


class FunctionParameter(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    data_type: DataType
    default_value: DataValue | None = None
    consumes_remaining: bool = False

    @property
    def has_default_value(self) -> bool:
        return self.default_value is not None

    @classmethod
    def create(cls, name: str, data_type: DataType) -> FunctionParameter:
        return cls(name=name, data_type=data_type)

    @classmethod
    def create_with_default(cls, name: str, data_type: DataType, default_value: DataValue) -> FunctionParameter:
        return cls(name=name, data_type=data_type, default_value=default_value)

    @classmethod
    def create_list_varargs(cls, name: str) -> FunctionParameter:
        return cls(name=name, data_type=DataType.LIST, consumes_remaining=True)

    @classmethod
    def create_dictionary_varargs(cls, name: str) -> FunctionParameter:
        return cls(name=name, data_type=DataType.DICTIONARY, consumes_remaining=True)


class FunctionDefinition(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    parameters: tuple[FunctionParameter, ...] = ()
    default_permission: PermissionLevel = PermissionLevel.OBSERVER
    return_type: DataType

    @property
    def has_parameters(self) -> bool:
        return len(self.parameters) > 0

    def get_parameter(self, name: str) -> FunctionParameter | None:
        for p in self.parameters:
            if p.name == name:
                return p
        return None

    @property
    def positional_consumer(self) -> FunctionParameter | None:
        for p in self.parameters:
            if p.consumes_remaining and p.data_type == DataType.LIST:
                return p
        return None

    @property
    def named_consumer(self) -> FunctionParameter | None:
        for p in self.parameters:
            if p.consumes_remaining and p.data_type == DataType.DICTIONARY:
                return p
        return None

    def is_valid_parameter_name(self, name: str) -> bool:
        """Any name is valid when a named consumer exists."""
        return self.named_consumer is not None or self.get_parameter(name) is not None


class HostFunction(Protocol):
    """Anything the dispatcher can call: a definition plus call(args)."""

    @property
    def definition(self) -> FunctionDefinition: ...

    def call(self, args: Mapping[str, DataValue]) -> DataValue: ...


class FunctionDefinitionBuilder:
    def __init__(self) -> None:
        self._name: str | None = None
        self._return_type: DataType | None = None
        self._permission = PermissionLevel.OBSERVER
        self._parameters: list[FunctionParameter] = []

    def _check_can_add(self, name: str) -> None:
        if not name:
            raise FunctionDefinitionError("Parameter name can not be empty.")
        if self._parameters and self._parameters[-1].consumes_remaining:
            raise FunctionDefinitionError("varargs parameter must be last in parameter list.")
        if any(p.name == name for p in self._parameters):
            raise FunctionDefinitionError(f"Parameter {name!r} is defined more than once.")

    def set_name(self, name: str) -> FunctionDefinitionBuilder:
        if not name:
            raise FunctionDefinitionError("Name for function definition can not be empty.")
        self._name = name
        return self

    def set_return_type(self, return_type: DataType | str) -> FunctionDefinitionBuilder:
        self._return_type = DataType.parse(return_type)
        return self

    def set_default_permission(self, permission: PermissionLevel | str) -> FunctionDefinitionBuilder:
        self._permission = PermissionLevel.parse(permission)
        return self

    def add_parameter(
        self,
        name: str,
        data_type: DataType | str,
        default_value: DataValue | None = None,
    ) -> FunctionDefinitionBuilder:
        self._check_can_add(name)
        dtype = DataType.parse(data_type)
        if default_value is None:
            self._parameters.append(FunctionParameter.create(name, dtype))
        else:
            self._parameters.append(FunctionParameter.create_with_default(name, dtype, default_value))
        return self

    def add_list_varargs_parameter(self, name: str) -> FunctionDefinitionBuilder:
        self._check_can_add(name)
        self._parameters.append(FunctionParameter.create_list_varargs(name))
        return self

    def add_dictionary_varargs_parameter(self, name: str) -> FunctionDefinitionBuilder:
        self._check_can_add(name)
        self._parameters.append(FunctionParameter.create_dictionary_varargs(name))
        return self

    def build(self) -> FunctionDefinition:
        if not self._name:
            raise FunctionDefinitionError("Name can not be empty.")
        if self._return_type is None:
            raise FunctionDefinitionError("Return type can not be empty.")
        return FunctionDefinition(
            name=self._name,
            parameters=tuple(self._parameters),
            default_permission=self._permission,
            return_type=self._return_type,
        )
