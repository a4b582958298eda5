"""
ExportedFunction: the script-side API for exporting functions to the macro language.

A script declares a function, its parameters and its return type, then calls
export():

    f = ExportedFunction("listSum", ExportedFunction.DATA_TYPE_DOUBLE, "do_list_sum")
    f.add_parameter("nums", ExportedFunction.DATA_TYPE_LIST_VARARGS)
    f.export()

export() hands an immutable ExportedFunctionSpec to the bound ExportCollector,
which the evaluator drains after each load pass.
"""

from __future__ import annotations

import logging
from typing import Any

from pydantic import BaseModel, ConfigDict

from scriptbridge.core.param_type import ParamTypeError, coerce_data_value
from scriptbridge.core.permission import PermissionLevel
from scriptbridge.models_datavalue import DataType

from .marshal import ConversionError, convert_to_data_value

_log = logging.getLogger(__name__)

LIST_VARARGS = "List*"
DICT_VARARGS = "Dictionary*"


class ConfigurationError(ValueError):
    """Raised synchronously when an exported function is declared incorrectly."""

    pass


class ParameterSpec(BaseModel):
    """One declared parameter. Varargs pseudo-types are already normalized."""

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    name: str
    param_type: DataType
    vararg_flag: bool = False
    default_val: Any = None


class ExportedFunctionSpec(BaseModel):
    """Snapshot handed to the export mechanism by ExportedFunction.export()."""

    model_config = ConfigDict(frozen=True)

    name: str
    parameter_list: tuple[ParameterSpec, ...] = ()
    return_type: DataType
    function_name: str
    permission: PermissionLevel = PermissionLevel.OBSERVER

    @property
    def has_varargs(self) -> bool:
        return any(p.vararg_flag for p in self.parameter_list)


class ExportCollector:
    """
    Export mechanism for one script load pass.

    Read exported after the scripts ran, then close() it. A closed collector
    rejects further exports with ConfigurationError.
    """

    def __init__(self) -> None:
        self._exported: list[ExportedFunctionSpec] = []
        self._open = True

    @property
    def is_open(self) -> bool:
        return self._open

    def close(self) -> None:
        self._open = False

    def clear(self) -> None:
        self._exported.clear()

    @property
    def exported(self) -> tuple[ExportedFunctionSpec, ...]:
        return tuple(self._exported)

    def export_function(
        self,
        name: str,
        parameter_list: tuple[ParameterSpec, ...],
        return_type: DataType,
        function_name: str,
        permission: PermissionLevel,
    ) -> ExportedFunctionSpec:
        if not self._open:
            raise ConfigurationError(f"Can not export {name}: functions can only be exported while scripts load")
        spec = ExportedFunctionSpec(
            name=name,
            parameter_list=tuple(parameter_list),
            return_type=return_type,
            function_name=function_name,
            permission=permission,
        )
        self._exported.append(spec)
        _log.debug("Exported function %s -> %s (%s)", name, function_name, return_type)
        return spec


def _check_name(value: Any, what: str) -> str:
    if not value:
        raise ConfigurationError(f"{what} is empty")
    if not isinstance(value, str):
        raise ConfigurationError(f"{what} must be a string, got {type(value).__name__}")
    return value


def _check_default(name: str, value: Any, param_type: DataType) -> None:
    """Raise ConfigurationError unless value converts to param_type."""
    try:
        coerce_data_value(convert_to_data_value(value), param_type)
    except (ConversionError, ParamTypeError) as e:
        raise ConfigurationError(f"Invalid default value for parameter {name!r}: {e}") from e


def _parse_return_type(value: Any) -> DataType:
    if isinstance(value, str) and value.strip().lower() in (LIST_VARARGS.lower(), DICT_VARARGS.lower()):
        raise ConfigurationError(f"Varargs type {value!r} can not be a return type")
    try:
        return DataType.parse(value)
    except ValueError as e:
        raise ConfigurationError(f"Unknown function return type {value!r}") from e


def _parse_param_type(value: Any) -> tuple[DataType, bool]:
    """Return (base type, vararg flag)."""
    if isinstance(value, str):
        key = value.strip().lower()
        if key == LIST_VARARGS.lower():
            return DataType.LIST, True
        if key == DICT_VARARGS.lower():
            return DataType.DICTIONARY, True
    try:
        return DataType.parse(value), False
    except ValueError as e:
        raise ConfigurationError(f"Unknown parameter type {value!r}") from e


class ExportedFunction:
    """
    Builder for a function exported from a script.

    Fails with ConfigurationError when name, return_type or function_name is
    empty. permission defaults to OBSERVER (anyone may call).
    """

    DATA_TYPE_LONG = DataType.LONG.value
    DATA_TYPE_INT = DataType.LONG.value
    DATA_TYPE_DOUBLE = DataType.DOUBLE.value
    DATA_TYPE_FLOAT = DataType.DOUBLE.value
    DATA_TYPE_STRING = DataType.STRING.value
    DATA_TYPE_LIST = DataType.LIST.value
    DATA_TYPE_DICT = DataType.DICTIONARY.value
    DATA_TYPE_BOOLEAN = DataType.BOOLEAN.value
    DATA_TYPE_RESULT = DataType.RESULT.value
    DATA_TYPE_NULL = DataType.NULL.value
    # Any number of positional arguments, received as a list
    DATA_TYPE_LIST_VARARGS = LIST_VARARGS
    # Any number of named arguments, received as a dictionary
    DATA_TYPE_DICT_VARARGS = DICT_VARARGS

    PERM_GM = PermissionLevel.GM.value
    PERM_PLAYER = PermissionLevel.PLAYER.value
    PERM_OBSERVER = PermissionLevel.OBSERVER.value

    # Set on the subclass a ScriptContext injects into script globals
    exporter: ExportCollector | None = None

    def __init__(
        self,
        name: str,
        return_type: str,
        function_name: str,
        permission: str | None = None,
        *,
        exporter: ExportCollector | None = None,
    ) -> None:
        self.name = _check_name(name, "Function name")
        if not return_type:
            raise ConfigurationError("Function return type is empty")
        self.return_type = _parse_return_type(return_type)
        self.function_name = _check_name(function_name, "Script function name")
        try:
            self.permission = PermissionLevel.parse(permission or PermissionLevel.OBSERVER)
        except ValueError as e:
            raise ConfigurationError(str(e)) from e
        self.has_varargs = False
        self.parameter_list: list[ParameterSpec] = []
        if exporter is not None:
            self.exporter = exporter

    def add_parameter(self, name: str, param_type: str, default_val: Any = None) -> None:
        """Append a parameter. A varargs parameter must be the last one."""
        _check_name(name, "Parameter name")
        if not param_type:
            raise ConfigurationError("Parameter type is empty.")
        if self.has_varargs:
            raise ConfigurationError("Varargs parameter must be last parameter in parameter list.")
        if any(p.name == name for p in self.parameter_list):
            raise ConfigurationError(f"Parameter {name!r} is already defined.")

        p_type, vararg_flag = _parse_param_type(param_type)
        if vararg_flag:
            if default_val is not None:
                raise ConfigurationError("Varargs parameter can not have a default value.")
            self.has_varargs = True
        elif default_val is not None:
            _check_default(name, default_val, p_type)

        self.parameter_list.append(
            ParameterSpec(name=name, param_type=p_type, vararg_flag=vararg_flag, default_val=default_val)
        )

    def set_name(self, name: str) -> None:
        """Validate a function name. Does not rename the function (kept for API symmetry)."""
        _check_name(name, "Function name")

    def export(self) -> ExportedFunctionSpec:
        """Hand the function to the export mechanism. Calling twice exports twice."""
        if self.exporter is None:
            raise ConfigurationError(f"No export mechanism bound for function {self.name}")
        return self.exporter.export_function(
            self.name,
            tuple(self.parameter_list),
            self.return_type,
            self.function_name,
            self.permission,
        )


def bind_exporter(exporter: ExportCollector) -> type[ExportedFunction]:
    """Return an ExportedFunction subclass whose export() feeds ``exporter``."""
    return type("ExportedFunction", (ExportedFunction,), {"exporter": exporter})
