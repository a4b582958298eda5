"""
Function dispatcher: look up, authorize, bind arguments, call, coerce result.

Binding rules (resolve_arguments):
- positional arguments bind to parameters in declaration order; a LIST
  varargs parameter absorbs every positional argument from its position on
- named arguments bind by name; unknown names go to a DICTIONARY varargs
  parameter if there is one, otherwise they are an error
- varargs parameters are always bound (possibly empty)
- defaults fill what is left; anything still unbound is an error
"""

from __future__ import annotations

import logging

from pydantic import BaseModel, ConfigDict, Field

from scriptbridge.core.param_type import ParamTypeError, coerce_data_value, coerce_named_value
from scriptbridge.core.permission import PermissionLevel, check_permission
from scriptbridge.models_datavalue import DataValue, dictionary_value, list_value

from .definition import FunctionDefinition, ScriptFunctionError
from .registry import FunctionRegistry, get_function_registry

_LOG = logging.getLogger(__name__)


class FunctionCallError(ValueError):
    """Raised when a function call can not be resolved or its implementation fails."""

    pass


class ArgumentList(BaseModel):
    """Arguments of one call as written in the macro: positional and named."""

    model_config = ConfigDict(frozen=True)

    positional: tuple[DataValue, ...] = ()
    named: dict[str, DataValue] = Field(default_factory=dict)


class CallerContext(BaseModel):
    """Who is calling: the permission level they hold."""

    model_config = ConfigDict(frozen=True)

    permission: PermissionLevel = PermissionLevel.OBSERVER


def _resolve_positional(definition: FunctionDefinition, args: ArgumentList) -> dict[str, DataValue]:
    arg_map: dict[str, DataValue] = {}
    params = definition.parameters
    consumer = definition.positional_consumer
    consumed: list[DataValue] = []

    for i, dv in enumerate(args.positional):
        param = params[i] if i < len(params) else None
        if param is None or param.consumes_remaining:
            # A DICTIONARY varargs parameter takes no positional arguments
            if consumer is None:
                raise FunctionCallError(f"Too many parameters for function {definition.name}")
            consumed.append(dv)
        else:
            arg_map[param.name] = coerce_named_value(param.name, dv, param.data_type)

    if consumer is not None:
        arg_map[consumer.name] = list_value(consumed)
    return arg_map


def resolve_arguments(definition: FunctionDefinition, args: ArgumentList) -> dict[str, DataValue]:
    """Bind args to the definition's parameters. Raises FunctionCallError."""
    if not definition.has_parameters and (args.positional or args.named):
        raise FunctionCallError(f"Function {definition.name} does not accept any parameters.")

    unknown: dict[str, DataValue] = {}
    try:
        arg_map = _resolve_positional(definition, args)

        for name, dv in args.named.items():
            if name in arg_map:
                raise FunctionCallError(
                    f"Call to function {definition.name} defines argument {name} more than once."
                )
            if not definition.is_valid_parameter_name(name):
                raise FunctionCallError(f"Invalid parameter name {name} for function {definition.name}")
            param = definition.get_parameter(name)
            if param is not None and not param.consumes_remaining:
                arg_map[name] = coerce_named_value(name, dv, param.data_type)
            else:
                unknown[name] = dv
    except ParamTypeError as e:
        raise FunctionCallError(f"Call to function {definition.name}: {e}") from e

    named_consumer = definition.named_consumer
    if named_consumer is not None:
        arg_map[named_consumer.name] = dictionary_value(unknown)

    for param in definition.parameters:
        if param.name not in arg_map and param.has_default_value:
            arg_map[param.name] = param.default_value

    for param in definition.parameters:
        if param.name not in arg_map:
            raise FunctionCallError(f"Parameter {param.name} missing from call to function {definition.name}")

    return arg_map


class FunctionDispatcher:
    def __init__(self, registry: FunctionRegistry | None = None) -> None:
        self._registry = registry

    @property
    def registry(self) -> FunctionRegistry:
        return self._registry if self._registry is not None else get_function_registry()

    def call(
        self,
        function_name: str,
        args: ArgumentList | None = None,
        context: CallerContext | None = None,
    ) -> DataValue:
        """
        Call a registered function.

        Raises FunctionCallError for unknown functions, bad arguments and
        implementation failures; EvaluationPermissionError when the caller's
        permission is too low.
        """
        if args is None:
            args = ArgumentList()
        if context is None:
            context = CallerContext()

        function = self.registry.get(function_name)
        if function is None:
            raise FunctionCallError(f"Unknown function {function_name}")

        definition = function.definition
        check_permission(context.permission, definition.default_permission, function_name)

        arg_map = resolve_arguments(definition, args)
        _LOG.debug("Calling %s with %s", function_name, sorted(arg_map))

        try:
            res = function.call(arg_map)
            return coerce_data_value(res, definition.return_type)
        except (ScriptFunctionError, ParamTypeError) as e:
            raise FunctionCallError(str(e)) from e
