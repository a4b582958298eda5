"""
ScriptFunctionEvaluator: load scripts, collect exported functions, call them.

load_scripts() runs every script of one pass in a single RestrictedPython
scope and turns each ExportedFunction the pass exported into a
ScriptFunction. call() marshals the host arguments into one ScriptArgs
object, invokes the named script callable with it and marshals the return
value back to the declared return type.

Optional: SCRIPT_EXEC_TIMEOUT (signal.SIGALRM on Unix, main thread only)
aborts long-running loads and calls.
Optional: SCRIPT_EXTRA_MODULES (comma-separated) exposes whitelisted modules
in script globals.
"""

import importlib
import logging
import re
import signal
import threading
from collections.abc import Callable, Mapping
from typing import Any, TypeVar

from scriptbridge.core.config import settings
from scriptbridge.core.param_type import ParamTypeError, coerce_data_value
from scriptbridge.functions.definition import (
    FunctionDefinition,
    FunctionDefinitionBuilder,
    FunctionDefinitionError,
    ScriptFunctionError,
)
from scriptbridge.models_datavalue import DataType, DataValue

from .context import ScriptContext
from .exported import ExportCollector, ExportedFunctionSpec
from .marshal import ConversionError, convert_args, convert_to_data_value
from .sandbox import build_restricted_globals, compile_script

_log = logging.getLogger(__name__)

# Only allow top-level module names (e.g. statistics), no submodules
_SAFE_MODULE_NAME_RE = re.compile(r"^[a-zA-Z_][a-zA-Z0-9_]*$")

T = TypeVar("T")


class ScriptTimeoutError(TimeoutError):
    """Raised when a script load or call exceeds SCRIPT_EXEC_TIMEOUT."""

    pass


def _inject_extra_modules(g: dict[str, Any]) -> None:
    """Inject whitelisted extra modules into script globals. Scripts can not import."""
    raw = (settings.SCRIPT_EXTRA_MODULES or "").strip()
    if not raw:
        return
    for name in (s.strip() for s in raw.split(",") if s.strip()):
        if not _SAFE_MODULE_NAME_RE.match(name):
            _log.warning("Ignoring invalid extra module name %r", name)
            continue
        try:
            g[name] = importlib.import_module(name)
        except ImportError:
            _log.warning("Extra module %r could not be imported", name)


def _run_with_timeout(fn: Callable[[], T], timeout_sec: int) -> T:
    """Run fn() with signal.SIGALRM. Unix only, main thread only."""

    def _handler(signum: int, frame: Any) -> None:
        raise ScriptTimeoutError(f"Script execution timed out after {timeout_sec}s")

    old = signal.signal(signal.SIGALRM, _handler)
    try:
        signal.alarm(timeout_sec)
        try:
            return fn()
        finally:
            signal.alarm(0)
    finally:
        signal.signal(signal.SIGALRM, old)


def _run(fn: Callable[[], T]) -> T:
    timeout = settings.SCRIPT_EXEC_TIMEOUT
    use_signal = (
        timeout is not None
        and timeout > 0
        and hasattr(signal, "SIGALRM")
        and threading.current_thread() is threading.main_thread()
    )
    if use_signal:
        return _run_with_timeout(fn, timeout)
    return fn()


class ScriptFunction:
    """A function exported by a script, callable through the dispatcher."""

    def __init__(
        self,
        function_name: str,
        definition: FunctionDefinition,
        scope: dict[str, Any],
        evaluator: "ScriptFunctionEvaluator",
    ) -> None:
        if not function_name:
            raise ValueError("Script function name can not be empty.")
        self.function_name = function_name
        self._definition = definition
        self.scope = scope
        self._evaluator = evaluator

    @property
    def definition(self) -> FunctionDefinition:
        return self._definition

    def call(self, args: Mapping[str, DataValue]) -> DataValue:
        return self._evaluator.call(self, args, self._definition.return_type)

    def __repr__(self) -> str:
        return f"ScriptFunction({self._definition.name!r} -> {self.function_name!r})"


class ScriptFunctionEvaluator:
    """
    Evaluates scripts in a RestrictedPython sandbox and calls the functions
    they export.
    """

    def __init__(self, *, logger: logging.Logger | None = None) -> None:
        self._logger = logger

    def load_script(self, name: str, source: str) -> list[ScriptFunction]:
        return self.load_scripts({name: source})

    def load_scripts(self, scripts: Mapping[str, str]) -> list[ScriptFunction]:
        """
        Evaluate scripts (name -> source), in order, in one fresh scope.

        Returns the functions exported during this pass. Any error (syntax,
        runtime, ConfigurationError from ExportedFunction) aborts the pass
        with ScriptFunctionError chained to the cause.
        """
        if scripts is None:
            raise ValueError("Scripts to load can not be None.")

        exporter = ExportCollector()
        try:
            context = ScriptContext(
                exporter=exporter,
                logger=self._logger,
                log_extra={"scripts": ",".join(scripts)},
            )
            scope = build_restricted_globals(context.to_dict())
            _inject_extra_modules(scope)

            for name, source in scripts.items():
                if not name:
                    raise ValueError("Name of script to load can not be empty.")
                if source is None:
                    raise ValueError(f"Script body of {name} can not be None.")
                try:
                    code = compile_script(source, filename=name)
                    _run(lambda: exec(code, scope))  # noqa: S102 - RestrictedPython compiled code
                except ScriptTimeoutError:
                    raise
                except Exception as e:
                    raise ScriptFunctionError(f"Error loading script {name}: {e}") from e

            functions = [self._to_script_function(spec, scope) for spec in exporter.exported]
        finally:
            exporter.close()

        _log.info("Loaded %d function(s) from %s", len(functions), ", ".join(scripts) or "<none>")
        return functions

    def _to_script_function(self, spec: ExportedFunctionSpec, scope: dict[str, Any]) -> ScriptFunction:
        builder = (
            FunctionDefinitionBuilder()
            .set_name(spec.name)
            .set_return_type(spec.return_type)
            .set_default_permission(spec.permission)
        )
        try:
            for p in spec.parameter_list:
                if p.vararg_flag:
                    if p.param_type == DataType.LIST:
                        builder.add_list_varargs_parameter(p.name)
                    else:
                        builder.add_dictionary_varargs_parameter(p.name)
                elif p.default_val is not None:
                    default = coerce_data_value(convert_to_data_value(p.default_val), p.param_type)
                    builder.add_parameter(p.name, p.param_type, default)
                else:
                    builder.add_parameter(p.name, p.param_type)
            definition = builder.build()
        except (ConversionError, ParamTypeError, FunctionDefinitionError) as e:
            raise ScriptFunctionError(f"Invalid definition for exported function {spec.name}: {e}") from e
        return ScriptFunction(spec.function_name, definition, scope, self)

    def call(
        self,
        function: ScriptFunction,
        args: Mapping[str, DataValue],
        return_type: DataType | str | None = None,
    ) -> DataValue:
        """
        Call the script callable behind ``function`` with one ScriptArgs
        argument and convert what it returns to ``return_type`` (defaults to
        the definition's return type).
        """
        if args is None:
            raise ValueError("Function argument list can not be None.")

        definition = function.definition
        fn = function.scope.get(function.function_name)
        if not callable(fn):
            raise ScriptFunctionError(f"{function.function_name} not defined.")

        script_args = convert_args(args, [p.name for p in definition.parameters])
        rtype = return_type if return_type is not None else definition.return_type
        try:
            out = _run(lambda: fn(script_args))
            return convert_to_data_value(out, rtype)
        except ScriptTimeoutError:
            raise
        except Exception as e:
            raise ScriptFunctionError(f"Error calling {definition.name}: {e}") from e
