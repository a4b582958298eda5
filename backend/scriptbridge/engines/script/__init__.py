"""
Script engine (Python, RestrictedPython).

Exports: ScriptFunctionEvaluator, ScriptFunction, ScriptContext,
ExportedFunction, Result, ResultBuilder, compile_script,
build_restricted_globals.
"""

from .context import ScriptContext
from .executor import ScriptFunction, ScriptFunctionEvaluator, ScriptTimeoutError
from .exported import ConfigurationError, ExportCollector, ExportedFunction
from .marshal import ConversionError, convert_args, convert_data_value, convert_to_data_value
from .result import Result, ResultBuilder
from .sandbox import build_restricted_globals, compile_script

__all__ = [
    "ConfigurationError",
    "ConversionError",
    "ExportCollector",
    "ExportedFunction",
    "Result",
    "ResultBuilder",
    "ScriptContext",
    "ScriptFunction",
    "ScriptFunctionEvaluator",
    "ScriptTimeoutError",
    "build_restricted_globals",
    "compile_script",
    "convert_args",
    "convert_data_value",
    "convert_to_data_value",
]
