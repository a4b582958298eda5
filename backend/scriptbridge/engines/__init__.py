"""
Engines: Script (Python, RestrictedPython).
"""

from scriptbridge.engines.script import ScriptContext, ScriptFunctionEvaluator

__all__ = [
    "ScriptContext",
    "ScriptFunctionEvaluator",
]
