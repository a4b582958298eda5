"""
RestrictedPython sandbox for script evaluation.

Allowed: dict, list, set, str, int, float, bool, range, enumerate, zip, sorted,
len, round, min, max, sum, any, all, abs, json, math, random, and the names a
ScriptContext injects (ExportedFunction, Result, ResultBuilder, log).

Blocked: open, exec, eval, __import__, compile, os, subprocess, etc.
"""

import builtins
import json
import math
import operator
import random
from typing import Any

from RestrictedPython import compile_restricted
from RestrictedPython.Eval import default_guarded_getitem, default_guarded_getiter
from RestrictedPython.Guards import (
    full_write_guard,
    guarded_iter_unpack_sequence,
    guarded_unpack_sequence,
    safe_builtins,
    safer_getattr,
)

# Not in RestrictedPython safe_builtins
_EXTRA_BUILTINS = ("list", "dict", "set", "enumerate", "min", "max", "sum", "any", "all")

_INPLACE_OPS = {
    "+=": operator.iadd,
    "-=": operator.isub,
    "*=": operator.imul,
    "/=": operator.itruediv,
    "//=": operator.ifloordiv,
    "%=": operator.imod,
    "**=": operator.ipow,
}


def _inplacevar(op: str, x: Any, y: Any) -> Any:
    """Augmented assignment (x += y) for rewritten script code."""
    fn = _INPLACE_OPS.get(op)
    if fn is None:
        raise SyntaxError(f"Augmented assignment {op!r} is not allowed")
    return fn(x, y)


def _apply(f: Any, *args: Any, **kwargs: Any) -> Any:
    return f(*args, **kwargs)


def _make_safe_builtins() -> dict[str, Any]:
    """safe_builtins plus the container and aggregate builtins scripts commonly need."""
    safe = dict(safe_builtins)
    for name in _EXTRA_BUILTINS:
        safe[name] = getattr(builtins, name)
    return safe


def _make_guard_globals() -> dict[str, Any]:
    """Guards required by RestrictedPython's rewritten bytecode."""
    return {
        "_getattr_": safer_getattr,
        "_getiter_": default_guarded_getiter,
        "_getitem_": default_guarded_getitem,
        "_iter_unpack_sequence_": guarded_iter_unpack_sequence,
        "_unpack_sequence_": guarded_unpack_sequence,
        "_write_": full_write_guard,
        "_inplacevar_": _inplacevar,
        "_apply_": _apply,
    }


def _make_extra_globals() -> dict[str, Any]:
    """Extra safe symbols: json, math, random (dice)."""
    return {
        "json": json,
        "math": math,
        "random": random,
    }


def compile_script(script: str, filename: str = "<script>") -> Any:
    """
    Compile script with RestrictedPython. Raises SyntaxError on failure.

    Returns a code object suitable for exec(bytecode, globals).
    """
    code = compile_restricted(script, filename, "exec")
    if code is None:
        raise SyntaxError("RestrictedPython: compile failed")
    return code


def build_restricted_globals(context_dict: dict[str, Any]) -> dict[str, Any]:
    """
    Build the globals dict for exec(compiled, globals): safe builtins, guards,
    extras (json, math, random), and the context names.
    """
    safe = _make_safe_builtins()
    g: dict[str, Any] = {
        "__builtins__": safe,
        "__name__": "script",
    }
    g.update(_make_guard_globals())
    g.update(_make_extra_globals())
    g.update(context_dict)
    return g
