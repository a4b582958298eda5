"""Unit tests for engines.script.sandbox."""

import pytest

from scriptbridge.engines.script.sandbox import build_restricted_globals, compile_script


def _run(script: str, context: dict | None = None) -> dict:
    g = build_restricted_globals(context or {})
    exec(compile_script(script), g)
    return g


class TestCompileScript:
    def test_compile_simple(self) -> None:
        code = compile_script("x = 1")
        assert code is not None

    def test_compile_list_comp(self) -> None:
        code = compile_script("result = [x * 2 for x in [1, 2, 3]]")
        assert code is not None

    def test_compile_syntax_error(self) -> None:
        with pytest.raises(SyntaxError):
            compile_script("def f(  ")

    def test_underscore_attribute_rejected(self) -> None:
        with pytest.raises(SyntaxError):
            compile_script("x = [].__class__")


class TestBuildRestrictedGlobals:
    def test_includes_builtins_and_guards(self) -> None:
        g = build_restricted_globals({})
        assert "__builtins__" in g
        assert "_getattr_" in g
        assert "_getiter_" in g
        assert "_getitem_" in g
        assert "_write_" in g
        assert "_inplacevar_" in g
        assert "_unpack_sequence_" in g
        assert "json" in g
        assert "math" in g
        assert "random" in g
        assert g["__builtins__"]["sum"] is sum
        assert "open" not in g["__builtins__"]

    def test_merges_context(self) -> None:
        g = build_restricted_globals({"ExportedFunction": "cls", "log": {"a": 1}})
        assert g["ExportedFunction"] == "cls"
        assert g["log"] == {"a": 1}


class TestRestrictedExecution:
    def test_augmented_assignment(self) -> None:
        g = _run("total = 1\nfor n in [2, 3]:\n    total += n\n")
        assert g["total"] == 6

    def test_unpacking_and_indexing(self) -> None:
        g = _run("a, b = [1, 2]\nd = {'k': a + b}\nv = d['k']\n")
        assert g["v"] == 3

    def test_functions_and_builtins(self) -> None:
        g = _run("def double(args):\n    return [x * 2 for x in args]\nout = sorted(double([3, 1]))\n")
        assert g["out"] == [2, 6]

    def test_open_blocked(self) -> None:
        with pytest.raises(NameError, match="open"):
            _run("f = open('/etc/passwd')")
