"""Objects injected into script globals."""

from .log import ScriptLog, make_log_module

__all__ = ["ScriptLog", "make_log_module"]
