"""
ScriptContext: names injected into a script scope at load time.

ExportedFunction (bound to the load pass's ExportCollector), Result,
ResultBuilder and log.
"""

import logging
from typing import Any

from .exported import ExportCollector, bind_exporter
from .modules import make_log_module
from .result import Result, ResultBuilder


class ScriptContext:
    """
    Builds the script namespace for one load pass. Every function a script
    exports through ExportedFunction lands in ``exporter``.
    """

    def __init__(
        self,
        *,
        exporter: ExportCollector,
        logger: logging.Logger | None = None,
        log_extra: dict[str, Any] | None = None,
    ) -> None:
        self.exporter = exporter
        self.ExportedFunction = bind_exporter(exporter)
        self.log = make_log_module(logger_instance=logger, extra=log_extra)

    def to_dict(self) -> dict[str, Any]:
        """Dict of names injected into the script globals."""
        return {
            "ExportedFunction": self.ExportedFunction,
            "Result": Result,
            "ResultBuilder": ResultBuilder,
            "log": self.log,
        }
