"""
The ``log`` object scripts see. Records go through a LoggerAdapter so every
line carries the names of the scripts being loaded.
"""

import logging
from typing import Any

logger = logging.getLogger(__name__)


class ScriptLog:
    """info, warn, error, debug with %-style arguments."""

    def __init__(self, adapter: logging.LoggerAdapter) -> None:
        self._adapter = adapter

    def info(self, msg: str, *args: Any) -> None:
        self._adapter.log(logging.INFO, msg, *args)

    def warn(self, msg: str, *args: Any) -> None:
        self._adapter.log(logging.WARNING, msg, *args)

    def error(self, msg: str, *args: Any) -> None:
        self._adapter.log(logging.ERROR, msg, *args)

    def debug(self, msg: str, *args: Any) -> None:
        self._adapter.log(logging.DEBUG, msg, *args)


def make_log_module(
    *,
    logger_instance: logging.Logger | None = None,
    extra: dict[str, Any] | None = None,
) -> ScriptLog:
    return ScriptLog(logging.LoggerAdapter(logger_instance or logger, extra or {}))
