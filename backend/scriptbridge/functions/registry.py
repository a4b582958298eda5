"""
Function registry with a load phase and a dispatch phase.

While open, functions may be defined and undefined. close() ends the load
phase: the registry becomes read-only and any further definition raises
RegistryClosedError. Lookups never take the lock.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Iterable

from .definition import HostFunction

_LOG = logging.getLogger(__name__)


class RegistryClosedError(RuntimeError):
    """Raised when a function is (un)defined after the registry was closed."""

    pass


class DuplicateFunctionError(ValueError):
    """Raised when a function name is already registered."""

    pass


class FunctionRegistry:
    def __init__(self) -> None:
        self._functions: dict[str, HostFunction] = {}
        self._lock = threading.Lock()
        self._open = True

    @property
    def is_open(self) -> bool:
        return self._open

    def define(self, function: HostFunction) -> None:
        name = function.definition.name
        with self._lock:
            if not self._open:
                raise RegistryClosedError(f"Can not define {name}: registry is closed")
            if name in self._functions:
                raise DuplicateFunctionError(f"Function {name} has already been defined.")
            self._functions[name] = function
        _LOG.debug("Defined function %s", name)

    def define_all(self, functions: Iterable[HostFunction]) -> None:
        """
        Define every function or none of them. Fails before changing the
        registry when a name is already defined or repeats within functions.
        """
        batch = list(functions)
        names = [f.definition.name for f in batch]
        with self._lock:
            if not self._open:
                raise RegistryClosedError(f"Can not define {', '.join(names)}: registry is closed")
            seen: set[str] = set()
            duplicates = []
            for name in names:
                if name in self._functions or name in seen:
                    duplicates.append(name)
                seen.add(name)
            if duplicates:
                raise DuplicateFunctionError(
                    f"Function(s) {', '.join(sorted(set(duplicates)))} have already been defined."
                )
            for function in batch:
                self._functions[function.definition.name] = function
        _LOG.debug("Defined functions %s", names)

    def undefine(self, name: str) -> bool:
        """Remove a function; returns False if it was not defined."""
        with self._lock:
            if not self._open:
                raise RegistryClosedError(f"Can not undefine {name}: registry is closed")
            removed = self._functions.pop(name, None) is not None
        if removed:
            _LOG.debug("Undefined function %s", name)
        return removed

    def close(self) -> None:
        """End the load phase. Idempotent."""
        with self._lock:
            if self._open:
                self._open = False
                _LOG.info("Function registry closed with %d function(s)", len(self._functions))

    def get(self, name: str) -> HostFunction | None:
        return self._functions.get(name)

    def contains(self, name: str) -> bool:
        return name in self._functions

    def names(self) -> list[str]:
        return sorted(self._functions)

    def functions(self) -> list[HostFunction]:
        return [self._functions[n] for n in self.names()]


_registry: FunctionRegistry | None = None
_registry_lock = threading.Lock()


def get_function_registry() -> FunctionRegistry:
    """Return the process-wide registry, creating it on first use."""
    global _registry
    if _registry is not None:
        return _registry
    with _registry_lock:
        if _registry is None:
            _registry = FunctionRegistry()
        return _registry


def reset_function_registry() -> None:
    """Discard the process-wide registry (next get creates a fresh, open one)."""
    global _registry
    with _registry_lock:
        _registry = None
