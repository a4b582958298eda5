"""
Permission levels for exported functions.

GM > PLAYER > OBSERVER: a caller may invoke a function when the level it holds
is at least the function's required level. OBSERVER is the default for
exported functions (anyone may call).
"""

from __future__ import annotations

from enum import Enum


class EvaluationPermissionError(PermissionError):
    """Raised when a caller lacks the permission level a function requires."""

    pass


class PermissionLevel(str, Enum):
    """Access levels, most restrictive to invoke first."""

    GM = "GM"
    PLAYER = "PLAYER"
    OBSERVER = "OBSERVER"

    @classmethod
    def parse(cls, value: PermissionLevel | str) -> PermissionLevel:
        """Case-insensitive lookup; raises ValueError for unknown names."""
        if isinstance(value, PermissionLevel):
            return value
        if not isinstance(value, str):
            raise ValueError(f"Invalid permission level: {value!r}")
        try:
            return cls(value.strip().upper())
        except ValueError as e:
            raise ValueError(f"Invalid permission level: {value!r}") from e

    @property
    def rank(self) -> int:
        return _RANK[self]

    def __str__(self) -> str:
        return self.value


_RANK: dict[PermissionLevel, int] = {
    PermissionLevel.OBSERVER: 0,
    PermissionLevel.PLAYER: 1,
    PermissionLevel.GM: 2,
}


def has_at_least_permission(
    held: PermissionLevel | str,
    required: PermissionLevel | str,
) -> bool:
    """Return True if ``held`` grants everything ``required`` does."""
    return PermissionLevel.parse(held).rank >= PermissionLevel.parse(required).rank


def check_permission(
    held: PermissionLevel | str,
    required: PermissionLevel | str,
    function_name: str,
) -> None:
    """Raise EvaluationPermissionError unless ``held`` satisfies ``required``."""
    if not has_at_least_permission(held, required):
        raise EvaluationPermissionError(
            f"You do not have permission to call {function_name}"
        )
