from __future__ import annotations

"""Typed error taxonomy (public).

Only `grouptable` and `grouptable.errors` are public import roots. This module
exposes the caller-facing error classes and a small helper `format_error`.
"""

from dataclasses import dataclass
from typing import Any, Generic, List, Sequence, TypeVar

__all__ = [
    "GroupTableError",
    "ConfigError",
    "NotFoundError",
    "UnorderableError",
    "InvalidStateError",
    "TaskError",
    "ParallelError",
    "ProbeError",
    "format_error",
]

K = TypeVar("K")


class GroupTableError(Exception):
    """Base class for all typed errors raised by grouptable."""
    pass


class ConfigError(GroupTableError):
    """Configuration invalid, unknown keys, wrong types, etc."""
    pass


class NotFoundError(GroupTableError, KeyError):
    """Group key absent from the index (after coercion)."""

    def __init__(self, key: Any, detail: str = ""):
        self.key = key
        self.detail = detail
        super().__init__(key)

    def __str__(self) -> str:
        base = f"group key {self.key!r} not found"
        return f"{base} ({self.detail})" if self.detail else base


class UnorderableError(GroupTableError):
    """Group keys have no total order; sorted enumeration is impossible."""
    pass


class InvalidStateError(GroupTableError):
    """Grouped view or index violates a structural invariant."""
    pass


@dataclass(frozen=True)
class TaskError(Generic[K]):
    key: K
    exc_type: str
    message: str


class ParallelError(GroupTableError):
    """Deterministic container for parallel task failures."""

    def __init__(self, errors: Sequence[TaskError[Any]]):
        self.errors: List[TaskError[Any]] = list(errors)
        msg = "; ".join(f"[{e.key}] {e.exc_type}: {e.message}" for e in self.errors)
        super().__init__(f"{len(self.errors)} parallel task(s) failed: {msg}")


class ProbeError(ParallelError):
    """One or more partition liveness probes failed; task keys are partition positions."""

    @property
    def positions(self) -> List[int]:
        return [e.key for e in self.errors]


def format_error(e: BaseException) -> str:
    """Return a short, uniform message like 'NotFoundError: detail'."""
    name = e.__class__.__name__
    msg = str(e).strip()
    return f"{name}: {msg}" if msg else name


# Keep star-export order deterministic for tests and tooling
__all__ = sorted(__all__)
