"""Group key shapes.

A grouped view carries exactly one key shape:

  • ScalarKey(col)       – grouped by a single column; a key is the column value.
  • CompositeKey(cols)   – grouped by several columns; a key is a tuple in column order.
  • FunctionKey(fn)      – grouped by fn(row); a key is whatever fn returned.

Each shape knows how to display a key and how to coerce a caller-supplied key
onto the canonical representation of keys already present in an index.
"""
from __future__ import annotations

from typing import Any, Callable, List, Optional, Sequence

from ..errors import InvalidStateError

__all__ = [
    "KeyShape",
    "ScalarKey",
    "CompositeKey",
    "FunctionKey",
    "Inconvertible",
    "coerce_value",
    "key_shape_for",
]

FUNCTION_KEYS_COLUMN = "KEYS"


class Inconvertible(Exception):
    """Raised by coercion helpers when a key cannot be losslessly converted."""


def coerce_value(value: Any, sample: Any) -> Any:
    """Convert `value` to the type of `sample`; the result must equal `value`."""
    target = type(sample)
    if isinstance(value, target):
        return value
    if isinstance(sample, tuple):
        return coerce_tuple(value, sample)
    try:
        converted = target(value)
    except Exception as e:  # noqa: BLE001  (constructors of opaque key types raise anything)
        raise Inconvertible(f"cannot convert {type(value).__name__} to {target.__name__}") from e
    if not _same_value(converted, value):
        raise Inconvertible(f"{value!r} does not convert losslessly to {target.__name__}")
    return converted


def coerce_tuple(value: Any, sample: tuple) -> tuple:
    if not isinstance(value, (tuple, list)) or len(value) != len(sample):
        raise Inconvertible(f"expected a {len(sample)}-tuple key")
    return tuple(coerce_value(v, s) for v, s in zip(value, sample))


def _same_value(a: Any, b: Any) -> bool:
    try:
        return bool(a == b)
    except Exception:  # noqa: BLE001  (e.g. ambiguous array truth values)
        return False


class KeyShape:
    """Base for the key shape variants."""

    def grouped_cols(self) -> List[str]:
        raise NotImplementedError

    def display(self, key: Any) -> str:
        raise NotImplementedError

    def describe(self) -> str:
        """Human-readable 'grouped by' description."""
        return ", ".join(self.grouped_cols())

    def coerce(self, key: Any, sample: Any) -> Any:
        return coerce_value(key, sample)


class ScalarKey(KeyShape):
    def __init__(self, col: str):
        self.col = col

    def grouped_cols(self) -> List[str]:
        return [self.col]

    def display(self, key: Any) -> str:
        return f"{self.col} = {key}"

    def __repr__(self) -> str:
        return f"ScalarKey({self.col!r})"


class CompositeKey(KeyShape):
    def __init__(self, cols: Sequence[str]):
        self.cols = list(cols)

    def grouped_cols(self) -> List[str]:
        return list(self.cols)

    def display(self, key: Any) -> str:
        # namedtuple keys name their own fields
        names = getattr(key, "_fields", None) or self.cols
        return ", ".join(f"{n} = {v}" for n, v in zip(names, key))

    def __repr__(self) -> str:
        return f"CompositeKey({self.cols!r})"


class FunctionKey(KeyShape):
    def __init__(self, fn: Callable[[Any], Any]):
        self.fn = fn

    @property
    def name(self) -> str:
        return getattr(self.fn, "__name__", None) or repr(self.fn)

    def grouped_cols(self) -> List[str]:
        return [FUNCTION_KEYS_COLUMN]

    def display(self, key: Any) -> str:
        return f"Function {self.name} = {key}"

    def describe(self) -> str:
        return self.name

    def __repr__(self) -> str:
        return f"FunctionKey({self.name})"


def key_shape_for(
    cols: Optional[Sequence[str]], grouping_function: Optional[Callable[[Any], Any]]
) -> KeyShape:
    """Pick the key shape for a grouped view; exactly one of the arguments must be set."""
    if cols is not None and grouping_function is not None:
        raise InvalidStateError("grouped by both columns and a grouping function")
    if grouping_function is not None:
        if not callable(grouping_function):
            raise InvalidStateError(f"grouping function {grouping_function!r} is not callable")
        return FunctionKey(grouping_function)
    if cols is None:
        raise InvalidStateError("grouped by neither columns nor a grouping function")
    if isinstance(cols, str):
        cols = [cols]
    cols = list(cols)
    if not cols:
        raise InvalidStateError("grouping column list is empty")
    if len(cols) == 1:
        return ScalarKey(cols[0])
    return CompositeKey(cols)
