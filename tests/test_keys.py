from __future__ import annotations

from collections import namedtuple

import pytest

from grouptable.engine.keys import (
    CompositeKey,
    FunctionKey,
    Inconvertible,
    ScalarKey,
    coerce_value,
    key_shape_for,
)
from grouptable.errors import InvalidStateError


def parity(row):
    return row["a"] % 2


def test_key_shape_selection():
    assert isinstance(key_shape_for(["a"], None), ScalarKey)
    assert isinstance(key_shape_for("a", None), ScalarKey)
    assert isinstance(key_shape_for(["a", "b"], None), CompositeKey)
    assert isinstance(key_shape_for(None, parity), FunctionKey)


@pytest.mark.parametrize(
    "cols,fn",
    [(None, None), (["a"], parity), ([], None), (None, "not-callable")],
)
def test_key_shape_rejects_invalid_combinations(cols, fn):
    with pytest.raises(InvalidStateError):
        key_shape_for(cols, fn)


def test_display_per_shape():
    assert ScalarKey("a").display(3) == "a = 3"
    assert CompositeKey(["a", "b"]).display((1, "x")) == "a = 1, b = x"
    Key = namedtuple("Key", ["left", "right"])
    assert CompositeKey(["a", "b"]).display(Key(1, 2)) == "left = 1, right = 2"
    assert FunctionKey(parity).display(0) == "Function parity = 0"


def test_grouped_cols_and_describe():
    assert ScalarKey("a").grouped_cols() == ["a"]
    assert CompositeKey(["a", "b"]).describe() == "a, b"
    fk = FunctionKey(parity)
    assert fk.grouped_cols() == ["KEYS"]
    assert fk.describe() == "parity"
    assert FunctionKey(lambda r: r).name == "<lambda>"


def test_coerce_value_lossless_only():
    assert coerce_value(2.0, 1) == 2 and type(coerce_value(2.0, 1)) is int
    with pytest.raises(Inconvertible):
        coerce_value(2.5, 1)
    with pytest.raises(Inconvertible):
        coerce_value("abc", 1)
    with pytest.raises(Inconvertible):
        coerce_value(3, None)
    assert coerce_value([1, 2.0], (0, 0)) == (1, 2)
