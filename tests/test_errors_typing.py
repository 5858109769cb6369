from __future__ import annotations

import pytest

from grouptable.errors import (
    GroupTableError,
    ConfigError,
    NotFoundError,
    UnorderableError,
    InvalidStateError,
    ParallelError,
    ProbeError,
    TaskError,
    format_error,
)


def test_error_hierarchy():
    for cls in (ConfigError, NotFoundError, UnorderableError, InvalidStateError, ParallelError, ProbeError):
        assert issubclass(cls, GroupTableError)
    assert issubclass(ProbeError, ParallelError)
    # Missing keys behave like mapping misses for callers using KeyError
    assert issubclass(NotFoundError, KeyError)


def test_not_found_carries_key():
    e = NotFoundError(("a", 3))
    assert e.key == ("a", 3)
    assert str(e) == "group key ('a', 3) not found"
    e2 = NotFoundError(7, "index is empty")
    assert "index is empty" in str(e2)


def test_probe_error_positions():
    e = ProbeError([TaskError(2, "OSError", "gone"), TaskError(4, "ValueError", "bad")])
    assert e.positions == [2, 4]
    assert "[2] OSError: gone" in str(e)


def test_format_error_prefix_and_message():
    s = format_error(ConfigError("probe.max_workers must be >= 0"))
    assert s.startswith("ConfigError:")
    assert "max_workers" in s
    assert format_error(InvalidStateError("")) == "InvalidStateError"


def test_validate_config_raises_typed_error():
    from configs.validate import validate_config

    with pytest.raises(ConfigError):
        validate_config({"unknown": {}})


def test_public_surface_sorted():
    import grouptable
    import grouptable.errors as errs

    assert errs.__all__ == sorted(errs.__all__)
    assert grouptable.__all__ == sorted(grouptable.__all__)
    assert grouptable.GroupedTable.__name__ == "GroupedTable"
