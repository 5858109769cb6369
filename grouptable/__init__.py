"""grouptable: grouped views over partitioned collections.

Only `grouptable` and `grouptable.errors` are public. Everything else is internal.
This module also resolves `__version__` across installs.
"""
from __future__ import annotations

from typing import Any as _Any
from importlib.metadata import version as _pkg_version, PackageNotFoundError

from . import errors as errors  # re-export for star-import; noqa: F401


def _version_from_metadata() -> str | None:
    try:
        return _pkg_version("grouptable")
    except PackageNotFoundError:
        return None


__version__ = _version_from_metadata() or "0+unknown"

# ---------------------------------------------------------------------------
# Public re-exports, lazy-loaded via __getattr__ to avoid import-time cycles
# (configs.validate imports grouptable.errors).
# ---------------------------------------------------------------------------

_LAZY = {
    "GroupedTable": ("grouptable.grouped", "GroupedTable"),
    "GroupIndex": ("grouptable.engine.index", "GroupIndex"),
    "ChunkedTable": ("grouptable.memory.table", "ChunkedTable"),
    "Config": ("grouptable.engine.types", "Config"),
    "Resolved": ("grouptable.engine.types", "Resolved"),
    "UNKNOWN": ("grouptable.engine.types", "UNKNOWN"),
    "load_config": ("grouptable.io.config", "load_config"),
    "validate_config": ("configs.validate", "validate_config"),
}


def __getattr__(name: str) -> _Any:  # PEP 562 lazy exports
    target = _LAZY.get(name)
    if target is None:
        raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
    import importlib

    mod_name, attr = target
    value = getattr(importlib.import_module(mod_name), attr)
    globals()[name] = value
    return value


def __dir__() -> list[str]:
    return list(__all__)


# Star-export surface (deterministic ordering).
__all__ = sorted([*_LAZY, "__version__", "errors"])
