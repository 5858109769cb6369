from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Protocol, Sequence, Union

# ---- Element type resolution ----


@dataclass(frozen=True)
class Resolved:
    """Element (row) type of a collection's partitions, known for certain."""
    type: type


class _Unknown:
    _instance: Optional["_Unknown"] = None

    def __new__(cls) -> "_Unknown":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "UNKNOWN"

    def __bool__(self) -> bool:
        return False


UNKNOWN = _Unknown()

TypeResolution = Union[Resolved, _Unknown]

# Generic untyped record used when the row type cannot be resolved.
DEFAULT_TABLETYPE: type = dict


# ---- External collection boundary ----


class PartitionedCollection(Protocol):
    """What a grouped view needs from the collection that owns the partitions.

    `chunks` is the ordered partition sequence; positions are indices into it.
    `tabletype` caches the resolved row type (None when unknown) and is writable.
    """

    chunks: Sequence[Any]
    tabletype: Optional[type]

    def chunk_nonempty(self, chunk: Any) -> bool: ...

    def from_chunks(self, chunks: Sequence[Any], tabletype: Optional[type]) -> "PartitionedCollection": ...

    def resolve_tabletype(self) -> TypeResolution: ...

    def fetch(self) -> List[Any]: ...

    def columnnames(self) -> List[str]: ...

    def __len__(self) -> int: ...


# ---- Config ----


@dataclass
class Config:
    probe: Dict[str, Any] = field(
        default_factory=lambda: {
            "max_workers": 8,
        }
    )
    logs: Dict[str, Any] = field(
        default_factory=lambda: {
            "compaction_jsonl": False,
        }
    )
