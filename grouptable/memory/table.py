from __future__ import annotations
from typing import Any, Iterator, List, Mapping, Optional, Sequence

from ..engine.types import UNKNOWN, Resolved, TypeResolution

# Marks "no rows at all"; a real row may itself be None.
_NO_ROWS = object()


class ChunkedTable:
    """In-memory partitioned collection.

    Each chunk is a sized sequence of rows (mappings, namedtuples, tuples...).
    Chunks are shared by reference between tables built with `from_chunks`;
    nothing here copies or mutates row data.
    """

    def __init__(self, chunks: Sequence[Sequence[Any]] = (), tabletype: Optional[type] = None) -> None:
        self.chunks: List[Sequence[Any]] = list(chunks)
        self.tabletype: Optional[type] = tabletype

    def from_chunks(self, chunks: Sequence[Sequence[Any]], tabletype: Optional[type]) -> "ChunkedTable":
        return type(self)(chunks, tabletype)

    @property
    def nchunks(self) -> int:
        return len(self.chunks)

    def chunk_nonempty(self, chunk: Sequence[Any]) -> bool:
        return len(chunk) > 0

    def __len__(self) -> int:
        """Total number of rows across all chunks."""
        return sum(len(c) for c in self.chunks)

    def rows(self) -> Iterator[Any]:
        for chunk in self.chunks:
            yield from chunk

    def fetch(self) -> List[Any]:
        return list(self.rows())

    def _first_row(self) -> Any:
        for chunk in self.chunks:
            for row in chunk:
                return row
        return _NO_ROWS

    def resolve_tabletype(self) -> TypeResolution:
        row = self._first_row()
        if row is _NO_ROWS:
            return UNKNOWN
        return Resolved(type(row))

    def columnnames(self) -> List[str]:
        row = self._first_row()
        if row is _NO_ROWS:
            return []
        fields = getattr(row, "_fields", None)
        if fields is not None:
            return list(fields)
        if isinstance(row, Mapping):
            return [str(k) for k in row.keys()]
        return []

    def __repr__(self) -> str:
        return f"ChunkedTable(nchunks={self.nchunks}, rows={len(self)})"
