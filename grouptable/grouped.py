"""Grouped view over a partitioned collection.

A `GroupedTable` wraps a collection whose rows are split into an ordered list of
partitions ("chunks") and an index mapping each group key to the positions of
the partitions holding that group's rows.

Precondition: a GroupedTable is single-writer. `compact_inplace` replaces the
collection and the index; callers must not run it concurrently with reads or
other compactions on the same object.
"""
from __future__ import annotations

import logging
from typing import Any, Callable, Iterator, KeysView, List, Mapping, Optional, Sequence, Tuple, Union

from .engine.compactor import Compaction, compact
from .engine.index import GroupIndex
from .engine.keys import KeyShape, key_shape_for
from .engine.probe import probe_partitions
from .engine.types import (
    DEFAULT_TABLETYPE,
    UNKNOWN,
    Config,
    PartitionedCollection,
    Resolved,
    TypeResolution,
)
from .io.log import append_jsonl

logger = logging.getLogger(__name__)

__all__ = ["GroupedTable"]


class GroupedTable:
    def __init__(
        self,
        table: PartitionedCollection,
        cols: Optional[Sequence[str]],
        index: Union[GroupIndex, Mapping[Any, Sequence[int]]],
        grouping_function: Optional[Callable[[Any], Any]] = None,
        *,
        cfg: Optional[Config] = None,
    ) -> None:
        self._shape: KeyShape = key_shape_for(cols, grouping_function)
        self.table = table
        self.cols: Optional[List[str]] = None if cols is None else list(self._shape.grouped_cols())
        self.grouping_function = grouping_function
        # Always take a private copy; the builder keeps ownership of its own structure.
        self._index: GroupIndex = index.copy() if isinstance(index, GroupIndex) else GroupIndex(index)
        self._index.validate(len(table.chunks))
        self.cfg: Config = cfg if cfg is not None else Config()

    # ---- index surface ----

    @property
    def index(self) -> GroupIndex:
        return self._index

    @property
    def key_shape(self) -> KeyShape:
        return self._shape

    def grouped_cols(self) -> List[str]:
        """Columns used in the grouping; ["KEYS"] when grouped by a function."""
        return self._shape.grouped_cols()

    def keys(self) -> KeysView:
        return self._index.keys()

    def sorted_keys(self) -> List[Any]:
        return self._index.sorted_keys()

    def __len__(self) -> int:
        return len(self._index)

    def __contains__(self, key: Any) -> bool:
        return key in self._index

    @property
    def nchunks(self) -> int:
        return len(self.table.chunks)

    # ---- materialization ----

    def partition(self, positions: Sequence[int]) -> PartitionedCollection:
        """Collection restricted to exactly `positions`, in the given order."""
        chunks = self.table.chunks
        n = len(chunks)
        picked = []
        for p in positions:
            if not 0 <= p < n:
                raise IndexError(f"partition position {p} out of range for {n} partitions")
            picked.append(chunks[p])
        return self.table.from_chunks(picked, self.table.tabletype)

    def __getitem__(self, key: Any) -> PartitionedCollection:
        """Sub-collection with the rows of one group; raises NotFoundError."""
        ck = self._index.coerce(key, self._shape)
        return self.partition(self._index.lookup(ck))

    def items(self) -> Iterator[Tuple[Any, PartitionedCollection]]:
        for key, positions in self._index.items():
            yield key, self.partition(positions)

    def __iter__(self) -> Iterator[Tuple[Any, PartitionedCollection]]:
        return self.items()

    def to_table(self) -> PartitionedCollection:
        """Fresh, ungrouped collection over the same partitions."""
        return self.table.from_chunks(list(self.table.chunks), self.table.tabletype)

    def fetch(self, sink: Optional[Callable[[List[Any]], Any]] = None) -> Any:
        """All rows of the underlying collection; `sink` builds the container (e.g. tuple)."""
        rows = self.table.fetch()
        return rows if sink is None else sink(rows)

    def columnnames(self) -> List[str]:
        return self.table.columnnames()

    # ---- compaction ----

    def _max_workers(self, max_workers: Optional[int]) -> int:
        if max_workers is not None:
            return int(max_workers)
        return int(self.cfg.probe.get("max_workers", 8))

    def compact_inplace(self, *, max_workers: Optional[int] = None) -> "GroupedTable":
        """Remove empty partitions and the keys that only referenced them.

        Probes every partition first; if any probe fails a ProbeError is raised
        and this object is left untouched.
        """
        nonempty = probe_partitions(self.table, max_workers=self._max_workers(max_workers))
        result = compact(self.table.chunks, self._index, nonempty)
        new_table = self.table.from_chunks(result.chunks, self.table.tabletype)
        # Commit only once everything above succeeded.
        self.table = new_table
        self._index = result.index
        self._log_compaction(result)
        return self

    def compact(self, *, max_workers: Optional[int] = None) -> "GroupedTable":
        """Compacted copy; this object is not modified."""
        fresh = GroupedTable(
            self.to_table(), self.cols, self._index, self.grouping_function, cfg=self.cfg
        )
        return fresh.compact_inplace(max_workers=max_workers)

    def _log_compaction(self, result: Compaction) -> None:
        metrics = result.metrics()
        logger.debug(
            "compacted %d -> %d partitions, %d keys dropped",
            metrics["partitions_before"],
            metrics["partitions_after"],
            metrics["keys_dropped"],
        )
        # The view is already committed; a failed event write must not surface as a failed compaction.
        try:
            append_jsonl(
                "compaction.jsonl",
                {**metrics, "grouped_by": self._shape.describe()},
                feature_guard=bool(self.cfg.logs.get("compaction_jsonl", False)),
            )
        except OSError:
            logger.warning("could not write compaction.jsonl event", exc_info=True)

    # ---- element type ----

    def element_type(self) -> TypeResolution:
        """Cached row type if resolved before, else UNKNOWN (no resolution attempted)."""
        t = self.table.tabletype
        return UNKNOWN if t is None else Resolved(t)

    def _resolve(self) -> type:
        try:
            res = self.table.resolve_tabletype()
        except Exception:  # noqa: BLE001  (resolution is best-effort)
            logger.debug("tabletype resolution raised; using %s", DEFAULT_TABLETYPE.__name__, exc_info=True)
            return DEFAULT_TABLETYPE
        if isinstance(res, Resolved):
            return res.type
        logger.debug("tabletype unknown; using %s", DEFAULT_TABLETYPE.__name__)
        return DEFAULT_TABLETYPE

    @property
    def tabletype(self) -> type:
        """Row type of the partitions; cached value if available, else resolved (uncached)."""
        t = self.table.tabletype
        return self._resolve() if t is None else t

    def resolve_tabletype(self) -> type:
        """Resolve the row type and cache it on the collection."""
        t = self._resolve()
        self.table.tabletype = t
        return t

    # ---- display ----

    def format_key(self, key: Any) -> str:
        return self._shape.display(key)

    def _header(self) -> List[str]:
        t = self.table.tabletype
        tabletype = "unknown (use `resolve_tabletype()`)" if t is None else t.__name__
        return [
            f"GroupedTable with {self.nchunks} partitions and {len(self)} keys",
            f"Tabletype: {tabletype}",
            f"Grouped by: {self._shape.describe()}",
        ]

    def _group_line(self, key: Any, prefix: str = "", suffix: str = "") -> str:
        n = len(self[key])
        return f"{prefix}Group{suffix} ({n} rows): {self.format_key(key)}"

    def describe(self, limit: bool = False) -> str:
        """Plain-text summary; one line per group in sorted key order.

        With `limit`, only the first and last groups are listed.
        """
        lines = self._header()
        keys = self.sorted_keys()
        if not keys:
            return "\n".join(lines)
        if not limit:
            lines.extend(self._group_line(k, suffix=f" {i}") for i, k in enumerate(keys, 1))
        else:
            first, last = keys[0], keys[-1]
            lines.append(self._group_line(first, prefix="First "))
            if first != last:
                lines.append("⋮")
                lines.append(self._group_line(last, prefix="Last "))
        return "\n".join(lines)

    def __repr__(self) -> str:
        return f"<GroupedTable partitions={self.nchunks} keys={len(self)} by={self._shape.describe()}>"
