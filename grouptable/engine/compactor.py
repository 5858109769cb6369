"""Compaction: drop empty partitions and rewrite the group index onto the denser sequence.

Given the partition list, the index over positions [0, N) and a liveness mask
aligned with those positions, `compact` computes

  • the surviving partitions, in original order;
  • offset[i] = number of empty partitions at indices <= i (cumulative sum);
  • for every key, its surviving positions remapped i -> i - offset[i];
    keys left without positions are dropped.

The function is pure: inputs are never mutated, so a caller can compute the
result completely and install it only once everything succeeded.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Sequence, Tuple

import numpy as np
from numpy.typing import ArrayLike, NDArray

from ..errors import InvalidStateError
from .index import GroupIndex

__all__ = ["Compaction", "offset_table", "compact"]


@dataclass(frozen=True)
class Compaction:
    chunks: List[Any]
    index: GroupIndex
    kept_positions: Tuple[int, ...]
    dropped_keys: Tuple[Any, ...]
    n_before: int

    @property
    def removed(self) -> int:
        return self.n_before - len(self.chunks)

    def metrics(self) -> Dict[str, Any]:
        return {
            "partitions_before": self.n_before,
            "partitions_after": len(self.chunks),
            "keys_after": len(self.index),
            "keys_dropped": len(self.dropped_keys),
        }


def _as_mask(nonempty: ArrayLike) -> NDArray[np.bool_]:
    mask = np.asarray(nonempty, dtype=bool)
    if mask.ndim != 1:
        raise InvalidStateError(f"liveness mask must be one-dimensional, got shape {mask.shape}")
    return mask


def offset_table(nonempty: ArrayLike) -> NDArray[np.int64]:
    """Running count of empty partitions up to and including each position."""
    mask = _as_mask(nonempty)
    return np.cumsum(~mask, dtype=np.int64)


def compact(chunks: Sequence[Any], index: GroupIndex, nonempty: ArrayLike) -> Compaction:
    n = len(chunks)
    mask = _as_mask(nonempty)
    if mask.shape[0] != n:
        raise InvalidStateError(
            f"liveness mask has {mask.shape[0]} entries for {n} partitions"
        )

    kept = np.flatnonzero(mask)
    offsets = offset_table(mask)

    rewritten: Dict[Any, List[int]] = {}
    dropped: List[Any] = []
    for key, positions in index.items():
        ind = np.asarray(positions, dtype=np.int64)
        if ind.size and (ind.min() < 0 or ind.max() >= n):
            raise InvalidStateError(
                f"key {key!r} references positions outside [0, {n}): {positions}"
            )
        ind = ind[mask[ind]]
        if ind.size == 0:
            dropped.append(key)
            continue
        rewritten[key] = (ind - offsets[ind]).tolist()

    return Compaction(
        chunks=[chunks[i] for i in kept.tolist()],
        index=GroupIndex._trusted(rewritten),
        kept_positions=tuple(kept.tolist()),
        dropped_keys=tuple(dropped),
        n_before=n,
    )
