from __future__ import annotations

import logging
from functools import partial
from typing import Any, List, Tuple

import numpy as np
from numpy.typing import NDArray

from ..errors import ProbeError
from .types import PartitionedCollection
from .util.parallel import run_parallel

logger = logging.getLogger(__name__)


def _merge_mask(n: int):
    def merge(pairs: List[Tuple[int, Any]]) -> NDArray[np.bool_]:
        mask = np.zeros(n, dtype=bool)
        for pos, nonempty in pairs:
            mask[pos] = bool(nonempty)
        return mask

    return merge


def probe_partitions(table: PartitionedCollection, *, max_workers: int) -> NDArray[np.bool_]:
    """Evaluate `chunk_nonempty` on every partition; result[i] belongs to partition i.

    All probes complete before this returns. If any probe raises, a ProbeError
    listing every failed position is raised and no result is produced.
    """
    chunks = list(table.chunks)
    n = len(chunks)
    tasks = [(pos, partial(table.chunk_nonempty, chunk)) for pos, chunk in enumerate(chunks)]
    logger.debug("probing %d partitions with max_workers=%d", n, max_workers)
    mask = run_parallel(
        tasks,
        max_workers=max_workers,
        merge_fn=_merge_mask(n),
        order_key=lambda pos: pos,
        error_cls=ProbeError,
        thread_name_prefix="grouptable-probe",
    )
    logger.debug("probe finished: %d of %d partitions non-empty", int(mask.sum()), n)
    return mask
