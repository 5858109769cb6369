# grouptable/engine/util/parallel.py
from __future__ import annotations
from concurrent.futures import ThreadPoolExecutor, Future
from typing import Any, Callable, List, Sequence, Tuple, TypeVar

from grouptable.errors import ParallelError, TaskError

K = TypeVar("K")  # task key (e.g., partition position)
R = TypeVar("R")  # task result
A = TypeVar("A")  # aggregated (merged) result

__all__ = ["run_parallel", "ParallelError", "TaskError"]


def run_parallel(
    tasks: Sequence[Tuple[K, Callable[[], R]]],
    *,
    max_workers: int,
    merge_fn: Callable[[List[Tuple[K, R]]], A],
    order_key: Callable[[K], Any],
    error_cls: type = ParallelError,
    thread_name_prefix: str = "grouptable-par",
) -> A:
    """
    Scatter `tasks` over a thread pool, gather every outcome, merge deterministically.

    - tasks: sequence of (key, thunk) where thunk() -> R; key is used for ordering.
    - max_workers <= 1  => sequential path, no pool is created.
    - Every task runs to completion before anything is merged; the gather is a
      single barrier with no timeout.
    - merge_fn receives (key, result) pairs sorted by order_key(key), ties broken
      by submit index, so the merged value never depends on completion order.
    - Failures are collected and raised as `error_cls` (a ParallelError subclass)
      with errors sorted by order_key(key) then submit index.
    """
    n = len(tasks)
    if n == 0:
        return merge_fn([])

    results: List[Tuple[int, K, R]] = []
    errors: List[Tuple[Any, int, TaskError[K]]] = []

    if max_workers <= 1:
        for idx, (k, fn) in enumerate(tasks):
            try:
                results.append((idx, k, fn()))
            except Exception as e:  # noqa: BLE001
                errors.append((order_key(k), idx, TaskError(k, type(e).__name__, str(e))))
    else:
        eff_workers = max(1, min(max_workers, n))
        with ThreadPoolExecutor(max_workers=eff_workers, thread_name_prefix=thread_name_prefix) as ex:
            # Submit in a stable order; the submit index breaks equal-order_key ties.
            futures: List[Tuple[int, K, Future]] = [
                (idx, k, ex.submit(fn)) for idx, (k, fn) in enumerate(tasks)
            ]
            for idx, k, fut in futures:
                try:
                    results.append((idx, k, fut.result()))
                except Exception as e:  # noqa: BLE001
                    errors.append((order_key(k), idx, TaskError(k, type(e).__name__, str(e))))

    if errors:
        errors.sort(key=lambda t: (t[0], t[1]))
        raise error_cls([te for _, _, te in errors])

    ordered = [(k, r) for _, k, r in sorted(results, key=lambda t: (order_key(t[1]), t[0]))]
    return merge_fn(ordered)
