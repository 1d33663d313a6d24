# foresee/pipeline/parallel/executor.py
from __future__ import annotations

import os
from concurrent.futures import ProcessPoolExecutor, ThreadPoolExecutor
from typing import Any, Callable, Iterable, TypeVar

from foresee import logs
from foresee.pipeline.parallel.types import ParallelKind

T = TypeVar("T")


class ParallelExecutor:
    """
    ParallelExecutor

    - one entry point over Thread / ProcessPoolExecutor
    - results are returned in INPUT order, whatever the completion order
    - the first handler exception propagates, remaining work is cancelled
    """

    @staticmethod
    def run(
            *,
            items: Iterable[T],
            handler: Callable[[T], Any],
            max_workers: int | None = None,
            kind: ParallelKind = ParallelKind.THREAD,
    ) -> list[Any]:
        items = list(items)
        if not items:
            logs.info("[ParallelExecutor] no items to process")
            return []

        workers = ParallelExecutor._resolve_workers(items, max_workers)

        if workers == 1:
            return ParallelExecutor._run_sequential(items, handler)
        return ParallelExecutor._run_parallel(items, handler, workers, kind)

    # ---------------- internal ----------------

    @staticmethod
    def _resolve_workers(items: list, max_workers: int | None) -> int:
        cpu = os.cpu_count() or 1
        if max_workers is None:
            return min(cpu, len(items))
        return max(1, min(max_workers, len(items)))

    @staticmethod
    def _run_sequential(items: list, handler: Callable[[Any], Any]) -> list[Any]:
        return [handler(item) for item in items]

    @staticmethod
    def _run_parallel(
            items: list,
            handler: Callable[[Any], Any],
            workers: int,
            kind: ParallelKind,
    ) -> list[Any]:
        logs.info(
            f"[ParallelExecutor] run parallel | kind={kind.value} workers={workers} total={len(items)}"
        )

        pool_cls = ThreadPoolExecutor if kind == ParallelKind.THREAD else ProcessPoolExecutor

        with pool_cls(max_workers=workers) as pool:
            futures = [pool.submit(handler, item) for item in items]
            try:
                return [fut.result() for fut in futures]
            except Exception:
                for fut in futures:
                    fut.cancel()
                raise
