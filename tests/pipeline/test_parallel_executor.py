# tests/pipeline/test_parallel_executor.py
import math
import time

import pytest

from foresee.pipeline.parallel.executor import ParallelExecutor
from foresee.pipeline.parallel.types import ParallelKind


def slow_square(x: int) -> int:
    # later items finish first
    time.sleep(0.002 * (5 - x))
    return x * x


def worker_maybe_fail(item: str) -> str:
    if item == "bad":
        raise RuntimeError("boom")
    return item


@pytest.mark.parametrize("workers", [1, 3])
def test_results_in_input_order(workers):
    out = ParallelExecutor.run(
        items=range(5),
        handler=slow_square,
        max_workers=workers,
        kind=ParallelKind.THREAD,
    )
    assert out == [0, 1, 4, 9, 16]


def test_empty_items():
    assert ParallelExecutor.run(items=[], handler=slow_square) == []


@pytest.mark.parametrize("workers", [1, 2])
def test_first_failure_propagates(workers):
    with pytest.raises(RuntimeError, match="boom"):
        ParallelExecutor.run(
            items=["ok", "bad", "never"],
            handler=worker_maybe_fail,
            max_workers=workers,
        )


def test_process_pool_keeps_input_order():
    out = ParallelExecutor.run(
        items=[3, 4, 5],
        handler=math.factorial,
        max_workers=2,
        kind=ParallelKind.PROCESS,
    )
    assert out == [6, 24, 120]
