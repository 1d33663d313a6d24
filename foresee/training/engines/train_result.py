from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional, Tuple

from foresee.pipeline.state import PipelineState
from foresee.training.engines.fold_plan import FoldPlan


@dataclass(frozen=True)
class FoldOutcome:
    """
    One fold's (state, model, score), produced independently per fold.
    """
    fold: int
    state: PipelineState
    model: Any
    score: float


@dataclass(frozen=True)
class CrossValidationResult:
    """
    CrossValidationResult (FINAL / FROZEN)

    Pure in-memory result of one training call; no I/O semantics.
    - state       : train subset of the retained fold (full state when folds == 1)
    - fold_scores : every fold's score in fold order, empty when folds == 1
    """
    state: PipelineState
    model: Any
    score: float
    best_fold: int
    fold_scores: Tuple[float, ...] = ()
    fold_plan: Optional[FoldPlan] = None
