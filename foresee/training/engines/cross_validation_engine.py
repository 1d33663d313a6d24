# foresee/training/engines/cross_validation_engine.py
from __future__ import annotations

import math
from typing import Any, Iterable, Optional, Tuple

import numpy as np

from foresee import logs
from foresee.observability.instrumentation import (
    Instrumentation,
    NoOpInstrumentation,
)
from foresee.pipeline.parallel.executor import ParallelExecutor
from foresee.pipeline.state import PipelineState
from foresee.training.engines.dispatcher import StrategyDispatcher
from foresee.training.engines.evaluate_engine import Evaluator, resolve_evaluator
from foresee.training.engines.fold_plan import FoldPlan, validate_fold_count
from foresee.training.engines.train_result import CrossValidationResult, FoldOutcome


def _beats(score: float, best: float) -> bool:
    """
    Strictly greater wins; NaN never beats a real score.
    """
    if math.isnan(score):
        return False
    if math.isnan(best):
        return True
    return score > best


def select_best_fold(outcomes: Iterable[FoldOutcome]) -> FoldOutcome:
    """
    First fold seeds the comparison; on exact ties the earlier fold stays.
    Outcomes are reduced in fold order, independent of completion order.
    """
    best: Optional[FoldOutcome] = None
    for outcome in sorted(outcomes, key=lambda o: o.fold):
        if best is None or _beats(outcome.score, best.score):
            best = outcome

    if best is None:
        raise ValueError("no fold outcomes to select from")
    return best


class CrossValidationEngine:
    """
    CrossValidationEngine (FINAL)

    Contract:
    - folds == 1 : dispatch on the full state
    - folds  > 1 : K-fold train / evaluate, keep the best-scoring fold
    - returned state holds the retained fold's train subset
    - the canonical input state is never mutated; each fold works on a
      private snapshot
    - a failing fold aborts the whole call
    """

    def __init__(
            self,
            dispatcher: StrategyDispatcher | None = None,
            evaluator: str | Evaluator = "neg_rmse",
            *,
            seed: int | None = 0,
            n_jobs: int = 1,
            inst: Instrumentation | None = None,
    ):
        self.dispatcher = (
            dispatcher if dispatcher is not None else StrategyDispatcher(seed=seed)
        )
        self.evaluator = resolve_evaluator(evaluator)
        self.seed = seed
        self.n_jobs = n_jobs
        self.inst = inst if inst is not None else NoOpInstrumentation()

    @classmethod
    def from_config(cls, cfg, *, evaluator: str | Evaluator | None = None,
                    inst: Instrumentation | None = None) -> "CrossValidationEngine":
        return cls(
            StrategyDispatcher(cfg, seed=cfg.seed),
            evaluator if evaluator is not None else cfg.evaluation,
            seed=cfg.seed,
            n_jobs=cfg.n_jobs,
            inst=inst,
        )

    # ------------------------------------------------------------------
    # Public
    # ------------------------------------------------------------------
    def train(self, state: PipelineState, strategy: Any, folds: int = 1) -> Tuple[PipelineState, Any]:
        result = self.cross_validate(state, strategy, folds)
        return result.state, result.model

    def cross_validate(self, state: PipelineState, strategy: Any, folds: int = 1) -> CrossValidationResult:
        folds = validate_fold_count(folds, state.n_samples)

        # fail fast on unknown strategies, before any fold runs
        self.dispatcher.resolve(strategy)

        if folds == 1:
            with self.inst.timer("train_full"):
                new_state, model = self.dispatcher.dispatch(state, strategy)

            logs.info(f"[CrossValidation] folds=1 trained on {state.n_samples} samples")
            return CrossValidationResult(
                state=new_state,
                model=model,
                score=float("nan"),
                best_fold=0,
            )

        plan = FoldPlan.build(state.n_samples, folds, seed=self.seed)
        canonical = state.copy()

        logs.info(
            f"[CrossValidation] START folds={folds} samples={state.n_samples} seed={self.seed}"
        )

        outcomes = ParallelExecutor.run(
            items=list(plan.splits()),
            handler=lambda split: self._run_fold(canonical, strategy, *split),
            max_workers=self.n_jobs,
        )

        best = select_best_fold(outcomes)
        fold_scores = tuple(o.score for o in sorted(outcomes, key=lambda o: o.fold))

        logs.info(
            f"[CrossValidation] DONE best_fold={best.fold} score={best.score:.6f} "
            f"scores={np.round(fold_scores, 6).tolist()}"
        )

        return CrossValidationResult(
            state=best.state,
            model=best.model,
            score=best.score,
            best_fold=best.fold,
            fold_scores=fold_scores,
            fold_plan=plan,
        )

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------
    def _run_fold(
            self,
            canonical: PipelineState,
            strategy: Any,
            fold: int,
            train_idx: np.ndarray,
            test_idx: np.ndarray,
    ) -> FoldOutcome:
        train_state = canonical.subset_samples(train_idx, kind="train")
        test_state = canonical.subset_samples(test_idx, kind="test")

        with self.inst.timer(f"fold_{fold}"):
            fitted_state, model = self.dispatcher.dispatch(train_state, strategy)
            score = float(self.evaluator(model, test_state))

        logs.info(
            f"[CrossValidation] fold={fold} n_train={len(train_idx)} "
            f"n_test={len(test_idx)} score={score:.6f}"
        )
        return FoldOutcome(fold=fold, state=fitted_state, model=model, score=score)
