# foresee/training/engines/dispatcher.py
from __future__ import annotations

from typing import Any, Tuple

from foresee import logs
from foresee.config.training_config import TrainingConfig
from foresee.pipeline.state import PipelineState
from foresee.training.engines.model_train_engine import ModelTrainEngine
from foresee.training.engines.registry import resolve_model_train_engine


class StrategyDispatcher:
    """
    StrategyDispatcher (FINAL)

    Contract:
    - dispatch(state, strategy) invokes exactly ONE engine
    - returns (state', model); state' carries the TrainFrame
    - on failure nothing is returned and the input state is untouched
    """

    def __init__(self, cfg: TrainingConfig | None = None, *, seed: int | None = None):
        self.cfg = cfg
        self.seed = seed

    def resolve(self, strategy: Any) -> ModelTrainEngine:
        return resolve_model_train_engine(strategy, cfg=self.cfg, seed=self.seed)

    def dispatch(self, state: PipelineState, strategy: Any) -> Tuple[PipelineState, Any]:
        engine = self.resolve(strategy)

        logs.debug(
            f"[StrategyDispatcher] engine={engine.__class__.__name__} "
            f"samples={state.n_samples} features={state.n_features}"
        )

        return engine.fit_state(state)
