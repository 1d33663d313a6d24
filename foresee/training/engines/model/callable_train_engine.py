# foresee/training/engines/model/callable_train_engine.py
from __future__ import annotations

from typing import Any, Callable

import pandas as pd
from sklearn.base import clone

from foresee import logs
from foresee.pipeline.state import PipelineState
from foresee.training.engines.model_train_engine import ModelTrainEngine


class CallableTrainEngine(ModelTrainEngine):
    """
    Caller-supplied fit function.

    Contract: fn(X, y) -> model, where X holds every TrainFrame column
    except DrugResponse and y is the DrugResponse column.
    """

    name = "callable"

    def __init__(self, fn: Callable[[pd.DataFrame, pd.Series], Any], cfg=None, *,
                 seed: int | None = None):
        super().__init__(cfg, seed=seed)
        self.fn = fn

    def train(self, *, X: pd.DataFrame, y: pd.Series, state: PipelineState) -> Any:
        logs.info(
            f"[CallableTrainEngine] user-defined fit "
            f"{getattr(self.fn, '__name__', type(self.fn).__name__)}"
        )
        return self.fn(X, y)


class EstimatorTrainEngine(ModelTrainEngine):
    """
    Unfitted scikit-learn style estimator; cloned per call so the
    caller's instance is never fitted in place.
    """

    name = "estimator"

    def __init__(self, estimator, cfg=None, *, seed: int | None = None):
        super().__init__(cfg, seed=seed)
        self.estimator = estimator

    def train(self, *, X: pd.DataFrame, y: pd.Series, state: PipelineState) -> Any:
        model = clone(self.estimator)
        model.fit(X, y)
        return model
