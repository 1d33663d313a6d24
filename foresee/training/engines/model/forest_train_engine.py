# foresee/training/engines/model/forest_train_engine.py
from __future__ import annotations

from sklearn.ensemble import RandomForestRegressor

from foresee.training.engines.model.sklearn_regression_train_engine import (
    SklearnTrainEngine,
)


class RandomForestTrainEngine(SklearnTrainEngine):
    """
    Breiman random forest, regression defaults (mtry = p / 3).
    """

    name = "rf"
    default_params = {"n_estimators": 500, "max_features": 1.0 / 3.0}

    def __init__(self, cfg=None, *, seed: int | None = None, **params):
        super().__init__(cfg, seed=seed, **params)
        if self.seed is not None:
            self.params.setdefault("random_state", self.seed)

    def build_estimator(self, *, n_samples: int):
        return RandomForestRegressor(**self.params)


class RangerTrainEngine(RandomForestTrainEngine):
    """
    Fast forest: sqrt(p) candidates per split, all cores.
    """

    name = "rf_ranger"
    default_params = {"n_estimators": 1000, "max_features": "sqrt", "n_jobs": -1}
