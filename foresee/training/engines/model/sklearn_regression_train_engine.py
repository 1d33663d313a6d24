# foresee/training/engines/model/sklearn_regression_train_engine.py
from __future__ import annotations

from abc import abstractmethod
from typing import Any

import pandas as pd
from sklearn.linear_model import ElasticNetCV, LassoCV, LinearRegression, Ridge
from sklearn.pipeline import make_pipeline
from sklearn.preprocessing import StandardScaler
from sklearn.svm import SVR

from foresee.pipeline.state import PipelineState
from foresee.training.engines.model_train_engine import ModelTrainEngine


def internal_cv_folds(n_samples: int, max_folds: int = 10) -> int:
    return max(2, min(max_folds, n_samples))


class SklearnTrainEngine(ModelTrainEngine):
    """
    Batch fit(X, y) over one scikit-learn estimator.
    """

    def train(self, *, X: pd.DataFrame, y: pd.Series, state: PipelineState) -> Any:
        model = self.build_estimator(n_samples=len(X))
        model.fit(X, y)
        return model

    @abstractmethod
    def build_estimator(self, *, n_samples: int):
        raise NotImplementedError


class LinearTrainEngine(SklearnTrainEngine):
    """Ordinary least squares."""

    name = "linear"

    def build_estimator(self, *, n_samples: int):
        return LinearRegression(**self.params)


class RidgeTrainEngine(SklearnTrainEngine):
    name = "ridge"
    default_params = {"alpha": 1.0}

    def build_estimator(self, *, n_samples: int):
        return Ridge(**self.params)


class LassoTrainEngine(SklearnTrainEngine):
    """
    Lasso, regularization strength picked by internal K-fold CV (min MSE).
    """

    name = "lasso"
    default_params = {"max_iter": 10000}

    def build_estimator(self, *, n_samples: int):
        params = dict(self.params)
        params.setdefault("cv", internal_cv_folds(n_samples))
        return LassoCV(**params)


class ElasticNetTrainEngine(SklearnTrainEngine):
    name = "elasticnet"
    default_params = {"l1_ratio": 0.5, "max_iter": 10000}

    def build_estimator(self, *, n_samples: int):
        params = dict(self.params)
        params.setdefault("cv", internal_cv_folds(n_samples))
        return ElasticNetCV(**params)


class SVMTrainEngine(SklearnTrainEngine):
    """
    epsilon-SVR with RBF kernel on standardized inputs.
    """

    name = "svm"
    default_params = {"kernel": "rbf"}

    def build_estimator(self, *, n_samples: int):
        return make_pipeline(StandardScaler(), SVR(**self.params))
