# foresee/training/engines/model/tandem_train_engine.py
from __future__ import annotations

from typing import Any, Dict

import numpy as np
import pandas as pd
from sklearn.base import BaseEstimator, RegressorMixin
from sklearn.linear_model import ElasticNetCV
from sklearn.utils.validation import check_is_fitted

from foresee.pipeline.state import GENE_EXPRESSION, PipelineState
from foresee.training.engines.model.sklearn_regression_train_engine import (
    internal_cv_folds,
)
from foresee.training.engines.model_train_engine import ModelTrainEngine
from foresee.utils.errors import MissingFeatureGroup


class TandemRegressor(RegressorMixin, BaseEstimator):
    """
    Two-stage regression.

    Stage 1 fits an elastic net on the upstream features (mutation, copy
    number, tissue, ...). Stage 2 fits an elastic net on the downstream
    features (gene expression) against the stage-1 residual, so expression
    only explains what the upstream features could not.

    Prediction is the sum of both stages.
    """

    def __init__(self, upstream=None, l1_ratio: float = 0.5, cv: int | None = None,
                 max_iter: int = 10000):
        self.upstream = upstream
        self.l1_ratio = l1_ratio
        self.cv = cv
        self.max_iter = max_iter

    def fit(self, X, y):
        if isinstance(X, pd.DataFrame):
            self.feature_names_in_ = np.asarray(X.columns, dtype=object)

        X_ = np.asarray(X, dtype=np.float64)
        y_ = np.asarray(y, dtype=np.float64).ravel()

        upstream = np.asarray(self.upstream, dtype=bool)
        if upstream.shape != (X_.shape[1],):
            raise ValueError(
                f"upstream mask has shape {upstream.shape}, expected ({X_.shape[1]},)"
            )
        if upstream.all() or not upstream.any():
            raise MissingFeatureGroup(
                "tandem needs at least one upstream and one downstream feature"
            )

        self.upstream_mask_ = upstream
        self.n_features_in_ = X_.shape[1]
        cv = self.cv if self.cv is not None else internal_cv_folds(X_.shape[0])

        self.upstream_model_ = ElasticNetCV(
            l1_ratio=self.l1_ratio, cv=cv, max_iter=self.max_iter
        ).fit(X_[:, upstream], y_)

        residual = y_ - self.upstream_model_.predict(X_[:, upstream])

        self.downstream_model_ = ElasticNetCV(
            l1_ratio=self.l1_ratio, cv=cv, max_iter=self.max_iter
        ).fit(X_[:, ~upstream], residual)

        return self

    def predict(self, X):
        check_is_fitted(self, ["upstream_model_", "downstream_model_"])
        X_ = np.asarray(X, dtype=np.float64)
        mask = self.upstream_mask_
        return (
            self.upstream_model_.predict(X_[:, mask])
            + self.downstream_model_.predict(X_[:, ~mask])
        )


class TandemTrainEngine(ModelTrainEngine):
    """
    Upstream / downstream split comes from the FeatureTypes tag:
    GeneExpression is downstream, every other tag is upstream.
    """

    name = "tandem"
    default_params = {"l1_ratio": 0.5}

    @staticmethod
    def upstream_mask(*, X: pd.DataFrame, state: PipelineState) -> pd.Series:
        tags = state.feature_types_for(X.columns)
        mask = (tags != GENE_EXPRESSION).astype(bool)

        if mask.all() or not mask.any():
            raise MissingFeatureGroup(
                "For tandem you need at least one downstream feature "
                f"({GENE_EXPRESSION}) and one upstream feature; "
                f"got {int(mask.sum())} upstream of {len(mask)}"
            )
        return mask

    def state_updates(self, *, X: pd.DataFrame, state: PipelineState) -> Dict[str, Any]:
        return {"upstream_index": self.upstream_mask(X=X, state=state)}

    def train(self, *, X: pd.DataFrame, y: pd.Series, state: PipelineState) -> Any:
        mask = self.upstream_mask(X=X, state=state)
        model = TandemRegressor(upstream=mask.to_numpy(), **self.params)
        return model.fit(X, y)
