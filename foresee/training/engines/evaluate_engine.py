# foresee/training/engines/evaluate_engine.py
from __future__ import annotations

from typing import Any, Callable, Dict, List

import numpy as np
import pandas as pd
from scipy.stats import pearsonr, spearmanr
from sklearn.metrics import mean_squared_error, r2_score

from foresee.pipeline.state import PipelineState
from foresee.utils.errors import DimensionMismatch, UnknownStrategy, UserInputError

Evaluator = Callable[[Any, PipelineState], float]


def predict_state(model: Any, state: PipelineState) -> pd.Series:
    """
    Predictions for every (de-duplicated) sample of state, indexed by sample id.

    Columns are aligned to the names the model was fitted on when the model
    exposes feature_names_in_.
    """
    X = state.sample_frame()

    names = getattr(model, "feature_names_in_", None)
    if names is not None:
        missing = [c for c in names if c not in X.columns]
        if missing:
            raise DimensionMismatch(
                f"[EvaluateEngine] {state.kind} state lacks {len(missing)} model features, "
                f"e.g. {missing[:3]}"
            )
        X = X.loc[:, list(names)]

    preds = np.asarray(model.predict(X), dtype=np.float64).ravel()
    return pd.Series(preds, index=X.index, name="Prediction")


class EvaluateEngine:
    """
    EvaluateEngine

    Responsibility:
    - predict a held-out state with a trained model
    - reduce (preds, y_true) to ONE score, higher is better

    Contract:
    - test state must carry drug_response
    - columns are aligned to the names the model was fitted on when the
      model exposes feature_names_in_
    """

    def __call__(self, model: Any, state: PipelineState) -> float:
        preds, y_true = self.predict(model, state)
        if len(preds) == 0:
            return float("nan")
        return float(self.score(preds, y_true))

    @staticmethod
    def predict(model: Any, state: PipelineState) -> tuple[np.ndarray, np.ndarray]:
        if state.drug_response is None:
            raise UserInputError("[EvaluateEngine] test state has no drug response")

        preds = predict_state(model, state).to_numpy()

        keep = ~state.sample_ids.duplicated(keep="first")
        y_true = state.drug_response.to_numpy(dtype=np.float64)[keep]
        return preds, y_true

    def score(self, preds: np.ndarray, y_true: np.ndarray) -> float:
        raise NotImplementedError


class NegRMSEEvaluateEngine(EvaluateEngine):
    def score(self, preds, y_true) -> float:
        return -float(np.sqrt(mean_squared_error(y_true, preds)))


class R2EvaluateEngine(EvaluateEngine):
    def score(self, preds, y_true) -> float:
        if len(preds) < 2:
            return float("nan")
        return float(r2_score(y_true, preds))


class PearsonEvaluateEngine(EvaluateEngine):
    def score(self, preds, y_true) -> float:
        if len(preds) < 2 or np.ptp(preds) == 0 or np.ptp(y_true) == 0:
            return float("nan")
        r, _ = pearsonr(preds, y_true)
        return float(r)


class SpearmanEvaluateEngine(EvaluateEngine):
    def score(self, preds, y_true) -> float:
        if len(preds) < 2 or np.ptp(preds) == 0 or np.ptp(y_true) == 0:
            return float("nan")
        rho, _ = spearmanr(preds, y_true)
        return float(rho)


_EVALUATOR_REGISTRY: Dict[str, Callable[[], EvaluateEngine]] = {
    "neg_rmse": NegRMSEEvaluateEngine,
    "r2": R2EvaluateEngine,
    "pearson": PearsonEvaluateEngine,
    "spearman": SpearmanEvaluateEngine,
}


def available_evaluators() -> List[str]:
    return list(_EVALUATOR_REGISTRY)


def resolve_evaluator(evaluation: str | Evaluator) -> Evaluator:
    if callable(evaluation):
        return evaluation

    if evaluation not in _EVALUATOR_REGISTRY:
        available = ", ".join(_EVALUATOR_REGISTRY)
        raise UnknownStrategy(
            f"Unknown evaluation {evaluation!r}. Available: {available}"
        )
    return _EVALUATOR_REGISTRY[evaluation]()
