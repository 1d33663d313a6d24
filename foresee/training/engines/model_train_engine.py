from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Dict, Tuple

import numpy as np
import pandas as pd

from foresee import logs
from foresee.pipeline.state import RESPONSE_COLUMN, PipelineState
from foresee.utils.errors import UserInputError


class ModelTrainEngine(ABC):
    """
    Abstract ModelTrainEngine (FINAL)

    Contract:
    - fit_state(state) -> (state', model)
    - state' carries the TrainFrame the model was fitted on
    - the input state is never mutated
    - exceptions from the fitting library propagate unwrapped
    """

    name: str = ""
    default_params: Dict[str, Any] = {}

    def __init__(self, cfg=None, *, seed: int | None = None, **params):
        self.cfg = cfg
        # explicit seed, else the run config's
        self.seed = seed if seed is not None else getattr(cfg, "seed", None)
        merged = dict(self.default_params)
        if cfg is not None:
            merged.update(cfg.params_for(self.name))
        merged.update(params)
        self.params = merged

    def fit_state(self, state: PipelineState) -> Tuple[PipelineState, Any]:
        if state.drug_response is None:
            raise UserInputError(
                f"[{self.__class__.__name__}] state has no drug response, "
                f"run the response transform first"
            )

        frame = self.build_train_frame(state)
        X = frame.drop(columns=[RESPONSE_COLUMN])
        y = frame[RESPONSE_COLUMN]

        updates = self.state_updates(X=X, state=state)
        model = self.train(X=X, y=y, state=state)

        return state.replace(train_frame=frame, **updates), model

    @abstractmethod
    def train(
        self,
        *,
        X: pd.DataFrame,
        y: pd.Series,
        state: PipelineState,
    ) -> Any:
        """
        Returns fitted model
        """
        raise NotImplementedError

    def state_updates(self, *, X: pd.DataFrame, state: PipelineState) -> Dict[str, Any]:
        """
        Extra state fields to set alongside train_frame. Runs before train().
        """
        return {}

    # ------------------------------------------------------------------
    # TrainFrame
    # ------------------------------------------------------------------
    @staticmethod
    def build_train_frame(state: PipelineState) -> pd.DataFrame:
        """
        samples x features + DrugResponse

        Duplicated feature ids (columns) and sample ids (rows) keep the
        first occurrence.
        """
        X = state.features.T.astype(np.float64)
        X.columns = X.columns.astype(str)
        X = X.loc[:, ~X.columns.duplicated(keep="first")]

        if RESPONSE_COLUMN in X.columns:
            logs.warning(
                f"[TrainFrame] feature named {RESPONSE_COLUMN!r} dropped, name is reserved"
            )
            X = X.drop(columns=[RESPONSE_COLUMN])

        frame = X.copy()
        frame[RESPONSE_COLUMN] = state.drug_response.to_numpy(dtype=np.float64)
        frame = frame.loc[~frame.index.duplicated(keep="first")]
        return frame
