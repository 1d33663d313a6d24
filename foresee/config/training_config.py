# foresee/config/training_config.py
from __future__ import annotations

from typing import Any, Dict

from pydantic import BaseModel, Field


class TrainingConfig(BaseModel):
    """
    TrainingConfig (FINAL)

    One config == one train / test run for one drug.
    """

    # experiment
    name: str = "foresee"

    # response
    drug_name: str
    response_type: str = "LN_IC50"
    response_transform: str = "none"

    # features
    feature_transform: str = "none"
    feature_params: Dict[str, Any] = Field(default_factory=dict)

    # model
    strategy: str = "ridge"
    model_params: Dict[str, Dict[str, Any]] = Field(default_factory=dict)

    # cross-validation
    folds: int = Field(default=1, ge=1)
    seed: int = 0
    evaluation: str = "neg_rmse"
    n_jobs: int = Field(default=1, ge=1)

    def params_for(self, strategy: str) -> Dict[str, Any]:
        return dict(self.model_params.get(strategy, {}))
