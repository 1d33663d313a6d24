# foresee/training/context.py
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Optional

import pandas as pd

from foresee.pipeline.state import PipelineState
from foresee.training.engines.train_result import CrossValidationResult


@dataclass
class TrainingContext:
    """
    TrainingContext (FINAL)

    Semantics:
    - One context == one train / test run for one drug
    - run_id is mandatory and never reassigned
    - states are frozen; steps swap in new ones
    """

    # -------------------------
    # Identity
    # -------------------------
    run_id: str

    # -------------------------
    # Static bindings
    # -------------------------
    cfg: Any
    inst: Any

    # -------------------------
    # Evolving state
    # -------------------------
    train_state: PipelineState
    test_state: PipelineState

    model: Any = None
    response_transform: Any = None
    cv_result: Optional[CrossValidationResult] = None
    predictions: Optional[pd.Series] = None
    metrics: Dict[str, Any] = field(default_factory=dict)
