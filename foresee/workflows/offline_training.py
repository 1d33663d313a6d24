# foresee/workflows/offline_training.py
from __future__ import annotations

from foresee.config.app_config import AppConfig
from foresee.observability.instrumentation import Instrumentation
from foresee.training.pipeline import TrainingPipeline
from foresee.training.steps.feature_transform_step import FeatureTransformStep
from foresee.training.steps.model_evaluate_step import ModelEvaluateStep
from foresee.training.steps.model_train_step import ModelTrainStep
from foresee.training.steps.response_transform_step import ResponseTransformStep


def build_offline_training(cfg=None, evaluator=None) -> TrainingPipeline:
    """
    Offline Training Workflow (FINAL)

    response -> features -> train (optionally K-fold) -> evaluate on test
    """

    if cfg is None:
        cfg = AppConfig.load().training
    if evaluator is None:
        evaluator = cfg.evaluation

    inst = Instrumentation()

    return TrainingPipeline(
        steps=[
            ResponseTransformStep(inst=inst),
            FeatureTransformStep(inst=inst),
            ModelTrainStep(cfg, evaluator=evaluator, inst=inst),
            ModelEvaluateStep(evaluator, inst=inst),
        ],
        inst=inst,
        cfg=cfg,
    )
