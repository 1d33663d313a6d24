# foresee/training/steps/model_train_step.py
from __future__ import annotations

from foresee.pipeline.step import PipelineStep
from foresee.training.context import TrainingContext
from foresee.training.engines.cross_validation_engine import CrossValidationEngine


class ModelTrainStep(PipelineStep):
    """
    ModelTrainStep (FINAL)

    Contract:
    - consumes ctx.train_state
    - produces ctx.model, ctx.cv_result and the retained fold's train state
    - strategy / folds / seed come from cfg
    """

    stage = "train"

    def __init__(self, cfg, *, strategy=None, evaluator=None, inst=None):
        super().__init__(inst)
        self.strategy = strategy if strategy is not None else cfg.strategy
        self.engine = CrossValidationEngine.from_config(
            cfg, evaluator=evaluator, inst=self.inst
        )

    def run(self, ctx: TrainingContext) -> TrainingContext:
        with self.timed():
            result = self.engine.cross_validate(
                ctx.train_state, self.strategy, ctx.cfg.folds
            )

        ctx.train_state = result.state
        ctx.model = result.model
        ctx.cv_result = result

        ctx.metrics["cv_score"] = result.score
        ctx.metrics["best_fold"] = result.best_fold
        self.inst.metrics.record("cv_score", result.score)
        return ctx
