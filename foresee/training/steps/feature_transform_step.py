# foresee/training/steps/feature_transform_step.py
from __future__ import annotations

from foresee.features.feature_transform_engine import FeatureTransformEngine
from foresee.pipeline.step import PipelineStep
from foresee.training.context import TrainingContext


class FeatureTransformStep(PipelineStep):
    """
    Fits on ctx.train_state, applies to ctx.test_state.
    """

    stage = "features"

    def __init__(self, engine: FeatureTransformEngine | None = None, inst=None, **params):
        super().__init__(inst)
        self.engine = engine if engine is not None else FeatureTransformEngine()
        self.params = params

    def run(self, ctx: TrainingContext) -> TrainingContext:
        params = {**ctx.cfg.feature_params, **self.params}

        with self.timed():
            with self.inst.timer("feature_transform"):
                ctx.train_state, ctx.test_state = self.engine.transform(
                    ctx.train_state,
                    ctx.test_state,
                    ctx.cfg.feature_transform,
                    **params,
                )
        return ctx
