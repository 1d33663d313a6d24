# foresee/training/steps/response_transform_step.py
from __future__ import annotations

from foresee import logs
from foresee.pipeline.step import PipelineStep
from foresee.response.response_transform_engine import (
    DRUG_COLUMN,
    ResponseTransformEngine,
)
from foresee.training.context import TrainingContext


class ResponseTransformStep(PipelineStep):
    """
    Contract:
    - train_state : drug response extracted, transform fitted + applied
    - test_state  : same train-fitted transform applied, only when its
                    response_data lists the drug
    - produces ctx.response_transform (the fitted transform)
    """

    stage = "response"

    def __init__(self, engine: ResponseTransformEngine | None = None, inst=None):
        super().__init__(inst)
        self.engine = engine if engine is not None else ResponseTransformEngine()

    def run(self, ctx: TrainingContext) -> TrainingContext:
        cfg = ctx.cfg

        with self.timed():
            with self.inst.timer("response_transform_train"):
                ctx.train_state, ctx.response_transform = self.engine.fit_transform(
                    ctx.train_state,
                    cfg.drug_name,
                    cfg.response_type,
                    cfg.response_transform,
                )

            if self._test_has_drug(ctx, cfg.drug_name):
                with self.inst.timer("response_transform_test"):
                    ctx.test_state = self.engine.apply(
                        ctx.test_state,
                        cfg.drug_name,
                        cfg.response_type,
                        ctx.response_transform,
                    )
            else:
                logs.info(f"[ResponseTransformStep] test state has no response for {cfg.drug_name}")

        return ctx

    @staticmethod
    def _test_has_drug(ctx: TrainingContext, drug_name: str) -> bool:
        table = ctx.test_state.response_data
        if table is None or DRUG_COLUMN not in table.columns:
            return False
        return bool((table[DRUG_COLUMN] == drug_name).any())
