# foresee/training/pipeline.py
from __future__ import annotations

from typing import List

from foresee import logs
from foresee.config.training_config import TrainingConfig
from foresee.observability.instrumentation import Instrumentation
from foresee.pipeline.state import PipelineState
from foresee.pipeline.step import PipelineStep
from foresee.training.context import TrainingContext


class TrainingPipeline:
    """
    TrainingPipeline (FINAL)

    Semantics:
    - one run == one drug, one train state, one test state
    - steps execute in order over a single context
    - the caller's states are never mutated
    """

    def __init__(
            self,
            *,
            steps: List[PipelineStep],
            inst: Instrumentation,
            cfg: TrainingConfig,
    ):
        self.steps = steps
        self.inst = inst
        self.cfg = cfg

    @logs.catch(msg="training run failed")
    def run(
            self,
            run_id: str,
            train_state: PipelineState,
            test_state: PipelineState,
    ) -> TrainingContext:
        logs.info(
            f"[TrainingPipeline] START run_id={run_id} drug={self.cfg.drug_name} "
            f"strategy={self.cfg.strategy} folds={self.cfg.folds}"
        )

        ctx = TrainingContext(
            run_id=run_id,
            cfg=self.cfg,
            inst=self.inst,
            train_state=train_state.replace(kind="train"),
            test_state=test_state.replace(kind="test"),
        )

        for step in self.steps:
            logs.debug(f"[TrainingPipeline] step={step.step_name}")
            ctx = step.run(ctx)

        self.inst.generate_timeline_report(run_id)
        logs.info(f"[TrainingPipeline] DONE run_id={run_id} metrics={ctx.metrics}")
        return ctx
