# foresee/training/steps/model_evaluate_step.py
from __future__ import annotations

from foresee import logs
from foresee.pipeline.step import PipelineStep
from foresee.training.context import TrainingContext
from foresee.training.engines.evaluate_engine import predict_state, resolve_evaluator


class ModelEvaluateStep(PipelineStep):
    """
    Predicts the test state; scores it when the test state has a response.
    """

    stage = "evaluate"

    def __init__(self, evaluator="neg_rmse", inst=None):
        super().__init__(inst)
        self.name = evaluator if isinstance(evaluator, str) else getattr(
            evaluator, "__name__", type(evaluator).__name__
        )
        self.evaluator = resolve_evaluator(evaluator)

    def run(self, ctx: TrainingContext) -> TrainingContext:
        if ctx.model is None:
            raise RuntimeError("[ModelEvaluateStep] no trained model in context")

        with self.timed():
            with self.inst.timer("predict_test"):
                ctx.predictions = predict_state(ctx.model, ctx.test_state)

            if ctx.test_state.drug_response is None:
                logs.info("[ModelEvaluateStep] test state has no response, score skipped")
                return ctx

            score = float(self.evaluator(ctx.model, ctx.test_state))

        ctx.metrics[f"test_{self.name}"] = score
        self.inst.metrics.record(f"test_{self.name}", score)
        logs.info(f"[ModelEvaluateStep] test {self.name}={score:.6f}")
        return ctx
