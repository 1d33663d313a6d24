from __future__ import annotations

from foresee.observability.instrumentation import (
    Instrumentation,
    NoOpInstrumentation,
)


class PipelineStep:
    """
    Pipeline Step base

    Responsibility:
      1. orchestration only (which engine, which ctx fields)
      2. Step-level wall-time boundary (parent scope)

    Rules:
      - Step itself is not written to the timeline
      - engines do the work, steps read/write ctx
      - behaviour never depends on inst being present
    """

    stage: str = ""

    def __init__(self, inst: Instrumentation | None = None):
        self.inst: Instrumentation | NoOpInstrumentation = (
            inst if inst is not None else NoOpInstrumentation()
        )

    @property
    def step_name(self) -> str:
        return self.__class__.__name__

    def timed(self):
        """
        Step-level scope, record=False.
        """
        return self.inst.timer(self.step_name, record=False)

    def run(self, ctx):
        raise NotImplementedError
