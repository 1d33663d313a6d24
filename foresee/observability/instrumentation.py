#!filepath: foresee/observability/instrumentation.py
from __future__ import annotations

import threading
from collections import OrderedDict
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Dict

from foresee.observability.metrics import MetricRecorder
from foresee.observability.timeline_reporter import TimelineReporter
from foresee.observability.timer import Timer


@dataclass
class Instrumentation:
    """
    Instrumentation (leaf-only accounting + parent scope)

    Rules:
    1. timeline only holds leaf timers (record=True)
    2. record=False timers are wall-time boundaries with no side effects
    3. no logging on the hot path
    """

    enabled: bool = True

    def __post_init__(self):
        self._timer = Timer(enabled=self.enabled)
        self.metrics = MetricRecorder(enabled=self.enabled)
        self.timeline: Dict[str, float] = OrderedDict()
        # folds may be timed from worker threads
        self._lock = threading.Lock()

    def timer(self, name: str, *, record: bool = True):
        """
        Context-manager timer.

        Parameters
        ----------
        name : str
            timer name, must be unique among concurrently running timers
        record : bool
            True  : leaf, written to timeline
            False : parent scope only
        """
        inst = self

        @contextmanager
        def _ctx():
            if not inst.enabled:
                yield
                return

            with inst._lock:
                inst._timer.start(name)
            try:
                yield
            finally:
                with inst._lock:
                    elapsed = inst._timer.end(name)
                    if record:
                        inst.timeline[name] = elapsed

        return _ctx()

    def generate_timeline_report(self, run_name: str):
        TimelineReporter(self.timeline, run_name).print()


class NoOpInstrumentation:
    """Used when observability is disabled."""

    def __init__(self):
        self.metrics = MetricRecorder(enabled=False)
        self.timeline: Dict[str, float] = {}

    def timer(self, name: str, *, record: bool = True):
        return _NoOpTimer()

    def generate_timeline_report(self, run_name: str):
        pass


class _NoOpTimer:
    def __enter__(self):
        pass

    def __exit__(self, exc_type, exc, tb):
        pass
