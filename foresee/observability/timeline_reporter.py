#!filepath: foresee/observability/timeline_reporter.py
from typing import Dict

from foresee import logs


class TimelineReporter:
    """
    Run timeline report: leaf timer name -> seconds
    """

    def __init__(self, timeline: Dict[str, float], run_name: str):
        self.timeline = timeline
        self.run_name = run_name

    def print(self):
        logs.info(f"[Timeline] ===== Run timeline for {self.run_name} =====")

        total = 0.0
        for name, sec in self.timeline.items():
            logs.info(f"[Timeline] {str(name):<30} {sec:>8.3f}s")
            total += sec

        logs.info(f"[Timeline] Total{'':<27} {total:>8.3f}s")
