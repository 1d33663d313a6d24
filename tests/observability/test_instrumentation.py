#!filepath: tests/observability/test_instrumentation.py
import threading
import time

from loguru import logger

from foresee.observability.instrumentation import Instrumentation, NoOpInstrumentation


def test_instrumentation_timer():
    inst = Instrumentation(enabled=True)

    with inst.timer("fold_0"):
        time.sleep(0.01)

    assert "fold_0" in inst.timeline
    assert inst.timeline["fold_0"] > 0


def test_parent_scope_not_recorded():
    inst = Instrumentation(enabled=True)

    with inst.timer("ModelTrainStep", record=False):
        with inst.timer("fold_0"):
            pass

    assert list(inst.timeline) == ["fold_0"]


def test_timers_from_worker_threads():
    inst = Instrumentation(enabled=True)

    def work(i):
        with inst.timer(f"fold_{i}"):
            time.sleep(0.001)

    threads = [threading.Thread(target=work, args=(i,)) for i in range(4)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert sorted(inst.timeline) == ["fold_0", "fold_1", "fold_2", "fold_3"]


def test_instrumentation_metrics():
    inst = Instrumentation(enabled=True)
    inst.metrics.record("cv_score", -0.25)

    assert inst.metrics.metrics["cv_score"] == -0.25


def test_noop_instrumentation():
    inst = NoOpInstrumentation()

    with inst.timer("anything"):
        pass
    inst.metrics.record("x", 1)

    assert inst.timeline == {}
    assert inst.metrics.metrics == {}


def test_generate_timeline_report():
    inst = Instrumentation(enabled=True)

    with inst.timer("feature_transform"):
        time.sleep(0.005)

    captured = []
    sink_id = logger.add(lambda msg: captured.append(str(msg)))
    inst.generate_timeline_report("run-42")
    logger.remove(sink_id)

    output = "\n".join(captured)
    assert "feature_transform" in output
    assert "run-42" in output
    assert "Run timeline" in output
