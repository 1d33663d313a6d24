#!filepath: tests/observability/test_logger.py
import pytest
from loguru import logger

from foresee import logs
from foresee.config.log_config import LogConfig
from foresee.utils.logger import init_logging


@pytest.fixture
def captured():
    lines = []
    sink_id = logger.add(lambda msg: lines.append(str(msg)), level="DEBUG")
    yield lines
    logger.remove(sink_id)


def test_catch_logs_and_reraises(captured):
    @logs.catch(msg="fold failed")
    def boom():
        raise ValueError("bad fold")

    with pytest.raises(ValueError, match="bad fold"):
        boom()

    assert any("fold failed" in line for line in captured)


def test_catch_logs_time(captured):
    @logs.catch()
    def ok():
        return 3

    assert ok() == 3
    assert any("[TIME] ok" in line for line in captured)


def test_init_logging_writes_file_sink(tmp_path):
    log_dir = tmp_path / "logs"
    init_logging(LogConfig(dir=str(log_dir), level="INFO"))
    try:
        logs.info("[Test] hello file sink")
        logger.complete()
    finally:
        init_logging(LogConfig())
        logger.remove()
        logger.add(lambda msg: None)

    files = list(log_dir.glob("*.log"))
    assert files
    assert "hello file sink" in files[0].read_text(encoding="utf-8")
