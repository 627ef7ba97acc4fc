# File: tests/test_logger.py
import logging
from logging.handlers import RotatingFileHandler

import pytest

from speed_scout.logger import LOGGER_NAME, init_logging, logger


@pytest.fixture(autouse=True)
def restore_logging():
    yield
    init_logging()


def test_default_logger_writes_to_stdout_only():
    assert logger.name == LOGGER_NAME
    assert not logger.propagate
    assert [type(h) for h in logger.handlers] == [logging.StreamHandler]


def test_file_handler_creates_parent_dir(tmp_path):
    log_file = tmp_path / "logs" / "run.log"
    lg = init_logging("debug", log_file, "%(levelname)s:%(message)s")
    lg.debug("batch started")
    for handler in lg.handlers:
        handler.flush()

    assert lg.level == logging.DEBUG
    assert any(isinstance(h, RotatingFileHandler) for h in lg.handlers)
    assert log_file.read_text(encoding="utf-8").strip() == "DEBUG:batch started"


def test_reconfigure_replaces_and_closes_handlers(tmp_path):
    lg = init_logging(log_file=tmp_path / "a.log")
    file_handler = next(h for h in lg.handlers if isinstance(h, RotatingFileHandler))

    lg = init_logging(level=logging.WARNING)
    assert len(lg.handlers) == 1
    assert file_handler not in lg.handlers
    assert file_handler.stream is None
    assert lg.level == logging.WARNING


def test_unknown_level_rejected():
    with pytest.raises(ValueError):
        init_logging("LOUD")
