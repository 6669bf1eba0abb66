# File: tests/test_logger.py
import logging
from logging.handlers import RotatingFileHandler

import pytest

from site_diff.logger import LOGGER_NAME, init_logging


@pytest.fixture(autouse=True)
def restore_logging():
    yield
    init_logging()


def test_init_logging_replaces_handlers():
    init_logging()
    lg = init_logging(level="DEBUG")
    assert lg is logging.getLogger(LOGGER_NAME)
    assert len(lg.handlers) == 1
    assert lg.level == logging.DEBUG
    assert lg.propagate is False


def test_init_logging_writes_file(tmp_path):
    log_file = tmp_path / "logs" / "run.log"
    lg = init_logging(level="INFO", log_file=log_file, log_format="%(levelname)s %(message)s")
    assert any(isinstance(h, RotatingFileHandler) for h in lg.handlers)

    lg.info("crawl started")
    lg.debug("not written")
    for handler in lg.handlers:
        handler.flush()

    assert log_file.read_text(encoding="utf-8").splitlines() == ["INFO crawl started"]
