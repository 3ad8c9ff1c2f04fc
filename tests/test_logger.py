# File: tests/test_logger.py
import logging

from mirrorget.logger import LOGGER_NAME, init_logging


def test_init_logging_writes_to_file(tmp_path):
    log_file = tmp_path / "run.log"
    lg = init_logging("DEBUG", log_file=log_file, log_format="%(levelname)s %(message)s")
    lg.debug("mirroring %s", "example.com")
    for handler in lg.handlers:
        handler.flush()

    assert "DEBUG mirroring example.com" in log_file.read_text(encoding="utf-8")
    assert lg.propagate is False
    init_logging()


def test_init_logging_replaces_handlers():
    init_logging("DEBUG")
    lg = init_logging("WARNING")

    assert lg is logging.getLogger(LOGGER_NAME)
    assert len(lg.handlers) == 1
    assert lg.level == logging.WARNING
    init_logging()
