import logging

from src.logging_config import LOGGER_NAME, resolve_level, setup_logging


def test_setup_is_idempotent():
    logger = setup_logging("DEBUG")
    setup_logging("DEBUG")
    assert logger.name == LOGGER_NAME
    assert logger.level == logging.DEBUG
    assert len(logger.handlers) == 1


def test_file_handler(tmp_path):
    log_file = tmp_path / "glide.log"
    logger = setup_logging(logging.INFO, str(log_file))
    logging.getLogger("src.keyboard").info("hello file")
    for handler in logger.handlers:
        handler.flush()
    assert "hello file" in log_file.read_text()
    for handler in list(logger.handlers):
        handler.close()
        logger.removeHandler(handler)


def test_unknown_level_falls_back():
    assert setup_logging("CHATTY").level == logging.INFO


def test_resolve_level():
    assert resolve_level("debug") == logging.DEBUG
    assert resolve_level(" Warning ") == logging.WARNING
    assert resolve_level(logging.ERROR) == logging.ERROR
    assert resolve_level("CHATTY") == logging.INFO


def test_setup_logs_configured_level(tmp_path):
    log_file = tmp_path / "glide.log"
    logger = setup_logging("DEBUG", str(log_file))
    for handler in logger.handlers:
        handler.flush()
    assert "Logging at DEBUG" in log_file.read_text()
    for handler in list(logger.handlers):
        handler.close()
        logger.removeHandler(handler)
