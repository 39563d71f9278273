"""Tests for structured logging setup."""

import logging

from curvefit_pkg.logging_config import StructuredFormatter, get_logger, setup_logging


def test_get_logger_namespaced():
    assert get_logger("solver").name == "curvefit.solver"


def test_setup_logging_replaces_handlers(tmp_path):
    log_file = tmp_path / "fit.log"
    logger = setup_logging("DEBUG", str(log_file))
    try:
        assert logger.level == logging.DEBUG
        assert len(logger.handlers) == 2
        get_logger("exact").debug("written to file")
        for handler in logger.handlers:
            handler.flush()
        assert "written to file" in log_file.read_text()
    finally:
        for handler in list(logger.handlers):
            handler.close()
        setup_logging("WARNING")
    assert len(logger.handlers) == 1


def test_structured_format():
    record = logging.LogRecord(
        "curvefit.exact", logging.WARNING, __file__, 1, "hello %s", ("x",), None
    )
    line = StructuredFormatter().format(record)
    assert "[WARNING] curvefit.exact: hello x" in line
