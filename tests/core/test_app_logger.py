import logging
from types import SimpleNamespace

import pytest

from veracity_ml.core.app_logging.app_logger import AppLogger


@pytest.fixture
def logger(tmp_path):
    app_logger = AppLogger(SimpleNamespace(app_logging=SimpleNamespace(log_level='DEBUG')))
    app_logger.setup(str(tmp_path / 'logs' / 'run.log'))
    yield app_logger
    for handler in list(app_logger.logger.handlers):
        app_logger.logger.removeHandler(handler)
        handler.close()


def read_log(tmp_path):
    return (tmp_path / 'logs' / 'run.log').read_text()


def test_structured_messages_carry_context(logger, tmp_path):
    with logger.log_context(model_name='regularized_linear'):
        logger.structured_log(logging.INFO, "Search started", n_candidates=4)
    logger.structured_log(logging.INFO, "Outside context")

    lines = read_log(tmp_path).splitlines()
    assert "Search started | Context: {'model_name': 'regularized_linear', 'n_candidates': 4}" in lines[0]
    assert "Outside context | Context: {}" in lines[1]


def test_log_performance_reports_status(logger, tmp_path):
    @logger.log_performance
    def failing_step():
        raise KeyError('missing')

    with pytest.raises(KeyError):
        failing_step()

    content = read_log(tmp_path)
    assert "Function failing_step failed" in content
    assert "'error_type': 'KeyError'" in content


def test_repeated_setup_does_not_stack_handlers(logger, tmp_path):
    logger.setup(str(tmp_path / 'logs' / 'run.log'))
    assert len(logger.logger.handlers) == 2


def test_logging_before_setup():
    with pytest.raises(RuntimeError):
        AppLogger(SimpleNamespace()).structured_log(logging.INFO, "too early")
