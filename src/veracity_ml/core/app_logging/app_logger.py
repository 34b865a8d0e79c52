import logging
import time
import functools
import contextlib
from pathlib import Path
from typing import Any, Dict, Callable
from contextvars import ContextVar

from .base_app_logger import BaseAppLogger

# Fields merged into every structured record logged inside log_context()
_log_context: ContextVar[Dict[str, Any]] = ContextVar('veracity_log_context', default={})

LOGGER_NAME = 'veracity_ml'
FILE_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
CONSOLE_FORMAT = '%(levelname)s: %(message)s'


class AppLogger(BaseAppLogger):
    """Writes 'message | Context: {...}' records to a run log file and the console."""

    def __init__(self, config):
        self.config = config
        self.logger = None

    def setup(self, log_file: str) -> logging.Logger:
        logger = logging.getLogger(LOGGER_NAME)
        app_logging = getattr(self.config, 'app_logging', None)
        logger.setLevel(str(getattr(app_logging, 'log_level', 'INFO')).upper())

        # a second setup() replaces the handlers of the first
        for handler in list(logger.handlers):
            logger.removeHandler(handler)
            handler.close()

        Path(log_file).parent.mkdir(parents=True, exist_ok=True)
        for handler, fmt in ((logging.FileHandler(log_file), FILE_FORMAT),
                             (logging.StreamHandler(), CONSOLE_FORMAT)):
            handler.setFormatter(logging.Formatter(fmt))
            logger.addHandler(handler)

        self.logger = logger
        return logger

    def structured_log(self, level: int, message: str, **kwargs) -> None:
        if self.logger is None:
            raise RuntimeError("Logger not initialized. Call setup() first.")
        fields = {**_log_context.get(), **kwargs}
        self.logger.log(level, f"{message} | Context: {fields}")

    def log_performance(self, func: Callable) -> Callable:
        """Log the duration and outcome of every call to func."""
        @functools.wraps(func)
        def wrapper(*args, **kwargs):
            started = time.perf_counter()
            try:
                result = func(*args, **kwargs)
            except Exception as e:
                self.structured_log(logging.ERROR, f"Function {func.__name__} failed",
                                    duration_seconds=time.perf_counter() - started,
                                    status="error",
                                    error_type=type(e).__name__,
                                    error_message=str(e))
                raise
            self.structured_log(logging.INFO, f"Function {func.__name__} completed",
                                duration_seconds=time.perf_counter() - started,
                                status="success")
            return result
        return wrapper

    @contextlib.contextmanager
    def log_context(self, **kwargs):
        token = _log_context.set({**_log_context.get(), **kwargs})
        try:
            yield
        finally:
            _log_context.reset(token)
