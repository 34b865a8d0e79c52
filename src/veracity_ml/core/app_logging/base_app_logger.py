from abc import ABC, abstractmethod
from typing import Callable
import logging
import contextlib


class BaseAppLogger(ABC):
    """Logging interface shared by every pipeline component."""

    @abstractmethod
    def __init__(self, config):
        pass

    @abstractmethod
    def setup(self, log_file: str) -> logging.Logger:
        """Attach file and console handlers; calling it again replaces them."""
        pass

    @abstractmethod
    def structured_log(self, level: int, message: str, **kwargs) -> None:
        """Log message together with the active log_context fields and kwargs."""
        pass

    @abstractmethod
    def log_performance(self, func: Callable) -> Callable:
        pass

    @abstractmethod
    def log_context(self, **kwargs) -> contextlib.AbstractContextManager:
        """Add kwargs to every record logged inside the block."""
        pass
