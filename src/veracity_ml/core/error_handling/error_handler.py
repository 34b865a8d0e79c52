import logging
from veracity_ml.core.app_logging.base_app_logger import BaseAppLogger
from .base_error_handler import BaseErrorHandler


class ErrorHandler(BaseErrorHandler):
    exit_code = 1  # Default exit code

    def __init__(self, message: str, app_logger: BaseAppLogger, log_level=logging.ERROR, **kwargs):
        super().__init__(message, app_logger, log_level, **kwargs)

    def log(self) -> None:
        """Implementation of abstract log method"""
        self.app_logger.structured_log(
            self.log_level,
            self.message,
            error_type=self.__class__.__name__,
            **self.additional_info
        )


class ConfigurationError(ErrorHandler):
    """Raised when there's an error in the configuration."""
    exit_code = 2


class DataStorageError(ErrorHandler):
    """Raised when there's an error storing or retrieving data."""
    exit_code = 3


class DataValidationError(ErrorHandler):
    """Raised when the input feature table violates its schema."""
    exit_code = 4


class InvalidFractionError(ConfigurationError):
    """Raised when a train fraction lies outside the open interval (0, 1)."""
    exit_code = 5


class InsufficientDataError(ErrorHandler):
    """Raised when there are too few records for the requested fold count."""
    exit_code = 6


class EmptyClassError(InsufficientDataError):
    """Raised when a label class has fewer than two members."""
    exit_code = 7


class DegenerateFeatureError(ErrorHandler):
    """Raised when a feature has zero variance in the data a scaler is fit on."""
    exit_code = 8


class ModelTrainingError(ErrorHandler):
    """Raised when a single model fit fails inside the fitting library."""
    exit_code = 9


class ConvergenceError(ModelTrainingError):
    """Raised when a model fit exhausts its iteration budget without converging.

    Recovered by the hyperparameter search, so it is logged as a warning.
    """
    exit_code = 10

    def __init__(self, message: str, app_logger: BaseAppLogger, log_level=logging.WARNING, **kwargs):
        super().__init__(message, app_logger, log_level, **kwargs)


class NoViableModelError(ErrorHandler):
    """Raised when every candidate of a hyperparameter grid failed."""
    exit_code = 11


class DegenerateLabelsError(ErrorHandler):
    """Raised when ROC analysis is requested for a single-class label set."""
    exit_code = 12
