"""
Custom exceptions for the energy load forecasting pipeline.
"""


class LoadForecastingError(Exception):
    """Base exception for the load forecasting pipeline."""
    pass


class DataValidationError(LoadForecastingError):
    """Exception raised when uploaded data fails validation."""
    pass


class NoDataAvailableError(LoadForecastingError):
    """Exception raised when a forecast is requested before any upload."""
    pass


class ForecastingError(LoadForecastingError):
    """Exception raised during forecast generation."""
    pass


class InsufficientDataError(ForecastingError):
    """Exception raised when a series is too short for a forecasting model."""
    pass
