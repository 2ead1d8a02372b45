"""
Base model interface for the energy load forecasting pipeline.
Provides the shared train/test harness used by every forecasting heuristic.
"""

from abc import ABC, abstractmethod
from typing import List, Optional, Tuple
import math
import logging

import numpy as np
import pandas as pd

from models.data_models import ForecastPoint, EvaluationMetrics, ModelType
from utils.exceptions import InsufficientDataError
from .validation import calculate_metrics

# Configure logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


class BaseForecaster(ABC):
    """
    Abstract base class for all forecasting heuristics.

    Subclasses implement forecast(); the harness splits the feature-engineered
    series chronologically, clamps the number of steps to the test set and
    scores the predictions.
    """

    # Minimum number of training points the heuristic needs
    min_train_size: int = 1
    # Multipliers applied to a prediction for its lower and upper bounds
    band: Optional[Tuple[float, float]] = None

    def __init__(self, model_type: ModelType, train_ratio: float = 0.8):
        """
        Initialize the base forecaster.

        Args:
            model_type: Which heuristic this forecaster implements
            train_ratio: Fraction of the series used for training
        """
        self.model_type = model_type
        self.train_ratio = train_ratio

    @abstractmethod
    def forecast(self, train: pd.DataFrame, test: pd.DataFrame, steps: int) -> List[ForecastPoint]:
        """
        Predict the first `steps` points of the test set.

        Args:
            train: Training portion of the series
            test: Test portion of the series
            steps: Number of test points to predict

        Returns:
            One ForecastPoint per step, aligned with test rows
        """
        pass

    def split(self, data: pd.DataFrame) -> Tuple[pd.DataFrame, pd.DataFrame]:
        """Split a series chronologically into train and test portions."""
        train_size = math.floor(len(data) * self.train_ratio)
        train = data.iloc[:train_size].reset_index(drop=True)
        test = data.iloc[train_size:].reset_index(drop=True)
        return train, test

    @staticmethod
    def forecast_steps(horizon: int, test: pd.DataFrame) -> int:
        """Number of hourly steps to forecast for a horizon in days."""
        return min(horizon * 24, len(test))

    def validate_input(self, data: pd.DataFrame, horizon: int) -> None:
        """
        Validate a series and horizon before forecasting.

        Raises:
            ValueError: If the horizon is not a positive integer
            InsufficientDataError: If the training portion is too short
        """
        if not isinstance(horizon, (int, np.integer)) or isinstance(horizon, bool) or horizon <= 0:
            raise ValueError(f"Horizon must be a positive number of days, got {horizon!r}")

        if 'load' not in data.columns or 'timestamp' not in data.columns:
            raise ValueError("Data must contain 'timestamp' and 'load' columns")

        train_size = math.floor(len(data) * self.train_ratio)
        if train_size < self.min_train_size:
            raise InsufficientDataError(
                f"{self.model_type.value} model needs at least {self.min_train_size} "
                f"training points, got {train_size}"
            )

    def run(self, data: pd.DataFrame, horizon: int) -> Tuple[List[ForecastPoint], EvaluationMetrics]:
        """
        Forecast the test portion of a series and score the result.

        Args:
            data: Feature-engineered series in chronological order
            horizon: Forecast horizon in days

        Returns:
            Tuple of (forecast points, evaluation metrics)
        """
        self.validate_input(data, horizon)

        train, test = self.split(data)
        steps = self.forecast_steps(horizon, test)

        points = self.forecast(train, test, steps)

        actual = [point.actual_load for point in points]
        predicted = [point.predicted_load for point in points]
        metrics = calculate_metrics(actual, predicted)

        logger.info(f"{self.model_type.value} forecast: {len(points)} steps, "
                    f"MAE={metrics.mae:.3f}, RMSE={metrics.rmse:.3f}, MAPE={metrics.mape:.2f}%")
        return points, metrics

    def make_point(self, row: pd.Series, prediction: float) -> ForecastPoint:
        """Pair a prediction with its test row's timestamp and actual load."""
        prediction = float(prediction)
        lower_bound = upper_bound = None
        if self.band is not None:
            lower_factor, upper_factor = self.band
            lower_bound = prediction * lower_factor
            upper_bound = prediction * upper_factor

        actual = row.get('load')
        return ForecastPoint(
            timestamp=pd.Timestamp(row['timestamp']).isoformat(),
            predicted_load=prediction,
            actual_load=None if actual is None or pd.isna(actual) else float(actual),
            lower_bound=lower_bound,
            upper_bound=upper_bound,
        )

    def __str__(self) -> str:
        """String representation of the model."""
        return f"{self.model_type.value.title()}Forecaster"

    def __repr__(self) -> str:
        """Detailed string representation of the model."""
        return f"{self.__class__.__name__}(type='{self.model_type.value}', train_ratio={self.train_ratio})"
