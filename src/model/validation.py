"""
Evaluation utilities for load forecasts.
Scores aligned actual/predicted sequences with MAE, RMSE and MAPE.
"""

from typing import Dict, Sequence, Callable
import numpy as np
import logging
from sklearn.metrics import mean_absolute_error, mean_squared_error, r2_score

from models.data_models import EvaluationMetrics

# Configure logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


class ModelEvaluator:
    """
    Forecast evaluation over aligned actual and predicted values.
    """

    def __init__(self):
        """Initialize the model evaluator."""
        self.metrics_registry: Dict[str, Callable[[np.ndarray, np.ndarray], float]] = {
            'mae': self._mean_absolute_error,
            'rmse': self._root_mean_squared_error,
            'mape': self._mean_absolute_percentage_error,
            'r2': self._r_squared,
        }

    def evaluate_model(self,
                       y_true: Sequence[float],
                       y_pred: Sequence[float],
                       include_r2: bool = False) -> EvaluationMetrics:
        """
        Evaluate predictions against actual values.

        Empty or mismatched sequences score all-zero metrics.

        Args:
            y_true: Actual values
            y_pred: Predicted values
            include_r2: Whether to also compute R-squared

        Returns:
            EvaluationMetrics
        """
        y_true = np.asarray(y_true, dtype=float)
        y_pred = np.asarray(y_pred, dtype=float)

        if len(y_true) != len(y_pred) or len(y_true) == 0:
            return EvaluationMetrics(mae=0.0, rmse=0.0, mape=0.0)

        metrics = ['mae', 'rmse', 'mape'] + (['r2'] if include_r2 else [])
        results = {}

        for metric in metrics:
            try:
                results[metric] = float(self.metrics_registry[metric](y_true, y_pred))
            except ValueError as e:
                logger.warning(f"Failed to compute {metric}: {e}")
                results[metric] = float('nan')

        return EvaluationMetrics(**results)

    # Metric implementations
    def _mean_absolute_error(self, y_true: np.ndarray, y_pred: np.ndarray) -> float:
        """Calculate Mean Absolute Error."""
        return mean_absolute_error(y_true, y_pred)

    def _root_mean_squared_error(self, y_true: np.ndarray, y_pred: np.ndarray) -> float:
        """Calculate Root Mean Squared Error."""
        return np.sqrt(mean_squared_error(y_true, y_pred))

    def _mean_absolute_percentage_error(self, y_true: np.ndarray, y_pred: np.ndarray) -> float:
        """Calculate Mean Absolute Percentage Error over non-zero actuals."""
        mask = y_true != 0
        if not np.any(mask):
            return 0.0

        return np.mean(np.abs((y_true[mask] - y_pred[mask]) / y_true[mask])) * 100

    def _r_squared(self, y_true: np.ndarray, y_pred: np.ndarray) -> float:
        """Calculate R-squared."""
        if len(y_true) < 2:
            return float('nan')
        return r2_score(y_true, y_pred)


def calculate_metrics(actual: Sequence[float], predicted: Sequence[float]) -> EvaluationMetrics:
    """
    Convenience function computing MAE, RMSE and MAPE.

    Args:
        actual: Actual values
        predicted: Predicted values

    Returns:
        EvaluationMetrics without R-squared
    """
    return ModelEvaluator().evaluate_model(actual, predicted)
