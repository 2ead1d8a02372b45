"""
Forecasting heuristics for the energy load forecasting pipeline.
Naive, ARIMA-like, Prophet-like, LSTM-like and hybrid point forecasters.
"""

import pandas as pd
import numpy as np
from typing import Dict, List, Any, Union
import logging

from models.data_models import ForecastPoint, ModelType
from utils.exceptions import ForecastingError
from .base_model import BaseForecaster

# Configure logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


HOURS_PER_DAY = 24


def _present(value: Any) -> bool:
    return value is not None and not pd.isna(value)


class NaiveForecaster(BaseForecaster):
    """
    Persistence forecaster: repeats the last training load.
    """

    def __init__(self, **kwargs):
        super().__init__(ModelType.NAIVE, **kwargs)

    def forecast(self, train: pd.DataFrame, test: pd.DataFrame, steps: int) -> List[ForecastPoint]:
        last_value = float(train['load'].iloc[-1])
        return [self.make_point(test.iloc[i], last_value) for i in range(steps)]


class ARIMALikeForecaster(BaseForecaster):
    """
    Autoregressive-style heuristic.

    The first step extends the last training load by the recent trend and
    pulls it toward the same hours one week earlier. Later steps smooth the
    previous prediction toward the training mean of the same position in the
    168-hour weekly cycle.
    """

    min_train_size = 168
    band = (0.95, 1.05)

    def __init__(self, trend_window: int = 24, season_length: int = 168, **kwargs):
        """
        Initialize the ARIMA-like forecaster.

        Args:
            trend_window: Number of trailing training points for the trend
            season_length: Length of the weekly cycle in points
        """
        super().__init__(ModelType.ARIMA, **kwargs)
        self.trend_window = trend_window
        self.season_length = season_length

    def forecast(self, train: pd.DataFrame, test: pd.DataFrame, steps: int) -> List[ForecastPoint]:
        loads = train['load'].to_numpy(dtype=float)
        train_size = len(loads)
        last_value = loads[-1]

        # Mean training load per position in the weekly cycle
        phase_means = pd.Series(loads).groupby(np.arange(train_size) % self.season_length).mean()

        points = []
        prediction = 0.0
        for i in range(steps):
            if i == 0:
                recent = loads[-self.trend_window:]
                trend = (recent[-1] - recent[0]) / len(recent)
                week_ago = loads[-self.season_length:-self.season_length + HOURS_PER_DAY]
                seasonal = week_ago.sum() / HOURS_PER_DAY
                prediction = last_value + trend + (seasonal - last_value) * 0.3
            else:
                previous = prediction
                seasonal = phase_means.get((train_size + i) % self.season_length, previous)
                prediction = previous * 0.7 + seasonal * 0.3

            points.append(self.make_point(test.iloc[i], prediction))

        return points


class ProphetLikeForecaster(BaseForecaster):
    """
    Additive decomposition heuristic: mean level, linear trend, hour-of-day
    seasonality and a weekend discount.
    """

    band = (0.93, 1.07)

    def __init__(self, weekend_discount: float = 0.05, **kwargs):
        super().__init__(ModelType.PROPHET, **kwargs)
        self.weekend_discount = weekend_discount

    def forecast(self, train: pd.DataFrame, test: pd.DataFrame, steps: int) -> List[ForecastPoint]:
        train_size = len(train)
        loads = train['load'].to_numpy(dtype=float)

        hourly_means = train.groupby('hour')['load'].mean() if 'hour' in train.columns else pd.Series(dtype=float)
        overall_mean = loads.mean()
        trend = (loads[-1] - loads[0]) / train_size

        points = []
        for i in range(steps):
            row = test.iloc[i]
            hour = int(row['hour']) if _present(row.get('hour')) else 0

            trend_component = trend * (train_size + i)
            seasonal_component = hourly_means.get(hour, 0.0) - overall_mean
            is_weekend = _present(row.get('is_weekend')) and bool(row['is_weekend'])
            weekend_adjustment = -overall_mean * self.weekend_discount if is_weekend else 0.0

            prediction = overall_mean + trend_component + seasonal_component + weekend_adjustment
            points.append(self.make_point(row, prediction))

        return points


class LSTMLikeForecaster(BaseForecaster):
    """
    Sequence heuristic: a linearly weighted mean over the trailing window of
    observed loads, blended with the point's lag_24 and rolling_24h features.
    """

    band = (0.92, 1.08)

    def __init__(self, sequence_length: int = 24, **kwargs):
        super().__init__(ModelType.LSTM, **kwargs)
        self.sequence_length = sequence_length

    def forecast(self, train: pd.DataFrame, test: pd.DataFrame, steps: int) -> List[ForecastPoint]:
        train_loads = train['load'].to_numpy(dtype=float)
        test_loads = test['load'].to_numpy(dtype=float)
        train_size = len(train_loads)

        points = []
        for i in range(steps):
            row = test.iloc[i]
            sequence_start = max(0, train_size - self.sequence_length + i)
            sequence = np.concatenate([train_loads[sequence_start:], test_loads[:i]])[-self.sequence_length:]

            prediction = 0.0
            if len(sequence) > 0:
                # Most recent point weighs most
                weights = np.arange(1, len(sequence) + 1) / len(sequence)
                prediction = np.sum(sequence * weights) / np.sum(weights)

                lag_24 = row.get('lag_24')
                if _present(lag_24):
                    prediction = prediction * 0.6 + lag_24 * 0.4

                rolling_24h = row.get('rolling_24h')
                if _present(rolling_24h):
                    prediction = prediction * 0.7 + rolling_24h * 0.3

            points.append(self.make_point(row, prediction))

        return points


class HybridForecaster(BaseForecaster):
    """
    Equal-weight blend of the Prophet-like and LSTM-like forecasts.
    """

    band = (0.91, 1.09)

    def __init__(self, **kwargs):
        super().__init__(ModelType.HYBRID, **kwargs)
        self.prophet = ProphetLikeForecaster(**kwargs)
        self.lstm = LSTMLikeForecaster(**kwargs)

    def forecast(self, train: pd.DataFrame, test: pd.DataFrame, steps: int) -> List[ForecastPoint]:
        prophet_points = self.prophet.forecast(train, test, steps)
        lstm_points = self.lstm.forecast(train, test, steps)

        if any(point.actual_load is None for point in prophet_points):
            raise ForecastingError("Prophet-like forecast is missing actual loads for hybrid alignment")

        points = []
        for prophet_point, lstm_point in zip(prophet_points, lstm_points):
            prediction = prophet_point.predicted_load * 0.5 + lstm_point.predicted_load * 0.5
            points.append(ForecastPoint(
                timestamp=prophet_point.timestamp,
                predicted_load=prediction,
                actual_load=prophet_point.actual_load,
                lower_bound=prediction * self.band[0],
                upper_bound=prediction * self.band[1],
            ))

        return points


# Registry of available forecasting heuristics
FORECASTING_MODELS: Dict[ModelType, Dict[str, Any]] = {
    ModelType.NAIVE: {
        'class': NaiveForecaster,
        'description': 'Repeats the last observed load',
    },
    ModelType.ARIMA: {
        'class': ARIMALikeForecaster,
        'description': 'Trend plus weekly-cycle smoothing',
    },
    ModelType.PROPHET: {
        'class': ProphetLikeForecaster,
        'description': 'Level, trend, hourly seasonality and weekend effect',
    },
    ModelType.LSTM: {
        'class': LSTMLikeForecaster,
        'description': 'Weighted trailing window blended with lag and rolling features',
    },
    ModelType.HYBRID: {
        'class': HybridForecaster,
        'description': 'Average of the Prophet-like and LSTM-like forecasts',
    },
}


# Factory function for creating forecasting models
def create_forecaster(model_type: Union[ModelType, str], **kwargs) -> BaseForecaster:
    """
    Factory function to create forecasting models.

    Args:
        model_type: ModelType member or its string tag
        **kwargs: Model-specific parameters

    Returns:
        Forecaster instance

    Raises:
        ForecastingError: If the model type is unknown
    """
    model_type = ModelType.from_value(model_type)

    if model_type not in FORECASTING_MODELS:
        raise ForecastingError(f"No forecaster registered for model type: {model_type.value}")

    return FORECASTING_MODELS[model_type]['class'](**kwargs)
