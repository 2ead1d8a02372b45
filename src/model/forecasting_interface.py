"""
Unified forecasting interface for the energy load forecasting pipeline.
Runs forecasting heuristics and packages their output as ModelResult snapshots.
"""

import time
import uuid
import logging
from datetime import datetime, timezone
from typing import List, Optional, Union

import pandas as pd

from models.data_models import ModelMetadata, ModelResult, ModelType, MODEL_FEATURES
from .forecaster import create_forecaster

# Configure logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


class ForecastingInterface:
    """
    Runs forecasting heuristics over a feature-engineered series.
    Every run is independent and yields a new immutable ModelResult.
    """

    def __init__(self, train_ratio: float = 0.8, features: Optional[List[str]] = None):
        """
        Initialize forecasting interface.

        Args:
            train_ratio: Fraction of the series used for training
            features: Feature names reported in result metadata
        """
        self.train_ratio = train_ratio
        self.features = tuple(features or MODEL_FEATURES)

    def run_model(self,
                  data: pd.DataFrame,
                  model_type: Union[ModelType, str],
                  horizon: int) -> ModelResult:
        """
        Run one forecasting heuristic and package the result.

        Args:
            data: Feature-engineered series
            model_type: Heuristic to run
            horizon: Forecast horizon in days

        Returns:
            ModelResult with metadata, metrics and forecast points
        """
        model_type = ModelType.from_value(model_type)
        forecaster = create_forecaster(model_type, train_ratio=self.train_ratio)

        start_time = time.perf_counter()
        points, metrics = forecaster.run(data, horizon)
        duration_ms = (time.perf_counter() - start_time) * 1000

        metadata = ModelMetadata(
            id=str(uuid.uuid4()),
            type=model_type,
            horizon=horizon,
            trained_at=datetime.now(timezone.utc).isoformat(),
            training_duration=duration_ms,
            data_points=len(data),
            features=self.features,
        )

        logger.info(f"Ran {model_type.value} model on {len(data)} points in {duration_ms:.1f} ms")
        return ModelResult(metadata=metadata, metrics=metrics, forecast=tuple(points))

    def run_all_models(self, data: pd.DataFrame, horizon: int) -> List[ModelResult]:
        """
        Run every forecasting heuristic independently.

        Args:
            data: Feature-engineered series
            horizon: Forecast horizon in days

        Returns:
            One ModelResult per ModelType, in declaration order
        """
        return [self.run_model(data, model_type, horizon) for model_type in ModelType]

    def compare_results(self, results: List[ModelResult]) -> pd.DataFrame:
        """
        Tabulate metrics of several results for side-by-side comparison.

        Args:
            results: Results to compare

        Returns:
            DataFrame indexed by model type, sorted by MAE
        """
        rows = []
        for result in results:
            rows.append({
                'model': result.metadata.type.value,
                'horizon': result.metadata.horizon,
                'steps': len(result.forecast),
                'mae': result.metrics.mae,
                'rmse': result.metrics.rmse,
                'mape': result.metrics.mape,
            })

        if not rows:
            return pd.DataFrame(columns=['horizon', 'steps', 'mae', 'rmse', 'mape'])

        return pd.DataFrame(rows).set_index('model').sort_values('mae')


# Convenience functions for easy forecasting
def run_forecast(data: pd.DataFrame,
                 model_type: Union[ModelType, str],
                 horizon: int,
                 train_ratio: float = 0.8) -> ModelResult:
    """
    Convenience function to run a single heuristic.

    Args:
        data: Feature-engineered series
        model_type: Heuristic to run
        horizon: Forecast horizon in days
        train_ratio: Fraction of the series used for training

    Returns:
        ModelResult
    """
    return ForecastingInterface(train_ratio=train_ratio).run_model(data, model_type, horizon)
