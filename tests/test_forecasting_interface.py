"""
Unit tests for the forecasting interface.
Tests result packaging, multi-model runs and result comparison.
"""

import unittest
import json
import pandas as pd
import numpy as np
import sys
import os

# Add src to path for imports
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

from features.feature_engineer import LoadFeatureEngineer
from model.forecasting_interface import ForecastingInterface, run_forecast
from models.data_models import ModelResult, ModelType, MODEL_FEATURES
from utils.exceptions import ForecastingError, InsufficientDataError


class TestForecastingInterface(unittest.TestCase):
    """Test cases for ForecastingInterface."""

    def setUp(self):
        """Set up test fixtures."""
        np.random.seed(42)
        hours = np.arange(720) % 24
        raw = pd.DataFrame({
            'timestamp': pd.date_range('2024-01-01', periods=720, freq='h'),
            'load': 1000 + 150 * np.sin(2 * np.pi * hours / 24) + np.random.normal(0, 15, 720),
        })
        self.data = LoadFeatureEngineer().create_features(raw)
        self.interface = ForecastingInterface()

    def test_run_model_metadata(self):
        """Test the metadata attached to a single run."""
        result = self.interface.run_model(self.data, ModelType.PROPHET, 1)

        self.assertIsInstance(result, ModelResult)
        self.assertEqual(result.metadata.type, ModelType.PROPHET)
        self.assertEqual(result.metadata.horizon, 1)
        self.assertEqual(result.metadata.data_points, 720)
        self.assertEqual(list(result.metadata.features), MODEL_FEATURES)
        self.assertGreaterEqual(result.metadata.training_duration, 0.0)
        self.assertTrue(result.metadata.trained_at.endswith('+00:00'))
        self.assertEqual(len(result.forecast), 24)

    def test_run_ids_are_unique(self):
        """Test that every run gets a fresh id."""
        first = self.interface.run_model(self.data, 'naive', 1)
        second = self.interface.run_model(self.data, 'naive', 1)

        self.assertNotEqual(first.metadata.id, second.metadata.id)

    def test_result_serialization(self):
        """Test the JSON shape of a result."""
        result = self.interface.run_model(self.data, ModelType.ARIMA, 7).to_dict()

        self.assertEqual(result['metadata']['type'], 'arima')
        self.assertIn('trainedAt', result['metadata'])
        self.assertIn('trainingDuration', result['metadata'])
        self.assertIn('dataPoints', result['metadata'])
        self.assertEqual(set(result['metrics']), {'mae', 'rmse', 'mape'})
        self.assertEqual(len(result['forecast']), 144)
        self.assertEqual(set(result['forecast'][0]),
                         {'timestamp', 'predicted_load', 'actual_load', 'lower_bound', 'upper_bound'})

        # Serializable without custom encoders
        json.dumps(result)

    def test_result_to_dataframe(self):
        """Test conversion of forecast points to a DataFrame."""
        frame = self.interface.run_model(self.data, ModelType.NAIVE, 1).to_dataframe()

        self.assertEqual(len(frame), 24)
        self.assertTrue(frame['lower_bound'].isna().all())
        self.assertTrue((frame['predicted_load'] == frame['predicted_load'].iloc[0]).all())

    def test_run_all_models(self):
        """Test that every model runs independently in declaration order."""
        results = self.interface.run_all_models(self.data, 1)

        self.assertEqual([r.metadata.type for r in results], list(ModelType))
        for result in results:
            self.assertEqual(len(result.forecast), 24)

    def test_run_all_models_insufficient_history(self):
        """Test that a too-short series fails the ARIMA-like run."""
        with self.assertRaises(InsufficientDataError):
            self.interface.run_all_models(self.data.head(100), 1)

    def test_compare_results(self):
        """Test the comparison table sorted by MAE."""
        results = self.interface.run_all_models(self.data, 1)

        comparison = self.interface.compare_results(results)

        self.assertEqual(len(comparison), 5)
        self.assertEqual(set(comparison.index), {m.value for m in ModelType})
        self.assertTrue(comparison['mae'].is_monotonic_increasing)
        self.assertTrue((comparison['steps'] == 24).all())

        empty = self.interface.compare_results([])
        self.assertTrue(empty.empty)

    def test_unknown_model_type(self):
        """Test that unknown model tags raise."""
        with self.assertRaises(ForecastingError):
            self.interface.run_model(self.data, 'transformer', 1)

    def test_run_forecast_convenience(self):
        """Test the convenience function."""
        result = run_forecast(self.data, 'lstm', 1, train_ratio=0.9)

        self.assertEqual(result.metadata.type, ModelType.LSTM)
        # 648 training points leave 72 test points
        self.assertEqual(result.forecast[0].timestamp, '2024-01-28T00:00:00')


if __name__ == '__main__':
    # Run tests
    unittest.main(verbosity=2)
