"""
Unit tests for session-scoped storage.
Tests versioned snapshots, latest results and session isolation.
"""

import unittest
import threading
import pandas as pd
import numpy as np
import sys
import os

# Add src to path for imports
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

from data.storage import InMemoryForecastStore, DatasetSnapshot
from models.data_models import (
    EvaluationMetrics, ForecastPoint, ModelMetadata, ModelResult, ModelType
)


def make_result(model_type=ModelType.NAIVE):
    metadata = ModelMetadata(
        id='run-1',
        type=model_type,
        horizon=1,
        trained_at='2024-01-01T00:00:00+00:00',
        training_duration=1.5,
        data_points=10,
    )
    return ModelResult(
        metadata=metadata,
        metrics=EvaluationMetrics(mae=1.0, rmse=1.0, mape=1.0),
        forecast=(ForecastPoint(timestamp='2024-01-01T08:00:00', predicted_load=5.0, actual_load=6.0),),
    )


class TestInMemoryForecastStore(unittest.TestCase):
    """Test cases for InMemoryForecastStore."""

    def setUp(self):
        """Set up test fixtures."""
        self.store = InMemoryForecastStore()
        self.test_data = pd.DataFrame({
            'timestamp': pd.date_range('2024-01-01', periods=10, freq='h'),
            'load': np.arange(10, dtype=float),
        })

    def test_empty_store(self):
        """Test that reads on an empty store return None without creating sessions."""
        self.assertIsNone(self.store.get_time_series('a'))
        self.assertIsNone(self.store.get_processed_data('a'))
        self.assertIsNone(self.store.get_latest_model_result('a'))
        self.assertEqual(self.store.list_sessions(), [])

    def test_store_and_get_time_series(self):
        """Test storing and retrieving a series."""
        snapshot = self.store.store_time_series('a', self.test_data)

        self.assertIsInstance(snapshot, DatasetSnapshot)
        self.assertEqual(snapshot.version, 1)
        pd.testing.assert_frame_equal(self.store.get_time_series('a').data, self.test_data)

    def test_stored_data_is_a_copy(self):
        """Test that later changes to the caller's frame do not leak into the store."""
        self.store.store_time_series('a', self.test_data)
        self.test_data.loc[0, 'load'] = -1.0

        self.assertEqual(self.store.get_time_series('a').data['load'].iloc[0], 0.0)

    def test_versions_increase(self):
        """Test that every write to a session bumps the version."""
        first = self.store.store_time_series('a', self.test_data)
        processed = self.store.store_processed_data('a', self.test_data)
        second = self.store.store_time_series('a', self.test_data.head(5))

        self.assertLess(first.version, processed.version)
        self.assertLess(processed.version, second.version)
        self.assertEqual(len(self.store.get_time_series('a').data), 5)

        # Earlier snapshots stay intact
        self.assertEqual(len(first.data), 10)

    def test_latest_model_result(self):
        """Test that the latest result is overwritten per session."""
        self.store.store_model_result('a', make_result(ModelType.NAIVE))
        self.store.store_model_result('a', make_result(ModelType.ARIMA))

        self.assertEqual(self.store.get_latest_model_result('a').metadata.type, ModelType.ARIMA)

    def test_sessions_are_isolated(self):
        """Test that sessions do not see each other's data."""
        self.store.store_time_series('a', self.test_data)
        self.store.store_model_result('b', make_result())

        self.assertIsNone(self.store.get_time_series('b'))
        self.assertIsNone(self.store.get_latest_model_result('a'))
        self.assertEqual(self.store.list_sessions(), ['a', 'b'])

    def test_clear(self):
        """Test clearing one session and all sessions."""
        self.store.store_time_series('a', self.test_data)
        self.store.store_time_series('b', self.test_data)

        self.store.clear('a')
        self.assertIsNone(self.store.get_time_series('a'))
        self.assertIsNotNone(self.store.get_time_series('b'))

        self.store.clear()
        self.assertEqual(self.store.list_sessions(), [])

    def test_concurrent_writes(self):
        """Test that concurrent writes yield unique versions and a complete series."""
        snapshots = []

        def upload(length):
            data = self.test_data.head(length)
            snapshots.append(self.store.store_time_series('a', data))

        threads = [threading.Thread(target=upload, args=(n,)) for n in range(1, 11)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        versions = [snapshot.version for snapshot in snapshots]
        self.assertEqual(sorted(versions), list(range(1, 11)))

        latest = self.store.get_time_series('a')
        self.assertEqual(latest.version, 10)
        self.assertIn(len(latest.data), range(1, 11))


if __name__ == '__main__':
    # Run tests
    unittest.main(verbosity=2)
