"""
Feature engineering module for energy load forecasting.
Derives calendar, cyclical, lag and rolling-average features from a load series.
"""

import pandas as pd
import numpy as np
from typing import Dict, List, Optional, Any
import logging
from abc import ABC, abstractmethod
import holidays

from models.data_models import (
    CALENDAR_COLUMNS, CYCLICAL_COLUMNS, LAG_COLUMNS, ROLLING_COLUMNS
)

# Configure logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


class FeatureEngineer(ABC):
    """Abstract base class for feature engineering."""

    @abstractmethod
    def create_features(self, data: pd.DataFrame) -> pd.DataFrame:
        """Create features from a standardized series."""
        pass


class LoadFeatureEngineer(FeatureEngineer):
    """
    Feature engineer for hourly energy load series.
    Every feature at a position is computed from that point and earlier
    points only.
    """

    def __init__(self,
                 lag_periods: Optional[List[int]] = None,
                 rolling_windows: Optional[Dict[str, int]] = None,
                 holiday_country: Optional[str] = None):
        """
        Initialize the load feature engineer.

        Args:
            lag_periods: Positions to look back for lag features
            rolling_windows: Rolling feature names mapped to window lengths
            holiday_country: Country code for holiday flags (disabled if None)
        """
        self.lag_periods = lag_periods or [1, 24, 168]
        self.rolling_windows = rolling_windows or {
            'rolling_3h': 3,
            'rolling_24h': 24,
            'rolling_168h': 168,
        }
        self.holiday_country = holiday_country

    def create_features(self, data: pd.DataFrame) -> pd.DataFrame:
        """
        Create features for a gap-filled series in chronological order.

        Args:
            data: Series with 'timestamp' and 'load' columns

        Returns:
            New DataFrame with the original columns plus engineered features,
            one row per input row in the same order
        """
        features_df = data.copy().reset_index(drop=True)
        if features_df.empty:
            logger.warning("Empty data provided for feature engineering")
            return features_df

        features_df['timestamp'] = pd.to_datetime(features_df['timestamp'])

        features_df = self._create_calendar_features(features_df)
        features_df = self._create_cyclical_features(features_df)
        features_df = self._create_lag_features(features_df)
        features_df = self._create_rolling_features(features_df)

        if self.holiday_country:
            features_df = self._create_holiday_features(features_df)

        logger.info(f"Created {len(features_df.columns) - len(data.columns)} new features "
                    f"for {len(features_df)} points")
        return features_df

    def _create_calendar_features(self, data: pd.DataFrame) -> pd.DataFrame:
        """Create calendar features (day_of_week 0=Sunday, month 0-11)."""
        features_df = data.copy()
        timestamps = features_df['timestamp']

        features_df['hour'] = timestamps.dt.hour
        features_df['day_of_week'] = (timestamps.dt.dayofweek + 1) % 7
        features_df['month'] = timestamps.dt.month - 1
        features_df['is_weekend'] = features_df['day_of_week'].isin([0, 6])

        return features_df

    def _create_cyclical_features(self, data: pd.DataFrame) -> pd.DataFrame:
        """Encode hour, weekday and month on the unit circle."""
        features_df = data.copy()

        hour_radians = 2 * np.pi * features_df['hour'] / 24
        day_radians = 2 * np.pi * features_df['day_of_week'] / 7
        month_radians = 2 * np.pi * features_df['month'] / 12

        features_df['hour_sin'] = np.sin(hour_radians)
        features_df['hour_cos'] = np.cos(hour_radians)
        features_df['day_sin'] = np.sin(day_radians)
        features_df['day_cos'] = np.cos(day_radians)
        features_df['month_sin'] = np.sin(month_radians)
        features_df['month_cos'] = np.cos(month_radians)

        return features_df

    def _create_lag_features(self, data: pd.DataFrame) -> pd.DataFrame:
        """Create load lags; NaN until enough history exists."""
        features_df = data.copy()

        for lag in self.lag_periods:
            features_df[f'lag_{lag}'] = features_df['load'].shift(lag)

        return features_df

    def _create_rolling_features(self, data: pd.DataFrame) -> pd.DataFrame:
        """Create trailing load means; NaN until the window is full."""
        features_df = data.copy()

        for name, window in self.rolling_windows.items():
            features_df[name] = features_df['load'].rolling(window=window).mean()

        return features_df

    def _create_holiday_features(self, data: pd.DataFrame) -> pd.DataFrame:
        """Flag points falling on a public holiday."""
        features_df = data.copy()

        try:
            calendar = holidays.country_holidays(self.holiday_country)
        except NotImplementedError:
            logger.warning(f"Unknown holiday country: {self.holiday_country}")
            return features_df

        features_df['is_holiday'] = features_df['timestamp'].dt.date.map(lambda day: day in calendar)
        return features_df

    def get_feature_summary(self, data: pd.DataFrame) -> Dict[str, Any]:
        """
        Count how many rows carry each engineered feature.

        Args:
            data: DataFrame returned by create_features

        Returns:
            Dictionary with per-group feature availability
        """
        groups = {
            'calendar': CALENDAR_COLUMNS,
            'cyclical': CYCLICAL_COLUMNS,
            'lag': LAG_COLUMNS,
            'rolling': ROLLING_COLUMNS,
        }

        summary = {
            'total_rows': len(data),
            'feature_groups': {},
            'available_rows': {}
        }

        for group, columns in groups.items():
            present = [col for col in columns if col in data.columns]
            summary['feature_groups'][group] = present
            for col in present:
                summary['available_rows'][col] = int(data[col].notna().sum())

        return summary
