"""
Data models for the energy load forecasting pipeline.
"""

from dataclasses import dataclass, field, asdict
from enum import Enum
from typing import Dict, List, Tuple, Optional, Any

import pandas as pd

from utils.exceptions import DataValidationError, ForecastingError


class ModelType(Enum):
    """Closed set of forecasting heuristics."""
    NAIVE = "naive"
    ARIMA = "arima"
    PROPHET = "prophet"
    LSTM = "lstm"
    HYBRID = "hybrid"

    @classmethod
    def from_value(cls, value: Any) -> 'ModelType':
        """Resolve a request tag (or an existing member) to a ModelType."""
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).lower())
        except ValueError:
            available = ', '.join(m.value for m in cls)
            raise ForecastingError(f"Unknown model type: {value}. Available: {available}")


# Forecast horizons in days
VALID_HORIZONS = (1, 7)

# Columns of a standardized series
BASE_COLUMNS = ['timestamp', 'load']
OPTIONAL_COLUMNS = ['temperature', 'humidity', 'solar_power', 'wind_power', 'is_holiday']

# Columns derived by feature engineering
CALENDAR_COLUMNS = ['hour', 'day_of_week', 'month', 'is_weekend']
CYCLICAL_COLUMNS = ['hour_sin', 'hour_cos', 'day_sin', 'day_cos', 'month_sin', 'month_cos']
LAG_COLUMNS = ['lag_1', 'lag_24', 'lag_168']
ROLLING_COLUMNS = ['rolling_3h', 'rolling_24h', 'rolling_168h']
FEATURE_COLUMNS = CALENDAR_COLUMNS + CYCLICAL_COLUMNS + LAG_COLUMNS + ROLLING_COLUMNS

# Features reported in model metadata
MODEL_FEATURES = ['hour', 'day_of_week', 'month', 'lag_1', 'lag_24', 'lag_168', 'rolling_24h']


def _drop_none(values: Dict[str, Any]) -> Dict[str, Any]:
    return {key: value for key, value in values.items() if value is not None}


@dataclass(frozen=True)
class DetectedColumns:
    """Mapping of CSV headers to semantic roles."""
    timestamp_col: Optional[str] = None
    load_col: Optional[str] = None
    temperature_col: Optional[str] = None
    humidity_col: Optional[str] = None
    solar_col: Optional[str] = None
    wind_col: Optional[str] = None

    @property
    def is_complete(self) -> bool:
        return self.timestamp_col is not None and self.load_col is not None

    def validate(self) -> None:
        if not self.is_complete:
            raise DataValidationError("Could not detect required timestamp and load columns")

    def optional_columns(self) -> Dict[str, str]:
        """Detected optional CSV headers keyed by their standardized column name."""
        mapping = {
            'temperature': self.temperature_col,
            'humidity': self.humidity_col,
            'solar_power': self.solar_col,
            'wind_power': self.wind_col,
        }
        return {name: col for name, col in mapping.items() if col is not None}


@dataclass(frozen=True)
class TimeSeriesPoint:
    """Model for a single standardized load observation."""
    timestamp: str  # ISO-8601
    load: Optional[float]
    temperature: Optional[float] = None
    humidity: Optional[float] = None
    solar_power: Optional[float] = None
    wind_power: Optional[float] = None
    is_holiday: Optional[bool] = None

    @classmethod
    def from_row(cls, row: pd.Series) -> 'TimeSeriesPoint':
        """Build a point from a row of a standardized series frame."""
        values = {}
        for name in BASE_COLUMNS + OPTIONAL_COLUMNS:
            value = row.get(name)
            if value is None or (not isinstance(value, str) and pd.isna(value)):
                values[name] = None
            elif name == 'timestamp':
                values[name] = pd.Timestamp(value).isoformat()
            elif name == 'is_holiday':
                values[name] = bool(value)
            else:
                values[name] = float(value)
        return cls(**values)

    def to_dict(self) -> Dict[str, Any]:
        values = asdict(self)
        timestamp = values.pop('timestamp')
        load = values.pop('load')
        return {'timestamp': timestamp, 'load': load, **_drop_none(values)}


@dataclass(frozen=True)
class ForecastPoint:
    """Model for one predicted step."""
    timestamp: str
    predicted_load: float
    actual_load: Optional[float] = None
    lower_bound: Optional[float] = None
    upper_bound: Optional[float] = None

    def to_dict(self) -> Dict[str, Any]:
        return _drop_none(asdict(self))


@dataclass(frozen=True)
class EvaluationMetrics:
    """Model for forecast error metrics."""
    mae: float
    rmse: float
    mape: float  # percentage
    r2: Optional[float] = None

    def to_dict(self) -> Dict[str, Any]:
        return _drop_none(asdict(self))


@dataclass(frozen=True)
class ModelMetadata:
    """Model for metadata of a single forecasting run."""
    id: str
    type: ModelType
    horizon: int  # days
    trained_at: str  # ISO-8601
    training_duration: float  # milliseconds
    data_points: int
    features: Tuple[str, ...] = field(default_factory=lambda: tuple(MODEL_FEATURES))

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'type': self.type.value,
            'horizon': self.horizon,
            'trainedAt': self.trained_at,
            'trainingDuration': self.training_duration,
            'dataPoints': self.data_points,
            'features': list(self.features),
        }


@dataclass(frozen=True)
class ModelResult:
    """Immutable snapshot of a forecasting run."""
    metadata: ModelMetadata
    metrics: EvaluationMetrics
    forecast: Tuple[ForecastPoint, ...]

    def to_dict(self) -> Dict[str, Any]:
        return {
            'metadata': self.metadata.to_dict(),
            'metrics': self.metrics.to_dict(),
            'forecast': [point.to_dict() for point in self.forecast],
        }

    def to_dataframe(self) -> pd.DataFrame:
        """Convert forecast points to a DataFrame."""
        columns = ['timestamp', 'predicted_load', 'actual_load', 'lower_bound', 'upper_bound']
        return pd.DataFrame([asdict(point) for point in self.forecast], columns=columns)


@dataclass(frozen=True)
class DatasetInfo:
    """Model for the summary of an uploaded dataset."""
    filename: str
    row_count: int
    start_date: str
    end_date: str
    frequency: str  # "1min", "1hour" or "daily"
    columns: List[str]
    missing_values: int
    has_load: bool
    has_temperature: bool
    has_humidity: bool

    def to_dict(self) -> Dict[str, Any]:
        return {
            'filename': self.filename,
            'rowCount': self.row_count,
            'startDate': self.start_date,
            'endDate': self.end_date,
            'frequency': self.frequency,
            'columns': list(self.columns),
            'missingValues': self.missing_values,
            'hasLoad': self.has_load,
            'hasTemperature': self.has_temperature,
            'hasHumidity': self.has_humidity,
        }
