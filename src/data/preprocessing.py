"""
Preprocessing for uploaded load series.
Standardizes raw CSV rows, fills load gaps and summarizes datasets.
"""

import logging
from typing import Any, List

import numpy as np
import pandas as pd

from models.data_models import (
    BASE_COLUMNS, OPTIONAL_COLUMNS, DatasetInfo, DetectedColumns, TimeSeriesPoint
)

# Configure logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


# Mean spacing thresholds for frequency labels (milliseconds)
MINUTE_FREQUENCY_MS = 120000
HOURLY_FREQUENCY_MS = 3600000


def _has_value(value: Any) -> bool:
    """Check that a raw cell holds something other than null or blank text."""
    if value is None:
        return False
    if isinstance(value, str):
        return value.strip() != ''
    return not pd.isna(value)


def _parse_timestamp(value: Any) -> pd.Timestamp:
    """
    Parse a raw timestamp cell.

    Numeric cells are epoch milliseconds. Timezone-aware values are converted
    to UTC and made naive; anything unparseable becomes NaT.
    """
    if not _has_value(value):
        return pd.NaT

    if isinstance(value, (int, float, np.number)) and not isinstance(value, bool):
        timestamp = pd.to_datetime(value, unit='ms', errors='coerce')
    else:
        timestamp = pd.to_datetime(str(value).strip(), errors='coerce')

    if pd.isna(timestamp):
        return pd.NaT
    if timestamp.tzinfo is not None:
        timestamp = timestamp.tz_convert('UTC').tz_localize(None)
    return timestamp


def standardize_data(raw_rows: pd.DataFrame, columns: DetectedColumns) -> pd.DataFrame:
    """
    Convert raw CSV rows into a chronologically sorted load series.

    Rows with a missing timestamp, a null load or an unparseable timestamp are
    dropped. Load cells that are present but not numeric become NaN and are
    left for gap filling.

    Args:
        raw_rows: Rows returned by parse_csv
        columns: Detected column roles

    Returns:
        DataFrame with a timestamp column, a load column and any detected
        optional columns
    """
    columns.validate()

    timestamp_cells = raw_rows[columns.timestamp_col]
    load_cells = raw_rows[columns.load_col]

    timestamps = timestamp_cells.map(_parse_timestamp)
    valid = timestamp_cells.map(_has_value) & load_cells.notna() & timestamps.notna()

    standardized = pd.DataFrame({
        'timestamp': pd.to_datetime(timestamps[valid]),
        'load': pd.to_numeric(load_cells[valid], errors='coerce').astype(float),
    })

    for name, col in columns.optional_columns().items():
        standardized[name] = pd.to_numeric(raw_rows.loc[valid, col], errors='coerce').astype(float)

    dropped = len(raw_rows) - len(standardized)
    if dropped:
        logger.warning(f"Dropped {dropped} rows with missing or invalid timestamp/load")

    standardized = standardized.sort_values('timestamp').reset_index(drop=True)
    logger.info(f"Standardized {len(standardized)} data points")
    return standardized


def fill_missing_values(data: pd.DataFrame) -> pd.DataFrame:
    """
    Fill missing load values from their neighbours.

    A gap takes the mean of the nearest previous and next valid loads, or the
    single available neighbour at the edges. Gaps are patched left to right,
    so a patched value serves as the previous neighbour of the next gap. The
    input frame is left untouched.

    Args:
        data: Standardized series

    Returns:
        Copy of the series with gaps filled where possible
    """
    filled = data.copy()
    if filled.empty:
        return filled

    loads = pd.to_numeric(filled['load'], errors='coerce').to_numpy(dtype=float, copy=True)
    next_valid = pd.Series(loads).bfill().to_numpy()

    previous = np.nan
    patched = 0
    for i in range(len(loads)):
        if np.isnan(loads[i]):
            following = next_valid[i]
            if not np.isnan(previous) and not np.isnan(following):
                loads[i] = (previous + following) / 2
            elif not np.isnan(previous):
                loads[i] = previous
            elif not np.isnan(following):
                loads[i] = following

            if not np.isnan(loads[i]):
                patched += 1
        if not np.isnan(loads[i]):
            previous = loads[i]

    filled['load'] = loads

    if patched:
        logger.info(f"Filled {patched} missing load values")
    remaining = int(np.isnan(loads).sum())
    if remaining:
        logger.warning(f"{remaining} load values could not be filled")

    return filled


def infer_frequency(data: pd.DataFrame) -> str:
    """Label the sampling frequency from the mean spacing between points."""
    if len(data) < 2:
        return 'daily'

    deltas = data['timestamp'].diff().dropna()
    mean_ms = deltas.dt.total_seconds().mean() * 1000

    if mean_ms < MINUTE_FREQUENCY_MS:
        return '1min'
    elif mean_ms <= HOURLY_FREQUENCY_MS:
        return '1hour'
    return 'daily'


def _defines(data: pd.DataFrame, column: str) -> bool:
    return column in data.columns and bool(data[column].notna().any())


def get_dataset_info(data: pd.DataFrame, filename: str) -> DatasetInfo:
    """
    Summarize a standardized series for display.

    Args:
        data: Standardized (usually gap-filled) series
        filename: Name of the uploaded file

    Returns:
        DatasetInfo with counts, date range, frequency and present columns
    """
    columns = list(BASE_COLUMNS)
    for name in OPTIONAL_COLUMNS:
        if name != 'is_holiday' and _defines(data, name):
            columns.append(name)

    if data.empty:
        start_date, end_date = '', ''
    else:
        start_date = data['timestamp'].iloc[0].isoformat()
        end_date = data['timestamp'].iloc[-1].isoformat()

    return DatasetInfo(
        filename=filename,
        row_count=len(data),
        start_date=start_date,
        end_date=end_date,
        frequency=infer_frequency(data),
        columns=columns,
        missing_values=int(data['load'].isna().sum()) if 'load' in data.columns else 0,
        has_load=True,
        has_temperature=_defines(data, 'temperature'),
        has_humidity=_defines(data, 'humidity'),
    )


def preview_points(data: pd.DataFrame, limit: int = 100) -> List[TimeSeriesPoint]:
    """Return the first points of a series as TimeSeriesPoint records."""
    return [TimeSeriesPoint.from_row(row) for _, row in data.head(limit).iterrows()]
