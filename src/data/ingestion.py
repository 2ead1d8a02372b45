"""
CSV ingestion for uploaded load series.
Parses raw CSV text and maps headers to semantic column roles.
"""

import io
import logging
from typing import List, Tuple

import pandas as pd

from models.data_models import DetectedColumns
from utils.exceptions import DataValidationError

# Configure logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


# Header substrings per role, checked in order
TIMESTAMP_KEYWORDS = ('timestamp', 'time', 'date')
LOAD_KEYWORDS = ('load', 'power', 'demand')
TEMPERATURE_KEYWORDS = ('temp',)
HUMIDITY_KEYWORDS = ('humidity', 'humid')
SOLAR_KEYWORDS = ('solar',)
WIND_KEYWORDS = ('wind',)


def parse_csv(csv_content: str) -> Tuple[pd.DataFrame, List[str]]:
    """
    Parse raw CSV text into rows and header names.

    The first line holds the headers, numeric cells are typed as numbers,
    blank cells become NaN and fully empty lines are skipped.

    Args:
        csv_content: Raw CSV text

    Returns:
        Tuple of (rows, header names)
    """
    if csv_content.startswith('\ufeff'):
        csv_content = csv_content[1:]

    try:
        rows = pd.read_csv(io.StringIO(csv_content), skip_blank_lines=True, index_col=False)
    except pd.errors.EmptyDataError:
        raise DataValidationError("CSV file is empty")
    except pd.errors.ParserError as e:
        raise DataValidationError(f"Could not parse CSV: {e}")

    # Lines made only of delimiters
    rows = rows.dropna(how='all').reset_index(drop=True)
    columns = [str(col) for col in rows.columns]

    logger.info(f"Parsed {len(rows)} rows with columns {columns}")
    return rows, columns


def _find_column(columns: List[str], keywords: Tuple[str, ...]):
    for col in columns:
        name = col.lower()
        if any(keyword in name for keyword in keywords):
            return col
    return None


def detect_columns(columns: List[str]) -> DetectedColumns:
    """
    Map header names to semantic roles by case-insensitive substring match.
    The first header matching any of a role's keywords wins.
    """
    load_col = _find_column(columns, LOAD_KEYWORDS)

    # Generation columns never shadow the load column
    generation_columns = [col for col in columns if col != load_col]

    detected = DetectedColumns(
        timestamp_col=_find_column(columns, TIMESTAMP_KEYWORDS),
        load_col=load_col,
        temperature_col=_find_column(columns, TEMPERATURE_KEYWORDS),
        humidity_col=_find_column(columns, HUMIDITY_KEYWORDS),
        solar_col=_find_column(generation_columns, SOLAR_KEYWORDS),
        wind_col=_find_column(generation_columns, WIND_KEYWORDS),
    )

    if not detected.is_complete:
        logger.warning(f"Required columns not detected in {columns}")

    return detected
