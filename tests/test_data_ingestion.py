"""
Unit tests for CSV ingestion and column detection.
"""

import unittest
import pandas as pd
import sys
import os

# Add src to path for imports
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

from data.ingestion import parse_csv, detect_columns
from models.data_models import DetectedColumns
from utils.exceptions import DataValidationError


class TestParseCSV(unittest.TestCase):
    """Test cases for parse_csv."""

    def setUp(self):
        """Set up test fixtures."""
        self.csv_content = (
            "Timestamp,Load_MW,Temp_C\n"
            "2024-01-01 00:00,100.5,12\n"
            "2024-01-01 01:00,,13\n"
            "\n"
            "2024-01-01 02:00,98,\n"
        )

    def test_headers_and_rows(self):
        """Test that the first line becomes the header and empty lines are skipped."""
        rows, columns = parse_csv(self.csv_content)

        self.assertEqual(columns, ['Timestamp', 'Load_MW', 'Temp_C'])
        self.assertEqual(len(rows), 3)

    def test_numeric_typing(self):
        """Test that numeric cells are parsed as numbers and blanks as NaN."""
        rows, _ = parse_csv(self.csv_content)

        self.assertAlmostEqual(rows['Load_MW'].iloc[0], 100.5)
        self.assertTrue(pd.isna(rows['Load_MW'].iloc[1]))
        self.assertTrue(pd.isna(rows['Temp_C'].iloc[2]))
        self.assertIsInstance(rows['Timestamp'].iloc[0], str)

    def test_byte_order_mark_removed(self):
        """Test that a UTF-8 BOM does not leak into the first header."""
        _, columns = parse_csv('\ufeff' + self.csv_content)
        self.assertEqual(columns[0], 'Timestamp')

    def test_extra_fields_keep_header_mapping(self):
        """Test that a row with more fields than headers keeps columns aligned."""
        rows, columns = parse_csv("Timestamp,Load\n2024-01-01 00:00,1,extra\n2024-01-01 01:00,2\n")

        self.assertEqual(columns, ['Timestamp', 'Load'])
        self.assertEqual(list(rows['Timestamp']), ['2024-01-01 00:00', '2024-01-01 01:00'])
        self.assertEqual(list(rows['Load']), [1, 2])

    def test_header_only(self):
        """Test that a header without rows parses to an empty frame."""
        rows, columns = parse_csv("timestamp,load\n")

        self.assertTrue(rows.empty)
        self.assertEqual(columns, ['timestamp', 'load'])

    def test_empty_content(self):
        """Test that empty text is rejected."""
        with self.assertRaises(DataValidationError):
            parse_csv("")


class TestDetectColumns(unittest.TestCase):
    """Test cases for detect_columns."""

    def test_standard_headers(self):
        """Test detection for typical energy headers."""
        detected = detect_columns(["Timestamp", "Load_MW", "Temp_C"])

        self.assertEqual(detected.timestamp_col, "Timestamp")
        self.assertEqual(detected.load_col, "Load_MW")
        self.assertEqual(detected.temperature_col, "Temp_C")
        self.assertIsNone(detected.humidity_col)
        self.assertTrue(detected.is_complete)

    def test_alternative_keywords(self):
        """Test alternative keywords for every role."""
        detected = detect_columns(["Date", "Demand", "Relative_Humid", "Temperature"])

        self.assertEqual(detected.timestamp_col, "Date")
        self.assertEqual(detected.load_col, "Demand")
        self.assertEqual(detected.humidity_col, "Relative_Humid")
        self.assertEqual(detected.temperature_col, "Temperature")

    def test_first_match_wins(self):
        """Test that the first matching header in order is chosen."""
        detected = detect_columns(["date", "time", "power_kw", "load_kw"])

        self.assertEqual(detected.timestamp_col, "date")
        self.assertEqual(detected.load_col, "power_kw")

    def test_case_insensitive(self):
        """Test case-insensitive matching."""
        detected = detect_columns(["DATETIME", "LOAD"])

        self.assertEqual(detected.timestamp_col, "DATETIME")
        self.assertEqual(detected.load_col, "LOAD")

    def test_generation_columns(self):
        """Test solar and wind detection without shadowing the load column."""
        detected = detect_columns(["timestamp", "load", "solar_power", "wind_power"])

        self.assertEqual(detected.load_col, "load")
        self.assertEqual(detected.solar_col, "solar_power")
        self.assertEqual(detected.wind_col, "wind_power")

        detected = detect_columns(["timestamp", "solar_power"])
        self.assertEqual(detected.load_col, "solar_power")
        self.assertIsNone(detected.solar_col)

    def test_missing_required_columns(self):
        """Test that missing timestamp or load columns fail validation."""
        detected = detect_columns(["value", "load"])
        self.assertIsNone(detected.timestamp_col)
        self.assertFalse(detected.is_complete)

        with self.assertRaises(DataValidationError):
            detected.validate()

        with self.assertRaises(DataValidationError):
            detect_columns(["timestamp", "value"]).validate()

    def test_optional_column_mapping(self):
        """Test mapping of detected optional headers to standard names."""
        detected = DetectedColumns(timestamp_col='t', load_col='l', humidity_col='h')
        self.assertEqual(detected.optional_columns(), {'humidity': 'h'})


if __name__ == '__main__':
    # Run tests
    unittest.main(verbosity=2)
