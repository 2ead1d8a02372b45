#!/usr/bin/env python3
"""
Demo script running the load forecasting workflow on synthetic data.
Uploads a month of hourly load, runs every model and compares their errors.
"""

import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), 'src'))

import logging
import pandas as pd
import numpy as np
from api.handlers import ForecastAPIHandler
from data.storage import InMemoryForecastStore
from models.data_models import ModelResult
from utils.config import Config

def create_sample_load_csv():
    """Create a month of hourly load with daily and weekly patterns as CSV text."""
    dates = pd.date_range('2024-01-01', periods=720, freq='h')
    np.random.seed(42)

    hours = np.arange(720) % 24
    days = np.arange(720) // 24

    # Winter load pattern (morning and evening peaks)
    daily_pattern = 1200 + 250 * np.sin(2 * np.pi * (hours - 6) / 24) + 120 * np.sin(4 * np.pi * hours / 24)
    weekend_adjustment = np.where(days % 7 >= 5, -80, 0)

    data = pd.DataFrame({
        'Timestamp': dates.strftime('%Y-%m-%d %H:%M'),
        'Load_MW': np.round(daily_pattern + weekend_adjustment + np.random.normal(0, 25, 720), 1),
        'Temp_C': np.round(2 + 4 * np.sin(2 * np.pi * (hours - 9) / 24) + np.random.normal(0, 1, 720), 1),
        'Humidity': np.round(np.random.uniform(60, 90, 720), 0),
    })

    # Some meter dropouts
    data.loc[[50, 51, 300], 'Load_MW'] = np.nan

    return data.to_csv(index=False)

def main():
    """Run the load forecasting demo."""
    Config.validate()
    logging.getLogger().setLevel(Config.LOG_LEVEL)

    print("🔋 Load Forecasting Demo")
    print("=" * 50)

    handler = ForecastAPIHandler(store=InMemoryForecastStore())

    # Upload
    print("📊 Uploading sample load data...")
    status, payload = handler.handle_upload(create_sample_load_csv(), 'sample_load.csv')
    if status != 200:
        print(f"   Upload failed ({status}): {payload['error']}")
        return

    info = payload['datasetInfo']
    print(f"   Rows: {info['rowCount']} ({info['frequency']})")
    print(f"   Date range: {info['startDate']} to {info['endDate']}")
    print(f"   Columns: {', '.join(info['columns'])}")

    # Feature availability
    processed = handler.store.get_processed_data(Config.DEFAULT_SESSION_ID).data
    summary = handler.feature_engineer.get_feature_summary(processed)
    print(f"\n📋 Feature Availability:")
    for group, columns in summary['feature_groups'].items():
        counts = ', '.join(f"{col}={summary['available_rows'][col]}" for col in columns)
        print(f"   {group.title()}: {counts}")

    # Single model
    print("\n⚡ Running hybrid model (1 day)...")
    status, payload = handler.handle_predict({'modelType': 'hybrid', 'horizon': 1})
    if status == 200:
        latest = handler.store.get_latest_model_result(Config.DEFAULT_SESSION_ID)
        print(latest.to_dataframe().head().to_string(index=False))
    else:
        print(f"   Prediction failed ({status}): {payload['error']}")

    # All models
    print("\n📈 Comparing all models (7 days)...")
    results = handler.forecasting.run_all_models(processed, 7)
    comparison = handler.forecasting.compare_results(results)
    print(comparison.round(3).to_string())

    best: ModelResult = min(results, key=lambda result: result.metrics.mae)
    print(f"\n✅ Load Forecasting Demo Complete!")
    print(f"   Best model by MAE: {best.metadata.type.value} ({best.metrics.mae:.2f} MW)")

if __name__ == "__main__":
    main()
