#!/usr/bin/env python3
"""
Band-pass (Christiano-Fitzgerald) seasonal forecasting of daily precipitation.

Usage
-----
    python forecaster_CF.py --help
    python forecaster_CF.py --series-csv data/precip.csv
    python forecaster_CF.py --series-csv data/precip.csv --optimize-bands --metrics-csv metrics.csv

Module Structure
----------------
The code is organized in precip_forecaster_src/ with these modules:
- transform_utils.py: Standardize / asinh-normalize transform
- filter_utils.py: Christiano-Fitzgerald band-pass filter
- decomposition_utils.py: Trend / seasonal / residual split
- seasonal_utils.py: Cycle positions and multi-year averaging
- forecasting_utils.py: Forecast projection and band search
- metrics_utils.py: Evaluation metrics
- config_utils.py, parsing_utils.py: Configuration and CLI parsing
- data_utils.py, file_utils.py: Input CSV and metrics CSV
- plotting_utils.py, diagnostics_utils.py: Figures and diagnostics
- main.py: Main entry point
"""

from precip_forecaster_src.main import main

if __name__ == "__main__":
    main()
