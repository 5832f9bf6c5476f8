"""
Data Engineering Module for the Toronto KSI Pedestrian & Cyclist Pipeline

This module contains all data engineering code organized by pipeline stage:
1. download/ - Cached acquisition of the raw KSI extract
2. clean/ - Record normalization and the error taxonomy
3. datasets/ - Building the cleaned analysis table
4. utils/ - Schema validation

Usage:
    from data_engineering.clean import filter_and_map
    from data_engineering.datasets.build_cleaned_collisions import build_cleaned_collisions
"""

__version__ = "1.0.0"
