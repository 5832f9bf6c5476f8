#!/usr/bin/env python3
"""
Cleaned Collision Table Validation

Uses pandera to validate the silver-layer table for:
- Schema compliance (exact columns, types, ranges)
- Closed categorical value sets (weather, visibility, light, invtype)
- No empty/null cells anywhere

Usage:
    from data_engineering.utils.validation import validate_cleaned_collisions

    # Validate before saving
    validate_cleaned_collisions(cleaned_df)
"""

import pandera as pa
from pandera import Column, Check
import pandas as pd

from data_engineering.clean.normalizer import (
    CLEANED_COLUMNS,
    WEATHER_VALUES,
    VISIBILITY_VALUES,
    LIGHT_VALUES,
    INVTYPE_VALUES,
)


# ============================================================================
# CLEANED COLLISION SCHEMA
# ============================================================================

non_empty = Check.str_length(min_value=1)

cleaned_collision_schema = pa.DataFrameSchema(
    {
        # Temporal
        'collision_date': Column(
            str,
            Check.str_matches(r'^\d{4}-\d{2}-\d{2}$'),
            nullable=False,
            description='Calendar date, YYYY-MM-DD'
        ),
        'collision_year': Column(int, Check.in_range(1900, 2100), nullable=False),
        'collision_time': Column(
            str,
            Check.str_matches(r'^\d{4}-\d{2}-\d{2} \d{2}:\d{2}:\d{2}$'),
            nullable=False,
            description='Timestamp, YYYY-MM-DD HH:MM:SS'
        ),
        'hour': Column(int, Check.in_range(0, 23), nullable=False),

        # Conditions
        'weather': Column(str, Check.isin(WEATHER_VALUES), nullable=False),
        'visibility': Column(str, Check.isin(VISIBILITY_VALUES), nullable=False),
        'light': Column(str, Check.isin(LIGHT_VALUES), nullable=False),

        # Person / place
        'injury': Column(str, non_empty, nullable=False),
        'invtype': Column(str, Check.isin(INVTYPE_VALUES), nullable=False),
        'neighbourhood': Column(str, non_empty, nullable=False),
    },
    checks=[
        # collision_year / hour must agree with the timestamp
        Check(lambda df: df['collision_year'] == df['collision_time'].str.slice(0, 4).astype(int),
              name='year_matches_timestamp'),
        Check(lambda df: df['hour'] == df['collision_time'].str.slice(11, 13).astype(int),
              name='hour_matches_timestamp'),
        Check(lambda df: df['collision_date'] == df['collision_time'].str.slice(0, 10),
              name='date_matches_timestamp'),
    ],
    strict=True,   # Exactly the cleaned columns
    ordered=True,  # In output order
    coerce=True,
    description='Pedestrian/cyclist KSI collision table'
)


# ============================================================================
# VALIDATION FUNCTIONS
# ============================================================================

def validate_cleaned_collisions(df: pd.DataFrame, verbose: bool = True) -> pd.DataFrame:
    """
    Validate the cleaned collision table

    Args:
        df: DataFrame to validate
        verbose: Print validation status

    Returns:
        The validated (type-coerced) DataFrame

    Raises:
        pandera.errors.SchemaErrors: If any check fails
    """
    if verbose:
        print(f'\nValidating cleaned collisions ({len(df):,} rows)...')

    try:
        validated = cleaned_collision_schema.validate(df, lazy=True)
    except pa.errors.SchemaErrors as err:
        print(f'  ❌ Schema validation failed:')
        print(err.failure_cases)
        raise

    if verbose:
        print(f'  ✓ Schema validation passed ({len(CLEANED_COLUMNS)} columns)')
        check_data_quality(validated)

    return validated


def check_data_quality(df: pd.DataFrame):
    """
    Report on the share of Unknown/None fallbacks

    These are legal values, but a high share usually means the raw extract
    changed its wording.
    """
    if len(df) == 0:
        print('  ⚠️  Table is empty')
        return

    fallbacks = {
        'weather': 'Unknown',
        'visibility': 'Unknown',
        'light': 'Unknown',
        'injury': 'None',
        'neighbourhood': 'Unknown',
    }
    for col, fallback in fallbacks.items():
        pct = (df[col] == fallback).mean() * 100
        if pct > 50:
            print(f'  ⚠️  {col}: {pct:.1f}% "{fallback}"')
