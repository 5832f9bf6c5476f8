#!/usr/bin/env python3
"""
Collision Summaries - Aggregated Count Tables

Reads the cleaned pedestrian/cyclist table and writes count tables to the
gold layer. Only the cleaned column names and category sets are assumed;
row order is not.

Tables:
- counts_by_year, counts_by_hour
- counts_by_weather, counts_by_visibility, counts_by_light (every category, zero-filled)
- counts_by_injury, counts_by_invtype
- invtype_by_year, invtype_by_light (cross-tabs)
- top_neighbourhoods

Usage:
  python -m analysis.collision_summaries
  python -m analysis.collision_summaries --input cleaned.csv --output-dir out/
"""

import argparse
import sys
from pathlib import Path

import pandas as pd

# Add project root to path
sys.path.append(str(Path(__file__).parent.parent))
from config.pipeline_config import PipelineConfig
from data_engineering.clean.normalizer import (
    CLEANED_COLUMNS,
    WEATHER_VALUES,
    VISIBILITY_VALUES,
    LIGHT_VALUES,
    INVTYPE_VALUES,
)

HOURS = list(range(24))
TOP_NEIGHBOURHOODS = 15


def load_cleaned(cleaned_file) -> pd.DataFrame:
    """Load the cleaned table ("None" injury stays a string)"""
    cleaned_file = Path(cleaned_file)
    if not cleaned_file.exists():
        raise FileNotFoundError(f'Missing cleaned table: {cleaned_file}')

    df = pd.read_csv(
        cleaned_file,
        keep_default_na=False,
        dtype={'collision_year': 'int64', 'hour': 'int64'},
    )
    missing = [c for c in CLEANED_COLUMNS if c not in df.columns]
    if missing:
        raise ValueError(f'Cleaned table is missing columns: {missing}')
    return df


def safe_counts(df: pd.DataFrame, by, order=None) -> pd.DataFrame:
    """Row counts per value of `by`; `order` reindexes and zero-fills"""
    counts = df.groupby(by).size()
    if order is not None:
        counts = counts.reindex(order, fill_value=0)
    counts.index.name = by
    return counts.rename('count').reset_index()


def crosstab_counts(df: pd.DataFrame, rows, cols, row_order=None, col_order=None) -> pd.DataFrame:
    """Counts of rows x cols; missing combinations are 0"""
    if df.empty:
        table = pd.DataFrame(0, index=pd.Index(row_order or []), columns=col_order or [])
    else:
        table = df.groupby([rows, cols]).size().unstack(fill_value=0)
    if row_order is not None:
        table = table.reindex(row_order, fill_value=0)
    if col_order is not None:
        table = table.reindex(columns=col_order, fill_value=0)
    table = table.fillna(0).astype('int64')
    table.index.name = rows
    table.columns.name = None
    return table.reset_index()


def top_neighbourhoods(df: pd.DataFrame, top_n: int = TOP_NEIGHBOURHOODS) -> pd.DataFrame:
    """Neighbourhoods with the most records (ties broken by name)"""
    counts = safe_counts(df, 'neighbourhood')
    counts = counts.sort_values(['count', 'neighbourhood'], ascending=[False, True])
    return counts.head(top_n).reset_index(drop=True)


def build_summaries(df: pd.DataFrame, top_n: int = TOP_NEIGHBOURHOODS) -> dict:
    """All count tables, keyed by output file stem"""
    years = sorted(df['collision_year'].unique().tolist())

    return {
        'counts_by_year': safe_counts(df, 'collision_year', order=years),
        'counts_by_hour': safe_counts(df, 'hour', order=HOURS),
        'counts_by_weather': safe_counts(df, 'weather', order=WEATHER_VALUES),
        'counts_by_visibility': safe_counts(df, 'visibility', order=VISIBILITY_VALUES),
        'counts_by_light': safe_counts(df, 'light', order=LIGHT_VALUES),
        'counts_by_injury': safe_counts(df, 'injury').sort_values('count', ascending=False).reset_index(drop=True),
        'counts_by_invtype': safe_counts(df, 'invtype', order=INVTYPE_VALUES),
        'invtype_by_year': crosstab_counts(df, 'collision_year', 'invtype',
                                           row_order=years, col_order=INVTYPE_VALUES),
        'invtype_by_light': crosstab_counts(df, 'light', 'invtype',
                                            row_order=LIGHT_VALUES, col_order=INVTYPE_VALUES),
        'top_neighbourhoods': top_neighbourhoods(df, top_n),
    }


def write_summaries(summaries: dict, output_dir) -> list:
    """Write each table as <name>.csv (overwrites)"""
    output_dir = Path(output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)

    paths = []
    for name, table in summaries.items():
        out = output_dir / f'{name}.csv'
        table.to_csv(out, index=False, lineterminator='\n')
        paths.append(out)
    return paths


def summarize_collisions(config: PipelineConfig) -> list:
    """Load the cleaned table, build and write every summary"""
    print(f'\n{"="*80}')
    print('COLLISION SUMMARIES')
    print(f'{"="*80}')

    df = load_cleaned(config.cleaned_path)
    print(f'\n✓ Loaded {len(df):,} cleaned records')

    summaries = build_summaries(df)
    paths = write_summaries(summaries, config.summaries_dir)

    print(f'\nSaved summary tables in {config.summaries_dir}/')
    for p in paths:
        print(f' - {p.name}')

    by_invtype = summaries['counts_by_invtype'].set_index('invtype')['count']
    print(f'\nPedestrians: {by_invtype.get("Pedestrian", 0):,} | Cyclists: {by_invtype.get("Cyclist", 0):,}')

    return paths


def main(argv=None):
    parser = argparse.ArgumentParser(description='Aggregate counts from the cleaned collision table')
    parser.add_argument('--input', type=str, default=None, help='Cleaned collision CSV')
    parser.add_argument('--output-dir', type=str, default=None, help='Directory for summary CSVs')
    args = parser.parse_args(argv)

    config = PipelineConfig.from_defaults(cleaned_path=args.input, summaries_dir=args.output_dir)

    try:
        summarize_collisions(config)
    except (FileNotFoundError, ValueError) as e:
        print(f'❌ {e}')
        return 1
    return 0


if __name__ == '__main__':
    sys.exit(main())
