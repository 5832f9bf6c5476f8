#!/usr/bin/env python3
"""
Collision Report Figures

Descriptive plots of the cleaned pedestrian/cyclist KSI table.

Figures:
1. yearly_counts_by_invtype.png - records per year, pedestrians vs cyclists
2. hourly_counts.png            - records by hour of day
3. conditions.png               - weather / visibility / light panels
4. injury_severity.png          - injury severity by involvement type
5. top_neighbourhoods.png       - neighbourhoods with the most records

Usage:
    python analysis/reports/collision_figures.py
    python analysis/reports/collision_figures.py --input cleaned.csv --output-dir figures/
"""

import argparse
import sys
from pathlib import Path

import matplotlib
matplotlib.use('Agg')
import matplotlib.pyplot as plt
import seaborn as sns
import pandas as pd

# Add project root to path
project_root = Path(__file__).parent.parent.parent
sys.path.insert(0, str(project_root))
from config.pipeline_config import PipelineConfig
from analysis.collision_summaries import (
    load_cleaned,
    safe_counts,
    crosstab_counts,
    top_neighbourhoods,
    HOURS,
)
from data_engineering.clean.normalizer import (
    WEATHER_VALUES,
    VISIBILITY_VALUES,
    LIGHT_VALUES,
    INVTYPE_VALUES,
)

sns.set_style("whitegrid")

INVTYPE_COLORS = {'Pedestrian': '#4472C4', 'Cyclist': '#ED7D31'}
DPI = 150


def _save(fig, outpath):
    fig.tight_layout()
    fig.savefig(outpath, dpi=DPI, bbox_inches='tight')
    plt.close(fig)
    print(f'  ✓ Saved: {outpath}')
    return outpath


def plot_yearly_counts(df: pd.DataFrame, outpath):
    years = sorted(df['collision_year'].unique().tolist())
    table = crosstab_counts(df, 'collision_year', 'invtype', row_order=years, col_order=INVTYPE_VALUES)

    fig, ax = plt.subplots(figsize=(12, 5))
    table.set_index('collision_year')[INVTYPE_VALUES].plot(
        kind='bar', ax=ax, rot=0,
        color=[INVTYPE_COLORS[i] for i in INVTYPE_VALUES],
        edgecolor='black', linewidth=0.5,
    )
    ax.set_xlabel('Year', fontsize=12)
    ax.set_ylabel('Persons involved', fontsize=12)
    ax.set_title('KSI Collisions by Year: Pedestrians vs Cyclists', fontsize=14, fontweight='bold')
    ax.legend(title=None)
    return _save(fig, outpath)


def plot_hourly_counts(df: pd.DataFrame, outpath):
    counts = safe_counts(df, 'hour', order=HOURS)

    fig, ax = plt.subplots(figsize=(10, 5))
    ax.bar(counts['hour'], counts['count'], color='#4472C4', alpha=0.85)
    ax.set_xticks(HOURS)
    ax.set_xlabel('Hour of day (0–23)', fontsize=12)
    ax.set_ylabel('Persons involved', fontsize=12)
    ax.set_title('KSI Collisions by Hour', fontsize=14, fontweight='bold')
    return _save(fig, outpath)


def plot_conditions(df: pd.DataFrame, outpath):
    panels = [
        ('weather', WEATHER_VALUES, 'Road surface (weather)'),
        ('visibility', VISIBILITY_VALUES, 'Visibility'),
        ('light', LIGHT_VALUES, 'Light'),
    ]

    fig, axes = plt.subplots(1, 3, figsize=(18, 5))
    for ax, (col, order, title) in zip(axes, panels):
        counts = safe_counts(df, col, order=order)
        sns.barplot(data=counts, x=col, y='count', order=order, color='#70AD47', ax=ax)
        ax.set_title(title, fontsize=13, fontweight='bold')
        ax.set_xlabel('')
        ax.set_ylabel('Persons involved')

    fig.suptitle('Conditions at Time of Collision', fontsize=16, fontweight='bold')
    return _save(fig, outpath)


def plot_injury_severity(df: pd.DataFrame, outpath):
    injury_order = safe_counts(df, 'injury').sort_values('count', ascending=False)['injury'].tolist()
    table = crosstab_counts(df, 'injury', 'invtype', row_order=injury_order, col_order=INVTYPE_VALUES)

    fig, ax = plt.subplots(figsize=(10, 5))
    table.set_index('injury')[INVTYPE_VALUES].plot(
        kind='barh', ax=ax,
        color=[INVTYPE_COLORS[i] for i in INVTYPE_VALUES],
        edgecolor='black', linewidth=0.5,
    )
    ax.invert_yaxis()
    ax.set_xlabel('Persons involved', fontsize=12)
    ax.set_ylabel('')
    ax.set_title('Injury Severity by Involvement Type', fontsize=14, fontweight='bold')
    return _save(fig, outpath)


def plot_top_neighbourhoods(df: pd.DataFrame, outpath, top_n: int = 15):
    top = top_neighbourhoods(df, top_n)

    fig, ax = plt.subplots(figsize=(10, 7))
    ax.barh(top['neighbourhood'], top['count'], color='#9E67AB', alpha=0.85)
    ax.invert_yaxis()
    ax.set_xlabel('Persons involved', fontsize=12)
    ax.set_title(f'Top {len(top)} Neighbourhoods', fontsize=14, fontweight='bold')
    ax.grid(axis='x', alpha=0.3)
    return _save(fig, outpath)


def make_figures(df: pd.DataFrame, output_dir) -> list:
    """Write every figure to output_dir; returns the PNG paths"""
    output_dir = Path(output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)

    if df.empty:
        print('  ⚠️  No records to plot')
        return []

    return [
        plot_yearly_counts(df, output_dir / 'yearly_counts_by_invtype.png'),
        plot_hourly_counts(df, output_dir / 'hourly_counts.png'),
        plot_conditions(df, output_dir / 'conditions.png'),
        plot_injury_severity(df, output_dir / 'injury_severity.png'),
        plot_top_neighbourhoods(df, output_dir / 'top_neighbourhoods.png'),
    ]


def generate_figures(config: PipelineConfig) -> list:
    print('\n' + '='*80)
    print('GENERATING REPORT FIGURES')
    print('='*80)

    df = load_cleaned(config.cleaned_path)
    print(f'\n✓ Loaded {len(df):,} cleaned records\n')

    paths = make_figures(df, config.figures_dir)
    print(f'\n✅ {len(paths)} figures written to {config.figures_dir}/')
    return paths


def main(argv=None):
    parser = argparse.ArgumentParser(description='Plot the cleaned collision table')
    parser.add_argument('--input', type=str, default=None, help='Cleaned collision CSV')
    parser.add_argument('--output-dir', type=str, default=None, help='Directory for PNGs')
    args = parser.parse_args(argv)

    config = PipelineConfig.from_defaults(cleaned_path=args.input, figures_dir=args.output_dir)

    try:
        generate_figures(config)
    except (FileNotFoundError, ValueError) as e:
        print(f'❌ {e}')
        return 1
    return 0


if __name__ == '__main__':
    sys.exit(main())
