#!/usr/bin/env python3
"""
Master Pipeline Orchestration Script

Runs the complete KSI pedestrian/cyclist pipeline:
1. Download the raw extract (cached)
2. Build the cleaned collision table
3. Aggregate count tables
4. Plot report figures

Usage:
    # Full pipeline
    python scripts/run_pipeline.py

    # Use a local extract, no network
    python scripts/run_pipeline.py --skip-download --input data/ksi.csv

    # Cleaned table only
    python scripts/run_pipeline.py --clean-only
"""

import sys
import argparse
from pathlib import Path
from datetime import datetime

# Add project root to path
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.append(str(PROJECT_ROOT))

from config.pipeline_config import PipelineConfig
from data_engineering.clean.errors import SourceUnavailableError
from data_engineering.download.download_toronto_ksi import download_ksi
from data_engineering.datasets.build_cleaned_collisions import build_cleaned_collisions
from analysis.collision_summaries import summarize_collisions
from analysis.reports.collision_figures import generate_figures


def print_header(text):
    """Print a formatted header"""
    print('\n' + '=' * 80)
    print(text.center(80))
    print('=' * 80 + '\n')


def run_pipeline(config: PipelineConfig, download=True, summaries=True, figures=True):
    """
    Run the pipeline stages in order

    Returns:
        NormalizationSummary from the cleaning stage

    Raises:
        SourceUnavailableError: Raw extract missing or unreadable (nothing is written)
    """
    if download:
        print_header('STEP 1: DOWNLOAD RAW KSI EXTRACT')
        download_ksi(config)

    print_header('STEP 2: BUILD CLEANED COLLISION TABLE')
    summary = build_cleaned_collisions(config)

    if summaries:
        print_header('STEP 3: AGGREGATE COUNTS')
        summarize_collisions(config)

    if figures:
        print_header('STEP 4: REPORT FIGURES')
        generate_figures(config)

    return summary


def main(argv=None):
    """Main pipeline orchestration"""
    parser = argparse.ArgumentParser(
        description='Run the complete KSI pedestrian/cyclist pipeline',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Full pipeline
  python scripts/run_pipeline.py

  # Re-download the extract first
  python scripts/run_pipeline.py --force-download

  # Local extract, custom output
  python scripts/run_pipeline.py --skip-download --input ksi.csv --output cleaned.csv

  # Cleaned table only
  python scripts/run_pipeline.py --clean-only
        """
    )

    parser.add_argument('--input', type=str, default=None,
                        help='Raw KSI CSV (default: bronze layer)')
    parser.add_argument('--output', type=str, default=None,
                        help='Cleaned CSV (default: silver layer)')
    parser.add_argument('--summaries-dir', type=str, default=None,
                        help='Directory for count tables')
    parser.add_argument('--figures-dir', type=str, default=None,
                        help='Directory for figures')
    parser.add_argument('--skip-download', action='store_true',
                        help='Use the raw file as-is, no network')
    parser.add_argument('--force-download', action='store_true',
                        help='Re-download even if the raw file is cached')
    parser.add_argument('--clean-only', action='store_true',
                        help='Stop after the cleaned table')
    parser.add_argument('--batch-size', type=int, default=None,
                        help='Normalize in batches of this many rows')
    parser.add_argument('--workers', type=int, default=None,
                        help='Worker processes for batched normalization')

    args = parser.parse_args(argv)

    config = PipelineConfig.from_defaults(
        raw_path=args.input,
        cleaned_path=args.output,
        summaries_dir=args.summaries_dir,
        figures_dir=args.figures_dir,
        force_download=args.force_download,
        batch_size=args.batch_size,
        workers=args.workers,
    )

    print_header('TORONTO KSI PEDESTRIAN & CYCLIST - DATA PIPELINE')
    print(f'Started: {datetime.now().strftime("%Y-%m-%d %H:%M:%S")}')
    print(f'Raw file:     {config.raw_path}')
    print(f'Cleaned file: {config.cleaned_path}')

    start_time = datetime.now()

    try:
        summary = run_pipeline(
            config,
            download=not args.skip_download,
            summaries=not args.clean_only,
            figures=not args.clean_only,
        )
    except SourceUnavailableError as e:
        print(f'\n❌ {e}')
        print('\nPipeline aborted. No output written.')
        return 1

    end_time = datetime.now()

    print_header('PIPELINE SUMMARY')
    print(f'Started:  {start_time.strftime("%Y-%m-%d %H:%M:%S")}')
    print(f'Finished: {end_time.strftime("%Y-%m-%d %H:%M:%S")}')
    print(f'Duration: {end_time - start_time}')
    print()
    print(f'Kept:    {summary.kept:,}')
    print(f'Dropped: {summary.dropped:,}')
    print()
    print('✓ PIPELINE COMPLETED SUCCESSFULLY')
    print()
    return 0


if __name__ == '__main__':
    sys.exit(main())
