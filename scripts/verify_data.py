#!/usr/bin/env python3
"""
Data Verification Script

Checks that the raw KSI extract is present and carries the columns the
cleaner needs before running the pipeline.

Usage:
    python scripts/verify_data.py
    python scripts/verify_data.py --input data/ksi.csv
"""

import argparse
import sys
from pathlib import Path

# Add project root to path
sys.path.append(str(Path(__file__).parent.parent))

import pandas as pd
from config.paths import ensure_directories, print_architecture
from config.pipeline_config import PipelineConfig
from data_engineering.clean.normalizer import RAW_COLUMNS, REQUIRED_COLUMNS
from data_engineering.datasets.build_cleaned_collisions import COLUMN_ALIASES


def check_file_exists(file_path, description):
    """Check if a file exists and print status"""
    if file_path.exists():
        size_mb = file_path.stat().st_size / (1024 * 1024)
        print(f'✓ {description}: {size_mb:.1f} MB')
        return True
    else:
        print(f'✗ {description}: NOT FOUND')
        print(f'  Expected: {file_path}')
        return False


def verify_raw_collisions(raw_file):
    """Verify the raw extract has the required columns"""
    try:
        df = pd.read_csv(raw_file, nrows=100, dtype=str, keep_default_na=False)
    except (pd.errors.EmptyDataError, pd.errors.ParserError, UnicodeDecodeError, OSError) as e:
        print(f'  ✗ Error reading file: {e}')
        return False

    columns = {str(c).strip().upper() for c in df.columns}
    for canonical, aliases in COLUMN_ALIASES.items():
        if canonical not in columns and any(a in columns for a in aliases):
            columns.add(canonical)

    missing_required = [c for c in REQUIRED_COLUMNS if c not in columns]
    if missing_required:
        print(f'  ✗ Missing required columns: {missing_required}')
        return False

    missing_optional = [c for c in RAW_COLUMNS if c not in columns]
    if missing_optional:
        print(f'  ⚠️  Missing optional columns: {missing_optional}')

    with open(raw_file, encoding='utf-8', errors='replace') as fh:
        total_rows = sum(1 for _ in fh) - 1  # -1 for header
    print(f'  ✓ Contains {total_rows:,} person records')
    print(f'  ✓ Required columns present')
    return True


def main(argv=None):
    """Main verification function"""
    parser = argparse.ArgumentParser(description='Verify the raw KSI extract')
    parser.add_argument('--input', type=str, default=None, help='Path to raw KSI CSV')
    parser.add_argument('--layout', action='store_true', help='Print the data layer layout and exit')
    args = parser.parse_args(argv)

    if args.layout:
        print_architecture()
        return 0

    config = PipelineConfig.from_defaults(raw_path=args.input)

    print('=' * 80)
    print('DATA VERIFICATION')
    print('=' * 80)

    print('\n1. Checking directory structure...')
    ensure_directories()
    print('  ✓ Directory structure initialized')

    print('\n2. Checking raw data file...\n')

    all_ok = True
    print('KSI Collisions (Bronze Layer):')
    if check_file_exists(config.raw_path, 'Toronto KSI extract'):
        if not verify_raw_collisions(config.raw_path):
            all_ok = False
    else:
        all_ok = False
        print('  ℹ️  Download with: python data_engineering/download/download_toronto_ksi.py')

    print()
    print('=' * 80)

    if all_ok:
        print('✓ ALL CHECKS PASSED')
        print()
        print('Next step:')
        print('  python scripts/run_pipeline.py')
        return 0
    else:
        print('✗ VERIFICATION FAILED')
        print()
        print('Please fix the issues above before running the pipeline.')
        return 1


if __name__ == '__main__':
    sys.exit(main())
