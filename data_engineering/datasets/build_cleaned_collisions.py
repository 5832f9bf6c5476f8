#!/usr/bin/env python3
"""
Cleaned Collision Table Builder

Builds the pedestrian/cyclist analysis table from the raw Toronto KSI extract.
The output is regenerated from scratch on every run.

Steps:
- Load the raw extract (every column as text, headers upper-cased)
- Normalize records (involvement-type filter, date/time parsing, recoding)
- Validate against the pandera schema
- Write the CSV, fully replacing any previous output

Output: data/silver/toronto/ped_cyclist_collisions.csv

Usage:
  python build_cleaned_collisions.py
  python build_cleaned_collisions.py --input ksi.csv --output cleaned.csv
  python build_cleaned_collisions.py --batch-size 20000 --workers 4
"""

import argparse
import os
import sys
import tempfile
from datetime import datetime
from pathlib import Path

import pandas as pd

# Import paths from config
sys.path.append(str(Path(__file__).parent.parent.parent))
from config.pipeline_config import PipelineConfig
from data_engineering.clean.errors import SourceUnavailableError
from data_engineering.clean.normalizer import (
    CLEANED_COLUMNS,
    DATE_COL,
    TIME_COL,
    NEIGHBOURHOOD_COL,
    RAW_COLUMNS,
    REQUIRED_COLUMNS,
    normalize,
    normalize_in_batches,
)
from data_engineering.utils.validation import validate_cleaned_collisions

# Configuration
DEFAULT_BATCH_SIZE = 50000

# Canonical column -> older/alternate KSI headers, in order of preference
COLUMN_ALIASES = {
    DATE_COL: ['OCC_DATE'],
    TIME_COL: ['OCC_TIME'],
    NEIGHBOURHOOD_COL: ['NEIGHBOURHOOD'],
}


def _safe_upper(cols):
    return [str(c).strip().upper() for c in cols]


def _apply_aliases(df: pd.DataFrame) -> pd.DataFrame:
    renames = {}
    for canonical, aliases in COLUMN_ALIASES.items():
        if canonical in df.columns:
            continue
        alias = next((c for c in aliases if c in df.columns), None)
        if alias:
            renames[alias] = canonical
    return df.rename(columns=renames)


def load_raw_collisions(raw_file, sep: str = ',') -> pd.DataFrame:
    """
    Load the raw KSI extract

    Args:
        raw_file: Path to the delimited raw table
        sep: Field delimiter

    Returns:
        DataFrame with the retained raw columns, every cell as text

    Raises:
        SourceUnavailableError: Missing/unreadable/empty file or required columns absent
    """
    print(f'\n{"="*80}')
    print('STEP 1: LOADING RAW KSI DATA')
    print(f'{"="*80}')

    raw_file = Path(raw_file)
    if not raw_file.is_file():
        raise SourceUnavailableError(raw_file, 'file not found')

    print(f'\nReading {raw_file}...')
    try:
        df = pd.read_csv(raw_file, sep=sep, dtype=str, keep_default_na=False, low_memory=False)
    except (pd.errors.EmptyDataError, pd.errors.ParserError, UnicodeDecodeError, OSError) as e:
        raise SourceUnavailableError(raw_file, f'could not read table: {e}') from e

    df.columns = _safe_upper(df.columns)
    df = _apply_aliases(df)

    missing = [c for c in REQUIRED_COLUMNS if c not in df.columns]
    if missing:
        raise SourceUnavailableError(raw_file, f'missing required columns: {", ".join(missing)}')
    if df.empty:
        raise SourceUnavailableError(raw_file, 'table contains no records')

    print(f'  Total records in file: {len(df):,}')
    print(f'  Source columns: {len(df.columns)}')

    keep = [c for c in RAW_COLUMNS if c in df.columns]
    absent = [c for c in RAW_COLUMNS if c not in df.columns]
    if absent:
        print(f'  ⚠️  Optional columns absent (recoded as Unknown): {", ".join(absent)}')
    print(f'  ✓ Retained {len(keep)} columns')

    return df[keep]


def records_to_frame(records) -> pd.DataFrame:
    """Cleaned records -> DataFrame in output column order"""
    df = pd.DataFrame([r.as_row() for r in records], columns=CLEANED_COLUMNS)
    return df.astype({'collision_year': 'int64', 'hour': 'int64'})


def write_cleaned_collisions(df: pd.DataFrame, output_file) -> Path:
    """
    Validate and write the cleaned table

    The file is written next to the target and then moved into place, so a
    failed run never leaves a partial file behind.
    """
    print(f'\n{"="*80}')
    print('STEP 3: VALIDATING AND SAVING')
    print(f'{"="*80}')

    validated = validate_cleaned_collisions(df)

    output_file = Path(output_file)
    output_file.parent.mkdir(parents=True, exist_ok=True)

    fd, tmp_name = tempfile.mkstemp(prefix=f'.{output_file.stem}_', suffix='.tmp', dir=output_file.parent)
    os.close(fd)
    tmp_path = Path(tmp_name)
    try:
        validated.to_csv(tmp_path, index=False, lineterminator='\n')
        os.replace(tmp_path, output_file)
    except BaseException:
        tmp_path.unlink(missing_ok=True)
        raise

    print(f'\n  ✓ Saved {len(validated):,} rows -> {output_file}')
    return output_file


def build_cleaned_collisions(config: PipelineConfig):
    """
    Run load -> normalize -> validate -> write

    Returns:
        NormalizationSummary for the run

    Raises:
        SourceUnavailableError: Before anything is written
    """
    raw_df = load_raw_collisions(config.raw_path)

    print(f'\n{"="*80}')
    print('STEP 2: NORMALIZING RECORDS')
    print(f'{"="*80}\n')

    records = raw_df.to_dict('records')
    if config.batch_size or config.workers > 1:
        batch_size = config.batch_size or DEFAULT_BATCH_SIZE
        print(f'  Batches of {batch_size:,} rows, {config.workers} worker(s)')
        result = normalize_in_batches(records, batch_size=batch_size, max_workers=config.workers)
    else:
        result = normalize(records)

    result.summary.print_report()
    if result.summary.kept == 0:
        print('\n  ⚠️  No pedestrian or cyclist records survived; writing header-only table')

    write_cleaned_collisions(records_to_frame(result.records), config.cleaned_path)

    return result.summary


def main(argv=None):
    parser = argparse.ArgumentParser(
        description='Build the cleaned pedestrian/cyclist KSI collision table',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Default bronze -> silver locations
  python build_cleaned_collisions.py

  # Explicit files
  python build_cleaned_collisions.py --input data/ksi.csv --output out/cleaned.csv

  # Row-parallel normalization
  python build_cleaned_collisions.py --batch-size 20000 --workers 4
        """
    )

    parser.add_argument('--input', type=str, default=None,
                       help='Path to raw KSI CSV')
    parser.add_argument('--output', type=str, default=None,
                       help='Path for the cleaned CSV (overwritten)')
    parser.add_argument('--batch-size', type=int, default=None,
                       help='Normalize in batches of this many rows')
    parser.add_argument('--workers', type=int, default=None,
                       help='Worker processes for batched normalization (default: 1)')

    args = parser.parse_args(argv)

    config = PipelineConfig.from_defaults(
        raw_path=args.input,
        cleaned_path=args.output,
        batch_size=args.batch_size,
        workers=args.workers,
    )

    print(f'\n{"="*80}')
    print('KSI PEDESTRIAN / CYCLIST COLLISION CLEANER')
    print(f'{"="*80}')
    print(f'\nTimestamp: {datetime.now().strftime("%Y-%m-%d %H:%M:%S")}')
    print(f'Raw file:    {config.raw_path}')
    print(f'Output file: {config.cleaned_path}')

    try:
        summary = build_cleaned_collisions(config)
    except SourceUnavailableError as e:
        print(f'\n❌ {e}')
        print('   No output written.')
        return 1

    print(f'\n✅ Cleaned table: {summary.kept:,} kept / {summary.dropped:,} dropped')
    print(f'   {config.cleaned_path}')
    print()
    return 0


if __name__ == '__main__':
    sys.exit(main())
