import sys
from pathlib import Path

import pandas as pd
import pytest

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from config.pipeline_config import PipelineConfig


def ksi_row(**overrides):
    """One raw KSI person record (headers as in the open-data extract)"""
    row = {
        'INDEX': '3389067',
        'DATE': '2015/06/01 05:00:00+00',
        'TIME': '830',
        'STREET1': 'YONGE ST',
        'ACCLASS': 'Non-Fatal Injury',
        'RDSFCOND': 'Wet',
        'VISIBILITY': 'Rain',
        'LIGHT': 'Daylight',
        'INJURY': 'Major',
        'INVTYPE': 'Pedestrian',
        'INITDIR': 'North',
        'HOOD_158': '165',
        'NEIGHBOURHOOD_158': 'Harbourfront-CityPlace',
        'DIVISION': 'D52',
    }
    row.update(overrides)
    return row


@pytest.fixture
def raw_rows():
    """Mixed extract: 4 kept, 2 other involvement types, 1 missing field, 1 bad date"""
    return [
        ksi_row(),
        ksi_row(INVTYPE='Driver', INJURY='None'),
        ksi_row(INVTYPE='Cyclist', DATE='2019/11/23 05:00:00+00', TIME='1745',
                RDSFCOND='Dry', VISIBILITY='Clear', LIGHT='Dark, artificial',
                INJURY='', NEIGHBOURHOOD_158='Annex'),
        ksi_row(INVTYPE='Passenger'),
        ksi_row(INVTYPE='Pedestrian', DATE='2008/01/14 05:00:00+00', TIME='5',
                RDSFCOND='Loose Snow', VISIBILITY='Snow', LIGHT='Dawn',
                INJURY='Fatal', NEIGHBOURHOOD_158='Annex'),
        ksi_row(TIME=''),
        ksi_row(DATE='not-a-date'),
        ksi_row(INVTYPE='Cyclist', DATE='2019/07/02 05:00:00+00', TIME='2359',
                RDSFCOND='', VISIBILITY='', LIGHT='', INJURY='Minor',
                NEIGHBOURHOOD_158=''),
    ]


@pytest.fixture
def raw_csv(tmp_path, raw_rows):
    path = tmp_path / 'bronze' / 'ksi_collisions.csv'
    path.parent.mkdir(parents=True)
    pd.DataFrame(raw_rows).to_csv(path, index=False)
    return path


@pytest.fixture
def pipeline_config(tmp_path, raw_csv):
    return PipelineConfig(
        raw_path=raw_csv,
        cleaned_path=tmp_path / 'silver' / 'ped_cyclist_collisions.csv',
        summaries_dir=tmp_path / 'gold',
        figures_dir=tmp_path / 'figures',
    )


@pytest.fixture
def make_row():
    return ksi_row
