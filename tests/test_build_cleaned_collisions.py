from dataclasses import replace

import pandas as pd
import pytest

from config.pipeline_config import PipelineConfig
from data_engineering.clean.errors import SourceUnavailableError
from data_engineering.clean.normalizer import CLEANED_COLUMNS, filter_and_map, normalize
from data_engineering.datasets.build_cleaned_collisions import (
    build_cleaned_collisions,
    load_raw_collisions,
    main,
)


def read_output(path):
    return pd.read_csv(path, dtype=str, keep_default_na=False)


class TestLoadRawCollisions:

    def test_retains_known_columns(self, raw_csv):
        df = load_raw_collisions(raw_csv)
        assert 'STREET1' not in df.columns
        assert 'INVTYPE' in df.columns
        assert len(df) == 8
        # Every cell is text, blanks stay blank
        assert df.loc[5, 'TIME'] == ''

    def test_headers_are_case_insensitive(self, tmp_path, make_row):
        path = tmp_path / 'lower.csv'
        row = {k.lower(): v for k, v in make_row().items()}
        pd.DataFrame([row]).to_csv(path, index=False)
        df = load_raw_collisions(path)
        assert df.loc[0, 'INVTYPE'] == 'Pedestrian'

    def test_alias_columns(self, tmp_path, make_row):
        row = make_row()
        row['OCC_DATE'] = row.pop('DATE')
        row['OCC_TIME'] = row.pop('TIME')
        row['NEIGHBOURHOOD'] = row.pop('NEIGHBOURHOOD_158')
        del row['HOOD_158']
        path = tmp_path / 'aliases.csv'
        pd.DataFrame([row]).to_csv(path, index=False)

        df = load_raw_collisions(path)
        assert df.loc[0, 'DATE'] == '2015/06/01 05:00:00+00'
        assert df.loc[0, 'NEIGHBOURHOOD_158'] == 'Harbourfront-CityPlace'

    def test_epoch_millisecond_occ_date_is_kept(self, tmp_path, make_row):
        row = make_row()
        del row['DATE']
        row['OCC_DATE'] = '1433131200000'
        path = tmp_path / 'epoch.csv'
        pd.DataFrame([row]).to_csv(path, index=False)

        result = normalize(load_raw_collisions(path).to_dict('records'))

        assert result.summary.kept == 1
        assert result.summary.dropped_parse_error == 0
        assert result.records[0].collision_time.isoformat() == '2015-06-01T08:30:00'

    def test_area_code_is_not_used_as_neighbourhood(self, tmp_path, make_row):
        row = make_row()
        del row['NEIGHBOURHOOD_158']
        path = tmp_path / 'hood_code.csv'
        pd.DataFrame([row]).to_csv(path, index=False)

        df = load_raw_collisions(path)

        assert 'NEIGHBOURHOOD_158' not in df.columns
        assert filter_and_map(df.to_dict('records'))[0].neighbourhood == 'Unknown'

    def test_semicolon_delimiter(self, tmp_path, raw_rows):
        path = tmp_path / 'semi.csv'
        pd.DataFrame(raw_rows).to_csv(path, index=False, sep=';')
        assert len(load_raw_collisions(path, sep=';')) == 8

    def test_missing_file(self, tmp_path):
        with pytest.raises(SourceUnavailableError):
            load_raw_collisions(tmp_path / 'nope.csv')

    def test_empty_file(self, tmp_path):
        path = tmp_path / 'empty.csv'
        path.write_text('')
        with pytest.raises(SourceUnavailableError):
            load_raw_collisions(path)

    def test_header_only_file(self, tmp_path):
        path = tmp_path / 'header.csv'
        path.write_text('DATE,TIME,INVTYPE\n')
        with pytest.raises(SourceUnavailableError, match='no records'):
            load_raw_collisions(path)

    def test_missing_required_column(self, tmp_path, raw_rows):
        path = tmp_path / 'no_invtype.csv'
        pd.DataFrame(raw_rows).drop(columns=['INVTYPE']).to_csv(path, index=False)
        with pytest.raises(SourceUnavailableError, match='INVTYPE'):
            load_raw_collisions(path)


class TestBuildCleanedCollisions:

    def test_end_to_end(self, pipeline_config):
        summary = build_cleaned_collisions(pipeline_config)

        assert summary.kept == 4
        assert summary.dropped == 4

        df = read_output(pipeline_config.cleaned_path)
        assert list(df.columns) == CLEANED_COLUMNS
        assert df['invtype'].tolist() == ['Pedestrian', 'Cyclist', 'Pedestrian', 'Cyclist']

        first = df.iloc[0]
        assert first['collision_date'] == '2015-06-01'
        assert first['collision_year'] == '2015'
        assert first['collision_time'] == '2015-06-01 08:30:00'
        assert first['hour'] == '8'
        assert first['weather'] == 'Adverse'
        assert first['visibility'] == 'Rain'
        assert first['light'] == 'Daylight'
        assert first['injury'] == 'Major'

        cyclist = df.iloc[1]
        assert cyclist['weather'] == 'Clear'
        assert cyclist['light'] == 'Dark'
        assert cyclist['injury'] == 'None'
        assert cyclist['hour'] == '17'

        early = df.iloc[2]
        assert early['collision_time'] == '2008-01-14 00:05:00'
        assert early['weather'] == 'Adverse'
        assert early['light'] == 'Dawn'

        blank = df.iloc[3]
        assert blank['weather'] == 'Unknown'
        assert blank['visibility'] == 'Unknown'
        assert blank['light'] == 'Unknown'
        assert blank['neighbourhood'] == 'Unknown'

    def test_reruns_are_byte_identical(self, pipeline_config):
        build_cleaned_collisions(pipeline_config)
        first = pipeline_config.cleaned_path.read_bytes()
        build_cleaned_collisions(pipeline_config)
        assert pipeline_config.cleaned_path.read_bytes() == first

    def test_batched_run_matches_single_pass(self, pipeline_config, tmp_path):
        build_cleaned_collisions(pipeline_config)
        batched = replace(pipeline_config, cleaned_path=tmp_path / 'batched.csv', batch_size=3)
        build_cleaned_collisions(batched)
        assert batched.cleaned_path.read_bytes() == pipeline_config.cleaned_path.read_bytes()

    def test_overwrites_previous_output(self, pipeline_config):
        pipeline_config.cleaned_path.parent.mkdir(parents=True)
        pipeline_config.cleaned_path.write_text('stale,output\n1,2\n3,4\n5,6\n7,8\n9,10\n')

        build_cleaned_collisions(pipeline_config)

        df = read_output(pipeline_config.cleaned_path)
        assert list(df.columns) == CLEANED_COLUMNS
        assert len(df) == 4

    def test_no_survivors_writes_header_only(self, tmp_path, make_row):
        raw = tmp_path / 'drivers.csv'
        pd.DataFrame([make_row(INVTYPE='Driver'), make_row(INVTYPE='Passenger')]).to_csv(raw, index=False)
        out = tmp_path / 'cleaned.csv'
        config = replace_paths(raw, out)

        summary = build_cleaned_collisions(config)

        assert summary.kept == 0
        assert summary.dropped_invtype == 2
        assert out.read_text() == ','.join(CLEANED_COLUMNS) + '\n'

    def test_unavailable_source_writes_nothing(self, tmp_path):
        out = tmp_path / 'cleaned.csv'
        config = replace_paths(tmp_path / 'missing.csv', out)

        with pytest.raises(SourceUnavailableError):
            build_cleaned_collisions(config)
        assert not out.exists()

    def test_unavailable_source_keeps_previous_output(self, tmp_path):
        out = tmp_path / 'cleaned.csv'
        out.write_text('previous\n')
        config = replace_paths(tmp_path / 'missing.csv', out)

        with pytest.raises(SourceUnavailableError):
            build_cleaned_collisions(config)
        assert out.read_text() == 'previous\n'
        assert list(tmp_path.glob('*.tmp')) == []


def replace_paths(raw_path, cleaned_path):
    return PipelineConfig(raw_path=raw_path, cleaned_path=cleaned_path)


def test_main_success(raw_csv, tmp_path):
    out = tmp_path / 'cli.csv'
    assert main(['--input', str(raw_csv), '--output', str(out)]) == 0
    assert len(read_output(out)) == 4


def test_main_missing_input(tmp_path, capsys):
    out = tmp_path / 'cli.csv'
    assert main(['--input', str(tmp_path / 'missing.csv'), '--output', str(out)]) == 1
    assert 'Source unavailable' in capsys.readouterr().out
    assert not out.exists()
