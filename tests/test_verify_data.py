import pandas as pd

from scripts.verify_data import check_file_exists, main, verify_raw_collisions


def test_raw_extract_passes(raw_csv):
    assert verify_raw_collisions(raw_csv)


def test_aliased_headers_pass(tmp_path):
    path = tmp_path / 'occ.csv'
    pd.DataFrame([{'OCC_DATE': '2015-06-01', 'OCC_TIME': '830', 'INVTYPE': 'Cyclist'}]).to_csv(path, index=False)
    assert verify_raw_collisions(path)


def test_missing_invtype_fails(tmp_path, capsys):
    path = tmp_path / 'bad.csv'
    pd.DataFrame([{'DATE': '2015-06-01', 'TIME': '830'}]).to_csv(path, index=False)
    assert not verify_raw_collisions(path)
    assert 'INVTYPE' in capsys.readouterr().out


def test_check_file_exists(tmp_path, raw_csv):
    assert check_file_exists(raw_csv, 'extract')
    assert not check_file_exists(tmp_path / 'missing.csv', 'extract')


def test_layout_flag(capsys):
    assert main(['--layout']) == 0
    assert 'Bronze Layer' in capsys.readouterr().out
