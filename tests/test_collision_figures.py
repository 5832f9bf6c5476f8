import pandas as pd

from analysis.collision_summaries import load_cleaned
from config.pipeline_config import PipelineConfig
from analysis.reports.collision_figures import generate_figures, make_figures
from data_engineering.datasets.build_cleaned_collisions import build_cleaned_collisions


def test_generate_figures(pipeline_config):
    build_cleaned_collisions(pipeline_config)
    paths = generate_figures(pipeline_config)

    assert len(paths) == 5
    for p in paths:
        assert p.suffix == '.png'
        assert p.stat().st_size > 0


def test_empty_table_makes_no_figures(tmp_path, make_row):
    raw = tmp_path / 'drivers.csv'
    pd.DataFrame([make_row(INVTYPE='Driver')]).to_csv(raw, index=False)

    config = PipelineConfig(raw_path=raw, cleaned_path=tmp_path / 'cleaned.csv')
    build_cleaned_collisions(config)

    out = tmp_path / 'figures'
    assert make_figures(load_cleaned(config.cleaned_path), out) == []
    assert out.is_dir()
