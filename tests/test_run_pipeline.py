from pathlib import Path

import pytest

from config.paths import DEFAULT_CLEANED_COLLISIONS_FILE, DEFAULT_RAW_COLLISIONS_FILE
from config.pipeline_config import PipelineConfig
from scripts.run_pipeline import main, run_pipeline


def test_run_without_download(pipeline_config):
    summary = run_pipeline(pipeline_config, download=False)

    assert summary.kept == 4
    assert pipeline_config.cleaned_path.exists()
    assert (pipeline_config.summaries_dir / 'counts_by_weather.csv').exists()
    assert len(list(pipeline_config.figures_dir.glob('*.png'))) == 5


def test_clean_only_cli(raw_csv, tmp_path):
    out = tmp_path / 'cleaned.csv'
    code = main([
        '--skip-download', '--clean-only',
        '--input', str(raw_csv), '--output', str(out),
        '--summaries-dir', str(tmp_path / 'gold'),
    ])
    assert code == 0
    assert out.exists()
    assert not (tmp_path / 'gold').exists()


def test_cli_aborts_on_missing_input(tmp_path):
    code = main(['--skip-download', '--input', str(tmp_path / 'none.csv'),
                 '--output', str(tmp_path / 'cleaned.csv')])
    assert code == 1
    assert not (tmp_path / 'cleaned.csv').exists()


class TestPipelineConfig:

    def test_defaults(self):
        config = PipelineConfig.from_defaults()
        assert config.raw_path == DEFAULT_RAW_COLLISIONS_FILE
        assert config.cleaned_path == DEFAULT_CLEANED_COLLISIONS_FILE
        assert config.workers == 1
        assert config.batch_size is None

    def test_overrides_skip_none(self):
        config = PipelineConfig.from_defaults(raw_path='a.csv', cleaned_path=None, workers=3)
        assert config.raw_path == Path('a.csv')
        assert config.cleaned_path == DEFAULT_CLEANED_COLLISIONS_FILE
        assert config.workers == 3

    @pytest.mark.parametrize('kwargs', [{'batch_size': 0}, {'workers': 0}])
    def test_rejects_bad_parallelism(self, kwargs):
        with pytest.raises(ValueError):
            PipelineConfig.from_defaults(**kwargs)
