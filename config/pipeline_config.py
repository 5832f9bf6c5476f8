"""
Pipeline Run Configuration

Every stage receives one of these instead of looking paths up on its own.
The module-level constants in config.paths only supply the defaults.

Usage:
    from config.pipeline_config import PipelineConfig

    config = PipelineConfig.from_defaults()
    config = PipelineConfig(raw_path=Path('ksi.csv'), cleaned_path=Path('out.csv'))
"""

from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Optional

from config.paths import (
    DEFAULT_RAW_COLLISIONS_FILE,
    DEFAULT_CLEANED_COLLISIONS_FILE,
    TORONTO_GOLD_ANALYTICS,
    FIGURES,
)

# City of Toronto CKAN portal, KSI package
CKAN_BASE_URL = "https://ckan0.cf.opendata.inter.prod-toronto.ca"
KSI_PACKAGE_ID = "motor-vehicle-collisions-involving-killed-or-seriously-injured-persons"


@dataclass(frozen=True)
class PipelineConfig:
    """Inputs and outputs for a single pipeline run"""

    raw_path: Path
    cleaned_path: Path
    summaries_dir: Path = field(default=TORONTO_GOLD_ANALYTICS)
    figures_dir: Path = field(default=FIGURES)
    ckan_base_url: str = CKAN_BASE_URL
    package_id: str = KSI_PACKAGE_ID
    force_download: bool = False
    batch_size: Optional[int] = None
    workers: int = 1

    def __post_init__(self):
        # Accept plain strings from argparse
        for name in ('raw_path', 'cleaned_path', 'summaries_dir', 'figures_dir'):
            object.__setattr__(self, name, Path(getattr(self, name)))
        if self.batch_size is not None and self.batch_size < 1:
            raise ValueError(f'batch_size must be positive, got {self.batch_size}')
        if self.workers < 1:
            raise ValueError(f'workers must be at least 1, got {self.workers}')

    @classmethod
    def from_defaults(cls, **overrides) -> 'PipelineConfig':
        """Config pointing at the standard medallion locations"""
        base = cls(
            raw_path=DEFAULT_RAW_COLLISIONS_FILE,
            cleaned_path=DEFAULT_CLEANED_COLLISIONS_FILE,
        )
        overrides = {k: v for k, v in overrides.items() if v is not None}
        return replace(base, **overrides)
