"""
Data Cleaning Module

Raw KSI rows -> pedestrian/cyclist analysis records
"""

from data_engineering.clean.errors import (
    CollisionDataError,
    MissingFieldError,
    ParseError,
    SourceUnavailableError,
)
from data_engineering.clean.normalizer import (
    CleanedCollisionRecord,
    NormalizationResult,
    NormalizationSummary,
    Weather,
    Visibility,
    Light,
    InvolvementType,
    parse_date,
    parse_time,
    parse_datetime,
    classify_weather,
    normalize_visibility,
    normalize_light,
    fill_injury,
    normalize_invtype,
    normalize_record,
    filter_and_map,
    normalize,
    normalize_in_batches,
)
