#!/usr/bin/env python3
"""
Collision Record Normalizer

Turns raw Toronto KSI collision rows into the pedestrian/cyclist analysis table.

Rules:
- Only INVTYPE Pedestrian or Cyclist survives; everything else is dropped
- DATE + TIME parsed into collision_date / collision_time (year and hour derived)
- RDSFCOND -> weather (Clear / Adverse / Unknown)
- VISIBILITY, LIGHT -> fixed categories with an explicit Unknown
- INJURY blank -> "None"
- A record missing DATE, TIME or INVTYPE, or with an unparsable date/time,
  is dropped and counted, never partially cleaned

Usage:
    from data_engineering.clean.normalizer import normalize, filter_and_map

    result = normalize(raw_df.to_dict('records'))
    result.summary.print_report()
    cleaned = result.records
"""

from concurrent.futures import ProcessPoolExecutor
from dataclasses import dataclass
from datetime import date, datetime, time
from enum import Enum
from typing import Iterable, List, Mapping, Optional

import pandas as pd

from data_engineering.clean.errors import MissingFieldError, ParseError


# ============================================================================
# RAW / CLEANED COLUMNS
# ============================================================================

# Raw KSI headers (upper-cased on load)
DATE_COL = 'DATE'
TIME_COL = 'TIME'
ACCLASS_COL = 'ACCLASS'
ROAD_SURFACE_COL = 'RDSFCOND'
VISIBILITY_COL = 'VISIBILITY'
LIGHT_COL = 'LIGHT'
INJURY_COL = 'INJURY'
INVTYPE_COL = 'INVTYPE'
INITDIR_COL = 'INITDIR'
NEIGHBOURHOOD_COL = 'NEIGHBOURHOOD_158'
DIVISION_COL = 'DIVISION'

RAW_COLUMNS = [
    DATE_COL, TIME_COL, ACCLASS_COL, ROAD_SURFACE_COL, VISIBILITY_COL,
    LIGHT_COL, INJURY_COL, INVTYPE_COL, INITDIR_COL, NEIGHBOURHOOD_COL,
    DIVISION_COL,
]

REQUIRED_COLUMNS = [DATE_COL, TIME_COL, INVTYPE_COL]

CLEANED_COLUMNS = [
    'collision_date',
    'collision_year',
    'collision_time',
    'hour',
    'weather',
    'visibility',
    'light',
    'injury',
    'invtype',
    'neighbourhood',
]

NO_INJURY = 'None'
UNKNOWN_NEIGHBOURHOOD = 'Unknown'

DATE_FORMAT = '%Y-%m-%d'
TIMESTAMP_FORMAT = '%Y-%m-%d %H:%M:%S'


# ============================================================================
# CATEGORIES
# ============================================================================

class Weather(str, Enum):
    CLEAR = 'Clear'
    ADVERSE = 'Adverse'
    UNKNOWN = 'Unknown'


class Visibility(str, Enum):
    CLEAR = 'Clear'
    RAIN = 'Rain'
    SNOW = 'Snow'
    FOG = 'Fog'
    UNKNOWN = 'Unknown'


class Light(str, Enum):
    DAYLIGHT = 'Daylight'
    DARK = 'Dark'
    DAWN = 'Dawn'
    DUSK = 'Dusk'
    UNKNOWN = 'Unknown'


class InvolvementType(str, Enum):
    PEDESTRIAN = 'Pedestrian'
    CYCLIST = 'Cyclist'


WEATHER_VALUES = [w.value for w in Weather]
VISIBILITY_VALUES = [v.value for v in Visibility]
LIGHT_VALUES = [l.value for l in Light]
INVTYPE_VALUES = [i.value for i in InvolvementType]

CLEAR_SURFACE_KEYWORDS = ('dry',)
ADVERSE_SURFACE_KEYWORDS = ('wet', 'snow', 'ice', 'slush')

VISIBILITY_MAP = {
    'clear': Visibility.CLEAR,
    'rain': Visibility.RAIN,
    'freezing rain': Visibility.RAIN,
    'snow': Visibility.SNOW,
    'drifting snow': Visibility.SNOW,
    'fog': Visibility.FOG,
    'fog, mist, smoke, dust': Visibility.FOG,
}

LIGHT_MAP = {
    'daylight': Light.DAYLIGHT,
    'dark': Light.DARK,
    'dawn': Light.DAWN,
    'dusk': Light.DUSK,
}

INVTYPE_MAP = {
    'pedestrian': InvolvementType.PEDESTRIAN,
    'cyclist': InvolvementType.CYCLIST,
}


# ============================================================================
# RECORD TYPES
# ============================================================================

@dataclass(frozen=True)
class CleanedCollisionRecord:
    collision_date: date
    collision_year: int
    collision_time: datetime
    hour: int
    weather: Weather
    visibility: Visibility
    light: Light
    injury: str
    invtype: InvolvementType
    neighbourhood: str

    def as_row(self) -> dict:
        """CSV-ready values keyed by output column"""
        return {
            'collision_date': self.collision_date.strftime(DATE_FORMAT),
            'collision_year': self.collision_year,
            'collision_time': self.collision_time.strftime(TIMESTAMP_FORMAT),
            'hour': self.hour,
            'weather': self.weather.value,
            'visibility': self.visibility.value,
            'light': self.light.value,
            'injury': self.injury,
            'invtype': self.invtype.value,
            'neighbourhood': self.neighbourhood,
        }


@dataclass(frozen=True)
class NormalizationSummary:
    """Kept vs. dropped counts for one normalization pass"""

    input_count: int = 0
    kept: int = 0
    dropped_invtype: int = 0
    dropped_missing_field: int = 0
    dropped_parse_error: int = 0

    @property
    def dropped(self) -> int:
        return self.dropped_invtype + self.dropped_missing_field + self.dropped_parse_error

    def __add__(self, other: 'NormalizationSummary') -> 'NormalizationSummary':
        return NormalizationSummary(
            input_count=self.input_count + other.input_count,
            kept=self.kept + other.kept,
            dropped_invtype=self.dropped_invtype + other.dropped_invtype,
            dropped_missing_field=self.dropped_missing_field + other.dropped_missing_field,
            dropped_parse_error=self.dropped_parse_error + other.dropped_parse_error,
        )

    def print_report(self):
        """Print kept/dropped breakdown"""
        kept_pct = self.kept / self.input_count * 100 if self.input_count else 0.0
        print(f'  Input records:              {self.input_count:8,}')
        print(f'  ✓ Kept (pedestrian/cyclist): {self.kept:7,} ({kept_pct:5.1f}%)')
        print(f'  Dropped:                    {self.dropped:8,}')
        print(f'    - other involvement type: {self.dropped_invtype:8,}')
        print(f'    - missing DATE/TIME/INVTYPE: {self.dropped_missing_field:5,}')
        print(f'    - unparsable date/time:   {self.dropped_parse_error:8,}')


@dataclass(frozen=True)
class NormalizationResult:
    records: List[CleanedCollisionRecord]
    summary: NormalizationSummary


# ============================================================================
# FIELD PARSERS
# ============================================================================

# DATE values may carry a time-of-day suffix ("2015/06/01 05:00:00+00"); only
# the leading date token is parsed
DATE_FORMATS = ('%Y-%m-%d', '%Y/%m/%d', '%m/%d/%Y')
TIME_FORMATS = ('%H:%M', '%H:%M:%S')
KSI_TIME_FORMAT = '%H%M'  # integer clock form, zero-padded to 4 digits

# Newer OCC_DATE exports hold Unix epoch seconds or milliseconds
EPOCH_MIN_DIGITS = 9
EPOCH_MS_THRESHOLD = 10 ** 11


def _clean_text(value) -> str:
    """Stripped string; None/NaN become ''"""
    if not isinstance(value, str) and pd.isna(value):
        return ''
    return str(value).strip()


def _is_digits(text: str) -> bool:
    return text.isascii() and text.isdigit()


def _first_matching_format(text: str, formats) -> Optional[pd.Timestamp]:
    """Timestamp from the first format pandas accepts, else None"""
    for fmt in formats:
        try:
            parsed = pd.to_datetime(text, format=fmt, errors='raise')
        except (ValueError, OverflowError):
            continue
        if not pd.isna(parsed):
            return parsed
    return None


def parse_date(raw_date) -> date:
    """
    Parse a KSI DATE value into a calendar date

    Accepts YYYY-MM-DD, YYYY/MM/DD and M/D/YYYY, each optionally followed by
    a time-of-day suffix that is ignored, and Unix epoch seconds or
    milliseconds (9+ digits).

    Raises:
        ParseError: If no format matches or the date is impossible
    """
    text = _clean_text(raw_date)

    if _is_digits(text) and len(text) >= EPOCH_MIN_DIGITS:
        number = int(text)
        unit = 'ms' if number >= EPOCH_MS_THRESHOLD else 's'
        try:
            return pd.to_datetime(number, unit=unit, errors='raise').date()
        except (ValueError, OverflowError):
            raise ParseError('date', raw_date) from None

    head = text.split()[0].split('T')[0] if text else ''
    parsed = _first_matching_format(head, DATE_FORMATS) if head else None
    if parsed is None:
        raise ParseError('date', raw_date)
    return parsed.date()


def parse_time(raw_time) -> time:
    """
    Parse a KSI TIME value

    Accepts H:MM, HH:MM, HH:MM:SS and the integer clock form HHMM
    (236 -> 02:36, 5 -> 00:05).

    Raises:
        ParseError: If no format matches or the time is out of range
    """
    text = _clean_text(raw_time)

    if _is_digits(text):
        if len(text) > 4:
            raise ParseError('time', raw_time)
        parsed = _first_matching_format(text.zfill(4), (KSI_TIME_FORMAT,))
    else:
        parsed = _first_matching_format(text, TIME_FORMATS) if text else None

    if parsed is None:
        raise ParseError('time', raw_time)
    return parsed.time()


def parse_datetime(raw_date, raw_time) -> datetime:
    """Combine DATE and TIME into one timestamp (ParseError on either)"""
    return datetime.combine(parse_date(raw_date), parse_time(raw_time))


# ============================================================================
# CATEGORICAL NORMALIZERS (never fail)
# ============================================================================

def classify_weather(road_surface_text) -> Weather:
    """Road surface condition -> Clear / Adverse / Unknown"""
    text = _clean_text(road_surface_text).lower()
    if not text:
        return Weather.UNKNOWN
    if any(keyword in text for keyword in CLEAR_SURFACE_KEYWORDS):
        return Weather.CLEAR
    if any(keyword in text for keyword in ADVERSE_SURFACE_KEYWORDS):
        return Weather.ADVERSE
    return Weather.UNKNOWN


def normalize_visibility(text) -> Visibility:
    key = ' '.join(_clean_text(text).lower().split())
    return VISIBILITY_MAP.get(key, Visibility.UNKNOWN)


def normalize_light(text) -> Light:
    # "Dark, artificial" and friends collapse onto the base condition
    key = _clean_text(text).lower().split(',')[0].strip()
    return LIGHT_MAP.get(key, Light.UNKNOWN)


def fill_injury(text) -> str:
    return _clean_text(text) or NO_INJURY


def normalize_invtype(text) -> Optional[InvolvementType]:
    """Pedestrian / Cyclist, or None for every other involvement type"""
    return INVTYPE_MAP.get(_clean_text(text).lower())


# ============================================================================
# RECORD-LEVEL TRANSFORM
# ============================================================================

def _required(raw: Mapping, column: str) -> str:
    value = _clean_text(raw.get(column))
    if not value:
        raise MissingFieldError(column)
    return value


def normalize_record(raw: Mapping) -> Optional[CleanedCollisionRecord]:
    """
    Clean one raw record

    Returns:
        The cleaned record, or None if the involvement type is filtered out

    Raises:
        MissingFieldError: DATE, TIME or INVTYPE absent
        ParseError: DATE or TIME unparsable
    """
    invtype = normalize_invtype(_required(raw, INVTYPE_COL))
    if invtype is None:
        return None

    collision_time = parse_datetime(_required(raw, DATE_COL), _required(raw, TIME_COL))

    return CleanedCollisionRecord(
        collision_date=collision_time.date(),
        collision_year=collision_time.year,
        collision_time=collision_time,
        hour=collision_time.hour,
        weather=classify_weather(raw.get(ROAD_SURFACE_COL)),
        visibility=normalize_visibility(raw.get(VISIBILITY_COL)),
        light=normalize_light(raw.get(LIGHT_COL)),
        injury=fill_injury(raw.get(INJURY_COL)),
        invtype=invtype,
        neighbourhood=_clean_text(raw.get(NEIGHBOURHOOD_COL)) or UNKNOWN_NEIGHBOURHOOD,
    )


def normalize(records: Iterable[Mapping]) -> NormalizationResult:
    """Single pass over raw records; output keeps input order"""
    cleaned = []
    input_count = 0
    dropped_invtype = 0
    dropped_missing = 0
    dropped_parse = 0

    for raw in records:
        input_count += 1
        try:
            record = normalize_record(raw)
        except MissingFieldError:
            dropped_missing += 1
            continue
        except ParseError:
            dropped_parse += 1
            continue

        if record is None:
            dropped_invtype += 1
            continue
        cleaned.append(record)

    summary = NormalizationSummary(
        input_count=input_count,
        kept=len(cleaned),
        dropped_invtype=dropped_invtype,
        dropped_missing_field=dropped_missing,
        dropped_parse_error=dropped_parse,
    )
    return NormalizationResult(records=cleaned, summary=summary)


def filter_and_map(records: Iterable[Mapping]) -> List[CleanedCollisionRecord]:
    """Pedestrian/cyclist records only, with all derived fields populated"""
    return normalize(records).records


def normalize_in_batches(records: Iterable[Mapping], batch_size: int = 50000,
                         max_workers: int = 1) -> NormalizationResult:
    """
    Normalize in independent batches (for very large extracts)

    Each batch produces its own partial result; partials are concatenated in
    input order, so the output matches normalize() exactly.

    Args:
        records: Raw records
        batch_size: Rows per batch
        max_workers: >1 runs batches in a process pool
    """
    if batch_size < 1:
        raise ValueError(f'batch_size must be positive, got {batch_size}')

    records = list(records)
    batches = [records[i:i + batch_size] for i in range(0, len(records), batch_size)]

    if max_workers > 1 and len(batches) > 1:
        with ProcessPoolExecutor(max_workers=max_workers) as pool:
            partials = list(pool.map(normalize, batches))
    else:
        partials = [normalize(batch) for batch in batches]

    cleaned = []
    summary = NormalizationSummary()
    for partial in partials:
        cleaned.extend(partial.records)
        summary = summary + partial.summary

    return NormalizationResult(records=cleaned, summary=summary)
