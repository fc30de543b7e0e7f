import sys
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parents[1]

if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

import pytest

from chronology.date_math import DateArithmetic
from config import CalendarConfig
from store.codecs import DEFAULT_CALENDAR_TEXT, DEFAULT_EVENT_TEXT, parse_calendar_text
from store.records import InMemoryRecordStore


@pytest.fixture
def earth_config() -> CalendarConfig:
    """Default Gregorian-like calendar: epoch Sunday, November 6, 2022."""
    return parse_calendar_text(DEFAULT_CALENDAR_TEXT)


@pytest.fixture
def dates(earth_config: CalendarConfig) -> DateArithmetic:
    return DateArithmetic(earth_config)


@pytest.fixture
def default_event_text() -> str:
    return DEFAULT_EVENT_TEXT


@pytest.fixture
def store() -> InMemoryRecordStore:
    return InMemoryRecordStore()
