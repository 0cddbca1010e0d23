import pytest

from datetime import datetime, timedelta

from logfzf.timestamp_wrapper import TimestampDetector
from logfzf.tui.validators import TimestampValidator

FIXED_NOW = datetime(2025, 3, 1, 12, 0, 0)


@pytest.fixture
def validator():
    return TimestampValidator(TimestampDetector(now=lambda: FIXED_NOW))


@pytest.mark.parametrize(
    "value, expected",
    [
        ("2023-07-14 08:00:00", datetime(2023, 7, 14, 8, 0, 0)),
        ("2023-07-14", datetime(2023, 7, 14)),
        ("15m", FIXED_NOW - timedelta(minutes=15)),
        ("90m", FIXED_NOW - timedelta(minutes=90)),
        ("2h", FIXED_NOW - timedelta(hours=2)),
    ]
)
def test_accepted_goto_values(validator, value, expected):
    assert validator.validate(value).is_valid
    assert validator.convert_time_str(value) == expected


@pytest.mark.parametrize("value", ["2h ago", "yesterday", "", "99999999999d", "2023-13-45"])
def test_rejected_goto_values(validator, value):
    result = validator.validate(value)
    assert not result.is_valid
    assert result.failure_descriptions
