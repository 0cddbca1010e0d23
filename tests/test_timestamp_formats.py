import pytest

from datetime import datetime, timedelta, timezone

from logfzf.exceptions import InvalidDurationError
from logfzf.timestamp_wrapper import (
    TimestampDetector,
    parse_duration,
    parse_relative_time,
    parse_time_bound,
)

FIXED_NOW = datetime(2025, 3, 1, 12, 0, 0)


def _local(dt: datetime) -> datetime:
    # aware datetimes are reported as naive local time
    return dt.astimezone().replace(tzinfo=None)


@pytest.fixture
def detector():
    return TimestampDetector(now=lambda: FIXED_NOW)


@pytest.mark.parametrize(
    "line, expected_datetime",
    [
        (
            "2023-07-14 08:00:01,123 INFO   Log",
            datetime(2023, 7, 14, 8, 0, 1, 123000),
        ),
        (
            "2023-07-14 08:00:01.123 INFO   Log",
            datetime(2023, 7, 14, 8, 0, 1, 123000),
        ),
        (
            "2023-07-14T08:00:01.5 INFO   Log",
            datetime(2023, 7, 14, 8, 0, 1, 500000),
        ),
        (
            "2023-07-14 08:00:01 INFO   Log",
            datetime(2023, 7, 14, 8, 0, 1),
        ),
        (
            "2023-07-14 08:00:01Z Log",
            _local(datetime(2023, 7, 14, 8, 0, 1, tzinfo=timezone.utc)),
        ),
        (
            "2023-07-14 08:00:01.123+0200 Log",
            _local(datetime(2023, 7, 14, 8, 0, 1, 123000, tzinfo=timezone(timedelta(hours=2)))),
        ),
        (
            "2023-07-14T08:00:01-05:00 Log",
            _local(datetime(2023, 7, 14, 8, 0, 1, tzinfo=timezone(timedelta(hours=-5)))),
        ),
        (
            "[2023/07/14 08:00:01] Log",
            datetime(2023, 7, 14, 8, 0, 1),
        ),
        (
            "2023-07-14 08:00 job started",
            datetime(2023, 7, 14, 8, 0),
        ),
        (
            '91.194.60.14 - - [16/Sep/2023:19:05:06 +0000] "GET /index HTTP/1.1" 200 1027',
            _local(datetime(2023, 9, 16, 19, 5, 6, tzinfo=timezone.utc)),
        ),
        (
            '::1 - - [22/Sep/2023 21:58:40] "GET /log1.txt HTTP/1.1" 200 -',
            datetime(2023, 9, 22, 21, 58, 40),
        ),
        (
            "1694561169.550987 Log",
            datetime.fromtimestamp(1694561169.550987),
        ),
        (
            "1694561169550 Log",
            datetime.fromtimestamp(1694561169.550),
        ),
        (
            "1694561169 Log",
            datetime.fromtimestamp(1694561169),
        ),
        (
            "worker-3 pid=4242 at 2023-07-14 08:00:01 retrying",
            datetime(2023, 7, 14, 8, 0, 1),
        ),
        (
            "\x1b[32m2023-07-14 08:00:01\x1b[0m INFO colored",
            datetime(2023, 7, 14, 8, 0, 1),
        ),
    ]
)
def test_timestamp_detection(detector, line: str, expected_datetime: datetime):
    print(repr(line))
    assert detector.detect(line) == expected_datetime


@pytest.mark.parametrize(
    "line, expected_datetime",
    [
        ("Jul 14 08:00:01 myhost sshd[12]: session opened", datetime(2025, 7, 14, 8, 0, 1)),
        ("Jul  4 08:00:01 myhost cron[99]: job done", datetime(2025, 7, 4, 8, 0, 1)),
        ("Dec 31 23:59:59 myhost kernel: tick", datetime(2025, 12, 31, 23, 59, 59)),
    ]
)
def test_syslog_timestamp_gets_current_year(detector, line, expected_datetime):
    assert detector.detect(line) == expected_datetime


def test_syslog_leap_day():
    line = "Feb 29 10:00:00 myhost app: leap"
    assert TimestampDetector(now=lambda: datetime(2024, 6, 1)).detect(line) == datetime(2024, 2, 29, 10, 0, 0)
    # no Feb 29 in the current year, so there is no valid timestamp on this line
    assert TimestampDetector(now=lambda: datetime(2025, 6, 1)).detect(line) is None


@pytest.mark.parametrize(
    "line",
    [
        "",
        "just a line",
        "Traceback (most recent call last):",
        '  File "sample.py", line 32, in <module>',
        "2023-13-45 99:00:00 not a real date",
        "version 1.2.3 build 42",
    ]
)
def test_lines_without_timestamp(detector, line):
    assert detector.detect(line) is None


def test_leftmost_timestamp_wins(detector):
    assert detector.detect("2023-07-14 08:00:01 replayed event from 1694561169") == datetime(2023, 7, 14, 8, 0, 1)
    assert detector.detect("1694561169 replay of 2023-07-14 08:00:01") == datetime.fromtimestamp(1694561169)


def test_custom_timestamp_format():
    detector = TimestampDetector([r"ts=(...);"], now=lambda: FIXED_NOW)
    assert detector.detect("level=info ts=Jul 14 08:00:01; msg=ok") == datetime(2025, 7, 14, 8, 0, 1)
    assert detector.detect("level=info ts=2023-07-14 08:00:01; msg=ok") == datetime(2023, 7, 14, 8, 0, 1)


@pytest.mark.parametrize("template", [r"ts=\S+", r"ts=(...)["])
def test_invalid_custom_timestamp_format(template):
    with pytest.raises(ValueError):
        TimestampDetector([template])


@pytest.mark.parametrize(
    "duration_str, expected",
    [
        ("90s", timedelta(seconds=90)),
        ("5m", timedelta(minutes=5)),
        ("2h", timedelta(hours=2)),
        ("1h30m", timedelta(hours=1, minutes=30)),
        ("1.5h", timedelta(hours=1, minutes=30)),
        ("250ms", timedelta(milliseconds=250)),
        ("1d", timedelta(days=1)),
        ("0", timedelta(0)),
        ("-1h", timedelta(hours=-1)),
    ]
)
def test_parse_duration(duration_str, expected):
    assert parse_duration(duration_str) == expected


@pytest.mark.parametrize("duration_str", ["1x", "", "h", "5", "1h x", "ago", "999999999999h", "-999999999999d", "9" * 400 + "s"])
def test_parse_invalid_duration(duration_str):
    with pytest.raises(InvalidDurationError):
        parse_duration(duration_str)


@pytest.mark.parametrize(
    "ts_str, expected",
    [
        ("30s", FIXED_NOW - timedelta(seconds=30)),
        ("15m", FIXED_NOW - timedelta(minutes=15)),
        ("2h", FIXED_NOW - timedelta(hours=2)),
        ("1d", FIXED_NOW - timedelta(days=1)),
    ]
)
def test_parse_relative_time(ts_str, expected):
    assert parse_relative_time(ts_str, now=lambda: FIXED_NOW) == expected


def test_parse_relative_time_rejects_other_strings():
    with pytest.raises(ValueError):
        parse_relative_time("2023-07-14", now=lambda: FIXED_NOW)


@pytest.mark.parametrize(
    "bound_str, expected",
    [
        ("15m", FIXED_NOW - timedelta(minutes=15)),
        ("2023-07-14", datetime(2023, 7, 14)),
        ("2023-07-14 08:00:01", datetime(2023, 7, 14, 8, 0, 1)),
        ("2023-07-14T08:00:01", datetime(2023, 7, 14, 8, 0, 1)),
        ("yesterday-ish", None),
        ("99999999999d", None),
        ("999999999999h", None),
        ("2023-13-45", None),
    ]
)
def test_parse_time_bound(detector, bound_str, expected):
    assert parse_time_bound(bound_str, detector) == expected


@pytest.mark.parametrize("ts_str", ["99999999999d", "999999999999h", "9999999999999999s"])
def test_parse_relative_time_out_of_range(ts_str):
    with pytest.raises(ValueError):
        parse_relative_time(ts_str, now=lambda: FIXED_NOW)
