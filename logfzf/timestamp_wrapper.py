from __future__ import annotations

from collections.abc import Callable
from datetime import datetime, timedelta
from functools import partial
import itertools
import re
from typing import Optional

from .exceptions import InvalidDurationError


strip_escape_sequences = partial(re.compile("\x1b" + r"\[\d+(;\d+)*m").sub, "")

Clock = Callable[[], datetime]


def _to_local_naive(dt: datetime) -> datetime:
    # records from different sources must all compare on one naive local-time axis
    if dt.tzinfo is not None:
        return dt.astimezone().replace(tzinfo=None)
    return dt


def _parse_iso(s: str) -> datetime:
    """
    Parse "YYYY-MM-DD[T ]HH:MM:SS[.,]fff[Z|+hh:mm|+hhmm]" variants, normalizing the
    pieces that datetime.fromisoformat does not accept on older Pythons.
    """
    m = re.fullmatch(
        r"(\d{4}-\d{2}-\d{2})[T ](\d{2}:\d{2}:\d{2})(?:[.,](\d{1,6}))?(Z|[+-]\d{2}:?\d{2})?",
        s
    )
    if not m:
        raise ValueError(f"invalid ISO timestamp {s!r}")
    date_part, time_part, fraction, tz = m.groups()
    iso = f"{date_part}T{time_part}"
    if fraction:
        iso += "." + fraction.ljust(6, "0")
    if tz == "Z":
        iso += "+00:00"
    elif tz:
        iso += tz if ":" in tz else f"{tz[:3]}:{tz[3:]}"
    return datetime.fromisoformat(iso)


class TimestampFormat:
    """
    Base class for the timestamp formats that can be detected in a log line. Each
    subclass defines a regex `timestamp_pattern` for the timestamp text, and either a
    `strptime_format` or an override of `str_to_time` to convert it to a datetime.

    Subclasses are tried in definition order, so more specific formats must be
    defined before the formats that would match a prefix of them.
    """
    timestamp_pattern = ""
    strptime_format = ""
    has_year = True
    pattern = ""
    search = staticmethod(lambda s: None)

    custom_format_suffixes = itertools.count(1)

    def __init_subclass__(cls):
        if "pattern" not in cls.__dict__:
            cls.pattern = fr"(?P<timestamp>{cls.timestamp_pattern})"
        cls.search = re.compile(cls.pattern).search

    @classmethod
    def builtin_formats(cls) -> list[type[TimestampFormat]]:
        # custom formats derive from the built-in ones, so only direct subclasses are built-in
        return cls.__subclasses__()

    @classmethod
    def make_custom_formats(cls, custom_timestamp: str) -> list[type[TimestampFormat]]:
        r"""
        Given a regex template with a "(...)" placeholder for the timestamp, create
        TimestampFormat subclasses that match the template, one for each built-in
        timestamp pattern.

        Here are some example log lines and suggested templates:

            Log line                                  Template
            INFO - 2022-01-01 12:34:56 log message    \w+ - (...)
            [2022-01-01 12:34:56|INFO] log message    \[(...)\|
            req=42 at=1694561169 path=/login          at=(...)\s
        """

        # template must include "(...)" placeholder somewhere
        if "(...)" not in custom_timestamp:
            raise ValueError(f"custom timestamp format '{custom_timestamp}' must contain '(...)' placeholder")

        new_formats = []
        for subcls in cls.builtin_formats():
            class_properties = {
                "pattern": custom_timestamp.replace("(...)", fr"(?P<timestamp>{subcls.timestamp_pattern})"),
                "timestamp_pattern": subcls.timestamp_pattern,
            }

            name_suffix = next(cls.custom_format_suffixes)
            try:
                new_format = type(f"Custom{subcls.__name__}_{name_suffix}", (subcls,), class_properties)
            except re.error as exc:
                raise ValueError(f"invalid custom timestamp format {custom_timestamp!r}: {exc}") from exc
            new_formats.append(new_format)
        return new_formats

    def str_to_time(self, s: str) -> datetime:
        return datetime.strptime(s, self.strptime_format)

    def find(self, line: str) -> Optional[tuple[int, str]]:
        """Return (position, timestamp text) of the first match in line, or None."""
        m = self.search(line)
        if m is None:
            return None
        return m.start("timestamp"), m["timestamp"]


class YMDTHMSISO(TimestampFormat):
    # "YYYY-MM-DD HH:MM:SS" or "YYYY-MM-DDTHH:MM:SS", with optional ".fff" or ",fff"
    # fraction and optional "Z" or "+hhmm" zone
    timestamp_pattern = r"\d{4}-\d{2}-\d{2}[T ]\d{2}:\d{2}:\d{2}(?:[.,]\d{1,6})?(?:Z|[+-]\d{2}:?\d{2}\b)?"

    def str_to_time(self, s: str) -> datetime:
        return _parse_iso(s)


class YMDslashHMS(TimestampFormat):
    # "YYYY/MM/DD HH:MM:SS"
    timestamp_pattern = r"\d{4}/\d{2}/\d{2} \d{2}:\d{2}:\d{2}"
    strptime_format = "%Y/%m/%d %H:%M:%S"


class YMDHM(TimestampFormat):
    # "YYYY-MM-DD HH:MM"
    timestamp_pattern = r"\d{4}-\d{2}-\d{2}[T ]\d{2}:\d{2}(?!:\d)"

    def str_to_time(self, s: str) -> datetime:
        return datetime.strptime(s.replace("T", " "), "%Y-%m-%d %H:%M")


class HttpServerAccessLog(TimestampFormat):
    # 91.194.60.14 - - [16/Sep/2023:19:05:06 +0000] "GET /index HTTP/1.1" 200 1027
    timestamp_pattern = r"\d{2}/[A-Z][a-z]{2}/\d{4}:\d{2}:\d{2}:\d{2} [+-]\d{4}"
    strptime_format = "%d/%b/%Y:%H:%M:%S %z"


class PythonHttpServerLog(TimestampFormat):
    # ::1 - - [22/Sep/2023 21:58:40] "GET /log1.txt HTTP/1.1" 200 -
    timestamp_pattern = r"\d{2}/[A-Z][a-z]{2}/\d{4} \d{2}:\d{2}:\d{2}"
    strptime_format = "%d/%b/%Y %H:%M:%S"


class BDHMS(TimestampFormat):
    # syslog files with timestamp "mon day hh:mm:ss"
    # (year is omitted, the detector fills in the current year)
    timestamp_pattern = r"\b(?:Jan|Feb|Mar|Apr|May|Jun|Jul|Aug|Sep|Oct|Nov|Dec)\s[\s\d]\d \d{2}:\d{2}:\d{2}"
    strptime_format = "%Y %b %d %H:%M:%S"
    has_year = False

    def str_to_time(self, s: str) -> datetime:
        # parse against a leap year placeholder so that "Feb 29" survives until
        # the real year is known
        return datetime.strptime(f"2000 {s}", self.strptime_format)


class FloatSecondsSinceEpoch(TimestampFormat):
    # "1694561169.550987" or "1694561169.550"
    timestamp_pattern = r"(?<![\d.])\d{10}\.\d+(?![\d.])"

    def str_to_time(self, s: str) -> datetime:
        return datetime.fromtimestamp(float(s))


class MilliSecondsSinceEpoch(TimestampFormat):
    # 13-digit timestamp "1694561169550"
    timestamp_pattern = r"(?<![\d.])\d{13}(?![\d.])"

    def str_to_time(self, s: str) -> datetime:
        return datetime.fromtimestamp(int(s) / 1000)


class SecondsSinceEpoch(TimestampFormat):
    # 10-digit timestamp "1694561169"
    timestamp_pattern = r"(?<![\d.])\d{10}(?![\d.])"

    def str_to_time(self, s: str) -> datetime:
        return datetime.fromtimestamp(int(s))


class TimestampDetector:
    """
    Finds the leftmost recognizable timestamp in a line of text. When several formats
    match at the same position, the earliest-defined (most specific) format wins.

    Detection never raises: a line whose only candidate timestamp fails to convert
    (such as "2023-13-45 99:00:00") is treated as having no timestamp.
    """
    def __init__(self, custom_formats: Optional[list[str]] = None, now: Clock = datetime.now):
        formats: list[type[TimestampFormat]] = []
        for template in custom_formats or []:
            formats.extend(TimestampFormat.make_custom_formats(template))
        formats.extend(TimestampFormat.builtin_formats())
        self.formats = [fmt() for fmt in formats]
        self.now = now

    def detect(self, line: str) -> Optional[datetime]:
        line = strip_escape_sequences(line)

        candidates = []
        for precedence, fmt in enumerate(self.formats):
            found = fmt.find(line)
            if found is not None:
                position, ts_str = found
                candidates.append((position, precedence, fmt, ts_str))

        for _, _, fmt, ts_str in sorted(candidates, key=lambda c: c[:2]):
            try:
                dt = _to_local_naive(fmt.str_to_time(ts_str))
                if not fmt.has_year:
                    dt = dt.replace(year=self.now().year)
            except (ValueError, OverflowError, OSError):
                continue
            return dt
        return None

    __call__ = detect


def parse_relative_time(ts_str: str, now: Clock = datetime.now) -> datetime:
    """
    Convert strings like "15m" into the datetime that is that long ago.
    """
    parts = re.match(r"(\d+)([smhd])$", ts_str, flags=re.IGNORECASE)
    if parts:
        qty, unit = parts.groups()
        seconds = int(qty)
        for unit_type, mult in [("s", 1), ("m", 60), ("h", 60), ("d", 24)]:
            seconds *= mult
            if unit.lower() == unit_type:
                try:
                    return now() - timedelta(seconds=seconds)
                except OverflowError as oe:
                    raise ValueError(f"relative time {ts_str!r} is out of range") from oe

    raise ValueError(f"invalid relative time string {ts_str!r}")


_DURATION_UNITS = {
    "ns": 1e-9,
    "us": 1e-6,
    "µs": 1e-6,
    "ms": 1e-3,
    "s": 1,
    "m": 60,
    "h": 3600,
    "d": 86400,
}
_DURATION_PART = r"(\d+(?:\.\d*)?|\.\d+)(ns|us|µs|ms|s|m|h|d)"


def parse_duration(duration_str: str) -> timedelta:
    """
    Parse a duration such as "90s", "5m", "1h30m", "1.5h" or "250ms" into a timedelta.
    A bare "0" is accepted; any other string without units is rejected.
    """
    s = duration_str.strip()
    sign = -1 if s.startswith("-") else 1
    s = s.lstrip("+-")
    if s == "0":
        return timedelta(0)
    if not s or not re.fullmatch(f"(?:{_DURATION_PART})+", s):
        raise InvalidDurationError(f"invalid duration {duration_str!r}")

    seconds = sum(float(qty) * _DURATION_UNITS[unit] for qty, unit in re.findall(_DURATION_PART, s))
    try:
        return timedelta(seconds=sign * seconds)
    except OverflowError as oe:
        raise InvalidDurationError(f"duration {duration_str!r} is out of range") from oe


def parse_time_bound(bound_str: str, detector: TimestampDetector) -> Optional[datetime]:
    """
    Convert a --before/--after value to a datetime, accepting either a relative
    time ("15m") or any timestamp the detector recognizes. Returns None if neither works.
    """
    try:
        return parse_relative_time(bound_str, now=detector.now)
    except ValueError:
        pass
    # a bare date is a reasonable bound, but not something to detect in a log line
    if re.fullmatch(r"\d{4}-\d{2}-\d{2}", bound_str.strip()):
        try:
            return datetime.strptime(bound_str.strip(), "%Y-%m-%d")
        except ValueError:
            return None
    return detector.detect(bound_str)
