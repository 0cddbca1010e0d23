from datetime import datetime

from textual.validation import Validator, ValidationResult

from ..timestamp_wrapper import TimestampDetector, parse_time_bound


class TimestampValidator(Validator):
    """Accepts anything parse_time_bound can turn into a datetime."""
    def __init__(self, detector: TimestampDetector):
        super().__init__("Not a recognized timestamp")
        self.detector = detector

    def convert_time_str(self, s: str) -> datetime:
        ts = parse_time_bound(s, self.detector)
        if ts is None:
            raise ValueError(f"no timestamp or relative time found in {s!r}")
        return ts

    def validate(self, value: str) -> ValidationResult:
        try:
            self.convert_time_str(value)
        except ValueError as ve:
            return self.failure(str(ve).capitalize())
        return self.success()
