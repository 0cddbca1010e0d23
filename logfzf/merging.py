from __future__ import annotations

from collections.abc import Callable, Iterable
from dataclasses import dataclass
from datetime import datetime
import heapq
import logging
from typing import Optional

from .exceptions import InvalidDurationError, NoRecordsFound
from .records import Record
from .timestamp_wrapper import TimestampDetector, parse_duration, parse_time_bound

logger = logging.getLogger(__name__)

DEFAULT_LIMIT = 10000

RecordPredicate = Callable[[Record], bool]


def merge_records(record_lists: Iterable[list[Record]]) -> list[Record]:
    """
    Merge per-source record lists into one list, newest first. Records with equal
    timestamps are ordered by descending line number, so that records from the same
    source stay in reverse file order.
    """
    # each list is sorted newest-first so that heapq.merge can interleave them
    sorted_lists = [sorted(records, key=Record.sort_key, reverse=True) for records in record_lists]
    return list(heapq.merge(*sorted_lists, key=Record.sort_key, reverse=True))


@dataclass
class PipelineOptions:
    after: Optional[str] = None
    before: Optional[str] = None
    ago: Optional[str] = None
    limit: int = DEFAULT_LIMIT


class RecordPipeline:
    """
    Combines the records of all sources, newest first, and applies the --after,
    --before, --ago and --limit options, in that order.
    """
    def __init__(self, options: PipelineOptions, detector: TimestampDetector):
        self.options = options
        self.detector = detector

    def _bound(self, option_name: str, value: Optional[str]) -> Optional[datetime]:
        if not value:
            return None
        bound = parse_time_bound(value, self.detector)
        if bound is None:
            logger.warning("ignoring --%s %r, not a recognized timestamp", option_name, value)
        return bound

    def filters(self) -> list[tuple[str, RecordPredicate]]:
        filters = []

        after = self._bound("after", self.options.after)
        if after is not None:
            filters.append((f"after {after}", lambda rec: rec.timestamp > after))

        before = self._bound("before", self.options.before)
        if before is not None:
            filters.append((f"before {before}", lambda rec: rec.timestamp < before))

        if self.options.ago:
            try:
                ago = parse_duration(self.options.ago)
            except InvalidDurationError as ide:
                print(f"ago {self.options.ago} is not a valid duration, {ide}")
            else:
                try:
                    cutoff = self.detector.now() - ago
                except OverflowError:
                    print(f"ago {self.options.ago} is not a valid duration, too far in the past")
                else:
                    filters.append((f"ago {self.options.ago}", lambda rec: rec.timestamp > cutoff))

        return filters

    def run(self, record_lists: Iterable[list[Record]]) -> list[Record]:
        records = merge_records(record_lists)
        logger.debug("merged %d records", len(records))

        for description, predicate in self.filters():
            records = [rec for rec in records if predicate(rec)]
            logger.debug("%d records remain after filtering %s", len(records), description)

        if not records:
            raise NoRecordsFound("no logs")

        return records[:max(self.options.limit, 0)]
