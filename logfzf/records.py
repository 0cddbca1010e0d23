from __future__ import annotations

from collections.abc import Iterable, Sequence
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass
from datetime import datetime
import logging
from operator import attrgetter
from typing import Optional

from .file_reading import Source, default_worker_count
from .timestamp_wrapper import TimestampDetector

logger = logging.getLogger(__name__)

DEFAULT_CHUNK_SIZE = 5000


@dataclass(eq=False)
class Record:
    """
    A detected timestamp at start_line of source. end_line and content are filled in
    by the RangeResolver once the final record order is known.
    """
    timestamp: datetime
    source: Source
    start_line: int
    end_line: Optional[int] = None
    content: str = ""

    @property
    def source_id(self) -> str:
        return self.source.source_id

    def sort_key(self) -> tuple[datetime, int]:
        return self.timestamp, self.start_line


def _scan_lines(source: Source, detector: TimestampDetector, offset: int, lines: Sequence[str]) -> list[Record]:
    records = []
    for line_number, line in enumerate(lines, start=offset):
        timestamp = detector.detect(line)
        if timestamp is not None:
            records.append(Record(timestamp, source, line_number))
    return records


class RecordBuilder:
    """
    Scans sources for timestamped lines. Large sources are split into chunks that are
    scanned in a worker pool; chunk results are collected in completion order and
    put back in line order afterwards.
    """
    def __init__(
            self,
            detector: TimestampDetector,
            max_workers: Optional[int] = None,
            chunk_size: int = DEFAULT_CHUNK_SIZE,
    ):
        self.detector = detector
        self.max_workers = max_workers or default_worker_count()
        self.chunk_size = max(1, chunk_size)

    def build(self, source: Source) -> list[Record]:
        return _scan_lines(source, self.detector, 0, source.lines)

    def build_all(self, sources: Iterable[Source]) -> list[list[Record]]:
        sources = list(sources)
        partial_results: list[list[Record]] = [[] for _ in sources]

        with ThreadPoolExecutor(max_workers=self.max_workers) as executor:
            futures = {}
            for source_index, source in enumerate(sources):
                for offset in range(0, len(source), self.chunk_size):
                    chunk = source.lines[offset:offset + self.chunk_size]
                    future = executor.submit(_scan_lines, source, self.detector, offset, chunk)
                    futures[future] = source_index

            for future in as_completed(futures):
                partial_results[futures[future]].extend(future.result())

        for source, records in zip(sources, partial_results):
            records.sort(key=attrgetter("start_line"))
            logger.debug("found %d timestamped lines in %s", len(records), source.source_id)
        return partial_results
