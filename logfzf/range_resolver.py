from __future__ import annotations

from collections import defaultdict
from collections.abc import Callable, Sequence
from typing import Optional

from .records import Record

LineTransform = Callable[[str], str]


def get_range_lines(
        lines: Sequence[str],
        start: int,
        end: int,
        sep: str,
        transform: Optional[LineTransform] = None,
) -> str:
    """
    Join lines[start:end] with sep, after clamping the range to the available lines.
    If start is past end, the window becomes the single line just before end. The
    optional transform is applied to the first line only.
    """
    end = max(min(end, len(lines)), 0)
    if start > end:
        start = end - 1
    start = max(start, 0)

    selected = list(lines[start:end])
    if not selected:
        return ""
    if transform is not None:
        selected[0] = transform(selected[0])
    return sep.join(selected)


def skip_columns(n: int) -> Optional[LineTransform]:
    """
    Make a transform that drops the first n whitespace-delimited fields of a line
    (such as a syslog hostname and process name).
    """
    if n <= 0:
        return None

    def _skip(line: str) -> str:
        parts = line.split(maxsplit=n)
        if len(parts) <= n:
            return ""
        return parts[n]

    return _skip


class RangeResolver:
    """
    Assigns each record its content range [start_line, end_line), where end_line is
    the start_line of the next record from the same file in the final newest-first
    order (the same-source record just ahead of it), or the end of the file for the
    newest record of each source.

    Ranges depend on which records survived filtering and truncation, so resolve()
    must run on the final record list.
    """
    def __init__(self, skip_column: int = 0):
        self.first_line_transform = skip_columns(skip_column)

    def resolve(self, records: Sequence[Record]) -> None:
        by_source: dict[str, list[Record]] = defaultdict(list)
        for record in records:
            by_source[record.source_id].append(record)

        for source_records in by_source.values():
            newer: Optional[Record] = None
            for record in source_records:
                record.end_line = newer.start_line if newer is not None else len(record.source)
                record.content = self.display(record)
                newer = record

    def display(self, record: Record) -> str:
        return get_range_lines(
            record.source.lines,
            record.start_line,
            record.end_line,
            " ",
            self.first_line_transform,
        )

    def preview(self, record: Record, height: int) -> str:
        # the preview window runs height lines past the end of the record's range
        return get_range_lines(
            record.source.lines,
            record.start_line,
            record.end_line + max(height, 0),
            "\n",
        )
