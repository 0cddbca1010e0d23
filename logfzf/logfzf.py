#
# logfzf.py
#
# Utility for fuzzy-searching the timestamped records of one or more log sources,
# and opening the selected record in a viewer.
#

import argparse
from datetime import datetime
import logging
import sys
from typing import Optional, TextIO

import littletable as lt

from . import __version__
from .exceptions import LogFzfError, NoRecordsFound, SelectorError
from .file_reading import SourceSet, capture_commands, capture_stdin
from .interactive_viewing import RecordSelectorApp
from .launcher import launch_editor, reattach_terminal
from .log_setup import setup_logging
from .merging import DEFAULT_LIMIT, PipelineOptions, RecordPipeline
from .range_resolver import RangeResolver
from .records import Record, RecordBuilder
from .timestamp_wrapper import TimestampDetector

logger = logging.getLogger(__name__)


def make_argument_parser():
    epilog_notes = """
    Records run from a line containing a timestamp up to the next such line in the same
    source. Lines read from standard input (when it is not a terminal) are saved to a temp
    file and browsed like any other source.

    --after and --before accept any timestamp format that logfzf detects in log lines, a
    bare YYYY-MM-DD date, or a relative time such as "15m" for "15 minutes ago". Valid
    units are "s", "m", "h", and "d" for seconds, minutes, hours, or days. --ago takes a
    duration such as "90s", "5m" or "1h30m".
    """

    parser = argparse.ArgumentParser(prog="logfzf", epilog=epilog_notes)
    parser.add_argument("files", nargs="*", help="log files to browse")
    parser.add_argument(
        "--command", "-c",
        action="append",
        default=[],
        help="shell command whose output is browsed as another source (may be repeated)",
    )
    parser.add_argument(
        "--temp-file", "-t",
        dest="temp_file",
        default="tmp",
        help="file name prefix for temp files holding command output and stdin (default: %(default)s)",
    )
    parser.add_argument(
        "--temp-dir",
        dest="temp_dir",
        default="/tmp",
        help="directory for temp files (default: %(default)s)",
    )
    parser.add_argument("--editor", default="less", help="viewer run as 'EDITOR +LINE PATH' (default: %(default)s)")
    parser.add_argument("--before", help="only show records before this time")
    parser.add_argument("--after", help="only show records after this time")
    parser.add_argument("--ago", help="only show records newer than this duration, such as 5m or 2h")
    parser.add_argument(
        "--skip-column",
        dest="skip_column",
        type=int,
        default=0,
        help="number of leading whitespace-delimited fields to hide in the record list",
    )
    parser.add_argument(
        "--limit", "-l",
        type=int,
        default=DEFAULT_LIMIT,
        help="maximum number of records, newest first (default: %(default)s)",
    )
    parser.add_argument(
        "--encoding", "-enc",
        type=str,
        default=sys.getfilesystemencoding(),
        help="encoding to use when reading log files (defaults to the system default encoding)",
    )
    parser.add_argument(
        "--timestamp-format",
        dest="timestamp_formats",
        action="append",
        default=[],
        help="custom timestamp template, a regex with '(...)' in place of the timestamp (may be repeated)",
    )
    parser.add_argument("--list", action="store_true", help="print the records as a table instead of browsing them")
    parser.add_argument("--csv", help="save the records to a CSV file instead of browsing them")
    parser.add_argument("--verbose", "-v", action="store_true", help="log diagnostic messages to stderr")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")

    return parser


def format_timestamp(dt: datetime) -> str:
    """
    format a datetime to microseconds, truncate to just millis
    """
    return dt.strftime("%Y-%m-%d %H:%M:%S.%f")[:23]


class LogFzfApplication:
    selector_class = RecordSelectorApp

    def __init__(self, config: argparse.Namespace, stdin: Optional[TextIO] = None):
        self.config = config
        self.stdin = stdin if stdin is not None else sys.stdin

        self.detector = TimestampDetector(config.timestamp_formats)
        self.pipeline = RecordPipeline(
            PipelineOptions(
                after=config.after,
                before=config.before,
                ago=config.ago,
                limit=config.limit,
            ),
            self.detector,
        )
        self.resolver = RangeResolver(config.skip_column)

        self.interactive = not (config.list or config.csv)
        self.records: list[Record] = []

    def run(self):
        source_names = self._collect_source_names()
        if not source_names:
            print("no files")
            return

        sources = SourceSet.load(source_names, self.config.encoding)
        record_lists = RecordBuilder(self.detector).build_all(sources)

        try:
            self.records = self.pipeline.run(record_lists)
        except NoRecordsFound as nrf:
            print(nrf)
            return
        if not self.records:
            # --limit 0
            print("no logs")
            return

        # ranges are relative to the final neighbors, so resolve only after filtering and truncation
        self.resolver.resolve(self.records)

        if self.config.csv:
            self._records_table().csv_export(self.config.csv)

        elif self.config.list:
            self._records_table().present()

        else:
            self._select_and_launch()

    def _collect_source_names(self) -> list[str]:
        source_names = list(self.config.files)
        source_names.extend(
            capture_commands(self.config.command, self.config.temp_dir, self.config.temp_file)
        )

        if self.stdin is not None and not self.stdin.isatty():
            source_names.append(capture_stdin(
                self.stdin, self.config.temp_dir, self.config.temp_file, self.config.encoding
            ))
            if self.interactive and self.stdin is sys.stdin:
                reattach_terminal()

        logger.debug("sources: %s", source_names)
        return source_names

    def _records_table(self) -> lt.Table:
        records_table = lt.Table("records")
        records_table.insert_many(
            {
                "timestamp": format_timestamp(rec.timestamp),
                "source": rec.source_id,
                "line": rec.start_line + 1,
                "content": rec.content,
            }
            for rec in self.records
        )
        return records_table

    def display(self, index: int) -> str:
        return self.records[index].content

    def preview(self, index: int, width: int, height: int) -> str:
        return self.resolver.preview(self.records[index], height)

    def _select_and_launch(self) -> None:
        # keep returning to the same records (and the same search) until the user quits
        query = ""
        while True:
            selector = self.selector_class(
                self.records,
                self.display,
                self.preview,
                self.detector,
                initial_query=query,
            )
            selected = selector.run()
            # a crashed textual app also returns None, but with a non-zero return code
            if selector.return_code:
                raise SelectorError(f"record selector failed (exit status {selector.return_code})")
            if selected is None:
                return

            query = selector.query_text
            launch_editor(self.config.editor, self.records[selected])


def main():

    parser = make_argument_parser()
    args_ns = parser.parse_args()
    setup_logging(args_ns.verbose)

    try:
        app = LogFzfApplication(args_ns)
    except ValueError as ve:
        parser.error(str(ve))

    try:
        app.run()
    except LogFzfError as exc:
        print(exc, file=sys.stderr)
        sys.exit(1)


if __name__ == '__main__':
    main()
