from . import __version__

text = rf"""
# logfzf

`logfzf` collects log lines from files, shell commands and piped standard input, splits them
into records at every line that contains a timestamp, and lets you fuzzy-search the records,
newest first. Selecting a record opens its source in an external viewer at the record's line.

A record runs from its timestamped line up to the next timestamped line of the same source,
so tracebacks, JSON dumps and other continuation lines stay with the line that logged them.
Lines before the first timestamp in a source are not shown.

`logfzf` recognizes these timestamp formats anywhere in a line:

| Format                       | Description                                                  |
|------------------------------|--------------------------------------------------------------|
| YYYY-MM-DD HH:MM:SS[.SSS]    | date and time, "T" or " " separator, "." or "," decimal      |
| YYYY-MM-DD HH:MM:SS.SSS±ZZZZ | as above with a "Z" or numeric timezone (converted to local) |
| YYYY-MM-DD HH:MM             | date and time without seconds                                |
| YYYY/MM/DD HH:MM:SS          | date and time with slashes                                   |
| Jan DD HH:MM:SS              | syslog timestamp; the current year is assumed                |
| DD/Jan/YYYY HH:MM:SS         | day/month/year + time                                        |
| DD/Jan/YYYY:HH:MM:SS ±ZZZZ   | HTTP access log timestamp (converted to local time)          |
| 0000000000.000000            | float seconds since epoch                                    |
| 0000000000000                | milliseconds since epoch                                     |
| 0000000000                   | integer seconds since epoch                                  |

## Interactive functions

| Key          | Function                                                        |
|:------------:|-----------------------------------------------------------------|
| (typing)     | Fuzzy-filter the records                                        |
| Up/Down      | Move the highlight                                              |
| Enter        | Open the highlighted record in the viewer                       |
| ^T           | Prompt for a timestamp and move to the newest record before it  |
| F1           | Display this helpful text                                       |
| Esc / ^C     | Quit                                                            |

After the viewer exits, `logfzf` returns to the same list of records, with the last search
still in place.

## Command line options

| Option                | Description                                                              |
|-----------------------|--------------------------------------------------------------------------|
| --command, -c         | shell command whose output is browsed as another source (repeatable)     |
| --temp-file           | prefix for temp files holding command output and stdin (default "tmp")   |
| --temp-dir            | directory for temp files (default "/tmp")                                |
| --editor              | viewer, run as `editor +LINE PATH` (default "less")                      |
| --after               | only records after this time                                             |
| --before              | only records before this time                                            |
| --ago                 | only records newer than this duration ("30s", "5m", "1h30m", "2d")       |
| --skip-column         | number of leading fields to hide in the record list                      |
| --limit, -l           | maximum number of records (default 10000)                                |
| --encoding, -enc      | encoding used to read files                                              |
| --timestamp-format    | custom timestamp template (repeatable), see below                        |
| --list                | print the records as a table instead of browsing them                    |
| --csv                 | save the records to a CSV file instead of browsing them                  |
| --verbose, -v         | log diagnostic messages                                                  |

`--after` and `--before` accept any timestamp format listed above, a bare `YYYY-MM-DD` date,
or a relative time such as "15m" for "15 minutes ago".

### Custom timestamp formats

Custom timestamp formats are regular expressions containing the placeholder `(...)` where
the timestamp appears. Each built-in timestamp format is substituted for the placeholder.

| Log line                                    | Template           |
|---------------------------------------------|--------------------|
| INFO - 2022-01-01 12:34:56 log message      | &#92;w+ - (...)        |
| req=42 at=1694561169 path=/login            | at=(...)&#92;s         |

## About logfzf

logfzf version {__version__}

MIT License
"""  # noqa
