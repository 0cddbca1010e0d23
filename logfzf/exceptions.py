class LogFzfError(Exception):
    """Base class for the errors that end a logfzf run."""


class SourceReadError(LogFzfError):
    """A declared source (file, command capture or stdin capture) could not be read or written."""


class LaunchError(LogFzfError):
    """The external viewer could not be started."""


class SelectorError(LogFzfError):
    """The interactive selector exited with an error instead of a selection or a cancel."""


class NoRecordsFound(LogFzfError):
    """No timestamped records survived loading and filtering - reported, but not a failure."""


class InvalidDurationError(ValueError):
    pass
