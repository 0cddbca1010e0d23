import logging
import os
import subprocess
import sys

from .exceptions import LaunchError
from .records import Record

logger = logging.getLogger(__name__)


def editor_command(editor: str, record: Record) -> list[str]:
    # viewers take 1-based line numbers
    return [editor, f"+{record.start_line + 1}", record.source_id]


def launch_editor(editor: str, record: Record) -> int:
    """
    Open record's source in editor, positioned at the record's first line, and wait
    for the editor to exit. The editor inherits this process's stdin/stdout/stderr.
    """
    cmd = editor_command(editor, record)
    logger.debug("running %s", cmd)
    try:
        completed = subprocess.run(cmd)
    except OSError as exc:
        raise LaunchError(f"cannot run editor {editor!r}: {exc}") from exc

    if completed.returncode != 0:
        logger.warning("%s exited with status %d", editor, completed.returncode)
    return completed.returncode


def reattach_terminal() -> bool:
    """
    After standard input has been read to the end, point file descriptor 0 back at
    the controlling terminal, so that the selector and the editor can read keystrokes.
    """
    try:
        tty_fd = os.open("/dev/tty", os.O_RDONLY)
    except OSError as exc:
        logger.warning("no terminal available for interactive input: %s", exc)
        return False

    os.dup2(tty_fd, sys.stdin.fileno())
    os.close(tty_fd)
    return True
