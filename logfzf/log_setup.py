"""Logging configuration for logfzf."""

import logging

from rich.console import Console
from rich.logging import RichHandler


def setup_logging(verbose: bool = False) -> None:
    """Configure application-wide logging.

    Level is DEBUG when verbose is True, otherwise WARNING. Output goes to stderr,
    so that it stays out of --list output.
    """
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )
