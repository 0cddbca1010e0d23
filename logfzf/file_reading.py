from __future__ import annotations

import abc
from collections.abc import Iterable, Iterator
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
import logging
import os
from pathlib import Path
import re
import subprocess
from typing import Optional, TextIO

from .exceptions import SourceReadError

logger = logging.getLogger(__name__)


def default_worker_count() -> int:
    return min(32, (os.cpu_count() or 1) + 4)


class FileReader(abc.ABC):
    """
    Iterates over the lines of one source file, with line terminators removed.
    Undecodable bytes are replaced, not rejected.
    """
    suffixes: tuple[str, ...] = ()

    @classmethod
    def get_reader(cls, name: str, encoding: str) -> FileReader:
        for subcls in cls.__subclasses__():
            if subcls.suffixes and name.endswith(subcls.suffixes):
                return subcls(name, encoding)
        return TextFileReader(name, encoding)

    @abc.abstractmethod
    def _open(self) -> Iterator[str]:
        """Open the file and return an iterator over its decoded lines"""

    def __init__(self, file_name: str, encoding: str):
        self.file_name = file_name
        self.encoding = encoding
        self._close_obj = None
        self._iter = self._open()

    def close(self):
        if self._close_obj is not None:
            self._close_obj.close()
            self._close_obj = None

    def __enter__(self):
        return self

    def __exit__(self, *exc_info):
        self.close()

    def __iter__(self):
        return self

    def __next__(self) -> str:
        try:
            return next(self._iter).rstrip("\r\n")
        except StopIteration:
            self.close()
            raise


class TextFileReader(FileReader):
    def _open(self) -> Iterator[str]:
        self._close_obj = open(self.file_name, encoding=self.encoding, errors="replace")
        return iter(self._close_obj)


class GzipFileReader(FileReader):
    suffixes = (".gz",)

    def _open(self) -> Iterator[str]:
        import gzip

        self._close_obj = gzip.GzipFile(filename=self.file_name)
        return (s.decode(self.encoding, errors="replace") for s in self._close_obj)


@dataclass(frozen=True)
class Source:
    """
    One input text stream, held as an immutable tuple of lines with their line
    terminators removed. Shared read-only by every Record built from it.
    """
    source_id: str
    lines: tuple[str, ...]

    def __len__(self) -> int:
        return len(self.lines)


def load_source(name: str, encoding: str) -> Source:
    try:
        with FileReader.get_reader(name, encoding) as reader:
            lines = tuple(reader)
    except (OSError, EOFError, LookupError) as exc:
        raise SourceReadError(f"cannot read {name}: {exc}") from exc

    logger.debug("loaded %d lines from %s", len(lines), name)
    return Source(name, lines)


class SourceSet:
    """
    The line buffers of every source in one run, keyed by source id, in the order the
    sources were named.
    """
    def __init__(self, sources: Iterable[Source] = ()):
        self._sources: dict[str, Source] = {}
        for source in sources:
            self.add(source)

    @classmethod
    def load(cls, names: Iterable[str], encoding: str, max_workers: Optional[int] = None) -> SourceSet:
        # the same file named twice would only duplicate every record
        names = list(dict.fromkeys(names))
        if not names:
            return cls()

        with ThreadPoolExecutor(max_workers=max_workers or default_worker_count()) as executor:
            # map() re-raises the first SourceReadError once the loads have been joined
            return cls(executor.map(load_source, names, [encoding] * len(names)))

    def add(self, source: Source) -> None:
        self._sources[source.source_id] = source

    def __getitem__(self, source_id: str) -> Source:
        return self._sources[source_id]

    def __iter__(self) -> Iterator[Source]:
        return iter(self._sources.values())

    def __len__(self) -> int:
        return len(self._sources)


def temp_file_path(temp_dir: str, temp_prefix: str, label: str, index: Optional[int] = None) -> Path:
    safe_label = re.sub(r"[^\w.-]+", "_", label).strip("_")[:80] or "output"
    if index is not None:
        # sanitized labels can collide; the index keeps each command's file distinct
        safe_label = f"{index}-{safe_label}"
    return Path(temp_dir) / f"{temp_prefix}-{safe_label}"


def _write_temp_file(path: Path, content: bytes) -> Path:
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(content)
    except OSError as exc:
        raise SourceReadError(f"cannot create temp file {path}: {exc}") from exc
    logger.debug("wrote %d bytes to %s", len(content), path)
    return path


def capture_command(cmd: str, temp_dir: str, temp_prefix: str, index: Optional[int] = None) -> Optional[Path]:
    """
    Run cmd in a bash shell and save its standard output to a temp file, returning
    the temp file's path. A failing command, or one with no output, is reported and
    contributes no source (returns None).

    Output is saved as raw bytes; decoding (and replacing bad bytes) is left to the
    FileReader that loads the temp file.
    """
    try:
        completed = subprocess.run(["bash", "-c", cmd], capture_output=True)
    except OSError as exc:
        logger.warning("command (%s) could not be run: %s", cmd, exc)
        return None

    if completed.returncode != 0:
        logger.warning(
            "command (%s) failed with exit status %d: %s",
            cmd, completed.returncode, completed.stderr.decode(errors="replace").strip()
        )
        return None
    if not completed.stdout:
        logger.warning("command (%s) produced no output", cmd)
        return None

    return _write_temp_file(temp_file_path(temp_dir, temp_prefix, cmd, index), completed.stdout)


def capture_commands(
        commands: list[str], temp_dir: str, temp_prefix: str, max_workers: Optional[int] = None
) -> list[str]:
    if not commands:
        return []
    with ThreadPoolExecutor(max_workers=max_workers or default_worker_count()) as executor:
        paths = executor.map(
            capture_command,
            commands,
            [temp_dir] * len(commands),
            [temp_prefix] * len(commands),
            range(1, len(commands) + 1),
        )
        return [str(path) for path in paths if path is not None]


def capture_stdin(stream: TextIO, temp_dir: str, temp_prefix: str, encoding: str = "utf-8") -> str:
    """Save everything readable from stream to a temp file, and return its path."""
    binary = getattr(stream, "buffer", None)
    if binary is not None:
        content = binary.read()
    else:
        try:
            content = stream.read().encode(encoding, errors="replace")
        except LookupError as exc:
            raise SourceReadError(f"cannot read stdin: {exc}") from exc
    return str(_write_temp_file(temp_file_path(temp_dir, temp_prefix, "stdin"), content))
