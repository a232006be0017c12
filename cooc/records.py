"""
Tab-separated (row, column) record input that can be read twice identically.
"""

from __future__ import annotations

import logging
import shutil
import tempfile
from pathlib import Path
from typing import IO, Iterator, Optional, Tuple, Union

from cooc.errors import MalformedRecordError

Source = Union[str, Path, IO[str]]


def split_record(line: str, line_no: int) -> Tuple[str, str]:
    """Split one input line into (row token, column token); extra fields are ignored."""
    line = line.rstrip("\n")
    if line.endswith("\r"):
        line = line[:-1]
    fields = line.split("\t", 2)
    if len(fields) < 2:
        raise MalformedRecordError(line_no, line)
    return fields[0], fields[1]


def _decode_error(e: UnicodeDecodeError, line_no: int) -> MalformedRecordError:
    bad = e.object[e.start:e.end].decode("ascii", "backslashreplace")
    return MalformedRecordError(line_no, bad, "input is not valid UTF-8")


class ReplayableInput:
    """Wraps a path or text stream so each call to records() starts from the first line.

    Non-seekable streams are spooled to a temporary file on entry.
    """

    def __init__(self, source: Source):
        self.source = source
        self.log = logging.getLogger("cooc.records")
        self._path: Optional[Path] = None
        self._stream: Optional[IO[str]] = None
        self._start = 0
        self._spool: Optional[IO[str]] = None

    def __enter__(self) -> "ReplayableInput":
        if isinstance(self.source, (str, Path)):
            self._path = Path(self.source)
        elif self.source.seekable():
            self._stream = self.source
            self._start = self.source.tell()
        else:
            self.log.info("Input is not seekable; spooling to a temporary file")
            self._spool = tempfile.TemporaryFile(mode="w+", encoding="utf-8")
            try:
                shutil.copyfileobj(self.source, self._spool)
            except UnicodeDecodeError as e:
                self._spool.close()
                self._spool = None
                raise _decode_error(e, 1) from e
            self._stream = self._spool
            self._start = 0
        return self

    def __exit__(self, *exc) -> None:
        if self._spool is not None:
            self._spool.close()
            self._spool = None
        self._stream = None

    def lines(self) -> Iterator[str]:
        if self._path is not None:
            with self._path.open("r", encoding="utf-8") as f:
                yield from f
            return
        if self._stream is None:
            raise RuntimeError("ReplayableInput must be entered before reading")
        self._stream.seek(self._start)
        yield from self._stream

    def records(self) -> Iterator[Tuple[int, str, str]]:
        """Yield (line number, row token, column token), line numbers starting at 1."""
        line_no = 0
        lines = self.lines()
        while True:
            try:
                line = next(lines)
            except StopIteration:
                return
            except UnicodeDecodeError as e:
                # decoding is buffered, so the bad bytes are at or after this line
                raise _decode_error(e, line_no + 1) from e
            line_no += 1
            row, col = split_record(line, line_no)
            yield line_no, row, col
