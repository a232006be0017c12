from __future__ import annotations

from pathlib import Path
from typing import Optional, Tuple


class CoocError(Exception):
    """Base class for every failure raised by the analysis pipeline."""


class ConfigError(CoocError, ValueError):
    pass


class MalformedRecordError(CoocError, ValueError):
    """An input line did not split into a row token and a column token."""

    def __init__(self, line_no: int, line: str, reason: str = "expected two tab-separated fields"):
        self.line_no = line_no
        self.line = line
        super().__init__(f"line {line_no}: {reason}: {line!r}")


class InputChangedError(CoocError):
    """The second pass saw a token the first pass never interned."""

    def __init__(self, line_no: int, token: str, space: str):
        self.line_no = line_no
        self.token = token
        self.space = space
        super().__init__(f"line {line_no}: {space} token {token!r} was not seen in the first pass")


class InvalidIdError(CoocError, IndexError):
    def __init__(self, ident: int, size: int):
        self.ident = ident
        self.size = size
        super().__init__(f"id {ident} out of range for dictionary of size {size}")


class NumericDomainError(CoocError, ArithmeticError):
    """A contingency table cell came out negative."""

    def __init__(self, cells: Tuple[int, int, int, int]):
        self.cells = cells
        super().__init__("negative contingency table cell: k11=%d k12=%d k21=%d k22=%d" % cells)


class StagingError(CoocError, OSError):
    """Scratch file could not be created, written or read."""

    def __init__(self, path: Optional[Path], phase: str, cause: Optional[BaseException] = None):
        self.path = path
        self.phase = phase
        detail = f": {cause}" if cause is not None else ""
        super().__init__(f"scratch file {path} failed during {phase}{detail}")
