"""
Row-major scratch file for the downsampled occurrence relation.

Layout, all big-endian int32:
    row_count, column_count,
    then per row in ascending id order: n, col_1 .. col_n
"""

from __future__ import annotations

import logging
import os
import tempfile
from contextlib import contextmanager
from pathlib import Path
from typing import BinaryIO, Iterator, List, Tuple

import numpy as np

from cooc.dictionary import ColumnId, RowId
from cooc.downsample import Occurrences
from cooc.errors import StagingError
from cooc.progress import ProgressCounter

INT32 = np.dtype(">i4")
INT32_MAX = np.iinfo(np.int32).max

log = logging.getLogger("cooc.staging")


@contextmanager
def scratch_file(directory: str | Path | None = None) -> Iterator[Path]:
    """Create an empty scratch file and remove it on exit, whatever happens downstream."""
    try:
        fd, name = tempfile.mkstemp(prefix="raw", suffix=".dat", dir=directory)
    except OSError as e:
        raise StagingError(Path(directory) if directory else None, "create", e) from e
    os.close(fd)
    path = Path(name)
    try:
        yield path
    finally:
        try:
            path.unlink()
        except FileNotFoundError:
            pass


def write_occurrences(occ: Occurrences, path: Path) -> int:
    """Write the occurrence relation to `path`; returns the file size in bytes."""
    if occ.n_rows > INT32_MAX or occ.n_columns > INT32_MAX:
        raise StagingError(path, "write", ValueError("vocabulary does not fit in int32"))
    counter = ProgressCounter(log, "Writing sorted data")
    try:
        with path.open("wb") as out:
            out.write(np.array([occ.n_rows, occ.n_columns], dtype=INT32).tobytes())
            for cols in occ.rows:
                counter.step()
                record = np.empty(len(cols) + 1, dtype=INT32)
                record[0] = len(cols)
                record[1:] = sorted(cols)
                out.write(record.tobytes())
        size = path.stat().st_size
    except OSError as e:
        raise StagingError(path, "write", e) from e
    log.info("Sorted data is %.1f MB", size / 1e6)
    return size


def _read_ints(f: BinaryIO, n: int, path: Path) -> np.ndarray:
    want = n * INT32.itemsize
    buf = f.read(want)
    if len(buf) != want:
        raise StagingError(path, "read", EOFError(f"expected {want} bytes, got {len(buf)}"))
    return np.frombuffer(buf, dtype=INT32)


def read_header(path: Path) -> Tuple[int, int]:
    try:
        with path.open("rb") as f:
            rows, cols = _read_ints(f, 2, path)
    except StagingError:
        raise
    except OSError as e:
        raise StagingError(path, "read", e) from e
    return int(rows), int(cols)


def read_rows(path: Path) -> Iterator[Tuple[RowId, List[ColumnId]]]:
    """Stream (row id, column ids) back from the scratch file, one row in memory at a time."""
    try:
        with path.open("rb") as f:
            n_rows, _n_cols = (int(x) for x in _read_ints(f, 2, path))
            for row in range(n_rows):
                (n,) = _read_ints(f, 1, path)
                cols = _read_ints(f, int(n), path) if n else ()
                yield RowId(row), [ColumnId(int(c)) for c in cols]
    except StagingError:
        raise
    except OSError as e:
        raise StagingError(path, "read", e) from e
