"""
Cooccurrence counting over the staged occurrence rows.

For every staged row, each unordered pair of distinct column ids bumps both
symmetric cells of the counts matrix by one and records the row as evidence
for the pair.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Tuple

from cooc.dictionary import ColumnId, RowId
from cooc.matrix import SparseRowMatrix
from cooc.progress import ProgressCounter
from cooc.staging import read_header, read_rows


class ProvenanceTable:
    """Origin rows per unordered column pair, keyed by min(a, b) * vocab + max(a, b)."""

    def __init__(self, vocab_size: int, max_rows: Optional[int] = None):
        self.vocab_size = vocab_size
        self.max_rows = max_rows
        self._rows: Dict[int, List[RowId]] = {}
        self._overflow: Dict[int, int] = {}

    def key(self, a: ColumnId, b: ColumnId) -> int:
        if a > b:
            a, b = b, a
        return a * self.vocab_size + b

    def record(self, a: ColumnId, b: ColumnId, row: RowId) -> None:
        k = self.key(a, b)
        rows = self._rows.setdefault(k, [])
        if self.max_rows is not None and len(rows) >= self.max_rows:
            self._overflow[k] = self._overflow.get(k, 0) + 1
        else:
            rows.append(row)

    def rows(self, a: ColumnId, b: ColumnId) -> List[RowId]:
        return self._rows.get(self.key(a, b), [])

    def count(self, a: ColumnId, b: ColumnId) -> int:
        """Number of supporting rows, including any not stored because of the cap."""
        k = self.key(a, b)
        return len(self._rows.get(k, ())) + self._overflow.get(k, 0)

    def __len__(self) -> int:
        return len(self._rows)


@dataclass
class Cooccurrence:
    counts: SparseRowMatrix
    provenance: ProvenanceTable


def accumulate(
    rows: Iterable[Tuple[RowId, List[ColumnId]]],
    vocab_size: int,
    max_provenance: Optional[int] = None,
) -> Cooccurrence:
    log = logging.getLogger("cooc.accumulate")
    log.info("Starting cooccurrence counting")
    counter = ProgressCounter(log, "Cooc")
    counts = SparseRowMatrix(vocab_size, vocab_size)
    provenance = ProvenanceTable(vocab_size, max_provenance)
    for row, cols in rows:
        counter.step()
        # staged ids are distinct, but a hand-built row may repeat one
        cols = sorted(set(cols))
        for i, a in enumerate(cols):
            for b in cols[i + 1:]:
                counts.add(a, b, 1)
                counts.add(b, a, 1)
                provenance.record(a, b, row)
    log.info("Cooccurrence has %d non-zeros over %d pairs", counts.nnz, len(provenance))
    return Cooccurrence(counts, provenance)


def accumulate_file(path: Path, max_provenance: Optional[int] = None) -> Cooccurrence:
    """Square the staged occurrence file; only one row of column ids is held in memory."""
    _n_rows, n_cols = read_header(path)
    return accumulate(read_rows(path), n_cols, max_provenance)
