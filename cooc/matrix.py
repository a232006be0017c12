"""
Sparse row-major matrix used for occurrence counts, LLR scores and results.

Rows are dict-of-dicts so that get/set by (row, col) is O(1) amortized and
row iteration only touches populated rows.
"""

from __future__ import annotations

from typing import Dict, Iterator, Tuple


class SparseRowMatrix:
    def __init__(self, rows: int, cols: int):
        self.shape: Tuple[int, int] = (rows, cols)
        self.data: Dict[int, Dict[int, float]] = {}

    def get(self, row: int, col: int) -> float:
        return self.data.get(row, {}).get(col, 0)

    def set(self, row: int, col: int, value: float, keep_zero: bool = False) -> None:
        """Store a value; zeros remove the cell unless `keep_zero` asks for an explicit entry."""
        self._check(row, col)
        if value == 0 and not keep_zero:
            cells = self.data.get(row)
            if cells is not None:
                cells.pop(col, None)
                if not cells:
                    del self.data[row]
            return
        self.data.setdefault(row, {})[col] = value

    def add(self, row: int, col: int, delta: float) -> float:
        self._check(row, col)
        cells = self.data.setdefault(row, {})
        value = cells.get(col, 0) + delta
        cells[col] = value
        return value

    def row(self, row: int) -> Dict[int, float]:
        """Populated cells of one row (read-only view by convention)."""
        return self.data.get(row, {})

    def rows(self) -> Iterator[Tuple[int, Dict[int, float]]]:
        """Populated rows in ascending row order."""
        for r in sorted(self.data):
            yield r, self.data[r]

    def nonzero_entries(self) -> Iterator[Tuple[int, int, float]]:
        for r, cells in self.rows():
            for c, v in cells.items():
                if v != 0:
                    yield r, c, v

    @property
    def nnz(self) -> int:
        return sum(len(cells) for cells in self.data.values())

    def total(self) -> float:
        return sum(sum(cells.values()) for cells in self.data.values())

    def _check(self, row: int, col: int) -> None:
        if not (0 <= row < self.shape[0] and 0 <= col < self.shape[1]):
            raise IndexError(f"cell ({row}, {col}) outside matrix of shape {self.shape}")

    def __repr__(self) -> str:
        return f"SparseRowMatrix(shape={self.shape}, nnz={self.nnz})"
