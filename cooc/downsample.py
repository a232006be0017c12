"""
Two-pass frequency counting and downsampling of (row, column) records.

Pass 1 builds the row and column dictionaries and tallies how often each
symbol occurs. Pass 2 replays the same records and keeps each one with a
probability that caps every symbol's expected retained count.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List, Set

import numpy as np

from cooc.dictionary import ColumnId, Dictionary, RowId
from cooc.errors import InputChangedError
from cooc.progress import ProgressCounter
from cooc.records import ReplayableInput


@dataclass
class Tallies:
    rows: np.ndarray  # occurrences per row id
    columns: np.ndarray  # occurrences per column id

    @property
    def records(self) -> int:
        return int(self.rows.sum())


@dataclass
class DownsampleStats:
    seen: int = 0
    retained: int = 0
    min_sample_rate: float = float("inf")


class Occurrences:
    """Binary occurrence relation: for each row id, the set of distinct column ids kept."""

    def __init__(self, n_rows: int, n_columns: int):
        self.n_columns = n_columns
        self.rows: List[Set[ColumnId]] = [set() for _ in range(n_rows)]

    def add(self, row: RowId, col: ColumnId) -> None:
        self.rows[row].add(col)

    @property
    def n_rows(self) -> int:
        return len(self.rows)

    def row_counts(self) -> np.ndarray:
        return np.array([len(cols) for cols in self.rows], dtype=np.int64)

    def column_counts(self) -> np.ndarray:
        out = np.zeros(self.n_columns, dtype=np.int64)
        for cols in self.rows:
            for c in cols:
                out[c] += 1
        return out

    def total(self) -> int:
        return sum(len(cols) for cols in self.rows)


class Downsampler:
    """Caps per-symbol frequency before the quadratic cooccurrence expansion."""

    def __init__(
        self,
        rng: np.random.Generator,
        max_row_count: float = 500,
        max_column_count: float = 500,
        policy: str = "min",
        row_dict: Dictionary[RowId] | None = None,
        col_dict: Dictionary[ColumnId] | None = None,
    ):
        self.rng = rng
        self.max_row_count = max_row_count
        self.max_column_count = max_column_count
        self.policy = policy
        self.row_dict: Dictionary[RowId] = row_dict if row_dict is not None else Dictionary("rows")
        self.col_dict: Dictionary[ColumnId] = col_dict if col_dict is not None else Dictionary("columns")
        self.log = logging.getLogger("cooc.downsample")
        self.tallies: Tallies | None = None
        self.stats = DownsampleStats()

    def count(self, records: ReplayableInput) -> Tallies:
        """Pass 1: intern every token and tally occurrences per id."""
        self.log.info("Starting first pass")
        counter = ProgressCounter(self.log)
        row_counts: List[int] = []
        col_counts: List[int] = []
        for _line_no, row_tok, col_tok in records.records():
            counter.step()
            r = self.row_dict.intern(row_tok)
            c = self.col_dict.intern(col_tok)
            if r == len(row_counts):
                row_counts.append(0)
            if c == len(col_counts):
                col_counts.append(0)
            row_counts[r] += 1
            col_counts[c] += 1
        self.tallies = Tallies(np.array(row_counts, dtype=np.int64), np.array(col_counts, dtype=np.int64))
        if row_counts:
            self.log.info("Average non-zeros per row %.2f", self.tallies.records / len(row_counts))
        return self.tallies

    def sample(self, records: ReplayableInput) -> Occurrences:
        """Pass 2: replay the records and keep each one with the configured probability."""
        if self.tallies is None:
            raise RuntimeError("count() must run before sample()")
        self.log.info("Starting second pass")
        counter = ProgressCounter(self.log)
        row_tally = self.tallies.rows
        col_tally = self.tallies.columns
        occ = Occurrences(self.row_dict.size(), self.col_dict.size())
        stats = DownsampleStats()
        for line_no, row_tok, col_tok in records.records():
            counter.step()
            r = self.row_dict.lookup(row_tok)
            if r is None:
                raise InputChangedError(line_no, row_tok, "row")
            c = self.col_dict.lookup(col_tok)
            if c is None:
                raise InputChangedError(line_no, col_tok, "column")

            n_row = int(row_tally[r])
            n_col = int(col_tally[c])
            row_rate = min(self.max_row_count, n_row) / n_row
            col_rate = min(self.max_column_count, n_col) / n_col
            stats.min_sample_rate = min(stats.min_sample_rate, row_rate, col_rate)

            if self._accept(row_rate, col_rate):
                occ.add(r, c)
                stats.retained += 1
            stats.seen += 1

        self.stats = stats
        self.log.info("Done with second pass")
        self.log.info("Retained %d / %d elements", stats.retained, stats.seen)
        self.log.info("Minimum sample factor %s", stats.min_sample_rate)
        return occ

    def _accept(self, row_rate: float, col_rate: float) -> bool:
        if self.policy == "product":
            # two independent draws: acceptance probability is row_rate * col_rate
            return self.rng.random() < row_rate and self.rng.random() < col_rate
        return self.rng.random() < min(row_rate, col_rate)

    def run(self, records: ReplayableInput) -> Occurrences:
        self.count(records)
        return self.sample(records)
