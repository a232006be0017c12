"""
Log-likelihood ratio scoring of cooccurrence counts.

Each non-zero cell (i, j) with count k11 is turned into the 2x2 table

            j        not j
    i       k11      k12 = rowSum[i] - k11
    not i   k21      k22 = total - k11 - k12 - k21
            = colSum[j] - k11

and scored with the signed root LLR: large positive values mean i and j
co-occur far more often than their marginals predict, negative values mean
less often.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Tuple

import numpy as np

from cooc.errors import NumericDomainError
from cooc.matrix import SparseRowMatrix


def x_log_x(x: int) -> float:
    return 0.0 if x == 0 else x * math.log(x)


def entropy(*counts: int) -> float:
    """Unnormalized Shannon entropy: N log N - sum(k log k)."""
    total = 0
    acc = 0.0
    for k in counts:
        acc += x_log_x(k)
        total += k
    return x_log_x(total) - acc


def _check_domain(k11: int, k12: int, k21: int, k22: int) -> None:
    if k11 < 0 or k12 < 0 or k21 < 0 or k22 < 0:
        raise NumericDomainError((k11, k12, k21, k22))


def log_likelihood_ratio(k11: int, k12: int, k21: int, k22: int) -> float:
    _check_domain(k11, k12, k21, k22)
    row_entropy = entropy(k11 + k12, k21 + k22)
    column_entropy = entropy(k11 + k21, k12 + k22)
    matrix_entropy = entropy(k11, k12, k21, k22)
    if row_entropy + column_entropy < matrix_entropy:
        # round off error
        return 0.0
    return 2.0 * (row_entropy + column_entropy - matrix_entropy)


def root_log_likelihood_ratio(k11: int, k12: int, k21: int, k22: int) -> float:
    """Signed square root of the LLR; negative when k11 is rarer than independence predicts."""
    root = math.sqrt(log_likelihood_ratio(k11, k12, k21, k22))
    # k11 / (k11 + k12) < k21 / (k21 + k22), cross-multiplied to survive empty margins
    if k11 * (k21 + k22) < k21 * (k11 + k12):
        root = -root
    return root


@dataclass
class Marginals:
    row_sums: np.ndarray
    col_sums: np.ndarray
    total: int

    def table(self, row: int, col: int, k11: int) -> Tuple[int, int, int, int]:
        k12 = int(self.row_sums[row]) - k11
        k21 = int(self.col_sums[col]) - k11
        k22 = self.total - k11 - k12 - k21
        return k11, k12, k21, k22


def marginals(counts: SparseRowMatrix) -> Marginals:
    n_rows, n_cols = counts.shape
    row_sums = np.zeros(n_rows, dtype=np.int64)
    col_sums = np.zeros(n_cols, dtype=np.int64)
    for r, cells in counts.rows():
        row_sums[r] = sum(cells.values())
        for c, v in cells.items():
            col_sums[c] += v
    return Marginals(row_sums, col_sums, int(row_sums.sum()))


def score(counts: SparseRowMatrix) -> Tuple[SparseRowMatrix, Marginals]:
    """Return a new matrix of root-LLR scores for every non-zero count, plus the marginals used."""
    log = logging.getLogger("cooc.score")
    log.info("Starting sums")
    m = marginals(counts)
    if m.row_sums.size:
        log.info("Largest row sum = %d", int(m.row_sums.max()))
    if m.col_sums.size:
        log.info("Largest column sum = %d", int(m.col_sums.max()))

    log.info("Scoring")
    scores = SparseRowMatrix(*counts.shape)
    for r, c, k11 in counts.nonzero_entries():
        s = root_log_likelihood_ratio(*m.table(r, c, int(k11)))
        # a zero score is still a candidate for filtering
        scores.set(r, c, s, keep_zero=True)
    return scores, m
