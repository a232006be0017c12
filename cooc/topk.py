from __future__ import annotations

import logging
from typing import Dict, List, Tuple

from cooc.dictionary import ColumnId
from cooc.matrix import SparseRowMatrix

Ranked = Dict[ColumnId, List[Tuple[ColumnId, float]]]


def rank_row(cells: Dict[int, float], max_related: int, positive_only: bool = True) -> List[Tuple[ColumnId, float]]:
    """Best `max_related` (col, score) pairs of one row: score desc, then col asc."""
    entries = [(ColumnId(c), s) for c, s in cells.items() if not positive_only or s > 0]
    entries.sort(key=lambda t: (-t[1], t[0]))
    return entries[:max_related]


def filter_top_k(
    scores: SparseRowMatrix, max_related: int, positive_only: bool = True
) -> Tuple[SparseRowMatrix, Ranked]:
    """Flag the surviving cells of every row with 1.

    Returns the flag matrix and, per row, the ranked survivors with their scores.
    """
    log = logging.getLogger("cooc.topk")
    log.info("Filtering")
    result = SparseRowMatrix(*scores.shape)
    ranked: Ranked = {}
    for r, cells in scores.rows():
        top = rank_row(cells, max_related, positive_only)
        if not top:
            continue
        for c, _s in top:
            result.set(r, c, 1)
        ranked[ColumnId(r)] = top
    log.info("Kept %d related pairs over %d rows", result.nnz, len(ranked))
    return result, ranked
