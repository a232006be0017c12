"""
Somewhat realistic synthetic (row, column) data for exercising the analyzer.

Rows and columns are drawn from Pitman-Yor "Chinese restaurant" processes,
which give the long-tailed symbol frequencies seen in text and user logs.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import List, Set, Tuple

import numpy as np

from cooc.progress import ProgressCounter


class ChineseRestaurant:
    def __init__(self, alpha: float, discount: float, rng: np.random.Generator):
        if alpha <= 0 or not 0 <= discount < 1:
            raise ValueError(f"need alpha > 0 and 0 <= discount < 1, got {alpha}, {discount}")
        self.alpha = alpha
        self.discount = discount
        self.rng = rng
        self.counts: List[int] = []
        self.seats: List[int] = []  # table of every seated customer

    def size(self) -> int:
        return len(self.counts)

    def sample(self) -> int:
        n = len(self.seats)
        tables = len(self.counts)
        if self.rng.random() * (self.alpha + n) < self.alpha + self.discount * tables:
            table = tables
            self.counts.append(0)
        else:
            # pick a seated customer uniformly, then thin by (count - discount) / count
            while True:
                table = self.seats[int(self.rng.integers(n))]
                c = self.counts[table]
                if self.rng.random() * c < c - self.discount:
                    break
        self.counts[table] += 1
        self.seats.append(table)
        return table


def generate(
    scale: int,
    out_path: str | Path,
    rng: np.random.Generator,
    alpha: float = 20000,
    discount: float = 0.35,
) -> int:
    """Write up to 10**scale distinct `x-<i>\\ty-<j>` lines; returns how many were written."""
    log = logging.getLogger("cooc.synthetic")
    out_path = Path(out_path)
    rows = ChineseRestaurant(alpha, discount, rng)
    cols = ChineseRestaurant(alpha, discount, rng)
    n = 10 ** scale
    seen: Set[Tuple[int, int]] = set()
    written = 0
    log.info("Generating data into %s", out_path)
    counter = ProgressCounter(log, "   Generating")
    with out_path.open("w", encoding="utf-8") as out:
        for _ in range(n):
            i = rows.sample()
            j = cols.sample()
            if (i, j) not in seen:
                seen.add((i, j))
                out.write(f"x-{i}\ty-{j}\n")
                written += 1
            counter.step()
    log.info("Done generating %d x %d", rows.size(), cols.size())
    return written
