from cooc.matrix import SparseRowMatrix
from cooc.topk import filter_top_k, rank_row


def _scores(cells):
    m = SparseRowMatrix(4, 6)
    for (r, c), s in cells.items():
        m.set(r, c, s)
    return m


class TestRankRow:
    def test_best_first_then_column_id(self):
        ranked = rank_row({5: 1.0, 2: 3.0, 4: 1.0, 1: 2.0}, max_related=10)
        assert ranked == [(2, 3.0), (1, 2.0), (4, 1.0), (5, 1.0)]

    def test_truncation_keeps_highest(self):
        cells = {c: float(s) for c, s in zip(range(6), [0.5, 4.0, 2.5, 3.0, 1.0, 2.0])}
        ranked = rank_row(cells, max_related=3)
        assert [c for c, _ in ranked] == [1, 3, 2]
        dropped = set(cells) - {c for c, _ in ranked}
        assert max(cells[c] for c in dropped) <= min(s for _, s in ranked)

    def test_positive_only_filters_before_truncation(self):
        cells = {0: -1.0, 1: 0.0, 2: 0.5}
        assert rank_row(cells, max_related=2) == [(2, 0.5)]
        assert rank_row(cells, max_related=2, positive_only=False) == [(2, 0.5), (1, 0.0)]

    def test_zero_cap(self):
        assert rank_row({0: 1.0}, max_related=0) == []


class TestFilterTopK:
    def test_flags_and_caps(self):
        scores = _scores({(0, 1): 2.0, (0, 2): 1.0, (0, 3): 3.0, (1, 0): -1.0, (2, 5): 0.7})
        flags, ranked = filter_top_k(scores, max_related=2)
        assert sorted(flags.nonzero_entries()) == [(0, 1, 1), (0, 3, 1), (2, 5, 1)]
        assert ranked == {0: [(3, 3.0), (1, 2.0)], 2: [(5, 0.7)]}
        assert all(len(flags.row(r)) <= 2 for r in range(4))

    def test_keep_negative(self):
        scores = _scores({(1, 0): -1.0})
        flags, ranked = filter_top_k(scores, max_related=5, positive_only=False)
        assert flags.get(1, 0) == 1
        assert ranked == {1: [(0, -1.0)]}
