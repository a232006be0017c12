import numpy as np
import pytest

from cooc.downsample import Downsampler
from cooc.errors import InputChangedError, MalformedRecordError
from cooc.records import ReplayableInput


def _bernoulli_file(path, rng, n=200):
    """Rows x-i and columns y-j with P(i, j) = p_i * p_j, p_i = 10 / (i + 10), plus the diagonal."""
    p = 10.0 / (np.arange(n) + 10.0)
    m = (rng.random((n, n)) < np.outer(p, p)).astype(int)
    np.fill_diagonal(m, 1)
    with path.open("w", encoding="utf-8") as out:
        for i in range(n):
            for j in np.flatnonzero(m[i]):
                out.write(f"x-{i}\ty-{j}\n")
    return m


def _sample(path, rng, max_row, max_col, policy="min"):
    sampler = Downsampler(rng, max_row, max_col, policy)
    with ReplayableInput(path) as src:
        occ = sampler.run(src)
    return sampler, occ


class TestFirstPass:
    def test_tallies(self, scenario_a, rng):
        sampler = Downsampler(rng)
        with ReplayableInput(scenario_a) as src:
            tallies = sampler.count(src)
        assert list(sampler.row_dict) == ["a", "b"]
        assert list(sampler.col_dict) == ["x", "y", "z"]
        assert tallies.rows.tolist() == [2, 2]
        assert tallies.columns.tolist() == [2, 1, 1]
        assert tallies.records == 4

    def test_malformed_line_aborts(self, tmp_path, rng):
        path = tmp_path / "bad.tsv"
        path.write_text("a\tx\nbroken\n", encoding="utf-8")
        with ReplayableInput(path) as src, pytest.raises(MalformedRecordError) as ei:
            Downsampler(rng).count(src)
        assert ei.value.line_no == 2

    def test_second_pass_requires_first(self, scenario_a, rng):
        with ReplayableInput(scenario_a) as src, pytest.raises(RuntimeError):
            Downsampler(rng).sample(src)


class TestSecondPass:
    def test_scenario_a_occurrences(self, scenario_a, rng):
        sampler, occ = _sample(scenario_a, rng, float("inf"), float("inf"))
        cols = sampler.col_dict
        by_row = {
            sampler.row_dict.resolve(r): {cols.resolve(c) for c in occ.rows[r]} for r in range(occ.n_rows)
        }
        assert by_row == {"a": {"x", "y"}, "b": {"x", "z"}}
        assert sampler.stats.seen == 4
        assert sampler.stats.retained == 4
        assert sampler.stats.min_sample_rate == 1.0

    def test_duplicates_collapse_to_membership(self, write_tsv, rng):
        path = write_tsv([("a", "x"), ("a", "x"), ("a", "y")])
        _, occ = _sample(path, rng, 1000, 1000)
        assert occ.total() == 2
        assert occ.row_counts().tolist() == [2]

    def test_changed_input_is_detected(self, tmp_path, rng):
        path = tmp_path / "data.tsv"
        path.write_text("a\tx\n", encoding="utf-8")
        sampler = Downsampler(rng)
        with ReplayableInput(path) as src:
            sampler.count(src)
            path.write_text("a\tnew\n", encoding="utf-8")
            with pytest.raises(InputChangedError) as ei:
                sampler.sample(src)
        assert ei.value.space == "column"

    @pytest.mark.parametrize("policy", ["min", "product"])
    def test_high_caps_keep_everything(self, tmp_path, rng, policy):
        m = _bernoulli_file(tmp_path / "data.tsv", rng)
        _, occ = _sample(tmp_path / "data.tsv", rng, 1000, 1000, policy)
        assert occ.total() == m.sum()

    @pytest.mark.parametrize("policy", ["min", "product"])
    def test_never_increases_counts(self, tmp_path, rng, policy):
        _bernoulli_file(tmp_path / "data.tsv", rng)
        sampler, occ = _sample(tmp_path / "data.tsv", rng, 5, 5, policy)
        assert np.all(occ.row_counts() <= sampler.tallies.rows)
        assert np.all(occ.column_counts() <= sampler.tallies.columns)
        assert sampler.stats.retained < sampler.stats.seen

    def test_caps_are_honored(self, tmp_path, rng):
        _bernoulli_file(tmp_path / "data.tsv", rng)
        sampler, occ = _sample(tmp_path / "data.tsv", rng, 20, 50)
        assert occ.row_counts().max() < 30
        assert occ.column_counts().max() < 65
        assert sampler.stats.min_sample_rate < 1.0

    def test_same_seed_same_sample(self, tmp_path, rng):
        _bernoulli_file(tmp_path / "data.tsv", rng)
        _, a = _sample(tmp_path / "data.tsv", np.random.default_rng(7), 10, 10)
        _, b = _sample(tmp_path / "data.tsv", np.random.default_rng(7), 10, 10)
        assert a.rows == b.rows

    @pytest.mark.parametrize("policy, expected", [("min", 0.5), ("product", 0.25)])
    def test_policy_sets_acceptance_rate(self, tmp_path, policy, expected):
        # every row and every column occurs 4 times, so both caps of 2 give a rate of 1/2
        n = 1000
        path = tmp_path / "cycle.tsv"
        with path.open("w", encoding="utf-8") as out:
            for i in range(n):
                for k in range(4):
                    out.write(f"r{i}\tc{(i + k) % n}\n")
        sampler, _ = _sample(path, np.random.default_rng(11), 2, 2, policy)
        assert sampler.stats.seen == 4 * n
        assert sampler.stats.retained / sampler.stats.seen == pytest.approx(expected, abs=0.04)
