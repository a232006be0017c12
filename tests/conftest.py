"""Shared fixtures for cooc tests."""

import numpy as np
import pytest


@pytest.fixture
def rng():
    return np.random.default_rng(42)


@pytest.fixture
def write_tsv(tmp_path):
    """Write (row, column) pairs as a tab-separated file and return its path."""

    def _write(pairs, name="data.tsv"):
        path = tmp_path / name
        path.write_text("".join(f"{r}\t{c}\n" for r, c in pairs), encoding="utf-8")
        return path

    return _write


@pytest.fixture
def scenario_a(write_tsv):
    return write_tsv([("a", "x"), ("a", "y"), ("b", "x"), ("b", "z")])
