#!/usr/bin/env python3
"""
Cooccurrence analyzer: significant related items from (row, column) records.

Reads tab-separated `row<TAB>column` lines, downsamples over-frequent symbols,
counts which columns share rows, scores every pair with the signed root
log-likelihood ratio and keeps the best related columns for each column.

CLI:
- analyze <input.tsv|-> [--out related.tsv] [--config config.json] [...]
- generate <scale>... [--out-dir DIR] [--seed N]

Output lines are `column<TAB>related<TAB>evidence<TAB>origin-row...`.
"""

from __future__ import annotations

import argparse
import dataclasses
import logging
import sys
from pathlib import Path
from typing import List

import numpy as np

from cooc.config import SAMPLING_POLICIES, load_config
from cooc.errors import CoocError
from cooc.pipeline import CoocAnalyzer, write_related
from cooc.synthetic import generate

log = logging.getLogger("cooc")


# -----------------------
# CLI
# -----------------------
def _parse_args(argv: List[str]) -> argparse.Namespace:
    ap = argparse.ArgumentParser(description="Cooccurrence analyzer")
    sub = ap.add_subparsers(dest="cmd", required=True)

    ap_a = sub.add_parser("analyze", help="Find significant cooccurrences in a tab-separated file")
    ap_a.add_argument("input", help="Input file of row<TAB>column lines, or - for stdin")
    ap_a.add_argument("--out", default=None, help="Output path (default: stdout)")
    ap_a.add_argument("--config", default=None, help="Optional JSON config file")
    ap_a.add_argument("--max-row-count", type=float, default=None, help="Downsample rows to this size (default: 500)")
    ap_a.add_argument("--max-column-count", type=float, default=None, help="Downsample columns to this size (default: 500)")
    ap_a.add_argument("--max-related", type=int, default=None, help="Maximum number of related items retained (default: 100)")
    ap_a.add_argument("--policy", choices=list(SAMPLING_POLICIES), default=None, help="Downsample acceptance policy")
    ap_a.add_argument("--keep-negative", action="store_true", help="Also keep pairs with non-positive scores")
    ap_a.add_argument("--seed", type=int, default=None, help="Random seed for reproducible downsampling")
    ap_a.add_argument("--max-provenance", type=int, default=None, help="Store at most this many origin rows per pair")
    ap_a.add_argument("--scratch-dir", default=None, help="Directory for the temporary scratch file")
    ap_a.add_argument("--scores", action="store_true", help="Include the LLR score after the evidence count")

    ap_g = sub.add_parser("generate", help="Write synthetic data-<scale>.tsv files with 10^scale draws")
    ap_g.add_argument("scale", type=int, nargs="+", help="Power of ten of the number of draws")
    ap_g.add_argument("--out-dir", default=".", help="Output directory (default: .)")
    ap_g.add_argument("--seed", type=int, default=None, help="Random seed")

    return ap.parse_args(argv)


def _analyze(ns: argparse.Namespace) -> None:
    cfg = load_config(ns.config)
    overrides = {
        "max_row_count": ns.max_row_count,
        "max_column_count": ns.max_column_count,
        "max_related": ns.max_related,
        "sampling_policy": ns.policy,
        "seed": ns.seed,
        "max_provenance": ns.max_provenance,
        "scratch_dir": ns.scratch_dir,
    }
    cfg = dataclasses.replace(cfg, **{k: v for k, v in overrides.items() if v is not None})
    if ns.keep_negative:
        cfg = dataclasses.replace(cfg, positive_only=False)

    source = sys.stdin if ns.input == "-" else Path(ns.input)
    result = CoocAnalyzer(cfg).run(source)
    if ns.out:
        out_path = Path(ns.out)
        with out_path.open("w", encoding="utf-8") as f:
            n = write_related(result, f, with_scores=ns.scores)
        log.info("Wrote %d related pairs to %s", n, out_path)
    else:
        write_related(result, sys.stdout, with_scores=ns.scores)


def _generate(ns: argparse.Namespace) -> None:
    rng = np.random.default_rng(ns.seed)
    out_dir = Path(ns.out_dir)
    out_dir.mkdir(parents=True, exist_ok=True)
    for scale in ns.scale:
        generate(scale, out_dir / f"data-{scale}.tsv", rng)


def main(argv: List[str] | None = None) -> int:
    ns = _parse_args(sys.argv[1:] if argv is None else argv)
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(message)s")
    try:
        if ns.cmd == "analyze":
            _analyze(ns)
        elif ns.cmd == "generate":
            _generate(ns)
        else:
            return 2
    except CoocError as e:
        log.error("%s", e)
        return 1
    except OSError as e:
        log.error("I/O error: %s", e)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
