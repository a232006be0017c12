"""
End-to-end cooccurrence analysis.

    records --(pass 1)--> dictionaries + tallies
            --(pass 2)--> downsampled occurrences --> scratch file
            --> cooccurrence counts + provenance --> LLR scores --> top-K flags

Only one staged row is memory resident while counting, so the occurrence
relation and the cooccurrence matrix are never held at the same time.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import IO, Iterator, List, NamedTuple

import numpy as np

from cooc.accumulate import ProvenanceTable, accumulate_file
from cooc.config import AnalyzeConfig
from cooc.dictionary import ColumnId, Dictionary, RowId
from cooc.downsample import Downsampler, DownsampleStats
from cooc.matrix import SparseRowMatrix
from cooc.records import ReplayableInput, Source
from cooc.score import Marginals, score
from cooc.staging import scratch_file, write_occurrences
from cooc.topk import Ranked, filter_top_k


class RelatedPair(NamedTuple):
    token: str
    related: str
    score: float
    evidence: int
    origins: List[str]


@dataclass
class AnalysisResult:
    row_dict: Dictionary[RowId]
    col_dict: Dictionary[ColumnId]
    counts: SparseRowMatrix
    marginals: Marginals
    scores: SparseRowMatrix
    filtered: SparseRowMatrix
    ranked: Ranked
    provenance: ProvenanceTable
    stats: DownsampleStats

    def related(self) -> Iterator[RelatedPair]:
        """Surviving pairs in row order, best score first within a row."""
        for r in sorted(self.ranked):
            token = self.col_dict.resolve(r)
            for c, s in self.ranked[r]:
                origins = [self.row_dict.resolve(o) for o in self.provenance.rows(r, c)]
                yield RelatedPair(token, self.col_dict.resolve(c), s, self.provenance.count(r, c), origins)


def write_related(result: AnalysisResult, out: IO[str], with_scores: bool = False) -> int:
    """Write `token<TAB>related<TAB>evidence[<TAB>score][<TAB>origin]*` lines; returns the line count."""
    n = 0
    for pair in result.related():
        fields = [pair.token, pair.related, str(pair.evidence)]
        if with_scores:
            fields.append(f"{pair.score:.6f}")
        fields.extend(pair.origins)
        out.write("\t".join(fields))
        out.write("\n")
        n += 1
    return n


class CoocAnalyzer:
    def __init__(self, cfg: AnalyzeConfig | None = None, rng: np.random.Generator | None = None):
        self.cfg = cfg or AnalyzeConfig()
        self.rng = rng if rng is not None else np.random.default_rng(self.cfg.seed)
        self.log = logging.getLogger("cooc.pipeline")
        if not self.log.handlers:
            logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(message)s")

    def run(self, source: Source) -> AnalysisResult:
        cfg = self.cfg
        self.log.info(
            "Analyzing (max_row_count=%s, max_column_count=%s, max_related=%d, policy=%s)",
            cfg.max_row_count, cfg.max_column_count, cfg.max_related, cfg.sampling_policy,
        )

        # 1) Dictionaries, tallies and downsampled occurrences
        sampler = Downsampler(self.rng, cfg.max_row_count, cfg.max_column_count, cfg.sampling_policy)
        with ReplayableInput(source) as records:
            occurrences = sampler.run(records)

        # 2) Stage row-major to disk, then square it from there
        with scratch_file(cfg.scratch_dir) as path:
            write_occurrences(occurrences, path)
            del occurrences
            cooc = accumulate_file(path, cfg.max_provenance)

        # 3) Score and keep the best related columns per row
        scores, m = score(cooc.counts)
        filtered, ranked = filter_top_k(scores, cfg.max_related, cfg.positive_only)
        self.log.info("Done")

        return AnalysisResult(
            row_dict=sampler.row_dict,
            col_dict=sampler.col_dict,
            counts=cooc.counts,
            marginals=m,
            scores=scores,
            filtered=filtered,
            ranked=ranked,
            provenance=cooc.provenance,
            stats=sampler.stats,
        )
