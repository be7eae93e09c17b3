import io
import logging
import math
import time
from pathlib import Path
from typing import Iterable, List, Optional, Sequence, TextIO, Union

import pandas as pd
from joblib import Parallel, delayed
from tqdm import tqdm

from .config import (
    SCORE_MIN,
    RAMP_SMALL_LIMIT, RAMP_SMALL_DIVISOR, RAMP_MEDIUM_WORKERS,
    RAMP_LARGE_LIMIT, RAMP_LARGE_DIVISOR,
    DEFAULT_PARALLELISM, PROGRESS_UPDATES,
    ScoreConfig, DEFAULT_CONFIG,
)
from .scoring import MatchResult, match

log = logging.getLogger(__name__)


# --------- helpers ----------
def ceil_div(a: int, b: int) -> int:
    return (a + b - 1) // b

def calculate_parallelism(candidate_count: int, configured: int, empty_query: bool) -> int:
    """Worker count for a search, ramped up with the number of candidates."""
    if empty_query:
        return 1
    if candidate_count < RAMP_SMALL_LIMIT:
        ramped = ceil_div(candidate_count, RAMP_SMALL_DIVISOR)
    elif candidate_count > RAMP_LARGE_LIMIT:
        ramped = ceil_div(candidate_count, RAMP_LARGE_DIVISOR)
    else:
        ramped = RAMP_MEDIUM_WORKERS
    return max(1, min(configured, ramped, candidate_count))

def split_chunks(candidates: Sequence[str], parts: int) -> List[tuple]:
    """Contiguous (offset, slice) chunks, in input order."""
    if not candidates:
        return []
    size = ceil_div(len(candidates), max(1, parts))
    return [(start, list(candidates[start:start + size]))
            for start in range(0, len(candidates), size)]

def _score_chunk(
    query: str,
    chunk: Sequence[str],
    offset: int,
    positions: bool,
    config: ScoreConfig,
) -> List[MatchResult]:
    out = []
    for k, candidate in enumerate(chunk):
        # match() runs the subsequence check before any table is built
        result = match(query, candidate, index=offset + k, positions=positions, config=config)
        if result.score > SCORE_MIN:
            out.append(result)
    return out

def _order(results: List[MatchResult]) -> List[MatchResult]:
    # stable: equal scores keep input order
    return sorted(results, key=lambda r: (-r.score, r.index))


# --------- main ranking ----------
def rank(
    query: str,
    candidates: Sequence[str],
    parallelism: int = 1,
    positions: bool = False,
    config: ScoreConfig = DEFAULT_CONFIG,
    progress: bool = False,
    prefer: Optional[str] = None,
) -> List[MatchResult]:
    """
    Rank `candidates` against `query`, best first.

    Non-matching candidates are dropped. Equal scores keep their input order,
    so the result does not depend on `parallelism`. `prefer` is handed to
    joblib ("threads" avoids pickling the candidates into worker processes).
    """
    if parallelism < 0:
        raise ValueError(f"parallelism must be >= 0, got {parallelism}")
    candidates = list(candidates)
    if not query:
        return [MatchResult(c, i, 0.0, () if positions else None) for i, c in enumerate(candidates)]

    workers = calculate_parallelism(len(candidates), parallelism, empty_query=False)
    started = time.perf_counter()

    if workers < 2:
        # chunking here only drives the progress bar
        chunks = split_chunks(candidates, PROGRESS_UPDATES)
        results = []
        for offset, chunk in tqdm(chunks, desc="Ranking", disable=not progress):
            results.extend(_score_chunk(query, chunk, offset, positions, config))
    else:
        chunks = split_chunks(candidates, workers)
        log.debug("ranking %d candidates in %d chunks on %d workers",
                  len(candidates), len(chunks), workers)
        it = tqdm(chunks, desc="Ranking (parallel)", disable=not progress)
        mapped = Parallel(n_jobs=workers, prefer=prefer)(
            delayed(_score_chunk)(query, chunk, offset, positions, config)
            for offset, chunk in it
        )
        results = [r for part in mapped for r in part]

    ranked = _order(results)
    log.debug("query %r: %d/%d matched in %.3fs",
              query, len(ranked), len(candidates), time.perf_counter() - started)
    return ranked


def search_score(query: str, candidates: Sequence[str],
                 parallelism: int = DEFAULT_PARALLELISM, config: ScoreConfig = DEFAULT_CONFIG) -> List[MatchResult]:
    return rank(query, candidates, parallelism=parallelism, positions=False, config=config)

def search_locate(query: str, candidates: Sequence[str],
                  parallelism: int = DEFAULT_PARALLELISM, config: ScoreConfig = DEFAULT_CONFIG,
                  prefer: Optional[str] = None) -> List[MatchResult]:
    return rank(query, candidates, parallelism=parallelism, positions=True, config=config, prefer=prefer)


# --------- I/O ----------
def _clean_lines(lines: Iterable[str]) -> List[str]:
    out = []
    for line in lines:
        line = line.strip()
        if line:
            out.append(line)
    return out

def load_candidates(source: Union[str, Path, TextIO]) -> List[str]:
    """
    Read candidate lines from a path or an open text stream.

    Lines are stripped and blank lines dropped. Files are decoded as UTF-8
    with invalid bytes replaced, so only valid text reaches the matcher.
    """
    if isinstance(source, (str, Path)):
        with open(source, "r", encoding="utf-8", errors="replace") as fh:
            return _clean_lines(fh)
    if isinstance(source, io.TextIOWrapper):
        source.reconfigure(errors="replace")
    return _clean_lines(source)

def results_frame(results: Sequence[MatchResult]) -> pd.DataFrame:
    rows = []
    for pos, r in enumerate(results, start=1):
        rows.append(dict(
            rank=pos,
            index=r.index,
            candidate=r.candidate,
            score=r.score,
            kind=r.kind.value,
            positions=" ".join(str(p) for p in r.positions) if r.positions is not None else "",
        ))
    return pd.DataFrame(rows, columns=["rank", "index", "candidate", "score", "kind", "positions"])

def format_score(value: float) -> str:
    if value == SCORE_MIN:
        return "(     ) "
    if math.isinf(value):
        return "(  inf) "
    return f"({value:5.2f}) "
