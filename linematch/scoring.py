from dataclasses import dataclass
from enum import Enum
import unicodedata
from functools import lru_cache
from typing import List, NamedTuple, Optional, Tuple

import numpy as np

from .config import (
    SCORE_MIN, SCORE_MAX,
    PATH_SEPARATORS, DOT_SEPARATORS, WORD_SEPARATORS, START_OF_LINE,
    BONUS_CACHE_SIZE,
    ScoreConfig, DEFAULT_CONFIG,
)


# ---------- Case folding ----------
@lru_cache(maxsize=4096)
def fold_char(ch: str) -> str:
    """Simple lowercase: one character in, one character out."""
    low = ch.lower()
    if len(low) == 1:
        return low
    # full mapping appended combining marks (U+0130 -> "i" + U+0307); keep the base letter
    if all(unicodedata.combining(c) for c in low[1:]):
        return low[0]
    return ch

def fold_text(text: str) -> str:
    return "".join(fold_char(ch) for ch in text)


# ---------- Existence check ----------
def has_match(query: str, candidate: str) -> bool:
    """True when every query char appears in candidate, in order, ignoring case."""
    if not query:
        return True
    if len(candidate) < len(query):
        return False
    folded = fold_text(query)
    cursor = 0
    for ch in candidate:
        if fold_char(ch) == folded[cursor]:
            cursor += 1
            if cursor == len(folded):
                return True
    return False


# ---------- Positional bonuses ----------
def boundary_kind(current: str, previous: str) -> str:
    # separators first; a separator is never lowercase so camelCase cannot collide
    if previous in PATH_SEPARATORS:
        return "slash"
    if previous in DOT_SEPARATORS:
        return "dot"
    if previous in WORD_SEPARATORS:
        return "word"
    if previous.islower() and current.isupper():
        return "capital"
    return "none"

def character_bonus(current: str, previous: str, config: ScoreConfig = DEFAULT_CONFIG) -> float:
    kind = boundary_kind(current, previous)
    if kind == "slash":
        return config.match_slash
    if kind == "dot":
        return config.match_dot
    if kind == "word":
        return config.match_word
    if kind == "capital":
        return config.match_capital
    return 0.0

@lru_cache(maxsize=BONUS_CACHE_SIZE)
def _bonus_for(candidate: str, config: ScoreConfig) -> np.ndarray:
    out = np.zeros(len(candidate), dtype=np.float64)
    previous = START_OF_LINE
    for i, current in enumerate(candidate):
        out[i] = character_bonus(current, previous, config)
        previous = current
    out.setflags(write=False)
    return out

def compute_bonus(candidate: str, config: ScoreConfig = DEFAULT_CONFIG) -> np.ndarray:
    """
    Per-character bonus for `candidate`, read-only.

    Depends only on the candidate text and the tuning, so results are cached
    and shared between queries.
    """
    return _bonus_for(candidate, config)


# ---------- Result types ----------
class MatchKind(Enum):
    NO_MATCH = "no_match"
    MATCH = "match"
    EXACT = "exact"


@dataclass(frozen=True)
class MatchResult:
    candidate: str
    index: int
    score: float
    positions: Optional[Tuple[int, ...]] = None

    @property
    def kind(self) -> MatchKind:
        if self.score == SCORE_MIN:
            return MatchKind.NO_MATCH
        if self.score == SCORE_MAX:
            return MatchKind.EXACT
        return MatchKind.MATCH

    @property
    def matched(self) -> bool:
        return self.kind is not MatchKind.NO_MATCH


class ScoreTables(NamedTuple):
    """
    D[j, i]           best score with query[j] matched exactly at candidate[i]
    M[j, i]           best score for query[:j+1] within candidate[:i+1]
    consecutive[j, i] D[j, i] extends a run (query[j-1] sits at i-1)
    origin[j, i]      column k <= i whose D[j, k] gives M[j, i]; -1 if unreachable
    """
    D: np.ndarray
    M: np.ndarray
    consecutive: np.ndarray
    origin: np.ndarray


# ---------- Dynamic program ----------
def score_tables(
    query: str,
    candidate: str,
    config: ScoreConfig = DEFAULT_CONFIG,
    bonus: Optional[np.ndarray] = None,
) -> ScoreTables:
    m, n = len(query), len(candidate)
    if bonus is None:
        bonus = compute_bonus(candidate, config)

    q_chars = np.array(list(fold_text(query)), dtype="<U1")
    c_chars = np.array(list(fold_text(candidate)), dtype="<U1")
    equal = q_chars[:, None] == c_chars[None, :]

    cols = np.arange(n)
    steps = cols.astype(np.float64)

    D = np.full((m, n), SCORE_MIN, dtype=np.float64)
    M = np.full((m, n), SCORE_MIN, dtype=np.float64)
    consecutive = np.zeros((m, n), dtype=bool)
    origin = np.full((m, n), -1, dtype=np.int64)

    for j in range(m):
        gap = config.gap_trailing if j == m - 1 else config.gap_inner

        if j == 0:
            row = np.where(equal[0], bonus + steps * config.gap_leading, SCORE_MIN)
        else:
            prev_m = np.concatenate(([SCORE_MIN], M[j - 1, :-1]))
            prev_d = np.concatenate(([SCORE_MIN], D[j - 1, :-1]))
            fresh = prev_m + bonus
            run = prev_d + config.match_consecutive
            take_run = run >= fresh
            row = np.where(equal[j], np.where(take_run, run, fresh), SCORE_MIN)
            consecutive[j] = equal[j] & take_run & np.isfinite(run)
        D[j] = row

        # M[j, i] = max(D[j, i], M[j, i-1] + gap) == max_{k<=i} D[j, k] + (i - k) * gap
        carried = row - steps * gap
        best = np.maximum.accumulate(carried)
        M[j] = best + steps * gap
        hit = (carried == best) & np.isfinite(best)
        origin[j] = np.maximum.accumulate(np.where(hit, cols, -1))

    return ScoreTables(D, M, consecutive, origin)


def _backtrack(tables: ScoreTables) -> List[int]:
    m, n = tables.D.shape
    positions = [0] * m
    i = n - 1
    must_match = False
    for j in range(m - 1, -1, -1):
        if not must_match:
            i = int(tables.origin[j, i])
        positions[j] = i
        must_match = bool(tables.consecutive[j, i])
        i -= 1
    return positions


# ---------- Public entry points ----------
def match(
    query: str,
    candidate: str,
    index: int = 0,
    positions: bool = False,
    config: ScoreConfig = DEFAULT_CONFIG,
) -> MatchResult:
    """
    Score `candidate` against `query` and optionally locate the matched characters.

    Empty query  -> neutral 0.0, no positions
    No match     -> SCORE_MIN
    Equal text   -> SCORE_MAX, every position
    Otherwise    -> finite DP score
    """
    if not query:
        return MatchResult(candidate, index, 0.0, () if positions else None)
    if not has_match(query, candidate):
        return MatchResult(candidate, index, SCORE_MIN, () if positions else None)
    if len(query) == len(candidate):
        # in-order subsequence of equal length: same text after folding
        return MatchResult(candidate, index, SCORE_MAX,
                           tuple(range(len(candidate))) if positions else None)

    tables = score_tables(query, candidate, config)
    value = float(tables.M[-1, -1])
    located = tuple(_backtrack(tables)) if positions else None
    return MatchResult(candidate, index, value, located)


def score(query: str, candidate: str, config: ScoreConfig = DEFAULT_CONFIG) -> float:
    return match(query, candidate, config=config).score


def locate(query: str, candidate: str, config: ScoreConfig = DEFAULT_CONFIG) -> List[int]:
    """Indices of the matched characters in `candidate`; empty when there is no match."""
    return list(match(query, candidate, positions=True, config=config).positions)
