"""
Diagnostics for linematch
-------------------------
1) Score summary and per-character bonus profile for a ranked list
2) Rank sensitivity to alternate tunings (side-by-side and single-constant sweep)
"""

import math
from typing import Dict, Iterable, List, Sequence

import pandas as pd
import matplotlib.pyplot as plt

from .config import START_OF_LINE, ScoreConfig, DEFAULT_CONFIG
from .core import rank
from .scoring import MatchKind, MatchResult, boundary_kind, character_bonus


# ---------- Part A: what a ranking looks like ----------

def summarize_scores(results: Sequence[MatchResult]) -> pd.DataFrame:
    """
    One-row summary of a ranked list.

    Returns
    -------
    DataFrame with columns: ['matches','exact','min_score','mean_score','max_score']
    (min/mean/max over finite scores only; NaN when there are none)
    """
    finite = [r.score for r in results if math.isfinite(r.score)]
    exact = sum(1 for r in results if r.kind is MatchKind.EXACT)
    row = dict(
        matches=len(results),
        exact=exact,
        min_score=min(finite) if finite else float("nan"),
        mean_score=sum(finite) / len(finite) if finite else float("nan"),
        max_score=max(finite) if finite else float("nan"),
    )
    return pd.DataFrame([row])


def bonus_profile(candidate: str, config: ScoreConfig = DEFAULT_CONFIG) -> pd.DataFrame:
    """Per-character bonus of `candidate` with the boundary that produced it."""
    rows = []
    previous = START_OF_LINE
    for i, ch in enumerate(candidate):
        rows.append(dict(
            index=i,
            char=ch,
            previous=previous,
            kind=boundary_kind(ch, previous),
            bonus=character_bonus(ch, previous, config),
        ))
        previous = ch
    return pd.DataFrame(rows, columns=["index", "char", "previous", "kind", "bonus"])


def plot_score_distribution(results: Sequence[MatchResult], bins: int = 20) -> None:
    """Histogram of finite scores; exact matches are counted in the title."""
    finite = [r.score for r in results if math.isfinite(r.score)]
    exact = sum(1 for r in results if r.kind is MatchKind.EXACT)
    plt.figure(figsize=(8, 4))
    plt.hist(finite, bins=bins)
    plt.title(f"Score distribution ({len(finite)} scored, {exact} exact)")
    plt.xlabel("Score")
    plt.ylabel("Candidates")
    plt.grid(axis='y', linestyle='--', alpha=0.6)
    plt.tight_layout()


# ---------- Part B: sensitivity to tuning ----------

def _ranks(query: str, candidates: Sequence[str], config: ScoreConfig) -> Dict[int, int]:
    return {r.index: pos for pos, r in enumerate(rank(query, candidates, config=config), start=1)}


def compare_tunings(query: str, candidates: Sequence[str],
                    tunings: Dict[str, ScoreConfig]) -> pd.DataFrame:
    """
    Rank of every candidate under each named tuning.

    Returns
    -------
    DataFrame with columns ['index','candidate', <tuning name>...]; rank is 1-based,
    <NA> where the candidate did not match.
    """
    candidates = list(candidates)
    df = pd.DataFrame({"index": range(len(candidates)), "candidate": candidates})
    for name, config in tunings.items():
        ranks = _ranks(query, candidates, config)
        df[name] = pd.array([ranks.get(i) for i in range(len(candidates))], dtype="Int64")
    return df


def sweep_constant(query: str, candidates: Sequence[str], name: str,
                   values: Iterable[float], base: ScoreConfig = DEFAULT_CONFIG) -> pd.DataFrame:
    """
    Vary one ScoreConfig field and record the rank of every matching candidate.

    Returns
    -------
    DataFrame with columns: ['constant','value','index','candidate','rank','score']
    """
    if name not in ScoreConfig.field_names():
        raise ValueError(f"unknown tuning constant {name!r}; expected one of {ScoreConfig.field_names()}")

    rows: List[dict] = []
    for value in values:
        config = base.replace(**{name: value})
        for pos, r in enumerate(rank(query, candidates, config=config), start=1):
            rows.append(dict(constant=name, value=value, index=r.index,
                             candidate=r.candidate, rank=pos, score=r.score))
    return pd.DataFrame(rows, columns=["constant", "value", "index", "candidate", "rank", "score"])


def plot_sweep(sweep_df: pd.DataFrame, top: int = 10) -> None:
    """
    Line plot: rank vs constant value for the candidates that were in the top `top` at any value.
    """
    if sweep_df.empty:
        print("No data to plot.")
        return

    keep = sweep_df.loc[sweep_df["rank"] <= top, "index"].unique()
    plt.figure(figsize=(9, 5))
    for idx in keep:
        sub = sweep_df[sweep_df["index"] == idx].sort_values("value")
        plt.plot(sub["value"], sub["rank"], marker='o', label=str(sub["candidate"].iloc[0]))

    plt.gca().invert_yaxis()
    plt.title(f"Rank sensitivity: {sweep_df['constant'].iloc[0]}")
    plt.xlabel("Value")
    plt.ylabel("Rank")
    plt.grid(True, linestyle='--', alpha=0.6)
    plt.legend(fontsize=8)
    plt.tight_layout()
