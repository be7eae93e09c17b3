from .config import SCORE_MIN, SCORE_MAX, ScoreConfig, DEFAULT_CONFIG
from .scoring import (
    fold_char, fold_text, has_match, compute_bonus,
    score, locate, match, MatchKind, MatchResult,
)
from .core import rank, search_score, search_locate, load_candidates, results_frame

__version__ = "0.1.0"
