"""
All tunable knobs live here: bonuses, gap penalties, sentinels, separators and CLI defaults.
"""

import math
from dataclasses import dataclass, fields, replace as _dc_replace

# --- Sentinels (outside the finite score range)
SCORE_MIN = -math.inf   # no match
SCORE_MAX = math.inf    # query equals candidate after case folding

# --- Gap penalties (per skipped candidate character, must be <= 0)
SCORE_GAP_LEADING  = -0.005   # before the first matched character
SCORE_GAP_TRAILING = -0.005   # after the last matched character
SCORE_GAP_INNER    = -0.01    # between two matched characters

# --- Match bonuses (must be >= 0)
SCORE_MATCH_CONSECUTIVE = 1.0   # extends a run of adjacent matches
SCORE_MATCH_SLASH       = 0.9   # previous char is a path separator (or start of line)
SCORE_MATCH_WORD        = 0.8   # previous char is a word separator
SCORE_MATCH_CAPITAL     = 0.7   # camelCase: previous lower, current upper
SCORE_MATCH_DOT         = 0.6   # previous char is '.'

# --- Boundary characters
PATH_SEPARATORS = frozenset("/")
DOT_SEPARATORS  = frozenset(".")
WORD_SEPARATORS = frozenset("-_ ")
START_OF_LINE   = "/"   # synthetic predecessor of the first character

# --- Bonus cache size (bonus arrays depend only on the candidate)
BONUS_CACHE_SIZE = 4096

# --- Parallel ranking ramp (avoid spinning up workers for a handful of lines)
RAMP_SMALL_LIMIT    = 17   # below: ceil(n / RAMP_SMALL_DIVISOR) workers
RAMP_SMALL_DIVISOR  = 4
RAMP_MEDIUM_WORKERS = 4    # 17..32 candidates
RAMP_LARGE_LIMIT    = 32   # above: ceil(n / RAMP_LARGE_DIVISOR) workers
RAMP_LARGE_DIVISOR  = 8

# --- Progress bar granularity (chunks per serial ranking pass)
PROGRESS_UPDATES = 50

# --- CLI defaults
DEFAULT_LINES       = 10
DEFAULT_PARALLELISM = 4
DEFAULT_PROMPT      = "> "
DEFAULT_BENCHMARK   = 0

# --- Exit codes (grep-like)
EXIT_MATCH    = 0
EXIT_NO_MATCH = 1


@dataclass(frozen=True)
class ScoreConfig:
    """Read-only table of scoring constants handed to every scoring call."""
    gap_leading: float = SCORE_GAP_LEADING
    gap_trailing: float = SCORE_GAP_TRAILING
    gap_inner: float = SCORE_GAP_INNER
    match_consecutive: float = SCORE_MATCH_CONSECUTIVE
    match_slash: float = SCORE_MATCH_SLASH
    match_word: float = SCORE_MATCH_WORD
    match_capital: float = SCORE_MATCH_CAPITAL
    match_dot: float = SCORE_MATCH_DOT

    def __post_init__(self):
        for f in fields(self):
            value = getattr(self, f.name)
            if not math.isfinite(value):
                raise ValueError(f"{f.name} must be finite, got {value!r}")
            if f.name.startswith("gap_") and value > 0:
                raise ValueError(f"{f.name} is a penalty and must be <= 0, got {value!r}")
            if f.name.startswith("match_") and value < 0:
                raise ValueError(f"{f.name} is a bonus and must be >= 0, got {value!r}")

    def replace(self, **changes) -> "ScoreConfig":
        return _dc_replace(self, **changes)

    @classmethod
    def field_names(cls):
        return [f.name for f in fields(cls)]


DEFAULT_CONFIG = ScoreConfig()
