"""
Interactive picker
------------------
- Prompt line with the current query, results window underneath
- Matched characters shown in reverse video, selected line in bold
- Every query edit re-ranks the whole candidate list; the previous result is discarded
- Enter prints the selected candidate to stdout, Esc / Ctrl-C cancels

Keys are turned into state transitions by `apply_key`, and the screen layout is
produced by `render_lines`; both are plain functions so the curses loop stays thin.
"""

import curses
import logging
import os
import sys
from contextlib import contextmanager
from dataclasses import dataclass, field, replace
from typing import FrozenSet, List, Optional, Sequence, Tuple, Union

from .config import EXIT_MATCH, EXIT_NO_MATCH, DEFAULT_LINES
from .core import format_score, search_locate
from .scoring import MatchResult

log = logging.getLogger(__name__)

# actions returned by apply_key
NONE = "none"
SEARCH = "search"
MOVE = "move"
ACCEPT = "accept"
CANCEL = "cancel"

_ACCEPT_KEYS = {"\n", "\r", curses.KEY_ENTER}
_CANCEL_KEYS = {"\x1b", "\x03", "\x07"}          # Esc, Ctrl-C, Ctrl-G
_BACKSPACE_KEYS = {"\x7f", "\x08", curses.KEY_BACKSPACE}
_UP_KEYS = {curses.KEY_UP, "\x10"}              # Ctrl-P
_DOWN_KEYS = {curses.KEY_DOWN, "\x0e"}          # Ctrl-N
_CLEAR_KEYS = {"\x15"}                          # Ctrl-U


@dataclass(frozen=True)
class PickerState:
    query: str = ""
    selected: int = 0


@dataclass(frozen=True)
class ScreenLine:
    text: str
    highlight: FrozenSet[int] = field(default_factory=frozenset)
    selected: bool = False


def apply_key(state: PickerState, key: Union[str, int], visible: int) -> Tuple[PickerState, str]:
    """Next state and the action the loop should take for `key`."""
    if key in _ACCEPT_KEYS:
        return state, ACCEPT
    if key in _CANCEL_KEYS:
        return state, CANCEL
    if key in _BACKSPACE_KEYS:
        if not state.query:
            return state, NONE
        return PickerState(state.query[:-1], 0), SEARCH
    if key in _CLEAR_KEYS:
        if not state.query:
            return state, NONE
        return PickerState("", 0), SEARCH
    if key in _UP_KEYS:
        return replace(state, selected=max(0, state.selected - 1)), MOVE
    if key in _DOWN_KEYS:
        return replace(state, selected=max(0, min(visible - 1, state.selected + 1))), MOVE
    if isinstance(key, str) and key.isprintable():
        return PickerState(state.query + key, 0), SEARCH
    return state, NONE


def render_lines(
    prompt: str,
    query: str,
    results: Sequence[MatchResult],
    height: int,
    width: int,
    max_results: int = DEFAULT_LINES,
    show_scores: bool = False,
    selected: int = 0,
) -> List[ScreenLine]:
    """Prompt line followed by at most `max_results` result lines that fit the screen."""
    lines = [ScreenLine((prompt + query)[:width])]
    rows = max(0, min(max_results, height - 1))
    for row, result in enumerate(results[:rows]):
        prefix = format_score(result.score) if show_scores else ""
        text = (prefix + result.candidate)[:width]
        marks = frozenset(len(prefix) + p for p in (result.positions or ()) if len(prefix) + p < width)
        lines.append(ScreenLine(text, marks, row == selected))
    return lines


def visible_count(results: Sequence[MatchResult], height: int, max_results: int) -> int:
    return min(len(results), max(0, min(max_results, height - 1)))


# ---------- curses loop ----------
def _draw(screen, lines: List[ScreenLine], cursor_col: int) -> None:
    screen.erase()
    height, width = screen.getmaxyx()
    for row, line in enumerate(lines[:height]):
        # leave the last column free: writing the bottom-right cell is an error in curses
        for col, ch in enumerate(line.text[:max(0, width - 1)]):
            attr = curses.A_REVERSE if col in line.highlight else curses.A_NORMAL
            if line.selected:
                attr |= curses.A_BOLD
            screen.addstr(row, col, ch, attr)
    screen.move(0, min(cursor_col, max(0, width - 2)))
    screen.refresh()


def _loop(screen, candidates: Sequence[str], options) -> Optional[str]:
    screen.keypad(True)
    state = PickerState()
    results = search_locate(state.query, candidates, options.parallelism, prefer="threads")
    while True:
        height, width = screen.getmaxyx()
        lines = render_lines(options.prompt, state.query, results, height, width,
                             options.lines, options.show_scores, state.selected)
        _draw(screen, lines, len(options.prompt) + len(state.query))

        key = screen.get_wch()
        state, action = apply_key(state, key, visible_count(results, height, options.lines))
        if action == ACCEPT:
            return results[state.selected].candidate if results else None
        if action == CANCEL:
            return None
        if action == SEARCH:
            results = search_locate(state.query, candidates, options.parallelism, prefer="threads")
            log.debug("query %r -> %d results", state.query, len(results))


@contextmanager
def _attach_tty():
    """Point fds 0/1 at the controlling terminal while curses runs (stdin is the candidate pipe)."""
    if sys.stdin.isatty() and sys.stdout.isatty():
        yield
        return
    sys.stdout.flush()
    tty = os.open("/dev/tty", os.O_RDWR)
    saved_in, saved_out = os.dup(0), os.dup(1)
    try:
        os.dup2(tty, 0)
        os.dup2(tty, 1)
        yield
    finally:
        os.dup2(saved_in, 0)
        os.dup2(saved_out, 1)
        for fd in (tty, saved_in, saved_out):
            os.close(fd)


def run(candidates: Sequence[str], options) -> int:
    """
    Run the picker and print the chosen candidate.

    `options` needs `prompt`, `lines`, `show_scores` and `parallelism`
    (the parsed CLI namespace). Returns the process exit code.
    A missing terminal is reported on stderr and counts as no selection.
    """
    try:
        with _attach_tty():
            chosen = curses.wrapper(_loop, candidates, options)
    except KeyboardInterrupt:
        chosen = None
    except (OSError, curses.error) as e:
        print(f"[!] Could not open the terminal: {e}", file=sys.stderr)
        return EXIT_NO_MATCH

    if chosen is None:
        return EXIT_NO_MATCH
    print(chosen)
    return EXIT_MATCH
