"""
Tests for case folding, matching, bonuses, scoring and locating.
"""

import math

import numpy as np
import pytest

from linematch.config import (
    SCORE_MIN, SCORE_MAX,
    SCORE_MATCH_SLASH, SCORE_MATCH_WORD, SCORE_MATCH_CAPITAL, SCORE_MATCH_DOT,
    ScoreConfig,
)
from linematch.scoring import (
    fold_char, fold_text, has_match,
    boundary_kind, character_bonus, compute_bonus,
    score_tables, match, score, locate, MatchKind,
)


class TestCaseFolding:
    """Simple one-to-one lowercase mapping."""

    def test_ascii_and_other_scripts(self):
        assert fold_char("A") == "a"
        assert fold_char("Б") == "б"
        assert fold_char("Ω") == "ω"
        assert fold_char("7") == "7"
        assert fold_char("♺") == "♺"

    def test_dotted_capital_i_folds_to_i(self):
        # full lowercase of U+0130 is "i" plus a combining dot; the simple mapping is "i"
        assert len("İ".lower()) == 2
        assert fold_char("İ") == "i"
        assert has_match("ist", "İstanbul")
        assert locate("ist", "İstanbul") == [0, 1, 2]

    def test_fold_text_preserves_length(self):
        text = "İstanbul/FooBar"
        assert len(fold_text(text)) == len(text)
        assert fold_text("FooBar") == "foobar"


class TestHasMatch:
    """Cheap in-order subsequence check."""

    def test_examples(self):
        assert has_match("fbr", "foo/bar")
        assert not has_match("fbr", "foo")

    def test_case_insensitive(self):
        assert has_match("FBR", "foo/bar")
        assert has_match("fbr", "FOO/BAR")
        assert has_match("би", "БоИ")

    def test_order_matters(self):
        assert has_match("ab", "xaxb")
        assert not has_match("ba", "xaxb")

    def test_candidate_shorter_than_query(self):
        assert not has_match("abc", "ab")
        assert not has_match("a", "")

    def test_empty_query_matches_everything(self):
        assert has_match("", "")
        assert has_match("", "anything")

    def test_unicode(self):
        assert has_match("♺", "ñîƹ♺à")
        assert not has_match("♺♺", "ñîƹ♺à")


class TestBonus:
    """Positional bonuses from the preceding character."""

    def test_plain_characters(self):
        for current, previous in [("a", "b"), ("0", "#"), ("@", "b"), ("&", ","),
                                  ("😨", "♫"), ("A", "B"), ("a", "B"), ("Б", "Б"), ("и", "Б")]:
            assert character_bonus(current, previous) == 0.0

    def test_capital(self):
        assert character_bonus("G", "r") == SCORE_MATCH_CAPITAL
        assert character_bonus("Б", "и") == SCORE_MATCH_CAPITAL

    def test_slash(self):
        for current in ["a", "0", "@", "😨", "A", "Б"]:
            assert character_bonus(current, "/") == SCORE_MATCH_SLASH

    def test_dot(self):
        for current in ["a", "0", "@", "😨", "A", "Б"]:
            assert character_bonus(current, ".") == SCORE_MATCH_DOT

    def test_word_separators(self):
        for previous in [" ", "-", "_"]:
            assert character_bonus("a", previous) == SCORE_MATCH_WORD
            assert character_bonus("A", previous) == SCORE_MATCH_WORD

    def test_boundary_kind(self):
        assert boundary_kind("a", "/") == "slash"
        assert boundary_kind("a", ".") == "dot"
        assert boundary_kind("a", "-") == "word"
        assert boundary_kind("B", "o") == "capital"
        assert boundary_kind("b", "o") == "none"

    def test_compute_bonus_line(self):
        text = "foo/Bar-baz.qux fooBar"
        bonus = compute_bonus(text)
        expected = np.zeros(len(text))
        expected[0] = SCORE_MATCH_SLASH     # start of line
        expected[4] = SCORE_MATCH_SLASH     # after '/'
        expected[8] = SCORE_MATCH_WORD      # after '-'
        expected[12] = SCORE_MATCH_DOT      # after '.'
        expected[16] = SCORE_MATCH_WORD     # after ' '
        expected[19] = SCORE_MATCH_CAPITAL  # fooBar
        assert np.allclose(bonus, expected)

    def test_compute_bonus_is_read_only(self):
        bonus = compute_bonus("abc/def")
        assert not bonus.flags.writeable

    def test_compute_bonus_uses_config(self):
        config = ScoreConfig(match_slash=0.5)
        assert compute_bonus("a/b", config)[0] == 0.5
        assert compute_bonus("a/b", config)[2] == 0.5


class TestScore:
    """Dynamic-programming score and its special cases."""

    def test_no_match_is_score_min(self):
        assert score("abc", "xyz") == SCORE_MIN
        assert score("abc", "ab") == SCORE_MIN
        assert score("ba", "ab") == SCORE_MIN

    def test_equal_after_folding_is_score_max(self):
        assert score("abc", "abc") == SCORE_MAX
        assert score("ABC", "abc") == SCORE_MAX
        assert score("бои", "БОИ") == SCORE_MAX

    def test_empty_query_is_neutral(self):
        assert score("", "anything") == 0.0
        assert score("", "") == 0.0

    def test_single_character(self):
        # slash bonus at the start, two trailing gaps
        assert score("a", "a/b") == pytest.approx(0.9 - 2 * 0.005)

    def test_no_match_implies_score_min(self):
        pairs = [("fbr", "foo"), ("zz", "z"), ("qwerty", "ytrewq"), ("x", "")]
        for q, c in pairs:
            assert not has_match(q, c)
            assert score(q, c) == SCORE_MIN

    def test_matches_are_finite(self):
        pairs = [("fbr", "foo/bar"), ("ab", "xaxb"), ("app", "src/app/config.py")]
        for q, c in pairs:
            assert math.isfinite(score(q, c))

    def test_consecutive_run_preferred(self):
        spread = score("abc", "axbxc")
        run = score("abc", "xaxbc")
        assert spread == pytest.approx(0.88)
        assert run == pytest.approx(0.985)
        assert run > spread

    def test_path_start_preferred(self):
        assert score("app", "app/config") > score("app", "xapp/config")
        assert score("app", "app/config") == pytest.approx(2.865)

    def test_noise_never_increases_score(self):
        scores = [score("ab", "a" + "x" * k + "bz") for k in range(6)]
        for before, after in zip(scores, scores[1:]):
            assert after < before

    def test_inner_gap_costs_more_than_edge_gap(self):
        # two skipped chars each; one inner + one trailing beats two inner
        inner = score("ab", "axxb")
        trailing = score("ab", "axbx")
        assert inner == pytest.approx(0.88)
        assert trailing == pytest.approx(0.885)
        assert trailing > inner

    def test_alternate_tuning_changes_preference(self):
        flat = ScoreConfig(match_consecutive=0.0)
        assert score("abc", "axbxc", flat) > score("abc", "xaxbc", flat)


class TestScoreTables:
    """Shape and sentinel layout of the D/M tables."""

    def test_shapes(self):
        tables = score_tables("abc", "xaxbc")
        for table in tables:
            assert table.shape == (3, 5)

    def test_cells_before_query_position_unreachable(self):
        tables = score_tables("abc", "abcabc")
        for j in range(3):
            for i in range(j):
                assert tables.M[j, i] == SCORE_MIN
                assert tables.D[j, i] == SCORE_MIN

    def test_non_matching_cells_are_score_min(self):
        tables = score_tables("ab", "xaxb")
        assert tables.D[0, 0] == SCORE_MIN
        assert tables.D[0, 1] != SCORE_MIN
        assert tables.D[1, 2] == SCORE_MIN

    def test_m_is_running_best(self):
        tables = score_tables("ab", "axbxx")
        row = tables.M[1]
        assert row[2] == pytest.approx(tables.D[1, 2])
        assert row[3] == pytest.approx(row[2] - 0.005)
        assert row[4] == pytest.approx(row[2] - 0.010)

    def test_final_cell_is_score(self):
        tables = score_tables("fbr", "foo/bar")
        assert float(tables.M[-1, -1]) == score("fbr", "foo/bar")

    def test_explicit_bonus(self):
        bonus = np.zeros(5)
        tables = score_tables("ab", "axbxx", bonus=bonus)
        assert tables.D[0, 0] == 0.0


class TestLocate:
    """Backtracking to matched positions."""

    def _check(self, q, c):
        positions = locate(q, c)
        assert len(positions) == len(q)
        assert all(a < b for a, b in zip(positions, positions[1:]))
        assert all(0 <= p < len(c) for p in positions)
        assert "".join(fold_text(c[p]) for p in positions) == fold_text(q)

    def test_properties_hold(self):
        pairs = [
            ("fbr", "foo/bar"),
            ("abc", "axbxc"),
            ("abc", "xaxbc"),
            ("app", "src/app/config.py"),
            ("tee", "seventeen"),
            ("AC", "src/AppConfig.java"),
            ("aaa", "a_a_a_aaa"),
            ("♺à", "ñîƹ♺à"),
        ]
        for q, c in pairs:
            self._check(q, c)

    def test_positions(self):
        assert locate("abc", "axbxc") == [0, 2, 4]
        assert locate("abc", "xaxbc") == [1, 3, 4]
        assert locate("fbr", "foo/bar") == [0, 4, 6]

    def test_prefers_consecutive_run_at_boundary(self):
        assert locate("bar", "foo/bar/baz") == [4, 5, 6]

    def test_prefers_shorter_inner_gap(self):
        assert locate("oc", "foo/config") == [2, 4]

    def test_prefers_word_start(self):
        assert locate("ac", "src/AppConfig.java") == [4, 7]

    def test_no_match(self):
        assert locate("zz", "foo") == []

    def test_exact_match(self):
        assert locate("Foo", "foo") == [0, 1, 2]

    def test_empty_query(self):
        assert locate("", "foo") == []


class TestMatchResult:
    """Tagged outcome on top of the sentinel scores."""

    def test_kinds(self):
        assert match("zz", "foo").kind is MatchKind.NO_MATCH
        assert match("foo", "FOO").kind is MatchKind.EXACT
        assert match("fo", "foo").kind is MatchKind.MATCH
        assert match("", "foo").kind is MatchKind.MATCH

    def test_positions_only_when_asked(self):
        assert match("fo", "foo").positions is None
        assert match("fo", "foo", positions=True).positions == (0, 1)

    def test_matched_flag_and_index(self):
        result = match("fo", "foo", index=7)
        assert result.matched
        assert result.index == 7
        assert not match("zz", "foo").matched
