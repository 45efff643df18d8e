"""
Tests for services.toplists.extraction.extractor

Covers:
  1. Only diagonal rows (row label == column label) are kept
  2. Null labels skip the row without error
  3. Numeric/string labels compare by their host string form
  4. Bad or missing values coerce to 0 and still rank
  5. Descending sort, stable for ties, capped at TOP_N
"""

import math

import pytest

from services.toplists.extraction.extractor import (
    TOP_N,
    MatchEntry,
    coerce_value,
    extract_top_n,
    find_matches,
    rank_matches,
    stringify_label,
)
from services.toplists.extraction.keys import DetectedKeys
from services.toplists.tests.helpers.rows import diagonal, make_row

KEYS = DetectedKeys("Row_A", "Column_A", "Value_A")


class TestStringifyLabel:
    @pytest.mark.parametrize(
        "raw, expected",
        [
            ("X", "X"),
            (10, "10"),
            (10.0, "10"),
            (2.5, "2.5"),
            (-3.0, "-3"),
            (True, "true"),
            (False, "false"),
            (float("nan"), "NaN"),
            (float("inf"), "Infinity"),
            (float("-inf"), "-Infinity"),
            (0.5, "0.5"),
            (-0.0, "0"),
            (1e20, "100000000000000000000"),
            (1e21, "1e+21"),
            (1.5e22, "1.5e+22"),
            (10**22, "1e+22"),
            (1e-6, "0.000001"),
            (1e-7, "1e-7"),
            (-2.5e-8, "-2.5e-8"),
            (123.456, "123.456"),
        ],
    )
    def test_host_string_form(self, raw, expected):
        assert stringify_label(raw) == expected


class TestCoerceValue:
    @pytest.mark.parametrize(
        "raw, expected",
        [
            ("10", 10.0),
            (" 12.5 ", 12.5),
            (7, 7.0),
            (3.25, 3.25),
            ("-4", -4.0),
            ("1e3", 1000.0),
            (True, 1.0),
            (False, 0.0),
            ("1.", 1.0),
            (".5", 0.5),
            ("+2", 2.0),
            ("1E+2", 100.0),
            ("0x10", 16.0),
            ("0o17", 15.0),
            ("0b101", 5.0),
            ("Infinity", math.inf),
            ("-Infinity", -math.inf),
        ],
    )
    def test_numeric_values(self, raw, expected):
        assert coerce_value(raw) == expected

    @pytest.mark.parametrize(
        "raw",
        [None, "", "   ", "abc", "12abc", "1_000", float("nan"), [], {},
         "inf", "infinity", "-inf", "-0x10", "0x", "0b2", "."],
    )
    def test_unparseable_values_become_zero(self, raw):
        assert coerce_value(raw) == 0.0

    def test_nan_string_becomes_zero(self):
        assert coerce_value("nan") == 0.0
        assert not math.isnan(coerce_value("NaN"))


class TestFindMatches:
    def test_keeps_only_diagonal_rows(self):
        rows = [
            make_row("X", "X", "10"),
            make_row("Y", "Z", "99"),
            make_row("Y", "Y", "30"),
        ]
        assert find_matches(rows, KEYS) == [MatchEntry("X", 10.0), MatchEntry("Y", 30.0)]

    def test_null_labels_are_skipped(self):
        rows = [
            make_row(None, None, "50"),
            make_row("X", None, "50"),
            make_row(None, "X", "50"),
            make_row("X", "X", "1"),
        ]
        assert find_matches(rows, KEYS) == [MatchEntry("X", 1.0)]

    def test_missing_label_fields_are_skipped(self):
        rows = [{"Value_A": 5}, make_row("X", "X", 2)]
        assert find_matches(rows, KEYS) == [MatchEntry("X", 2.0)]

    def test_numeric_and_string_labels_match(self):
        rows = [make_row(10, "10", 4), make_row("7", 7.0, 3)]
        assert find_matches(rows, KEYS) == [MatchEntry("10", 4.0), MatchEntry("7", 3.0)]

    def test_label_comparison_is_exact(self):
        rows = [make_row("X", "x", 1), make_row("X ", "X", 1)]
        assert find_matches(rows, KEYS) == []

    def test_bad_value_is_kept_as_zero(self):
        rows = [make_row("X", "X", "abc")]
        assert find_matches(rows, KEYS) == [MatchEntry("X", 0.0)]


class TestRankMatches:
    def test_descending_by_value(self):
        matches = [MatchEntry("a", 1), MatchEntry("b", 3), MatchEntry("c", 2)]
        assert [m.label for m in rank_matches(matches)] == ["b", "c", "a"]

    def test_ties_keep_scan_order(self):
        matches = [MatchEntry("a", 5), MatchEntry("b", 9), MatchEntry("c", 5), MatchEntry("d", 5)]
        assert [m.label for m in rank_matches(matches)] == ["b", "a", "c", "d"]

    def test_capped_at_top_n(self):
        matches = [MatchEntry(str(i), float(i)) for i in range(12)]
        ranked = rank_matches(matches)
        assert len(ranked) == TOP_N
        assert [m.label for m in ranked] == ["11", "10", "9", "8", "7"]

    def test_custom_limit(self):
        matches = [MatchEntry("a", 1), MatchEntry("b", 2)]
        assert [m.label for m in rank_matches(matches, limit=1)] == ["b"]


class TestExtractTopN:
    def test_diagonal_example(self):
        rows = [
            {"Row_A": "X", "Column_A": "X", "Value_A": "10"},
            {"Row_A": "Y", "Column_A": "Y", "Value_A": "30"},
            {"Row_A": "Y", "Column_A": "Z", "Value_A": "99"},
        ]
        assert extract_top_n(rows, KEYS) == [MatchEntry("Y", 30.0), MatchEntry("X", 10.0)]

    def test_non_numeric_value_ranks_last(self):
        rows = diagonal(("bad", "abc"), ("good", "5"), ("neg", "-1"))
        ranked = extract_top_n(rows, KEYS)
        assert [m.label for m in ranked] == ["good", "bad", "neg"]
        assert ranked[1].value == 0.0

    def test_no_matches_returns_empty(self):
        rows = [make_row("A", "B", 1), make_row("C", "D", 2)]
        assert extract_top_n(rows, KEYS) == []

    def test_fewer_than_top_n(self):
        assert len(extract_top_n(diagonal(("a", 1), ("b", 2)), KEYS)) == 2

    def test_deterministic(self):
        rows = diagonal(("a", 3), ("b", 3), ("c", 1), ("d", 7), ("e", 3), ("f", 0), ("g", 3))
        first = extract_top_n(rows, KEYS)
        assert all(extract_top_n(rows, KEYS) == first for _ in range(5))
        assert [m.label for m in first] == ["d", "a", "b", "e", "g"]

    def test_does_not_mutate_input(self):
        rows = diagonal(("a", 1), ("b", 2))
        snapshot = [dict(r) for r in rows]
        extract_top_n(rows, KEYS)
        assert rows == snapshot
