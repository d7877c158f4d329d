"""
Tests for the per-year form input helpers.
"""

from __future__ import annotations

from valuador.services.modeling.array_helpers import (
    build_array_from_list,
    build_individual_percents_map,
    resize_string_array,
)


def test_build_array_pads_with_zeros():
    assert build_array_from_list(5, ["1", "2"]) == [1.0, 2.0, 0.0, 0.0, 0.0]


def test_build_array_unparseable_values_become_zero():
    assert build_array_from_list(3, ["1.5", "abc", ""]) == [1.5, 0.0, 0.0]


def test_build_array_truncates_to_years():
    assert build_array_from_list(2, ["1", "2", "3"]) == [1.0, 2.0]
    assert build_array_from_list(0, ["1"]) == []


def test_build_array_reads_leading_number():
    assert build_array_from_list(4, ["12%", "1.5abc", " -3 ", ".5"]) == [12.0, 1.5, -3.0, 0.5]


def test_build_array_non_finite_becomes_zero():
    assert build_array_from_list(3, ["inf", "1e999", "NaN"]) == [0.0, 0.0, 0.0]


def test_build_array_accepts_none_entries():
    assert build_array_from_list(2, [None, "4"]) == [0.0, 4.0]


def test_build_individual_percents_map():
    assert build_individual_percents_map(3, ["10", "x"]) == {0: 10.0, 1: 0.0, 2: 0.0}


def test_resize_string_array():
    assert resize_string_array(["a", "b", "c"], 2) == ["a", "b"]
    assert resize_string_array(["a"], 3) == ["a", "", ""]
    assert resize_string_array(["a"], 0) == []
