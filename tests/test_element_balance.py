"""Tests for zodiac_engine/engine/element_balance.py."""

import pytest

from zodiac_engine.engine.element_balance import (
    analyze_balance,
    calculate_blau_index,
    count_elements,
    element_shortfall,
)
from zodiac_engine.zodiac_types import CandidateProfile


def _p(pid, sign):
    return CandidateProfile(id=pid, sign=sign)


class TestBlauIndex:
    def test_empty(self):
        assert calculate_blau_index([]) == 0.0

    def test_homogeneous(self):
        assert calculate_blau_index(["Fire", "Fire", "Fire"]) == 0.0

    def test_four_even_categories(self):
        assert calculate_blau_index(["Fire", "Earth", "Air", "Water"]) == pytest.approx(0.75)


class TestAnalyzeBalance:
    def test_counts_always_list_every_element(self):
        counts = count_elements([_p("a", "Leo")])
        assert counts == {"Fire": 1, "Earth": 0, "Air": 0, "Water": 0}

    def test_balanced_team(self):
        report = analyze_balance([
            _p("a", "Aries"), _p("b", "Taurus"), _p("c", "Gemini"), _p("d", "Cancer"),
        ])
        assert report.is_balanced
        assert report.missing_elements == []
        assert report.diversity == pytest.approx(0.75)

    def test_missing_elements_in_canonical_order(self):
        report = analyze_balance([_p("a", "Pisces"), _p("b", "Gemini")])
        assert not report.is_balanced
        assert report.missing_elements == ["Fire", "Earth"]

    def test_dominant_element(self):
        report = analyze_balance([_p("a", "Cancer"), _p("b", "Scorpio"), _p("c", "Leo")])
        assert report.dominant_element == "Water"

    def test_single_element_group(self):
        report = analyze_balance([_p("a", "Aries"), _p("b", "Leo"), _p("c", "Sagittarius")])
        assert not report.is_balanced
        assert report.missing_elements == ["Earth", "Air", "Water"]
        assert report.dominant_element == "Fire"
        assert report.diversity == 0.0

    def test_dominant_tie_goes_to_canonical_order(self):
        report = analyze_balance([_p("a", "Pisces"), _p("b", "Gemini")])
        assert report.dominant_element == "Air"

    def test_empty_group(self):
        report = analyze_balance([])
        assert report.dominant_element is None
        assert report.missing_elements == ["Fire", "Earth", "Air", "Water"]
        assert not report.is_balanced
        assert report.diversity == 0.0

    def test_min_count(self):
        group = [
            _p("a", "Aries"), _p("b", "Taurus"), _p("c", "Gemini"), _p("d", "Cancer"),
            _p("e", "Leo"), _p("f", "Virgo"), _p("g", "Libra"),
        ]
        assert analyze_balance(group, min_count=1).is_balanced
        report = analyze_balance(group, min_count=2)
        assert not report.is_balanced
        assert report.missing_elements == []


class TestElementShortfall:
    def test_counts_members_still_needed(self):
        counts = {"Fire": 3, "Earth": 2, "Air": 0, "Water": 1}
        assert element_shortfall(counts) == 1
        assert element_shortfall(counts, min_count=2) == 3

    def test_balanced_has_no_shortfall(self):
        assert element_shortfall({"Fire": 1, "Earth": 1, "Air": 1, "Water": 1}) == 0
