"""Tests for zodiac_engine/engine/pair_scorer.py."""

import pytest

from zodiac_engine.engine.matrix import CompatibilityMatrix
from zodiac_engine.engine.pair_scorer import PairScorer
from zodiac_engine.errors import InvalidInputError
from zodiac_engine.zodiac_types import SIGNS, CandidateProfile


@pytest.fixture(scope="module")
def scorer():
    return PairScorer(CompatibilityMatrix.default())


class TestLookup:
    def test_order_independent(self, scorer):
        for a in SIGNS:
            for b in SIGNS:
                assert scorer.lookup(a, b) is scorer.lookup(b, a)

    def test_self_pair(self, scorer):
        assert scorer.lookup("Virgo", "Virgo").overall_score == 85

    def test_unknown_sign(self, scorer):
        with pytest.raises(InvalidInputError, match="Ophiuchus"):
            scorer.lookup("Aries", "Ophiuchus")

    def test_lookup_profiles(self, scorer):
        p = CandidateProfile(id="a", sign="Scorpio")
        q = CandidateProfile(id="b", sign="Taurus")
        assert scorer.lookup_profiles(p, q).overall_score == 90


class TestSignQueries:
    def test_best_matches_for_aries(self, scorer):
        matches = scorer.best_matches("Aries", limit=3)
        # the three Air signs score 92; ties follow zodiac order
        assert [r.key for r in matches] == [
            ("Aries", "Gemini"),
            ("Aries", "Libra"),
            ("Aries", "Aquarius"),
        ]

    def test_best_matches_limit(self, scorer):
        assert len(scorer.best_matches("Leo")) == 5
        assert len(scorer.best_matches("Leo", limit=20)) == 12

    def test_top_pairs(self, scorer):
        top = scorer.top_pairs(limit=100, min_score=90)
        assert {r.overall_score for r in top} == {92, 90}
        # 9 Fire-Air pairs followed by 9 Earth-Water pairs
        assert len(top) == 18
        assert top[0].overall_score == 92
        assert top[-1].overall_score == 90

    def test_challenging_pairs_worst_first(self, scorer):
        pairs = scorer.challenging_pairs(below=60)
        scores = [r.overall_score for r in pairs]
        assert scores == sorted(scores)
        assert scores[0] == 45
        assert set(scores) == {45, 55}
