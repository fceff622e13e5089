"""Tests for zodiac_engine/engine/optimizer.py."""

import time

import pytest

from zodiac_engine.engine.matrix import CompatibilityMatrix
from zodiac_engine.engine.optimizer import (
    OptimizeOptions,
    apply_suggestion,
    most_improved_dimension,
    suggest_moves,
)
from zodiac_engine.engine.team_score import score_team
from zodiac_engine.errors import InvalidInputError
from zodiac_engine.reference_data import build_default_rows
from zodiac_engine.zodiac_types import SIGNS, CandidateProfile


def _p(pid, sign, active=True):
    return CandidateProfile(id=pid, sign=sign, active=active)


def _matrix_with(overrides):
    rows = []
    for row in build_default_rows():
        patch = overrides.get((row["sign_a"], row["sign_b"]))
        rows.append(row | patch if patch else row)
    return CompatibilityMatrix.from_rows(rows)


@pytest.fixture(scope="module")
def matrix():
    return CompatibilityMatrix.default()


@pytest.fixture
def team():
    return [_p("t1", "Aries"), _p("t2", "Cancer")]


@pytest.fixture
def pool():
    return [_p("c1", "Libra"), _p("c2", "Leo"), _p("c3", "Scorpio")]


def _summary(moves):
    return [(m.type, m.add_id, m.remove_id) for m in moves]


class TestSuggestMoves:
    def test_full_ranking(self, matrix, team, pool):
        moves = suggest_moves(team, pool, OptimizeOptions(max_suggestions=10), matrix=matrix)
        assert _summary(moves) == [
            ("SWAP", "c1", "t2"),
            ("SWAP", "c2", "t2"),
            ("SWAP", "c3", "t1"),
            ("ADD", "c1", None),
            ("SWAP", "c1", "t1"),
            ("ADD", "c2", None),
            ("ADD", "c3", None),
        ]
        assert [m.improvement for m in moves] == pytest.approx([47, 33, 33, 62 / 3, 15, 11, 11])

    def test_default_limit(self, matrix, team, pool):
        assert len(suggest_moves(team, pool, matrix=matrix)) == 5

    def test_scores_and_gap_flag(self, matrix, team, pool):
        moves = suggest_moves(team, pool, OptimizeOptions(max_suggestions=10), matrix=matrix)
        top = moves[0]
        assert top.current_score == 45
        assert top.projected_score == 92
        assert not top.fixes_element_gap

        add_libra = next(m for m in moves if m.type == "ADD" and m.add_id == "c1")
        assert add_libra.fixes_element_gap
        assert add_libra.projected_score == pytest.approx(197 / 3)
        assert "Adds missing element(s): Air" in add_libra.benefits

    def test_reasoning_names_biggest_gain(self, matrix, team, pool):
        top = suggest_moves(team, pool, matrix=matrix)[0]
        assert top.reasoning.startswith("Swapping t2 (Cancer) for c1 (Libra)")
        assert "45.0 to 92.0" in top.reasoning
        assert "work compatibility" in top.reasoning

    def test_only_improving_moves(self, matrix, team, pool):
        for move in suggest_moves(team, pool, OptimizeOptions(max_suggestions=20), matrix=matrix):
            assert move.improvement > 0
            assert move.projected_score > move.current_score

    def test_no_oscillation(self, matrix, team, pool):
        top = suggest_moves(team, pool, matrix=matrix)[0]
        new_team = apply_suggestion(team, top, pool)
        assert [m.id for m in new_team] == ["c1", "t1"]

        new_pool = [p for p in pool if p.id != "c1"] + [p for p in team if p.id == "t2"]
        follow_up = suggest_moves(new_team, new_pool, matrix=matrix)
        assert all(not (m.add_id == "t2" and m.remove_id == "c1") for m in follow_up)
        for m in follow_up:
            assert m.projected_score > 92

    def test_remove_suggested(self, matrix):
        team = [_p("a", "Aries"), _p("b", "Libra"), _p("c", "Cancer")]
        moves = suggest_moves(team, [], matrix=matrix)
        assert _summary(moves) == [("REMOVE", None, "c")]
        assert moves[0].improvement == pytest.approx(92 - 197 / 3)
        assert moves[0].reasoning.startswith("Removing c (Cancer)")

    def test_no_remove_below_two_members(self, matrix, team):
        assert suggest_moves(team, [], matrix=matrix) == []

    def test_target_size_blocks_add(self, matrix, team, pool):
        moves = suggest_moves(team, pool, OptimizeOptions(max_suggestions=10, target_size=2), matrix=matrix)
        assert moves
        assert all(m.type != "ADD" for m in moves)

    def test_pool_members_already_on_team_ignored(self, matrix, team, pool):
        moves = suggest_moves(team, [*pool, *team], OptimizeOptions(max_suggestions=10), matrix=matrix)
        assert all(m.add_id not in ("t1", "t2") for m in moves)

    def test_inactive_candidates_ignored(self, matrix, team):
        moves = suggest_moves(team, [_p("c1", "Libra", active=False)], matrix=matrix)
        assert moves == []

    def test_same_element_add_not_suggested(self, matrix):
        team = [_p("t1", "Aries"), _p("t2", "Leo")]
        pool = [_p("c1", "Sagittarius"), _p("c2", "Gemini")]
        moves = suggest_moves(team, pool, OptimizeOptions(max_suggestions=10), matrix=matrix)
        assert _summary(moves)[0] == ("SWAP", "c2", "t1")
        assert moves[0].improvement == pytest.approx(14)
        assert moves[0].fixes_element_gap
        assert all(m.add_id != "c1" for m in moves)

    def test_element_gap_breaks_ties(self):
        matrix = _matrix_with({
            ("Aries", "Sagittarius"): {"overall_score": 90},
            ("Leo", "Sagittarius"): {"overall_score": 90},
            ("Aries", "Cancer"): {"overall_score": 90},
            ("Cancer", "Leo"): {"overall_score": 90},
        })
        team = [_p("t1", "Aries"), _p("t2", "Leo")]
        pool = [_p("c1", "Sagittarius"), _p("c2", "Cancer")]

        prioritized = suggest_moves(team, pool, OptimizeOptions(max_suggestions=4), matrix=matrix)
        assert _summary(prioritized) == [
            ("SWAP", "c2", "t1"),
            ("SWAP", "c2", "t2"),
            ("SWAP", "c1", "t1"),
            ("SWAP", "c1", "t2"),
        ]

        plain = suggest_moves(
            team, pool,
            OptimizeOptions(max_suggestions=4, prioritize_element_balance=False),
            matrix=matrix,
        )
        assert _summary(plain)[0] == ("SWAP", "c1", "t1")

    def test_min_element_count_sets_gap_flag(self, matrix, team):
        pool = [_p("c2", "Leo")]
        options = OptimizeOptions(max_suggestions=10)

        strict = suggest_moves(team, pool, options, matrix=matrix, min_element_count=2)
        add = next(m for m in strict if m.type == "ADD")
        assert add.improvement == pytest.approx(11)
        assert add.fixes_element_gap
        assert "Strengthens under-represented element(s): Fire" in add.benefits
        swap = next(m for m in strict if m.type == "SWAP")
        assert (swap.add_id, swap.remove_id) == ("c2", "t2")
        assert not swap.fixes_element_gap

        default = suggest_moves(team, pool, options, matrix=matrix)
        assert not next(m for m in default if m.type == "ADD").fixes_element_gap

    def test_empty_team_rejected(self, matrix, pool):
        with pytest.raises(InvalidInputError):
            suggest_moves([], pool, matrix=matrix)

    def test_duplicate_team_ids_rejected(self, matrix, pool):
        with pytest.raises(InvalidInputError):
            suggest_moves([_p("t1", "Aries"), _p("t1", "Leo")], pool, matrix=matrix)


class TestApplySuggestion:
    def test_unknown_candidate(self, matrix, team, pool):
        top = suggest_moves(team, pool, matrix=matrix)[0]
        with pytest.raises(InvalidInputError, match="c1"):
            apply_suggestion(team, top, [])

    def test_unknown_member(self, matrix, team, pool):
        top = suggest_moves(team, pool, matrix=matrix)[0]
        with pytest.raises(InvalidInputError, match="t2"):
            apply_suggestion([_p("t1", "Aries")], top, pool)


class TestMostImprovedDimension:
    def test_conflict_drop_counts_as_gain(self, matrix):
        current = score_team([_p("a", "Aries"), _p("b", "Taurus")], matrix=matrix)
        projected = score_team([_p("a", "Aries"), _p("b", "Gemini")], matrix=matrix)
        name, gain = most_improved_dimension(current, projected)
        # work, synergy and conflict all move by 32; communication by 25
        assert name == "work_score"
        assert gain == pytest.approx(32)


class TestLargeTeams:
    @pytest.fixture
    def big_team(self):
        return [_p(f"t{i:02d}", SIGNS[i % 12]) for i in range(20)]

    @pytest.fixture
    def big_pool(self):
        return [_p(f"c{i:03d}", SIGNS[(i * 5) % 12]) for i in range(300)]

    def test_projections_match_full_rescore(self, matrix, big_team, big_pool):
        moves = suggest_moves(big_team, big_pool, OptimizeOptions(max_suggestions=10), matrix=matrix)
        assert moves
        for move in moves:
            applied = apply_suggestion(big_team, move, big_pool)
            assert move.projected_score == pytest.approx(score_team(applied, matrix=matrix).overall_score)
        for ahead, behind in zip(moves, moves[1:]):
            assert ahead.improvement >= behind.improvement - 1e-9

    def test_finishes_quickly(self, matrix, big_team, big_pool):
        started = time.monotonic()
        suggest_moves(big_team, big_pool, matrix=matrix)
        assert time.monotonic() - started < 3.0
