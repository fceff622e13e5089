"""Team score aggregation: pairwise scores rolled up to group level.

All functions are *pure*.
"""

from __future__ import annotations

from collections.abc import Iterable
from itertools import combinations
from typing import Literal

from pydantic import BaseModel, Field

from zodiac_engine.engine.conflicts import DEFAULT_CONFLICT_THRESHOLD, ConflictPair, detect_conflicts
from zodiac_engine.engine.element_balance import BalanceReport, analyze_balance
from zodiac_engine.engine.matrix import CompatibilityMatrix
from zodiac_engine.engine.pair_scorer import PairScorer
from zodiac_engine.reference_data import classify_level
from zodiac_engine.zodiac_types import CandidateProfile, CompatibilityLevel, require_unique


# ---------------------------------------------------------------------------
# Result models
# ---------------------------------------------------------------------------
TeamLevel = Literal["Excellent", "Good", "Moderate", "Challenging", "Difficult", "N/A"]

SCORE_DIMENSIONS: tuple[str, ...] = (
    "work_score",
    "communication_score",
    "conflict_potential",
    "synergy_score",
)


class PairScore(BaseModel):
    """Overall score of one member pair inside a group."""

    member_a_id: str
    member_b_id: str
    overall_score: float = Field(ge=0.0, le=100.0)
    level: CompatibilityLevel
    collaboration_type: str = ""


class ScoreBreakdown(BaseModel):
    """Group-level compatibility report."""

    member_ids: list[str]
    team_size: int = Field(ge=0)
    pair_count: int = Field(ge=0)
    overall_score: float = Field(ge=0.0, le=100.0)
    level: TeamLevel
    work_score: float = Field(ge=0.0, le=100.0)
    communication_score: float = Field(ge=0.0, le=100.0)
    conflict_potential: float = Field(ge=0.0, le=100.0)
    synergy_score: float = Field(ge=0.0, le=100.0)
    balance: BalanceReport
    conflicts: list[ConflictPair] = Field(default_factory=list)
    best_pairs: list[PairScore] = Field(default_factory=list)

    @property
    def is_sentinel(self) -> bool:
        return self.level == "N/A"

    def dimension(self, name: str) -> float:
        return getattr(self, name)


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------
def score_team(
    profiles: Iterable[CandidateProfile],
    matrix: CompatibilityMatrix | None = None,
    conflict_threshold: float = DEFAULT_CONFLICT_THRESHOLD,
    min_element_count: int = 1,
) -> ScoreBreakdown:
    """Aggregate pairwise scores for a group.

    Every score is the arithmetic mean over all unordered member pairs.
    A group of fewer than two members cannot conflict with itself, so it
    gets a sentinel (overall 100, level ``"N/A"``) instead of an error.

    Raises:
        InvalidInputError: If two profiles share an id.
    """
    members = require_unique(profiles)
    scorer = PairScorer(matrix)
    balance = analyze_balance(members, min_count=min_element_count)
    ids = [m.id for m in members]

    if len(members) < 2:
        return ScoreBreakdown(
            member_ids=ids,
            team_size=len(members),
            pair_count=0,
            overall_score=100.0,
            level="N/A",
            work_score=100.0,
            communication_score=100.0,
            conflict_potential=0.0,
            synergy_score=100.0,
            balance=balance,
        )

    totals = dict.fromkeys(("overall_score", *SCORE_DIMENSIONS), 0.0)
    pair_count = 0
    for a, b in combinations(members, 2):
        record = scorer.lookup_profiles(a, b)
        for key in totals:
            totals[key] += getattr(record, key)
        pair_count += 1

    means = {key: total / pair_count for key, total in totals.items()}

    return ScoreBreakdown(
        member_ids=ids,
        team_size=len(members),
        pair_count=pair_count,
        level=classify_level(means["overall_score"]),
        balance=balance,
        conflicts=detect_conflicts(members, conflict_threshold, scorer.matrix),
        best_pairs=rank_pairs(members, limit=3, matrix=scorer.matrix),
        **means,
    )


def mean_overall_score(members: list[CandidateProfile], scorer: PairScorer) -> float:
    """Mean pairwise overall score of *members* (100 below two members).

    Same value as ``score_team(...).overall_score`` without building the
    full report; used inside search loops.
    """
    if len(members) < 2:
        return 100.0
    ordered = sorted(members, key=lambda m: m.id)
    scores = [scorer.lookup_profiles(a, b).overall_score for a, b in combinations(ordered, 2)]
    return sum(scores) / len(scores)


def rank_pairs(
    profiles: Iterable[CandidateProfile],
    limit: int | None = None,
    matrix: CompatibilityMatrix | None = None,
) -> list[PairScore]:
    """Member pairs ordered by overall score desc, then by id pair."""
    members = require_unique(profiles)
    scorer = PairScorer(matrix)
    pairs: list[PairScore] = []
    for a, b in combinations(members, 2):
        record = scorer.lookup_profiles(a, b)
        pairs.append(PairScore(
            member_a_id=a.id,
            member_b_id=b.id,
            overall_score=record.overall_score,
            level=record.level,
            collaboration_type=record.best_collaboration_type,
        ))
    pairs.sort(key=lambda p: (-p.overall_score, p.member_a_id, p.member_b_id))
    return pairs if limit is None else pairs[:limit]
