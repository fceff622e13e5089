"""Conflict detection — member pairs with high conflict potential.

All functions are *pure*.
"""

from __future__ import annotations

from collections.abc import Iterable
from itertools import combinations
from typing import Literal

from pydantic import BaseModel, Field

from zodiac_engine.engine.matrix import CompatibilityMatrix
from zodiac_engine.engine.pair_scorer import PairScorer
from zodiac_engine.zodiac_types import CandidateProfile, Sign, require_unique


# ---------------------------------------------------------------------------
# Result models
# ---------------------------------------------------------------------------
Severity = Literal["Critical", "High", "Medium", "Low"]

DEFAULT_CONFLICT_THRESHOLD = 60.0


class ConflictPair(BaseModel):
    """A pair of members whose signs carry high conflict potential."""

    member_a_id: str
    member_b_id: str
    sign_a: Sign
    sign_b: Sign
    conflict_potential: float = Field(ge=0.0, le=100.0)
    severity: Severity
    recommendation: str = ""

    @property
    def member_ids(self) -> tuple[str, str]:
        return (self.member_a_id, self.member_b_id)


def classify_severity(conflict_potential: float) -> Severity:
    if conflict_potential >= 80:
        return "Critical"
    if conflict_potential >= 60:
        return "High"
    if conflict_potential >= 35:
        return "Medium"
    return "Low"


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------
def detect_conflicts(
    profiles: Iterable[CandidateProfile],
    threshold: float = DEFAULT_CONFLICT_THRESHOLD,
    matrix: CompatibilityMatrix | None = None,
) -> list[ConflictPair]:
    """Return member pairs with conflict potential >= *threshold*.

    Sorted by conflict potential desc, then by ascending id pair.

    Raises:
        InvalidInputError: If two profiles share an id.
    """
    members = require_unique(profiles)
    scorer = PairScorer(matrix)

    found: list[ConflictPair] = []
    for a, b in combinations(members, 2):
        record = scorer.lookup_profiles(a, b)
        if record.conflict_potential < threshold:
            continue
        found.append(ConflictPair(
            member_a_id=a.id,
            member_b_id=b.id,
            sign_a=a.sign,
            sign_b=b.sign,
            conflict_potential=record.conflict_potential,
            severity=classify_severity(record.conflict_potential),
            recommendation=record.management_tips,
        ))

    return sorted(found, key=lambda c: (-c.conflict_potential, c.member_a_id, c.member_b_id))


def worst_conflict_with(
    candidate: CandidateProfile,
    members: Iterable[CandidateProfile],
    scorer: PairScorer,
) -> float:
    """Highest conflict potential *candidate* would have with any of *members*."""
    return max(
        (scorer.lookup_profiles(candidate, m).conflict_potential for m in members if m.id != candidate.id),
        default=0.0,
    )
