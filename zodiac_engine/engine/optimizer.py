"""Team optimizer: ranked add / remove / swap suggestions for a team.

Moves are ranked from running pair totals. The team's pairs are tallied
once, as is every member's and every candidate's contribution against the
team; a move's projected score then follows by adding and subtracting
those tallies. Full score breakdowns are built only for the suggestions
returned. Only moves that strictly raise the score are suggested, so
applying the top suggestion can never make its reverse the next top
suggestion.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from itertools import combinations
import logging
from typing import Literal

from pydantic import BaseModel, Field

from zodiac_engine.engine.conflicts import DEFAULT_CONFLICT_THRESHOLD
from zodiac_engine.engine.element_balance import count_elements, element_shortfall
from zodiac_engine.engine.matrix import CompatibilityMatrix, CompatibilityRecord
from zodiac_engine.engine.pair_scorer import PairScorer
from zodiac_engine.engine.team_builder import eligible_profiles
from zodiac_engine.engine.team_score import ScoreBreakdown, score_team
from zodiac_engine.errors import InvalidInputError
from zodiac_engine.zodiac_types import ELEMENTS, CandidateProfile, require_unique


logger = logging.getLogger(__name__)

MoveType = Literal["ADD", "REMOVE", "SWAP"]

_MIN_IMPROVEMENT = 1e-9
_TYPE_ORDER: dict[str, int] = {"ADD": 0, "REMOVE": 1, "SWAP": 2}

_DIMENSION_LABELS: dict[str, str] = {
    "work_score": "work compatibility",
    "communication_score": "communication",
    "conflict_potential": "conflict potential",
    "synergy_score": "synergy",
}


# ---------------------------------------------------------------------------
# Models
# ---------------------------------------------------------------------------
class Suggestion(BaseModel):
    """A single proposed change to a team."""

    type: MoveType
    add_id: str | None = None
    remove_id: str | None = None
    current_score: float
    projected_score: float
    improvement: float
    fixes_element_gap: bool = False
    conflict_count: int = Field(default=0, ge=0)
    reasoning: str = ""
    benefits: list[str] = Field(default_factory=list)

    @property
    def subjects(self) -> tuple[str, ...]:
        return tuple(sorted(i for i in (self.add_id, self.remove_id) if i is not None))


class OptimizeOptions(BaseModel):
    """Knobs for ``suggest_moves``."""

    max_suggestions: int = Field(default=5, ge=1)
    prioritize_element_balance: bool = True
    minimize_conflicts: bool = True
    target_size: int | None = Field(default=None, ge=2)


@dataclass(frozen=True)
class _Tally:
    """Sum of overall scores, pair count and conflict pairs over some pairs."""

    total: float = 0.0
    pairs: int = 0
    conflicts: int = 0

    def __add__(self, other: _Tally) -> _Tally:
        return _Tally(self.total + other.total, self.pairs + other.pairs, self.conflicts + other.conflicts)

    def __sub__(self, other: _Tally) -> _Tally:
        return _Tally(self.total - other.total, self.pairs - other.pairs, self.conflicts - other.conflicts)

    @property
    def mean(self) -> float:
        # fewer than two members scores like the team-score sentinel
        return self.total / self.pairs if self.pairs else 100.0


@dataclass(frozen=True)
class _Move:
    type: MoveType
    added: CandidateProfile | None
    removed: CandidateProfile | None
    improvement: float
    fixes_element_gap: bool
    conflict_count: int

    @property
    def subjects(self) -> tuple[str, ...]:
        return tuple(sorted(p.id for p in (self.added, self.removed) if p is not None))


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------
def suggest_moves(
    current_team: Iterable[CandidateProfile],
    available_pool: Iterable[CandidateProfile],
    options: OptimizeOptions | None = None,
    matrix: CompatibilityMatrix | None = None,
    conflict_threshold: float = DEFAULT_CONFLICT_THRESHOLD,
    min_element_count: int = 1,
) -> list[Suggestion]:
    """Return up to ``max_suggestions`` improving moves, best first.

    Ranking: improvement desc, then (optionally) moves that shrink the
    element shortfall against *min_element_count*, then (optionally) fewer
    resulting conflict pairs, then the lowest involved member id.

    Raises:
        InvalidInputError: On an empty team or duplicate team member ids.
    """
    options = options or OptimizeOptions()
    team = require_unique(current_team)
    if not team:
        raise InvalidInputError("current_team must contain at least one member")

    team_ids = {m.id for m in team}
    pool = [p for p in eligible_profiles(available_pool) if p.id not in team_ids]
    scorer = PairScorer(matrix)

    def pair(p: CandidateProfile, q: CandidateProfile) -> _Tally:
        return _pair_tally(scorer.lookup_profiles(p, q), conflict_threshold)

    def against_team(p: CandidateProfile) -> _Tally:
        return sum((pair(p, m) for m in team if m.id != p.id), _Tally())

    base = sum((pair(a, b) for a, b in combinations(team, 2)), _Tally())
    own = {m.id: against_team(m) for m in team}
    offered = {c.id: against_team(c) for c in pool}
    base_counts = count_elements(team)
    base_gap = element_shortfall(base_counts, min_element_count)
    logger.info(
        "Optimizing team: members=%d candidates=%d current_score=%.2f",
        len(team), len(pool), base.mean,
    )

    moves: list[_Move] = []

    def consider(kind: MoveType, projected: _Tally,
                 added: CandidateProfile | None, removed: CandidateProfile | None) -> None:
        improvement = projected.mean - base.mean
        if improvement <= _MIN_IMPROVEMENT:
            return
        counts = dict(base_counts)
        if added is not None:
            counts[added.element] += 1
        if removed is not None:
            counts[removed.element] -= 1
        moves.append(_Move(
            type=kind,
            added=added,
            removed=removed,
            improvement=improvement,
            fixes_element_gap=element_shortfall(counts, min_element_count) < base_gap,
            conflict_count=projected.conflicts,
        ))

    can_add = options.target_size is None or len(team) < options.target_size
    if can_add:
        for cand in pool:
            consider("ADD", base + offered[cand.id], cand, None)

    if len(team) > 2:
        for member in team:
            consider("REMOVE", base - own[member.id], None, member)

    for cand in pool:
        for member in team:
            projected = base - own[member.id] + offered[cand.id] - pair(cand, member)
            consider("SWAP", projected, cand, member)

    def rank(m: _Move) -> tuple:
        return (
            -m.improvement,
            0 if (m.fixes_element_gap or not options.prioritize_element_balance) else 1,
            m.conflict_count if options.minimize_conflicts else 0,
            m.subjects,
            _TYPE_ORDER[m.type],
        )

    kept: list[_Move] = []
    seen: set[tuple[str, ...]] = set()
    for move in sorted(moves, key=rank):
        if move.subjects in seen:
            continue
        seen.add(move.subjects)
        kept.append(move)
        if len(kept) >= options.max_suggestions:
            break

    def score(members: list[CandidateProfile]) -> ScoreBreakdown:
        return score_team(
            members,
            matrix=scorer.matrix,
            conflict_threshold=conflict_threshold,
            min_element_count=min_element_count,
        )

    current = score(team)
    ranked = [
        _make_suggestion(move, current, score(_apply(team, move)), min_element_count)
        for move in kept
    ]
    logger.debug("Generated %d improving moves, returning %d", len(moves), len(ranked))
    return ranked


def apply_suggestion(
    team: Iterable[CandidateProfile],
    suggestion: Suggestion,
    pool: Iterable[CandidateProfile],
) -> list[CandidateProfile]:
    """Return *team* with *suggestion* applied (profiles resolved from *pool*).

    Raises:
        InvalidInputError: If a referenced id is not in the team / pool.
    """
    members = require_unique(team)
    if suggestion.remove_id is not None:
        if suggestion.remove_id not in {m.id for m in members}:
            raise InvalidInputError(f"Unknown team member id: {suggestion.remove_id!r}")
        members = [m for m in members if m.id != suggestion.remove_id]
    if suggestion.add_id is not None:
        incoming = next((p for p in pool if p.id == suggestion.add_id), None)
        if incoming is None:
            raise InvalidInputError(f"Unknown candidate id: {suggestion.add_id!r}")
        members.append(incoming)
    return require_unique(members)


def most_improved_dimension(current: ScoreBreakdown, projected: ScoreBreakdown) -> tuple[str, float]:
    """Dimension with the largest gain (a drop, for conflict potential)."""
    best_name, best_gain = "", float("-inf")
    for name in _DIMENSION_LABELS:
        delta = projected.dimension(name) - current.dimension(name)
        gain = -delta if name == "conflict_potential" else delta
        if gain > best_gain:
            best_name, best_gain = name, gain
    return best_name, best_gain


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------
def _pair_tally(record: CompatibilityRecord, conflict_threshold: float) -> _Tally:
    return _Tally(record.overall_score, 1, int(record.conflict_potential >= conflict_threshold))


def _apply(team: list[CandidateProfile], move: _Move) -> list[CandidateProfile]:
    members = [m for m in team if move.removed is None or m.id != move.removed.id]
    if move.added is not None:
        members.append(move.added)
    return members


def _make_suggestion(
    move: _Move,
    current: ScoreBreakdown,
    projected: ScoreBreakdown,
    min_element_count: int,
) -> Suggestion:
    return Suggestion(
        type=move.type,
        add_id=move.added.id if move.added else None,
        remove_id=move.removed.id if move.removed else None,
        current_score=current.overall_score,
        projected_score=projected.overall_score,
        improvement=projected.overall_score - current.overall_score,
        fixes_element_gap=move.fixes_element_gap,
        conflict_count=len(projected.conflicts),
        reasoning=_reasoning(move.type, current, projected, move.added, move.removed),
        benefits=_benefits(current, projected, min_element_count),
    )


def _reasoning(
    kind: MoveType,
    current: ScoreBreakdown,
    projected: ScoreBreakdown,
    added: CandidateProfile | None,
    removed: CandidateProfile | None,
) -> str:
    if kind == "ADD":
        action = f"Adding {added.label} ({added.sign})"
    elif kind == "REMOVE":
        action = f"Removing {removed.label} ({removed.sign})"
    else:
        action = f"Swapping {removed.label} ({removed.sign}) for {added.label} ({added.sign})"

    name, gain = most_improved_dimension(current, projected)
    text = (
        f"{action} raises the team score from {current.overall_score:.1f} "
        f"to {projected.overall_score:.1f}"
    )
    if gain > 0:
        text += f"; the biggest gain is in {_DIMENSION_LABELS[name]} ({gain:+.1f})."
    else:
        text += "."
    return text


def _benefits(current: ScoreBreakdown, projected: ScoreBreakdown, min_element_count: int = 1) -> list[str]:
    benefits: list[str] = []
    before, after = current.balance.counts, projected.balance.counts
    filled = [e for e in ELEMENTS if before[e] == 0 and after[e] > 0]
    if filled:
        benefits.append(f"Adds missing element(s): {', '.join(filled)}")
    lifted = [e for e in ELEMENTS if 0 < before[e] < min_element_count and after[e] > before[e]]
    if lifted:
        benefits.append(f"Strengthens under-represented element(s): {', '.join(lifted)}")
    resolved = len(current.conflicts) - len(projected.conflicts)
    if resolved > 0:
        benefits.append(f"Resolves {resolved} conflict pair(s)")
    if projected.level != current.level and not current.is_sentinel:
        benefits.append(f"Compatibility level becomes {projected.level}")
    return benefits
