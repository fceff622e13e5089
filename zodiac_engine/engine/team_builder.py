"""Team builder: pick a near-optimal group of a target size from a pool.

Exact subset selection is combinatorial, so this is a greedy construction
followed by a bounded repair pass, not a proof of optimality:

1. Keep active profiles, one per id.
2. If the pool does not exceed the target size, take all of it.
3. Seed with the best-scoring pair.
4. Repeatedly add the candidate that maximizes the *full* recomputed team
   score (ties to the lowest id), skipping candidates that would create a
   pair at or above the conflict cutoff while an alternative exists.
5. If element balance is required and some element is below the minimum
   count, run one pass of single member swaps that lift it without
   dropping below the minimum score.

Identical inputs always produce the identical team.
"""

from __future__ import annotations

from collections.abc import Iterable
from itertools import combinations
import logging
import threading
import time

from pydantic import BaseModel, Field

from zodiac_engine.engine.conflicts import DEFAULT_CONFLICT_THRESHOLD, worst_conflict_with
from zodiac_engine.engine.element_balance import count_elements, element_shortfall
from zodiac_engine.engine.matrix import CompatibilityMatrix
from zodiac_engine.engine.pair_scorer import PairScorer
from zodiac_engine.engine.team_score import ScoreBreakdown, mean_overall_score, score_team
from zodiac_engine.errors import ConstraintUnsatisfiableError, InvalidInputError
from zodiac_engine.zodiac_types import ELEMENTS, CandidateProfile


logger = logging.getLogger(__name__)

DEFAULT_AVOID_CONFLICT_CUTOFF = 85.0


# ---------------------------------------------------------------------------
# Models
# ---------------------------------------------------------------------------
class BuildConstraints(BaseModel):
    """Optional constraints for ``build_team``."""

    require_element_balance: bool = False
    avoid_conflicts: bool = False
    min_compatibility_score: float = Field(default=0.0, ge=0.0, le=100.0)


class BuildResult(BaseModel):
    """Chosen composition, its score and what could not be honoured."""

    member_ids: list[str]
    target_size: int
    breakdown: ScoreBreakdown
    underfilled: bool = False
    forced_conflict: bool = False
    cancelled: bool = False
    repair_swaps: int = 0
    unsatisfied_constraints: list[str] = Field(default_factory=list)

    @property
    def size(self) -> int:
        return len(self.member_ids)

    @property
    def constraint_unsatisfiable(self) -> bool:
        return bool(self.unsatisfied_constraints)

    def raise_for_constraints(self) -> None:
        """Raise ``ConstraintUnsatisfiableError`` if any constraint was missed."""
        if self.unsatisfied_constraints:
            raise ConstraintUnsatisfiableError(self.unsatisfied_constraints)


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------
def eligible_profiles(pool: Iterable[CandidateProfile]) -> list[CandidateProfile]:
    """Active profiles, first occurrence per id, sorted by id."""
    if pool is None:
        raise InvalidInputError("pool must not be None")
    seen: dict[str, CandidateProfile] = {}
    for p in pool:
        if p.active and p.id not in seen:
            seen[p.id] = p
    return [seen[k] for k in sorted(seen)]


def build_team(
    pool: Iterable[CandidateProfile],
    target_size: int,
    constraints: BuildConstraints | None = None,
    matrix: CompatibilityMatrix | None = None,
    avoid_conflict_cutoff: float = DEFAULT_AVOID_CONFLICT_CUTOFF,
    conflict_threshold: float = DEFAULT_CONFLICT_THRESHOLD,
    min_element_count: int = 1,
    cancel: threading.Event | None = None,
    timeout: float | None = None,
) -> BuildResult:
    """Select *target_size* members from *pool* maximizing the team score.

    *cancel* and *timeout* (seconds) abort the search early; the best
    composition reached so far is returned with ``cancelled=True``.

    Raises:
        InvalidInputError: If ``target_size < 2`` or fewer than two
            eligible profiles remain.
    """
    constraints = constraints or BuildConstraints()
    if target_size < 2:
        raise InvalidInputError(f"target_size must be at least 2, got {target_size}")

    eligible = eligible_profiles(pool)
    if len(eligible) < 2:
        raise InvalidInputError(f"Need at least 2 eligible profiles, got {len(eligible)}")

    search = _Search(
        eligible=eligible,
        constraints=constraints,
        scorer=PairScorer(matrix),
        cutoff=avoid_conflict_cutoff,
        conflict_threshold=conflict_threshold,
        min_element_count=min_element_count,
        cancel=cancel,
        deadline=None if timeout is None else time.monotonic() + timeout,
    )
    logger.info(
        "Building team: eligible=%d target=%d balance=%s avoid_conflicts=%s min_score=%s",
        len(eligible), target_size, constraints.require_element_balance,
        constraints.avoid_conflicts, constraints.min_compatibility_score,
    )

    if len(eligible) <= target_size:
        team = list(eligible)
    else:
        team = search.greedy(target_size)
        if constraints.require_element_balance and not search.cancelled:
            team = search.repair(team)

    return search.finish(team, target_size)


# ---------------------------------------------------------------------------
# Search state
# ---------------------------------------------------------------------------
class _Search:
    def __init__(
        self,
        eligible: list[CandidateProfile],
        constraints: BuildConstraints,
        scorer: PairScorer,
        cutoff: float,
        conflict_threshold: float,
        min_element_count: int,
        cancel: threading.Event | None,
        deadline: float | None,
    ) -> None:
        self.eligible = eligible
        self.constraints = constraints
        self.scorer = scorer
        self.cutoff = cutoff
        self.conflict_threshold = conflict_threshold
        self.min_element_count = min_element_count
        self.cancel = cancel
        self.deadline = deadline
        self.cancelled = False
        self.swaps = 0

    def score(self, members: list[CandidateProfile]) -> ScoreBreakdown:
        return score_team(
            members,
            matrix=self.scorer.matrix,
            conflict_threshold=self.conflict_threshold,
            min_element_count=self.min_element_count,
        )

    def overall(self, members: list[CandidateProfile]) -> float:
        return mean_overall_score(members, self.scorer)

    def should_stop(self) -> bool:
        if self.cancelled:
            return True
        if (self.cancel is not None and self.cancel.is_set()) or (
            self.deadline is not None and time.monotonic() >= self.deadline
        ):
            self.cancelled = True
            logger.warning("Team search cancelled; returning best composition so far")
        return self.cancelled

    def conflicts_with(self, candidate: CandidateProfile, members: list[CandidateProfile]) -> bool:
        return worst_conflict_with(candidate, members, self.scorer) >= self.cutoff

    # ------------------------------------------------------------------
    # Steps
    # ------------------------------------------------------------------
    def seed(self) -> list[CandidateProfile]:
        pairs = [
            (a, b, self.scorer.lookup_profiles(a, b))
            for a, b in combinations(self.eligible, 2)
        ]
        if self.constraints.avoid_conflicts:
            safe = [p for p in pairs if p[2].conflict_potential < self.cutoff]
            pairs = safe or pairs
        a, b, record = min(pairs, key=lambda p: (-p[2].overall_score, p[0].id, p[1].id))
        logger.debug("Seed pair %s/%s (%.2f)", a.id, b.id, record.overall_score)
        return [a, b]

    def greedy(self, target_size: int) -> list[CandidateProfile]:
        team = self.seed()
        while len(team) < target_size:
            if self.should_stop():
                break
            chosen = {m.id for m in team}
            candidates = [c for c in self.eligible if c.id not in chosen]
            if self.constraints.avoid_conflicts:
                safe = [c for c in candidates if not self.conflicts_with(c, team)]
                candidates = safe or candidates

            best = min(
                candidates,
                key=lambda c: (-self.overall([*team, c]), c.id),
            )
            team.append(best)
            logger.debug("Added %s (team size %d)", best.id, len(team))
        return team

    def repair(self, team: list[CandidateProfile]) -> list[CandidateProfile]:
        """One pass of single swaps lifting under-represented elements, canonical order."""
        min_score = self.constraints.min_compatibility_score
        need = self.min_element_count
        for element in ELEMENTS:
            counts = count_elements(team)
            shortfall = element_shortfall(counts, need)
            if shortfall == 0:
                break
            if counts[element] >= need:
                continue
            if self.should_stop():
                break

            chosen = {m.id for m in team}
            incoming = [c for c in self.eligible if c.id not in chosen and c.element == element]
            best: tuple[tuple[float, str, str], list[CandidateProfile]] | None = None
            for out in sorted(team, key=lambda m: m.id):
                rest = [m for m in team if m.id != out.id]
                for cand in incoming:
                    trial = [*rest, cand]
                    if element_shortfall(count_elements(trial), need) >= shortfall:
                        continue
                    if self.constraints.avoid_conflicts and self.conflicts_with(cand, rest):
                        continue
                    trial_score = self.overall(trial)
                    if trial_score < min_score:
                        continue
                    key = (-trial_score, out.id, cand.id)
                    if best is None or key < best[0]:
                        best = (key, trial)

            if best is None:
                logger.debug("No swap lifts under-represented element %s", element)
                continue
            team = best[1]
            self.swaps += 1
            logger.debug("Swapped %s out for %s to add %s", best[0][1], best[0][2], element)
        return team

    def finish(self, team: list[CandidateProfile], target_size: int) -> BuildResult:
        breakdown = self.score(team)
        constraints = self.constraints

        unsatisfied: list[str] = []
        if breakdown.overall_score < constraints.min_compatibility_score:
            unsatisfied.append("min_compatibility_score")
        if constraints.require_element_balance and not breakdown.balance.is_balanced:
            unsatisfied.append("element_balance")

        forced = constraints.avoid_conflicts and any(
            self.scorer.lookup_profiles(a, b).conflict_potential >= self.cutoff
            for a, b in combinations(team, 2)
        )

        result = BuildResult(
            member_ids=breakdown.member_ids,
            target_size=target_size,
            breakdown=breakdown,
            underfilled=len(team) < target_size,
            forced_conflict=forced,
            cancelled=self.cancelled,
            repair_swaps=self.swaps,
            unsatisfied_constraints=unsatisfied,
        )
        logger.info(
            "Team built: size=%d score=%.2f level=%s",
            result.size, breakdown.overall_score, breakdown.level,
        )
        if forced:
            logger.warning("Team contains a pair at or above conflict cutoff %.0f", self.cutoff)
        if unsatisfied:
            logger.warning("Unsatisfied build constraints: %s", ", ".join(unsatisfied))
        return result
