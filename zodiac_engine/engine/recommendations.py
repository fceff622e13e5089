"""Team insight and recommendation generator.

Turns a ``ScoreBreakdown`` into strengths, weaknesses, management
suggestions and short insight lines.
All functions are *pure*.
"""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field

from zodiac_engine.engine.team_score import ScoreBreakdown


# ---------------------------------------------------------------------------
# Result models
# ---------------------------------------------------------------------------
Category = Literal["strength", "weakness", "recommendation", "risk"]


class Recommendation(BaseModel):
    """A single team-level observation or suggestion."""

    category: Category
    title: str
    description: str
    target_members: list[str] = Field(default_factory=list)
    priority: int = Field(default=2, ge=1, le=3)  # 1=high 3=low


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------
def generate_recommendations(breakdown: ScoreBreakdown) -> list[Recommendation]:
    """Return recommendations sorted by priority (stable within a priority)."""
    recs: list[Recommendation] = []

    _strength_recs(breakdown, recs)
    _weakness_recs(breakdown, recs)
    _action_recs(breakdown, recs)
    _risk_recs(breakdown, recs)

    return sorted(recs, key=lambda r: r.priority)


def generate_team_insights(breakdown: ScoreBreakdown) -> list[str]:
    """Three headline insights: compatibility, element balance, conflicts."""
    insights: list[str] = []

    score = breakdown.overall_score
    if breakdown.is_sentinel:
        insights.append("Team has fewer than two members; no pairwise dynamics to assess.")
    elif score >= 75:
        insights.append("Excellent team compatibility! This team has strong natural synergy.")
    elif score >= 60:
        insights.append("Good team compatibility. Minor adjustments may enhance collaboration.")
    else:
        insights.append("Team requires careful management. Focus on leveraging complementary strengths.")

    missing = len(breakdown.balance.missing_elements)
    if missing == 0:
        insights.append("Perfect element balance! All 4 elements represented.")
    elif missing == 1:
        insights.append("Good element diversity. Consider adding one more element for perfect balance.")
    else:
        insights.append("Limited element diversity. Team may benefit from more varied perspectives.")

    if not breakdown.conflicts:
        insights.append("No significant conflicts detected. Team should work smoothly.")
    else:
        insights.append(
            f"{len(breakdown.conflicts)} potential conflict pair(s) detected. "
            "Monitor these relationships closely."
        )
    return insights


def team_dynamics_summary(breakdown: ScoreBreakdown) -> str:
    coverage = "Perfect" if not breakdown.balance.missing_elements else "Partial"
    return (
        f"Team of {breakdown.team_size} members with {breakdown.level} compatibility "
        f"({breakdown.overall_score:.1f}%). {coverage} element representation."
    )


# ---------------------------------------------------------------------------
# Recommendation generators
# ---------------------------------------------------------------------------
def _present_elements(breakdown: ScoreBreakdown) -> int:
    return sum(1 for c in breakdown.balance.counts.values() if c > 0)


def _strength_recs(breakdown: ScoreBreakdown, recs: list[Recommendation]) -> None:
    if breakdown.is_sentinel:
        return
    if breakdown.overall_score >= 75:
        recs.append(Recommendation(
            category="strength",
            title="Strong natural synergy",
            description="Average pairwise compatibility is high; collaborative work should flow easily.",
            priority=3,
        ))
    if _present_elements(breakdown) >= 3:
        recs.append(Recommendation(
            category="strength",
            title="Diverse perspectives",
            description="Multiple elements are represented, giving the team a range of working styles.",
            priority=3,
        ))
    if not breakdown.conflicts:
        recs.append(Recommendation(
            category="strength",
            title="No significant conflicts",
            description="No member pair crosses the conflict threshold; smooth collaboration expected.",
            priority=3,
        ))
    if breakdown.best_pairs:
        top = breakdown.best_pairs[0]
        recs.append(Recommendation(
            category="strength",
            title="Anchor pair",
            description=(
                f"{top.member_a_id} and {top.member_b_id} are the best-matched pair "
                f"({top.overall_score:.0f}); well suited to: {top.collaboration_type or 'joint work'}."
            ),
            target_members=[top.member_a_id, top.member_b_id],
            priority=3,
        ))


def _weakness_recs(breakdown: ScoreBreakdown, recs: list[Recommendation]) -> None:
    if breakdown.conflicts:
        recs.append(Recommendation(
            category="weakness",
            title="Conflict pairs need management",
            description=f"{len(breakdown.conflicts)} potential conflict pair(s) require attention.",
            target_members=sorted({i for c in breakdown.conflicts for i in c.member_ids}),
            priority=2,
        ))
    if breakdown.team_size > 0 and _present_elements(breakdown) < 3:
        recs.append(Recommendation(
            category="weakness",
            title="Limited element diversity",
            description="Fewer than three elements are represented; the team may approach work one-sidedly.",
            priority=2,
        ))


def _action_recs(breakdown: ScoreBreakdown, recs: list[Recommendation]) -> None:
    balance = breakdown.balance
    if breakdown.team_size > 0 and balance.missing_elements:
        recs.append(Recommendation(
            category="recommendation",
            title="Fill missing elements",
            description=f"Consider adding members from: {', '.join(balance.missing_elements)}.",
            priority=2,
        ))
    if breakdown.conflicts:
        recs.append(Recommendation(
            category="recommendation",
            title="Set up conflict management",
            description="Agree on clear roles and regular check-ins for the flagged pairs.",
            priority=2,
        ))
    if not breakdown.is_sentinel and breakdown.overall_score < 60:
        recs.append(Recommendation(
            category="recommendation",
            title="Invest in cohesion",
            description="Team may benefit from team-building activities to improve cohesion.",
            priority=1,
        ))


def _risk_recs(breakdown: ScoreBreakdown, recs: list[Recommendation]) -> None:
    """One risk item per conflict pair, highest severities first."""
    recs.extend(
        Recommendation(
            category="risk",
            title=f"{c.severity} conflict: {c.member_a_id} / {c.member_b_id}",
            description=c.recommendation or (
                f"{c.sign_a} and {c.sign_b} carry {c.conflict_potential:.0f} conflict potential."
            ),
            target_members=[c.member_a_id, c.member_b_id],
            priority=1 if c.severity in ("Critical", "High") else 2,
        )
        for c in breakdown.conflicts
    )
