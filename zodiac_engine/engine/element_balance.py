"""Element balance analysis — elemental coverage and diversity of a group.

All functions are *pure*.
"""

from __future__ import annotations

from collections import Counter
from collections.abc import Iterable

from pydantic import BaseModel, Field

from zodiac_engine.zodiac_types import ELEMENTS, CandidateProfile, Element


# ---------------------------------------------------------------------------
# Result models
# ---------------------------------------------------------------------------
class BalanceReport(BaseModel):
    """Elemental composition of a group."""

    counts: dict[Element, int]
    is_balanced: bool
    missing_elements: list[Element] = Field(default_factory=list)
    dominant_element: Element | None = None
    diversity: float = Field(ge=0.0, le=1.0, default=0.0)


# ---------------------------------------------------------------------------
# Blau's index of heterogeneity
# ---------------------------------------------------------------------------
def calculate_blau_index(values: list[str]) -> float:
    """Calculate Blau's index for a single categorical dimension.

    Blau = 1 - Σ(pᵢ²), where pᵢ is proportion of category i.
    Range: [0, 1). Higher = more diverse; 0.75 is the ceiling for
    four evenly represented elements.
    """
    if not values:
        return 0.0
    n = len(values)
    counts = Counter(values)
    return 1.0 - sum((c / n) ** 2 for c in counts.values())


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------
def count_elements(profiles: Iterable[CandidateProfile]) -> dict[Element, int]:
    """Per-element head count, every element present, canonical order."""
    counter: Counter[str] = Counter(p.element for p in profiles)
    return {e: counter.get(e, 0) for e in ELEMENTS}


def element_shortfall(counts: dict[Element, int], min_count: int = 1) -> int:
    """Members still needed before every element reaches *min_count*."""
    return sum(max(0, min_count - counts.get(e, 0)) for e in ELEMENTS)


def analyze_balance(
    profiles: Iterable[CandidateProfile],
    min_count: int = 1,
) -> BalanceReport:
    """Report element counts, balance, gaps and the dominant element.

    The group is balanced when every element has at least *min_count*
    members. The dominant element is the most frequent one, ties going to
    the earlier element in canonical order; an empty group has none.
    """
    members = list(profiles)
    counts = count_elements(members)

    missing = [e for e in ELEMENTS if counts[e] == 0]
    balanced = all(counts[e] >= min_count for e in ELEMENTS)

    dominant: Element | None = None
    if members:
        # max() keeps the first maximal item, i.e. canonical order on ties
        dominant = max(ELEMENTS, key=lambda e: counts[e])

    return BalanceReport(
        counts=counts,
        is_balanced=balanced,
        missing_elements=missing,
        dominant_element=dominant,
        diversity=round(calculate_blau_index([p.element for p in members]), 4),
    )
