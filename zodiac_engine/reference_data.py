"""Built-in compatibility reference data.

Produces the 78 rows (one per unordered sign pair, self-pairs included)
that seed the compatibility matrix when no reference file is configured,
together with the element-harmony table and the per-pair narrative texts.

All functions are *pure*.
"""

from __future__ import annotations

from typing import Any

from zodiac_engine.zodiac_types import (
    ELEMENTS,
    SIGN_ELEMENTS,
    SIGNS,
    CompatibilityLevel,
    Element,
    ElementHarmony,
    Sign,
)


REFERENCE_VERSION = "1.0"


# ---------------------------------------------------------------------------
# Element harmony table
# ---------------------------------------------------------------------------
HarmonyTable = dict[frozenset[str], ElementHarmony]

DEFAULT_ELEMENT_HARMONY: HarmonyTable = {
    frozenset({"Fire"}): "Harmonious",
    frozenset({"Earth"}): "Harmonious",
    frozenset({"Air"}): "Harmonious",
    frozenset({"Water"}): "Harmonious",
    frozenset({"Fire", "Air"}): "Harmonious",
    frozenset({"Earth", "Water"}): "Harmonious",
    frozenset({"Fire", "Water"}): "Challenging",
    frozenset({"Earth", "Air"}): "Challenging",
    frozenset({"Fire", "Earth"}): "Neutral",
    frozenset({"Air", "Water"}): "Neutral",
}


def element_harmony(a: Element, b: Element, table: HarmonyTable | None = None) -> ElementHarmony:
    """Look up the harmony class of two elements (Neutral when unlisted)."""
    table = DEFAULT_ELEMENT_HARMONY if table is None else table
    return table.get(frozenset({a, b}), "Neutral")


def validate_harmony_table(table: HarmonyTable) -> list[str]:
    """Return the element combinations *table* does not cover."""
    missing: list[str] = []
    for i, a in enumerate(ELEMENTS):
        for b in ELEMENTS[i:]:
            if frozenset({a, b}) not in table:
                missing.append(f"{a}-{b}")
    return missing


# ---------------------------------------------------------------------------
# Level thresholds
# ---------------------------------------------------------------------------
LEVEL_THRESHOLDS: tuple[tuple[float, CompatibilityLevel], ...] = (
    (80.0, "Excellent"),
    (65.0, "Good"),
    (50.0, "Moderate"),
    (35.0, "Challenging"),
)


def classify_level(score: float) -> CompatibilityLevel:
    """Map a 0-100 score onto a compatibility level."""
    for threshold, level in LEVEL_THRESHOLDS:
        if score >= threshold:
            return level
    return "Difficult"


# ---------------------------------------------------------------------------
# Seed scoring rules
# ---------------------------------------------------------------------------
def _overall(a: Sign, b: Sign) -> float:
    if a == b:
        return 85.0
    pair = frozenset({SIGN_ELEMENTS[a], SIGN_ELEMENTS[b]})
    if pair == {"Fire", "Air"}:
        return 92.0
    if pair == {"Earth", "Water"}:
        return 90.0
    if len(pair) == 1:
        return 78.0
    if pair == {"Fire", "Water"}:
        return 45.0
    if pair == {"Earth", "Air"}:
        return 55.0
    return 60.0


def _communication(a: Sign, b: Sign) -> float:
    # Air signs communicate well with everyone
    if "Air" in (SIGN_ELEMENTS[a], SIGN_ELEMENTS[b]):
        return 85.0
    return _overall(a, b)


# ---------------------------------------------------------------------------
# Narrative texts
# ---------------------------------------------------------------------------
def strengths_text(a: Sign, b: Sign, level: CompatibilityLevel) -> str:
    if level == "Excellent":
        return (
            f"{a} and {b} work exceptionally well together. They share similar energy "
            "and complement each other's strengths."
        )
    if level == "Good":
        return (
            f"{a} and {b} have good synergy. They can collaborate effectively "
            "with some adjustments."
        )
    if level == "Moderate":
        return f"{a} and {b} can work together with effort. Common ground and clear communication are key."
    return f"{a} and {b} require careful management. Focus on complementary skills and clear roles."


def challenges_text(a: Sign, b: Sign, level: CompatibilityLevel) -> str:
    if level == "Excellent":
        return "May become too similar in approach. Need to ensure diverse perspectives."
    if level == "Good":
        return "Minor differences in work style. Occasional miscommunication possible."
    if level == "Moderate":
        return "Different approaches to work. May clash on methods or priorities."
    return (
        f"Significant differences between {a} and {b}. Different values and work styles "
        "may cause friction if not managed."
    )


def management_tips_text(a: Sign, b: Sign, level: CompatibilityLevel) -> str:
    if level == "Excellent":
        return "Leverage their natural synergy. Assign collaborative projects."
    if level == "Good":
        return "Provide clear communication channels and use their differences as complementary assets."
    if level == "Moderate":
        return "Set clear expectations and hold regular check-ins. Focus on shared goals."
    return (
        f"Carefully manage {a} and {b} interactions. Assign them to different aspects "
        "of projects and keep a mediator available."
    )


def best_collaboration_text(a: Sign, b: Sign) -> str:
    ea, eb = SIGN_ELEMENTS[a], SIGN_ELEMENTS[b]
    pair = frozenset({ea, eb})
    if pair == {"Fire", "Air"}:
        return "Creative projects, brainstorming sessions, innovation"
    if pair == {"Earth", "Water"}:
        return "Strategic planning, detailed execution, long-term projects"
    if ea == eb:
        return "Projects requiring similar energy and approach"
    return "Tasks requiring diverse perspectives and complementary skills"


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------
def build_pair_row(a: Sign, b: Sign, table: HarmonyTable | None = None) -> dict[str, Any]:
    """Return the reference row for the sign pair ``(a, b)``."""
    overall = _overall(a, b)
    level = classify_level(overall)
    return {
        "sign_a": a,
        "sign_b": b,
        "overall_score": overall,
        "work_score": overall + 5,
        "communication_score": _communication(a, b),
        "conflict_potential": 100 - overall,
        "synergy_score": overall - 5,
        "element_harmony": element_harmony(SIGN_ELEMENTS[a], SIGN_ELEMENTS[b], table),
        "strengths_together": strengths_text(a, b, level),
        "challenges_together": challenges_text(a, b, level),
        "management_tips": management_tips_text(a, b, level),
        "best_collaboration_type": best_collaboration_text(a, b),
    }


def build_default_rows(table: HarmonyTable | None = None) -> list[dict[str, Any]]:
    """All 78 built-in rows, in canonical (sign_a, sign_b) order."""
    return [
        build_pair_row(a, b, table)
        for i, a in enumerate(SIGNS)
        for b in SIGNS[i:]
    ]
