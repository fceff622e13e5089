"""Zodiac sign / element definitions and the candidate profile model.

Defines the 12 signs, the 4 elemental families and their canonical orders
(used everywhere for deterministic tie-breaking), plus the read-only
per-person snapshot the engine is fed with.
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, model_validator

from zodiac_engine.errors import InvalidInputError


# ---------------------------------------------------------------------------
# Categorical values
# ---------------------------------------------------------------------------
Sign = Literal[
    "Aries", "Taurus", "Gemini", "Cancer", "Leo", "Virgo",
    "Libra", "Scorpio", "Sagittarius", "Capricorn", "Aquarius", "Pisces",
]
Element = Literal["Fire", "Earth", "Air", "Water"]
ElementHarmony = Literal["Harmonious", "Neutral", "Challenging"]
CompatibilityLevel = Literal["Excellent", "Good", "Moderate", "Challenging", "Difficult"]

SIGNS: tuple[Sign, ...] = (
    "Aries", "Taurus", "Gemini", "Cancer", "Leo", "Virgo",
    "Libra", "Scorpio", "Sagittarius", "Capricorn", "Aquarius", "Pisces",
)
ELEMENTS: tuple[Element, ...] = ("Fire", "Earth", "Air", "Water")

_SIGN_INDEX: dict[str, int] = {s: i for i, s in enumerate(SIGNS)}
_ELEMENT_INDEX: dict[str, int] = {e: i for i, e in enumerate(ELEMENTS)}


# ---------------------------------------------------------------------------
# Sign → element reference map
# ---------------------------------------------------------------------------
SIGN_ELEMENTS: dict[Sign, Element] = {
    "Aries": "Fire",
    "Leo": "Fire",
    "Sagittarius": "Fire",
    "Taurus": "Earth",
    "Virgo": "Earth",
    "Capricorn": "Earth",
    "Gemini": "Air",
    "Libra": "Air",
    "Aquarius": "Air",
    "Cancer": "Water",
    "Scorpio": "Water",
    "Pisces": "Water",
}


def sign_order(sign: str) -> int:
    """Position of *sign* in the canonical zodiac order."""
    return _SIGN_INDEX[sign]


def element_order(element: str) -> int:
    """Position of *element* in the canonical element order."""
    return _ELEMENT_INDEX[element]


def is_sign(value: object) -> bool:
    return isinstance(value, str) and value in _SIGN_INDEX


def canonical_pair(a: Sign, b: Sign) -> tuple[Sign, Sign]:
    """Return ``(min, max)`` of two signs under the zodiac order."""
    return (a, b) if _SIGN_INDEX[a] <= _SIGN_INDEX[b] else (b, a)


def element_of(sign: Sign) -> Element:
    return SIGN_ELEMENTS[sign]


# ---------------------------------------------------------------------------
# Models
# ---------------------------------------------------------------------------
class CandidateProfile(BaseModel):
    """Read-only snapshot of one person, supplied by the member store."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(..., min_length=1)
    name: str = Field(default="", max_length=100)
    sign: Sign
    element: Element | None = None
    active: bool = True

    @model_validator(mode="before")
    @classmethod
    def _default_element(cls, data: object) -> object:
        if isinstance(data, dict) and data.get("element") is None and data.get("sign") in SIGN_ELEMENTS:
            return {**data, "element": SIGN_ELEMENTS[data["sign"]]}
        return data

    @model_validator(mode="after")
    def _check_element(self) -> CandidateProfile:
        expected = SIGN_ELEMENTS[self.sign]
        if self.element != expected:
            raise ValueError(
                f"element {self.element!r} does not match sign {self.sign!r} ({expected})"
            )
        return self

    @property
    def label(self) -> str:
        return self.name or self.id


def require_unique(profiles: Iterable[CandidateProfile]) -> list[CandidateProfile]:
    """Return *profiles* as a list sorted by id, rejecting duplicate ids."""
    if profiles is None:
        raise InvalidInputError("profiles must not be None")
    members = sorted(profiles, key=lambda p: p.id)
    for prev, cur in zip(members, members[1:]):
        if prev.id == cur.id:
            raise InvalidInputError(f"Duplicate member id in group: {cur.id!r}")
    return members
