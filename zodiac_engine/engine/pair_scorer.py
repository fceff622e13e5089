"""Symmetric pair lookup over the compatibility matrix."""

from __future__ import annotations

from zodiac_engine.engine.matrix import CompatibilityMatrix, CompatibilityRecord, get_matrix
from zodiac_engine.errors import InvalidInputError
from zodiac_engine.zodiac_types import SIGNS, CandidateProfile, Sign, is_sign, sign_order


class PairScorer:
    """Single source of truth for what two signs score together."""

    def __init__(self, matrix: CompatibilityMatrix | None = None) -> None:
        self._matrix = matrix if matrix is not None else get_matrix()

    @property
    def matrix(self) -> CompatibilityMatrix:
        return self._matrix

    def lookup(self, a: Sign, b: Sign) -> CompatibilityRecord:
        """Return the record for ``(a, b)``; argument order does not matter."""
        for sign in (a, b):
            if not is_sign(sign):
                raise InvalidInputError(f"Unknown sign: {sign!r}")
        return self._matrix.get(a, b)

    def lookup_profiles(self, p: CandidateProfile, q: CandidateProfile) -> CompatibilityRecord:
        return self._matrix.get(p.sign, q.sign)

    # ------------------------------------------------------------------
    # Sign-level queries
    # ------------------------------------------------------------------
    def best_matches(self, sign: Sign, limit: int = 5) -> list[CompatibilityRecord]:
        """Partner records for *sign*, best overall score first."""
        records = [self.lookup(sign, other) for other in SIGNS]
        records.sort(key=lambda r: (-r.overall_score, sign_order(_partner(r, sign))))
        return records[:limit]

    def top_pairs(self, limit: int = 10, min_score: float = 80.0) -> list[CompatibilityRecord]:
        """Best sign pairs across the whole matrix (score >= *min_score*)."""
        records = [r for r in self._matrix if r.overall_score >= min_score]
        records.sort(key=lambda r: (-r.overall_score, sign_order(r.sign_a), sign_order(r.sign_b)))
        return records[:limit]

    def challenging_pairs(self, below: float = 50.0) -> list[CompatibilityRecord]:
        """Sign pairs scoring under *below*, worst first."""
        records = [r for r in self._matrix if r.overall_score < below]
        records.sort(key=lambda r: (r.overall_score, sign_order(r.sign_a), sign_order(r.sign_b)))
        return records


def _partner(record: CompatibilityRecord, sign: Sign) -> Sign:
    return record.sign_b if record.sign_a == sign else record.sign_a
