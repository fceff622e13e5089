"""Compatibility matrix: the frozen table of pairwise sign scores.

The matrix is validated once (every unordered sign pair present, every score
in range) and never mutated afterwards. A single process-wide instance sits
behind an initialization barrier: ``get_matrix()`` builds and validates it on
first use, under a lock, so no scoring can observe an unvalidated table.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Mapping
import logging
import threading
from types import MappingProxyType
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError, computed_field, model_validator

from zodiac_engine.errors import IncompleteMatrixError
from zodiac_engine.reference_data import (
    HarmonyTable,
    build_default_rows,
    classify_level,
    element_harmony,
)
from zodiac_engine.reference_repository import ReferenceDataRepository
from zodiac_engine.settings import EngineSettings, load_settings
from zodiac_engine.zodiac_types import (
    SIGN_ELEMENTS,
    SIGNS,
    CompatibilityLevel,
    Element,
    ElementHarmony,
    Sign,
    canonical_pair,
    is_sign,
)


logger = logging.getLogger(__name__)

EXPECTED_RECORDS = len(SIGNS) * (len(SIGNS) + 1) // 2  # 78


# ---------------------------------------------------------------------------
# Record model
# ---------------------------------------------------------------------------
class CompatibilityRecord(BaseModel):
    """Precomputed score bundle for one unordered sign pair."""

    model_config = ConfigDict(frozen=True)

    sign_a: Sign
    sign_b: Sign
    overall_score: float = Field(ge=0.0, le=100.0)
    work_score: float = Field(ge=0.0, le=100.0)
    communication_score: float = Field(ge=0.0, le=100.0)
    conflict_potential: float = Field(ge=0.0, le=100.0)
    synergy_score: float = Field(ge=0.0, le=100.0)
    element_harmony: ElementHarmony
    strengths_together: str = ""
    challenges_together: str = ""
    management_tips: str = ""
    best_collaboration_type: str = ""

    @model_validator(mode="before")
    @classmethod
    def _canonicalize(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        a, b = data.get("sign_a"), data.get("sign_b")
        if is_sign(a) and is_sign(b):
            data = {**data}
            data["sign_a"], data["sign_b"] = canonical_pair(a, b)
            if data.get("element_harmony") is None:
                data["element_harmony"] = element_harmony(SIGN_ELEMENTS[a], SIGN_ELEMENTS[b])
        return data

    @computed_field  # type: ignore[prop-decorator]
    @property
    def level(self) -> CompatibilityLevel:
        return classify_level(self.overall_score)

    @property
    def key(self) -> tuple[Sign, Sign]:
        return (self.sign_a, self.sign_b)


# ---------------------------------------------------------------------------
# Record predicates
# ---------------------------------------------------------------------------
def is_high_compatibility(record: CompatibilityRecord) -> bool:
    return record.overall_score >= 65


def is_low_compatibility(record: CompatibilityRecord) -> bool:
    return record.overall_score < 40


def is_excellent_match(record: CompatibilityRecord) -> bool:
    return record.level == "Excellent"


def has_high_conflict_potential(record: CompatibilityRecord) -> bool:
    return record.conflict_potential >= 60


def score_percentage(record: CompatibilityRecord) -> str:
    return f"{record.overall_score:g}%"


# ---------------------------------------------------------------------------
# Matrix
# ---------------------------------------------------------------------------
class CompatibilityMatrix:
    """Immutable lookup of the 78 canonical sign-pair records."""

    def __init__(
        self,
        records: Iterable[CompatibilityRecord],
        sign_elements: Mapping[str, str] | None = None,
    ) -> None:
        table: dict[tuple[Sign, Sign], CompatibilityRecord] = {}
        duplicates: list[str] = []
        for record in records:
            if record.key in table:
                duplicates.append(f"{record.sign_a}-{record.sign_b}")
            table[record.key] = record
        if duplicates:
            raise IncompleteMatrixError(f"Duplicate sign pairs in reference data: {', '.join(duplicates)}")

        missing = [
            f"{a}-{b}"
            for i, a in enumerate(SIGNS)
            for b in SIGNS[i:]
            if (a, b) not in table
        ]
        if missing:
            raise IncompleteMatrixError(
                f"Reference data is missing {len(missing)} sign pair(s): {', '.join(missing)}"
            )

        self._sign_elements = MappingProxyType(_validate_sign_elements(sign_elements))
        self._table: Mapping[tuple[Sign, Sign], CompatibilityRecord] = MappingProxyType(table)

    # ------------------------------------------------------------------
    # Constructors
    # ------------------------------------------------------------------
    @classmethod
    def from_rows(
        cls,
        rows: Iterable[Mapping[str, Any]],
        sign_elements: Mapping[str, str] | None = None,
        harmony_table: HarmonyTable | None = None,
    ) -> CompatibilityMatrix:
        """Validate raw reference rows and freeze them into a matrix.

        Raises:
            IncompleteMatrixError: On a missing pair or an invalid/out-of-range row.
        """
        records: list[CompatibilityRecord] = []
        for idx, row in enumerate(rows):
            data = dict(row)
            a, b = data.get("sign_a"), data.get("sign_b")
            if data.get("element_harmony") is None and is_sign(a) and is_sign(b):
                data["element_harmony"] = element_harmony(SIGN_ELEMENTS[a], SIGN_ELEMENTS[b], harmony_table)
            try:
                records.append(CompatibilityRecord.model_validate(data))
            except ValidationError as exc:
                raise IncompleteMatrixError(f"Invalid reference row #{idx} ({a}-{b}): {exc}") from exc
        return cls(records, sign_elements)

    @classmethod
    def default(cls, harmony_table: HarmonyTable | None = None) -> CompatibilityMatrix:
        """Matrix built from the built-in reference rows."""
        return cls.from_rows(build_default_rows(harmony_table), harmony_table=harmony_table)

    # ------------------------------------------------------------------
    # Read API
    # ------------------------------------------------------------------
    def get(self, a: Sign, b: Sign) -> CompatibilityRecord:
        return self._table[canonical_pair(a, b)]

    def element_of(self, sign: Sign) -> Element:
        return self._sign_elements[sign]  # type: ignore[return-value]

    @property
    def sign_elements(self) -> Mapping[str, str]:
        return self._sign_elements

    def __iter__(self) -> Iterator[CompatibilityRecord]:
        return iter(self._table.values())

    def __len__(self) -> int:
        return len(self._table)

    def __contains__(self, pair: object) -> bool:
        if not isinstance(pair, tuple) or len(pair) != 2 or not all(is_sign(s) for s in pair):
            return False
        return canonical_pair(*pair) in self._table


def _validate_sign_elements(sign_elements: Mapping[str, str] | None) -> dict[str, str]:
    if sign_elements is None:
        return dict(SIGN_ELEMENTS)
    unknown = sorted(set(sign_elements) - set(SIGNS))
    missing = [s for s in SIGNS if s not in sign_elements]
    if unknown or missing:
        raise IncompleteMatrixError(
            f"Sign→element map invalid (missing: {missing or '-'}, unknown: {unknown or '-'})"
        )
    mismatched = [s for s in SIGNS if sign_elements[s] != SIGN_ELEMENTS[s]]
    if mismatched:
        raise IncompleteMatrixError(f"Sign→element map disagrees with the zodiac for: {', '.join(mismatched)}")
    return {s: sign_elements[s] for s in SIGNS}


# ---------------------------------------------------------------------------
# Process-wide instance
# ---------------------------------------------------------------------------
_matrix: CompatibilityMatrix | None = None
_lock = threading.Lock()


def load_matrix(settings: EngineSettings | None = None) -> CompatibilityMatrix:
    """Build a validated matrix from the configured reference source."""
    settings = settings or load_settings()
    if settings.reference_data_path:
        rows, sign_elements = ReferenceDataRepository(settings.reference_data_path).load()
        matrix = CompatibilityMatrix.from_rows(rows, sign_elements)
        source = settings.reference_data_path
    else:
        matrix = CompatibilityMatrix.default()
        source = "built-in"
    logger.info("Compatibility matrix loaded: %d records (source=%s)", len(matrix), source)
    return matrix


def init_matrix(
    matrix: CompatibilityMatrix | None = None,
    settings: EngineSettings | None = None,
) -> CompatibilityMatrix:
    """Install the shared matrix, building it from settings when not given.

    Raises:
        IncompleteMatrixError: If the reference data fails validation; any
            previously installed matrix is dropped and the shared matrix is
            left unset.
    """
    global _matrix
    with _lock:
        _matrix = None
        _matrix = matrix if matrix is not None else load_matrix(settings)
        return _matrix


def get_matrix() -> CompatibilityMatrix:
    """Return the shared matrix, initializing it on first use."""
    global _matrix
    if _matrix is not None:
        return _matrix
    with _lock:
        if _matrix is None:
            _matrix = load_matrix()
        return _matrix


def reset_matrix() -> None:
    """Drop the shared matrix (tests only)."""
    global _matrix
    with _lock:
        _matrix = None
