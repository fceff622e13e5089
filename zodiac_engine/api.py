"""Public operations of the engine, bound to the shared matrix and settings.

These are the entry points external collaborators call; each one reads
``EngineSettings`` from the environment and uses the process-wide matrix.
"""

from __future__ import annotations

from collections.abc import Iterable
import threading

from zodiac_engine.engine import conflicts, element_balance, optimizer, team_builder, team_score
from zodiac_engine.engine.conflicts import ConflictPair
from zodiac_engine.engine.element_balance import BalanceReport
from zodiac_engine.engine.matrix import get_matrix
from zodiac_engine.engine.optimizer import OptimizeOptions, Suggestion
from zodiac_engine.engine.team_builder import BuildConstraints, BuildResult
from zodiac_engine.engine.team_score import ScoreBreakdown
from zodiac_engine.settings import load_settings
from zodiac_engine.zodiac_types import CandidateProfile


def score_team(profiles: Iterable[CandidateProfile]) -> ScoreBreakdown:
    settings = load_settings()
    return team_score.score_team(
        profiles,
        matrix=get_matrix(),
        conflict_threshold=settings.conflict_threshold,
        min_element_count=settings.min_element_count,
    )


def build_team(
    pool: Iterable[CandidateProfile],
    target_size: int,
    constraints: BuildConstraints | None = None,
    cancel: threading.Event | None = None,
    timeout: float | None = None,
) -> BuildResult:
    settings = load_settings()
    return team_builder.build_team(
        pool,
        target_size,
        constraints,
        matrix=get_matrix(),
        avoid_conflict_cutoff=settings.avoid_conflict_cutoff,
        conflict_threshold=settings.conflict_threshold,
        min_element_count=settings.min_element_count,
        cancel=cancel,
        timeout=timeout,
    )


def optimize_team(
    current_team: Iterable[CandidateProfile],
    available_pool: Iterable[CandidateProfile],
    options: OptimizeOptions | None = None,
) -> list[Suggestion]:
    settings = load_settings()
    return optimizer.suggest_moves(
        current_team,
        available_pool,
        options,
        matrix=get_matrix(),
        conflict_threshold=settings.conflict_threshold,
        min_element_count=settings.min_element_count,
    )


def detect_conflicts(
    profiles: Iterable[CandidateProfile],
    threshold: float | None = None,
) -> list[ConflictPair]:
    """Conflict pairs at or above *threshold* (configured default when None)."""
    if threshold is None:
        threshold = load_settings().conflict_threshold
    return conflicts.detect_conflicts(profiles, threshold, matrix=get_matrix())


def analyze_balance(profiles: Iterable[CandidateProfile]) -> BalanceReport:
    return element_balance.analyze_balance(profiles, min_count=load_settings().min_element_count)
