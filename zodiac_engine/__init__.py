"""Zodiac compatibility scoring and team-composition engine."""

from .api import analyze_balance, build_team, detect_conflicts, optimize_team, score_team
from .engine.matrix import CompatibilityMatrix, CompatibilityRecord, get_matrix, init_matrix
from .engine.optimizer import OptimizeOptions, Suggestion
from .engine.team_builder import BuildConstraints, BuildResult
from .errors import ConstraintUnsatisfiableError, IncompleteMatrixError, InvalidInputError
from .zodiac_types import CandidateProfile

__all__ = [
    "BuildConstraints",
    "BuildResult",
    "CandidateProfile",
    "CompatibilityMatrix",
    "CompatibilityRecord",
    "ConstraintUnsatisfiableError",
    "IncompleteMatrixError",
    "InvalidInputError",
    "OptimizeOptions",
    "Suggestion",
    "analyze_balance",
    "build_team",
    "detect_conflicts",
    "get_matrix",
    "init_matrix",
    "optimize_team",
    "score_team",
]
