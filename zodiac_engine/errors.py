"""Exception types raised by the compatibility engine."""

from __future__ import annotations


class ZodiacEngineError(Exception):
    """Base class for all engine errors."""


class IncompleteMatrixError(ZodiacEngineError):
    """Reference data is missing a sign pair or holds an out-of-range score.

    Only raised while the compatibility matrix is being built; the engine is
    unusable until a valid matrix is installed.
    """


class InvalidInputError(ZodiacEngineError, ValueError):
    """A caller passed an undersized pool, bad target size or unknown identifier."""


class ConstraintUnsatisfiableError(ZodiacEngineError):
    """Build constraints could not be met with the given pool.

    The builder reports this as a flag on its result; callers who prefer an
    exception use ``BuildResult.raise_for_constraints()``.
    """

    def __init__(self, constraints: list[str]) -> None:
        self.constraints = list(constraints)
        super().__init__(f"Unsatisfiable constraints: {', '.join(self.constraints)}")
