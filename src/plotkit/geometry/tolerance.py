"""Floating-point tolerance used by every geometric comparison.

Comparisons such as "is this point on that segment" are never exact: the
pipeline uses a single relative epsilon, scaled by the diagonal of the
bounding box of the geometry being compared. The tolerance is an explicit
value passed to predicates and to the clipping engine so that results are
reproducible and tests can override it.
"""

from __future__ import annotations

from dataclasses import dataclass

# Relative epsilon: 1e-9 of the working bounding-box diagonal.
DEFAULT_RELATIVE_EPSILON = 1e-9

# Absolute floor so that degenerate (zero-size) inputs still compare sanely.
_ABSOLUTE_FLOOR = 1e-12


@dataclass(frozen=True)
class Tolerance:
    """Relative comparison tolerance.

    Attributes:
        relative: Fraction of the working bounding-box diagonal below which
            two distances are considered equal.
    """

    relative: float = DEFAULT_RELATIVE_EPSILON

    def __post_init__(self) -> None:
        if self.relative <= 0:
            raise ValueError(f"relative tolerance must be positive, got {self.relative}")

    def absolute(self, diagonal: float) -> float:
        """Return the absolute epsilon for geometry of the given scale.

        Args:
            diagonal: Diagonal length of the bounding box of the geometry
                being compared.

        Returns:
            Absolute distance threshold.
        """
        return max(self.relative * abs(diagonal), _ABSOLUTE_FLOOR)


DEFAULT_TOLERANCE = Tolerance()
