"""Error kinds raised by the plotting pipeline.

Every error carries the identifier of the thing that failed (a file path
and/or the index of the offending object or feature) so that a failure in
a batch run can be diagnosed without re-running the input in isolation.
"""

from pathlib import Path
from typing import Self


class PlotkitError(Exception):
    """Base exception for all pipeline errors."""

    def __init__(
        self,
        message: str,
        path: Path | str | None = None,
        *,
        index: int | None = None,
    ) -> None:
        """Initialize the error with optional location context.

        Args:
            message: Human-readable error description.
            path: Path to the input or output file involved.
            index: Index of the offending object or feature.
        """
        self.path = Path(path) if path else None
        self.index = index
        self.message = message
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        """Format error message with path and index context if available."""
        parts = [self.message]
        if self.path:
            parts.append(f"path={self.path}")
        if self.index is not None:
            parts.append(f"index={self.index}")

        if len(parts) == 1:
            return parts[0]
        return f"{parts[0]} ({', '.join(parts[1:])})"

    def with_context(
        self,
        *,
        path: Path | str | None = None,
        index: int | None = None,
    ) -> Self:
        """Return a copy of this error with missing context filled in.

        Context that is already set is kept; only empty fields are filled.
        """
        clone = type(self).__new__(type(self))
        clone.__dict__.update(self.__dict__)
        clone.path = self.path or (Path(path) if path else None)
        clone.index = self.index if self.index is not None else index
        Exception.__init__(clone, clone._format_message())
        return clone


class InvalidGeometry(PlotkitError):
    """Raised for degenerate or self-intersecting geometry.

    This error is raised when:
    - A polygon has fewer than 3 distinct vertices
    - A polygon has zero area
    - A polygon boundary crosses itself

    The caller decides whether to skip the object or abort the run.
    """

    pass


class UnsupportedGeometry(PlotkitError):
    """Raised when a GeoJSON geometry kind is not handled."""

    def __init__(
        self,
        geometry_type: str,
        path: Path | str | None = None,
        *,
        index: int | None = None,
    ) -> None:
        self.geometry_type = geometry_type
        super().__init__(
            f"Unsupported geometry type {geometry_type!r}", path, index=index
        )


class ParseError(PlotkitError):
    """Raised when an input file is malformed.

    This error is raised when:
    - The file is not valid JSON
    - A required member (``type``, ``features``, ``coordinates``) is missing
    - A position is not a pair of numbers
    """

    pass


class ProjectionDegenerate(PlotkitError):
    """Raised when a camera configuration yields a singular or empty view."""

    pass


class PlotIOError(PlotkitError):
    """Raised when reading an input or writing an output file fails."""

    pass
