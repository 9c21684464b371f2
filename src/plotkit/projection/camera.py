"""Camera model: view transform and perspective/orthographic projection.

Camera space follows the usual graphics convention: x to the right, y up,
and the camera looking down the negative z axis. "Depth" is therefore
``-z`` in camera space and is positive in front of the camera.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field

import numpy as np
import numpy.typing as npt

from plotkit.exceptions import ProjectionDegenerate
from plotkit.geometry.primitives import Frame, Point2
from plotkit.projection.primitives3d import Face, Plane, Point3

# Relative threshold for "parallel" when checking the up vector.
_PARALLEL_EPS = 1e-9


def look_at(position: Point3, target: Point3, up: Point3) -> npt.NDArray[np.float64]:
    """Build the 4x4 world-to-camera matrix.

    Args:
        position: Camera location.
        target: Point the camera looks at.
        up: Approximate up direction; controls roll.

    Returns:
        The view matrix.

    Raises:
        ProjectionDegenerate: If position equals target, or up is parallel
            to the viewing direction.
    """
    view_dir = target - position
    if view_dir.norm() == 0:
        raise ProjectionDegenerate("Camera position equals its target")
    forward = view_dir.normalized()
    if up.norm() == 0:
        raise ProjectionDegenerate("Camera up vector is zero")
    side = forward.cross(up)
    if side.norm() <= _PARALLEL_EPS * up.norm():
        raise ProjectionDegenerate("Camera up vector is parallel to the view direction")
    right = side.normalized()
    true_up = right.cross(forward)

    return np.array(
        [
            [right.x, right.y, right.z, -right.dot(position)],
            [true_up.x, true_up.y, true_up.z, -true_up.dot(position)],
            [-forward.x, -forward.y, -forward.z, forward.dot(position)],
            [0.0, 0.0, 0.0, 1.0],
        ],
        dtype=np.float64,
    )


@dataclass(frozen=True)
class PerspectiveProjection:
    """Pinhole projection with a vertical field of view.

    Raises:
        ProjectionDegenerate: If fov is outside (0, 180), near <= 0 or
            far <= near.
    """

    fov_deg: float = 60.0
    near: float = 0.1
    far: float = 1000.0

    def __post_init__(self) -> None:
        if not 0 < self.fov_deg < 180:
            raise ProjectionDegenerate(f"Field of view must be in (0, 180), got {self.fov_deg}")
        if self.near <= 0:
            raise ProjectionDegenerate(f"Near plane must be positive, got {self.near}")
        if self.far <= self.near:
            raise ProjectionDegenerate(f"Far plane ({self.far}) must exceed near ({self.near})")

    @property
    def focal(self) -> float:
        return 1.0 / math.tan(math.radians(self.fov_deg) / 2)

    def project(self, point: Point3) -> Point2:
        depth = -point.z
        if depth <= 0:
            raise ProjectionDegenerate("Point is not in front of the camera")
        f = self.focal
        return Point2(f * point.x / depth, f * point.y / depth)

    def extents(self) -> Frame | None:
        return None


@dataclass(frozen=True)
class OrthographicProjection:
    """Parallel projection onto the camera plane, limited to a view box.

    Raises:
        ProjectionDegenerate: If the box has zero or negative extent.
    """

    left: float = -1.0
    right: float = 1.0
    bottom: float = -1.0
    top: float = 1.0
    near: float = 0.0
    far: float = 1000.0

    def __post_init__(self) -> None:
        if self.right <= self.left or self.top <= self.bottom:
            raise ProjectionDegenerate(
                f"Orthographic extents are empty: x [{self.left}, {self.right}], "
                f"y [{self.bottom}, {self.top}]"
            )
        if self.far <= self.near:
            raise ProjectionDegenerate(f"Far plane ({self.far}) must exceed near ({self.near})")

    def project(self, point: Point3) -> Point2:
        return Point2(point.x, point.y)

    def extents(self) -> Frame | None:
        return Frame.from_bounds(self.left, self.bottom, self.right, self.top)


Projection = PerspectiveProjection | OrthographicProjection


@dataclass(frozen=True)
class ProjectedFace:
    """A face after view transform, near/far clipping and projection."""

    index: int
    face: Face
    points: tuple[Point2, ...]
    depth: float


@dataclass(frozen=True)
class Camera:
    """A positioned camera with a projection.

    Raises:
        ProjectionDegenerate: If the view cannot be built.
    """

    position: Point3
    target: Point3
    up: Point3 = Point3(0.0, 0.0, 1.0)
    projection: Projection = field(default_factory=PerspectiveProjection)
    view: npt.NDArray[np.float64] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "view", look_at(self.position, self.target, self.up))

    def to_camera_space(self, point: Point3) -> Point3:
        x, y, z, _ = self.view @ np.array([point.x, point.y, point.z, 1.0])
        return Point3(float(x), float(y), float(z))

    def depth(self, point: Point3) -> float:
        """Distance in front of the camera along the view direction."""
        return -self.to_camera_space(point).z

    def project_point(self, point: Point3) -> Point2:
        """Project a world point to image space (y up).

        Raises:
            ProjectionDegenerate: For a perspective camera, if the point is
                not in front of the camera.
        """
        return self.projection.project(self.to_camera_space(point))

    def clip_planes(self) -> tuple[Plane, Plane]:
        """Near and far planes in camera space (positive side is visible)."""
        near = Plane(Point3(0.0, 0.0, -1.0), self.projection.near)
        far = Plane(Point3(0.0, 0.0, 1.0), -self.projection.far)
        return near, far

    def project_face(self, face: Face, index: int) -> ProjectedFace | None:
        """Clip a face to the near/far planes and project it.

        Returns:
            The projected face, or None if nothing of it lies between the
            near and far planes.
        """
        points = tuple(self.to_camera_space(p) for p in face.points)
        for plane in self.clip_planes():
            points = plane.clip(points)
        if len(points) < 3:
            return None
        depth = sum(-p.z for p in points) / len(points)
        projected = tuple(self.projection.project(p) for p in points)
        return ProjectedFace(index=index, face=face, points=projected, depth=depth)
