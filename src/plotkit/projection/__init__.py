"""3D geometry and projection for plotkit.

Key Components:
    - Primitives: Point3, Plane, Face, Solid and the cuboid builder
    - Camera: look_at view matrix, perspective and orthographic projections
    - Occlusion: project_scene with painter-style hidden-line removal

Example:
    from plotkit.projection import Camera, Point3, cuboid, project_scene

    camera = Camera(position=Point3(4, 3, 2), target=Point3(0.5, 0.5, 0.5))
    segments = project_scene([cuboid(Point3(0, 0, 0), (1, 1, 1))], camera)
"""

from plotkit.projection.camera import (
    Camera,
    OrthographicProjection,
    PerspectiveProjection,
    ProjectedFace,
    Projection,
    look_at,
)
from plotkit.projection.occlusion import ProjectionConfig, project_scene
from plotkit.projection.primitives3d import Face, Plane, Point3, Solid, cuboid, faces_of

__all__ = [
    "Camera",
    "Face",
    "OrthographicProjection",
    "PerspectiveProjection",
    "Plane",
    "Point3",
    "ProjectedFace",
    "Projection",
    "ProjectionConfig",
    "Solid",
    "cuboid",
    "faces_of",
    "look_at",
    "project_scene",
]
