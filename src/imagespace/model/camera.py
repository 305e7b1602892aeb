from __future__ import annotations

import math
from dataclasses import dataclass, field

import numpy as np

from imagespace.model.settings import ProjectionKind


def perspective_matrix(
    fov_degrees: float,
    near: float,
    far: float,
    aspect: float = 1.0,
    *,
    slope: float | None = None,
) -> np.ndarray:
    """OpenGL-style perspective projection with clip z in ``[-1, 1]``.

    Args:
        fov_degrees: Full vertical field of view.
        near: Near-plane distance (positive).
        far: Far-plane distance (greater than *near*).
        aspect: Width over height of the image.
        slope: Precomputed ``tan(fov / 2)``; used in place of
            *fov_degrees* when given.

    Returns:
        ``(4, 4)`` projection matrix mapping camera space (looking down
        -Z) to clip space.
    """
    if slope is None:
        slope = math.tan(math.radians(fov_degrees) / 2.0)
    f = 1.0 / slope
    proj = np.zeros((4, 4))
    proj[0, 0] = f / aspect
    proj[1, 1] = f
    proj[2, 2] = (far + near) / (near - far)
    proj[2, 3] = 2.0 * far * near / (near - far)
    proj[3, 2] = -1.0
    return proj


def orthographic_matrix(
    left: float, right: float, bottom: float, top: float, near: float, far: float,
) -> np.ndarray:
    """OpenGL-style orthographic projection with clip z in ``[-1, 1]``."""
    proj = np.eye(4)
    proj[0, 0] = 2.0 / (right - left)
    proj[1, 1] = 2.0 / (top - bottom)
    proj[2, 2] = -2.0 / (far - near)
    proj[0, 3] = -(right + left) / (right - left)
    proj[1, 3] = -(top + bottom) / (top - bottom)
    proj[2, 3] = -(far + near) / (far - near)
    return proj


def look_at_matrix(
    eye: np.ndarray | list[float] | tuple[float, ...],
    target: np.ndarray | list[float] | tuple[float, ...],
    *,
    up: np.ndarray | list[float] | tuple[float, ...] = (0.0, 1.0, 0.0),
) -> np.ndarray:
    """World matrix of a camera at *eye* looking towards *target*.

    The camera's local -Z axis points at *target* and its local +Y
    axis is as close to *up* as possible.

    Raises:
        ValueError: If *eye* equals *target* or *up* is parallel to the
            viewing direction.
    """
    eye = np.asarray(eye, dtype=float)
    back = eye - np.asarray(target, dtype=float)
    back_len = np.linalg.norm(back)
    if back_len < 1e-12:
        raise ValueError("eye and target must differ")
    z_axis = back / back_len

    x_axis = np.cross(np.asarray(up, dtype=float), z_axis)
    x_len = np.linalg.norm(x_axis)
    if x_len < 1e-12:
        raise ValueError("up vector is parallel to the viewing direction")
    x_axis /= x_len
    y_axis = np.cross(z_axis, x_axis)

    world = np.eye(4)
    world[:3, 0] = x_axis
    world[:3, 1] = y_axis
    world[:3, 2] = z_axis
    world[:3, 3] = eye
    return world


@dataclass(frozen=True, eq=False)
class CameraRecord:
    """A camera reduced to its matrices.

    Attributes:
        kind: Projection kind of :attr:`projection`.
        projection: ``(4, 4)`` camera-to-clip matrix.
        world: ``(4, 4)`` camera-to-world matrix (the camera's pose).
    """

    kind: ProjectionKind
    projection: np.ndarray
    world: np.ndarray = field(default_factory=lambda: np.eye(4))

    def __post_init__(self) -> None:
        for name in ("projection", "world"):
            m = np.array(getattr(self, name), dtype=float)
            if m.shape != (4, 4):
                raise ValueError(f"{name} must have shape (4, 4), got {m.shape}")
            m.setflags(write=False)
            object.__setattr__(self, name, m)

    @property
    def view(self) -> np.ndarray:
        """World-to-camera matrix, the inverse of :attr:`world`."""
        return np.linalg.inv(self.world)

    @property
    def position(self) -> np.ndarray:
        """Camera position in world space."""
        return self.world[:3, 3].copy()

    @property
    def view_projection(self) -> np.ndarray:
        """World-to-clip matrix ``projection @ view``."""
        return self.projection @ self.view

    @classmethod
    def perspective(
        cls,
        fov_degrees: float,
        near: float,
        far: float,
        *,
        aspect: float = 1.0,
        slope: float | None = None,
        world: np.ndarray | None = None,
    ) -> CameraRecord:
        """Build a perspective camera, by default at the origin looking down -Z.

        Pass *slope* to reuse an already computed ``tan(fov / 2)``.
        """
        return cls(
            ProjectionKind.PERSPECTIVE,
            perspective_matrix(fov_degrees, near, far, aspect, slope=slope),
            np.eye(4) if world is None else world,
        )

    @classmethod
    def orthographic(
        cls,
        half_extent: float,
        near: float,
        far: float,
        *,
        aspect: float = 1.0,
        world: np.ndarray | None = None,
    ) -> CameraRecord:
        """Build an orthographic camera with a ``2 * half_extent`` tall view."""
        hx = half_extent * aspect
        return cls(
            ProjectionKind.ORTHOGRAPHIC,
            orthographic_matrix(-hx, hx, -half_extent, half_extent, near, far),
            np.eye(4) if world is None else world,
        )
