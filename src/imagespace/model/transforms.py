"""4x4 homogeneous transform helpers.

All matrices act on column vectors: ``p' = M @ [x, y, z, 1]``.  Point
arrays have shape ``(n, 3)``.
"""

from __future__ import annotations

import numpy as np


def translation_matrix(offset: np.ndarray | list[float] | tuple[float, ...]) -> np.ndarray:
    """Return the 4x4 matrix translating by *offset*."""
    m = np.eye(4)
    m[:3, 3] = np.asarray(offset, dtype=float)
    return m


def scale_matrix(scale: float | np.ndarray | list[float] | tuple[float, ...]) -> np.ndarray:
    """Return the 4x4 matrix scaling by *scale* (scalar or per-axis)."""
    s = np.broadcast_to(np.asarray(scale, dtype=float), (3,))
    return np.diag([s[0], s[1], s[2], 1.0])


def to_homogeneous(matrix: np.ndarray, points: np.ndarray) -> np.ndarray:
    """Apply *matrix* to *points* and return the ``(n, 4)`` result without dividing."""
    points = np.asarray(points, dtype=float).reshape(-1, 3)
    ones = np.ones((len(points), 1))
    return np.hstack([points, ones]) @ np.asarray(matrix, dtype=float).T


def transform_points(matrix: np.ndarray, points: np.ndarray) -> np.ndarray:
    """Apply a projective *matrix* to *points*, including the divide by ``w``.

    Points whose ``w`` is zero come back as non-finite rows; callers
    that can meet the camera apex must check with :func:`numpy.isfinite`.

    Args:
        matrix: ``(4, 4)`` transform.
        points: ``(n, 3)`` or ``(3,)`` array.

    Returns:
        Array of the same shape as *points*.
    """
    pts = np.asarray(points, dtype=float)
    hom = to_homogeneous(matrix, pts)
    with np.errstate(divide="ignore", invalid="ignore"):
        out = hom[:, :3] / hom[:, 3:4]
    return out.reshape(pts.shape)


def transform_directions(matrix: np.ndarray, directions: np.ndarray) -> np.ndarray:
    """Apply the linear (upper 3x3) part of *matrix* to *directions*."""
    d = np.asarray(directions, dtype=float)
    return (d.reshape(-1, 3) @ np.asarray(matrix, dtype=float)[:3, :3].T).reshape(d.shape)


def lerp_matrices(a: np.ndarray, b: np.ndarray, t: float) -> np.ndarray:
    """Component-wise interpolation ``(1 - t) * a + t * b``."""
    return (1.0 - t) * np.asarray(a, dtype=float) + t * np.asarray(b, dtype=float)
