"""Projection to screen space and clipping against planes."""

from __future__ import annotations

from collections.abc import Sequence

import numpy as np

from imagespace._constants import W_EPSILON
from imagespace.model import CameraRecord, Plane
from imagespace.model.transforms import to_homogeneous

_EMPTY_POLYGON = np.empty((0, 3))


def project_to_screen(
    points: np.ndarray,
    camera: CameraRecord,
) -> tuple[np.ndarray, np.ndarray]:
    """Project world-space *points* through *camera*.

    Args:
        points: ``(n, 3)`` world-space positions.
        camera: Observer camera.

    Returns:
        Tuple ``(xy, depth)``: ``(n, 2)`` normalised device
        coordinates and ``(n,)`` distances in front of the camera.
        Points at or behind the camera plane get ``nan`` coordinates.
    """
    pts = np.asarray(points, dtype=float).reshape(-1, 3)
    depth = -to_homogeneous(camera.view, pts)[:, 2]
    clip = to_homogeneous(camera.view_projection, pts)
    w = clip[:, 3]
    xy = np.full((len(pts), 2), np.nan)
    front = w > W_EPSILON
    xy[front] = clip[front, :2] / w[front, np.newaxis]
    return xy, depth


def _signed_distances(points: np.ndarray, plane: Plane) -> np.ndarray:
    return points @ plane.normal + plane.constant


def clip_polygon(points: np.ndarray, planes: Sequence[Plane]) -> np.ndarray:
    """Clip a convex polygon to the inside of every plane.

    Sutherland-Hodgman against each plane in turn; a point is inside
    when ``dot(normal, p) + constant <= 0``.

    Args:
        points: ``(k, 3)`` polygon vertices in order.
        planes: Clipping planes.

    Returns:
        ``(m, 3)`` clipped polygon, empty when nothing is left or when
        the input has non-finite vertices.
    """
    poly = np.asarray(points, dtype=float).reshape(-1, 3)
    if not np.all(np.isfinite(poly)):
        return _EMPTY_POLYGON
    for plane in planes:
        if len(poly) == 0:
            break
        d = _signed_distances(poly, plane)
        if np.all(d <= 0.0):
            continue
        if np.all(d > 0.0):
            return _EMPTY_POLYGON
        out: list[np.ndarray] = []
        n = len(poly)
        for i in range(n):
            j = (i + 1) % n
            p, q = poly[i], poly[j]
            dp, dq = d[i], d[j]
            if dp <= 0.0:
                out.append(p)
            if (dp <= 0.0) != (dq <= 0.0):
                t = dp / (dp - dq)
                out.append(p + t * (q - p))
        poly = np.array(out) if out else _EMPTY_POLYGON
    if len(poly) < 3:
        return _EMPTY_POLYGON
    return poly


def clip_segment(
    a: np.ndarray,
    b: np.ndarray,
    planes: Sequence[Plane],
) -> tuple[np.ndarray, np.ndarray] | None:
    """Clip segment ``a-b`` to the inside of every plane.

    Returns:
        The clipped end points, or ``None`` if the segment lies
        entirely outside or has a non-finite end.
    """
    a = np.asarray(a, dtype=float)
    b = np.asarray(b, dtype=float)
    if not (np.all(np.isfinite(a)) and np.all(np.isfinite(b))):
        return None
    t0, t1 = 0.0, 1.0
    direction = b - a
    for plane in planes:
        da = float(np.dot(plane.normal, a) + plane.constant)
        denom = float(np.dot(plane.normal, direction))
        if abs(denom) < 1e-15:
            if da > 0.0:
                return None
            continue
        t = -da / denom
        if denom > 0.0:
            t1 = min(t1, t)
        else:
            t0 = max(t0, t)
        if t0 > t1:
            return None
    return a + t0 * direction, a + t1 * direction
