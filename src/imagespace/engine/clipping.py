"""Clipping planes derived from the distorted frustum corners."""

from __future__ import annotations

import numpy as np

from imagespace._constants import CLIP_EPSILON
from imagespace.engine.distortion import DistortionTransform
from imagespace.engine.frustum_geometry import frustum_corner_points
from imagespace.model import Plane, ProjectionKind

# Corner indices: 0-3 near (BL, BR, TR, TL), 4-7 far in the same order.
# Each triple is counter-clockwise seen from outside the frustum, so
# Plane.from_coplanar_points yields an outward normal.
PLANE_CORNER_TRIPLES: dict[str, tuple[int, int, int]] = {
    "left": (4, 0, 3),
    "right": (1, 5, 6),
    "bottom": (0, 4, 5),
    "top": (2, 6, 7),
    "near": (0, 1, 2),
    "far": (6, 5, 4),
}


class ClippingPlaneDeriver:
    """Bounds the current frustum with six outward-facing planes.

    The corners are pushed through the distortion's current matrix, so
    the planes follow the frustum whether it is undistorted,
    mid-transition, or fully in image space.  Planes are only valid
    for the frame they were derived in.

    Args:
        distortion: Source of the frustum model and the current matrix.
        epsilon: Outward offset of each plane.
    """

    def __init__(
        self, distortion: DistortionTransform, *, epsilon: float = CLIP_EPSILON,
    ) -> None:
        self.distortion = distortion
        self.epsilon = epsilon

    def frustum_corners(self, kind: ProjectionKind | None = None) -> np.ndarray:
        """The 8 frustum corners under the current distortion, shape ``(8, 3)``."""
        corners = frustum_corner_points(self.distortion.model, kind)
        return np.array([self.distortion.apply_to_vector(c) for c in corners])

    def derive_planes(self, kind: ProjectionKind | None = None) -> list[Plane]:
        """Left, right, bottom, top, near, and far planes, in that order.

        Points inside the frustum satisfy
        ``dot(normal, p) + constant <= 0``.
        """
        corners = self.frustum_corners(kind)
        return [
            Plane.from_coplanar_points(
                corners[a], corners[b], corners[c],
            ).offset(self.epsilon)
            for a, b, c in PLANE_CORNER_TRIPLES.values()
        ]
