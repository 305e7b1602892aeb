from __future__ import annotations

from dataclasses import dataclass

import numpy as np


@dataclass(frozen=True, eq=False)
class Plane:
    """An oriented plane ``dot(normal, p) + constant = 0``.

    Points with a non-positive signed distance are *inside* (behind the
    plane, opposite to :attr:`normal`).  A set of planes with outward
    normals therefore bounds a convex region as the intersection of
    their insides.

    Attributes:
        normal: Unit normal, shape ``(3,)``.
        constant: Signed offset of the plane from the origin.
    """

    normal: np.ndarray
    constant: float

    def __post_init__(self) -> None:
        n = np.array(self.normal, dtype=float)
        if n.shape != (3,):
            raise ValueError(f"normal must have shape (3,), got {n.shape}")
        length = float(np.linalg.norm(n))
        if length < 1e-12:
            raise ValueError("normal must be non-zero")
        # Renormalise so that distances are Euclidean.
        n = n / length
        n.setflags(write=False)
        object.__setattr__(self, "normal", n)
        object.__setattr__(self, "constant", float(self.constant) / length)

    @classmethod
    def from_coplanar_points(
        cls, a: np.ndarray, b: np.ndarray, c: np.ndarray,
    ) -> Plane:
        """Build the plane through *a*, *b*, *c*.

        The normal is ``(c - b) x (a - b)``, so it points towards a
        viewer who sees ``a -> b -> c`` counter-clockwise.

        Raises:
            ValueError: If the points are collinear.
        """
        a = np.asarray(a, dtype=float)
        b = np.asarray(b, dtype=float)
        c = np.asarray(c, dtype=float)
        n = np.cross(c - b, a - b)
        length = float(np.linalg.norm(n))
        if length < 1e-12:
            raise ValueError("points are collinear")
        n /= length
        return cls(n, -float(np.dot(n, a)))

    def distance_to_point(self, point: np.ndarray) -> float | np.ndarray:
        """Signed distance of *point* (``(3,)`` or ``(n, 3)``) from the plane."""
        p = np.asarray(point, dtype=float)
        return p @ self.normal + self.constant

    def offset(self, distance: float) -> Plane:
        """Return this plane moved *distance* along its normal."""
        return Plane(self.normal, self.constant - distance)

    def contains(self, point: np.ndarray, tol: float = 0.0) -> bool | np.ndarray:
        """Whether *point* lies on the inside (within *tol*)."""
        return self.distance_to_point(point) <= tol
