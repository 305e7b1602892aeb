"""The real-world to image-space distortion transform.

The full distortion takes a point through the active camera's view and
projection matrices and then re-maps clip-space depth so that the near
plane sits at image-space depth 0 and the far plane at depth 1.  Image
space keeps the camera's viewing direction, so depth *d* is placed at
``z = -d``: the image-space volume is ``[-1, 1]^2`` in x/y and
``[-1, 0]`` in z.

The no-distortion endpoint is either the identity or, in
:attr:`DistortMode.KEEP_NEAR_CONSTANT`, a uniform scale plus a shift
that already puts the near plane where the full distortion will put
it.  Transitions interpolate the two matrices component-wise.
"""

from __future__ import annotations

import logging

import numpy as np

from imagespace._constants import NORMAL_EPSILON, W_EPSILON
from imagespace.engine.frustum_model import FrustumModel
from imagespace.engine.transition import TransitionClock, TransitionState
from imagespace.model import (
    DistortMode,
    NodeKind,
    ProjectionKind,
    SceneNode,
    lerp_matrices,
    scale_matrix,
    transform_points,
    translation_matrix,
)
from imagespace.model.transforms import to_homogeneous

logger = logging.getLogger(__name__)

CONVENTION_CORRECTION = np.array([
    [1.0, 0.0, 0.0, 0.0],
    [0.0, 1.0, 0.0, 0.0],
    [0.0, 0.0, -0.5, -0.5],
    [0.0, 0.0, 0.0, 1.0],
])
"""Maps clip z in ``[-1, 1]`` (near to far) to ``z = -depth``, depth in ``[0, 1]``."""
CONVENTION_CORRECTION.setflags(write=False)

# Degenerate faces listed in a single warning before truncation.
_MAX_REPORTED_FACES = 5


def flat_normals(triangles: np.ndarray) -> tuple[np.ndarray, np.ndarray]:
    """Unit normals of each triangle and a mask of degenerate faces.

    Args:
        triangles: ``(n_faces, 3, 3)`` vertex positions.

    Returns:
        Tuple ``(normals, degenerate)``: ``(n_faces, 3)`` normals
        (``cross(b - a, c - a)`` normalised, zero for degenerate faces)
        and a ``(n_faces,)`` boolean mask.
    """
    a, b, c = triangles[:, 0], triangles[:, 1], triangles[:, 2]
    raw = np.cross(b - a, c - a)
    lengths = np.linalg.norm(raw, axis=1)
    with np.errstate(divide="ignore", invalid="ignore"):
        unit = raw / lengths[:, np.newaxis]
    sq = np.sum(unit * unit, axis=1)
    degenerate = ~np.isfinite(sq) | (np.abs(sq - 1.0) > NORMAL_EPSILON)
    unit[degenerate] = 0.0
    return unit, degenerate


class DistortionTransform:
    """Computes, animates, and applies the distortion matrix.

    Call :meth:`tick` once per frame to refresh
    :attr:`current_distortion`; call :meth:`activate_transition` to
    start (or reverse) an animation between the two endpoints.

    Args:
        model: Frustum whose cameras define the distortion.
        clock: Time source; defaults to a monotonic
            :class:`TransitionClock`.
        duration: Seconds per transition.
        distort_mode: Initial :class:`DistortMode`.

    Raises:
        ValueError: If *duration* is not positive.
    """

    def __init__(
        self,
        model: FrustumModel,
        clock: TransitionClock | None = None,
        *,
        duration: float = 1.0,
        distort_mode: DistortMode = DistortMode.STANDARD,
    ) -> None:
        if duration <= 0:
            raise ValueError(f"duration must be positive, got {duration}")
        self.model = model
        self.clock = clock if clock is not None else TransitionClock()
        self.state = TransitionState(duration=float(duration))
        self._mode = DistortMode(distort_mode)
        self._current = self.no_distortion_matrix()

    # ---- Mode ----

    @property
    def distort_mode(self) -> DistortMode:
        return self._mode

    def set_distort_mode(self, mode: object) -> bool:
        """Select the no-distortion framing; ``False`` for unknown modes."""
        parsed = DistortMode.parse(mode)
        if parsed is None:
            logger.warning("Unknown distort mode %r; keeping %s", mode, self._mode.value)
            return False
        self._mode = parsed
        return True

    # ---- Endpoint matrices ----

    def full_distortion_matrix(self, kind: ProjectionKind | None = None) -> np.ndarray:
        """``CONVENTION_CORRECTION @ projection @ view`` for *kind*."""
        camera = self.model.camera(kind)
        return CONVENTION_CORRECTION @ camera.projection @ camera.view

    def no_distortion_matrix(self, kind: ProjectionKind | None = None) -> np.ndarray:
        """The undistorted endpoint for *kind* under the current mode.

        Raises:
            ValueError: If *kind* is not a :class:`ProjectionKind`.
        """
        if self._mode is DistortMode.STANDARD:
            return np.eye(4)
        kind = self.model.projection_kind if kind is None else kind
        near = self.model.near
        if kind is ProjectionKind.PERSPECTIVE:
            s = 1.0 / (self.model.perspective_slope() * near)
        elif kind is ProjectionKind.ORTHOGRAPHIC:
            s = 1.0 / self.model.ortho_half_extent
        else:
            raise ValueError(f"unknown projection kind {kind!r}")
        return translation_matrix((0.0, 0.0, near * s)) @ scale_matrix(s)

    # ---- Animation ----

    @property
    def current_distortion(self) -> np.ndarray:
        """Copy of the matrix set by the last :meth:`tick`."""
        return self._current.copy()

    def is_transitioning(self) -> bool:
        return self.state.is_transitioning

    @property
    def toward_image_space(self) -> bool:
        return self.state.toward_image_space

    def tick(self, now: float | None = None) -> np.ndarray:
        """Refresh :attr:`current_distortion` for the current instant.

        When idle, the matrix snaps to the endpoint selected by the
        last transition direction.  While transitioning, the progress
        ``t`` is clamped to ``[0, 1]``; reaching 1 ends the transition.

        Args:
            now: Clock time to evaluate at; defaults to ``clock.now()``.

        Returns:
            A copy of the new current distortion.
        """
        state = self.state
        if state.is_transitioning:
            t = self.clock.elapsed_fraction(state.start_time, state.duration, now)
            if t >= 1.0:
                t = 1.0
                state.is_transitioning = False
                logger.debug(
                    "Transition to %s complete",
                    "image space" if state.toward_image_space else "real world",
                )
            state.t = max(t, 0.0)

        self._current = lerp_matrices(
            self.no_distortion_matrix(),
            self.full_distortion_matrix(),
            state.blend,
        )
        return self._current.copy()

    def activate_transition(self, now: float | None = None) -> None:
        """Start a transition, or reverse the one in flight.

        A reversal restarts the clock so that the progress already made
        becomes the progress remaining: ``new_start = 2 * now -
        duration - old_start``.  The current matrix is refreshed at
        *now*, so there is no jump at the instant of reversal.  A
        transition whose duration has already run out counts as finished
        even if no tick has seen it end.
        """
        state = self.state
        if now is None:
            now = self.clock.now()
        self.tick(now)
        if state.is_transitioning:
            state.start_time = 2.0 * now - state.duration - state.start_time
        else:
            state.start_time = now
            state.t = 0.0
            state.is_transitioning = True
        state.toward_image_space = not state.toward_image_space
        self.tick(now)

    # ---- Application ----

    def apply_to_vector(self, point: np.ndarray | list[float] | tuple[float, ...]) -> np.ndarray:
        """Map one world-space point through the current distortion."""
        return transform_points(self._current, np.asarray(point, dtype=float).reshape(3))

    def apply_to_object(
        self, node: SceneNode, *, parent_world: np.ndarray | None = None,
    ) -> SceneNode:
        """Bake world transform and distortion into *node*'s vertices.

        *node* must be a detached deep copy (see
        :meth:`SceneNode.clone`): its buffers are rewritten in place and
        every local transform in the subtree is reset to identity.
        Meshes get flat normals recomputed from the distorted
        triangles, with indexed meshes expanded to one vertex per face
        corner.  Degenerate triangles are logged and keep a zero normal.

        Args:
            node: Root of the subtree to distort.
            parent_world: World transform of the original's parent,
                prepended to every world matrix in the subtree.

        Returns:
            *node*, for chaining.
        """
        base = np.eye(4) if parent_world is None else np.asarray(parent_world, dtype=float)
        nodes = list(node.traverse())
        worlds = [base @ n.world_matrix() for n in nodes]
        for n, world in zip(nodes, worlds):
            geometry = n.geometry
            if geometry is not None and len(geometry.positions):
                matrix = self._current @ world
                if n.kind is NodeKind.MESH and geometry.has_normals:
                    triangles = geometry.triangles()
                    flat = transform_points(matrix, triangles.reshape(-1, 3))
                    normals, degenerate = flat_normals(flat.reshape(-1, 3, 3))
                    if degenerate.any():
                        bad = np.flatnonzero(degenerate)
                        logger.warning(
                            "Node %r: %d degenerate face(s) after distortion "
                            "(first: %s); their normals are left at zero",
                            n.name, len(bad), bad[:_MAX_REPORTED_FACES].tolist(),
                        )
                    geometry.positions = flat
                    geometry.normals = np.repeat(normals, 3, axis=0)
                    geometry.indices = None
                else:
                    geometry.positions = transform_points(matrix, geometry.positions)
            n.reset_transform()
        return node

    def distorted_copy(self, node: SceneNode) -> SceneNode:
        """Deep-copy *node* and distort the copy, leaving *node* untouched.

        The copy is detached, so the world transform of *node*'s parent
        is baked in explicitly.
        """
        parent_world = None if node.parent is None else node.parent.world_matrix()
        return self.apply_to_object(node.clone(), parent_world=parent_world)

    def image_space_origin_position(self) -> np.ndarray | None:
        """Where the real-world origin maps under the current distortion.

        Returns ``None`` when the origin has no finite image, which is
        the case for the perspective apex at full distortion.
        """
        hom = to_homogeneous(self._current, np.zeros(3))[0]
        if abs(hom[3]) < W_EPSILON:
            return None
        return hom[:3] / hom[3]
