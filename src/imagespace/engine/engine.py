"""Facade over the frustum model, its geometry, and the distortion."""

from __future__ import annotations

import logging

import numpy as np

from imagespace.engine.clipping import ClippingPlaneDeriver
from imagespace.engine.distortion import DistortionTransform
from imagespace.engine.frustum_geometry import (
    FrustumGeometryBuilder,
    build_image_space_box,
)
from imagespace.engine.frustum_model import FrustumModel
from imagespace.engine.transition import TransitionClock
from imagespace.model import (
    DistortMode,
    FrustumSettings,
    Plane,
    ProjectionKind,
    SceneNode,
    make_box,
    transform_points,
)

logger = logging.getLogger(__name__)

# Fraction of the inscribed radius a fitted object may occupy.
_FIT_MARGIN = 0.9


class FrustumDistortionEngine:
    """Everything a scene manager needs to show real-world and image space.

    Typical per-frame use by a host::

        engine.tick()
        planes = engine.derive_planes()
        copies = [engine.distort_copy(obj) for obj in objects]
        # ... render copies clipped by planes, then drop them ...

    Frustum geometry groups for both projection kinds are kept up to
    date: whenever a parameter changes they are rebuilt, and any scene
    root they were added to receives the new groups in place of the old.

    Args:
        settings: Start-up parameters.
        clock: Time source for transitions.
    """

    def __init__(
        self,
        settings: FrustumSettings | None = None,
        clock: TransitionClock | None = None,
    ) -> None:
        self.settings = settings if settings is not None else FrustumSettings()
        self.model = FrustumModel(self.settings)
        self.builder = FrustumGeometryBuilder(self.model, self.settings)
        self.distortion = DistortionTransform(
            self.model, clock,
            duration=self.settings.transition_duration,
            distort_mode=self.settings.distort_mode,
        )
        self.clipping = ClippingPlaneDeriver(self.distortion)
        self._visuals: dict[ProjectionKind, SceneNode] = {
            kind: self.builder.build_frustum_visual(kind) for kind in ProjectionKind
        }
        self._roots: list[SceneNode] = []
        self.model.add_listener(self._on_frustum_changed)

    # ---- Parameters ----

    @property
    def projection_kind(self) -> ProjectionKind:
        return self.model.projection_kind

    def set_projection_kind(self, kind: object) -> bool:
        return self.model.set_projection_kind(kind)

    @property
    def fov_degrees(self) -> float:
        return self.model.fov_degrees

    def set_fov(self, degrees: object) -> bool:
        return self.model.set_fov(degrees)

    @property
    def near(self) -> float:
        return self.model.near

    def set_near(self, value: object) -> bool:
        return self.model.set_near(value)

    @property
    def far(self) -> float:
        return self.model.far

    def set_far(self, value: object) -> bool:
        return self.model.set_far(value)

    @property
    def ortho_half_extent(self) -> float:
        return self.model.ortho_half_extent

    def set_ortho_half_extent(self, value: object) -> bool:
        return self.model.set_ortho_half_extent(value)

    def perspective_slope(self) -> float:
        return self.model.perspective_slope()

    # ---- Frustum visuals ----

    def visual(self, kind: ProjectionKind | None = None) -> SceneNode:
        """The current geometry group for *kind* (default: active kind)."""
        return self._visuals[self.model.projection_kind if kind is None else kind]

    def add_visual_frustum_to_scene(self, root: SceneNode) -> None:
        """Attach both frustum groups to *root* and track it for rebuilds."""
        if any(r is root for r in self._roots):
            return
        for group in self._visuals.values():
            root.add(group)
        self._roots.append(root)

    def remove_visual_frustum_from_scene(self, root: SceneNode) -> bool:
        """Detach both frustum groups from *root*; ``False`` if never added."""
        for i, r in enumerate(self._roots):
            if r is root:
                del self._roots[i]
                for group in self._visuals.values():
                    root.remove(group)
                return True
        return False

    def image_space_box(self) -> SceneNode:
        """Fresh outline of the image-space target volume."""
        return build_image_space_box(self.settings)

    def _on_frustum_changed(
        self, model: FrustumModel, kinds: frozenset[ProjectionKind],
    ) -> None:
        for kind in kinds:
            old = self._visuals[kind]
            new = self.builder.build_frustum_visual(kind)
            self._visuals[kind] = new
            for root in self._roots:
                root.remove(old)
                root.add(new)
        for kind, group in self._visuals.items():
            group.visible = kind is model.projection_kind

    # ---- Distortion ----

    @property
    def distort_mode(self) -> DistortMode:
        return self.distortion.distort_mode

    def set_distort_mode(self, mode: object) -> bool:
        return self.distortion.set_distort_mode(mode)

    @property
    def current_distortion(self) -> np.ndarray:
        return self.distortion.current_distortion

    def tick(self, now: float | None = None) -> np.ndarray:
        return self.distortion.tick(now)

    def activate_transition(self, now: float | None = None) -> None:
        self.distortion.activate_transition(now)

    def is_transitioning(self) -> bool:
        return self.distortion.is_transitioning()

    def apply_to_object(self, node: SceneNode) -> SceneNode:
        """Distort *node* in place; it must already be a detached deep copy."""
        return self.distortion.apply_to_object(node)

    def distort_copy(self, node: SceneNode) -> SceneNode:
        """Return a distorted deep copy of *node*."""
        return self.distortion.distorted_copy(node)

    def apply_to_vector(self, point: np.ndarray | list[float] | tuple[float, ...]) -> np.ndarray:
        return self.distortion.apply_to_vector(point)

    def derive_planes(self, kind: ProjectionKind | None = None) -> list[Plane]:
        return self.clipping.derive_planes(kind)

    def image_space_origin_position(self) -> np.ndarray | None:
        return self.distortion.image_space_origin_position()

    # ---- Scene objects ----

    def fit_object_to_frustum(self, node: SceneNode) -> bool:
        """Scale and move *node* so its bounding sphere sits inside the frustum.

        The sphere is centred on the view axis halfway between the near
        and far planes, with a radius just under the largest sphere the
        active frustum can hold there.  Only the node's own position
        and scale change; its parent is left alone.

        Returns:
            ``False`` (and logs) if *node* has no finite vertices.
        """
        points = [
            transform_points(n.world_matrix(), n.geometry.positions)
            for n in node.traverse()
            if n.geometry is not None and len(n.geometry.positions)
        ]
        if not points:
            logger.warning("Cannot fit %r: it has no vertices", node.name)
            return False
        pts = np.vstack(points)
        if not np.all(np.isfinite(pts)):
            logger.warning("Cannot fit %r: it has non-finite vertices", node.name)
            return False

        centre = (pts.min(axis=0) + pts.max(axis=0)) / 2.0
        radius = float(np.max(np.linalg.norm(pts - centre, axis=1)))

        near, far = self.model.near, self.model.far
        depth = (near + far) / 2.0
        if self.model.projection_kind is ProjectionKind.PERSPECTIVE:
            slope = self.model.perspective_slope()
            side = depth * slope / np.sqrt(1.0 + slope * slope)
        else:
            side = self.model.ortho_half_extent
        target_radius = _FIT_MARGIN * min(depth - near, far - depth, side)
        target = np.array([0.0, 0.0, -depth])

        # World map x -> k * x + shift, pulled back into the parent frame.
        k = target_radius / radius if radius > 1e-12 else 1.0
        shift = target - k * centre
        parent = np.eye(4) if node.parent is None else node.parent.world_matrix()
        local_shift = np.linalg.solve(parent[:3, :3], shift + (k - 1.0) * parent[:3, 3])
        node.scale = node.scale * k
        node.position = k * node.position + local_shift
        logger.debug("Fitted %r into the frustum (scale x%.3g)", node.name, k)
        return True

    def default_object(self) -> SceneNode:
        """A unit cube in the object colour, placed like a freshly loaded object.

        The cube sits on the view axis and is fitted into the frustum
        when ``fit_loaded_object_to_frustum`` is set.
        """
        node = make_box(
            name="default_object",
            colour=self.settings.object_colour,
            position=(0.0, 0.0, -(self.model.near + self.model.far) / 2.0),
        )
        if self.settings.fit_loaded_object_to_frustum:
            self.fit_object_to_frustum(node)
        return node
