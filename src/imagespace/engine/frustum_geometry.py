"""Line and plane geometry visualising the camera frustum.

Corner ordering used throughout: bottom-left, bottom-right, top-right,
top-left, seen from the camera (which looks down -Z).
"""

from __future__ import annotations

import numpy as np

from imagespace._constants import LAYER_ORTHOGRAPHIC, LAYER_PERSPECTIVE
from imagespace.engine.frustum_model import FrustumModel
from imagespace.model import (
    Colour,
    FrustumSettings,
    Geometry,
    NodeKind,
    ProjectionKind,
    SceneNode,
)

_CORNER_SIGNS = np.array([
    [-1.0, -1.0],
    [1.0, -1.0],
    [1.0, 1.0],
    [-1.0, 1.0],
])

_QUAD_INDICES = np.array([0, 1, 2, 0, 2, 3])

LAYERS: dict[ProjectionKind, int] = {
    ProjectionKind.PERSPECTIVE: LAYER_PERSPECTIVE,
    ProjectionKind.ORTHOGRAPHIC: LAYER_ORTHOGRAPHIC,
}


def cross_section(half_extent: float, z: float) -> np.ndarray:
    """Four corners of a square of half side *half_extent* at depth *z*.

    Returns:
        ``(4, 3)`` array in corner order.
    """
    corners = np.empty((4, 3))
    corners[:, :2] = _CORNER_SIGNS * half_extent
    corners[:, 2] = z
    return corners


def frustum_corner_points(
    model: FrustumModel, kind: ProjectionKind | None = None,
) -> np.ndarray:
    """The 8 undistorted frustum corners: 4 near then 4 far.

    Returns:
        ``(8, 3)`` array.
    """
    near, far = model.near, model.far
    return np.vstack([
        cross_section(model.half_extent_at(near, kind), -near),
        cross_section(model.half_extent_at(far, kind), -far),
    ])


def _line_node(
    starts: np.ndarray, ends: np.ndarray, *, name: str, colour: Colour,
) -> SceneNode:
    """Interleave *starts*/*ends* into a line-segment node."""
    positions = np.empty((2 * len(starts), 3))
    positions[0::2] = starts
    positions[1::2] = ends
    return SceneNode(
        name=name,
        kind=NodeKind.LINES,
        geometry=Geometry(positions),
        colour=colour,
        role=name,
    )


def build_plane(
    half_extent: float,
    z: float,
    *,
    name: str = "plane",
    colour: Colour = "#a0a0a0",
    opacity: float = 1.0,
) -> tuple[SceneNode, SceneNode]:
    """Outline and filled quad of a square plane at depth *z*.

    Args:
        half_extent: Half the side of the square.
        z: Depth of the plane.
        name: Prefix for the two node names.
        colour: Colour of both nodes.
        opacity: Alpha of the filled quad.

    Returns:
        ``(outline, quad)``: a closed 4-segment loop and a 2-triangle
        mesh with normals facing the camera (+Z).
    """
    corners = cross_section(half_extent, z)
    outline = _line_node(
        corners, np.roll(corners, -1, axis=0),
        name=f"{name}_outline", colour=colour,
    )
    quad = SceneNode(
        name=f"{name}_quad",
        kind=NodeKind.MESH,
        geometry=Geometry(
            corners.copy(),
            np.tile([0.0, 0.0, 1.0], (4, 1)),
            _QUAD_INDICES.copy(),
        ),
        colour=colour,
        opacity=opacity,
        role=f"{name}_quad",
    )
    return outline, quad


class FrustumGeometryBuilder:
    """Builds the visual representation of a :class:`FrustumModel`.

    Every call regenerates fresh buffers from the model's current
    parameters; nothing is patched in place.

    Args:
        model: The frustum to visualise.
        settings: Source of colours and plane opacity.
    """

    def __init__(
        self, model: FrustumModel, settings: FrustumSettings | None = None,
    ) -> None:
        self.model = model
        self.settings = settings if settings is not None else FrustumSettings()

    def build_side_edges(self, kind: ProjectionKind) -> SceneNode:
        """Four edges joining matching near and far corners."""
        corners = frustum_corner_points(self.model, kind)
        return _line_node(
            corners[:4], corners[4:],
            name="side_edges", colour=self.settings.side_colour,
        )

    def build_tip_edges(self) -> SceneNode:
        """Four edges from the perspective apex to the near corners."""
        near = self.model.near
        corners = cross_section(
            self.model.half_extent_at(near, ProjectionKind.PERSPECTIVE), -near,
        )
        return _line_node(
            np.zeros((4, 3)), corners,
            name="tip_edges", colour=self.settings.side_colour,
        )

    def build_plane(
        self, kind: ProjectionKind, which: str,
    ) -> tuple[SceneNode, SceneNode]:
        """Outline and quad of the ``"near"`` or ``"far"`` plane of *kind*.

        Raises:
            ValueError: If *which* is not ``"near"`` or ``"far"``.
        """
        if which == "near":
            depth, colour = self.model.near, self.settings.near_colour
        elif which == "far":
            depth, colour = self.model.far, self.settings.far_colour
        else:
            raise ValueError(f"which must be 'near' or 'far', got {which!r}")
        return build_plane(
            self.model.half_extent_at(depth, kind), -depth,
            name=f"{which}_plane",
            colour=colour,
            opacity=self.settings.clipping_plane_opacity,
        )

    def build_frustum_visual(self, kind: ProjectionKind) -> SceneNode:
        """Group holding every frustum element for *kind*.

        The group is tagged with the kind's visibility layer and is
        visible only when *kind* is the model's active projection.
        """
        group = SceneNode(
            name=f"{kind.value}_frustum",
            layer=LAYERS[kind],
            visible=kind is self.model.projection_kind,
            role="frustum",
        )
        group.add(self.build_side_edges(kind))
        if kind is ProjectionKind.PERSPECTIVE:
            group.add(self.build_tip_edges())
        for which in ("near", "far"):
            for node in self.build_plane(kind, which):
                group.add(node)
        for node in group.traverse():
            node.layer = group.layer
        return group


def build_image_space_box(settings: FrustumSettings | None = None) -> SceneNode:
    """Outline of the image-space target volume.

    The volume spans ``[-1, 1]`` in x and y and image-space depth 0
    (near) to 1 (far), laid along -Z like the camera's view.
    """
    s = settings if settings is not None else FrustumSettings()
    near = cross_section(1.0, 0.0)
    far = cross_section(1.0, -1.0)
    group = SceneNode(name="image_space_box", role="image_space_box")
    group.add(_line_node(near, far, name="side_edges", colour=s.side_colour))
    group.add(_line_node(
        near, np.roll(near, -1, axis=0),
        name="near_plane_outline", colour=s.near_colour,
    ))
    group.add(_line_node(
        far, np.roll(far, -1, axis=0),
        name="far_plane_outline", colour=s.far_colour,
    ))
    return group
