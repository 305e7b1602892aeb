"""Depth-sorted painter's algorithm for scene trees.

Faces are collected from every visible mesh node, optionally clipped
against a set of planes, shaded with a single directional light, and
drawn back to front as one :class:`~matplotlib.collections.PolyCollection`.
Line nodes go into a :class:`~matplotlib.collections.LineCollection`
drawn on top.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence

import numpy as np
from matplotlib.axes import Axes
from matplotlib.collections import LineCollection, PolyCollection

from imagespace.engine.distortion import flat_normals
from imagespace.model import (
    CameraRecord,
    Geometry,
    NodeKind,
    Plane,
    RenderStyle,
    SceneNode,
    normalise_colour,
    shade_colour,
    transform_points,
)
from imagespace.rendering.projection import (
    clip_polygon,
    clip_segment,
    project_to_screen,
)

logger = logging.getLogger(__name__)

# NDC half-extent shown in each view, slightly beyond [-1, 1].
_VIEW_PAD = 1.05


class _Primitives:
    """Screen-space faces and segments gathered for one view."""

    def __init__(self) -> None:
        self.face_verts: list[np.ndarray] = []
        self.face_depths: list[float] = []
        self.face_colours: list[tuple[float, float, float, float]] = []
        self.seg_verts: list[np.ndarray] = []
        self.seg_depths: list[float] = []
        self.seg_colours: list[tuple[float, float, float, float]] = []


def _world_bounds(node: SceneNode, world_pts: np.ndarray) -> tuple[np.ndarray, float] | None:
    """Bounding sphere of *world_pts*, or ``None`` (logged) if it cannot be built."""
    try:
        return Geometry(world_pts).bounding_sphere()
    except ValueError as exc:
        logger.warning("Skipping node %r: %s", node.name, exc)
        return None


def _outside_any(centre: np.ndarray, radius: float, planes: Sequence[Plane]) -> bool:
    return any(plane.distance_to_point(centre) > radius for plane in planes)


def _collect_node(
    node: SceneNode,
    camera: CameraRecord,
    style: RenderStyle,
    light: np.ndarray,
    planes: Sequence[Plane],
    out: _Primitives,
) -> None:
    geometry = node.geometry
    if geometry is None or len(geometry.positions) == 0:
        return
    world_pts = transform_points(node.world_matrix(), geometry.positions)
    bounds = _world_bounds(node, world_pts)
    if bounds is None:
        return
    if planes and _outside_any(*bounds, planes):
        return
    rgb = normalise_colour(node.colour)

    if node.kind is NodeKind.MESH:
        triangles = world_pts[geometry.element_indices(3)]
        if len(triangles) == 0:
            return
        normals, _ = flat_normals(triangles)
        # Double-sided lighting.
        intensity = np.abs(normals @ light)
        for tri, lit in zip(triangles, intensity):
            poly = clip_polygon(tri, planes) if planes else tri
            if len(poly) == 0:
                continue
            xy, depth = project_to_screen(poly, camera)
            if not np.all(np.isfinite(xy)):
                continue
            out.face_verts.append(xy)
            out.face_depths.append(float(depth.mean()))
            out.face_colours.append(
                (*shade_colour(rgb, float(lit), style.ambient), node.opacity),
            )
    elif node.kind is NodeKind.LINES:
        for a, b in world_pts[geometry.element_indices(2)]:
            if planes:
                clipped = clip_segment(a, b, planes)
                if clipped is None:
                    continue
                a, b = clipped
            xy, depth = project_to_screen(np.array([a, b]), camera)
            if not np.all(np.isfinite(xy)):
                continue
            out.seg_verts.append(xy)
            out.seg_depths.append(float(depth.mean()))
            out.seg_colours.append((*rgb, node.opacity))


def _draw_scene(
    ax: Axes,
    camera: CameraRecord,
    nodes: Iterable[SceneNode],
    style: RenderStyle,
    *,
    clip_planes: Sequence[Plane] | None = None,
    unclipped: Iterable[SceneNode] = (),
    background: tuple[float, float, float] | None = None,
    title: str | None = None,
) -> None:
    """Paint *nodes* as seen by *camera* onto *ax*.

    Clears *ax* and redraws everything.  Does **not** create or show
    the figure; the caller owns the figure lifecycle.

    Args:
        ax: A matplotlib ``Axes`` to draw into.
        camera: Observer camera.  Its NDC square fills the axes.
        nodes: Scene roots to draw, clipped by *clip_planes*.
        style: Lighting and line settings.
        clip_planes: Planes to clip *nodes* against; points inside
            satisfy ``dot(normal, p) + constant <= 0``.
        unclipped: Further roots drawn without clipping.
        background: Axes face colour.
        title: Optional axes title.
    """
    light = np.asarray(style.light_direction, dtype=float)
    light = light / np.linalg.norm(light)
    planes = list(clip_planes) if clip_planes is not None else []

    prims = _Primitives()
    for roots, node_planes in ((nodes, planes), (unclipped, [])):
        for root in roots:
            for node in root.traverse_visible():
                _collect_node(node, camera, style, light, node_planes, prims)

    ax.cla()
    if prims.face_verts:
        order = np.argsort(prims.face_depths)[::-1]
        ax.add_collection(PolyCollection(
            [prims.face_verts[i] for i in order],
            closed=True,
            facecolors=[prims.face_colours[i] for i in order],
            edgecolors="none",
            linewidths=0.0,
            zorder=1,
        ))
    if prims.seg_verts:
        order = np.argsort(prims.seg_depths)[::-1]
        ax.add_collection(LineCollection(
            [prims.seg_verts[i] for i in order],
            colors=[prims.seg_colours[i] for i in order],
            linewidths=style.line_width,
            zorder=2,
        ))

    ax.set_aspect("equal")
    ax.set_xlim(-_VIEW_PAD, _VIEW_PAD)
    ax.set_ylim(-_VIEW_PAD, _VIEW_PAD)
    ax.set_xticks([])
    ax.set_yticks([])
    if background is not None:
        ax.set_facecolor(background)
    if title:
        ax.set_title(title)
