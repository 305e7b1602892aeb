"""imagespace: watch a camera frustum distort into image space.

The engine models a perspective or orthographic camera frustum, builds
its line and plane geometry, and animates a distortion that carries the
scene from real-world coordinates into the camera's normalised image
space, with clipping planes that follow the frustum throughout.

Example usage::

    from imagespace import FrustumDistortionEngine, make_box, render_mpl

    engine = FrustumDistortionEngine()
    box = make_box(position=(0.0, 0.0, -3.0))
    engine.activate_transition()
    render_mpl(engine, [box], "frame.png")
"""

from imagespace.config import SettingsSet, load_settings, save_settings
from imagespace.engine import (
    CONVENTION_CORRECTION,
    ClippingPlaneDeriver,
    DistortionTransform,
    FrustumDistortionEngine,
    FrustumGeometryBuilder,
    FrustumModel,
    ManualClock,
    TransitionClock,
    TransitionState,
    build_image_space_box,
    build_plane,
    frustum_corner_points,
)
from imagespace.logging_config import setup_logging
from imagespace.model import (
    CameraRecord,
    Colour,
    DistortMode,
    FrustumSettings,
    Geometry,
    NodeKind,
    Plane,
    ProjectionKind,
    RenderStyle,
    SceneNode,
    make_axes,
    make_box,
    normalise_colour,
)
from imagespace.rendering import render_mpl, render_mpl_interactive

__all__ = [
    "CONVENTION_CORRECTION",
    "CameraRecord",
    "ClippingPlaneDeriver",
    "Colour",
    "DistortMode",
    "DistortionTransform",
    "FrustumDistortionEngine",
    "FrustumGeometryBuilder",
    "FrustumModel",
    "FrustumSettings",
    "Geometry",
    "ManualClock",
    "NodeKind",
    "Plane",
    "ProjectionKind",
    "RenderStyle",
    "SceneNode",
    "SettingsSet",
    "TransitionClock",
    "TransitionState",
    "build_image_space_box",
    "build_plane",
    "frustum_corner_points",
    "load_settings",
    "make_axes",
    "make_box",
    "normalise_colour",
    "render_mpl",
    "render_mpl_interactive",
    "save_settings",
    "setup_logging",
]
