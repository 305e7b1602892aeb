"""Frustum distortion engine: model, geometry, transition, and clipping."""

from imagespace.engine.clipping import ClippingPlaneDeriver
from imagespace.engine.distortion import CONVENTION_CORRECTION, DistortionTransform
from imagespace.engine.engine import FrustumDistortionEngine
from imagespace.engine.frustum_geometry import (
    FrustumGeometryBuilder,
    build_image_space_box,
    build_plane,
    frustum_corner_points,
)
from imagespace.engine.frustum_model import FrustumModel
from imagespace.engine.transition import ManualClock, TransitionClock, TransitionState

__all__ = [
    "CONVENTION_CORRECTION",
    "ClippingPlaneDeriver",
    "DistortionTransform",
    "FrustumDistortionEngine",
    "FrustumGeometryBuilder",
    "FrustumModel",
    "ManualClock",
    "TransitionClock",
    "TransitionState",
    "build_image_space_box",
    "build_plane",
    "frustum_corner_points",
]
