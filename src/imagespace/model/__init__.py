"""Core data model for imagespace: settings, cameras, planes, and scene nodes.

Everything is re-exported here so that ``from imagespace.model import
SceneNode`` works regardless of which submodule defines it.
"""

from imagespace.model.camera import (
    CameraRecord,
    look_at_matrix,
    orthographic_matrix,
    perspective_matrix,
)
from imagespace.model.colour import Colour, normalise_colour, shade_colour
from imagespace.model.geometry import (
    Geometry,
    NodeKind,
    SceneNode,
    make_axes,
    make_box,
)
from imagespace.model.render_style import RenderStyle
from imagespace.model.plane import Plane
from imagespace.model.settings import DistortMode, FrustumSettings, ProjectionKind
from imagespace.model.transforms import (
    lerp_matrices,
    scale_matrix,
    transform_directions,
    transform_points,
    translation_matrix,
)

__all__ = [
    "CameraRecord",
    "Colour",
    "DistortMode",
    "FrustumSettings",
    "Geometry",
    "NodeKind",
    "Plane",
    "ProjectionKind",
    "RenderStyle",
    "SceneNode",
    "lerp_matrices",
    "look_at_matrix",
    "make_axes",
    "make_box",
    "normalise_colour",
    "orthographic_matrix",
    "perspective_matrix",
    "scale_matrix",
    "shade_colour",
    "transform_directions",
    "transform_points",
    "translation_matrix",
]
