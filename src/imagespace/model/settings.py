from __future__ import annotations

import math
from dataclasses import dataclass
from enum import StrEnum

from imagespace._constants import MAX_FOV_DEGREES
from imagespace.model._util import _field_defaults
from imagespace.model.colour import Colour, normalise_colour


class ProjectionKind(StrEnum):
    """Which camera projection the frustum models.

    Attributes:
        PERSPECTIVE: Truncated-pyramid frustum with an apex at the
            camera position.
        ORTHOGRAPHIC: Box-shaped frustum with a square cross-section.
    """

    PERSPECTIVE = "perspective"
    ORTHOGRAPHIC = "orthographic"

    @classmethod
    def parse(cls, value: object) -> ProjectionKind | None:
        """Return the kind named by *value*, or ``None`` if unrecognised.

        Accepts members, their string values (case-insensitive), and the
        ``"ortho"`` shorthand.
        """
        if isinstance(value, cls):
            return value
        if not isinstance(value, str):
            return None
        name = value.strip().lower()
        if name == "ortho":
            return cls.ORTHOGRAPHIC
        try:
            return cls(name)
        except ValueError:
            return None


class DistortMode(StrEnum):
    """Which reference framing the undistorted endpoint uses.

    Attributes:
        STANDARD: The undistorted endpoint is the identity transform.
        KEEP_NEAR_CONSTANT: The undistorted endpoint is scaled and
            shifted so the near plane already has its image-space size
            and position, so only depth changes during the transition.
    """

    STANDARD = "standard"
    KEEP_NEAR_CONSTANT = "keep_near_constant"

    @classmethod
    def parse(cls, value: object) -> DistortMode | None:
        """Return the mode named by *value*, or ``None`` if unrecognised."""
        if isinstance(value, cls):
            return value
        if not isinstance(value, str):
            return None
        try:
            return cls(value.strip().lower())
        except ValueError:
            return None


@dataclass(frozen=True)
class FrustumSettings:
    """Start-up parameters for the frustum engine and its views.

    Attributes:
        projection: Initial projection kind.
        fov_degrees: Perspective field of view (full angle, degrees).
        ortho_side_length: Side of the square orthographic
            cross-section.  The engine works with half of this.
        near: Near-plane distance from the camera.
        far: Far-plane distance from the camera.
        distort_mode: Initial :class:`DistortMode`.
        transition_duration: Length of one transition in seconds.
        fit_loaded_object_to_frustum: Whether scene objects are scaled
            into the frustum when first added.
        clipping_plane_opacity: Alpha of the filled near/far quads.
        side_colour: Colour of the frustum side and tip edges.
        near_colour: Colour of the near-plane outline and quad.
        far_colour: Colour of the far-plane outline and quad.
        object_colour: Default face colour of scene objects.
    """

    projection: ProjectionKind = ProjectionKind.PERSPECTIVE
    fov_degrees: float = 45.0
    ortho_side_length: float = 2.5
    near: float = 1.0
    far: float = 5.0
    distort_mode: DistortMode = DistortMode.STANDARD
    transition_duration: float = 1.0
    fit_loaded_object_to_frustum: bool = True
    clipping_plane_opacity: float = 0.2
    side_colour: Colour = "#a0a0a0"
    near_colour: Colour = "#4040e0"
    far_colour: Colour = "#e04040"
    object_colour: Colour = "#e00000"

    def __post_init__(self) -> None:
        projection = ProjectionKind.parse(self.projection)
        if projection is None:
            raise ValueError(
                f"projection must be one of {[k.value for k in ProjectionKind]}, "
                f"got {self.projection!r}"
            )
        object.__setattr__(self, "projection", projection)
        mode = DistortMode.parse(self.distort_mode)
        if mode is None:
            raise ValueError(
                f"distort_mode must be one of {[m.value for m in DistortMode]}, "
                f"got {self.distort_mode!r}"
            )
        object.__setattr__(self, "distort_mode", mode)

        if not 0 < self.fov_degrees <= MAX_FOV_DEGREES:
            raise ValueError(
                f"fov_degrees must be in (0, {MAX_FOV_DEGREES}], "
                f"got {self.fov_degrees}"
            )
        if self.ortho_side_length <= 0:
            raise ValueError(
                f"ortho_side_length must be positive, got {self.ortho_side_length}"
            )
        if self.near <= 0:
            raise ValueError(f"near must be positive, got {self.near}")
        if not self.far > self.near:
            raise ValueError(
                f"far must be greater than near ({self.near}), got {self.far}"
            )
        if not (self.transition_duration > 0 and math.isfinite(self.transition_duration)):
            raise ValueError(
                "transition_duration must be positive, "
                f"got {self.transition_duration}"
            )
        if not 0.0 <= self.clipping_plane_opacity <= 1.0:
            raise ValueError(
                "clipping_plane_opacity must be in [0, 1], "
                f"got {self.clipping_plane_opacity}"
            )
        for name in ("side_colour", "near_colour", "far_colour", "object_colour"):
            normalise_colour(getattr(self, name))

    @property
    def ortho_half_extent(self) -> float:
        """Half of :attr:`ortho_side_length`."""
        return self.ortho_side_length / 2.0

    def to_dict(self) -> dict:
        """Serialise to a JSON-compatible dictionary.

        Fields at their default values are omitted.  Colours are
        written as ``[r, g, b]`` lists.
        """
        defaults = _field_defaults(type(self))
        d: dict = {}
        for key, default in defaults.items():
            val = getattr(self, key)
            if key.endswith("_colour"):
                if normalise_colour(val) != normalise_colour(default):
                    d[key] = list(normalise_colour(val))
            elif val != default:
                d[key] = val.value if isinstance(val, StrEnum) else val
        return d

    @classmethod
    def from_dict(cls, d: dict) -> FrustumSettings:
        """Deserialise from a dictionary, ignoring unknown keys."""
        kwargs: dict = {}
        for key in _field_defaults(cls):
            if key in d:
                val = d[key]
                if key.endswith("_colour") and isinstance(val, list):
                    val = tuple(val)
                kwargs[key] = val
        return cls(**kwargs)
