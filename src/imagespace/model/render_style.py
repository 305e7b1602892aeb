"""Visual style for the matplotlib views of real-world and image space."""

from __future__ import annotations

from dataclasses import dataclass

from imagespace.model._util import _field_defaults
from imagespace.model.colour import Colour, normalise_colour

_COLOUR_FIELDS = frozenset({
    "real_world_background",
    "image_space_background",
})

_VECTOR_FIELDS = frozenset({
    "real_world_eye",
    "real_world_target",
    "image_space_eye",
    "image_space_target",
    "light_direction",
})


@dataclass
class RenderStyle:
    """How the two views are drawn.

    The real-world view looks at the camera frustum from outside; the
    image-space view looks at the distorted scene and the image-space
    box.  Both observers use a perspective projection with their own
    field of view.

    Attributes:
        real_world_eye: Observer position for the real-world view.
        real_world_target: Point the real-world observer looks at.
        real_world_fov: Observer field of view (degrees).
        image_space_eye: Observer position for the image-space view.
        image_space_target: Point the image-space observer looks at.
        image_space_fov: Observer field of view (degrees).
        real_world_background: Axes colour of the real-world view.
        image_space_background: Axes colour of the image-space view.
        light_direction: Direction *towards* the light, world space.
        ambient: Brightness of faces turned away from the light, in
            ``[0, 1]``.
        line_width: Width of line nodes (points).
        show_axes: Draw the X/Y/Z axes indicator in both views.
        show_image_space_box: Draw the image-space target volume.
        show_help: Show the key overlay in the interactive viewer.

    Raises:
        ValueError: If a field of view is outside ``(0, 180)``,
            *ambient* is outside ``[0, 1]``, *line_width* is negative,
            or an eye coincides with its target.
    """

    real_world_eye: tuple[float, float, float] = (-10.0, 10.0, 10.0)
    real_world_target: tuple[float, float, float] = (0.0, 0.0, -3.0)
    real_world_fov: float = 30.0
    image_space_eye: tuple[float, float, float] = (-3.0, 3.0, 3.0)
    image_space_target: tuple[float, float, float] = (0.0, 0.0, -0.5)
    image_space_fov: float = 30.0
    real_world_background: Colour = (0.5, 0.5, 0.7)
    image_space_background: Colour = (0.7, 0.5, 0.5)
    light_direction: tuple[float, float, float] = (-1.0, 1.0, 1.0)
    ambient: float = 0.25
    line_width: float = 1.0
    show_axes: bool = False
    show_image_space_box: bool = True
    show_help: bool = False

    def __post_init__(self) -> None:
        for name in _VECTOR_FIELDS:
            value = getattr(self, name)
            if len(value) != 3:
                raise ValueError(f"{name} must have 3 components, got {len(value)}")
            setattr(self, name, tuple(float(v) for v in value))
        for name in ("real_world_fov", "image_space_fov"):
            fov = getattr(self, name)
            if not 0.0 < fov < 180.0:
                raise ValueError(f"{name} must be in (0, 180), got {fov}")
        if not 0.0 <= self.ambient <= 1.0:
            raise ValueError(f"ambient must be between 0.0 and 1.0, got {self.ambient}")
        if self.line_width < 0:
            raise ValueError(f"line_width must be non-negative, got {self.line_width}")
        if self.real_world_eye == self.real_world_target:
            raise ValueError("real_world_eye and real_world_target coincide")
        if self.image_space_eye == self.image_space_target:
            raise ValueError("image_space_eye and image_space_target coincide")

    def to_dict(self) -> dict:
        """Serialise to a JSON-compatible dictionary.

        Fields at their default values are omitted.
        """
        d: dict = {}
        for field_name, default in _field_defaults(type(self)).items():
            val = getattr(self, field_name)
            if field_name in _COLOUR_FIELDS:
                if normalise_colour(val) != normalise_colour(default):
                    d[field_name] = list(normalise_colour(val))
            elif field_name in _VECTOR_FIELDS:
                if tuple(val) != tuple(default):
                    d[field_name] = list(val)
            elif val != default:
                d[field_name] = val
        return d

    @classmethod
    def from_dict(cls, d: dict) -> RenderStyle:
        """Deserialise from a dictionary.

        Missing fields use their defaults; colour lists become tuples.
        """
        kwargs: dict = {}
        for field_name in _field_defaults(cls):
            if field_name in d:
                val = d[field_name]
                if field_name in _COLOUR_FIELDS and isinstance(val, list):
                    val = tuple(val)
                kwargs[field_name] = val
        return cls(**kwargs)
