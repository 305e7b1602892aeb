from __future__ import annotations

import numpy as np

#: A colour specification accepted throughout imagespace.
#:
#: Can be any of:
#:
#: - A CSS colour name or hex string (e.g. ``"red"``, ``"#4040e0"``).
#: - A single float for grey (``0.0`` = black, ``1.0`` = white).
#: - An RGB tuple or list with values in ``[0, 1]``
#:   (e.g. ``(1.0, 0.0, 0.0)``).
#:
#: See :func:`normalise_colour` for conversion to a normalised RGB tuple.
Colour = str | float | tuple[float, float, float] | list[float]


def normalise_colour(colour: Colour) -> tuple[float, float, float]:
    """Convert a colour specification to a normalised (r, g, b) tuple.

    Args:
        colour: The colour to normalise.

    Returns:
        A tuple of three floats in [0, 1].

    Raises:
        ValueError: If the colour cannot be interpreted.
    """
    if isinstance(colour, (int, float)) and not isinstance(colour, bool):
        f = float(colour)
        if not 0.0 <= f <= 1.0:
            raise ValueError(f"Grey value must be in [0, 1], got {f}")
        return (f, f, f)

    if isinstance(colour, (tuple, list)):
        if len(colour) != 3:
            raise ValueError(
                f"RGB sequence must have 3 elements, got {len(colour)}"
            )
        r, g, b = (float(c) for c in colour)
        for name, val in [("r", r), ("g", g), ("b", b)]:
            if not 0.0 <= val <= 1.0:
                raise ValueError(
                    f"RGB component {name} must be in [0, 1], got {val}"
                )
        return (r, g, b)

    if isinstance(colour, str):
        from matplotlib.colors import to_rgb

        try:
            return to_rgb(colour)
        except ValueError:
            raise ValueError(f"Unrecognised colour name: {colour!r}")

    raise ValueError(f"Cannot interpret colour: {colour!r}")


def shade_colour(
    colour: Colour,
    intensity: float,
    ambient: float = 0.25,
) -> tuple[float, float, float]:
    """Scale *colour* by a Lambert *intensity* with an ambient floor.

    Args:
        colour: Base colour.
        intensity: Diffuse term, clipped to ``[0, 1]``.
        ambient: Fraction of the base colour kept for unlit faces.

    Returns:
        The shaded ``(r, g, b)`` tuple.
    """
    rgb = np.asarray(normalise_colour(colour))
    k = ambient + (1.0 - ambient) * float(np.clip(intensity, 0.0, 1.0))
    r, g, b = np.clip(rgb * k, 0.0, 1.0)
    return (float(r), float(g), float(b))
