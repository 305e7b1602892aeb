"""Static matplotlib renderer: :func:`render_mpl` entry point."""

from __future__ import annotations

import dataclasses
from collections.abc import Sequence
from pathlib import Path
from typing import Any

import matplotlib.pyplot as plt
from matplotlib.axes import Axes
from matplotlib.figure import Figure

from imagespace.engine import FrustumDistortionEngine
from imagespace.model import (
    CameraRecord,
    RenderStyle,
    SceneNode,
    look_at_matrix,
    make_axes,
    normalise_colour,
)
from imagespace.rendering.painter import _draw_scene

_STYLE_FIELDS = frozenset(f.name for f in dataclasses.fields(RenderStyle))

# Near/far of the observer cameras; generous so nothing is culled.
_OBSERVER_NEAR = 0.01
_OBSERVER_FAR = 1000.0

_REAL_WORLD_AXES_LENGTH = 1.0
_IMAGE_SPACE_AXES_LENGTH = 0.5


def _resolve_style(
    style: RenderStyle | None,
    **kwargs: Any,
) -> RenderStyle:
    """Build a :class:`RenderStyle` from an optional base plus overrides.

    Any kwarg whose name matches a ``RenderStyle`` field replaces that
    field's value; ``None`` means "not provided".

    Raises:
        TypeError: If a kwarg name does not match any ``RenderStyle`` field.
    """
    unknown = kwargs.keys() - _STYLE_FIELDS
    if unknown:
        raise TypeError(
            f"Unknown style keyword argument(s): {', '.join(sorted(unknown))}"
        )
    s = style if style is not None else RenderStyle()
    overrides = {k: v for k, v in kwargs.items() if v is not None}
    if overrides:
        s = dataclasses.replace(s, **overrides)
    return s


def _observer_camera(
    eye: Sequence[float], target: Sequence[float], fov_degrees: float,
) -> CameraRecord:
    return CameraRecord.perspective(
        fov_degrees, _OBSERVER_NEAR, _OBSERVER_FAR,
        world=look_at_matrix(eye, target),
    )


def _prepare_objects(
    engine: FrustumDistortionEngine,
    objects: Sequence[SceneNode],
    fit: bool | None,
) -> list[SceneNode]:
    """Return *objects*, or fitted clones of them when fitting is on."""
    if fit is None:
        fit = engine.settings.fit_loaded_object_to_frustum
    if not fit:
        return list(objects)
    clones = [obj.clone() for obj in objects]
    for clone in clones:
        engine.fit_object_to_frustum(clone)
    return clones


def _real_world_nodes(
    engine: FrustumDistortionEngine,
    objects: Sequence[SceneNode],
    style: RenderStyle,
) -> list[SceneNode]:
    nodes = [*objects, engine.visual()]
    if style.show_axes:
        nodes.append(make_axes(_REAL_WORLD_AXES_LENGTH))
    return nodes


def _image_space_nodes(
    engine: FrustumDistortionEngine,
    objects: Sequence[SceneNode],
    style: RenderStyle,
) -> tuple[list[SceneNode], list[SceneNode]]:
    """Distorted copies to clip, and guides to draw unclipped."""
    copies = [engine.distort_copy(obj) for obj in objects]

    origin = engine.image_space_origin_position()
    frustum = engine.distort_copy(engine.visual())
    if origin is None:
        # The apex has gone to infinity; its edges cannot be drawn.
        for child in list(frustum.children):
            if child.role == "tip_edges":
                frustum.remove(child)
    guides = [frustum]
    if style.show_image_space_box:
        guides.append(engine.image_space_box())
    if style.show_axes and origin is not None:
        axes = make_axes(_IMAGE_SPACE_AXES_LENGTH)
        axes.position = origin
        guides.append(axes)
    return copies, guides


def _draw_views(
    ax_real: Axes,
    ax_image: Axes,
    engine: FrustumDistortionEngine,
    objects: Sequence[SceneNode],
    style: RenderStyle,
) -> None:
    """Draw the real-world and image-space views for the engine's current frame."""
    _draw_scene(
        ax_real,
        _observer_camera(style.real_world_eye, style.real_world_target, style.real_world_fov),
        _real_world_nodes(engine, objects, style),
        style,
        background=normalise_colour(style.real_world_background),
        title="Real world",
    )
    copies, guides = _image_space_nodes(engine, objects, style)
    _draw_scene(
        ax_image,
        _observer_camera(style.image_space_eye, style.image_space_target, style.image_space_fov),
        copies,
        style,
        clip_planes=engine.derive_planes(),
        unclipped=guides,
        background=normalise_colour(style.image_space_background),
        title="Image space",
    )


def render_mpl(
    engine: FrustumDistortionEngine,
    objects: Sequence[SceneNode] = (),
    output: str | Path | None = None,
    *,
    style: RenderStyle | None = None,
    fit: bool | None = None,
    figsize: tuple[float, float] = (10.0, 5.0),
    dpi: int = 150,
    show: bool | None = None,
    **style_kwargs: object,
) -> Figure:
    """Render the real-world and image-space views side by side.

    The engine is ticked once, so a transition in flight is drawn at
    its current progress.

    Example usage::

        engine = FrustumDistortionEngine()
        box = make_box(position=(0.0, 0.0, -3.0))

        # Real world only (the default endpoint):
        render_mpl(engine, [box], "real.png")

        # Fully distorted:
        engine.activate_transition()
        engine.tick(engine.distortion.clock.now() + 10.0)
        render_mpl(engine, [box], "image_space.png")

    Args:
        engine: Source of the frustum and the current distortion.
        objects: Scene roots to show.  They are never modified.
        output: Optional file path to save the figure.  The format is
            inferred from the extension.
        style: A :class:`RenderStyle`.  Any of its field names may also
            be passed as a keyword argument.
        fit: Whether to scale and move the objects into the frustum
            first (on clones).  Defaults to the engine's
            ``fit_loaded_object_to_frustum`` setting.
        figsize: Figure size in inches ``(width, height)``.
        dpi: Resolution for raster output formats.
        show: Whether to call ``plt.show()``.  Defaults to ``True``
            when *output* is ``None``.
        **style_kwargs: :class:`RenderStyle` overrides.  Unknown names
            raise :class:`TypeError`.

    Returns:
        The matplotlib :class:`~matplotlib.figure.Figure` object.
    """
    resolved = _resolve_style(style, **style_kwargs)
    shown = _prepare_objects(engine, objects, fit)

    engine.tick()
    fig, (ax_real, ax_image) = plt.subplots(1, 2, figsize=figsize, dpi=dpi)
    _draw_views(ax_real, ax_image, engine, shown, resolved)
    fig.tight_layout()

    if output is not None:
        fig.savefig(str(output), dpi=dpi, bbox_inches="tight")

    if show is None:
        show = output is None

    if show:
        plt.show()
    else:
        plt.close(fig)

    return fig
