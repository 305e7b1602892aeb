"""Interactive matplotlib viewer with keyboard control of the frustum."""

from __future__ import annotations

from collections.abc import Sequence

import matplotlib.pyplot as plt
import numpy as np

from imagespace.engine import FrustumDistortionEngine
from imagespace.model import (
    DistortMode,
    FrustumSettings,
    ProjectionKind,
    RenderStyle,
    SceneNode,
)
from imagespace.rendering.static import _draw_views, _prepare_objects, _resolve_style


# ---------------------------------------------------------------------------
# Rotation helpers
# ---------------------------------------------------------------------------

def _rotation_x(angle: float) -> np.ndarray:
    """Rotation matrix about the X axis by *angle* radians."""
    c, s = np.cos(angle), np.sin(angle)
    return np.array([
        [1.0, 0.0, 0.0],
        [0.0,   c,  -s],
        [0.0,   s,   c],
    ])


def _rotation_y(angle: float) -> np.ndarray:
    """Rotation matrix about the Y axis by *angle* radians."""
    c, s = np.cos(angle), np.sin(angle)
    return np.array([
        [ c,  0.0,  s],
        [0.0, 1.0, 0.0],
        [-s,  0.0,  c],
    ])


def _orbit(
    eye: Sequence[float], target: Sequence[float], yaw: float, pitch: float,
) -> tuple[float, float, float]:
    """Swing *eye* around *target*: *yaw* about world Y, then *pitch* about the eye's right axis."""
    target_v = np.asarray(target, dtype=float)
    offset = _rotation_y(yaw) @ (np.asarray(eye, dtype=float) - target_v)
    forward = -offset / np.linalg.norm(offset)
    right = np.cross(forward, [0.0, 1.0, 0.0])
    if np.linalg.norm(right) > 1e-9:
        right /= np.linalg.norm(right)
        # Rodrigues rotation about *right*.
        c, s = np.cos(pitch), np.sin(pitch)
        pitched = (
            offset * c + np.cross(right, offset) * s
            + right * np.dot(right, offset) * (1.0 - c)
        )
        # Stop short of the poles so the up vector stays usable.
        if abs(pitched[1]) < 0.98 * np.linalg.norm(pitched):
            offset = pitched
    x, y, z = target_v + offset
    return (float(x), float(y), float(z))


def _dolly(
    eye: Sequence[float], target: Sequence[float], factor: float,
) -> tuple[float, float, float]:
    """Scale the eye's distance from *target* by *factor*."""
    target_v = np.asarray(target, dtype=float)
    x, y, z = target_v + factor * (np.asarray(eye, dtype=float) - target_v)
    return (float(x), float(y), float(z))


# ---------------------------------------------------------------------------
# Interactive renderer constants
# ---------------------------------------------------------------------------

_FOV_STEP = 5.0  # degrees per key press
_DEPTH_STEP = 0.25  # near/far change per key press
_EXTENT_STEP = 0.1  # orthographic half extent change per key press
_ZOOM_FACTOR = 1.1  # observer distance multiplier per scroll step
_DRAG_SENSITIVITY = 0.01  # radians per pixel
_FRAME_INTERVAL_MS = 30

_HELP_TEXT = """\
t  Space   Transition      p           Projection
m          Distort mode    [  ]        Field of view
n  N       Near plane      f  F        Far plane
,  .       Ortho extent    r           Reset frustum
a          Axes            b           Image-space box
h          Toggle help     Drag        Orbit view
Scroll     Zoom view"""


def _reset_frustum(engine: FrustumDistortionEngine, initial: FrustumSettings) -> None:
    """Restore the frustum parameters and mode from *initial*."""
    engine.set_projection_kind(initial.projection)
    engine.set_fov(initial.fov_degrees)
    engine.set_ortho_half_extent(initial.ortho_half_extent)
    # Order the depth edits so that near < far holds at every step.
    if initial.near < engine.far:
        engine.set_near(initial.near)
        engine.set_far(initial.far)
    else:
        engine.set_far(initial.far)
        engine.set_near(initial.near)
    engine.set_distort_mode(initial.distort_mode)


def _apply_key_action(
    key: str,
    engine: FrustumDistortionEngine,
    style: RenderStyle,
    state: dict,
    *,
    initial: FrustumSettings,
) -> str:
    """Apply a keyboard action, mutating *engine*, *style*, and *state*.

    Parameter edits go through the engine's setters, so rejected values
    (for example a near plane pushed past the far plane) leave the
    frustum unchanged.

    Returns a string indicating the required redraw kind:

    - ``"frame"``: something visible may have changed.
    - ``"none"``: unrecognised key, no redraw needed.
    """
    # -- Transition --
    if key in ("t", " "):
        engine.activate_transition()

    # -- Frustum parameters --
    elif key == "p":
        other = (
            ProjectionKind.ORTHOGRAPHIC
            if engine.projection_kind is ProjectionKind.PERSPECTIVE
            else ProjectionKind.PERSPECTIVE
        )
        engine.set_projection_kind(other)
    elif key == "m":
        other = (
            DistortMode.KEEP_NEAR_CONSTANT
            if engine.distort_mode is DistortMode.STANDARD
            else DistortMode.STANDARD
        )
        engine.set_distort_mode(other)
    elif key == "[":
        engine.set_fov(engine.fov_degrees - _FOV_STEP)
    elif key == "]":
        engine.set_fov(engine.fov_degrees + _FOV_STEP)
    elif key == "n":
        engine.set_near(engine.near - _DEPTH_STEP)
    elif key == "N":
        engine.set_near(engine.near + _DEPTH_STEP)
    elif key == "f":
        engine.set_far(engine.far - _DEPTH_STEP)
    elif key == "F":
        engine.set_far(engine.far + _DEPTH_STEP)
    elif key == ",":
        engine.set_ortho_half_extent(engine.ortho_half_extent - _EXTENT_STEP)
    elif key == ".":
        engine.set_ortho_half_extent(engine.ortho_half_extent + _EXTENT_STEP)
    elif key == "r":
        _reset_frustum(engine, initial)

    # -- Style toggles --
    elif key == "a":
        style.show_axes = not style.show_axes
    elif key == "b":
        style.show_image_space_box = not style.show_image_space_box

    # -- Help overlay --
    elif key == "h":
        state["help_visible"] = not state["help_visible"]

    else:
        return "none"

    return "frame"


def render_mpl_interactive(
    engine: FrustumDistortionEngine,
    objects: Sequence[SceneNode] = (),
    *,
    style: RenderStyle | None = None,
    fit: bool | None = None,
    figsize: tuple[float, float] = (10.0, 5.0),
    dpi: int = 100,
    **style_kwargs: object,
) -> RenderStyle:
    """Interactive viewer for the real-world and image-space views.

    A matplotlib timer ticks the engine every frame, so transitions
    animate.  Controls:

    **Mouse:**

    - **Left-drag** in either view orbits that view's observer.
    - **Scroll** moves the observer closer or further away.

    **Keyboard:**

    - **t** / **Space** start a transition (or reverse one in flight).
    - **p** toggle perspective/orthographic projection.
    - **m** toggle the distort mode.
    - **[** / **]** narrow/widen the field of view.
    - **n** / **N** move the near plane in/out.
    - **f** / **F** move the far plane in/out.
    - **,** / **.** shrink/grow the orthographic cross-section.
    - **r** reset the frustum to the engine's start-up settings.
    - **a** toggle the axes indicator, **b** toggle the image-space box.
    - **h** toggle a help overlay listing all keybindings.

    When the window is closed the updated :class:`RenderStyle` is
    returned so the observer positions can be reused with
    :func:`~imagespace.rendering.static.render_mpl`.

    Args:
        engine: Engine to drive.  Its parameters change as keys are
            pressed.
        objects: Scene roots to show.  They are never modified.
        style: A :class:`RenderStyle`; field names may also be passed
            as keyword arguments.
        fit: Fit clones of the objects into the frustum first.
            Defaults to the engine's ``fit_loaded_object_to_frustum``.
        figsize: Figure size in inches ``(width, height)``.
        dpi: Resolution.
        **style_kwargs: :class:`RenderStyle` overrides.  Unknown names
            raise :class:`TypeError`.

    Returns:
        The :class:`RenderStyle` as left by the session.
    """
    resolved = _resolve_style(style, **style_kwargs)
    shown = _prepare_objects(engine, objects, fit)
    initial = engine.settings

    fig, (ax_real, ax_image) = plt.subplots(1, 2, figsize=figsize, dpi=dpi)
    fig.subplots_adjust(left=0.01, right=0.99, bottom=0.01, top=0.93, wspace=0.02)

    state: dict = {
        "drag_axes": None,
        "drag_last_xy": None,
        "help_visible": resolved.show_help,
        "dirty": True,
    }

    # ---- Redraw helpers ----

    def _add_help_overlay() -> None:
        ax_real.text(
            0.02, 0.98, _HELP_TEXT,
            transform=ax_real.transAxes,
            fontsize=7,
            fontfamily="monospace",
            verticalalignment="top",
            bbox=dict(
                boxstyle="round,pad=0.5",
                facecolor="white",
                alpha=0.85,
                edgecolor="grey",
            ),
            zorder=1000,
        )

    def _redraw() -> None:
        engine.tick()
        _draw_views(ax_real, ax_image, engine, shown, resolved)
        if state["help_visible"]:
            _add_help_overlay()
        fig.canvas.draw_idle()
        state["dirty"] = False

    def on_timer() -> None:
        if state["dirty"] or engine.is_transitioning():
            _redraw()

    # ---- Mouse handlers ----

    def _eye_fields(ax) -> tuple[str, str] | None:
        if ax is ax_real:
            return "real_world_eye", "real_world_target"
        if ax is ax_image:
            return "image_space_eye", "image_space_target"
        return None

    def on_press(event):
        if event.button != 1 or _eye_fields(event.inaxes) is None:
            return
        state["drag_axes"] = event.inaxes
        state["drag_last_xy"] = (event.x, event.y)

    def on_motion(event):
        if state["drag_axes"] is None or state["drag_last_xy"] is None:
            return
        x0, y0 = state["drag_last_xy"]
        state["drag_last_xy"] = (event.x, event.y)
        eye_name, target_name = _eye_fields(state["drag_axes"])
        setattr(resolved, eye_name, _orbit(
            getattr(resolved, eye_name), getattr(resolved, target_name),
            -(event.x - x0) * _DRAG_SENSITIVITY,
            (event.y - y0) * _DRAG_SENSITIVITY,
        ))
        state["dirty"] = True

    def on_release(event):
        state["drag_axes"] = None
        state["drag_last_xy"] = None

    def on_scroll(event):
        fields = _eye_fields(event.inaxes)
        if fields is None:
            return
        eye_name, target_name = fields
        setattr(resolved, eye_name, _dolly(
            getattr(resolved, eye_name), getattr(resolved, target_name),
            _ZOOM_FACTOR ** -event.step,
        ))
        state["dirty"] = True

    # ---- Keyboard handler ----

    def on_key_press(event):
        if event.key is None:
            return
        kind = _apply_key_action(event.key, engine, resolved, state, initial=initial)
        if kind == "frame":
            state["dirty"] = True

    # ---- Connect events ----

    fig.canvas.mpl_connect("button_press_event", on_press)
    fig.canvas.mpl_connect("motion_notify_event", on_motion)
    fig.canvas.mpl_connect("button_release_event", on_release)
    fig.canvas.mpl_connect("scroll_event", on_scroll)
    fig.canvas.mpl_connect("key_press_event", on_key_press)

    # Disconnect matplotlib's default key handler to avoid conflicts
    # (e.g. 'p' for pan tool, 'f' for full screen).
    manager = fig.canvas.manager
    if manager is not None:
        handler_id = getattr(manager, "key_press_handler_id", None)
        if handler_id is not None:
            fig.canvas.mpl_disconnect(handler_id)

    timer = fig.canvas.new_timer(interval=_FRAME_INTERVAL_MS)
    timer.add_callback(on_timer)
    _redraw()
    timer.start()

    plt.show()
    timer.stop()

    resolved.show_help = state["help_visible"]
    return resolved
