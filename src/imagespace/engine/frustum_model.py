"""Frustum parameters and the two cameras derived from them."""

from __future__ import annotations

import logging
import math
from collections.abc import Callable

from imagespace._constants import MAX_FOV_DEGREES
from imagespace.model import CameraRecord, FrustumSettings, ProjectionKind

logger = logging.getLogger(__name__)

#: Called after every accepted change with the model and the projection
#: kinds whose geometry must be rebuilt (empty for a kind switch).
FrustumListener = Callable[["FrustumModel", frozenset[ProjectionKind]], None]

_BOTH_KINDS = frozenset(ProjectionKind)


def _parse_number(value: object) -> float | None:
    """Interpret *value* as a finite float, or return ``None``."""
    if isinstance(value, bool):
        return None
    try:
        number = float(value)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        return None
    if not math.isfinite(number):
        return None
    return number


class FrustumModel:
    """Owns the frustum parameters and derives cameras from them.

    The parameters are the single source of truth.  Every accepted
    setter call regenerates the affected cameras and then notifies the
    registered listeners, which rebuild any dependent geometry.

    Setters never raise on bad input: they log a warning, leave the
    previous state untouched, and return ``False``.  In particular
    ``near < far`` holds after any sequence of calls, because edits
    that would break it are rejected rather than clamped.

    Args:
        settings: Initial parameters.  Defaults to
            :class:`~imagespace.model.FrustumSettings`.
    """

    def __init__(self, settings: FrustumSettings | None = None) -> None:
        s = settings if settings is not None else FrustumSettings()
        self._kind = s.projection
        self._fov = float(s.fov_degrees)
        self._near = float(s.near)
        self._far = float(s.far)
        self._half_extent = float(s.ortho_half_extent)
        self._listeners: list[FrustumListener] = []
        self._slope = 0.0
        self._cameras: dict[ProjectionKind, CameraRecord] = {}
        self._regenerate(_BOTH_KINDS, notify=False)

    # ---- Read access ----

    @property
    def projection_kind(self) -> ProjectionKind:
        return self._kind

    @property
    def fov_degrees(self) -> float:
        return self._fov

    @property
    def near(self) -> float:
        return self._near

    @property
    def far(self) -> float:
        return self._far

    @property
    def ortho_half_extent(self) -> float:
        return self._half_extent

    def perspective_slope(self) -> float:
        """Return ``tan(fov / 2)``, the half-extent per unit of depth."""
        return self._slope

    def half_extent_at(self, depth: float, kind: ProjectionKind | None = None) -> float:
        """Half side of the square cross-section at distance *depth*.

        Args:
            depth: Distance in front of the camera.
            kind: Projection kind; defaults to the active one.
        """
        kind = self._kind if kind is None else kind
        if kind is ProjectionKind.PERSPECTIVE:
            return self._slope * depth
        return self._half_extent

    def camera(self, kind: ProjectionKind | None = None) -> CameraRecord:
        """The derived camera for *kind* (default: the active kind)."""
        return self._cameras[self._kind if kind is None else kind]

    # ---- Listeners ----

    def add_listener(self, callback: FrustumListener) -> None:
        """Register *callback* to run after each accepted change."""
        self._listeners.append(callback)

    def remove_listener(self, callback: FrustumListener) -> None:
        """Unregister *callback*; unknown callbacks are ignored."""
        if callback in self._listeners:
            self._listeners.remove(callback)

    # ---- Setters ----

    def set_projection_kind(self, kind: object) -> bool:
        """Switch the active projection.

        Accepts a :class:`ProjectionKind` or its string value.

        Returns:
            ``True`` if *kind* was recognised, ``False`` otherwise (the
            active kind is then unchanged).
        """
        parsed = ProjectionKind.parse(kind)
        if parsed is None:
            logger.warning("Unknown projection %r; keeping %s", kind, self._kind.value)
            return False
        if parsed is not self._kind:
            self._kind = parsed
            logger.debug("Projection switched to %s", parsed.value)
            self._notify(frozenset())
        return True

    def set_fov(self, degrees: object) -> bool:
        """Set the perspective field of view (full angle, degrees)."""
        value = _parse_number(degrees)
        if value is None or not 0.0 < value <= MAX_FOV_DEGREES:
            logger.warning(
                "Rejected field of view %r; must be in (0, %s]",
                degrees, MAX_FOV_DEGREES,
            )
            return False
        self._fov = value
        self._regenerate(frozenset({ProjectionKind.PERSPECTIVE}))
        return True

    def set_near(self, value: object) -> bool:
        """Set the near-plane distance; must be positive and below :attr:`far`."""
        near = _parse_number(value)
        if near is None or near <= 0.0 or near >= self._far:
            logger.warning(
                "Rejected near plane %r; must be in (0, %s)", value, self._far,
            )
            return False
        self._near = near
        self._regenerate(_BOTH_KINDS)
        return True

    def set_far(self, value: object) -> bool:
        """Set the far-plane distance; must exceed :attr:`near`."""
        far = _parse_number(value)
        if far is None or far <= self._near:
            logger.warning(
                "Rejected far plane %r; must be greater than %s", value, self._near,
            )
            return False
        self._far = far
        self._regenerate(_BOTH_KINDS)
        return True

    def set_ortho_half_extent(self, value: object) -> bool:
        """Set half the side of the orthographic cross-section."""
        extent = _parse_number(value)
        if extent is None or extent <= 0.0:
            logger.warning("Rejected orthographic extent %r; must be positive", value)
            return False
        self._half_extent = extent
        self._regenerate(frozenset({ProjectionKind.ORTHOGRAPHIC}))
        return True

    def set_ortho_side_length(self, value: object) -> bool:
        """Set the full side of the orthographic cross-section."""
        side = _parse_number(value)
        if side is None:
            logger.warning("Rejected orthographic side length %r", value)
            return False
        return self.set_ortho_half_extent(side / 2.0)

    # ---- Regeneration ----

    def _regenerate(
        self, kinds: frozenset[ProjectionKind], *, notify: bool = True,
    ) -> None:
        if ProjectionKind.PERSPECTIVE in kinds:
            self._slope = math.tan(math.radians(self._fov) / 2.0)
            self._cameras[ProjectionKind.PERSPECTIVE] = CameraRecord.perspective(
                self._fov, self._near, self._far, slope=self._slope,
            )
        if ProjectionKind.ORTHOGRAPHIC in kinds:
            self._cameras[ProjectionKind.ORTHOGRAPHIC] = CameraRecord.orthographic(
                self._half_extent, self._near, self._far,
            )
        if notify:
            self._notify(kinds)

    def _notify(self, kinds: frozenset[ProjectionKind]) -> None:
        for callback in list(self._listeners):
            callback(self, kinds)
