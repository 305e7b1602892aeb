"""Wall-clock source and state for the image-space transition."""

from __future__ import annotations

import time
from collections.abc import Callable
from dataclasses import dataclass


class TransitionClock:
    """Thin wrapper around a monotonic time source (seconds).

    Args:
        time_source: Zero-argument callable returning the current time.
    """

    def __init__(self, time_source: Callable[[], float] = time.monotonic) -> None:
        self._time_source = time_source

    def now(self) -> float:
        """Current time in seconds."""
        return float(self._time_source())

    def elapsed_fraction(
        self, start: float, duration: float, now: float | None = None,
    ) -> float:
        """Fraction of *duration* elapsed since *start*.

        The value is not clamped: it is negative before *start* and
        exceeds one once the duration has passed.
        """
        if now is None:
            now = self.now()
        return (now - start) / duration


class ManualClock(TransitionClock):
    """A clock that only moves when told to.

    Used for deterministic rendering of a given transition instant and
    for tests.
    """

    def __init__(self, start: float = 0.0) -> None:
        self._time = float(start)
        super().__init__(lambda: self._time)

    def advance(self, seconds: float) -> float:
        """Move the clock forward by *seconds* and return the new time."""
        self._time += float(seconds)
        return self._time

    def set(self, value: float) -> None:
        """Jump to an absolute time."""
        self._time = float(value)


@dataclass
class TransitionState:
    """Progress of the real-world / image-space transition.

    Attributes:
        is_transitioning: Whether an animation is in flight.
        toward_image_space: Direction of the current (or last) transition.
        t: Progress of the current transition in ``[0, 1]``.
        start_time: Clock time the current transition started.
        duration: Seconds one full transition takes.
    """

    is_transitioning: bool = False
    toward_image_space: bool = False
    t: float = 0.0
    start_time: float = 0.0
    duration: float = 1.0

    @property
    def blend(self) -> float:
        """Weight of the full distortion in ``[0, 1]``.

        Equal to :attr:`t` when heading to image space and ``1 - t``
        when heading back.  When idle this is 1 or 0.
        """
        if not self.is_transitioning:
            return 1.0 if self.toward_image_space else 0.0
        return self.t if self.toward_image_space else 1.0 - self.t
