"""Shared test fixtures for imagespace."""

import matplotlib

matplotlib.use("Agg")

import pytest

from imagespace.engine import FrustumDistortionEngine, ManualClock
from imagespace.model import FrustumSettings, make_box


@pytest.fixture
def clock():
    """A manual clock starting at t = 0."""
    return ManualClock()


@pytest.fixture
def engine(clock):
    """An engine with default settings driven by the manual clock."""
    return FrustumDistortionEngine(FrustumSettings(), clock=clock)


@pytest.fixture
def wide_engine(clock):
    """Perspective engine with fov 90, near 1, far 10 (slope 1)."""
    return FrustumDistortionEngine(
        FrustumSettings(fov_degrees=90.0, near=1.0, far=10.0), clock=clock,
    )


@pytest.fixture
def box():
    """A unit cube three units in front of the camera."""
    return make_box(position=(0.0, 0.0, -3.0))


@pytest.fixture
def finish_transition(clock):
    """Callable that runs an engine's transition to completion."""

    def run(engine):
        engine.activate_transition()
        clock.advance(engine.settings.transition_duration + 0.1)
        engine.tick()

    return run
