"""Tests for FrustumModel parameters, cameras, and change notification."""

import logging
import math

import numpy as np
import pytest

from imagespace.engine import FrustumModel
from imagespace.model import FrustumSettings, ProjectionKind


@pytest.fixture
def model():
    return FrustumModel()


class TestDefaults:
    def test_initial_parameters(self, model):
        assert model.projection_kind is ProjectionKind.PERSPECTIVE
        assert model.fov_degrees == 45.0
        assert (model.near, model.far) == (1.0, 5.0)
        assert model.ortho_half_extent == pytest.approx(1.25)

    def test_slope(self, model):
        assert model.perspective_slope() == pytest.approx(math.tan(math.radians(22.5)))

    def test_half_extent_at(self, model):
        slope = model.perspective_slope()
        assert model.half_extent_at(4.0) == pytest.approx(4.0 * slope)
        assert model.half_extent_at(4.0, ProjectionKind.ORTHOGRAPHIC) == pytest.approx(1.25)

    def test_both_cameras_exist(self, model):
        assert model.camera(ProjectionKind.PERSPECTIVE).kind is ProjectionKind.PERSPECTIVE
        assert model.camera(ProjectionKind.ORTHOGRAPHIC).kind is ProjectionKind.ORTHOGRAPHIC
        assert model.camera() is model.camera(ProjectionKind.PERSPECTIVE)


class TestSetters:
    def test_projection_garbage_rejected(self, model, caplog):
        with caplog.at_level(logging.WARNING, logger="imagespace"):
            assert model.set_projection_kind("garbage") is False
        assert model.projection_kind is ProjectionKind.PERSPECTIVE
        assert "garbage" in caplog.text

    def test_projection_switch(self, model):
        assert model.set_projection_kind("orthographic") is True
        assert model.projection_kind is ProjectionKind.ORTHOGRAPHIC
        assert model.camera().kind is ProjectionKind.ORTHOGRAPHIC

    def test_near_beyond_far_rejected(self, model):
        assert model.set_near(6.0) is False
        assert model.near == 1.0

    def test_near_equal_far_rejected(self, model):
        assert model.set_near(5.0) is False

    def test_far_below_near_rejected(self, model):
        assert model.set_far(0.5) is False
        assert model.far == 5.0

    @pytest.mark.parametrize("value", [0.0, -1.0, "abc", None, float("nan"), True])
    def test_near_invalid_rejected(self, model, value):
        assert model.set_near(value) is False
        assert model.near == 1.0

    def test_numeric_strings_accepted(self, model):
        assert model.set_far("8") is True
        assert model.far == 8.0

    @pytest.mark.parametrize("value", [0.0, 180.0, -10.0, float("inf")])
    def test_fov_invalid_rejected(self, model, value):
        assert model.set_fov(value) is False
        assert model.fov_degrees == 45.0

    def test_fov_updates_slope_and_camera(self, model):
        assert model.set_fov(90.0) is True
        assert model.perspective_slope() == pytest.approx(1.0)
        assert model.camera().projection[1, 1] == pytest.approx(1.0)

    def test_camera_uses_cached_slope(self, model):
        for fov in (45.0, 33.3, 120.0):
            assert model.set_fov(fov)
            slope = model.perspective_slope()
            assert model.camera().projection[1, 1] == 1.0 / slope
            assert model.half_extent_at(model.near) == slope * model.near

    def test_ortho_extent(self, model):
        assert model.set_ortho_half_extent(2.0) is True
        assert model.ortho_half_extent == 2.0
        assert model.set_ortho_half_extent(0.0) is False
        assert model.ortho_half_extent == 2.0

    def test_ortho_side_length(self, model):
        assert model.set_ortho_side_length(3.0) is True
        assert model.ortho_half_extent == pytest.approx(1.5)
        assert model.set_ortho_side_length("wide") is False

    def test_near_less_than_far_after_any_sequence(self, model):
        rng = np.random.default_rng(0)
        for _ in range(200):
            value = float(rng.uniform(-5.0, 15.0))
            if rng.random() < 0.5:
                model.set_near(value)
            else:
                model.set_far(value)
            assert 0.0 < model.near < model.far


class TestListeners:
    def test_accepted_change_notifies(self, model):
        calls = []
        model.add_listener(lambda m, kinds: calls.append(kinds))
        model.set_fov(60.0)
        model.set_ortho_half_extent(2.0)
        model.set_near(2.0)
        assert calls == [
            frozenset({ProjectionKind.PERSPECTIVE}),
            frozenset({ProjectionKind.ORTHOGRAPHIC}),
            frozenset(ProjectionKind),
        ]

    def test_kind_switch_notifies_with_empty_set(self, model):
        calls = []
        model.add_listener(lambda m, kinds: calls.append(kinds))
        model.set_projection_kind("ortho")
        model.set_projection_kind("ortho")
        assert calls == [frozenset()]

    def test_rejected_change_does_not_notify(self, model):
        calls = []
        model.add_listener(lambda m, kinds: calls.append(kinds))
        model.set_near(100.0)
        assert calls == []

    def test_remove_listener(self, model):
        calls = []

        def listener(m, kinds):
            calls.append(kinds)

        model.add_listener(listener)
        model.remove_listener(listener)
        model.remove_listener(listener)
        model.set_fov(50.0)
        assert calls == []


class TestDeterminism:
    def test_same_parameters_same_cameras(self):
        a = FrustumModel(FrustumSettings(fov_degrees=60.0, near=0.5, far=20.0))
        b = FrustumModel()
        b.set_fov(60.0)
        b.set_near(0.5)
        b.set_far(20.0)
        for kind in ProjectionKind:
            np.testing.assert_array_equal(a.camera(kind).projection, b.camera(kind).projection)
