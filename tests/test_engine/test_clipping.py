"""Tests for clipping planes derived from the frustum corners."""

import numpy as np
import pytest

from imagespace._constants import CLIP_EPSILON
from imagespace.engine import ClippingPlaneDeriver
from imagespace.engine.clipping import PLANE_CORNER_TRIPLES
from imagespace.model import ProjectionKind


def inside_all(planes, point, tol=CLIP_EPSILON):
    return all(p.distance_to_point(np.asarray(point, dtype=float)) <= tol for p in planes)


class TestPlaneOrder:
    def test_six_named_planes(self):
        assert list(PLANE_CORNER_TRIPLES) == ["left", "right", "bottom", "top", "near", "far"]

    def test_derive_returns_six(self, wide_engine):
        assert len(wide_engine.derive_planes()) == 6


class TestRealWorldSidedness:
    def test_axis_midpoint_inside(self, wide_engine):
        planes = wide_engine.derive_planes()
        assert inside_all(planes, [0.0, 0.0, -(1.0 + 10.0) / 2.0])

    @pytest.mark.parametrize("point", [
        [100.0, 0.0, -5.0],
        [-100.0, 0.0, -5.0],
        [0.0, 100.0, -5.0],
        [0.0, -100.0, -5.0],
        [0.0, 0.0, -0.5],
        [0.0, 0.0, -100.0],
        [0.0, 0.0, 100.0],
    ])
    def test_far_outside_points(self, wide_engine, point):
        assert not inside_all(wide_engine.derive_planes(), point)

    def test_near_and_far_plane_positions(self, wide_engine):
        planes = wide_engine.derive_planes()
        near, far = planes[4], planes[5]
        np.testing.assert_allclose(near.normal, [0.0, 0.0, 1.0], atol=1e-12)
        np.testing.assert_allclose(far.normal, [0.0, 0.0, -1.0], atol=1e-12)
        assert near.distance_to_point(np.array([0.0, 0.0, -1.0])) == pytest.approx(-CLIP_EPSILON)
        assert far.distance_to_point(np.array([0.0, 0.0, -10.0])) == pytest.approx(-CLIP_EPSILON)

    def test_side_plane_through_edge(self, wide_engine):
        left = wide_engine.derive_planes()[0]
        # The left plane of a fov-90 frustum is x = z.
        np.testing.assert_allclose(left.normal, [-1.0, 0.0, 1.0] / np.sqrt(2.0), atol=1e-12)

    def test_corners_within_epsilon(self, wide_engine):
        planes = wide_engine.derive_planes()
        for corner in wide_engine.clipping.frustum_corners():
            assert inside_all(planes, corner, tol=1e-9)

    def test_orthographic(self, wide_engine):
        wide_engine.set_projection_kind("orthographic")
        planes = wide_engine.derive_planes()
        assert inside_all(planes, [1.2, -1.2, -9.0])
        assert not inside_all(planes, [1.3, 0.0, -5.0])


class TestImageSpaceSidedness:
    @pytest.mark.parametrize("kind", ["perspective", "orthographic"])
    def test_planes_bound_image_box(self, wide_engine, finish_transition, kind):
        wide_engine.set_projection_kind(kind)
        finish_transition(wide_engine)
        planes = wide_engine.derive_planes()
        assert inside_all(planes, [0.0, 0.0, -0.5])
        assert inside_all(planes, [0.99, -0.99, -0.01])
        for point in ([1.1, 0.0, -0.5], [0.0, -1.1, -0.5], [0.0, 0.0, 0.1], [0.0, 0.0, -1.1]):
            assert not inside_all(planes, point)

    def test_mid_transition_centroid_inside(self, wide_engine, clock):
        wide_engine.activate_transition()
        for _ in range(4):
            clock.advance(0.2)
            wide_engine.tick()
            corners = wide_engine.clipping.frustum_corners()
            planes = wide_engine.derive_planes()
            centroid = corners.mean(axis=0)
            assert all(p.distance_to_point(centroid) < 0.0 for p in planes)

    def test_epsilon_configurable(self, wide_engine):
        deriver = ClippingPlaneDeriver(wide_engine.distortion, epsilon=0.5)
        near = deriver.derive_planes(ProjectionKind.PERSPECTIVE)[4]
        assert near.distance_to_point(np.array([0.0, 0.0, -1.0])) == pytest.approx(-0.5)
