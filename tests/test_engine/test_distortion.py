"""Tests for DistortionTransform: endpoints, animation, and application."""

import logging

import numpy as np
import pytest

from imagespace.engine import (
    CONVENTION_CORRECTION,
    DistortionTransform,
    FrustumModel,
    ManualClock,
    frustum_corner_points,
)
from imagespace.engine.distortion import flat_normals
from imagespace.model import (
    DistortMode,
    FrustumSettings,
    Geometry,
    NodeKind,
    ProjectionKind,
    SceneNode,
    lerp_matrices,
    make_box,
    transform_points,
)

# Image-space corners in corner order: near at z = 0, far at z = -1.
IMAGE_CORNERS = np.array([
    [-1.0, -1.0, 0.0], [1.0, -1.0, 0.0], [1.0, 1.0, 0.0], [-1.0, 1.0, 0.0],
    [-1.0, -1.0, -1.0], [1.0, -1.0, -1.0], [1.0, 1.0, -1.0], [-1.0, 1.0, -1.0],
])


@pytest.fixture
def clock():
    return ManualClock()


def make_transform(clock, **settings):
    s = FrustumSettings(**settings)
    model = FrustumModel(s)
    return DistortionTransform(
        model, clock, duration=s.transition_duration, distort_mode=s.distort_mode,
    )


def finish(distortion, clock):
    distortion.activate_transition()
    clock.advance(distortion.state.duration)
    return distortion.tick()


class TestEndpoints:
    def test_convention_correction_is_read_only(self):
        with pytest.raises(ValueError):
            CONVENTION_CORRECTION[0, 0] = 2.0

    def test_standard_no_distortion_is_identity(self, clock):
        d = make_transform(clock)
        np.testing.assert_array_equal(d.no_distortion_matrix(), np.eye(4))
        np.testing.assert_array_equal(d.current_distortion, np.eye(4))

    @pytest.mark.parametrize("kind", list(ProjectionKind))
    def test_full_distortion_maps_corners_to_image_box(self, clock, kind):
        d = make_transform(clock, fov_degrees=60.0, near=0.5, far=7.0)
        corners = frustum_corner_points(d.model, kind)
        mapped = transform_points(d.full_distortion_matrix(kind), corners)
        np.testing.assert_allclose(mapped, IMAGE_CORNERS, atol=1e-9)

    @pytest.mark.parametrize("kind", list(ProjectionKind))
    def test_keep_near_constant_fixes_near_plane(self, clock, kind):
        d = make_transform(clock, distort_mode="keep_near_constant", near=2.0, far=9.0)
        corners = frustum_corner_points(d.model, kind)
        near = transform_points(d.no_distortion_matrix(kind), corners[:4])
        np.testing.assert_allclose(near, IMAGE_CORNERS[:4], atol=1e-9)

    def test_keep_near_constant_is_uniform_scale(self, clock):
        d = make_transform(clock, distort_mode="keep_near_constant")
        m = d.no_distortion_matrix(ProjectionKind.ORTHOGRAPHIC)
        s = 1.0 / 1.25
        np.testing.assert_allclose(np.diag(m)[:3], [s, s, s])
        assert m[2, 3] == pytest.approx(1.0 * s)

    def test_unknown_kind_raises(self, clock):
        d = make_transform(clock, distort_mode="keep_near_constant")
        with pytest.raises(ValueError, match="unknown projection kind"):
            d.no_distortion_matrix("fisheye")

    def test_set_distort_mode(self, clock, caplog):
        d = make_transform(clock)
        assert d.set_distort_mode("keep_near_constant") is True
        assert d.distort_mode is DistortMode.KEEP_NEAR_CONSTANT
        with caplog.at_level(logging.WARNING, logger="imagespace"):
            assert d.set_distort_mode("sideways") is False
        assert d.distort_mode is DistortMode.KEEP_NEAR_CONSTANT
        assert "sideways" in caplog.text

    def test_non_positive_duration_raises(self, clock):
        with pytest.raises(ValueError, match="duration"):
            DistortionTransform(FrustumModel(), clock, duration=0.0)


class TestAnimation:
    def test_idle_tick_is_idempotent(self, clock):
        d = make_transform(clock)
        first = d.tick()
        clock.advance(5.0)
        for _ in range(3):
            np.testing.assert_array_equal(d.tick(), first)
        assert not d.is_transitioning()

    def test_idle_tick_at_image_space_is_idempotent(self, clock):
        d = make_transform(clock)
        done = finish(d, clock)
        clock.advance(3.0)
        np.testing.assert_array_equal(d.tick(), done)

    def test_transition_completes_toward_image_space(self, clock):
        d = make_transform(clock)
        d.activate_transition()
        assert d.is_transitioning()
        clock.advance(1.5)
        d.tick()
        assert not d.is_transitioning()
        assert d.toward_image_space
        np.testing.assert_allclose(d.current_distortion, d.full_distortion_matrix(), atol=1e-12)

    def test_transition_completes_back_to_real_world(self, clock):
        d = make_transform(clock, distort_mode="keep_near_constant")
        finish(d, clock)
        d.activate_transition()
        clock.advance(1.0)
        d.tick()
        assert not d.is_transitioning()
        assert not d.toward_image_space
        np.testing.assert_allclose(d.current_distortion, d.no_distortion_matrix(), atol=1e-12)

    def test_midpoint_is_component_wise_lerp(self, clock):
        d = make_transform(clock, transition_duration=2.0)
        d.activate_transition()
        clock.advance(1.0)
        np.testing.assert_allclose(
            d.tick(), lerp_matrices(np.eye(4), d.full_distortion_matrix(), 0.5),
        )

    def test_progress_clamped_before_start(self, clock):
        d = make_transform(clock)
        d.activate_transition(now=5.0)
        np.testing.assert_allclose(d.tick(now=4.0), np.eye(4))
        assert d.state.t == 0.0

    def test_reversal_is_continuous(self, clock):
        d = make_transform(clock)
        d.activate_transition()
        clock.advance(0.5)
        before = d.tick()
        d.activate_transition()
        after = d.current_distortion
        np.testing.assert_allclose(after, before, atol=1e-12)
        assert not d.toward_image_space
        assert d.is_transitioning()

    def test_reversal_returns_in_elapsed_time(self, clock):
        d = make_transform(clock)
        d.activate_transition()
        clock.advance(0.3)
        d.tick()
        d.activate_transition()
        clock.advance(0.1)
        expected = lerp_matrices(np.eye(4), d.full_distortion_matrix(), 0.2)
        np.testing.assert_allclose(d.tick(), expected, atol=1e-12)
        clock.advance(0.25)
        d.tick()
        assert not d.is_transitioning()
        np.testing.assert_allclose(d.current_distortion, np.eye(4), atol=1e-12)

    def test_activation_after_unticked_finish_starts_fresh(self, clock):
        d = make_transform(clock)
        d.activate_transition()
        clock.advance(3.0)
        d.activate_transition()
        assert d.state.start_time == pytest.approx(3.0)
        assert not d.toward_image_space
        clock.advance(0.5)
        expected = lerp_matrices(np.eye(4), d.full_distortion_matrix(), 0.5)
        np.testing.assert_allclose(d.tick(), expected, atol=1e-12)
        clock.advance(0.5)
        d.tick()
        assert not d.is_transitioning()
        np.testing.assert_allclose(d.current_distortion, np.eye(4), atol=1e-12)

    def test_current_distortion_is_a_copy(self, clock):
        d = make_transform(clock)
        m = d.current_distortion
        m[0, 0] = 42.0
        assert d.current_distortion[0, 0] == 1.0

    def test_follows_parameter_changes(self, clock):
        d = make_transform(clock)
        finish(d, clock)
        d.model.set_far(20.0)
        np.testing.assert_allclose(d.tick(), d.full_distortion_matrix())


class TestApplyToObject:
    def test_vertices_land_in_image_box(self, clock):
        d = make_transform(clock)
        finish(d, clock)
        box = make_box(position=(0.0, 0.0, -3.0))
        out = d.apply_to_object(box.clone())
        pts = out.geometry.positions
        assert np.all(np.abs(pts[:, :2]) <= 1.0)
        assert np.all((pts[:, 2] <= 0.0) & (pts[:, 2] >= -1.0))

    def test_transform_reset_and_indices_expanded(self, clock):
        d = make_transform(clock)
        finish(d, clock)
        box = make_box(position=(0.0, 0.0, -3.0))
        box.rotation = np.array([0.2, 0.4, 0.0])
        out = d.apply_to_object(box.clone())
        np.testing.assert_array_equal(out.local_matrix(), np.eye(4))
        assert out.geometry.indices is None
        assert out.geometry.positions.shape == (36, 3)

    def test_normals_recomputed_from_distorted_faces(self, clock):
        d = make_transform(clock)
        finish(d, clock)
        out = d.apply_to_object(make_box(position=(0.5, 0.0, -3.0)))
        triangles = out.geometry.triangles()
        expected, _ = flat_normals(triangles)
        np.testing.assert_allclose(out.geometry.normals[0::3], expected)
        np.testing.assert_allclose(np.linalg.norm(out.geometry.normals, axis=1), 1.0)
        # Projective maps keep orientation here, so faces still point outwards.
        centre = out.geometry.positions.mean(axis=0)
        assert np.all(np.sum(expected * (triangles.mean(axis=1) - centre), axis=1) > 0.0)

    def test_identity_keeps_positions(self, clock):
        d = make_transform(clock)
        lines = SceneNode(
            kind=NodeKind.LINES, geometry=Geometry([[0.0, 0.0, 0.0], [1.0, 2.0, 3.0]]),
            position=(1.0, 0.0, 0.0),
        )
        out = d.apply_to_object(lines)
        np.testing.assert_allclose(out.geometry.positions, [[1.0, 0.0, 0.0], [2.0, 2.0, 3.0]])

    def test_degenerate_faces_logged_and_zeroed(self, clock, caplog):
        d = make_transform(clock)
        mesh = SceneNode(
            name="sliver",
            kind=NodeKind.MESH,
            geometry=Geometry(
                [[0.0, 0.0, -2.0], [1.0, 0.0, -2.0], [2.0, 0.0, -2.0],
                 [0.0, 0.0, -2.0], [1.0, 0.0, -2.0], [0.0, 1.0, -2.0]],
                normals=np.tile([0.0, 0.0, 1.0], (6, 1)),
            ),
        )
        with caplog.at_level(logging.WARNING, logger="imagespace"):
            out = d.apply_to_object(mesh)
        assert "sliver" in caplog.text
        np.testing.assert_array_equal(out.geometry.normals[:3], 0.0)
        np.testing.assert_allclose(out.geometry.normals[3:], np.tile([0.0, 0.0, 1.0], (3, 1)))

    def test_distorted_copy_leaves_original(self, clock):
        d = make_transform(clock)
        finish(d, clock)
        box = make_box(position=(0.0, 0.0, -3.0))
        original = box.geometry.positions.copy()
        copy = d.distorted_copy(box)
        assert copy is not box
        np.testing.assert_array_equal(box.geometry.positions, original)
        np.testing.assert_allclose(box.position, [0.0, 0.0, -3.0])

    def test_distorted_copy_bakes_parent_transform(self, clock):
        d = make_transform(clock)
        parent = SceneNode(position=(0.0, 0.0, -3.0))
        child = parent.add(make_box(0.5))
        copy = d.distorted_copy(child)
        assert copy.parent is None
        np.testing.assert_allclose(copy.geometry.positions.mean(axis=0), [0.0, 0.0, -3.0])


class TestVectors:
    def test_apply_to_vector(self, clock):
        d = make_transform(clock, fov_degrees=90.0, near=1.0, far=10.0)
        finish(d, clock)
        np.testing.assert_allclose(d.apply_to_vector([10.0, 10.0, -10.0]), [1.0, 1.0, -1.0])

    def test_origin_position_identity(self, clock):
        d = make_transform(clock)
        np.testing.assert_allclose(d.image_space_origin_position(), [0.0, 0.0, 0.0])

    def test_origin_at_infinity_for_full_perspective(self, clock):
        d = make_transform(clock)
        finish(d, clock)
        assert d.image_space_origin_position() is None

    def test_origin_finite_for_full_orthographic(self, clock):
        d = make_transform(clock, projection="orthographic")
        finish(d, clock)
        origin = d.image_space_origin_position()
        assert origin is not None
        np.testing.assert_allclose(origin[:2], [0.0, 0.0])
        # Depth -near maps to 0, so the camera (depth 0) sits in front of it.
        assert origin[2] > 0.0
