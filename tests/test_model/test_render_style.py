"""Tests for RenderStyle validation and serialisation."""

import pytest

from imagespace.model import RenderStyle


class TestRenderStyle:
    def test_vectors_become_float_tuples(self):
        style = RenderStyle(real_world_eye=[1, 2, 3])
        assert style.real_world_eye == (1.0, 2.0, 3.0)

    @pytest.mark.parametrize("kwargs, match", [
        ({"real_world_fov": 0.0}, "real_world_fov"),
        ({"image_space_fov": 180.0}, "image_space_fov"),
        ({"ambient": 1.5}, "ambient"),
        ({"line_width": -1.0}, "line_width"),
        ({"light_direction": (1.0, 0.0)}, "3 components"),
        ({"image_space_eye": (0.0, 0.0, -0.5)}, "coincide"),
    ])
    def test_invalid_values_raise(self, kwargs, match):
        with pytest.raises(ValueError, match=match):
            RenderStyle(**kwargs)

    def test_to_dict_omits_defaults(self):
        assert RenderStyle().to_dict() == {}

    def test_to_dict_and_back(self):
        style = RenderStyle(
            show_axes=True,
            real_world_eye=(1.0, 2.0, 3.0),
            image_space_background="black",
        )
        d = style.to_dict()
        assert d == {
            "real_world_eye": [1.0, 2.0, 3.0],
            "image_space_background": [0.0, 0.0, 0.0],
            "show_axes": True,
        }
        restored = RenderStyle.from_dict(d)
        assert restored.show_axes is True
        assert restored.real_world_eye == (1.0, 2.0, 3.0)
        assert restored.image_space_background == (0.0, 0.0, 0.0)
