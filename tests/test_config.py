"""Unit tests for render and camera configuration."""

import math

import pytest

from src.pathtracer.core.config import (
    MAX_IMAGE_SIZE,
    CameraConfig,
    ConfigurationError,
    RenderConfig,
)


class TestRenderConfigValidation:
    """Tests for RenderConfig.validate()."""

    def test_defaults_are_valid(self):
        RenderConfig().validate()

    def test_zero_sample_count_rejected(self):
        with pytest.raises(ConfigurationError, match="sample_count must be >= 1, got 0"):
            RenderConfig(sample_count=0).validate()

    def test_negative_sample_count_rejected(self):
        with pytest.raises(ConfigurationError, match="sample_count"):
            RenderConfig(sample_count=-3).validate()

    def test_configuration_error_is_value_error(self):
        with pytest.raises(ValueError):
            RenderConfig(sample_count=0).validate()

    @pytest.mark.parametrize(
        "kwargs",
        [
            {"width": 0},
            {"height": 0},
            {"width": MAX_IMAGE_SIZE + 1},
            {"height": MAX_IMAGE_SIZE + 1},
        ],
    )
    def test_dimension_bounds(self, kwargs):
        with pytest.raises(ConfigurationError, match="Image dimensions"):
            RenderConfig(**kwargs).validate()

    def test_max_size_allowed(self):
        RenderConfig(width=MAX_IMAGE_SIZE, height=1).validate()

    @pytest.mark.parametrize("name", ["width", "height", "sample_count"])
    def test_integer_fields_reject_other_types(self, name):
        with pytest.raises(ConfigurationError, match="must be an integer"):
            RenderConfig(**{name: 2.0}).validate()
        with pytest.raises(ConfigurationError, match="must be an integer"):
            RenderConfig(**{name: True}).validate()

    def test_epsilon_must_be_positive(self):
        with pytest.raises(ConfigurationError, match="epsilon"):
            RenderConfig(epsilon=0.0).validate()

    @pytest.mark.parametrize(
        "t_min,t_max",
        [(0.0, 10.0), (-1.0, 10.0), (5.0, 5.0), (5.0, 1.0)],
    )
    def test_t_range(self, t_min, t_max):
        with pytest.raises(ConfigurationError, match="t_min"):
            RenderConfig(t_min=t_min, t_max=t_max).validate()

    def test_non_finite_rejected(self):
        with pytest.raises(ConfigurationError, match="finite"):
            RenderConfig(t_max=math.inf).validate()

    def test_camera_is_validated(self):
        config = RenderConfig(camera=CameraConfig(aspect_ratio=0.0))
        with pytest.raises(ConfigurationError, match="aspect_ratio"):
            config.validate()


class TestCameraConfigValidation:
    """Tests for CameraConfig.validate()."""

    def test_defaults_are_valid(self):
        CameraConfig().validate()

    def test_wrong_component_count(self):
        with pytest.raises(ConfigurationError, match="3 components"):
            CameraConfig(eye=(0.0, 0.0)).validate()

    def test_non_finite_vector(self):
        with pytest.raises(ConfigurationError, match="finite"):
            CameraConfig(middle=(0.0, math.nan, 0.0)).validate()

    def test_zero_up(self):
        with pytest.raises(ConfigurationError, match="up must be a non-zero"):
            CameraConfig(up=(0.0, 0.0, 0.0)).validate()

    def test_zero_right(self):
        with pytest.raises(ConfigurationError, match="right must be a non-zero"):
            CameraConfig(right=(0.0, 0.0, 0.0)).validate()

    def test_parallel_plane_vectors(self):
        with pytest.raises(ConfigurationError, match="parallel"):
            CameraConfig(up=(0.0, 0.0, 1.0), right=(0.0, 0.0, -2.0)).validate()

    def test_eye_on_view_plane(self):
        with pytest.raises(ConfigurationError, match="view plane"):
            CameraConfig(eye=(1.0, 0.0, 0.5), middle=(0.0, 0.0, 0.0)).validate()

    @pytest.mark.parametrize("aspect", [0.0, -1.0, math.inf])
    def test_bad_aspect_ratio(self, aspect):
        with pytest.raises(ConfigurationError, match="aspect_ratio"):
            CameraConfig(aspect_ratio=aspect).validate()


class TestSerialization:
    """Tests for to_dict / from_dict."""

    def test_round_trip(self):
        config = RenderConfig(
            width=64,
            height=32,
            sample_count=8,
            camera=CameraConfig(aspect_ratio=2.0),
        )
        data = config.to_dict()

        assert data["camera"]["eye"] == [0.278, 0.8, 0.2744]
        restored = RenderConfig.from_dict(data)
        assert restored == config

    def test_missing_keys_keep_defaults(self):
        config = RenderConfig.from_dict({"sample_count": 2})
        assert config.sample_count == 2
        assert config.width == RenderConfig().width
        assert config.camera == CameraConfig()

    def test_unknown_render_key(self):
        with pytest.raises(ConfigurationError, match="Unknown render config keys"):
            RenderConfig.from_dict({"samples": 4})

    def test_unknown_camera_key(self):
        with pytest.raises(ConfigurationError, match="Unknown camera config keys"):
            RenderConfig.from_dict({"camera": {"fov": 40.0}})

    def test_from_dict_validates(self):
        with pytest.raises(ConfigurationError, match="sample_count"):
            RenderConfig.from_dict({"sample_count": 0})

    def test_from_dict_non_mapping(self):
        with pytest.raises(ConfigurationError, match="mapping"):
            RenderConfig.from_dict([1])

    def test_from_dict_camera_not_mapping(self):
        with pytest.raises(ConfigurationError, match="camera must be a mapping"):
            RenderConfig.from_dict({"camera": 3})

    @pytest.mark.parametrize(
        "camera,key",
        [
            ({"eye": 5}, "camera.eye"),
            ({"up": "abc"}, "camera.up"),
            ({"middle": [0, "x", 0]}, "camera.middle"),
            ({"right": None}, "camera.right"),
        ],
    )
    def test_from_dict_malformed_camera_vector(self, camera, key):
        with pytest.raises(ConfigurationError, match=key):
            RenderConfig.from_dict({"camera": camera})


class TestNonNumericValues:
    """Values of the wrong type raise ConfigurationError, not TypeError."""

    def test_scalar_vector(self):
        with pytest.raises(ConfigurationError, match="sequence of 3 numbers"):
            CameraConfig(eye=5).validate()

    def test_string_vector(self):
        with pytest.raises(ConfigurationError, match="sequence of 3 numbers"):
            CameraConfig(up="abc").validate()

    def test_vector_with_string_component(self):
        with pytest.raises(ConfigurationError, match="only numbers"):
            CameraConfig(eye=(0.0, "a", 0.0)).validate()

    def test_string_aspect_ratio(self):
        with pytest.raises(ConfigurationError, match="aspect_ratio"):
            CameraConfig(aspect_ratio="wide").validate()

    @pytest.mark.parametrize("name", ["epsilon", "t_min", "t_max"])
    def test_string_scalar(self, name):
        with pytest.raises(ConfigurationError, match=f"{name} must be a number"):
            RenderConfig(**{name: "far"}).validate()

    def test_from_dict_string_t_max(self):
        with pytest.raises(ConfigurationError, match="t_max must be a number"):
            RenderConfig.from_dict({"t_max": "far"})
