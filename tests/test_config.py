from pathlib import Path

import pytest

from configs.settings import DEFAULT_CONFIG_PATH, AppConfig, CameraConfig, config_from_dict, load_config
from configs.validator import validate_config
from detect import Backend, DetectorConfig
from exceptions import ConfigValidationError, InvalidConfigError


def test_load_default_config() -> None:
    config = load_config(DEFAULT_CONFIG_PATH)

    assert config.camera.width == 640
    assert config.camera.height == 480
    assert config.detector.width == config.camera.width
    assert config.detector.threshold == 200
    assert config.detector.backend is Backend.FLOOD_FILL
    assert config.tracker.mass_ratio_range == (0.7, 1.3)
    assert config.tracker.staleness_timeout_s == 0.5
    assert config.motion.history_capacity == 10
    assert config.motion.velocity_blend == 0.3


def test_minimal_mapping_gets_defaults() -> None:
    config = config_from_dict({"camera": {"width": 320, "height": 240}})

    assert config.camera.fps == 30
    assert (config.detector.width, config.detector.height) == (320, 240)
    assert config.detector.min_mass == 100
    assert config.tracker.max_matching_distance == 50.0
    assert config.motion.jump_rise_px == 15.0


def test_input_mapping_not_modified() -> None:
    data = {"camera": {"width": 320, "height": 240}}
    config_from_dict(data)

    assert data == {"camera": {"width": 320, "height": 240}}


def test_section_overrides() -> None:
    config = config_from_dict(
        {
            "camera": {"width": 320, "height": 240, "source": "clip.mp4"},
            "detector": {"threshold": 180, "backend": "opencv"},
            "tracker": {"mass_ratio_range": [0.5, 2.0]},
        }
    )

    assert config.camera.source == "clip.mp4"
    assert config.detector.threshold == 180
    assert config.detector.backend is Backend.OPENCV
    assert config.tracker.mass_ratio_range == (0.5, 2.0)


def test_load_config_from_yaml(tmp_path: Path) -> None:
    path = tmp_path / "floor.yaml"
    path.write_text("camera:\n  width: 160\n  height: 120\nmotion:\n  walk_speed: 3.5\n")

    config = load_config(path)

    assert config.camera.width == 160
    assert config.motion.walk_speed == 3.5


def test_missing_file(tmp_path: Path) -> None:
    with pytest.raises(InvalidConfigError):
        load_config(tmp_path / "missing.yaml")


def test_malformed_yaml(tmp_path: Path) -> None:
    path = tmp_path / "bad.yaml"
    path.write_text("camera: [width: 1\n")

    with pytest.raises(InvalidConfigError):
        load_config(path)


class TestValidation:
    def test_missing_camera_section(self):
        with pytest.raises(ConfigValidationError) as exc_info:
            validate_config({})
        assert any("camera" in e for e in exc_info.value.validation_errors)

    def test_out_of_range_threshold(self):
        with pytest.raises(ConfigValidationError) as exc_info:
            validate_config({"camera": {"width": 640, "height": 480}, "detector": {"threshold": 300}})
        assert any(e.startswith("detector -> threshold") for e in exc_info.value.validation_errors)

    def test_unknown_backend(self):
        with pytest.raises(ConfigValidationError):
            validate_config({"camera": {"width": 640, "height": 480}, "detector": {"backend": "gpu"}})

    def test_history_capacity_too_small(self):
        with pytest.raises(ConfigValidationError):
            validate_config({"camera": {"width": 640, "height": 480}, "motion": {"history_capacity": 2}})

    def test_not_a_mapping(self):
        with pytest.raises(ConfigValidationError):
            validate_config(["camera"])

    def test_defaults_filled_in_place(self):
        data = {"camera": {"width": 640, "height": 480}}
        validate_config(data)

        assert data["camera"]["fps"] == 30
        assert data["detector"]["backend"] == "flood_fill"
        assert data["tracker"]["mass_ratio_range"] == [0.7, 1.3]


def test_inconsistent_values_rejected_after_schema() -> None:
    # Passes the schema but walk_speed < stationary_speed
    with pytest.raises(InvalidConfigError) as exc_info:
        config_from_dict(
            {"camera": {"width": 640, "height": 480}, "motion": {"stationary_speed": 3.0, "walk_speed": 1.0}}
        )
    assert exc_info.value.field == "walk_speed"


def test_detector_size_must_match_camera() -> None:
    with pytest.raises(InvalidConfigError):
        AppConfig(camera=CameraConfig(width=320, height=240), detector=DetectorConfig(width=640, height=480))
