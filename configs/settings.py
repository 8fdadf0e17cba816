"""Configuration loading for floortracker."""

from __future__ import annotations

import copy
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Union

import yaml

from configs.validator import validate_config
from detect.config import DetectorConfig
from exceptions import ConfigError, InvalidConfigError
from log_config.logger import get_logger
from player.config import MotionConfig
from track.config import TrackerConfig

logger = get_logger(__name__)

DEFAULT_CONFIG_PATH = Path(__file__).with_name("default.yaml")


@dataclass(frozen=True)
class CameraConfig:
    width: int = 640
    height: int = 480
    fps: int = 30
    source: Union[int, str] = "sim"


@dataclass(frozen=True)
class AppConfig:
    camera: CameraConfig = field(default_factory=CameraConfig)
    detector: DetectorConfig = field(default_factory=DetectorConfig)
    tracker: TrackerConfig = field(default_factory=TrackerConfig)
    motion: MotionConfig = field(default_factory=MotionConfig)

    def __post_init__(self) -> None:
        if (self.detector.width, self.detector.height) != (self.camera.width, self.camera.height):
            raise InvalidConfigError(
                f"Detector size {self.detector.width}x{self.detector.height} does not match "
                f"camera size {self.camera.width}x{self.camera.height}",
                field="detector",
            )


def config_from_dict(data: Dict[str, Any]) -> AppConfig:
    """Validate a configuration mapping and build an AppConfig.

    Args:
        data: Parsed configuration (not modified)

    Returns:
        Validated AppConfig instance

    Raises:
        ConfigError: If the mapping fails validation or holds inconsistent values
    """
    data = copy.deepcopy(data)
    validate_config(data)

    try:
        camera = CameraConfig(**data["camera"])
        detector_data = dict(data["detector"])
        detector = DetectorConfig(width=camera.width, height=camera.height, **detector_data)
        tracker_data = dict(data["tracker"])
        tracker_data["mass_ratio_range"] = tuple(tracker_data["mass_ratio_range"])
        tracker = TrackerConfig(**tracker_data)
        motion = MotionConfig(**data["motion"])
        return AppConfig(camera=camera, detector=detector, tracker=tracker, motion=motion)
    except ConfigError:
        raise
    except (KeyError, TypeError, ValueError) as e:
        logger.error(f"Failed to construct configuration objects: {e}")
        raise InvalidConfigError(f"Failed to construct configuration: {e}")


def load_config(path: Path = DEFAULT_CONFIG_PATH) -> AppConfig:
    """Load and validate configuration from YAML file.

    Args:
        path: Path to configuration file

    Returns:
        Validated AppConfig instance

    Raises:
        ConfigError: If configuration is invalid or cannot be loaded
    """
    path = Path(path)
    logger.info(f"Loading configuration from {path}")
    if not path.exists():
        raise InvalidConfigError(f"Configuration file not found: {path}")

    try:
        data = yaml.safe_load(path.read_text())
    except yaml.YAMLError as e:
        logger.error(f"Failed to parse YAML configuration: {e}")
        raise InvalidConfigError(f"Failed to parse configuration file: {e}")

    config = config_from_dict(data if data is not None else {})
    logger.info(
        f"Configuration loaded: {config.camera.width}x{config.camera.height} "
        f"threshold={config.detector.threshold}±{config.detector.threshold_range} "
        f"backend={config.detector.backend.value}"
    )
    return config


__all__ = ["AppConfig", "CameraConfig", "DEFAULT_CONFIG_PATH", "config_from_dict", "load_config"]
