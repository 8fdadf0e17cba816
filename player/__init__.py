"""Player motion classification."""

from .config import MotionConfig
from .motion import MotionClassifier, MotionUpdate, PlayerMotion, turning_angle_sum

__all__ = [
    "MotionClassifier",
    "MotionConfig",
    "MotionUpdate",
    "PlayerMotion",
    "turning_angle_sum",
]
