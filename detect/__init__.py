"""Detection module."""

from .config import Backend, DetectorConfig
from .detector import BlobDetector
from .utils import binary_view, brightness_histogram, foreground_mask

__all__ = [
    "Backend",
    "BlobDetector",
    "DetectorConfig",
    "binary_view",
    "brightness_histogram",
    "foreground_mask",
]
