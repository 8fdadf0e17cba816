"""Tracking module."""

from .config import TrackerConfig
from .tracker import BlobTracker

__all__ = ["BlobTracker", "TrackerConfig"]
