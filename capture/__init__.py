"""Capture module."""

from .frame_source import FrameSource, SourceStats
from .opencv_source import OpenCVFrameSource
from .simulated_source import SimulatedFrameSource, SimulatedPlayer

__all__ = [
    "FrameSource",
    "OpenCVFrameSource",
    "SimulatedFrameSource",
    "SimulatedPlayer",
    "SourceStats",
]
