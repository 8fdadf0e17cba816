"""Custom exception classes for floortracker."""

from __future__ import annotations

from typing import Optional


class FloorTrackerError(Exception):
    """Base exception for all floortracker errors."""

    pass


class ConfigError(FloorTrackerError):
    """Base exception for configuration errors."""

    pass


class InvalidConfigError(ConfigError):
    """Raised when a configuration value or file is invalid."""

    def __init__(self, message: str, field: Optional[str] = None):
        self.field = field
        super().__init__(message)


class ConfigValidationError(ConfigError):
    """Raised when configuration fails schema validation."""

    def __init__(self, message: str, validation_errors: Optional[list] = None):
        self.validation_errors = validation_errors or []
        super().__init__(message)


class FrameSourceError(FloorTrackerError):
    """Base exception for frame source errors."""

    def __init__(self, message: str, source: Optional[str] = None):
        self.source = source
        super().__init__(message)


class FrameSourceConnectionError(FrameSourceError):
    """Raised when a frame source cannot be opened."""

    pass


class DetectionError(FloorTrackerError):
    """Raised when a buffer handed to the detector is malformed."""

    pass


class PipelineError(FloorTrackerError):
    """Base exception for tick pipeline errors."""

    pass


class TickOverlapError(PipelineError):
    """Raised when a tick starts before the previous one has completed."""

    pass
