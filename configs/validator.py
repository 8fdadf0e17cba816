"""Configuration validation using JSON Schema."""

from __future__ import annotations

from typing import Any, Dict

import jsonschema
from jsonschema import Draft7Validator, validators

from exceptions import ConfigValidationError
from log_config.logger import get_logger

logger = get_logger(__name__)

# JSON Schema for default.yaml configuration
CONFIG_SCHEMA = {
    "$schema": "http://json-schema.org/draft-07/schema#",
    "type": "object",
    "required": ["camera"],
    "properties": {
        "camera": {
            "type": "object",
            "required": ["width", "height"],
            "properties": {
                "width": {"type": "integer", "minimum": 16, "maximum": 3840},
                "height": {"type": "integer", "minimum": 16, "maximum": 2160},
                "fps": {"type": "integer", "minimum": 1, "maximum": 240, "default": 30},
                "source": {"type": ["string", "integer"], "default": "sim"},
            },
        },
        "detector": {
            "type": "object",
            "properties": {
                "threshold": {"type": "integer", "minimum": 0, "maximum": 255, "default": 200},
                "threshold_range": {"type": "integer", "minimum": 0, "maximum": 255, "default": 20},
                "min_mass": {"type": "integer", "minimum": 1, "default": 100},
                "max_mass": {"type": "integer", "minimum": 1, "default": 5000},
                "channel": {"type": "integer", "minimum": 0, "maximum": 3, "default": 2},
                "backend": {"type": "string", "enum": ["flood_fill", "opencv"], "default": "flood_fill"},
                "runtime_budget_ms": {"type": "number", "minimum": 0.1, "maximum": 1000, "default": 30.0},
            },
        },
        "tracker": {
            "type": "object",
            "properties": {
                "max_matching_distance": {"type": "number", "exclusiveMinimum": 0, "default": 50.0},
                "mass_ratio_range": {
                    "type": "array",
                    "items": {"type": "number", "exclusiveMinimum": 0},
                    "minItems": 2,
                    "maxItems": 2,
                    "default": [0.7, 1.3],
                },
                "max_area_ratio_diff": {"type": "number", "minimum": 0, "maximum": 1, "default": 0.2},
                "staleness_timeout_s": {"type": "number", "minimum": 0, "maximum": 60, "default": 0.5},
            },
        },
        "motion": {
            "type": "object",
            "properties": {
                "stationary_speed": {"type": "number", "minimum": 0, "default": 0.5},
                "walk_speed": {"type": "number", "minimum": 0, "default": 2.0},
                "jump_rise_px": {"type": "number", "exclusiveMinimum": 0, "default": 15.0},
                "history_capacity": {"type": "integer", "minimum": 3, "maximum": 1000, "default": 10},
                "velocity_blend": {"type": "number", "exclusiveMinimum": 0, "maximum": 1, "default": 0.3},
                "erratic_acceleration": {"type": "number", "minimum": 0, "default": 10.0},
                "collision_radius_px": {"type": "number", "minimum": 0, "default": 30.0},
            },
        },
    },
}


def extend_with_default(validator_class):
    """Extend JSON Schema validator to set default values."""
    validate_properties = validator_class.VALIDATORS["properties"]

    def set_defaults(validator, properties, instance, schema):
        for prop, subschema in properties.items():
            if "default" in subschema and isinstance(instance, dict):
                instance.setdefault(prop, subschema["default"])

        for error in validate_properties(validator, properties, instance, schema):
            yield error

    return validators.extend(validator_class, {"properties": set_defaults})


DefaultValidatingValidator = extend_with_default(Draft7Validator)


def validate_config(config: Dict[str, Any]) -> None:
    """Validate configuration against JSON Schema, filling in defaults.

    Args:
        config: Configuration dictionary (modified in place with defaults)

    Raises:
        ConfigValidationError: If configuration is invalid
    """
    if not isinstance(config, dict):
        raise ConfigValidationError(
            f"Configuration must be a mapping, got {type(config).__name__}",
            validation_errors=["root: not a mapping"],
        )
    # Optional sections still need their defaults
    for section in ("detector", "tracker", "motion"):
        config.setdefault(section, {})

    try:
        validator = DefaultValidatingValidator(CONFIG_SCHEMA)
        errors = list(validator.iter_errors(config))

        if errors:
            error_messages = []
            for error in errors:
                path = " -> ".join(str(p) for p in error.path) if error.path else "root"
                error_messages.append(f"{path}: {error.message}")

            logger.error(f"Configuration validation failed with {len(errors)} errors")
            for msg in error_messages:
                logger.error(f"  - {msg}")

            raise ConfigValidationError(
                f"Configuration validation failed with {len(errors)} error(s). See logs for details.",
                validation_errors=error_messages,
            )

        logger.debug("Configuration validation passed")

    except jsonschema.exceptions.SchemaError as e:
        logger.error(f"Invalid schema: {e}")
        raise ConfigValidationError(f"Invalid schema definition: {e}")


__all__ = ["validate_config", "CONFIG_SCHEMA"]
