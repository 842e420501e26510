"""Input validation utilities."""

from __future__ import annotations

from typing import Any


class ConfigurationError(ValueError):
    """Raised when a run configuration or live update is rejected."""


def validate_batch_size(value: Any) -> int:
    """Ensure a batch size is a positive integer."""
    if isinstance(value, bool) or not isinstance(value, int):
        raise ConfigurationError(f"batch_size must be an integer, got {value!r}")
    if value <= 0:
        raise ConfigurationError(f"batch_size must be positive, got {value}")
    return value


def validate_non_negative(name: str, value: Any) -> int:
    """Ensure a count-like setting is a non-negative integer."""
    if isinstance(value, bool) or not isinstance(value, int):
        raise ConfigurationError(f"{name} must be an integer, got {value!r}")
    if value < 0:
        raise ConfigurationError(f"{name} must be non-negative, got {value}")
    return value


__all__ = ["ConfigurationError", "validate_batch_size", "validate_non_negative"]
