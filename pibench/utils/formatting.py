"""Formatting helpers shared by console output."""

from __future__ import annotations

from typing import Optional


def format_elapsed(milliseconds: float) -> str:
    """Render a duration as HH:MM:SS; negative values clamp to zero."""
    if milliseconds < 0:
        return "00:00:00"
    seconds = int(milliseconds // 1000)
    minutes, ss = divmod(seconds, 60)
    hh, mm = divmod(minutes, 60)
    return f"{hh:02d}:{mm:02d}:{ss:02d}"


def format_count(value: float) -> str:
    """Group thousands with dots, e.g. 1234567 -> '1.234.567'."""
    return f"{int(value):,}".replace(",", ".")


def format_batch_size(value: int) -> str:
    """Compact batch size label: 1.5M, 10k, 500."""
    if value >= 1_000_000:
        return f"{value / 1_000_000:.1f}M"
    if value >= 1000:
        return f"{value / 1000:.0f}k"
    return str(value)


def format_optional(value: Optional[float], spec: str, missing: str = "n/a") -> str:
    return missing if value is None else format(value, spec)


__all__ = ["format_elapsed", "format_count", "format_batch_size", "format_optional"]
