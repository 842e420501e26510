"""Exports of run summaries, history tables and live status files."""

from .report_generator import ReportGenerator
from .status_writer import StatusFileWriter

__all__ = ["ReportGenerator", "StatusFileWriter"]
