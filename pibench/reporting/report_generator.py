"""Report generation utilities."""

from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Dict, Optional

import pandas as pd

from ..models.results import FinalSummary, RunSnapshot

LOGGER = logging.getLogger(__name__)


class ReportGenerator:
    """Persist benchmark outputs to disk (summary JSON, history CSV)."""

    def __init__(
        self,
        output_dir: str | Path = "output",
        *,
        timestamped: bool = False,
        run_label: Optional[str] = None,
    ) -> None:
        base_dir = Path(output_dir)
        base_dir.mkdir(parents=True, exist_ok=True)
        if timestamped:
            run_label = run_label or datetime.now(timezone.utc).strftime("run_%Y%m%d_%H%M%S")
            self.output_dir = base_dir / run_label
        else:
            self.output_dir = base_dir
        self.output_dir.mkdir(parents=True, exist_ok=True)
        self.base_dir = base_dir
        self.run_label = self.output_dir.name

    # ------------------------------------------------------------------ helpers
    def _write_json(self, payload: Dict[str, object], filename: str) -> Path:
        path = self.output_dir / filename
        with path.open("w", encoding="utf-8") as fh:
            json.dump(payload, fh, indent=2)
        return path

    # ------------------------------------------------------------------ exports
    def export_summary(
        self,
        summary: Optional[FinalSummary] = None,
        *,
        snapshot: Optional[RunSnapshot] = None,
        filename: str = "summary.json",
    ) -> Path:
        """Write the final summary (and/or the last snapshot) as JSON."""
        payload: Dict[str, object] = {"generated_at": datetime.now(timezone.utc).isoformat()}
        if summary is not None:
            payload["summary"] = summary.to_dict()
        if snapshot is not None:
            payload["snapshot"] = snapshot.to_dict()
        return self._write_json(payload, filename)

    def export_history(self, history: pd.DataFrame, filename: str = "history.csv") -> Optional[Path]:
        """Write the throughput history table. Returns None when there is nothing to export."""
        if history is None or history.empty:
            LOGGER.info("No history samples recorded; skipping %s", filename)
            return None
        path = self.output_dir / filename
        history.to_csv(path, index=False)
        return path


__all__ = ["ReportGenerator"]
