"""Typer-based command line interface for benchmark runs."""

from __future__ import annotations

import logging
import time
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from .. import config as settings
from ..core.sampler import sample as sample_batch
from ..core.statistics import derive_stats, summarise_run
from ..core.validator import ConfigurationError
from ..models.results import FinalSummary, RunSnapshot
from ..reporting import ReportGenerator, StatusFileWriter
from ..runtime.controller import RunController
from ..utils.formatting import format_batch_size, format_count, format_elapsed, format_optional

app = typer.Typer(help="Parallel Monte Carlo estimation of pi")
console = Console()


def _configure_logging(level: str) -> None:
    numeric = logging.getLevelName(level.upper())
    if not isinstance(numeric, int):
        raise typer.BadParameter(f"Unknown log level: {level}")
    logging.basicConfig(
        level=numeric,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, show_path=False)],
    )
    logging.getLogger("pibench").setLevel(numeric)


def _status_line(snapshot: RunSnapshot) -> str:
    """One-line live status: pi, error, accuracy, counts, elapsed, points/s."""
    pi_text = format_optional(snapshot.pi_estimate, ".8f", missing="-.--------")
    error_text = format_optional(snapshot.error_value, ".2e", missing="-")
    accuracy_text = format_optional(snapshot.accuracy_percent, ".5f", missing="0.00000")
    return (
        f"[bold]π[/bold] {pi_text}  (err {error_text})  "
        f"acc {accuracy_text}%  "
        f"points {format_count(snapshot.total_points)}  "
        f"inside {format_count(snapshot.inside_points)}  "
        f"{format_elapsed(snapshot.elapsed_ms)}  "
        f"{format_count(snapshot.throughput)} pts/s  "
        f"threads {snapshot.active_worker_count}"
    )


def _summary_table(summary: FinalSummary) -> Table:
    table = Table(title="Benchmark Results", show_lines=False)
    table.add_column("Metric")
    table.add_column("Value", justify="right")
    table.add_row("Points / second", format_count(summary.throughput))
    table.add_row("Total points", format_count(summary.total_points))
    table.add_row("Accuracy", f"{format_optional(summary.accuracy_percent, '.5f')}%")
    table.add_row("π estimate", format_optional(summary.pi_estimate, ".8f"))
    table.add_row("Time", f"{summary.elapsed_seconds:.2f}s")
    table.add_row("Threads", str(summary.worker_count))
    return table


@app.command()
def run(
    batch_size: int = typer.Option(settings.DEFAULT_BATCH_SIZE, help="Points per worker batch"),
    workers: int = typer.Option(settings.DEFAULT_WORKER_COUNT, help="Number of worker units"),
    duration: int = typer.Option(
        settings.DEFAULT_DURATION_SECONDS, help="Run length in seconds (0 runs until Ctrl+C)"
    ),
    backend: str = typer.Option(
        settings.DEFAULT_BACKEND, case_sensitive=False, help="Worker backend: thread | process"
    ),
    foreground_batch: int = typer.Option(
        0, help=f"Foreground points per frame (0 disables; typical: {settings.FOREGROUND_BATCH_SIZE})"
    ),
    count_foreground: bool = typer.Option(
        True,
        "--count-foreground/--no-count-foreground",
        help="Count foreground samples toward the official totals.",
    ),
    status_file: Optional[Path] = typer.Option(None, help="JSON file refreshed with the live snapshot"),
    output_dir: Optional[Path] = typer.Option(
        None, help=f"Directory for summary.json and history.csv (e.g. {settings.OUTPUT_ROOT})"
    ),
    log_level: str = typer.Option("WARNING", help="Logging level"),
    quiet: bool = typer.Option(False, help="Suppress live status lines"),
) -> None:
    """Run the parallel sampler and report live statistics."""
    _configure_logging(log_level)

    controller = RunController()
    writer = StatusFileWriter(status_file) if status_file else None
    if writer is not None:
        controller.add_listener(writer)
        controller.add_finish_listener(writer.write_summary)

    last_print = [0.0]

    def _print_status(snapshot: RunSnapshot) -> None:
        now = time.monotonic()
        if now - last_print[0] < settings.THROUGHPUT_INTERVAL:
            return
        last_print[0] = now
        console.print(_status_line(snapshot))

    if not quiet:
        controller.add_listener(_print_status)

    try:
        controller.start(
            batch_size=batch_size,
            worker_count=workers,
            duration_seconds=duration,
            backend=backend,
            foreground_batch_size=foreground_batch,
            count_foreground=count_foreground,
        )
    except ConfigurationError as exc:
        raise typer.BadParameter(str(exc)) from exc

    console.print(
        f"[bold]Running[/bold] {workers} {backend} worker(s), batch {format_batch_size(batch_size)}, "
        + (f"{duration}s" if duration else "until Ctrl+C")
    )
    try:
        while not controller.wait(0.5):
            pass
    except KeyboardInterrupt:
        console.print("[yellow]Stopping...[/yellow]")
        controller.stop()

    snapshot = controller.get_snapshot()
    summary = controller.final_summary or summarise_run(
        controller.aggregator.snapshot(),
        elapsed_seconds=snapshot.elapsed_ms / 1000.0,
        worker_count=workers,
    )
    if writer is not None:
        writer.write_snapshot(snapshot, force=True)
        writer.write_summary(summary)

    console.print(_summary_table(summary))

    if output_dir is not None:
        reporter = ReportGenerator(output_dir)
        summary_path = reporter.export_summary(summary, snapshot=snapshot)
        console.print(f"Summary exported to: {summary_path}")
        history_path = reporter.export_history(controller.history_frame())
        if history_path is not None:
            console.print(f"History exported to: {history_path}")


@app.command()
def sample(
    points: int = typer.Argument(1_000_000, help="Number of points to draw"),
) -> None:
    """Draw a single batch in-process and print the estimate."""
    if points < 0:
        raise typer.BadParameter("points must be non-negative")
    started = time.perf_counter()
    result = sample_batch(points)
    elapsed = time.perf_counter() - started
    stats = derive_stats(result.inside_count, result.total_count)
    console.print(
        f"inside {format_count(result.inside_count)} / {format_count(result.total_count)}  "
        f"π {format_optional(stats.pi_estimate, '.8f')}  "
        f"acc {format_optional(stats.accuracy_percent, '.5f')}%  "
        f"in {elapsed:.3f}s"
    )


def main() -> None:
    """Entry point for CLI execution."""
    app()


if __name__ == "__main__":
    main()
