"""Worker units: long-lived sampling loops driven by commands.

Each worker runs :func:`run_worker_loop` in its own execution context, either a
thread or a spawned process. The controller talks to a worker only through its
command queue and running flag, and workers talk to the aggregator only by
posting ``(source, inside, total)`` tuples to a shared result queue.
"""

from __future__ import annotations

import logging
import queue
import threading
import time
from dataclasses import dataclass, field
from multiprocessing import get_context
from typing import Any, Callable, Dict, Optional, Union

import numpy as np

from ..core.sampler import sample
from ..models.run_config import WorkerBackend
from ..models.sampling import SampleBatchResult

LOGGER = logging.getLogger(__name__)

Sampler = Callable[[int, np.random.Generator], SampleBatchResult]

_SPAWN = get_context("spawn")


def create_result_queue(backend: WorkerBackend) -> Any:
    """Queue shared by all producers of one run."""
    if WorkerBackend(backend) is WorkerBackend.PROCESS:
        return _SPAWN.Queue()
    return queue.Queue()


def _await_start(commands: Any) -> Optional[int]:
    """Block in the idle state until a start (batch size) or stop (None) arrives."""
    while True:
        message: Dict[str, Any] = commands.get()
        cmd = message.get("cmd")
        if cmd == "start":
            return int(message["batch_size"])
        if cmd == "stop":
            return None
        # update_batch while idle is superseded by the batch size carried by start.


def _apply_commands(commands: Any, running: Any, batch_size: int) -> int:
    """Consume pending commands without blocking; return the batch size for the next batch."""
    while True:
        try:
            message: Dict[str, Any] = commands.get_nowait()
        except queue.Empty:
            return batch_size
        cmd = message.get("cmd")
        if cmd in ("update_batch", "start"):
            batch_size = int(message["batch_size"])
        elif cmd == "stop":
            running.clear()


def run_worker_loop(
    worker_id: int,
    commands: Any,
    results: Any,
    running: Any,
    sampler: Sampler = sample,
) -> int:
    """
    Execute batches until the running flag is cleared.

    The batch size is read once per iteration, so an ``update_batch`` command
    never changes a batch that is already in flight. Every completed batch is
    posted, including one that was in flight when the stop arrived. Returns
    the number of batches completed.
    """
    batch_size = _await_start(commands)
    if batch_size is None:
        return 0

    rng = np.random.default_rng()
    completed = 0
    while running.is_set():
        batch_size = _apply_commands(commands, running, batch_size)
        if not running.is_set():
            break
        result = sampler(batch_size, rng)
        results.put((worker_id, result.inside_count, result.total_count))
        completed += 1
        # Yield between batches so stop/update_batch are observed promptly.
        time.sleep(0)
    LOGGER.debug("Worker %s stopped after %d batches", worker_id, completed)
    return completed


def _thread_entry(worker_id: int, commands: Any, results: Any, running: Any, sampler: Sampler) -> None:
    try:
        run_worker_loop(worker_id, commands, results, running, sampler)
    except Exception:
        LOGGER.exception("Worker %s failed; it will not be respawned", worker_id)


def _process_entry(worker_id: int, commands: Any, results: Any, running: Any, sampler: Sampler) -> None:
    try:
        run_worker_loop(worker_id, commands, results, running, sampler)
    except KeyboardInterrupt:
        # Ctrl+C reaches the whole process group; the parent handles shutdown.
        return


@dataclass
class WorkerHandle:
    """Controller-side handle for one worker unit."""

    worker_id: int
    backend: WorkerBackend
    batch_size: int = 0
    _commands: Any = field(default=None, repr=False)
    _running: Any = field(default=None, repr=False)
    _context: Union[threading.Thread, Any, None] = field(default=None, repr=False)

    # ------------------------------------------------------------------ commands
    def start(self, batch_size: int) -> None:
        self.batch_size = batch_size
        self._running.set()
        self._commands.put({"cmd": "start", "batch_size": batch_size})

    def update_batch(self, batch_size: int) -> None:
        self.batch_size = batch_size
        self._commands.put({"cmd": "update_batch", "batch_size": batch_size})

    def stop(self) -> None:
        """Guarantee no new batch starts; an in-flight batch still completes."""
        self._running.clear()
        self._commands.put({"cmd": "stop"})

    # ------------------------------------------------------------------ context
    @property
    def running(self) -> bool:
        return self._running.is_set() and self.is_alive()

    def is_alive(self) -> bool:
        return self._context is not None and self._context.is_alive()

    @property
    def exitcode(self) -> Optional[int]:
        return getattr(self._context, "exitcode", None)

    def join(self, timeout: Optional[float] = None) -> bool:
        """Wait for the worker to exit. Returns True when it has."""
        if self._context is None:
            return True
        self._context.join(timeout)
        return not self._context.is_alive()

    def terminate(self) -> None:
        """Kill a process worker that did not exit. Threads cannot be killed and are left to finish."""
        if self.backend is WorkerBackend.PROCESS and self._context is not None and self._context.is_alive():
            self._context.terminate()
            self._context.join(1.0)


def spawn_worker(
    worker_id: int,
    backend: WorkerBackend,
    results: Any,
    *,
    sampler: Sampler = sample,
) -> WorkerHandle:
    """Create and launch an idle worker unit."""
    backend = WorkerBackend(backend)
    if backend is WorkerBackend.PROCESS:
        commands = _SPAWN.Queue()
        running = _SPAWN.Event()
        context: Any = _SPAWN.Process(
            target=_process_entry,
            args=(worker_id, commands, results, running, sampler),
            name=f"pibench-worker-{worker_id}",
            daemon=True,
        )
    else:
        commands = queue.Queue()
        running = threading.Event()
        context = threading.Thread(
            target=_thread_entry,
            args=(worker_id, commands, results, running, sampler),
            name=f"pibench-worker-{worker_id}",
            daemon=True,
        )
    context.start()
    return WorkerHandle(
        worker_id=worker_id,
        backend=backend,
        _commands=commands,
        _running=running,
        _context=context,
    )


__all__ = [
    "Sampler",
    "WorkerHandle",
    "create_result_queue",
    "run_worker_loop",
    "spawn_worker",
]
