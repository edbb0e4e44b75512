"""
Execution backends for scenario-grid runs.

This subpackage provides pluggable execution strategies:

CPU Backends
    :class:`SequentialBackend` — Single-threaded execution
    :class:`ThreadBackend` — Thread-based parallelism
    :class:`ProcessBackend` — Process-based parallelism

Utilities
    :func:`make_blocks` — Chunking helper for parallel work distribution
    :func:`make_tasks` — One independent seed sequence per scenario
    :func:`worker_run_chunk` — Top-level worker for process pools
    :func:`is_windows_platform` — Platform detection helper

Protocol
    :class:`ExecutionBackend` — Interface for custom backends
"""

from .base import (
    ExecutionBackend,
    ScenarioTask,
    is_windows_platform,
    make_blocks,
    make_tasks,
    run_tasks,
    worker_run_chunk,
)
from .parallel import ProcessBackend, ThreadBackend
from .sequential import SequentialBackend

__all__ = [
    # Protocol
    "ExecutionBackend",
    "ScenarioTask",
    # CPU Backends
    "SequentialBackend",
    "ThreadBackend",
    "ProcessBackend",
    # Utility Functions
    "make_blocks",
    "make_tasks",
    "run_tasks",
    "worker_run_chunk",
    "is_windows_platform",
]
