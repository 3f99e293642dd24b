"""Recorder status probe."""

from .probe import (
    StatusProbe,
    StatusProbeError,
    LogFileNotFoundError,
    ProcessIdNotFoundError,
    find_latest_log,
    read_last_line,
    extract_process_id,
    is_process_alive,
)

__all__ = [
    "StatusProbe",
    "StatusProbeError",
    "LogFileNotFoundError",
    "ProcessIdNotFoundError",
    "find_latest_log",
    "read_last_line",
    "extract_process_id",
    "is_process_alive",
]
