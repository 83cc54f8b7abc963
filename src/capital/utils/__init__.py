"""Utility exports for filesystem and concurrency helpers."""

from capital.utils.concurrency import FlightState, JoinResult, SingleFlight, join_all
from capital.utils.fs import archive_file, atomic_write, next_backup_path

__all__ = [
    "FlightState",
    "JoinResult",
    "SingleFlight",
    "archive_file",
    "atomic_write",
    "join_all",
    "next_backup_path",
]
