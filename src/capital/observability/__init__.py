"""Process logging."""

from capital.observability.logging import (
    LoggingConfig,
    LoggingHandle,
    get_active_logging_handle,
    setup_logging,
    shutdown_logging,
)

__all__ = [
    "LoggingConfig",
    "LoggingHandle",
    "get_active_logging_handle",
    "setup_logging",
    "shutdown_logging",
]
