"""Shared telemetry: logging setup and tracing helpers."""

from scopegate.shared.telemetry.logging import get_logger, setup_logging
from scopegate.shared.telemetry.tracing import traced

__all__ = [
    "get_logger",
    "setup_logging",
    "traced",
]
