"""Shared utilities package."""

from video_processing_service.shared.logging import setup_logger, get_logger, LoggerAdapter
from video_processing_service.shared.metrics import MetricsCollector
from video_processing_service.shared.types import PathLike

__all__ = [
    "setup_logger",
    "get_logger",
    "LoggerAdapter",
    "MetricsCollector",
    "PathLike",
]
