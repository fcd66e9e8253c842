"""Configuration package."""

from video_processing_service.infrastructure.config.loader import ConfigLoader, ServiceConfig

__all__ = ["ConfigLoader", "ServiceConfig"]
