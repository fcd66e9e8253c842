"""Storage infrastructure."""

from video_processing_service.infrastructure.storage.cleanup import LocalCleanup
from video_processing_service.infrastructure.storage.s3_gateway import S3AssetGateway
from video_processing_service.infrastructure.storage.staging import StagingArea

__all__ = ['LocalCleanup', 'S3AssetGateway', 'StagingArea']
