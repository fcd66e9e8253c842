"""Factory wiring concrete collaborators from configuration."""

from typing import Optional

from video_processing_service.application.orchestrator import PipelineOrchestrator
from video_processing_service.domain.models import TransformOptions
from video_processing_service.infrastructure.config import ServiceConfig
from video_processing_service.infrastructure.media import FFmpegTransformer
from video_processing_service.infrastructure.storage import (
    LocalCleanup,
    S3AssetGateway,
    StagingArea,
)
from video_processing_service.shared.logging import LoggerAdapter, get_logger

logger = get_logger(__name__)


class ServiceFactory:
    """
    Builds the gateway, transformer, staging area and orchestrator for one
    configuration.

    The gateway is created once and shared, so every job in the process uses
    the same S3 client (boto3 clients are thread-safe).
    """

    def __init__(self, config: ServiceConfig):
        self.config = config
        self._logger = get_logger(__name__)
        self._gateway: Optional[S3AssetGateway] = None
        self._staging: Optional[StagingArea] = None

    def create_gateway(self) -> S3AssetGateway:
        if self._gateway is None:
            cfg = self.config
            self._gateway = S3AssetGateway(
                raw_bucket=cfg.raw_bucket,
                processed_bucket=cfg.processed_bucket,
                endpoint=cfg.s3_endpoint,
                access_key=cfg.s3_access_key,
                secret_key=cfg.s3_secret_key,
                region=cfg.s3_region,
                public_base_url=cfg.public_base_url,
            )
            self._logger.info(
                f"Object store: raw={cfg.raw_bucket} processed={cfg.processed_bucket} "
                f"endpoint={cfg.s3_endpoint or 'default'}"
            )
        return self._gateway

    def create_staging(self) -> StagingArea:
        if self._staging is None:
            self._staging = StagingArea(
                raw_dir=self.config.raw_staging_dir,
                processed_dir=self.config.processed_staging_dir,
            )
        return self._staging

    def create_transformer(self) -> FFmpegTransformer:
        return FFmpegTransformer(binary=self.config.ffmpeg_binary)

    def create_orchestrator(self) -> PipelineOrchestrator:
        return PipelineOrchestrator(
            gateway=self.create_gateway(),
            transformer=self.create_transformer(),
            staging=self.create_staging(),
            cleanup=LocalCleanup(),
            logger=LoggerAdapter(get_logger('video_processing_service.pipeline')),
            processed_prefix=self.config.processed_prefix,
            transform_options=TransformOptions(target_height=self.config.target_height),
        )
