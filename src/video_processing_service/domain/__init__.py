"""Domain layer package."""

from video_processing_service.domain.models import (
    DEFAULT_PROCESSED_PREFIX,
    DEFAULT_TARGET_HEIGHT,
    CleanupReport,
    Job,
    JobState,
    PipelineResult,
    PipelineStage,
    PublishResult,
    StagingRole,
    TransformOptions,
    TransformResult,
    derive_processed_id,
    local_file_name,
)
from video_processing_service.domain.exceptions import (
    DomainException,
    BadTriggerError,
    StorageError,
    ObjectNotFoundError,
    TransferError,
    PublicAccessError,
    TransformError,
    ConfigurationError,
    InvalidStateTransitionError,
)
from video_processing_service.domain.protocols import (
    IAssetGateway,
    ITransformTask,
    ITransformer,
    IStagingArea,
    ICleanup,
    ILogger,
    IMetricsCollector,
)

__all__ = [
    # Models
    "DEFAULT_PROCESSED_PREFIX",
    "DEFAULT_TARGET_HEIGHT",
    "CleanupReport",
    "Job",
    "JobState",
    "PipelineResult",
    "PipelineStage",
    "PublishResult",
    "StagingRole",
    "TransformOptions",
    "TransformResult",
    "derive_processed_id",
    "local_file_name",
    # Exceptions
    "DomainException",
    "BadTriggerError",
    "StorageError",
    "ObjectNotFoundError",
    "TransferError",
    "PublicAccessError",
    "TransformError",
    "ConfigurationError",
    "InvalidStateTransitionError",
    # Protocols
    "IAssetGateway",
    "ITransformTask",
    "ITransformer",
    "IStagingArea",
    "ICleanup",
    "ILogger",
    "IMetricsCollector",
]
