"""Application layer package."""

from video_processing_service.application.orchestrator import PipelineOrchestrator
from video_processing_service.application.trigger import decode_trigger, validate_source_id

__all__ = ["PipelineOrchestrator", "decode_trigger", "validate_source_id"]
