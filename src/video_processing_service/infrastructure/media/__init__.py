"""Media processing package."""

from video_processing_service.infrastructure.media.ffmpeg import FFmpegTransformer, FFmpegTransformTask

__all__ = ["FFmpegTransformer", "FFmpegTransformTask"]
