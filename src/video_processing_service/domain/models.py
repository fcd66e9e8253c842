"""Domain models for the video processing pipeline."""

import uuid
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Optional, Dict, Any, List, Tuple

from video_processing_service.domain.exceptions import BadTriggerError, InvalidStateTransitionError

DEFAULT_PROCESSED_PREFIX = "processed-"
DEFAULT_TARGET_HEIGHT = 360


class JobState(str, Enum):
    """Lifecycle of one pipeline job. Strictly forward-moving."""

    RECEIVED = "received"
    DOWNLOADING = "downloading"
    TRANSFORMING = "transforming"
    PUBLISHING = "publishing"
    CLEANING_UP = "cleaning_up"
    COMPLETED = "completed"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self in (JobState.COMPLETED, JobState.FAILED)


_ALLOWED_TRANSITIONS = {
    JobState.RECEIVED: {JobState.DOWNLOADING, JobState.FAILED},
    JobState.DOWNLOADING: {JobState.TRANSFORMING, JobState.FAILED},
    JobState.TRANSFORMING: {JobState.PUBLISHING, JobState.FAILED},
    JobState.PUBLISHING: {JobState.CLEANING_UP, JobState.FAILED},
    JobState.CLEANING_UP: {JobState.COMPLETED},
    JobState.COMPLETED: set(),
    JobState.FAILED: set(),
}


class PipelineStage(str, Enum):
    """Stage a failed job is attributed to."""

    DOWNLOAD = "download"
    CONVERT = "convert"
    UPLOAD = "upload"


class StagingRole(str, Enum):
    """Local staging root a file belongs to."""

    RAW = "raw"
    PROCESSED = "processed"


def derive_processed_id(source_id: str, prefix: str = DEFAULT_PROCESSED_PREFIX) -> str:
    """Name under which the rendition of ``source_id`` is published."""
    return f"{prefix}{source_id}"


def local_file_name(job_id: str, object_id: str) -> str:
    """
    Flat local file name for an object staged by one job.

    The job id prefix keeps concurrent jobs for the same object apart; path
    separators are flattened so ids like ``uploads/clip.mp4`` stay inside the
    staging root. The extension is preserved because ffmpeg picks the output
    container from it.
    """
    flat = object_id.replace("/", "_").replace("\\", "_")
    return f"{job_id}-{flat}"


def new_job_id() -> str:
    return uuid.uuid4().hex


@dataclass
class Job:
    """One end-to-end execution of the pipeline for a single source object."""

    source_id: str
    derived_id: str
    local_raw_path: Path
    local_processed_path: Path
    job_id: str = field(default_factory=new_job_id)
    state: JobState = JobState.RECEIVED
    history: List[JobState] = field(default_factory=list)
    failed_stage: Optional[PipelineStage] = None
    error: Optional[str] = None
    created_at: datetime = field(default_factory=datetime.now)

    def __post_init__(self):
        if not isinstance(self.source_id, str) or not self.source_id.strip():
            raise BadTriggerError("source_id must be a non-empty string")
        if not self.derived_id:
            raise BadTriggerError("derived_id must be non-empty")
        if not self.history:
            self.history.append(self.state)

    @property
    def local_paths(self) -> Tuple[Path, Path]:
        return (self.local_raw_path, self.local_processed_path)

    def advance(self, new_state: JobState) -> None:
        """Move to ``new_state``; raises if the move is not forward."""
        if new_state not in _ALLOWED_TRANSITIONS[self.state]:
            raise InvalidStateTransitionError(
                f"Job {self.job_id}: cannot move from {self.state.value} to {new_state.value}"
            )
        self.state = new_state
        self.history.append(new_state)

    def fail(self, stage: PipelineStage, error: str) -> None:
        """Record the failing stage and move to FAILED."""
        self.failed_stage = stage
        self.error = error
        self.advance(JobState.FAILED)


@dataclass(frozen=True)
class TransformOptions:
    """
    Options for producing the lower-resolution rendition.

    Height is fixed; width follows the aspect ratio and is rounded to an even
    number (ffmpeg's ``-2``).
    """

    target_height: int = DEFAULT_TARGET_HEIGHT

    def __post_init__(self):
        if not isinstance(self.target_height, int) or self.target_height <= 0:
            raise ValueError("target_height must be a positive integer")

    @property
    def scale_filter(self) -> str:
        return f"scale=-2:{self.target_height}"


@dataclass
class TransformResult:
    """Terminal outcome of one transform run."""

    success: bool
    output_path: Optional[Path] = None
    error: Optional[str] = None
    returncode: Optional[int] = None
    diagnostic_lines: int = 0
    diagnostics_tail: List[str] = field(default_factory=list)
    duration_seconds: float = 0.0


@dataclass
class PublishResult:
    """Result of publishing a processed file to the remote store."""

    object_id: str
    bucket: str
    url: Optional[str] = None
    size_bytes: int = 0
    public: bool = False


@dataclass
class CleanupReport:
    """What happened to each local path during cleanup."""

    removed: List[Path] = field(default_factory=list)
    missing: List[Path] = field(default_factory=list)
    failed: Dict[Path, str] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return not self.failed


@dataclass
class PipelineResult:
    """Single terminal outcome reported for a job."""

    success: bool
    job_id: str
    source_id: str
    derived_id: str
    state: JobState
    stage: Optional[PipelineStage] = None
    error: Optional[str] = None
    url: Optional[str] = None
    duration_seconds: float = 0.0
    metrics: Dict[str, Any] = field(default_factory=dict)
    cleanup: Optional[CleanupReport] = None

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "status": self.state.value,
            "jobId": self.job_id,
            "sourceId": self.source_id,
            "derivedId": self.derived_id,
            "durationSeconds": round(self.duration_seconds, 3),
        }
        if self.success:
            data["url"] = self.url
        else:
            data["stage"] = self.stage.value if self.stage else None
            data["error"] = self.error
        return data
