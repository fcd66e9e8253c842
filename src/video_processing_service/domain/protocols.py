"""Protocol definitions for dependency inversion."""

from typing import ContextManager, Protocol, Iterable, Iterator, Tuple, Optional
from pathlib import Path

from video_processing_service.shared.types import DiagnosticSink
from video_processing_service.domain.models import (
    CleanupReport,
    PublishResult,
    StagingRole,
    TransformOptions,
    TransformResult,
)


class IAssetGateway(Protocol):
    """Remote object store split into a raw and a processed namespace."""

    def fetch(self, source_id: str, destination: Path) -> Path:
        """
        Download raw object ``source_id`` into ``destination``.

        Raises:
            ObjectNotFoundError: the object does not exist
            TransferError: any other transfer failure
        """
        ...

    def publish(self, local_path: Path, destination_id: str) -> PublishResult:
        """
        Upload ``local_path`` as processed object ``destination_id`` and make
        it publicly readable. The two calls are not atomic.

        Raises:
            TransferError: upload failed
            PublicAccessError: uploaded, but make-public failed
        """
        ...

    def make_public(self, object_id: str) -> None:
        """Mark an existing processed object publicly readable."""
        ...

    def remove(self, object_id: str) -> None:
        """Delete a processed object."""
        ...


class ITransformTask(Protocol):
    """A running transform."""

    def diagnostics(self) -> Iterator[str]:
        """Lazily yield diagnostic lines as the tool emits them."""
        ...

    def result(self) -> TransformResult:
        """Block until the transform ends and return its terminal outcome."""
        ...

    def cancel(self) -> None:
        """Stop the underlying process if it is still running."""
        ...


class ITransformer(Protocol):
    """Produces a lower-resolution rendition of a local video file."""

    def start(
        self,
        input_path: Path,
        output_path: Path,
        options: TransformOptions,
        diagnostic_sink: Optional[DiagnosticSink] = None
    ) -> ITransformTask:
        """Launch the transform without waiting for it."""
        ...

    def transform(
        self,
        input_path: Path,
        output_path: Path,
        options: TransformOptions,
        diagnostic_sink: Optional[DiagnosticSink] = None
    ) -> TransformResult:
        """Run to completion and return the terminal outcome."""
        ...


class IStagingArea(Protocol):
    """Owns the raw and processed local staging roots."""

    def ensure_directories(self) -> None:
        ...

    def resolve(self, role: StagingRole, name: str) -> Path:
        ...

    @property
    def roots(self) -> Tuple[Path, Path]:
        ...


class ICleanup(Protocol):
    """Best-effort removal of local files."""

    def cleanup(self, paths: Iterable[Path]) -> CleanupReport:
        ...


class ILogger(Protocol):
    """Interface for logging."""

    def debug(self, message: str, **kwargs) -> None:
        ...

    def info(self, message: str, **kwargs) -> None:
        ...

    def warning(self, message: str, **kwargs) -> None:
        ...

    def error(self, message: str, **kwargs) -> None:
        ...

    def exception(self, message: str, **kwargs) -> None:
        ...


class IMetricsCollector(Protocol):
    """Interface for collecting metrics."""

    def start_timer(self, name: str) -> None:
        ...

    def stop_timer(self, name: str) -> float:
        ...

    def timer(self, name: str) -> ContextManager[None]:
        """Time the enclosed block, recording the duration even if it raises."""
        ...

    def record_metric(self, name: str, value: float) -> None:
        ...

    def increment_counter(self, name: str, amount: int = 1) -> None:
        ...

    def get_summary(self) -> dict:
        ...

    def elapsed_time(self) -> float:
        ...
