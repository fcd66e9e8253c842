"""Main orchestrator for the video processing pipeline."""

from pathlib import Path
from typing import Callable, Iterable, Optional

from video_processing_service.application.trigger import validate_source_id
from video_processing_service.domain.exceptions import PublicAccessError, TransferError, TransformError
from video_processing_service.domain.models import (
    DEFAULT_PROCESSED_PREFIX,
    CleanupReport,
    Job,
    JobState,
    PipelineResult,
    PipelineStage,
    StagingRole,
    TransformOptions,
    derive_processed_id,
    local_file_name,
    new_job_id,
)
from video_processing_service.domain.protocols import (
    IAssetGateway,
    ICleanup,
    IMetricsCollector,
    IStagingArea,
    ITransformer,
)
from video_processing_service.shared.logging import LoggerAdapter, get_logger
from video_processing_service.shared.metrics import MetricsCollector
from video_processing_service.shared.types import DiagnosticSink


class PipelineOrchestrator:
    """
    Runs one job per call: fetch the raw object, transform it, publish the
    rendition, then delete the local copies.

    Holds no per-job state, so concurrent calls are safe as long as the
    collaborators are. Local files are cleaned on every exit path; remote
    objects are never rolled back.
    """

    def __init__(
        self,
        gateway: IAssetGateway,
        transformer: ITransformer,
        staging: IStagingArea,
        cleanup: ICleanup,
        logger: Optional[LoggerAdapter] = None,
        metrics_factory: Callable[[], IMetricsCollector] = MetricsCollector,
        processed_prefix: str = DEFAULT_PROCESSED_PREFIX,
        transform_options: Optional[TransformOptions] = None
    ):
        self._gateway = gateway
        self._transformer = transformer
        self._staging = staging
        self._cleanup = cleanup
        self._logger = logger or LoggerAdapter(get_logger(__name__))
        self._metrics_factory = metrics_factory
        self._processed_prefix = processed_prefix
        self._transform_options = transform_options or TransformOptions()

    def derive_id(self, source_id: str) -> str:
        return derive_processed_id(source_id, self._processed_prefix)

    def create_job(self, source_id: str) -> Job:
        """
        Build a job with per-job local paths.

        Raises:
            BadTriggerError: source_id is empty or not a string
        """
        source_id = validate_source_id(source_id)
        job_id = new_job_id()
        derived_id = self.derive_id(source_id)
        return Job(
            source_id=source_id,
            derived_id=derived_id,
            local_raw_path=self._staging.resolve(StagingRole.RAW, local_file_name(job_id, source_id)),
            local_processed_path=self._staging.resolve(
                StagingRole.PROCESSED, local_file_name(job_id, derived_id)
            ),
            job_id=job_id,
        )

    def process(self, source_id: str) -> PipelineResult:
        """Execute a job end to end and return its terminal outcome."""
        job = self.create_job(source_id)
        log = self._logger.bind(f"[job {job.job_id[:8]}]")
        metrics = self._metrics_factory()
        metrics.start_timer('total_job')

        log.info(f"Starting job: {job.source_id} -> {job.derived_id}")

        try:
            return self._run(job, log, metrics)
        except BaseException:
            # Interrupted mid-stage: the local files still must not outlive the job
            log.warning(f"Job aborted in state {job.state.value}, removing local files")
            self._cleanup.cleanup(job.local_paths)
            raise

    def _run(self, job: Job, log: LoggerAdapter, metrics: IMetricsCollector) -> PipelineResult:
        # 1. Download. Only the raw file can exist if this fails.
        job.advance(JobState.DOWNLOADING)
        try:
            with metrics.timer('download'):
                self._staging.ensure_directories()
                self._gateway.fetch(job.source_id, job.local_raw_path)
            if not job.local_raw_path.is_file():
                raise TransferError(f"Fetch returned but {job.local_raw_path} does not exist")
        except Exception as e:
            return self._fail(job, PipelineStage.DOWNLOAD, e, [job.local_raw_path], log, metrics)

        # 2. Transform
        job.advance(JobState.TRANSFORMING)
        try:
            with metrics.timer('transform'):
                result = self._transformer.transform(
                    job.local_raw_path,
                    job.local_processed_path,
                    self._transform_options,
                    diagnostic_sink=self._diagnostic_sink(log, metrics),
                )
            if not result.success:
                raise TransformError(result.error or "transform failed")
        except Exception as e:
            return self._fail(job, PipelineStage.CONVERT, e, job.local_paths, log, metrics)

        # 3. Publish
        job.advance(JobState.PUBLISHING)
        try:
            with metrics.timer('publish'):
                published = self._gateway.publish(job.local_processed_path, job.derived_id)
        except Exception as e:
            if isinstance(e, PublicAccessError):
                log.warning(f"{job.derived_id} exists remotely without public access; it is not removed")
            return self._fail(job, PipelineStage.UPLOAD, e, job.local_paths, log, metrics)

        # 4. Cleanup
        job.advance(JobState.CLEANING_UP)
        report = self._clean(job.local_paths, log, metrics)
        job.advance(JobState.COMPLETED)

        total = metrics.stop_timer('total_job')
        log.info(f"Job completed in {total:.2f}s: {job.derived_id} -> {published.url}")

        return PipelineResult(
            success=True,
            job_id=job.job_id,
            source_id=job.source_id,
            derived_id=job.derived_id,
            state=job.state,
            url=published.url,
            duration_seconds=total,
            metrics=metrics.get_summary(),
            cleanup=report,
        )

    def _fail(
        self,
        job: Job,
        stage: PipelineStage,
        error: Exception,
        paths: Iterable[Path],
        log: LoggerAdapter,
        metrics: IMetricsCollector
    ) -> PipelineResult:
        job.fail(stage, str(error))
        log.error(f"{stage.value} failed for {job.source_id}: {error}")

        report = self._clean(paths, log, metrics)
        total = metrics.stop_timer('total_job')

        return PipelineResult(
            success=False,
            job_id=job.job_id,
            source_id=job.source_id,
            derived_id=job.derived_id,
            state=job.state,
            stage=stage,
            error=str(error),
            duration_seconds=total,
            metrics=metrics.get_summary(),
            cleanup=report,
        )

    def _clean(self, paths: Iterable[Path], log: LoggerAdapter, metrics: IMetricsCollector) -> CleanupReport:
        """Run cleanup; its failures are logged and never change the outcome."""
        paths = list(paths)
        metrics.start_timer('cleanup')
        try:
            report = self._cleanup.cleanup(paths)
        except Exception as e:
            log.exception(f"Cleanup raised unexpectedly: {e}")
            report = CleanupReport(failed={Path(p): str(e) for p in paths})
        metrics.stop_timer('cleanup')

        if report.failed:
            log.error(f"Could not delete {len(report.failed)} local file(s): "
                      f"{', '.join(str(p) for p in report.failed)}")
        return report

    @staticmethod
    def _diagnostic_sink(log: LoggerAdapter, metrics: IMetricsCollector) -> DiagnosticSink:
        def sink(line: str) -> None:
            metrics.increment_counter('diagnostic_lines')
            log.debug(f"[ffmpeg] {line}")
        return sink
