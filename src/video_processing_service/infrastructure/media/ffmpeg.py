"""FFmpeg-backed transform producing a scaled-down rendition."""

import subprocess
import time
from collections import deque
from pathlib import Path
from typing import Iterator, List, Optional

from video_processing_service.domain.exceptions import TransformError
from video_processing_service.domain.models import TransformOptions, TransformResult
from video_processing_service.shared.logging import get_logger
from video_processing_service.shared.types import DiagnosticSink

logger = get_logger(__name__)

# Lines of stderr kept for the failure reason
MAX_TAIL_LINES = 50


class FFmpegTransformTask:
    """
    A running ffmpeg process.
    Implements ITransformTask protocol.

    Diagnostic lines (ffmpeg's stderr) are produced lazily and forwarded to
    the sink; they never influence the outcome, which depends only on the exit
    code and the output file.
    """

    def __init__(
        self,
        process: subprocess.Popen,
        command: List[str],
        output_path: Path,
        sink: Optional[DiagnosticSink] = None
    ):
        self._proc = process
        self.command = command
        self.output_path = output_path
        self._sink = sink
        self._logger = get_logger(__name__)
        self._started = time.monotonic()
        self._tail = deque(maxlen=MAX_TAIL_LINES)
        self._line_count = 0
        self._sink_broken = False
        self._result: Optional[TransformResult] = None

    @property
    def pid(self) -> int:
        return self._proc.pid

    def diagnostics(self) -> Iterator[str]:
        stream = self._proc.stderr
        if stream is None:
            return
        for raw in stream:
            line = raw.rstrip()
            if not line:
                continue
            self._line_count += 1
            self._tail.append(line)
            self._forward(line)
            yield line

    def _forward(self, line: str) -> None:
        if self._sink is None or self._sink_broken:
            return
        try:
            self._sink(line)
        except Exception as e:
            # A broken sink must not change the transform outcome
            self._sink_broken = True
            self._logger.warning(f"Diagnostic sink failed, dropping further lines: {e}")

    def result(self) -> TransformResult:
        """Drain diagnostics, wait for exit and build the terminal result."""
        if self._result is not None:
            return self._result

        try:
            for _ in self.diagnostics():
                pass
            returncode = self._proc.wait()
        except BaseException:
            self.cancel()
            raise
        finally:
            if self._proc.stderr is not None:
                self._proc.stderr.close()

        self._result = self._build_result(returncode)
        return self._result

    def cancel(self) -> None:
        if self._proc.poll() is None:
            self._logger.warning(f"Killing ffmpeg pid={self._proc.pid}")
            self._proc.kill()
            self._proc.wait()

    def _build_result(self, returncode: int) -> TransformResult:
        duration = time.monotonic() - self._started
        common = dict(
            returncode=returncode,
            diagnostic_lines=self._line_count,
            diagnostics_tail=list(self._tail),
            duration_seconds=duration,
        )

        if returncode != 0:
            reason = self._tail[-1] if self._tail else "no diagnostic output"
            return TransformResult(
                success=False,
                error=f"ffmpeg exited with code {returncode}: {reason}",
                **common
            )

        if not self.output_path.is_file() or self.output_path.stat().st_size == 0:
            return TransformResult(
                success=False,
                error=f"ffmpeg exited cleanly but {self.output_path} is missing or empty",
                **common
            )

        return TransformResult(success=True, output_path=self.output_path, **common)


class FFmpegTransformer:
    """
    Scales a video to a fixed height with ffmpeg.
    Implements ITransformer protocol.
    """

    def __init__(self, binary: str = "ffmpeg", diagnostic_sink: Optional[DiagnosticSink] = None):
        """
        Initialize transformer.

        Args:
            binary: ffmpeg executable name or path
            diagnostic_sink: Default receiver for ffmpeg output lines
        """
        self.binary = binary
        self._logger = get_logger(__name__)
        self._default_sink = diagnostic_sink or self._log_line

    def _log_line(self, line: str) -> None:
        self._logger.debug(f"[ffmpeg] {line}")

    def build_command(
        self,
        input_path: Path,
        output_path: Path,
        options: TransformOptions
    ) -> List[str]:
        return [
            self.binary,
            '-hide_banner',
            '-nostdin',
            '-y',
            '-i', str(input_path),
            '-vf', options.scale_filter,
            str(output_path),
        ]

    def start(
        self,
        input_path: Path,
        output_path: Path,
        options: TransformOptions,
        diagnostic_sink: Optional[DiagnosticSink] = None
    ) -> FFmpegTransformTask:
        """
        Launch ffmpeg without waiting for it.

        Raises:
            TransformError: input missing or ffmpeg could not be started
        """
        input_path = Path(input_path)
        output_path = Path(output_path)
        if not input_path.is_file():
            raise TransformError(f"Input not found: {input_path}")

        cmd = self.build_command(input_path, output_path, options)
        self._logger.info(f"Running: {' '.join(cmd)}")

        try:
            proc = subprocess.Popen(
                cmd,
                stdin=subprocess.DEVNULL,
                stdout=subprocess.DEVNULL,
                stderr=subprocess.PIPE,
                text=True,
                errors='replace',
                bufsize=1,
            )
        except OSError as e:
            raise TransformError(f"Failed to start {self.binary}: {e}") from e

        self._logger.info(f"Started ffmpeg pid={proc.pid}")
        return FFmpegTransformTask(proc, cmd, output_path, diagnostic_sink or self._default_sink)

    def transform(
        self,
        input_path: Path,
        output_path: Path,
        options: TransformOptions,
        diagnostic_sink: Optional[DiagnosticSink] = None
    ) -> TransformResult:
        """Run ffmpeg to completion. Start-up problems become a failed result."""
        try:
            task = self.start(input_path, output_path, options, diagnostic_sink)
        except TransformError as e:
            self._logger.error(str(e))
            return TransformResult(success=False, error=str(e))

        result = task.result()
        if result.success:
            self._logger.info(f"Processing finished successfully in {result.duration_seconds:.2f}s")
        else:
            self._logger.error(f"Error processing video: {result.error}")
        return result
