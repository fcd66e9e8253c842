"""
Unit tests for the ffmpeg transformer.
"""

import io
import subprocess

import pytest
from pathlib import Path
from unittest.mock import Mock, patch

from video_processing_service.domain.exceptions import TransformError
from video_processing_service.domain.models import TransformOptions
from video_processing_service.infrastructure.media import FFmpegTransformer, FFmpegTransformTask

POPEN = 'video_processing_service.infrastructure.media.ffmpeg.subprocess.Popen'


def fake_process(lines, returncode=0, running=False):
    """Mock Popen with a finished (or still running) process."""
    proc = Mock()
    proc.pid = 4242
    proc.stderr = io.StringIO("".join(line + "\n" for line in lines))
    proc.wait.return_value = returncode
    proc.poll.return_value = None if running else returncode
    return proc


@pytest.fixture
def input_file(tmp_path):
    path = tmp_path / "in.mp4"
    path.write_bytes(b"raw")
    return path


@pytest.fixture
def output_file(tmp_path):
    return tmp_path / "out.mp4"


class TestCommand:
    """Test command construction."""

    def test_build_command(self):
        """Test scale filter keeps aspect ratio with an even width."""
        cmd = FFmpegTransformer().build_command(
            Path("in.mp4"), Path("out.mp4"), TransformOptions()
        )

        assert cmd[0] == "ffmpeg"
        assert cmd[cmd.index('-i') + 1] == "in.mp4"
        assert cmd[cmd.index('-vf') + 1] == "scale=-2:360"
        assert cmd[-1] == "out.mp4"
        assert '-y' in cmd
        assert '-nostdin' in cmd

    def test_custom_binary_and_height(self):
        cmd = FFmpegTransformer(binary="/opt/ffmpeg/bin/ffmpeg").build_command(
            Path("a.mov"), Path("b.mov"), TransformOptions(target_height=240)
        )

        assert cmd[0] == "/opt/ffmpeg/bin/ffmpeg"
        assert "scale=-2:240" in cmd


class TestTransform:
    """Test running ffmpeg to completion."""

    def test_success(self, input_file, output_file):
        """Test exit 0 with a non-empty output is success."""
        def popen(cmd, **kwargs):
            output_file.write_bytes(b"rendition")
            return fake_process(["frame=1", "", "frame=2"])

        lines = []
        with patch(POPEN, side_effect=popen) as mock_popen:
            result = FFmpegTransformer().transform(
                input_file, output_file, TransformOptions(), diagnostic_sink=lines.append
            )

        assert result.success is True
        assert result.output_path == output_file
        assert result.returncode == 0
        assert result.diagnostic_lines == 2
        assert lines == ["frame=1", "frame=2"]
        kwargs = mock_popen.call_args[1]
        assert kwargs['stderr'] == subprocess.PIPE
        assert kwargs['stdin'] == subprocess.DEVNULL

    def test_nonzero_exit(self, input_file, output_file):
        """Test non-zero exit is a failure carrying the last diagnostic."""
        proc = fake_process(["Input #0", "in.mp4: Invalid data found when processing input"], returncode=1)

        with patch(POPEN, return_value=proc):
            result = FFmpegTransformer().transform(input_file, output_file, TransformOptions())

        assert result.success is False
        assert result.returncode == 1
        assert "code 1" in result.error
        assert "Invalid data" in result.error
        assert result.diagnostics_tail[-1].endswith("processing input")

    def test_clean_exit_without_output(self, input_file, output_file):
        """Test exit 0 but no output file is still a failure."""
        with patch(POPEN, return_value=fake_process([])):
            result = FFmpegTransformer().transform(input_file, output_file, TransformOptions())

        assert result.success is False
        assert "missing or empty" in result.error

    def test_missing_input(self, tmp_path, output_file):
        """Test ffmpeg is not started for a missing input."""
        with patch(POPEN) as mock_popen:
            result = FFmpegTransformer().transform(tmp_path / "absent.mp4", output_file, TransformOptions())

        assert result.success is False
        assert "Input not found" in result.error
        mock_popen.assert_not_called()

    def test_binary_not_found(self, input_file, output_file):
        with patch(POPEN, side_effect=FileNotFoundError("no ffmpeg")):
            with pytest.raises(TransformError):
                FFmpegTransformer(binary="nope").start(input_file, output_file, TransformOptions())

            result = FFmpegTransformer(binary="nope").transform(input_file, output_file, TransformOptions())

        assert result.success is False
        assert "Failed to start nope" in result.error

    def test_broken_sink_does_not_change_outcome(self, input_file, output_file):
        """Test a raising diagnostic sink is dropped and the result stands."""
        output_file.write_bytes(b"rendition")
        calls = []

        def sink(line):
            calls.append(line)
            raise RuntimeError("sink down")

        with patch(POPEN, return_value=fake_process(["a", "b", "c"])):
            result = FFmpegTransformer().transform(
                input_file, output_file, TransformOptions(), diagnostic_sink=sink
            )

        assert result.success is True
        assert result.diagnostic_lines == 3
        assert calls == ["a"]


class TestTask:
    """Test the task handle."""

    def test_diagnostics_are_lazy(self, output_file):
        proc = fake_process(["one", "two"])
        task = FFmpegTransformTask(proc, ["ffmpeg"], output_file)

        stream = task.diagnostics()
        assert next(stream) == "one"
        assert list(stream) == ["two"]

    def test_result_is_cached(self, output_file):
        output_file.write_bytes(b"x")
        proc = fake_process(["done"])
        task = FFmpegTransformTask(proc, ["ffmpeg"], output_file)

        first = task.result()
        second = task.result()

        assert first is second
        proc.wait.assert_called_once()

    def test_tail_is_bounded(self, output_file):
        from video_processing_service.infrastructure.media.ffmpeg import MAX_TAIL_LINES

        proc = fake_process([f"line {i}" for i in range(MAX_TAIL_LINES + 25)], returncode=1)
        result = FFmpegTransformTask(proc, ["ffmpeg"], output_file).result()

        assert len(result.diagnostics_tail) == MAX_TAIL_LINES
        assert result.diagnostic_lines == MAX_TAIL_LINES + 25

    def test_cancel_kills_running_process(self, output_file):
        """Test cancel terminates a process that is still running."""
        proc = fake_process([], running=True)
        task = FFmpegTransformTask(proc, ["ffmpeg"], output_file)

        task.cancel()

        proc.kill.assert_called_once()
        proc.wait.assert_called_once()

    def test_cancel_after_exit_is_noop(self, output_file):
        proc = fake_process([], returncode=0)

        FFmpegTransformTask(proc, ["ffmpeg"], output_file).cancel()

        proc.kill.assert_not_called()

    def test_interrupt_while_waiting_kills_process(self, output_file):
        """Test an interrupt during wait cancels the process and propagates."""
        proc = fake_process([], running=True)
        proc.wait.side_effect = [KeyboardInterrupt, -9]
        task = FFmpegTransformTask(proc, ["ffmpeg"], output_file)

        with pytest.raises(KeyboardInterrupt):
            task.result()

        proc.kill.assert_called_once()
        assert proc.stderr.closed
