import sys
import os
from pathlib import Path
from typing import Dict, List, Optional

import pytest

# Ensure src/ is importable without installing the package
SRC = os.path.abspath(os.path.join(os.path.dirname(__file__), '..', 'src'))
if SRC not in sys.path:
    sys.path.insert(0, SRC)

from video_processing_service.domain.exceptions import ObjectNotFoundError, TransferError
from video_processing_service.domain.models import PublishResult, TransformResult
from video_processing_service.infrastructure.storage import LocalCleanup, StagingArea


class FakeGateway:
    """In-memory object store with raw and processed namespaces."""

    def __init__(self):
        self.raw: Dict[str, bytes] = {}
        self.processed: Dict[str, bytes] = {}
        self.public: set = set()
        self.calls: List[tuple] = []
        self.fetch_error: Optional[Exception] = None
        self.partial_fetch = False
        self.upload_error: Optional[Exception] = None
        self.make_public_error: Optional[Exception] = None

    def fetch(self, source_id, destination):
        self.calls.append(('fetch', source_id, Path(destination)))
        if self.partial_fetch:
            Path(destination).write_bytes(b"partial")
            raise TransferError("connection reset")
        if self.fetch_error is not None:
            raise self.fetch_error
        if source_id not in self.raw:
            raise ObjectNotFoundError(f"raw/{source_id} not found")
        Path(destination).write_bytes(self.raw[source_id])
        return Path(destination)

    def publish(self, local_path, destination_id):
        self.calls.append(('publish', Path(local_path), destination_id))
        if self.upload_error is not None:
            raise self.upload_error
        self.processed[destination_id] = Path(local_path).read_bytes()
        self.make_public(destination_id)
        return PublishResult(
            object_id=destination_id,
            bucket='processed',
            url=f"https://cdn.example.com/{destination_id}",
            size_bytes=len(self.processed[destination_id]),
            public=True,
        )

    def make_public(self, object_id):
        if self.make_public_error is not None:
            raise self.make_public_error
        self.public.add(object_id)

    def remove(self, object_id):
        self.calls.append(('remove', object_id))
        self.processed.pop(object_id, None)
        self.public.discard(object_id)


class FakeTransformer:
    """Writes a fake rendition; can be told to fail after a partial write."""

    def __init__(self):
        self.calls: List[dict] = []
        self.fail_with: Optional[str] = None
        self.diagnostics = ["frame=   10 fps=0.0 q=28.0", "frame=   20 fps=0.0 q=28.0"]

    def transform(self, input_path, output_path, options, diagnostic_sink=None):
        self.calls.append({
            'input': Path(input_path),
            'output': Path(output_path),
            'input_existed': Path(input_path).is_file(),
            'height': options.target_height,
        })
        for line in self.diagnostics:
            if diagnostic_sink:
                diagnostic_sink(line)

        if self.fail_with:
            Path(output_path).write_bytes(b"half a file")
            return TransformResult(success=False, error=self.fail_with, returncode=1)

        Path(output_path).write_bytes(b"360p:" + Path(input_path).read_bytes())
        return TransformResult(success=True, output_path=Path(output_path), returncode=0)


@pytest.fixture
def staging(tmp_path):
    return StagingArea(tmp_path / "raw-videos", tmp_path / "processed-videos")


@pytest.fixture
def gateway():
    gw = FakeGateway()
    gw.raw["clip1.mp4"] = b"raw video bytes"
    return gw


@pytest.fixture
def transformer():
    return FakeTransformer()


@pytest.fixture
def orchestrator(gateway, transformer, staging):
    from video_processing_service.application.orchestrator import PipelineOrchestrator

    return PipelineOrchestrator(
        gateway=gateway,
        transformer=transformer,
        staging=staging,
        cleanup=LocalCleanup(),
    )


@pytest.fixture
def staged_files(staging):
    """Callable listing every file currently present in both staging roots."""
    def _list():
        found = []
        for root in staging.roots:
            if root.exists():
                found.extend(p for p in root.rglob('*') if p.is_file())
        return found
    return _list
