"""Best-effort removal of local staging files."""

import os
from pathlib import Path
from typing import Iterable

from video_processing_service.domain.models import CleanupReport
from video_processing_service.shared.logging import get_logger

logger = get_logger(__name__)


class LocalCleanup:
    """
    Deletes local files left behind by a job.
    Implements ICleanup protocol.

    Every path is attempted; a failure on one is logged and recorded in the
    report, never raised.
    """

    def __init__(self):
        self._logger = get_logger(__name__)

    def cleanup(self, paths: Iterable[Path]) -> CleanupReport:
        report = CleanupReport()
        seen = set()

        for path in paths:
            path = Path(path)
            if path in seen:
                continue
            seen.add(path)

            try:
                os.unlink(path)
            except FileNotFoundError:
                self._logger.debug(f"Already clean: {path}")
                report.missing.append(path)
            except OSError as e:
                self._logger.error(f"Failed to delete {path}: {e}")
                report.failed[path] = str(e)
            else:
                self._logger.info(f"Deleted {path}")
                report.removed.append(path)

        return report
