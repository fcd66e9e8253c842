"""Local staging directories for raw and processed files."""

from pathlib import Path
from typing import Tuple

from video_processing_service.domain.models import StagingRole
from video_processing_service.shared.logging import get_logger
from video_processing_service.shared.types import PathLike

logger = get_logger(__name__)


class StagingArea:
    """
    Owns the two sibling staging roots used while a job runs.
    Implements IStagingArea protocol.
    """

    def __init__(self, raw_dir: PathLike, processed_dir: PathLike):
        """
        Initialize staging area.

        Args:
            raw_dir: Root for downloaded raw videos
            processed_dir: Root for transformed renditions
        """
        self.raw_dir = Path(raw_dir)
        self.processed_dir = Path(processed_dir)
        self._logger = get_logger(__name__)

    @property
    def roots(self) -> Tuple[Path, Path]:
        return (self.raw_dir, self.processed_dir)

    def ensure_directories(self) -> None:
        """
        Create both staging roots (and parents) if absent.

        Raises:
            OSError: if a root cannot be created (permissions, disk full)
        """
        for root in self.roots:
            if not root.is_dir():
                root.mkdir(parents=True, exist_ok=True)
                self._logger.info(f"Created staging directory: {root}")

    def resolve(self, role: StagingRole, name: str) -> Path:
        """Path of ``name`` inside the staging root for ``role``. No I/O."""
        root = self.raw_dir if StagingRole(role) is StagingRole.RAW else self.processed_dir
        return root / name
