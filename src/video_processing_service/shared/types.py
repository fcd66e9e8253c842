"""Common type definitions."""

from typing import Callable, Union
from pathlib import Path

# Type alias for paths
PathLike = Union[str, Path]

# Receives one diagnostic line emitted by a running transform
DiagnosticSink = Callable[[str], None]
