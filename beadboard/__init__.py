"""beadboard - turn images into fuse-bead patterns and edit them."""

from .editor import ImportResult, PatternEditor
from .generator import (
    GenerationError,
    GenerationRequest,
    GenerationSession,
    generate_dominant_cell_pattern,
    generate_pattern,
)
from .grid import EMPTY, Grid, GridSize, PanOffset
from .history import HistoryStore
from .normalize import normalize
from .patternfile import PatternFileError

__version__ = "0.1.0"

__all__ = [
    "EMPTY",
    "GenerationError",
    "GenerationRequest",
    "GenerationSession",
    "Grid",
    "GridSize",
    "HistoryStore",
    "ImportResult",
    "PanOffset",
    "PatternEditor",
    "PatternFileError",
    "generate_dominant_cell_pattern",
    "generate_pattern",
    "normalize",
]
