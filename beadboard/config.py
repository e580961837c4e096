"""Editor defaults and their JSON persistence."""

import json
import logging
from dataclasses import asdict, dataclass, fields
from pathlib import Path
from typing import Optional, Tuple

from .grid import GridSize

logger = logging.getLogger(__name__)

CONFIG_FILE = Path.home() / ".beadboard.json"


@dataclass
class EditorConfig:
    """Defaults for a new editor session."""

    grid_width: int = 29
    grid_height: int = 29
    default_color: str = "#000000"
    scale_percent: int = 100

    # Oversampling per cell per axis; reduced for big grids to stay responsive
    multiplier: int = 12
    large_grid_cells: int = 2500
    large_grid_multiplier: int = 8
    huge_grid_cells: int = 10000
    huge_grid_multiplier: int = 4

    # Aspect-locked resize never goes below this many cells per side
    min_grid_side: int = 5

    normalize_threshold: float = 5.0

    @property
    def grid_size(self) -> GridSize:
        return GridSize(self.grid_width, self.grid_height)


# QR code images: module count -> scale percent
QR_SCALE_BY_MODULES = {21: 89, 25: 123, 29: 133}
QR_MULTIPLIER = 64


def qr_preset(module_count: int, scale_percent: int) -> Tuple[int, int]:
    """(scale, multiplier) for generating from a QR code image.

    Unknown module counts keep ``scale_percent``.
    """
    return QR_SCALE_BY_MODULES.get(module_count, scale_percent), QR_MULTIPLIER


def choose_multiplier(size: GridSize, config: Optional[EditorConfig] = None) -> int:
    """Sampling multiplier for a grid of the given size."""
    config = config or EditorConfig()
    if size.cells >= config.huge_grid_cells:
        return max(1, config.huge_grid_multiplier)
    if size.cells >= config.large_grid_cells:
        return max(1, config.large_grid_multiplier)
    return max(1, config.multiplier)


class ConfigManager:
    """Handles loading and saving of the editor configuration."""

    def __init__(self, config_path: Path = CONFIG_FILE):
        self.config_path = Path(config_path)

    def load(self) -> EditorConfig:
        """Load configuration from file, returning defaults if not found."""
        config = EditorConfig()
        if not self.config_path.exists():
            return config

        try:
            with open(self.config_path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, ValueError) as e:
            logger.warning("Could not load config file %s: %s", self.config_path, e)
            return config

        if not isinstance(data, dict):
            logger.warning("Ignoring config file %s: not a JSON object", self.config_path)
            return config

        for f in fields(EditorConfig):
            if f.name not in data:
                continue
            value = data[f.name]
            default = getattr(config, f.name)
            # Accept ints where floats are expected, nothing else
            if isinstance(default, float) and isinstance(value, int):
                value = float(value)
            if type(value) is not type(default):
                logger.warning("Ignoring config key %r: expected %s",
                               f.name, type(default).__name__)
                continue
            setattr(config, f.name, value)

        try:
            config.grid_size
        except ValueError as e:
            logger.warning("Invalid grid size in config, using defaults: %s", e)
            config.grid_width = EditorConfig.grid_width
            config.grid_height = EditorConfig.grid_height

        logger.debug("Loaded configuration from %s", self.config_path)
        return config

    def save(self, config: EditorConfig) -> Tuple[bool, Optional[str]]:
        """Save configuration to file.

        Returns:
            Tuple of (success, error_message)
        """
        try:
            with open(self.config_path, "w", encoding="utf-8") as f:
                json.dump(asdict(config), f, indent=2)
            return True, None
        except OSError as e:
            return False, str(e)
