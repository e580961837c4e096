"""Collapse near-identical colors onto a representative.

Greedy single-link clustering in CIE Lab: the first remaining color seeds a
cluster, every other remaining color closer than ``threshold`` (Delta E,
CIE76) joins it.  There is no re-centering, so the result depends on input
order; it is deterministic for a fixed ordering.
"""

import logging

import numpy as np

from .colorspace import hex_to_lab_array, lab_euclidean
from .grid import EMPTY, Grid, apply_color_map, unique_colors

logger = logging.getLogger(__name__)

DEFAULT_THRESHOLD = 5.0


def normalize(colors: list[str], threshold: float = DEFAULT_THRESHOLD) -> dict[str, str]:
    """Map every input color to its cluster representative (the seed)."""
    # Duplicates would only form singleton clusters of an already-mapped color
    pool = [c for c in dict.fromkeys(colors) if c != EMPTY]
    if not pool:
        return {}

    labs = hex_to_lab_array(pool)
    remaining = np.ones(len(pool), dtype=bool)
    mapping: dict[str, str] = {}
    n_clusters = 0

    for i in range(len(pool)):
        if not remaining[i]:
            continue
        remaining[i] = False
        seed = pool[i]
        mapping[seed] = seed
        n_clusters += 1

        candidates = np.flatnonzero(remaining)
        if len(candidates) == 0:
            continue
        dists = lab_euclidean(labs[candidates], labs[i])
        members = candidates[dists < threshold]
        for j in members:
            mapping[pool[j]] = seed
        remaining[members] = False

    logger.debug("normalized %d colors into %d clusters (threshold=%.2f)",
                 len(pool), n_clusters, threshold)
    return mapping


def normalize_grid(grid: Grid, threshold: float = DEFAULT_THRESHOLD) -> Grid:
    """Apply :func:`normalize` over the distinct colors of ``grid``."""
    return apply_color_map(grid, normalize(unique_colors(grid), threshold))


def slider_to_threshold(t: float) -> float:
    """Map a 0..1 slider position to a Delta E threshold in 1..20."""
    t = max(0.0, min(1.0, t))
    return 1.0 + 19.0 * t
