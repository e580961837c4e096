"""Shared fixtures: tiny grids, in-memory images and a synchronous editor."""

import pytest
from PIL import Image

from beadboard.config import EditorConfig
from beadboard.editor import PatternEditor
from beadboard.grid import EMPTY, GridSize

RED = "#ff0000"
BLUE = "#0000ff"
GREEN = "#00ff00"


def _run_now(session):
    session.run()


@pytest.fixture
def size3():
    return GridSize(3, 3)


@pytest.fixture
def checker3():
    """3x3 red/blue checkerboard."""
    return [[RED if (x + y) % 2 == 0 else BLUE for x in range(3)] for y in range(3)]


@pytest.fixture
def red_blue_image():
    """20x20 image: red 10x10 top-left block, blue everywhere else."""
    img = Image.new("RGBA", (20, 20), (0, 0, 255, 255))
    img.paste((255, 0, 0, 255), (0, 0, 10, 10))
    return img


@pytest.fixture
def transparent_image():
    return Image.new("RGBA", (16, 16), (0, 0, 0, 0))


@pytest.fixture
def editor():
    """5x5 editor whose generation runs inline on the calling thread."""
    config = EditorConfig(grid_width=5, grid_height=5, multiplier=4)
    return PatternEditor(config, runner=_run_now)


@pytest.fixture
def empty5():
    return [[EMPTY] * 5 for _ in range(5)]
