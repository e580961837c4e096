"""Tests for pattern JSON files."""
import json

import pytest

from beadboard import patternfile
from beadboard.grid import EMPTY, GridSize
from beadboard.patternfile import PatternFileError

from conftest import BLUE, RED


def payload(**overrides):
    data = {
        "gridSize": {"width": 2, "height": 1},
        "scale": 80,
        "perlerPattern": [[RED, EMPTY]],
    }
    data.update(overrides)
    return data


class TestDumps:
    def test_keys_and_layout(self):
        text = patternfile.dumps(GridSize(2, 1), 80, [[RED, EMPTY]])
        assert json.loads(text) == payload()
        assert "\n  " in text

    def test_round_trip(self, checker3, size3, tmp_path):
        path = tmp_path / "p.json"
        patternfile.save(path, size3, 120, checker3)
        pf = patternfile.load(path)
        assert pf.grid_size == size3
        assert pf.scale == 120
        assert pf.pattern == checker3


class TestLoads:
    def test_uppercase_cells_are_lowered(self):
        pf = patternfile.from_dict(payload(perlerPattern=[["#FF0000", "#0000FF"]]))
        assert pf.pattern == [[RED, BLUE]]

    def test_scale_defaults(self):
        data = payload()
        del data["scale"]
        assert patternfile.from_dict(data).scale == 100

    @pytest.mark.parametrize("data", [
        [],
        {"scale": 100},
        payload(perlerPattern=[]),
        payload(gridSize=None),
        payload(gridSize={"width": "2", "height": 1}),
        payload(gridSize={"width": True, "height": 1}),
        payload(gridSize={"width": 0, "height": 1}),
        payload(perlerPattern=[[RED]]),
        payload(perlerPattern=[[RED, EMPTY], [RED, EMPTY]]),
        payload(scale="big"),
        payload(perlerPattern=[["red", EMPTY]]),
        payload(perlerPattern=[["", EMPTY]]),
        payload(perlerPattern=[["#12", EMPTY]]),
        payload(perlerPattern=[["#gggggg", EMPTY]]),
        payload(perlerPattern=[["ff0000", EMPTY]]),
    ])
    def test_rejects_malformed(self, data):
        with pytest.raises(PatternFileError):
            patternfile.from_dict(data)

    def test_invalid_json(self):
        with pytest.raises(PatternFileError):
            patternfile.loads("{not json")

    def test_error_is_value_error(self):
        assert issubclass(PatternFileError, ValueError)
