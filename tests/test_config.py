"""Tests for editor configuration."""
import json

from beadboard.config import ConfigManager, EditorConfig, choose_multiplier, qr_preset
from beadboard.grid import GridSize


class TestChooseMultiplier:
    def test_thresholds(self):
        assert choose_multiplier(GridSize(29, 29)) == 12
        assert choose_multiplier(GridSize(50, 50)) == 8
        assert choose_multiplier(GridSize(100, 100)) == 4

    def test_custom_config(self):
        cfg = EditorConfig(multiplier=3)
        assert choose_multiplier(GridSize(5, 5), cfg) == 3


class TestConfigManager:
    def test_missing_file_gives_defaults(self, tmp_path):
        assert ConfigManager(tmp_path / "none.json").load() == EditorConfig()

    def test_save_then_load(self, tmp_path):
        manager = ConfigManager(tmp_path / "cfg.json")
        cfg = EditorConfig(grid_width=40, default_color="#123456", normalize_threshold=7.5)
        ok, err = manager.save(cfg)
        assert ok and err is None
        assert manager.load() == cfg

    def test_bad_values_fall_back(self, tmp_path):
        path = tmp_path / "cfg.json"
        path.write_text(json.dumps({
            "grid_width": "wide",
            "grid_height": 12,
            "normalize_threshold": 3,
            "unknown": 1,
        }))
        cfg = ConfigManager(path).load()
        assert cfg.grid_width == 29
        assert cfg.grid_height == 12
        assert cfg.normalize_threshold == 3.0

    def test_invalid_grid_size_resets(self, tmp_path):
        path = tmp_path / "cfg.json"
        path.write_text(json.dumps({"grid_width": 0}))
        assert ConfigManager(path).load().grid_size == GridSize(29, 29)

    def test_unreadable_file(self, tmp_path):
        path = tmp_path / "cfg.json"
        path.write_text("[1, 2")
        assert ConfigManager(path).load() == EditorConfig()

    def test_save_failure_reports_error(self, tmp_path):
        ok, err = ConfigManager(tmp_path / "missing" / "cfg.json").save(EditorConfig())
        assert not ok and err


def test_qr_preset():
    assert qr_preset(29, 100) == (133, 64)
    assert qr_preset(21, 100) == (89, 64)
    assert qr_preset(33, 90) == (90, 64)
