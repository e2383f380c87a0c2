"""Tests for config loading and normalisation."""

import json

import pytest

from desk_core import config
from desk_core.constants import THRESHOLD_STEP, FOREGROUND_INTERVAL_SEC


@pytest.fixture
def config_file(tmp_path, monkeypatch):
    path = tmp_path / "config.json"
    monkeypatch.setattr(config, "CONFIG_FILE", path)
    return path


class TestLoadConfig:

    def test_defaults_when_missing(self, config_file):
        cfg = config.load_config()
        assert cfg["thresholdStep"] == THRESHOLD_STEP
        assert cfg["milestoneMetric"] == "registrations"
        assert cfg["seriesPrefix"] == "MH26"
        assert cfg["celebrationScreen"] is True

    def test_stored_values_override(self, config_file):
        config_file.write_text(json.dumps({"thresholdStep": 1, "serverUrl": "http://x/api/"}))
        cfg = config.load_config()
        assert cfg["thresholdStep"] == 1
        assert cfg["serverUrl"] == "http://x/api"

    @pytest.mark.parametrize("bad", [0, -3, "5", True, None])
    def test_invalid_interval_falls_back(self, config_file, bad):
        config_file.write_text(json.dumps({"foregroundIntervalSec": bad}))
        assert config.load_config()["foregroundIntervalSec"] == FOREGROUND_INTERVAL_SEC

    def test_unknown_metric_falls_back(self, config_file):
        config_file.write_text(json.dumps({"milestoneMetric": "votes"}))
        assert config.load_config()["milestoneMetric"] == "registrations"

    def test_corrupt_file_uses_defaults(self, config_file):
        config_file.write_text("{not json")
        assert config.load_config()["thresholdStep"] == THRESHOLD_STEP

    def test_non_object_file_uses_defaults(self, config_file):
        config_file.write_text("[1, 2]")
        assert config.load_config()["thresholdStep"] == THRESHOLD_STEP

    def test_save_round_trip(self, config_file):
        cfg = config.load_config()
        cfg["authToken"] = "abc"
        config.save_config(cfg)
        assert config.load_config()["authToken"] == "abc"
