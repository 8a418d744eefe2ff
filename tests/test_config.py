import json
import os
import sys
import tempfile

import pytest

ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)

from config import load_config_safe


def test_missing_file_uses_defaults():
    with tempfile.TemporaryDirectory() as tmp:
        path = os.path.join(tmp, "absent.yaml")
        with pytest.warns(UserWarning):
            cfg = load_config_safe(path, use_cache=False)
        assert cfg["resample"] == {"multiplier": 1.0, "recompute_lengths": False}
        assert cfg["logging"]["level"] == "INFO"
        assert cfg["paths"]["output"] == os.path.join(tmp, "output")


def test_yaml_subset_with_partial_sections():
    text = (
        "# resampler settings\n"
        "resample:\n"
        "  multiplier: 0.5   # halve\n"
        "  recompute_lengths: true\n"
        "paths:\n"
        "  output: exports\n"
    )
    with tempfile.TemporaryDirectory() as tmp:
        path = os.path.join(tmp, "config.yaml")
        with open(path, "w", encoding="utf-8") as fh:
            fh.write(text)
        cfg = load_config_safe(path, use_cache=False)
        assert cfg["resample"]["multiplier"] == 0.5
        assert cfg["resample"]["recompute_lengths"] is True
        assert cfg["logging"]["level"] == "INFO"
        assert cfg["paths"]["output"] == os.path.join(tmp, "exports")


def test_json_config_and_cache_returns_copies():
    with tempfile.TemporaryDirectory() as tmp:
        path = os.path.join(tmp, "config.json")
        with open(path, "w", encoding="utf-8") as fh:
            json.dump({"resample": {"multiplier": 2}, "logging": {"level": "DEBUG"}}, fh)
        cfg = load_config_safe(path)
        assert cfg["resample"]["multiplier"] == 2.0
        assert cfg["logging"]["level"] == "DEBUG"

        cfg["resample"]["multiplier"] = 99.0
        again = load_config_safe(path)
        assert again["resample"]["multiplier"] == 2.0


def test_invalid_values_fall_back():
    with tempfile.TemporaryDirectory() as tmp:
        path = os.path.join(tmp, "config.json")
        with open(path, "w", encoding="utf-8") as fh:
            json.dump({"resample": {"multiplier": "fast"}, "logging": "loud"}, fh)
        with pytest.warns(UserWarning):
            cfg = load_config_safe(path, use_cache=False)
        assert cfg["resample"]["multiplier"] == 1.0
        assert cfg["logging"] == {"level": "INFO"}
