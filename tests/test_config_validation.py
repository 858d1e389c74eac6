"""Tests for config validation."""

import pytest

from latex_tailor.config import load_config


class TestConfigValidation:
    def test_invalid_timeout(self, tmp_path):
        """timeout below one second raises ValueError."""
        yaml = tmp_path / "bad.yaml"
        yaml.write_text("generation:\n  timeout: 0\n")
        with pytest.raises(ValueError, match="timeout"):
            load_config(yaml)

    def test_invalid_passes(self, tmp_path):
        yaml = tmp_path / "bad.yaml"
        yaml.write_text("typeset:\n  passes: 9\n")
        with pytest.raises(ValueError, match="passes"):
            load_config(yaml)

    def test_invalid_chunk_size(self, tmp_path):
        yaml = tmp_path / "bad.yaml"
        yaml.write_text("typeset:\n  chunk_size: 10\n")
        with pytest.raises(ValueError, match="chunk_size"):
            load_config(yaml)

    def test_empty_model(self, tmp_path):
        yaml = tmp_path / "bad.yaml"
        yaml.write_text("generation:\n  default_model: ''\n")
        with pytest.raises(ValueError, match="default_model"):
            load_config(yaml)

    def test_unknown_key(self, tmp_path):
        yaml = tmp_path / "bad.yaml"
        yaml.write_text("storage:\n  dbpath: x\n")
        with pytest.raises(TypeError):
            load_config(yaml)
