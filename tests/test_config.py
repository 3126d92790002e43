"""
Tests for configuration loading.
"""
import json
import tempfile
import os
import pytest
from mixture_em import (
    load_config,
    DEFAULT_MAX_ITER,
    DEFAULT_TOL,
    DEFAULT_INIT_MU,
)


class TestLoadConfig:
    """Tests for load_config function."""

    def test_load_config_defaults(self):
        """Test loading config with defaults."""
        with tempfile.NamedTemporaryFile(mode='w', suffix='.json', delete=False) as f:
            json.dump({}, f)
            config_path = f.name

        try:
            config = load_config(config_path)

            assert config['max_iter'] == DEFAULT_MAX_ITER
            assert config['tol'] == DEFAULT_TOL
            assert config['init_mu'] == DEFAULT_INIT_MU
            assert config['data_path'] is None
            assert config['plot'] is True
            assert config['animate_history'] is False
        finally:
            os.unlink(config_path)

    def test_load_config_custom_values(self):
        """Test loading config with custom values."""
        custom_config = {
            "data_path": "sample.txt",
            "init_mu": [1.0, 2.0, 3.0],
            "init_sigma": [0.5, 0.5, 0.5],
            "init_ratio": [1, 1, 1],
            "max_iter": 50,
            "tol": 1e-4,
        }

        with tempfile.NamedTemporaryFile(mode='w', suffix='.json', delete=False) as f:
            json.dump(custom_config, f)
            config_path = f.name

        try:
            config = load_config(config_path)

            assert config['data_path'] == "sample.txt"
            assert config['init_mu'] == [1.0, 2.0, 3.0]
            assert config['init_ratio'] == [1, 1, 1]
            assert config['max_iter'] == 50
            assert config['tol'] == 1e-4
        finally:
            os.unlink(config_path)

    def test_load_config_missing_file(self, capsys):
        """Test loading config when file doesn't exist."""
        config = load_config("nonexistent_file.json")

        assert config['max_iter'] == DEFAULT_MAX_ITER
        assert "not found" in capsys.readouterr().out

    def test_load_config_invalid_json(self):
        """Test that malformed JSON raises."""
        with tempfile.NamedTemporaryFile(mode='w', suffix='.json', delete=False) as f:
            f.write("{not json")
            config_path = f.name

        try:
            with pytest.raises(json.JSONDecodeError):
                load_config(config_path)
        finally:
            os.unlink(config_path)
