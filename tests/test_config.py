from __future__ import annotations

from pathlib import Path

import pytest

from json_grid_editor.config import Settings, load_settings
from json_grid_editor.errors import ConfigError


def test_defaults():
    settings = load_settings(env={})
    assert settings == Settings()
    assert settings.max_columns == 20
    assert settings.max_upload_size_bytes == 1024 * 1024


def test_values_from_environment(monkeypatch, tmp_path):
    monkeypatch.setenv("MAX_KEYS", "10")
    monkeypatch.setenv("PORT", "9000")
    monkeypatch.setenv("JSON_GRID_DATA_DIR", str(tmp_path))
    settings = load_settings(dotenv=False)
    assert settings.max_columns == 10
    assert settings.server_port == 9000
    assert settings.data_dir == Path(tmp_path)


def test_bad_integers_fall_back_to_defaults(caplog):
    settings = load_settings(env={"MAX_KEYS": "many", "MAX_UPLOAD_SIZE_MB": "-3"})
    assert settings.max_columns == 20
    assert settings.max_upload_size_mb == 1
    assert "MAX_KEYS" in caplog.text


def test_invalid_default_id():
    with pytest.raises(ConfigError):
        load_settings(env={"JSON_GRID_DEFAULT_ID": "../x"})
