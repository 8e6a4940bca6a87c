"""Unit tests for VocalCheckConfig."""

import os
from pathlib import Path

import pytest

from vocalcheck.config import API_KEY_ENV_VAR, DEFAULT_CONFIG, VocalCheckConfig
from vocalcheck.exceptions import ConfigError


def write_config(directory: str, text: str) -> str:
    path = Path(directory) / "vocalcheck.yaml"
    path.write_text(text, encoding="utf-8")
    return str(path)


@pytest.mark.unit
class TestVocalCheckConfig:
    """Test cases for VocalCheckConfig class."""

    def test_defaults_without_file(self):
        config = VocalCheckConfig()

        assert config.get('gemini.model') == "gemini-1.5-flash"
        assert config.get('audio.sample_rate') == 16000
        assert config.get('storage.history_slot') == "voiceAnalysisHistory"
        assert config.get('events.topic') == "session.events"

    def test_defaults_are_not_shared(self):
        config = VocalCheckConfig()
        config.set('audio.sample_rate', 44100)

        assert DEFAULT_CONFIG['audio']['sample_rate'] == 16000
        assert VocalCheckConfig().get('audio.sample_rate') == 16000

    def test_file_overrides_merge_with_defaults(self, temp_data_dir):
        path = write_config(temp_data_dir, "gemini:\n  model: gemini-1.5-pro\naudio:\n  channels: 2\n")

        config = VocalCheckConfig(path)

        assert config.get('gemini.model') == "gemini-1.5-pro"
        assert config.get('gemini.timeout_seconds') == 60
        assert config.get('audio.channels') == 2
        assert config.get('audio.sample_rate') == 16000

    def test_relative_paths_resolve_against_config_dir(self, temp_data_dir):
        path = write_config(temp_data_dir, "storage:\n  data_directory: store\nlogging:\n  file_path: logs/app.log\n")

        config = VocalCheckConfig(path)

        assert config.get('storage.data_directory') == str(Path(temp_data_dir) / "store")
        assert config.get('logging.file_path') == str(Path(temp_data_dir) / "logs/app.log")
        assert config.get_data_directory() == str((Path(temp_data_dir) / "store").absolute())

    def test_absolute_paths_kept(self, temp_data_dir):
        absolute = os.path.join(temp_data_dir, "elsewhere")
        path = write_config(temp_data_dir, f"storage:\n  data_directory: {absolute}\n")

        config = VocalCheckConfig(path)

        assert config.get('storage.data_directory') == absolute

    def test_empty_file_uses_defaults(self, temp_data_dir):
        path = write_config(temp_data_dir, "")

        config = VocalCheckConfig(path)

        assert config.get('gemini.model') == "gemini-1.5-flash"

    def test_missing_file(self, temp_data_dir):
        with pytest.raises(ConfigError, match="not found"):
            VocalCheckConfig(os.path.join(temp_data_dir, "missing.yaml"))

    def test_invalid_yaml(self, temp_data_dir):
        path = write_config(temp_data_dir, "gemini: [unclosed\n")

        with pytest.raises(ConfigError, match="Invalid YAML"):
            VocalCheckConfig(path)

    def test_non_mapping_document(self, temp_data_dir):
        path = write_config(temp_data_dir, "- just\n- a list\n")

        with pytest.raises(ConfigError, match="mapping"):
            VocalCheckConfig(path)

    def test_get_missing_key_returns_default(self):
        config = VocalCheckConfig()

        assert config.get('gemini.unknown') is None
        assert config.get('nothing.here', 'fallback') == 'fallback'
        assert config.get('gemini.model.deeper', 'fallback') == 'fallback'

    def test_set_creates_sections(self):
        config = VocalCheckConfig()

        config.set('ui.theme.name', 'dark')

        assert config.get('ui.theme.name') == 'dark'

    def test_api_key_from_config(self, monkeypatch):
        monkeypatch.setenv(API_KEY_ENV_VAR, "from-env")
        config = VocalCheckConfig()
        config.set('gemini.api_key', "from-config")

        assert config.get_api_key() == "from-config"

    def test_api_key_from_environment(self, monkeypatch):
        monkeypatch.setenv(API_KEY_ENV_VAR, "from-env")

        assert VocalCheckConfig().get_api_key() == "from-env"

    def test_api_key_missing(self, monkeypatch):
        monkeypatch.delenv(API_KEY_ENV_VAR, raising=False)

        with pytest.raises(ConfigError, match=API_KEY_ENV_VAR):
            VocalCheckConfig().get_api_key()
