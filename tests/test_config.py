"""Tests for crm_voice.config."""

import pytest

from crm_voice.config import Config, VoiceSettings, load_config
from crm_voice.errors import ConfigError


@pytest.fixture(autouse=True)
def isolated(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    monkeypatch.delenv("CRM_VOICE_CONFIG", raising=False)


class TestConfig:
    def test_defaults(self):
        config = Config()
        assert config.get("voice.confidence_threshold") == 0.7
        assert config.get("session.max_history") == 50
        assert config.get("backend.url") is None

    def test_dotted_get_with_default(self):
        config = Config()
        assert config.get("voice.nonexistent", "fallback") == "fallback"
        assert config.get("voice.language.deeper", 1) == 1

    def test_override_merges_sections(self):
        config = Config({"voice": {"language": "fr-FR"}})
        assert config.get("voice.language") == "fr-FR"
        assert config.get("voice.speak_responses") is True

    def test_set_creates_sections(self):
        config = Config()
        config.set("plugins.extra.enabled", True)
        assert config.get("plugins.extra.enabled") is True

    def test_as_dict_is_a_copy(self):
        config = Config()
        config.as_dict()["voice"]["language"] = "xx"
        assert config.get("voice.language") == "en-US"


class TestLoadConfig:
    def test_missing_default_file_uses_defaults(self):
        assert load_config().get("voice.language") == "en-US"

    def test_missing_explicit_file_raises(self, tmp_path):
        with pytest.raises(ConfigError):
            load_config(str(tmp_path / "nope.yaml"))

    def test_reads_cwd_config(self, tmp_path):
        (tmp_path / "config.yaml").write_text("voice:\n  confidence_threshold: 0.5\n")
        assert load_config().get("voice.confidence_threshold") == 0.5

    def test_env_var(self, tmp_path, monkeypatch):
        path = tmp_path / "custom.yaml"
        path.write_text("context:\n  timezone: Asia/Tokyo\n")
        monkeypatch.setenv("CRM_VOICE_CONFIG", str(path))
        config = load_config()
        assert config.get("context.timezone") == "Asia/Tokyo"
        assert config.path == path

    def test_invalid_yaml(self, tmp_path):
        path = tmp_path / "bad.yaml"
        path.write_text("voice: [unclosed\n")
        with pytest.raises(ConfigError):
            load_config(str(path))

    def test_top_level_must_be_mapping(self, tmp_path):
        path = tmp_path / "list.yaml"
        path.write_text("- one\n- two\n")
        with pytest.raises(ConfigError):
            load_config(str(path))

    def test_empty_file(self, tmp_path):
        path = tmp_path / "empty.yaml"
        path.write_text("")
        assert load_config(str(path)).get("voice.language") == "en-US"


class TestVoiceSettings:
    def test_defaults(self):
        settings = VoiceSettings()
        assert (settings.language, settings.speak_responses, settings.activation_method,
                settings.continuous_listening, settings.confidence_threshold) == \
               ("en-US", True, "toggle", False, 0.7)

    def test_from_config(self):
        settings = VoiceSettings.from_config(Config({"voice": {
            "activation_method": "hold", "continuous_listening": True,
        }}))
        assert settings.activation_method == "hold"
        assert settings.continuous_listening is True

    def test_bad_activation_method(self):
        with pytest.raises(ConfigError):
            VoiceSettings(activation_method="clap")

    @pytest.mark.parametrize("threshold", [-0.1, 1.5])
    def test_threshold_range(self, threshold):
        with pytest.raises(ConfigError):
            VoiceSettings(confidence_threshold=threshold)
