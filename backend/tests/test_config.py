"""Tests for settings loading (YAML settings + secrets)."""
import pytest

from app.config import (
    DEFAULT_COLUMN_WIDTHS,
    AppSettings,
    ConsoleSettings,
    OpenAISettings,
    get_config,
    load_settings,
    reset_config,
)


@pytest.fixture(autouse=True)
def _clean_config():
    reset_config()
    yield
    reset_config()


class TestDefaults:
    def test_openai_defaults(self):
        cfg = OpenAISettings()
        assert cfg.upload_purpose == "assistants"
        assert cfg.upload_settle_seconds == 2.0
        assert cfg.default_upload_name == "document.pdf"
        assert cfg.base_url is None

    def test_console_defaults(self):
        cfg = ConsoleSettings()
        assert cfg.column_widths == DEFAULT_COLUMN_WIDTHS
        assert cfg.min_column_width == 50
        assert cfg.default_vector_store_id is None

    def test_partial_column_widths_are_filled(self):
        cfg = ConsoleSettings(column_widths={"File Name": 320})
        assert cfg.column_widths["File Name"] == 320
        assert cfg.column_widths["Actions"] == 100

    def test_negative_settle_rejected(self):
        with pytest.raises(ValueError):
            OpenAISettings(upload_settle_seconds=-1)


class TestLoadSettings:
    def test_missing_files_give_defaults(self, tmp_path):
        settings = load_settings(tmp_path / "none.yaml", tmp_path / "none.secrets.yaml")
        assert isinstance(settings, AppSettings)
        assert settings.server.port == 8000
        assert settings.secrets.openai.api_key is None

    def test_yaml_values_loaded(self, tmp_path):
        settings_file = tmp_path / "vsadmin.settings.yaml"
        settings_file.write_text(
            "server:\n  port: 9001\n"
            "logging:\n  level: debug\n"
            "openai:\n  upload_settle_seconds: 0.5\n"
            "console:\n  default_vector_store_id: vs_main\n",
            encoding="utf-8",
        )
        secrets_file = tmp_path / "vsadmin.secrets.yaml"
        secrets_file.write_text("openai:\n  api_key: sk-from-file\n", encoding="utf-8")

        settings = load_settings(settings_file, secrets_file)
        assert settings.server.port == 9001
        assert settings.logging.level == "debug"
        assert settings.openai.upload_settle_seconds == 0.5
        assert settings.console.default_vector_store_id == "vs_main"
        assert settings.openai_api_key() == "sk-from-file"

    def test_empty_yaml_is_defaults(self, tmp_path):
        settings_file = tmp_path / "empty.yaml"
        settings_file.write_text("", encoding="utf-8")
        settings = load_settings(settings_file, tmp_path / "missing.yaml")
        assert settings.logging.level == "info"


class TestApiKey:
    def test_env_fallback(self, monkeypatch):
        monkeypatch.setenv("OPENAI_API_KEY", "sk-from-env")
        assert AppSettings().openai_api_key() == "sk-from-env"

    def test_secrets_win_over_env(self, monkeypatch):
        monkeypatch.setenv("OPENAI_API_KEY", "sk-from-env")
        settings = AppSettings(secrets={"openai": {"api_key": "sk-secret"}})
        assert settings.openai_api_key() == "sk-secret"

    def test_no_key(self, monkeypatch):
        monkeypatch.delenv("OPENAI_API_KEY", raising=False)
        assert AppSettings().openai_api_key() is None


class TestGetConfig:
    def test_cached(self, monkeypatch, tmp_path):
        monkeypatch.chdir(tmp_path)
        first = get_config()
        assert get_config() is first

    def test_reset_reloads(self, monkeypatch, tmp_path):
        monkeypatch.chdir(tmp_path)
        first = get_config()
        reset_config()
        assert get_config() is not first
