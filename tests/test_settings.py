"""
Tests for application settings.
"""

from hwcalc.settings import Settings


class TestSettings:
    """Tests for environment-driven settings."""

    def test_defaults(self, monkeypatch):
        monkeypatch.delenv("API_PORT", raising=False)
        monkeypatch.delenv("LOG_LEVEL", raising=False)
        settings = Settings()
        assert settings.API_PORT == 8000
        assert settings.LOG_LEVEL == "INFO"

    def test_reads_environment(self, monkeypatch):
        monkeypatch.setenv("API_PORT", "9001")
        monkeypatch.setenv("LOG_LEVEL", "DEBUG")
        settings = Settings()
        assert settings.API_PORT == 9001
        assert settings.LOG_LEVEL == "DEBUG"

    def test_dotenv_is_left_to_launcher(self):
        """run.py loads .env; Settings does not read it a second time."""
        assert Settings.model_config.get("env_file") is None
