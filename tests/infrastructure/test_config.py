"""Unit tests for environment-driven settings."""

from pathlib import Path

from colibri.infrastructure.config import DEFAULT_TIMEZONE, Settings


class TestSettings:

    def test_defaults(self):
        settings = Settings.from_env({})
        assert settings.timezone == DEFAULT_TIMEZONE
        assert settings.user is None
        assert settings.log_level == "WARNING"
        assert settings.store_path.name == "colibri.json"

    def test_overrides(self, tmp_path):
        settings = Settings.from_env({
            "COLIBRI_DATA_DIR": str(tmp_path),
            "COLIBRI_TIMEZONE": "UTC",
            "COLIBRI_USER": "ops@adf",
            "COLIBRI_LOG_LEVEL": "debug",
        })
        assert settings.store_path == Path(tmp_path) / "colibri.json"
        assert settings.import_digest_path == Path(tmp_path) / "last_import.sha256"
        assert settings.timezone == "UTC"
        assert settings.user == "ops@adf"
        assert settings.log_level == "DEBUG"
