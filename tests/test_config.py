"""Tests for configuration settings."""

from datetime import timedelta

import pytest

from github_mirror.config import (
    DEV_SESSION_SECRET,
    ConfigurationError,
    GitHubConfig,
    Settings,
    SyncConfig,
    get_settings,
)


class TestSettings:
    """Tests for Settings class."""

    def test_settings_defaults(self):
        """Test default values are correct."""
        settings = Settings(_env_file=None)

        assert settings.database_url == "sqlite+aiosqlite:///./github_mirror.db"
        assert settings.github_token == ""
        assert settings.environment == "development"
        assert settings.log_level == "INFO"
        assert settings.web.frontend_origin == "http://localhost:4200"
        assert settings.web.port == 3000

    def test_settings_from_env(self, monkeypatch):
        """Test environment variables override defaults."""
        monkeypatch.setenv("DATABASE_URL", "sqlite+aiosqlite:///./test.db")
        monkeypatch.setenv("GITHUB_TOKEN", "test_token_123")
        monkeypatch.setenv("ENVIRONMENT", "production")
        monkeypatch.setenv("LOG_LEVEL", "DEBUG")

        settings = Settings(_env_file=None)

        assert settings.database_url == "sqlite+aiosqlite:///./test.db"
        assert settings.github_token == "test_token_123"
        assert settings.environment == "production"
        assert settings.log_level == "DEBUG"

    def test_nested_sections_from_env(self, monkeypatch):
        """Nested sections use a double underscore delimiter."""
        monkeypatch.setenv("GITHUB__CLIENT_ID", "Iv1.abc")
        monkeypatch.setenv("SYNC__MEMBER_PAGE_LIMIT", "0")
        monkeypatch.setenv("SYNC__FAILURE_POLICY", "best_effort")
        monkeypatch.setenv("WEB__FRONTEND_ORIGIN", "https://mirror.example")

        settings = Settings(_env_file=None)

        assert settings.github.client_id == "Iv1.abc"
        assert settings.sync.member_page_limit == 0
        assert settings.sync.failure_policy == "best_effort"
        assert settings.web.frontend_origin == "https://mirror.example"

    def test_settings_environment_validation(self, monkeypatch):
        """Test that invalid environment value is rejected."""
        monkeypatch.setenv("ENVIRONMENT", "invalid")

        with pytest.raises(ValueError):
            Settings(_env_file=None)

    def test_settings_log_level_validation(self, monkeypatch):
        """Test that invalid log level is rejected."""
        monkeypatch.setenv("LOG_LEVEL", "INVALID")

        with pytest.raises(ValueError):
            Settings(_env_file=None)

    def test_failure_policy_validation(self, monkeypatch):
        monkeypatch.setenv("SYNC__FAILURE_POLICY", "sometimes")

        with pytest.raises(ValueError):
            Settings(_env_file=None)

    def test_settings_case_insensitive(self, monkeypatch):
        """Test that env var names are case-insensitive."""
        monkeypatch.setenv("database_url", "sqlite+aiosqlite:///./lower.db")
        monkeypatch.setenv("GITHUB_TOKEN", "upper_token")

        settings = Settings(_env_file=None)

        assert settings.database_url == "sqlite+aiosqlite:///./lower.db"
        assert settings.github_token == "upper_token"


class TestSyncConfig:
    def test_defaults(self):
        config = SyncConfig()

        assert config.page_size == 100
        assert config.release_page_size == 50
        assert config.member_page_limit == 1
        assert config.failure_policy == "fail_fast"
        assert config.fork_failure_policy == "best_effort"
        assert (config.fork_max_commits, config.fork_max_pulls, config.fork_max_issues) == (
            2000,
            1000,
            500,
        )

    def test_lease_ttl(self):
        assert SyncConfig(lease_ttl_minutes=5).lease_ttl == timedelta(minutes=5)

    @pytest.mark.parametrize("page_size", [0, 101])
    def test_page_size_is_capped(self, page_size):
        with pytest.raises(ValueError):
            SyncConfig(page_size=page_size)

    def test_negative_member_page_limit_rejected(self):
        with pytest.raises(ValueError):
            SyncConfig(member_page_limit=-1)


class TestGitHubConfig:
    def test_complete_credentials_pass(self):
        GitHubConfig(client_id="Iv1.abc", client_secret="shh").require_oauth_credentials()

    def test_missing_credentials_raise(self):
        with pytest.raises(ConfigurationError, match="GITHUB__CLIENT_ID"):
            GitHubConfig().require_oauth_credentials()


class TestLoggingConfig:
    def test_defaults(self):
        settings = Settings(_env_file=None)

        assert settings.logging.log_file is None
        assert settings.logging.rotation == "10 MB"
        assert settings.logging.retention == "7 days"
        assert settings.logging.serialize is False

    def test_from_env(self, monkeypatch):
        monkeypatch.setenv("LOGGING__LOG_FILE", "/var/log/ghmirror.log")
        monkeypatch.setenv("LOGGING__SERIALIZE", "true")

        settings = Settings(_env_file=None)

        assert settings.logging.log_file == "/var/log/ghmirror.log"
        assert settings.logging.serialize is True


class TestEnvironment:
    @pytest.mark.parametrize(
        ("environment", "expected"),
        [("development", False), ("staging", False), ("production", True)],
    )
    def test_is_production(self, environment, expected):
        assert Settings(_env_file=None, environment=environment).is_production is expected

    def test_development_session_secret_is_default(self):
        assert Settings(_env_file=None).web.session_secret == DEV_SESSION_SECRET


class TestGetSettings:
    """Tests for get_settings function."""

    def test_get_settings_returns_settings(self):
        """Test that get_settings returns a Settings instance."""
        get_settings.cache_clear()

        settings = get_settings()

        assert isinstance(settings, Settings)

    def test_get_settings_cached(self):
        """Test that get_settings returns cached instance."""
        get_settings.cache_clear()

        settings1 = get_settings()
        settings2 = get_settings()

        assert settings1 is settings2
