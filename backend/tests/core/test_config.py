"""Tests for application configuration."""
import pytest
from pydantic import ValidationError

from core.config import Settings


class TestDefaults:
    """Tests for default settings."""

    def test_default_paths_have_expected_placeholders(self) -> None:
        """Default endpoint templates carry the placeholders the client fills in."""
        settings = Settings(_env_file=None)

        assert ":position_id" in settings.clockin_path
        assert ":position_id" in settings.clockout_path
        assert ":anumber" in settings.open_shift_path
        for name in (":position_id", ":start", ":end"):
            assert name in settings.summary_path

    def test_redis_disabled_by_default(self) -> None:
        """The in-memory cache is used unless Redis is enabled."""
        assert Settings(_env_file=None).redis_enabled is False

    def test_no_session_cookies_by_default(self) -> None:
        """No cookies are seeded unless configured."""
        assert Settings(_env_file=None).aggietime_cookies == {}


class TestEnvironment:
    """Tests for settings read from environment variables."""

    def test_cookies_parsed_from_json(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """AGGIETIME_COOKIES is read as a JSON object."""
        monkeypatch.setenv("AGGIETIME_COOKIES", '{"JSESSIONID": "abc", "SSO": "def"}')

        settings = Settings(_env_file=None)

        assert settings.aggietime_cookies == {"JSESSIONID": "abc", "SSO": "def"}

    def test_ttls_read_from_env(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Cache TTLs can be overridden."""
        monkeypatch.setenv("USER_CACHE_TTL_SECONDS", "900")
        monkeypatch.setenv("OPEN_SHIFT_TTL_SECONDS", "30")

        settings = Settings(_env_file=None)

        assert settings.user_cache_ttl_seconds == 900
        assert settings.open_shift_ttl_seconds == 30


class TestValidation:
    """Tests for settings validation."""

    @pytest.mark.parametrize(
        "field", ["user_cache_ttl_seconds", "open_shift_ttl_seconds", "past_week_ttl_seconds"],
    )
    def test_ttls_must_be_positive(self, field: str) -> None:
        """A TTL of zero is rejected."""
        with pytest.raises(ValidationError):
            Settings(_env_file=None, **{field: 0})

    def test_retry_attempts_at_least_one(self) -> None:
        """At least one attempt is required."""
        with pytest.raises(ValidationError):
            Settings(_env_file=None, retry_attempts=0)
