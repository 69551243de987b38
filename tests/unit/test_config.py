"""Unit tests for configuration management."""

from pathlib import Path

import pytest

from cookalong.utils.config import Config


@pytest.fixture
def remote_env(monkeypatch):
    """Environment with every required key present."""
    monkeypatch.setenv("GEMINI_API_KEY", "gemini_key")
    monkeypatch.setenv("USE_REMOTE_FAVORITES", "true")
    monkeypatch.setenv("SUPABASE_URL", "https://project.supabase.co")
    monkeypatch.setenv("SUPABASE_ANON_KEY", "anon_key")


class TestConfigInitialization:
    """Test Config class initialization and environment variable loading."""

    def test_config_loads_default_values(self, monkeypatch):
        """Test that Config uses default values when env vars not set."""
        for name in (
            "GEMINI_MODEL",
            "IMAGE_MODEL",
            "TEMPERATURE",
            "SEARCH_RESULTS",
            "MAX_RETRIES",
            "DELAY_BETWEEN_RETRIES",
            "FAVORITES_TABLE",
            "USE_REMOTE_FAVORITES",
            "GUEST_FAVORITES_PATH",
        ):
            monkeypatch.delenv(name, raising=False)

        config = Config()

        assert config.GEMINI_MODEL == "gemini-2.5-flash"
        assert config.IMAGE_MODEL == "imagen-4.0-generate-001"
        assert config.TEMPERATURE == 0.7
        assert config.SEARCH_RESULTS == 5
        assert config.MAX_RETRIES == 3
        assert config.DELAY_BETWEEN_RETRIES == 1
        assert config.FAVORITES_TABLE == "user_favorites"
        assert config.USE_REMOTE_FAVORITES is True
        assert config.GUEST_FAVORITES_PATH.name == "recipeGuestFavorites.json"

    def test_config_loads_from_environment(self, monkeypatch, tmp_path):
        """Test that Config loads and converts values from environment variables."""
        monkeypatch.setenv("GEMINI_MODEL", "custom-model")
        monkeypatch.setenv("TEMPERATURE", "0.2")
        monkeypatch.setenv("SEARCH_RESULTS", "3")
        monkeypatch.setenv("FAVORITES_TABLE", "favorites_v2")
        monkeypatch.setenv("USE_REMOTE_FAVORITES", "false")
        monkeypatch.setenv("GUEST_FAVORITES_PATH", str(tmp_path / "guest.json"))

        config = Config()

        assert config.GEMINI_MODEL == "custom-model"
        assert config.TEMPERATURE == 0.2
        assert isinstance(config.SEARCH_RESULTS, int)
        assert config.SEARCH_RESULTS == 3
        assert config.FAVORITES_TABLE == "favorites_v2"
        assert config.USE_REMOTE_FAVORITES is False
        assert config.GUEST_FAVORITES_PATH == Path(tmp_path / "guest.json")


class TestConfigValidation:
    """Test Config validation logic."""

    def test_validate_succeeds_with_all_keys(self, remote_env):
        """Test that validate() passes when required keys are present."""
        Config().validate()

    def test_validate_raises_error_for_missing_gemini_key(self, remote_env, monkeypatch):
        """Test that validate() raises ValueError if GEMINI_API_KEY missing."""
        monkeypatch.setenv("GEMINI_API_KEY", "")

        with pytest.raises(ValueError, match="GEMINI_API_KEY"):
            Config().validate()

    def test_validate_requires_supabase_when_remote_enabled(self, remote_env, monkeypatch):
        """Test that validate() requires Supabase credentials for remote favorites."""
        monkeypatch.delenv("SUPABASE_ANON_KEY", raising=False)

        with pytest.raises(ValueError, match="SUPABASE_URL and SUPABASE_ANON_KEY"):
            Config().validate()

    def test_validate_allows_missing_supabase_when_remote_disabled(self, monkeypatch):
        """Test that guest-only setups do not need Supabase."""
        monkeypatch.setenv("GEMINI_API_KEY", "key")
        monkeypatch.setenv("USE_REMOTE_FAVORITES", "false")
        monkeypatch.delenv("SUPABASE_URL", raising=False)
        monkeypatch.delenv("SUPABASE_ANON_KEY", raising=False)

        Config().validate()  # Should not raise

    @pytest.mark.parametrize(
        "name,value",
        [
            ("TEMPERATURE", "1.5"),
            ("SEARCH_RESULTS", "0"),
            ("MAX_RETRIES", "0"),
            ("DELAY_BETWEEN_RETRIES", "0"),
        ],
    )
    def test_validate_rejects_out_of_range_values(self, remote_env, monkeypatch, name, value):
        """Test that validate() rejects numeric settings outside their range."""
        monkeypatch.setenv(name, value)

        with pytest.raises(ValueError, match=name):
            Config().validate()
