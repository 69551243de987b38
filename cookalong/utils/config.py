"""Configuration management for the cook-along service.

Loads environment variables from system environment and .env file.
Priority order: system environment > .env file > hardcoded defaults
"""

import os
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv


# Load .env file (if exists, silently continues if missing)
load_dotenv()


def _env_flag(name: str, default: str) -> bool:
    return os.getenv(name, default).lower() in ("true", "1", "yes")


class Config:
    """Application configuration loaded from environment variables."""

    def __init__(self) -> None:
        """Initialize configuration from environment variables."""
        self.GEMINI_API_KEY: str = os.getenv("GEMINI_API_KEY", "")
        # Text model used for recipe generation, tips, translation and adaptation
        self.GEMINI_MODEL: str = os.getenv("GEMINI_MODEL", "gemini-2.5-flash")
        # Image model used to picture generated recipes
        self.IMAGE_MODEL: str = os.getenv("IMAGE_MODEL", "imagen-4.0-generate-001")
        # Temperature: 0.0 = deterministic, 1.0 = max randomness
        self.TEMPERATURE: float = float(os.getenv("TEMPERATURE", "0.7"))
        # Number of recipes generated for a search term or category
        self.SEARCH_RESULTS: int = int(os.getenv("SEARCH_RESULTS", "5"))
        # Generated images above this size are rejected
        self.MAX_IMAGE_SIZE_MB: int = int(os.getenv("MAX_IMAGE_SIZE_MB", "5"))

        # Retry configuration for transient Gemini failures (exponential backoff)
        self.MAX_RETRIES: int = int(os.getenv("MAX_RETRIES", "3"))
        self.DELAY_BETWEEN_RETRIES: int = int(os.getenv("DELAY_BETWEEN_RETRIES", "1"))

        # Remote favorites (authenticated users) live in Supabase
        self.USE_REMOTE_FAVORITES: bool = _env_flag("USE_REMOTE_FAVORITES", "true")
        self.SUPABASE_URL: Optional[str] = os.getenv("SUPABASE_URL")
        self.SUPABASE_ANON_KEY: Optional[str] = os.getenv("SUPABASE_ANON_KEY")
        self.FAVORITES_TABLE: str = os.getenv("FAVORITES_TABLE", "user_favorites")

        # Guest favorites are a single JSON list, overwritten on each change
        self.GUEST_FAVORITES_PATH: Path = Path(
            os.getenv(
                "GUEST_FAVORITES_PATH",
                str(Path.home() / ".cookalong" / "recipeGuestFavorites.json"),
            )
        ).expanduser()

    def validate(self) -> None:
        """Validate required configuration.

        Missing credentials are fatal at startup, before any session exists.

        Raises:
            ValueError: If required API keys are missing or invalid values provided.
        """
        if not self.GEMINI_API_KEY:
            raise ValueError("GEMINI_API_KEY environment variable is required")
        if self.USE_REMOTE_FAVORITES and not (self.SUPABASE_URL and self.SUPABASE_ANON_KEY):
            raise ValueError(
                "SUPABASE_URL and SUPABASE_ANON_KEY are required when USE_REMOTE_FAVORITES=true"
            )
        if not (0.0 <= self.TEMPERATURE <= 1.0):
            raise ValueError(f"TEMPERATURE must be between 0.0 and 1.0, got: {self.TEMPERATURE}")
        if self.SEARCH_RESULTS < 1:
            raise ValueError(f"SEARCH_RESULTS must be at least 1, got: {self.SEARCH_RESULTS}")
        if self.MAX_RETRIES < 1:
            raise ValueError(f"MAX_RETRIES must be at least 1, got: {self.MAX_RETRIES}")
        if self.DELAY_BETWEEN_RETRIES < 1:
            raise ValueError(
                f"DELAY_BETWEEN_RETRIES must be at least 1 second, got: {self.DELAY_BETWEEN_RETRIES}"
            )


# Module-level config instance; validated by the entry point at startup
config = Config()
