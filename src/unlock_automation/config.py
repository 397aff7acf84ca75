"""Application configuration using pydantic-settings."""

from enum import Enum
from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from unlock_automation.browser.models import SessionConfig


class Environment(str, Enum):
    """Application environment."""

    DEVELOPMENT = "development"
    STAGING = "staging"
    PRODUCTION = "production"


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    app_env: Environment = Environment.DEVELOPMENT
    log_level: str = "INFO"

    # Portal entry points
    unlock_url: str = "https://www.att.com/deviceunlock/unlockstep1"
    status_url: str = "https://www.att.com/deviceunlock/status"

    # Browser
    browser_headless: bool = True
    browser_timeout: int = Field(default=30000, ge=1000, le=120000)  # ms
    browser_slow_mo: int = Field(default=0, ge=0, le=1000)  # ms between actions

    # Form automation
    selector_timeout: int = Field(default=10000, ge=100, le=120000)  # ms, split across candidates
    step_settle_ms: int = Field(default=1000, ge=0, le=10000)
    portal_profile_path: str | None = None

    # Debugging
    debug_enabled: bool = False
    screenshot_dir: str = "./data/screenshots"

    @property
    def is_production(self) -> bool:
        """Check if running in production."""
        return self.app_env == Environment.PRODUCTION

    @property
    def is_development(self) -> bool:
        """Check if running in development."""
        return self.app_env == Environment.DEVELOPMENT

    def session_config(self) -> SessionConfig:
        """Build the browser session configuration."""
        return SessionConfig(
            headless=self.browser_headless,
            slow_mo=self.browser_slow_mo,
            timeout=self.browser_timeout,
        )


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


# Convenience access
settings = get_settings()
