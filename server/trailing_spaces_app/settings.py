"""
Trailing Spaces Service Settings

Configuration management using pydantic settings.
Loads from environment variables with TRAILING_SPACES_ prefix.
"""

from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import computed_field
from typing import List, Optional, Literal


class Settings(BaseSettings):
    """
    Service configuration settings.

    Environment variables:
    - TRAILING_SPACES_API_KEYS_RAW: Comma-separated list of valid API keys (empty: no auth)
    - TRAILING_SPACES_ALLOWED_ORIGINS_RAW: Comma-separated list of allowed CORS origins
    - TRAILING_SPACES_CONFIG_PATH: YAML file with the matching settings (default: built-in defaults)
    - TRAILING_SPACES_LOG_LEVEL: Overrides the logLevel of the config file
    - TRAILING_SPACES_DEBUG: Log everything, overriding the log level (default: false)
    """

    model_config = SettingsConfigDict(
        env_prefix="TRAILING_SPACES_",
        env_file=".env",
        extra="ignore",
    )

    # Raw string fields for comma-separated values
    api_keys_raw: str = ""
    allowed_origins_raw: str = ""

    # Matching settings file
    config_path: Optional[str] = None

    log_level: Optional[Literal["none", "error", "warn", "info", "log"]] = None

    # Debug mode
    debug: bool = False

    @computed_field
    @property
    def api_keys(self) -> List[str]:
        """Parse comma-separated API keys into list."""
        if not self.api_keys_raw:
            return []
        return [v.strip() for v in self.api_keys_raw.split(",") if v.strip()]

    @computed_field
    @property
    def allowed_origins(self) -> List[str]:
        """Parse comma-separated allowed origins into list."""
        if not self.allowed_origins_raw:
            return []
        return [v.strip() for v in self.allowed_origins_raw.split(",") if v.strip()]


# Global settings instance
settings = Settings()
