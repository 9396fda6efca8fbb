from pydantic import field_validator
from pydantic_settings import BaseSettings

from tasknotes.utils.validation import validate_hex_color


class Settings(BaseSettings):
    """Application settings."""

    # Database
    DATABASE_URL: str = "sqlite+aiosqlite:///./tasknotes.db"
    ECHO_SQL: bool = False

    # Categories
    DEFAULT_CATEGORY_COLOR: str = "#6200ee"
    # Rewrite notes.category when a category is renamed
    PROPAGATE_CATEGORY_RENAMES: bool = True

    # Logging
    LOG_LEVEL: str = "INFO"
    LOG_JSON: bool = False

    @field_validator("DEFAULT_CATEGORY_COLOR")
    @classmethod
    def check_default_color(cls, v):
        if not validate_hex_color(v):
            raise ValueError("DEFAULT_CATEGORY_COLOR must be a hex color")
        return v

    @field_validator("LOG_LEVEL", mode="before")
    @classmethod
    def normalize_log_level(cls, v):
        if isinstance(v, str):
            return v.strip().upper()
        return v

    model_config = {
        "env_file": ".env",
        "env_prefix": "TASKNOTES_",
        "case_sensitive": True,
        "extra": "ignore",
    }


# Global settings instance
settings = Settings()
