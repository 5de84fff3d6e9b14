"""Configuration Management."""

from functools import lru_cache
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict
from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()


class Settings(BaseSettings):
    """Engine settings from environment."""

    model_config = SettingsConfigDict(
        env_prefix="GENUI_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",  # Ignore extra environment variables
    )

    # Logging
    log_level: str = Field(default="INFO", description="Log level")
    json_logs: bool = Field(default=False, description="Use JSON log format")

    # Bindings
    strict_function_args: bool = Field(
        default=False, description="Validate function arguments against their schema"
    )

    # Protocol limits
    max_message_bytes: int = Field(
        default=512 * 1024, gt=0, description="Max size of a single protocol message"
    )
    max_json_depth: int = Field(default=32, gt=0, description="Max nesting depth of a message")

    # Prompting
    default_root_id: str = Field(default="root", min_length=1, description="Root component id")

    # Capabilities
    inline_catalog_handling: str = Field(
        default="missingIds",
        pattern="^(none|missingIds|all)$",
        description="How catalogs are advertised to the server",
    )


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
