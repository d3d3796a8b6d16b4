import logging

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
from dotenv import load_dotenv

load_dotenv()


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="allow",  # Allow extra fields from .env file
    )

    # Healing configuration file (YAML, see config_loader.py)
    HEALING_CONFIG_PATH: str = Field(default="config/self_healing.yaml", description="Path to the self-healing YAML configuration")

    # Logging Configuration
    LOG_LEVEL: str = Field(default="INFO", description="Root log level: DEBUG, INFO, WARNING, ERROR or CRITICAL")
    LOG_DIR: str = Field(default="logs", description="Directory for rotating log files")
    STRUCTURED_LOGGING: bool = Field(default=False, description="Write JSON log records to the console as well as to files")

    @field_validator('LOG_LEVEL')
    @classmethod
    def validate_log_level(cls, v):
        """Validate that LOG_LEVEL names a standard logging level."""
        level = str(v).upper()
        if not isinstance(logging.getLevelName(level), int):
            raise ValueError(f"LOG_LEVEL must be a standard logging level, got '{v}'")
        return level


settings = Settings()
