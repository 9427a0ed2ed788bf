# Settings management (reads env vars/secrets)
# magicstream/core/config.py

import json
import logging
import os
from functools import lru_cache
from typing import Annotated, List, Optional, Union

from pydantic import Field, SecretStr, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict

logging.basicConfig(level=os.environ.get("LOG_LEVEL", "INFO").upper())
logger = logging.getLogger(__name__)

class Settings(BaseSettings):
    """
    Application configuration settings loaded from environment variables or .env file.
    """
    # --- Project Info ---
    PROJECT_NAME: str = Field("MagicStream Movies API", validation_alias="PROJECT_NAME")
    VERSION: str = Field("0.1.0", validation_alias="APP_VERSION")

    # --- Logging ---
    LOG_LEVEL: str = Field("INFO", validation_alias="LOG_LEVEL")

    # --- Server ---
    HOST: str = Field("0.0.0.0", validation_alias="HOST")
    PORT: int = Field(8081, validation_alias="PORT")

    # --- Database (MongoDB) ---
    MONGODB_URI: SecretStr = Field(..., validation_alias="MONGODB_URI")
    DATABASE_NAME: str = Field("magic-stream-movies", validation_alias="DATABASE_NAME")
    MONGODB_TIMEOUT_MS: int = Field(5000, validation_alias="MONGODB_TIMEOUT_MS")

    # --- Cache (Redis) ---
    # Caching is skipped entirely when no URL is configured
    REDIS_URL: Optional[SecretStr] = Field(None, validation_alias="REDIS_URL")
    CACHE_TTL_MOVIES: int = Field(
        default=3600,  # 1 hour
        validation_alias="CACHE_TTL_MOVIES",
        description="Time-to-live for cached movie documents in seconds"
    )

    # --- Authentication (JWT) ---
    SECRET_KEY: SecretStr = Field(..., validation_alias="SECRET_KEY")
    SECRET_REFRESH_KEY: SecretStr = Field(..., validation_alias="SECRET_REFRESH_KEY")
    JWT_ALGORITHM: str = Field("HS256", validation_alias="JWT_ALGORITHM")
    ACCESS_TOKEN_EXPIRE_MINUTES: int = Field(
        default=24 * 60,
        validation_alias="ACCESS_TOKEN_EXPIRE_MINUTES",
        description="Lifetime of access tokens issued at login"
    )
    REFRESH_TOKEN_EXPIRE_MINUTES: int = Field(
        default=7 * 24 * 60,
        validation_alias="REFRESH_TOKEN_EXPIRE_MINUTES",
        description="Lifetime of refresh tokens issued at login"
    )

    # --- CORS ---
    # Expects a comma-separated string in env var like "http://localhost:3000,https://*.example.com"
    BACKEND_CORS_ORIGINS: Annotated[List[str], NoDecode] = Field(
        default=["*"],
        validation_alias="BACKEND_CORS_ORIGINS"
    )

    @field_validator("BACKEND_CORS_ORIGINS", mode='before')
    @classmethod
    def assemble_cors_origins(cls, v: Union[str, List[str]]) -> Union[List[str], str]:
        if v == "*":
            return ["*"]
        if isinstance(v, str) and v.startswith("["):
            return json.loads(v)
        if isinstance(v, str):
            return [i.strip() for i in v.split(",") if i.strip()]
        elif isinstance(v, list):
            return v
        raise ValueError(f"Invalid BACKEND_CORS_ORIGINS format: {v}")

    @field_validator("LOG_LEVEL")
    @classmethod
    def normalize_log_level(cls, v: str) -> str:
        level = v.upper()
        if level not in logging.getLevelNamesMapping():
            raise ValueError(f"Unknown LOG_LEVEL: {v}")
        return level

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding='utf-8',
        case_sensitive=False,
        extra='ignore'
    )

# Use lru_cache to create a singleton instance of the settings
@lru_cache()
def get_settings() -> Settings:
    """Returns the application settings instance."""
    logger.info("Attempting to load application settings...")
    try:
        settings_instance = Settings()
        # Log some non-sensitive settings for verification
        logger.info(f"Settings loaded successfully for Project: {settings_instance.PROJECT_NAME}")
        logger.info(f"Log Level: {settings_instance.LOG_LEVEL}")
        logger.info(f"Bind address: {settings_instance.HOST}:{settings_instance.PORT}")
        logger.info(f"Database: {settings_instance.DATABASE_NAME}")
        logger.info(f"Cache enabled: {settings_instance.REDIS_URL is not None}")
        logger.info(f"CORS Origins: {settings_instance.BACKEND_CORS_ORIGINS}")
        # DO NOT log SecretStr values directly in production logs!
        return settings_instance
    except Exception as e:
        logger.critical(f"CRITICAL ERROR: Failed to load application settings: {e}", exc_info=True)
        raise RuntimeError(f"Could not load settings: {e}")


# Create a single settings instance to be imported by other modules
settings: Settings = get_settings()
