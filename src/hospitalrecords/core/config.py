"""
Settings for the Hospital Records API.

Every value comes from the environment (or a .env file found in the working
directory or one of its parents). Each concern has its own settings class with
its own variable prefix: MONGO_, SECURITY_, CORS_ and LOG_.
"""

import json
import os
from pathlib import Path
from typing import List, Optional

from pydantic import Field, validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class DatabaseSettings(BaseSettings):
    """Database configuration settings."""

    model_config = SettingsConfigDict(env_prefix="MONGO_")

    uri: str = Field(
        default="", description="MongoDB connection URI"
    )
    db_name: str = Field(default="hospital", description="MongoDB database name")
    server_selection_timeout_ms: int = Field(
        default=15000, description="Server selection timeout used for the startup ping"
    )

    @validator("uri")
    def validate_mongo_uri(cls, v: str) -> str:
        """Validate MongoDB URI format."""
        if not v:
            raise ValueError("MongoDB URI is required. Please set MONGO_URI environment variable.")
        if not v.startswith(("mongodb://", "mongodb+srv://")):
            raise ValueError(
                "MongoDB URI must start with 'mongodb://' or 'mongodb+srv://'"
            )
        return v


class SecuritySettings(BaseSettings):
    """Session and cookie configuration settings."""

    model_config = SettingsConfigDict(env_prefix="SECURITY_")

    secret_key: str = Field(
        default="your-secret-key-change-in-production", description="Session signing key"
    )
    session_cookie: str = Field(default="hospital_session", description="Session cookie name")
    session_max_age: int = Field(
        default=14 * 24 * 60 * 60, description="Session lifetime in seconds"
    )
    https_only: bool = Field(default=False, description="Only send the session cookie over HTTPS")

    @validator("secret_key")
    def validate_secret_key(cls, v: str) -> str:
        """Validate secret key strength."""
        if len(v) < 32:
            raise ValueError("Secret key must be at least 32 characters long")
        return v

    @validator("session_max_age")
    def validate_session_max_age(cls, v: int) -> int:
        if v <= 0:
            raise ValueError("Session max age must be positive")
        return v


class CORSSettings(BaseSettings):
    """CORS configuration settings."""

    model_config = SettingsConfigDict(env_prefix="CORS_")

    # Browser clients carry the session cookie, so origins must be explicit
    allowed_origins: List[str] = Field(default=["http://localhost:3000"], description="Origins allowed to call the API")
    allowed_methods: List[str] = Field(default=["GET", "POST", "PUT", "DELETE"], description="Methods exposed cross-origin")
    allowed_headers: List[str] = Field(default=["Content-Type", "X-Request-ID"], description="Request headers accepted cross-origin")
    allow_credentials: bool = Field(default=True, description="Send the session cookie on cross-origin calls")

    @validator("allowed_origins", pre=True)
    def parse_allowed_origins(cls, v):
        """Accept a JSON list or a comma-separated string."""
        if not isinstance(v, str):
            return v
        v = v.strip()
        if v.startswith("["):
            try:
                return json.loads(v)
            except json.JSONDecodeError:
                raise ValueError("CORS_ALLOWED_ORIGINS is not a valid JSON list")
        return [origin.strip() for origin in v.split(",") if origin.strip()]


class LoggingSettings(BaseSettings):
    """Logging configuration settings."""

    model_config = SettingsConfigDict(env_prefix="LOG_")

    level: str = Field(default="INFO", description="Logging level")
    format: str = Field(default="json", description="Log format (json or text)")

    @validator("level")
    def validate_log_level(cls, v: str) -> str:
        """Validate logging level."""
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if v.upper() not in valid_levels:
            raise ValueError(f"Log level must be one of: {valid_levels}")
        return v.upper()

    @validator("format")
    def validate_log_format(cls, v: str) -> str:
        if v.lower() not in ("json", "text"):
            raise ValueError("Log format must be 'json' or 'text'")
        return v.lower()


class Settings(BaseSettings):
    """Top-level settings; nested groups hang off it by concern."""

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", case_sensitive=False, extra="ignore"
    )

    # Application settings
    app_name: str = Field(default="Hospital API", description="Application name")
    app_version: str = Field(default="1.0.0", description="Application version")
    app_env: str = Field(default="development", description="Application environment")
    debug: bool = Field(default=False, description="Debug mode")
    port: int = Field(default=3000, description="Application port")
    host: str = Field(default="0.0.0.0", description="Application host")

    # Comma-separated key:user pairs accepted by POST /auth/login
    api_keys: str = Field(default="", description="API keys that may open a session")

    # Sub-settings
    database: DatabaseSettings = Field(default_factory=DatabaseSettings)
    security: SecuritySettings = Field(default_factory=SecuritySettings)
    cors: CORSSettings = Field(default_factory=CORSSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)

    def __init__(self, **kwargs):
        super().__init__(**kwargs)

        # Nested settings read their own prefixed variables, not the parent's
        self.database = DatabaseSettings()
        self.security = SecuritySettings()
        self.cors = CORSSettings()
        self.logging = LoggingSettings()

    @validator("app_env")
    def validate_app_env(cls, v: str) -> str:
        """Validate application environment."""
        valid_envs = ["development", "staging", "production", "testing"]
        if v.lower() not in valid_envs:
            raise ValueError(f"App environment must be one of: {valid_envs}")
        return v.lower()

    @validator("port")
    def validate_port(cls, v: int) -> int:
        """Validate port number."""
        if not 1 <= v <= 65535:
            raise ValueError("Port must be between 1 and 65535")
        return v

    @property
    def is_development(self) -> bool:
        """Check if running in development mode."""
        return self.app_env == "development"


# Process-wide settings, built on first use
_settings: Optional[Settings] = None


def _load_env_file_if_available() -> None:
    """Load the nearest .env walking up from the working directory.

    The nested settings classes have no env_file of their own, so their
    variables must already be in the process environment.
    """
    from dotenv import load_dotenv

    cwd = Path(os.getcwd()).resolve()
    for parent in [cwd, *cwd.parents]:
        candidate = parent / ".env"
        if candidate.exists():
            # Do not override already-set environment variables
            load_dotenv(dotenv_path=str(candidate), override=False)
            break


def get_settings() -> Settings:
    """Return the cached settings, building them on first call."""
    global _settings
    if _settings is None:
        _load_env_file_if_available()
        _settings = Settings()
    return _settings


def reset_settings() -> None:
    """Drop the cached settings so the next call re-reads the environment."""
    global _settings
    _settings = None
