# python
# app/core/config.py
"""Configuration settings for the Chat API application.

Uses Pydantic BaseSettings for environment variable management.
"""
from enum import Enum

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class EnvironmentEnum(str, Enum):
    development = "development"
    testing = "testing"
    staging = "staging"
    production = "production"


class LogLevelEnum(str, Enum):
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class LogFormatEnum(str, Enum):
    simple = "simple"
    json = "json"


class Settings(BaseSettings):
    # Pydantic v2 settings configuration
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # ===== Application Settings =====
    app_name: str = Field(default="Chat API", description="Application name")
    environment: EnvironmentEnum = Field(
        default=EnvironmentEnum.development, description="Environment type"
    )
    debug: bool = Field(default=False, description="Debug mode")
    version: str = Field(default="1.0.0", description="Application version")

    # ===== Database Settings =====
    database_url: str | None = Field(default=None, description="Database connection URL")
    db_host: str = Field(default="localhost", description="Database host")
    db_port: int = Field(default=5432, description="Database port")
    db_user: str = Field(default="postgres", description="Database user")
    db_password: str = Field(default="password", description="Database password")
    db_name: str = Field(default="chat_api", description="Database name")
    db_pool_size: int = Field(default=20, description="Database connection pool size")
    db_max_overflow: int = Field(default=0, description="Database max overflow connections")
    db_pool_recycle: int = Field(
        default=3600, description="Maximum connection lifetime in seconds"
    )
    db_operation_timeout: float = Field(
        default=30.0, description="Upper bound for a single repository operation in seconds"
    )

    # Test database URL
    test_database_url: str | None = Field(default=None, description="Test database URL")

    # ===== CORS Settings =====
    allowed_origins: str = Field(
        default="http://localhost:3000,http://localhost:5173,http://127.0.0.1:3000",
        description="Allowed CORS origins (comma-separated)",
    )

    @property
    def allowed_origins_list(self) -> list[str]:
        """Parse CORS origins from comma-separated string."""
        return [origin.strip() for origin in self.allowed_origins.split(",") if origin.strip()]

    # ===== Monitoring & Logging =====
    log_level: LogLevelEnum = Field(default=LogLevelEnum.INFO, description="Logging level")
    log_format: LogFormatEnum = Field(default=LogFormatEnum.json, description="Log format")
    log_to_file: bool = Field(default=False, description="Also write logs to files in log_dir")
    log_dir: str = Field(default="logs", description="Directory for log files")

    # ===== Server Settings =====
    host: str = Field(default="127.0.0.1", description="Host to bind the server")
    port: int = Field(default=8080, description="Port to bind the server")

    # ===== Development Settings =====
    reload: bool = Field(default=False, description="Auto-reload in development")
    docs_url: str = Field(default="/docs", description="API documentation URL")
    redoc_url: str = Field(default="/redoc", description="ReDoc documentation URL")

    # ===== Computed Properties =====
    @property
    def is_development(self) -> bool:
        return self.environment == EnvironmentEnum.development

    @property
    def is_production(self) -> bool:
        return self.environment == EnvironmentEnum.production

    @property
    def is_testing(self) -> bool:
        return self.environment == EnvironmentEnum.testing

    @property
    def database_backend(self) -> str:
        if not self.database_url:
            return "none"
        return self.database_url.split(":", 1)[0].split("+", 1)[0]

    # ===== Validation Methods =====
    @field_validator("environment", mode="before")
    @classmethod
    def validate_environment(cls, v):
        if v and isinstance(v, str):
            lv = v.lower()
            if lv in ["dev", "develop"]:
                return "development"
            if lv in ["prod"]:
                return "production"
            if lv in ["test"]:
                return "testing"
            return lv
        return v

    @field_validator("db_pool_size")
    @classmethod
    def validate_pool_size(cls, v):
        if v < 1:
            raise ValueError("Database pool size must be at least 1")
        return v

    @field_validator("db_operation_timeout")
    @classmethod
    def validate_operation_timeout(cls, v):
        if v <= 0:
            raise ValueError("Database operation timeout must be positive")
        return v

    @model_validator(mode="after")
    def set_computed_fields(self):
        if not self.database_url:
            self.database_url = (
                f"postgresql+asyncpg://{self.db_user}:{self.db_password}"
                f"@{self.db_host}:{self.db_port}/{self.db_name}"
            )
        return self


settings = Settings()


class ConfigValidator:
    @staticmethod
    def validate_required_settings():
        errors = []
        if not settings.database_url:
            errors.append("DATABASE_URL is required")
        if settings.is_production and settings.debug:
            errors.append("DEBUG must be disabled in production")
        if errors:
            raise ValueError(f"Configuration errors: {', '.join(errors)}")

    @staticmethod
    def get_feature_status() -> dict:
        return {
            "database_backend": settings.database_backend,
            "log_format": settings.log_format,
            "file_logging": settings.log_to_file,
            "environment": settings.environment,
        }


def get_config_summary() -> dict:
    return {
        "app_name": settings.app_name,
        "version": settings.version,
        "environment": settings.environment,
        "debug": settings.debug,
        "features": ConfigValidator.get_feature_status(),
        "database_configured": bool(settings.database_url),
    }


__all__ = [
    "settings",
    "Settings",
    "ConfigValidator",
    "get_config_summary",
    "EnvironmentEnum",
    "LogLevelEnum",
    "LogFormatEnum",
]
