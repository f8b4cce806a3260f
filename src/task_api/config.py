"""Application configuration using Pydantic settings."""

from functools import lru_cache
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
from sqlalchemy.engine import URL


LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Application
    service_name: str = "task-api"
    log_level: LogLevel = "INFO"
    host: str = "0.0.0.0"
    port: int = Field(default=8080, ge=1, le=65535)

    # Database. DATABASE_URL wins over the individual parts when set.
    database_url: str | None = None
    db_driver: str = "postgresql+psycopg"
    db_hostname: str = "localhost"
    db_port: int = 5432
    db_name: str = "tododb"
    db_username: str = "postgres"
    db_password: str = "postgres"

    # Connection pool
    db_pool_size: int = Field(default=5, ge=1)
    db_max_overflow: int = Field(default=10, ge=0)
    db_pool_timeout: float = 30.0
    db_pool_recycle: int = 1800

    # OpenTelemetry / Base14 Scout
    otel_enabled: bool = False
    otel_exporter_otlp_endpoint: str = "http://localhost:4318"
    scout_environment: str = "development"

    @field_validator("log_level", mode="before")
    @classmethod
    def _upper_log_level(cls, v: object) -> object:
        return v.upper() if isinstance(v, str) else v

    @property
    def sqlalchemy_url(self) -> str:
        if self.database_url:
            return self.database_url
        return URL.create(
            self.db_driver,
            username=self.db_username,
            password=self.db_password,
            host=self.db_hostname,
            port=self.db_port,
            database=self.db_name,
        ).render_as_string(hide_password=False)


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
