"""
Application configuration loaded from environment variables.
"""

from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field
from functools import lru_cache


class Settings(BaseSettings):
    """Application settings from environment variables."""

    model_config = SettingsConfigDict(
        env_file = ".env",
        env_file_encoding = "utf-8",
        extra = "ignore"
    )
    
    # Database
    database_url: str = Field(default="sqlite+aiosqlite:///./carbon.db", alias="DATABASE_URL")
    db_timeout_seconds: float = Field(default=5.0, alias="DB_TIMEOUT_SECONDS", gt=0)
    
    # Authentication
    jwt_secret: str = Field(default="change-me-in-production-carbon-credit-secret", alias="JWT_SECRET")
    jwt_algorithm: str = Field(default="HS256", alias="JWT_ALGORITHM")
    token_ttl_hours: int = Field(default=24, alias="TOKEN_TTL_HOURS", gt=0)
    
    # Derivation policy
    emission_threshold: float = Field(default=1000.0, alias="EMISSION_THRESHOLD", gt=0)
    
    # Application
    app_name: str = Field(default="Carbon Credit Monitor", alias="APP_NAME")
    app_version: str = Field(default="0.1.0", alias="APP_VERSION")
    debug: bool = Field(default=False, alias="DEBUG")
    port: int = Field(default=8000, alias="PORT")
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")
    cors_origins: str = Field(default="*", alias="CORS_ORIGINS")

    @property
    def cors_origin_list(self) -> list[str]:
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
