"""
Storefront Assistant
Centralized Configuration Management

Configuration is read from the environment (and an optional ``.env`` file)
through Pydantic settings, validated once and cached for the process.
"""

from functools import lru_cache
from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class StoreSettings(BaseSettings):
    """In-memory store and analytics configuration"""

    model_config = SettingsConfigDict(env_prefix="STORE_")

    low_stock_threshold: int = Field(default=10, ge=0, description="Stock level at or below which a product is low")
    critical_stock_threshold: int = Field(default=3, ge=0, description="Stock level counted as critical in alerts")
    top_products_limit: int = Field(default=5, ge=1, description="Top products returned in store metrics")
    report_top_products_limit: int = Field(default=10, ge=1, description="Top products returned in revenue reports")
    trend_threshold_percent: float = Field(default=5.0, ge=0, description="Revenue change treated as a trend")
    currency: str = Field(default="USD", description="Display currency code")
    seed_sample_data: bool = Field(default=True, description="Load the sample catalogue on startup")
    audit_stock_changes: bool = Field(default=True, description="Emit stock audit events to the log")


class MonitoringSettings(BaseSettings):
    """Logging Configuration"""

    model_config = SettingsConfigDict(env_prefix="")

    log_level: str = Field(default="INFO", alias="LOG_LEVEL", description="Logging level")
    log_format: str = Field(default="json", alias="LOG_FORMAT", description="Log format: json or text")
    log_file: Optional[str] = Field(default=None, description="Log file path")

    @field_validator("log_format")
    @classmethod
    def validate_format(cls, v: str) -> str:
        """Validate log format value"""
        if v.lower() not in ("json", "text"):
            raise ValueError("Log format must be 'json' or 'text'")
        return v.lower()


class Settings(BaseSettings):
    """
    Main Application Settings

    Aggregates all configuration sections and provides a single entry point
    for accessing application configuration.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        populate_by_name=True,
    )

    # Application
    app_name: str = Field(default="storefront-assistant", alias="APP_NAME", description="Application name")
    app_env: str = Field(default="development", alias="APP_ENV", description="Environment")
    debug: bool = Field(default=False, alias="DEBUG", description="Debug mode")

    # Version
    version: str = Field(default="1.0.0", description="Application version")

    # Subsystem configurations
    store: StoreSettings = Field(default_factory=StoreSettings)
    monitoring: MonitoringSettings = Field(default_factory=MonitoringSettings)

    @field_validator("app_env")
    @classmethod
    def validate_env(cls, v: str) -> str:
        """Validate environment value"""
        allowed = ["development", "staging", "production", "testing"]
        if v.lower() not in allowed:
            raise ValueError(f"Environment must be one of: {allowed}")
        return v.lower()

    @property
    def is_production(self) -> bool:
        """Check if running in production"""
        return self.app_env == "production"

    @property
    def is_testing(self) -> bool:
        """Check if running under the test suite"""
        return self.app_env == "testing"


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached application settings.

    Uses LRU cache to ensure settings are only loaded once.

    Returns:
        Settings: Application settings instance
    """
    return Settings()
