"""
Configuration management for the FPA calculation core.

Uses pydantic-settings for type-safe configuration with environment variable support.
"""

from functools import lru_cache
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class EstimationSettings(BaseSettings):
    """Calculation constants and validation thresholds."""

    model_config = SettingsConfigDict(env_prefix="FPA_")

    working_days_per_month: int = Field(default=21, ge=1, le=31)
    default_buffer_percentage: float = Field(default=20.0, ge=0.0, le=100.0)
    trend_threshold_percent: float = Field(default=1.0, ge=0.0, le=100.0)
    eq_dual_det_ceiling: int = Field(default=200, ge=1)

    # Soft limits: exceeding them produces warnings, never errors
    data_det_warning: int = Field(default=200, ge=1)
    transactional_det_warning: int = Field(default=100, ge=1)
    ret_warning: int = Field(default=20, ge=1)
    ftr_warning: int = Field(default=10, ge=0)


class LoggingSettings(BaseSettings):
    """Logging configuration."""

    model_config = SettingsConfigDict(env_prefix="")

    level: str = Field(default="INFO", alias="LOG_LEVEL")
    json_format: bool = Field(default=True, alias="JSON_LOGS")

    @field_validator("level")
    @classmethod
    def validate_level(cls, v: str) -> str:
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        upper_v = v.upper()
        if upper_v not in valid_levels:
            raise ValueError(f"Log level must be one of {valid_levels}")
        return upper_v


class Settings(BaseSettings):
    """Main settings aggregating all configuration."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

    metrics_enabled: bool = Field(default=True, alias="METRICS_ENABLED")

    # Sub-configurations (loaded separately for better organization)
    @property
    def estimation(self) -> EstimationSettings:
        return EstimationSettings()

    @property
    def logging(self) -> LoggingSettings:
        return LoggingSettings()


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Uses lru_cache to ensure settings are only loaded once.
    """
    return Settings()
