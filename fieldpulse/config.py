"""
Application configuration using Pydantic settings.
"""
from pydantic_settings import BaseSettings
from pydantic import Field


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""
    
    # Observation Store Configuration
    store_base_url: str = Field(
        default="https://store.example.com",
        description="Base URL for the observation/assessment store API"
    )
    store_api_key: str = Field(
        default="",
        description="API key for authentication against the store"
    )
    
    # Retry Configuration
    max_retry_attempts: int = Field(
        default=3,
        description="Maximum number of retry attempts for store calls"
    )
    retry_backoff_multiplier: int = Field(
        default=1,
        description="Multiplier for exponential backoff"
    )
    retry_min_wait: int = Field(
        default=4,
        description="Minimum wait time in seconds between retries"
    )
    retry_max_wait: int = Field(
        default=10,
        description="Maximum wait time in seconds between retries"
    )
    
    # Trend Aggregation Parameters
    trend_default_window_days: int = Field(
        default=90,
        description="Look-back window used when the caller does not pass one"
    )
    trend_allowed_windows: list[int] = Field(
        default=[30, 90, 365],
        description="Windows offered to clients (any positive window is accepted)"
    )
    trend_join_tolerance_days: int = Field(
        default=7,
        description="Maximum distance in days when pairing assessments with observations"
    )
    
    # Alert Thresholds (tenant-overridable)
    ndvi_drop_threshold: float = Field(
        default=-0.05,
        description="NDVI change below this value raises an ndvi_drop alert"
    )
    ndvi_drop_medium: float = Field(
        default=0.10,
        description="NDVI drop magnitude at which severity becomes medium"
    )
    ndvi_drop_high: float = Field(
        default=0.15,
        description="NDVI drop magnitude at which severity becomes high"
    )
    ndvi_drop_critical: float = Field(
        default=0.20,
        description="NDVI drop magnitude at which severity becomes critical"
    )
    health_decline_threshold: float = Field(
        default=-10.0,
        description="Health score change below this value raises a health_decline alert"
    )
    health_decline_medium: float = Field(
        default=15.0,
        description="Health score drop at which severity becomes medium"
    )
    health_decline_high: float = Field(
        default=20.0,
        description="Health score drop at which severity becomes high"
    )
    health_decline_critical: float = Field(
        default=30.0,
        description="Health score drop at which severity becomes critical"
    )
    low_health_enabled: bool = Field(
        default=True,
        description="Whether an absolute low health score raises a low_health alert"
    )
    low_health_threshold: float = Field(
        default=50.0,
        description="Health score below which a low_health alert is raised"
    )
    low_health_critical_threshold: float = Field(
        default=30.0,
        description="Health score below which a low_health alert is critical"
    )
    
    # Prescription Parameters
    zone_area_tolerance: float = Field(
        default=1e-6,
        description="Allowed deviation of the zone area sum from 100%"
    )
    clamp_high_performance_score: bool = Field(
        default=True,
        description="Cap the high performance zone health score at 100"
    )
    
    # Logging
    log_level: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR)"
    )
    
    # CORS Configuration
    cors_origins: list[str] = Field(
        default=["*"],
        description="Allowed CORS origins (use specific origins in production)"
    )
    
    # Rate Limiting
    rate_limit_requests: int = Field(
        default=100,
        description="Maximum prescription generations per minute per client"
    )
    
    # Application Settings
    app_name: str = Field(
        default="FieldPulse Crop Health Analytics",
        description="Application name"
    )
    app_version: str = Field(
        default="1.0.0",
        description="Application version"
    )
    debug: bool = Field(
        default=False,
        description="Debug mode"
    )
    
    class Config:
        env_file = ".env"
        case_sensitive = False


# Global settings instance
settings = Settings()
