from __future__ import annotations

from pydantic import AnyHttpUrl, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

POWER_MONTHLY_POINT_URL = "https://power.larc.nasa.gov/api/temporal/monthly/point"


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="APP_",
        case_sensitive=False,
    )

    env: str = Field(default="development")
    debug: bool = Field(default=False)
    docs_enabled: bool = Field(default=True)
    log_level: str = Field(default="INFO", min_length=4, max_length=8)

    cors_origins: list[str] = Field(default_factory=list)
    trusted_hosts: list[str] = Field(default_factory=lambda: ["localhost", "127.0.0.1"])

    power_base_url: AnyHttpUrl = Field(default=POWER_MONTHLY_POINT_URL)
    power_community: str = Field(default="SB", min_length=2, max_length=2)
    power_user_agent: str = Field(
        default="pointclimate/0.1 (contact: you@example.com)",
        min_length=3,
        max_length=256,
    )
    power_timeout_seconds: float = Field(default=30.0, ge=1.0, le=120.0)
    power_retry_attempts: int = Field(default=3, ge=1, le=10)
    power_retry_max_wait_seconds: float = Field(default=8.0, ge=0.0, le=60.0)

    fill_value_default: float = Field(default=-999.0)
    resolver_max_attempts: int = Field(default=24, ge=1, le=240)
    area_batch_size: int = Field(default=10, ge=1, le=100)
    click_tolerance: float = Field(default=0.0001, ge=0.0, le=1.0)

    @property
    def is_production(self) -> bool:
        return self.env.lower() == "production"


def load_settings() -> Settings:
    settings = Settings()
    if not settings.cors_origins:
        settings.cors_origins = ["http://localhost:3000", "http://localhost:5173"]
    return settings
