from __future__ import annotations

from decimal import Decimal
from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    app_name: str = "Family Bank API"
    database_url: str = "sqlite:///family_bank.db"
    log_level: str = "INFO"
    interest_rate: Decimal = Field(
        default=Decimal("0"), description="Monthly interest rate in percent"
    )
    recent_activity_days: int = Field(default=7, ge=1)
    history_page_size: int = Field(default=50, ge=1, le=500)

    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="FAMILY_BANK_",
        extra="ignore",
    )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()
