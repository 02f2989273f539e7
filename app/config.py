from __future__ import annotations

from datetime import time
from functools import lru_cache
from pathlib import Path

from pydantic import Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    telegram_token: SecretStr = Field(SecretStr("TEST_TOKEN"), alias="TELEGRAM_TOKEN")
    sleep_model_path: Path = Field(Path("models/SleepCalculator.joblib"), alias="SLEEP_MODEL_PATH")
    time_format: str = Field("%H:%M", alias="TIME_FORMAT")
    log_level: str = Field("INFO", alias="LOG_LEVEL")
    default_wake_time: time = Field(time(hour=7), alias="DEFAULT_WAKE_TIME")
    default_sleep_hours: float = Field(8.0, alias="DEFAULT_SLEEP_HOURS")
    default_coffee_cups: int = Field(1, alias="DEFAULT_COFFEE_CUPS")
    wake_step_minutes: int = Field(15, alias="WAKE_STEP_MINUTES")

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=False,
    )


@lru_cache
def get_settings() -> Settings:
    return Settings()


settings = get_settings()
