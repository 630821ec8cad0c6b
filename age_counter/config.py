"""Runtime configuration for the age_counter package.

Settings are loaded in priority order:
  1. Environment variables (highest priority)
  2. .env file in the project root
  3. Field defaults

Usage::

    from age_counter.config import settings

    print(settings.store_path)
"""

from pathlib import Path
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_STORE_PATH: Path = Path.home() / ".config" / "age-counter" / "settings.json"


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="forbid",
    )

    store_path: Path = Field(
        DEFAULT_STORE_PATH,
        alias="AGE_COUNTER_STORE_PATH",
        description="JSON file holding the birthday and the first-launch latch.",
    )
    refresh_interval_ms: int = Field(
        100,
        gt=0,
        alias="AGE_COUNTER_REFRESH_MS",
        description="Display refresh period of the terminal front end.",
    )
    log_format: Literal["text", "json"] = Field(
        "text",
        alias="LOG_FORMAT",
        description="'json' for structured log lines, 'text' otherwise.",
    )

    @field_validator("log_format", mode="before")
    @classmethod
    def _lowercase_log_format(cls, value: object) -> object:
        return value.lower() if isinstance(value, str) else value


settings = Settings()
