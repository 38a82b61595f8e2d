from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

BeforeHistoryPolicy = Literal["last_known", "zero"]


class Settings(BaseSettings):
    log_level: str = Field(default="INFO", validation_alias="LOG_LEVEL")
    log_file: str | None = Field(default=None, validation_alias="LOG_FILE")
    log_rotation: str = Field(default="10 MB", validation_alias="LOG_ROTATION")
    log_retention: str = Field(default="7 days", validation_alias="LOG_RETENTION")

    # Longest start..end window (inclusive days) the API resolves in one request
    max_window_days: int = Field(default=3660, ge=1, validation_alias="PMC_MAX_WINDOW_DAYS")
    max_projection_days: int = Field(default=3650, ge=1, validation_alias="PMC_MAX_PROJECTION_DAYS")
    before_history_policy: BeforeHistoryPolicy = Field(
        default="last_known",
        validation_alias="PMC_BEFORE_HISTORY_POLICY",
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        extra="ignore",
    )

    @field_validator("log_level")
    @classmethod
    def normalize_log_level(cls, value: str) -> str:
        level = value.strip().upper()
        if level not in {"TRACE", "DEBUG", "INFO", "SUCCESS", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"LOG_LEVEL must be a loguru level name, got {value!r}")
        return level


settings = Settings()
