from functools import lru_cache
from typing import List

from pydantic import Field
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application configuration loaded from environment variables."""

    project_name: str = Field("Classboard Timetable", alias="PROJECT_NAME")
    database_url: str = Field("sqlite+aiosqlite:///./classboard.db", alias="DATABASE_URL")

    # Timezone used to derive "today" for the propagation window.
    timezone: str = Field("Asia/Tokyo", alias="TIMEZONE")
    propagation_window_days: int = Field(60, ge=1, le=366, alias="PROPAGATION_WINDOW_DAYS")
    # 0 disables the scheduled re-run; propagation still runs after every template change.
    propagation_interval_minutes: int = Field(0, ge=0, alias="PROPAGATION_INTERVAL_MINUTES")

    log_level: str = Field("INFO", alias="LOG_LEVEL")
    cors_origins: List[str] = Field(default_factory=lambda: ["*"], alias="CORS_ORIGINS")

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        extra = "ignore"
        populate_by_name = True


@lru_cache
def get_settings() -> Settings:
    return Settings()


settings = get_settings()
