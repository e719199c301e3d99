from functools import lru_cache
from typing import Annotated
import json
from pathlib import Path

from pydantic import field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict

from timetable.core.exceptions import ValidationError as AppValidationError
from timetable.domain.time_slot import DayOfWeek, parse_period


BACKEND_ENV_FILE = Path(__file__).resolve().parents[2] / ".env"

DEFAULT_STANDARD_PERIODS = [
    "07:00-07:50",
    "07:50-08:40",
    "09:00-09:50",
    "09:50-10:40",
    "11:00-11:50",
    "13:00-13:50",
    "13:50-14:40",
    "15:00-15:50",
    "15:50-16:40",
    "17:00-17:50",
]


def _split_list(value: str) -> list[str]:
    stripped = value.strip()
    if stripped.startswith("["):
        try:
            parsed = json.loads(stripped)
            if isinstance(parsed, list):
                return [str(item).strip() for item in parsed if str(item).strip()]
        except json.JSONDecodeError:
            pass
    return [item.strip() for item in value.split(",") if item.strip()]


class Settings(BaseSettings):
    # Resolve to backend/.env so `uvicorn --app-dir backend` works from any cwd.
    model_config = SettingsConfigDict(env_file=str(BACKEND_ENV_FILE), env_file_encoding="utf-8")

    project_name: str = "School Timetable API"
    api_prefix: str = "/api"
    log_level: str = "INFO"

    database_url: str = "sqlite+pysqlite:///./timetable.db"

    teacher_weekly_ceiling_minutes: int = 40 * 60
    class_conflicts_enabled: bool = False
    standard_periods: Annotated[list[str], NoDecode] = DEFAULT_STANDARD_PERIODS

    lesson_min_minutes: int = 30
    lesson_max_minutes: int = 240
    school_day_start: str = "06:00"
    school_day_end: str = "22:00"

    cors_origins: Annotated[list[str], NoDecode] = [
        "http://localhost:3000",
        "http://127.0.0.1:3000",
        "http://localhost:4200",
        "http://127.0.0.1:4200",
    ]

    @field_validator("cors_origins", "standard_periods", mode="before")
    @classmethod
    def split_list_values(cls, value: str | list[str]) -> list[str]:
        if isinstance(value, str):
            return _split_list(value)
        return value

    @field_validator("standard_periods")
    @classmethod
    def validate_standard_periods(cls, value: list[str]) -> list[str]:
        for period in value:
            try:
                parse_period(DayOfWeek.MONDAY, period)
            except AppValidationError as exc:
                raise ValueError(f"standard_periods entry {period!r}: {exc.message}") from exc
        return value

    @field_validator("teacher_weekly_ceiling_minutes")
    @classmethod
    def validate_ceiling(cls, value: int) -> int:
        if value < 0:
            raise ValueError("teacher_weekly_ceiling_minutes cannot be negative")
        return value


@lru_cache
def get_settings() -> Settings:
    return Settings()
