"""
Настройки приложения из переменных окружения (и файла .env).
"""

import os
from datetime import timedelta, tzinfo
from typing import Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from dotenv import load_dotenv
from pydantic import BaseModel, Field, ValidationError, field_validator

from .shared_kernel import ConfigurationError

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


def get_env(var_name: str, default: Optional[str] = None) -> Optional[str]:
    value = os.environ.get(var_name, default)
    if value == "":
        return default
    return value


class Settings(BaseModel):
    """Настройки клиента календаря."""

    api_base_url: str = "http://localhost:8080"
    request_timeout: float = Field(5.0, gt=0, description="Таймаут запроса, секунды")
    default_duration_minutes: int = Field(60, gt=0)
    display_timezone: Optional[str] = None  # None - локальное время
    log_level: str = "INFO"

    @field_validator("log_level")
    @classmethod
    def known_log_level(cls, v: str) -> str:
        v = v.upper()
        if v not in LOG_LEVELS:
            raise ValueError(f"Неизвестный уровень логирования: {v}")
        return v

    @field_validator("display_timezone")
    @classmethod
    def known_timezone(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return v
        try:
            ZoneInfo(v)
        except (ZoneInfoNotFoundError, ValueError):
            raise ValueError(f"Неизвестный часовой пояс: {v}")
        return v

    @property
    def default_duration(self) -> timedelta:
        return timedelta(minutes=self.default_duration_minutes)

    @property
    def tz(self) -> Optional[tzinfo]:
        """Часовой пояс отображения или None для локального времени."""
        return ZoneInfo(self.display_timezone) if self.display_timezone else None

    @classmethod
    def from_env(cls, dotenv_path: Optional[str] = None) -> "Settings":
        """Читает настройки из окружения, предварительно загрузив .env."""
        load_dotenv(dotenv_path)

        values = {
            "api_base_url": get_env("BOOKINGS_API_URL"),
            "request_timeout": get_env("BOOKINGS_REQUEST_TIMEOUT"),
            "default_duration_minutes": get_env("BOOKINGS_DEFAULT_DURATION_MINUTES"),
            "display_timezone": get_env("BOOKINGS_DISPLAY_TIMEZONE"),
            "log_level": get_env("BOOKINGS_LOG_LEVEL"),
        }
        try:
            return cls(**{k: v for k, v in values.items() if v is not None})
        except ValidationError as e:
            raise ConfigurationError(f"Некорректные настройки: {e}") from e
