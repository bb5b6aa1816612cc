"""
Основные доменные типы и утилиты общего ядра.
"""

from datetime import datetime, timedelta, timezone
from typing import Union

from pydantic import BaseModel, ConfigDict, field_validator, model_validator

# Идентификатор выдается хранилищем: число или строка
BookingId = Union[int, str]


def to_utc(value: datetime) -> datetime:
    """Приводит момент времени к UTC. Наивное время считается UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def truncate_to_minute(value: datetime) -> datetime:
    """Отбрасывает секунды и доли секунды."""
    return value.replace(second=0, microsecond=0)


def same_identity(left: object, right: object) -> bool:
    """Сравнивает идентификаторы, выданные хранилищем (5 и "5" совпадают)."""
    if left is None or right is None:
        return False
    return str(left) == str(right)


class TimeInterval(BaseModel):
    """Полуоткрытый интервал времени [start, end)."""

    model_config = ConfigDict(frozen=True)

    start: datetime
    end: datetime

    @field_validator("start", "end")
    @classmethod
    def normalize_timezone(cls, v: datetime) -> datetime:
        return to_utc(v)

    @model_validator(mode="after")
    def end_after_start(self) -> "TimeInterval":
        if self.end <= self.start:
            raise ValueError("Конец интервала должен быть позже начала")
        return self

    @property
    def duration(self) -> timedelta:
        """Длительность интервала."""
        return self.end - self.start

    def overlaps(self, other: "TimeInterval") -> bool:
        """
        Проверяет пересечение двух полуоткрытых интервалов.

        Одно неравенство покрывает все случаи: частичное пересечение слева
        и справа, вложенность и совпадение. Касание границ пересечением
        не считается.
        """
        return self.start < other.end and other.start < self.end

    def touches(self, other: "TimeInterval") -> bool:
        """Интервалы стыкуются без пересечения."""
        return self.end == other.start or other.end == self.start

    def contains(self, instant: datetime) -> bool:
        """Момент попадает в интервал (правая граница не включается)."""
        instant = to_utc(instant)
        return self.start <= instant < self.end


# Общие исключения
class DomainException(Exception):
    """Базовое исключение для доменных ошибок."""

    pass


class BusinessRuleValidationException(DomainException):
    """Исключение при нарушении бизнес-правил."""

    pass


class ConfigurationError(Exception):
    """Некорректные настройки приложения."""

    pass
