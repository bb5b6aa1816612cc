"""
Общее ядро (Shared Kernel) календаря бронирований.

Содержит общие типы данных и утилиты, используемые слоями контекста бронирования.
"""

from .domain import (
    # Базовые типы
    BookingId,
    # Исключения
    BusinessRuleValidationException,
    ConfigurationError,
    DomainException,
    # Основные классы
    TimeInterval,
    # Утилиты
    same_identity,
    to_utc,
    truncate_to_minute,
)

__all__ = [
    # Базовые типы
    "BookingId",
    # Основные классы
    "TimeInterval",
    # Исключения
    "DomainException",
    "BusinessRuleValidationException",
    "ConfigurationError",
    # Утилиты
    "same_identity",
    "to_utc",
    "truncate_to_minute",
]
