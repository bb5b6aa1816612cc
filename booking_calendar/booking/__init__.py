"""
Модуль контекста бронирования (Booking Context).

Отвечает за проверку и жизненный цикл бронирований календаря, включая:
- Проверку пересечений интервалов времени
- Валидацию полей бронирования с отчетом по каждому полю
- Создание, изменение, отмену и удаление бронирований
"""

from . import application, domain, infrastructure, interfaces

__all__ = [
    "domain",
    "application",
    "infrastructure",
    "interfaces",
]
