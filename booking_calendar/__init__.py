"""Календарь бронирований: проверка конфликтов и жизненный цикл бронирований."""

__version__ = "0.1.0"
