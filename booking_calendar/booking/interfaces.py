"""
Интерфейсы (порты) для контекста бронирования.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional, Protocol, Tuple

from ..shared_kernel import BookingId
from .domain import Booking


class ILogger(Protocol):
    """Интерфейс для логгера."""

    def info(self, message: str, **kwargs: Any) -> None: ...
    def error(self, message: str, **kwargs: Any) -> None: ...
    def warning(self, message: str, **kwargs: Any) -> None: ...
    def debug(self, message: str, **kwargs: Any) -> None: ...


class INotifier(Protocol):
    """Интерфейс для блокирующего уведомления пользователя."""

    def alert(self, message: str) -> None: ...


@dataclass(frozen=True)
class StoreResult:
    """
    Результат обращения к хранилищу бронирований.

    Ошибки транспорта не пробрасываются исключением, а возвращаются
    в поле error.
    """

    error: Optional[BaseException] = None
    bookings: Tuple[Booking, ...] = ()

    @property
    def ok(self) -> bool:
        return self.error is None


class IBookingStore(Protocol):
    """Интерфейс клиента хранилища бронирований."""

    def list_bookings(self) -> StoreResult: ...
    def save_booking(self, booking: Booking) -> StoreResult: ...
    def cancel_booking(self, booking_id: BookingId) -> StoreResult: ...
    def delete_booking(self, booking_id: BookingId) -> StoreResult: ...
