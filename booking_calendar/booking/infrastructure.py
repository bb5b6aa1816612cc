"""
Инфраструктурный слой контекста бронирования.

Содержит реализации портов, зависимые от конкретных технологий:
REST-клиент хранилища бронирований, хранилище в памяти,
логгер и уведомления пользователя.
"""
import json
import logging
import sys
from datetime import datetime, timezone
from typing import Any, Dict, Optional

import requests

from ..shared_kernel import BookingId
from . import interfaces as ports
from .domain import Booking


def format_timestamp(value: datetime) -> str:
    """Момент времени в UTC с миллисекундами и суффиксом Z."""
    value = value.astimezone(timezone.utc)
    return value.strftime("%Y-%m-%dT%H:%M:%S.") + f"{value.microsecond // 1000:03d}Z"


def booking_to_wire(booking: Booking) -> Dict[str, Any]:
    """Преобразует бронирование в JSON-совместимую запись для сервера."""
    return {
        "id": booking.id,
        "name": booking.name,
        "start": format_timestamp(booking.start) if booking.start else None,
        "end": format_timestamp(booking.end) if booking.end else None,
        "blocked": booking.blocked,
        "canceled": booking.canceled,
    }


def booking_from_wire(item: Dict[str, Any]) -> Booking:
    """Создает бронирование из записи сервера. Время без смещения считается UTC."""
    booking = Booking.model_validate(item)
    if booking.start is None or booking.end is None:
        raise ValueError(f"Booking {booking.id} has no start or end")
    return booking


class HttpBookingStore(ports.IBookingStore):
    """Клиент REST API бронирований на базе requests."""

    def __init__(
        self,
        base_url: str,
        timeout: float = 5.0,
        session: Optional[requests.Session] = None,
        logger: Optional[ports.ILogger] = None,
    ):
        """
        Инициализирует клиента.

        Args:
            base_url: Адрес сервера, например http://localhost:8080
            timeout: Таймаут запроса в секундах
            session: Сессия requests (для тестов можно передать мок)
            logger: Логгер
        """
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._session = session or requests.Session()
        self._logger = logger or StdLogger(__name__)

    def _url(self, *parts: Any) -> str:
        return "/".join([self._base_url, "bookings", *(str(p) for p in parts)])

    def _request(self, method: str, url: str, **kwargs: Any) -> requests.Response:
        response = self._session.request(method, url, timeout=self._timeout, **kwargs)
        response.raise_for_status()
        return response

    def _failure(self, operation: str, error: Exception) -> ports.StoreResult:
        self._logger.error(f"Booking store {operation} failed", error=repr(error))
        return ports.StoreResult(error=error)

    def list_bookings(self) -> ports.StoreResult:
        try:
            response = self._request("GET", self._url())
            items = response.json()
            bookings = tuple(booking_from_wire(item) for item in items)
        except (requests.exceptions.RequestException, ValueError, TypeError) as e:
            return self._failure("list", e)
        return ports.StoreResult(bookings=bookings)

    def save_booking(self, booking: Booking) -> ports.StoreResult:
        # Наличие id отличает обновление от создания
        url = self._url(booking.id) if booking.id is not None else self._url()
        try:
            self._request("POST", url, json=booking_to_wire(booking))
        except requests.exceptions.RequestException as e:
            return self._failure("save", e)
        return ports.StoreResult()

    def cancel_booking(self, booking_id: BookingId) -> ports.StoreResult:
        try:
            self._request("POST", self._url(booking_id, "cancel"))
        except requests.exceptions.RequestException as e:
            return self._failure("cancel", e)
        return ports.StoreResult()

    def delete_booking(self, booking_id: BookingId) -> ports.StoreResult:
        try:
            self._request("DELETE", self._url(booking_id))
        except requests.exceptions.RequestException as e:
            return self._failure("delete", e)
        return ports.StoreResult()


class InMemoryBookingStore(ports.IBookingStore):
    """Реализация хранилища бронирований в памяти. Последняя запись побеждает."""

    def __init__(self):
        self._bookings: Dict[str, Booking] = {}
        self._next_id = 1

    def list_bookings(self) -> ports.StoreResult:
        return ports.StoreResult(bookings=tuple(self._bookings.values()))

    def save_booking(self, booking: Booking) -> ports.StoreResult:
        if booking.id is None:
            booking = booking.model_copy(update={"id": self._next_id})
            self._next_id += 1
        elif str(booking.id) not in self._bookings:
            return ports.StoreResult(error=KeyError(f"Booking with id {booking.id} not found"))
        self._bookings[str(booking.id)] = booking
        return ports.StoreResult()

    def cancel_booking(self, booking_id: BookingId) -> ports.StoreResult:
        booking = self._bookings.get(str(booking_id))
        if booking is None:
            return ports.StoreResult(error=KeyError(f"Booking with id {booking_id} not found"))
        self._bookings[str(booking_id)] = booking.model_copy(update={"canceled": True})
        return ports.StoreResult()

    def delete_booking(self, booking_id: BookingId) -> ports.StoreResult:
        booking = self._bookings.get(str(booking_id))
        if booking is None:
            return ports.StoreResult(error=KeyError(f"Booking with id {booking_id} not found"))
        if not booking.blocked:
            return ports.StoreResult(
                error=ValueError(f"Booking {booking_id} is not blocked and cannot be deleted")
            )
        del self._bookings[str(booking_id)]
        return ports.StoreResult()


class StdLogger(ports.ILogger):
    """Логгер поверх стандартного logging; контекст дописывается в сообщение как JSON."""

    def __init__(self, name: str = "booking_calendar"):
        self._logger = logging.getLogger(name)

    @staticmethod
    def _format(message: str, context: Dict[str, Any]) -> str:
        if not context:
            return message
        return f"{message} {json.dumps(context, default=str, ensure_ascii=False)}"

    def info(self, message: str, **kwargs: Any) -> None:
        self._logger.info(self._format(message, kwargs))

    def error(self, message: str, **kwargs: Any) -> None:
        self._logger.error(self._format(message, kwargs))

    def warning(self, message: str, **kwargs: Any) -> None:
        self._logger.warning(self._format(message, kwargs))

    def debug(self, message: str, **kwargs: Any) -> None:
        self._logger.debug(self._format(message, kwargs))


class ConsoleNotifier(ports.INotifier):
    """Простая реализация уведомлений, выводящая сообщения в консоль."""

    def alert(self, message: str) -> None:
        print(f"[ALERT] {message}", file=sys.stderr, flush=True)
