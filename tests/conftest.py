"""
Общие фикстуры для тестов календаря бронирований.
"""
from unittest.mock import MagicMock

import pytest

from booking_calendar.booking.application import BookingLifecycleController
from booking_calendar.booking.infrastructure import InMemoryBookingStore
from booking_calendar.booking.interfaces import ILogger, INotifier
from factories import at, booking


@pytest.fixture
def store() -> InMemoryBookingStore:
    """Хранилище в памяти с одним активным бронированием 09:00-10:00 (id=1)."""
    store = InMemoryBookingStore()
    store.save_booking(booking(at(9), at(10), name="Standup"))
    return store


@pytest.fixture
def notifier() -> MagicMock:
    return MagicMock(spec=INotifier)


@pytest.fixture
def logger() -> MagicMock:
    return MagicMock(spec=ILogger)


@pytest.fixture
def controller(store, notifier, logger) -> BookingLifecycleController:
    return BookingLifecycleController(store=store, notifier=notifier, logger=logger)
