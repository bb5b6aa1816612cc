import logging
from typing import Any, Dict, Optional

from .booking.application import BookingLifecycleController
from .booking.infrastructure import ConsoleNotifier, HttpBookingStore, StdLogger
from .booking.interfaces import IBookingStore, INotifier
from .config import Settings


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def bootstrap_app(
    settings: Optional[Settings] = None,
    store: Optional[IBookingStore] = None,
    notifier: Optional[INotifier] = None,
) -> Dict[str, Any]:
    """Создает и настраивает все компоненты приложения."""
    # 1. Настройки и логирование
    settings = settings or Settings.from_env()
    configure_logging(settings.log_level)
    logger = StdLogger("booking_calendar")

    # 2. Клиент хранилища бронирований
    store = store or HttpBookingStore(
        base_url=settings.api_base_url,
        timeout=settings.request_timeout,
        logger=StdLogger("booking_calendar.store"),
    )

    # 3. Контроллер жизненного цикла
    controller = BookingLifecycleController(
        store=store,
        notifier=notifier or ConsoleNotifier(),
        logger=logger,
        default_duration=settings.default_duration,
        tz=settings.tz,
    )

    return {
        "settings": settings,
        "store": store,
        "controller": controller,
    }
