"""
Прикладной слой контекста бронирования.

Контроллер жизненного цикла принимает намерения пользовательского
интерфейса, проверяет бронирование, вызывает хранилище и возвращает
новый неизменяемый снимок состояния календаря.
"""

from dataclasses import dataclass
from datetime import datetime, timedelta, tzinfo
from enum import Enum
from typing import Any, Callable, Dict, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict

from ..shared_kernel import (
    BookingId,
    BusinessRuleValidationException,
    same_identity,
    to_utc,
)
from . import interfaces as ports
from .domain import (
    Booking,
    BookingLifecycle,
    BookingState,
    LifecycleAction,
    RemovalKind,
    ValidationReport,
    find_conflicts,
    normalize,
    parse_timestamp,
    validate,
)

DEFAULT_DURATION = timedelta(hours=1)

BLOCKED_COLOR = "#d00000"
CANCELED_COLOR = "#c5c5c5"

# Намерения пользовательского интерфейса


@dataclass(frozen=True)
class SelectRange:
    """Пользователь выделил свободное время в календаре."""

    start: datetime


@dataclass(frozen=True)
class SelectEvent:
    """Пользователь выбрал существующее бронирование."""

    booking_id: BookingId


@dataclass(frozen=True)
class Edit:
    """Изменение полей формы. None означает, что поле не менялось."""

    name: Optional[str] = None
    start: Any = None
    end: Any = None
    blocked: Optional[bool] = None


@dataclass(frozen=True)
class Submit:
    """Сохранить редактируемое бронирование."""


@dataclass(frozen=True)
class Remove:
    """Отменить или удалить редактируемое бронирование."""


@dataclass(frozen=True)
class Close:
    """Закрыть форму без сохранения."""


# Состояние


class EditSession(BaseModel):
    """Сеанс редактирования одного бронирования."""

    model_config = ConfigDict(frozen=True)

    booking: Booking
    report: ValidationReport = ValidationReport()


class CalendarState(BaseModel):
    """Снимок набора бронирований и текущего сеанса редактирования."""

    model_config = ConfigDict(frozen=True)

    bookings: Tuple[Booking, ...] = ()
    session: Optional[EditSession] = None
    load_error: Optional[str] = None

    def find(self, booking_id: BookingId) -> Optional[Booking]:
        """Находит бронирование в снимке по идентификатору."""
        for booking in self.bookings:
            if same_identity(booking.id, booking_id):
                return booking
        return None

    def events(self, tz: Optional[tzinfo] = None) -> List["CalendarEventDTO"]:
        """События для отображения в календаре."""
        return [CalendarEventDTO.from_domain(booking, tz) for booking in self.bookings]


# DTO для исходящих данных


class CalendarEventDTO(BaseModel):
    """Событие календаря с вычисляемыми полями отображения."""

    id: Optional[BookingId]
    title: str
    start: datetime
    end: datetime
    color: Optional[str] = None
    blocked: bool
    canceled: bool
    struck_through: bool
    time_label: str

    @classmethod
    def from_domain(
        cls, booking: Booking, tz: Optional[tzinfo] = None
    ) -> "CalendarEventDTO":
        """Создает DTO из доменной модели. Время переводится в tz (по умолчанию локальное)."""
        start = booking.start.astimezone(tz)
        end = booking.end.astimezone(tz)

        color = None
        if booking.blocked:
            color = BLOCKED_COLOR
        if booking.canceled:
            color = CANCELED_COLOR

        return cls(
            id=booking.id,
            title="BLOCKED" if booking.blocked else booking.name,
            start=start,
            end=end,
            color=color,
            blocked=booking.blocked,
            canceled=booking.canceled,
            struck_through=booking.canceled,
            time_label=f"{start:%H:%M} - {end:%H:%M}",
        )


class DialogMode(str, Enum):
    """Режим формы бронирования."""

    CREATE = "create"
    UPDATE = "update"
    VIEW = "view"


class DialogView(BaseModel):
    """Тексты и флаги формы, вычисленные из состояния бронирования."""

    mode: DialogMode
    title: str
    description: str
    save_label: str = ""
    remove_label: str = ""
    show_blocked_checkbox: bool
    show_name_input: bool
    show_remove_button: bool
    show_save_button: bool
    disabled: bool

    @classmethod
    def from_session(cls, session: EditSession, busy: bool = False) -> "DialogView":
        booking = session.booking
        state = booking.state

        if state is BookingState.PROPOSED:
            texts = dict(
                mode=DialogMode.CREATE,
                title="Create",
                description="Create a new event below.",
                save_label="Create",
            )
        elif state is BookingState.ACTIVE:
            texts = dict(
                mode=DialogMode.UPDATE,
                title="Update",
                description="Update the event details below.",
                save_label="Update",
                remove_label="Delete" if booking.blocked else "Cancel",
            )
        else:
            texts = dict(
                mode=DialogMode.VIEW,
                title="View",
                description="View the cancelled event details below.",
            )

        return cls(
            **texts,
            show_blocked_checkbox=state is BookingState.PROPOSED,
            show_name_input=not booking.blocked,
            show_remove_button=state is BookingState.ACTIVE,
            show_save_button=not booking.canceled,
            disabled=busy or booking.canceled,
        )


# Сервисы приложения


class BookingLifecycleController:
    """
    Контроллер жизненного цикла бронирований.

    Каждое намерение превращается в новый CalendarState. После любого
    обращения к хранилищу (успешного или нет) форма закрывается, а набор
    бронирований перечитывается целиком.
    """

    def __init__(
        self,
        store: ports.IBookingStore,
        notifier: ports.INotifier,
        logger: ports.ILogger,
        default_duration: timedelta = DEFAULT_DURATION,
        tz: Optional[tzinfo] = None,
    ):
        """Инициализирует контроллер. tz - часовой пояс отображения (None - локальный)."""
        self._store = store
        self._notifier = notifier
        self._logger = logger
        self._default_duration = default_duration
        self._tz = tz
        self._busy = False
        self._handlers: Dict[type, Callable[[CalendarState, Any], CalendarState]] = {
            SelectRange: self._select_range,
            SelectEvent: self._select_event,
            Edit: self._edit,
            Submit: self._submit,
            Remove: self._remove,
            Close: self._close,
        }

    @property
    def busy(self) -> bool:
        """Идет запрос к хранилищу."""
        return self._busy

    def load(self) -> CalendarState:
        """Первичная загрузка календаря."""
        self._busy = True
        try:
            return self._refresh()
        finally:
            self._busy = False

    def dispatch(self, state: CalendarState, intent: Any) -> CalendarState:
        """Обрабатывает намерение и возвращает новое состояние календаря."""
        handler = self._handlers.get(type(intent))
        if handler is None:
            raise TypeError(f"Неизвестное намерение: {intent!r}")

        if self._busy:
            self._logger.warning(
                "Request in flight, intent ignored", intent=type(intent).__name__
            )
            return state

        # Флаг держится до конца операции: запрос, уведомление и перечитывание
        self._busy = True
        try:
            return handler(state, intent)
        finally:
            self._busy = False

    def events(self, state: CalendarState) -> List[CalendarEventDTO]:
        """События календаря в часовом поясе отображения."""
        return state.events(self._tz)

    def view(self, state: CalendarState) -> Optional[DialogView]:
        """Представление формы для открытого сеанса."""
        if state.session is None:
            return None
        return DialogView.from_session(state.session, busy=self._busy)

    def _select_range(self, state: CalendarState, intent: SelectRange) -> CalendarState:
        start = to_utc(intent.start)
        booking = Booking(start=start, end=start + self._default_duration)
        return state.model_copy(update={"session": EditSession(booking=booking)})

    def _select_event(self, state: CalendarState, intent: SelectEvent) -> CalendarState:
        booking = state.find(intent.booking_id)
        if booking is None:
            raise BusinessRuleValidationException(
                f"Бронирование {intent.booking_id} не найдено"
            )
        return state.model_copy(update={"session": EditSession(booking=booking)})

    def _edit(self, state: CalendarState, intent: Edit) -> CalendarState:
        session = self._require_session(state)

        changes: Dict[str, Any] = {}
        if intent.name is not None:
            changes["name"] = intent.name
        if intent.start is not None:
            changes["start"] = parse_timestamp(intent.start)
        if intent.end is not None:
            changes["end"] = parse_timestamp(intent.end)
        if intent.blocked is not None:
            changes["blocked"] = intent.blocked

        booking = session.booking.with_changes(**changes)
        return state.model_copy(
            update={"session": session.model_copy(update={"booking": booking})}
        )

    def _submit(self, state: CalendarState, intent: Submit) -> CalendarState:
        session = self._require_session(state)
        booking = normalize(session.booking)
        target = BookingLifecycle.next_state(booking.state, LifecycleAction.SUBMIT)

        report = validate(booking, state.bookings)
        if report.has_error:
            self._logger.info("Booking failed validation", errors=report.errors())
            conflicts = find_conflicts(booking, state.bookings)
            if conflicts:
                self._logger.debug(
                    "Conflicting bookings", ids=[b.id for b in conflicts]
                )
            return state.model_copy(
                update={"session": session.model_copy(update={"report": report})}
            )

        action = "creating" if booking.id is None else "updating"
        result = self._call(self._store.save_booking, booking)
        if result.ok:
            self._logger.info("Booking saved", booking_id=booking.id, state=target.value)
        else:
            self._report_failure(action, result.error)

        return self._refresh()

    def _remove(self, state: CalendarState, intent: Remove) -> CalendarState:
        session = self._require_session(state)
        booking = session.booking
        kind = booking.removal_kind()

        if kind is RemovalKind.DELETE:
            action = "deleting"
            result = self._call(self._store.delete_booking, booking.id)
        else:
            action = "canceling"
            result = self._call(self._store.cancel_booking, booking.id)

        if result.ok:
            self._logger.info("Booking removed", booking_id=booking.id, kind=kind.value)
        else:
            self._report_failure(action, result.error)

        return self._refresh()

    def _close(self, state: CalendarState, intent: Close) -> CalendarState:
        if state.session is None:
            return state
        return state.model_copy(update={"session": None})

    def _require_session(self, state: CalendarState) -> EditSession:
        if state.session is None:
            raise BusinessRuleValidationException("Нет открытого бронирования")
        return state.session

    def _call(self, operation: Callable[..., ports.StoreResult], *args: Any) -> ports.StoreResult:
        """Вызывает хранилище и превращает исключение адаптера в StoreResult."""
        try:
            return operation(*args)
        except Exception as e:
            # Адаптер нарушил контракт и бросил исключение
            self._logger.error("Booking store raised", error=repr(e))
            return ports.StoreResult(error=e)

    def _report_failure(self, action: str, error: Optional[BaseException]) -> None:
        self._notifier.alert(f"An error occurred while {action} the event")
        self._logger.error(f"Store request failed while {action} the event", error=repr(error))

    def _refresh(self) -> CalendarState:
        """Перечитывает набор бронирований и закрывает форму."""
        result = self._call(self._store.list_bookings)
        if not result.ok:
            self._notifier.alert(f"An error occurred while loading the events: {result.error}")
            self._logger.error("Failed to load bookings", error=repr(result.error))
            return CalendarState(load_error=str(result.error))

        self._logger.debug("Bookings loaded", count=len(result.bookings))
        return CalendarState(bookings=result.bookings)
