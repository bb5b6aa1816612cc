"""
Доменная модель контекста бронирования.

Содержит бронирование, проверку пересечений, валидатор с отчетом
по полям и таблицу переходов жизненного цикла бронирования.
"""

from datetime import datetime
from enum import Enum
from typing import Any, Dict, Iterable, List, Optional

from pydantic import BaseModel, ConfigDict, field_validator

from ..shared_kernel import (
    BookingId,
    BusinessRuleValidationException,
    TimeInterval,
    same_identity,
    to_utc,
    truncate_to_minute,
)

# Сообщения валидации, которые показываются пользователю рядом с полем
NAME_REQUIRED = "Name is required"
START_REQUIRED = "Start date is required"
END_REQUIRED = "End date is required"
START_EQUALS_END = "Start date must be different than end date"
END_EQUALS_START = "End date must be different than start date"
START_AFTER_END = "Start date must be before end date"
END_BEFORE_START = "End date must be after start date"
OVERLAPS = "Event overlaps with another event"


class BookingState(str, Enum):
    """Состояния жизненного цикла бронирования."""

    PROPOSED = "proposed"
    ACTIVE = "active"
    CANCELED = "canceled"
    DELETED = "deleted"


class LifecycleAction(str, Enum):
    """Действия над бронированием."""

    EDIT = "edit"
    SUBMIT = "submit"
    REMOVE = "remove"


class RemovalKind(str, Enum):
    """Способ удаления: мягкая отмена или полное удаление."""

    CANCEL = "cancel"
    DELETE = "delete"


class BookingLifecycleError(BusinessRuleValidationException):
    """Действие недопустимо в текущем состоянии бронирования."""

    def __init__(self, state: BookingState, action: LifecycleAction):
        super().__init__(
            f"Невозможно выполнить '{action.value}' для бронирования "
            f"в состоянии '{state.value}'"
        )
        self.state = state
        self.action = action


class BookingLifecycle:
    """Таблица разрешенных переходов жизненного цикла."""

    _TRANSITIONS: Dict[BookingState, Dict[LifecycleAction, BookingState]] = {
        BookingState.PROPOSED: {
            LifecycleAction.EDIT: BookingState.PROPOSED,
            LifecycleAction.SUBMIT: BookingState.ACTIVE,
        },
        BookingState.ACTIVE: {
            LifecycleAction.EDIT: BookingState.ACTIVE,
            LifecycleAction.SUBMIT: BookingState.ACTIVE,
            LifecycleAction.REMOVE: BookingState.CANCELED,
        },
        BookingState.CANCELED: {},
        BookingState.DELETED: {},
    }

    @classmethod
    def next_state(
        cls, state: BookingState, action: LifecycleAction, blocked: bool = False
    ) -> BookingState:
        """Возвращает состояние после действия или бросает BookingLifecycleError."""
        target = cls._TRANSITIONS[state].get(action)
        if target is None:
            raise BookingLifecycleError(state, action)
        # Блокировки удаляются полностью, а не отменяются
        if action is LifecycleAction.REMOVE and blocked:
            return BookingState.DELETED
        return target

    @classmethod
    def is_terminal(cls, state: BookingState) -> bool:
        return not cls._TRANSITIONS[state]


class Booking(BaseModel):
    """Бронирование или административная блокировка времени."""

    model_config = ConfigDict(frozen=True)

    id: Optional[BookingId] = None
    name: str = ""
    start: Optional[datetime] = None
    end: Optional[datetime] = None
    blocked: bool = False
    canceled: bool = False

    @field_validator("name", mode="before")
    @classmethod
    def empty_name(cls, v):
        # Сервер отдает null для блокировок без названия
        return "" if v is None else v

    @field_validator("start", "end")
    @classmethod
    def normalize_timezone(cls, v: Optional[datetime]) -> Optional[datetime]:
        return None if v is None else to_utc(v)

    @property
    def state(self) -> BookingState:
        """Текущее состояние бронирования."""
        if self.id is None:
            return BookingState.PROPOSED
        if self.canceled:
            return BookingState.CANCELED
        return BookingState.ACTIVE

    @property
    def interval(self) -> Optional[TimeInterval]:
        """Интервал бронирования, если границы заданы и упорядочены."""
        if self.start is None or self.end is None or self.start >= self.end:
            return None
        return TimeInterval(start=self.start, end=self.end)

    @property
    def is_editable(self) -> bool:
        return not BookingLifecycle.is_terminal(self.state)

    def with_changes(self, **changes: Any) -> "Booking":
        """Возвращает копию бронирования с измененными полями."""
        BookingLifecycle.next_state(self.state, LifecycleAction.EDIT, self.blocked)

        if (
            "blocked" in changes
            and self.id is not None
            and changes["blocked"] != self.blocked
        ):
            raise BusinessRuleValidationException(
                "Признак блокировки задается только при создании бронирования"
            )

        data = self.model_dump()
        data.update(changes)
        return Booking.model_validate(data)

    def removal_kind(self) -> RemovalKind:
        """Определяет, как удалить бронирование: отменить или удалить."""
        target = BookingLifecycle.next_state(
            self.state, LifecycleAction.REMOVE, self.blocked
        )
        if target is BookingState.DELETED:
            return RemovalKind.DELETE
        return RemovalKind.CANCEL


def normalize(booking: Booking) -> Booking:
    """Возвращает копию бронирования с точностью до минуты."""
    changes = {}
    if booking.start is not None:
        changes["start"] = truncate_to_minute(booking.start)
    if booking.end is not None:
        changes["end"] = truncate_to_minute(booking.end)
    return booking.model_copy(update=changes)


def parse_timestamp(raw: Any) -> Optional[datetime]:
    """
    Разбирает момент времени из пользовательского ввода.

    Принимает datetime или строку ISO-8601 (в том числе с суффиксом Z).
    Для пустого или некорректного значения возвращает None.
    """
    if isinstance(raw, datetime):
        return to_utc(raw)
    if not isinstance(raw, str) or not raw.strip():
        return None

    text = raw.strip()
    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"
    try:
        return to_utc(datetime.fromisoformat(text))
    except ValueError:
        return None


def _competitors(candidate: Booking, existing: Iterable[Booking]) -> Iterable[Booking]:
    """Активные бронирования, кроме самого кандидата."""
    for booking in existing:
        if booking.canceled:
            continue
        if same_identity(candidate.id, booking.id):
            continue
        yield booking


def find_conflicts(candidate: Booking, existing: Iterable[Booking]) -> List[Booking]:
    """Возвращает активные бронирования, пересекающиеся с кандидатом."""
    interval = candidate.interval
    if interval is None:
        return []

    conflicts = []
    for booking in _competitors(candidate, existing):
        other = booking.interval
        if other is not None and interval.overlaps(other):
            conflicts.append(booking)
    return conflicts


def overlaps(candidate: Booking, existing: Iterable[Booking]) -> bool:
    """Проверяет, пересекается ли кандидат хотя бы с одним активным бронированием."""
    return bool(find_conflicts(candidate, existing))


class ValidationReport(BaseModel):
    """Ошибки валидации по полям формы. Пустая строка означает отсутствие ошибки."""

    model_config = ConfigDict(frozen=True)

    name: str = ""
    start: str = ""
    end: str = ""

    @property
    def has_error(self) -> bool:
        return bool(self.name or self.start or self.end)

    def errors(self) -> Dict[str, str]:
        """Только заполненные сообщения об ошибках."""
        return {field: message for field, message in self.model_dump().items() if message}


def validate(candidate: Booking, existing: Iterable[Booking]) -> ValidationReport:
    """
    Проверяет бронирование и собирает ошибки по всем полям сразу.

    Правила применяются по порядку без прерывания; более позднее правило
    перезаписывает сообщение более раннего для того же поля.
    Исключения не бросаются: результат всегда отчет.
    """
    name_error = start_error = end_error = ""

    if not candidate.name and not candidate.blocked:
        name_error = NAME_REQUIRED

    if candidate.start is None:
        start_error = START_REQUIRED

    if candidate.end is None:
        end_error = END_REQUIRED

    if candidate.start is not None and candidate.end is not None:
        if candidate.start == candidate.end:
            start_error = START_EQUALS_END
            end_error = END_EQUALS_START

        if candidate.start > candidate.end:
            start_error = START_AFTER_END
            end_error = END_BEFORE_START

        if overlaps(candidate, existing):
            start_error = OVERLAPS
            end_error = OVERLAPS

    return ValidationReport(name=name_error, start=start_error, end=end_error)
