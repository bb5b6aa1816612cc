"""
Тесты настроек и сборки приложения.
"""
from datetime import timedelta

import pytest

from booking_calendar.booking.application import BookingLifecycleController
from booking_calendar.booking.infrastructure import HttpBookingStore
from booking_calendar.bootstrap import bootstrap_app
from booking_calendar.config import Settings
from booking_calendar.shared_kernel import ConfigurationError

ENV_VARS = [
    "BOOKINGS_API_URL",
    "BOOKINGS_REQUEST_TIMEOUT",
    "BOOKINGS_DEFAULT_DURATION_MINUTES",
    "BOOKINGS_DISPLAY_TIMEZONE",
    "BOOKINGS_LOG_LEVEL",
]


@pytest.fixture
def clean_env(monkeypatch, tmp_path):
    for name in ENV_VARS:
        # setenv запоминает исходное значение, значит load_dotenv ничего не оставит после теста
        monkeypatch.setenv(name, "")
        monkeypatch.delenv(name)
    # Пустой .env, чтобы не подхватить файл разработчика
    dotenv = tmp_path / ".env"
    dotenv.write_text("")
    return str(dotenv)


def test_defaults(clean_env):
    settings = Settings.from_env(clean_env)

    assert settings.api_base_url == "http://localhost:8080"
    assert settings.request_timeout == 5.0
    assert settings.default_duration == timedelta(hours=1)
    assert settings.tz is None
    assert settings.log_level == "INFO"


def test_values_from_environment(clean_env, monkeypatch):
    monkeypatch.setenv("BOOKINGS_API_URL", "https://calendar.example.com")
    monkeypatch.setenv("BOOKINGS_REQUEST_TIMEOUT", "2.5")
    monkeypatch.setenv("BOOKINGS_DEFAULT_DURATION_MINUTES", "30")
    monkeypatch.setenv("BOOKINGS_LOG_LEVEL", "debug")

    settings = Settings.from_env(clean_env)

    assert settings.api_base_url == "https://calendar.example.com"
    assert settings.request_timeout == 2.5
    assert settings.default_duration == timedelta(minutes=30)
    assert settings.log_level == "DEBUG"


def test_values_from_dotenv_file(clean_env):
    with open(clean_env, "w") as f:
        f.write("BOOKINGS_DEFAULT_DURATION_MINUTES=45\n")

    settings = Settings.from_env(clean_env)

    assert settings.default_duration == timedelta(minutes=45)


@pytest.mark.parametrize(
    "name, value",
    [
        ("BOOKINGS_REQUEST_TIMEOUT", "-1"),
        ("BOOKINGS_REQUEST_TIMEOUT", "soon"),
        ("BOOKINGS_DEFAULT_DURATION_MINUTES", "0"),
        ("BOOKINGS_LOG_LEVEL", "LOUD"),
        ("BOOKINGS_DISPLAY_TIMEZONE", "Mars/Olympus_Mons"),
    ],
)
def test_invalid_values(clean_env, monkeypatch, name, value):
    monkeypatch.setenv(name, value)

    with pytest.raises(ConfigurationError):
        Settings.from_env(clean_env)


def test_bootstrap_wires_components():
    settings = Settings(api_base_url="http://calendar.test", default_duration_minutes=15)

    app = bootstrap_app(settings)

    assert app["settings"] is settings
    assert isinstance(app["store"], HttpBookingStore)
    assert isinstance(app["controller"], BookingLifecycleController)


def test_bootstrap_accepts_custom_store(store, notifier):
    app = bootstrap_app(Settings(), store=store, notifier=notifier)

    state = app["controller"].load()

    assert app["store"] is store
    assert len(state.bookings) == 1


def test_bootstrap_uses_display_timezone(store, notifier):
    app = bootstrap_app(Settings(display_timezone="UTC"), store=store, notifier=notifier)
    controller = app["controller"]

    events = controller.events(controller.load())

    assert [e.time_label for e in events] == ["09:00 - 10:00"]
