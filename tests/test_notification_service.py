import pytest

from roomrent.database.models import Tenant
from roomrent.services.notification_service import (
    LogNotifier, HttpSmsNotifier, TelegramNotifier, build_notifier, notify_safely, NotificationError, TextNotifier
)


class Settings:
    SMS_PROVIDER = "log"
    SMS_HTTP_URL = None
    SMS_HTTP_TOKEN = None
    SMS_SENDER = "RoomRent"
    TELEGRAM_BOT_TOKEN = None


class FakeBot:
    def __init__(self):
        self.messages = []

    async def send_message(self, chat_id, text):
        self.messages.append((chat_id, text))


def test_build_notifier_selects_provider():
    settings = Settings()
    assert isinstance(build_notifier(settings), LogNotifier)

    settings.SMS_PROVIDER = "http"
    settings.SMS_HTTP_URL = "https://sms.example.com/send"
    notifier = build_notifier(settings)
    assert isinstance(notifier, HttpSmsNotifier)
    assert notifier.url == "https://sms.example.com/send"


def test_build_notifier_falls_back_to_log():
    settings = Settings()
    settings.SMS_PROVIDER = "telegram"
    assert isinstance(build_notifier(settings), LogNotifier)

    settings.SMS_PROVIDER = "carrier-pigeon"
    assert isinstance(build_notifier(settings), LogNotifier)


def test_http_headers_include_token():
    notifier = HttpSmsNotifier("https://sms.example.com/send", token="secret")
    assert notifier._get_headers()["Authorization"] == "Bearer secret"
    assert "Authorization" not in HttpSmsNotifier("https://sms.example.com/send")._get_headers()


@pytest.mark.asyncio
async def test_telegram_sends_to_chat_id():
    bot = FakeBot()
    await TelegramNotifier(bot).send_text("12345", "hello")

    assert bot.messages == [(12345, "hello")]


@pytest.mark.asyncio
async def test_notify_safely_swallows_failures(caplog):
    class Broken(TextNotifier):
        name = "broken"

        async def send_text(self, destination, body):
            raise NotificationError("down")

    assert await notify_safely(LogNotifier(), "0900", "hi") is True
    assert await notify_safely(Broken(), "0900", "hi") is False
    assert "Failed to notify 0900 via broken" in caplog.text


@pytest.mark.asyncio
@pytest.mark.parametrize("destination", ["0900000002", "+84900000002", "090 000 0002", ""])
async def test_telegram_refuses_phone_numbers(destination):
    bot = FakeBot()

    with pytest.raises(NotificationError):
        await TelegramNotifier(bot).send_text(destination, "Invoice 1/2024")

    assert bot.messages == []


def test_providers_resolve_their_own_contact():
    tenant = Tenant(name="Nguyen Van Tenant", phone="0900000002")

    assert LogNotifier().resolve_destination(tenant) == "0900000002"
    assert TelegramNotifier(FakeBot()).resolve_destination(tenant) is None

    tenant.tg_id = 555001
    assert TelegramNotifier(FakeBot()).resolve_destination(tenant) == "555001"
