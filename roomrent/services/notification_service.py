"""
Text notification providers.

Delivery is always a side effect: callers go through `notify_safely`,
which logs and swallows provider failures.
"""
import logging
import re
from typing import Optional

import aiohttp
from aiogram import Bot
from aiogram.client.default import DefaultBotProperties
from aiogram.enums import ParseMode

from roomrent.config import config

_CHAT_ID_RE = re.compile(r"-?[1-9]\d*")


class NotificationError(Exception):
    pass


class TextNotifier:
    """Send a short text to a destination (phone number or chat id)"""

    name = "base"
    contact_label = "phone number"

    def resolve_destination(self, tenant) -> Optional[str]:
        """Where this provider reaches the tenant, or None when it cannot"""
        return tenant.phone

    async def send_text(self, destination: str, body: str) -> None:
        raise NotImplementedError

    async def close(self) -> None:
        pass


class LogNotifier(TextNotifier):
    """Development provider: writes the message to the log"""

    name = "log"

    async def send_text(self, destination: str, body: str) -> None:
        logging.info(f"[MOCK SMS] To: {destination}, Message: {body}")


class HttpSmsNotifier(TextNotifier):
    """Generic JSON SMS gateway (POST {to, from, message})"""

    name = "http"

    def __init__(self, url: str, token: Optional[str] = None, sender: str = "RoomRent", timeout: float = 10):
        self.url = url
        self.token = token
        self.sender = sender
        self.timeout = timeout

    def _get_headers(self) -> dict:
        headers = {"Content-Type": "application/json"}
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        return headers

    async def send_text(self, destination: str, body: str) -> None:
        payload = {"to": destination, "from": self.sender, "message": body}
        async with aiohttp.ClientSession() as session:
            async with session.post(
                self.url,
                headers=self._get_headers(),
                json=payload,
                timeout=aiohttp.ClientTimeout(total=self.timeout)
            ) as resp:
                if resp.status >= 300:
                    raise NotificationError(f"SMS gateway error: {resp.status} - {await resp.text()}")
        logging.info(f"SMS sent via gateway to {destination}")


class TelegramNotifier(TextNotifier):
    """Telegram delivery; destination is the recipient's chat id"""

    name = "telegram"
    contact_label = "Telegram ID"

    def __init__(self, bot: Bot):
        self.bot = bot

    @classmethod
    def from_token(cls, token: str) -> "TelegramNotifier":
        return cls(Bot(token=token, default=DefaultBotProperties(parse_mode=ParseMode.HTML)))

    def resolve_destination(self, tenant) -> Optional[str]:
        return str(tenant.tg_id) if tenant.tg_id else None

    async def send_text(self, destination: str, body: str) -> None:
        # Phone numbers (leading 0 or +) must never be read as chat ids
        if not _CHAT_ID_RE.fullmatch(str(destination)):
            raise NotificationError(f"Not a Telegram chat id: {destination!r}")
        await self.bot.send_message(int(destination), body)
        logging.info(f"Notification sent to {destination}")

    async def close(self) -> None:
        await self.bot.session.close()


def build_notifier(cfg=config) -> TextNotifier:
    """Pick the provider from SMS_PROVIDER, falling back to the log provider"""
    provider = (cfg.SMS_PROVIDER or "log").lower()

    if provider == "http":
        if cfg.SMS_HTTP_URL:
            return HttpSmsNotifier(cfg.SMS_HTTP_URL, cfg.SMS_HTTP_TOKEN, cfg.SMS_SENDER)
        logging.warning("SMS_PROVIDER=http but SMS_HTTP_URL not configured, using log provider")
    elif provider == "telegram":
        if cfg.TELEGRAM_BOT_TOKEN:
            return TelegramNotifier.from_token(cfg.TELEGRAM_BOT_TOKEN)
        logging.warning("SMS_PROVIDER=telegram but TELEGRAM_BOT_TOKEN not configured, using log provider")
    elif provider != "log":
        logging.warning(f"Unknown SMS_PROVIDER {provider!r}, using log provider")

    return LogNotifier()


async def notify_safely(notifier: TextNotifier, destination: str, body: str) -> bool:
    """Deliver a message; failures are logged, never raised"""
    try:
        await notifier.send_text(destination, body)
        return True
    except Exception as e:
        logging.warning(f"Failed to notify {destination} via {notifier.name}: {e}")
        return False


notification_service: Optional[TextNotifier] = None

def setup_notifications(notifier: Optional[TextNotifier] = None) -> TextNotifier:
    global notification_service
    notification_service = notifier or build_notifier()
    return notification_service

def get_notifier() -> TextNotifier:
    if notification_service is None:
        return setup_notifications()
    return notification_service
