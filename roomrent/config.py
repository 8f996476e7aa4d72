import os
import logging
from dotenv import load_dotenv

load_dotenv()


def _env_bool(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


class Config:
    # Database Configuration
    DB_USER = os.getenv("DB_USER", "postgres")
    DB_PASS = os.getenv("DB_PASS", "postgres")
    DB_HOST = os.getenv("DB_HOST", "localhost")
    DB_PORT = os.getenv("DB_PORT", "5432")
    DB_NAME = os.getenv("DB_NAME", "roomrent")

    @property
    def DATABASE_URL(self):
        # Prefer DATABASE_URL env var if set (for SQLite support)
        url = os.getenv("DATABASE_URL")
        if url:
            return url

        # Build PostgreSQL URL
        return f"postgresql+asyncpg://{self.DB_USER}:{self.DB_PASS}@{self.DB_HOST}:{self.DB_PORT}/{self.DB_NAME}"

    # Text notifications: "log" (development), "http" (SMS gateway) or "telegram"
    SMS_PROVIDER = os.getenv("SMS_PROVIDER", "log")
    SMS_HTTP_URL = os.getenv("SMS_HTTP_URL")
    SMS_HTTP_TOKEN = os.getenv("SMS_HTTP_TOKEN")
    SMS_SENDER = os.getenv("SMS_SENDER", "RoomRent")
    TELEGRAM_BOT_TOKEN = os.getenv("TELEGRAM_BOT_TOKEN")

    # Geocoding (Nominatim compatible, free tier asks for <= 1 request/second)
    GEOCODING_URL = os.getenv("GEOCODING_URL", "https://nominatim.openstreetmap.org/search")
    GEOCODING_USER_AGENT = os.getenv("GEOCODING_USER_AGENT", "RoomRent/1.0 (admin@example.com)")
    GEOCODING_COUNTRY_SUFFIX = os.getenv("GEOCODING_COUNTRY_SUFFIX", "Vietnam")
    GEOCODING_MIN_INTERVAL = float(os.getenv("GEOCODING_MIN_INTERVAL", "1.0"))

    # File storage
    UPLOAD_DIR = os.getenv("UPLOAD_DIR", os.path.join(os.getcwd(), "public", "uploads"))
    UPLOAD_URL_PREFIX = os.getenv("UPLOAD_URL_PREFIX", "/uploads")

    # Billing
    INVOICE_DUE_DAY = int(os.getenv("INVOICE_DUE_DAY", "7"))
    SCHEDULER_ENABLED = _env_bool("SCHEDULER_ENABLED", True)

    # HTTP
    API_HOST = os.getenv("API_HOST", "0.0.0.0")
    API_PORT = int(os.getenv("API_PORT", "8000"))
    CORS_ORIGINS = [x.strip() for x in os.getenv("CORS_ORIGINS", "").split(",") if x.strip()]

config = Config()

# Log configuration on startup
logging.info(f"Database: {config.DATABASE_URL.split('@')[1] if '@' in config.DATABASE_URL else 'SQLite'}")
logging.info(f"Notifications: {config.SMS_PROVIDER}")
