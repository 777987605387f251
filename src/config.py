"""
Centralized configuration with environment variable overrides.

Driver profile, WhatsApp credentials, store backend and conversation
settings are all configurable here. The location catalog and passenger
multipliers live in src.tools.locations as static data.
"""

import logging
import os
from dataclasses import dataclass, field

from dotenv import load_dotenv

from src.logging_context import configure_logging

load_dotenv()

logger = logging.getLogger(__name__)

VALID_STORE_BACKENDS = ("memory", "redis")


def _safe_int(env_var: str, default: str) -> int:
    """Parse an integer from an env var with a clear error on bad values."""
    raw = os.getenv(env_var, default)
    try:
        return int(raw)
    except (ValueError, TypeError):
        raise ValueError(
            f"Invalid integer for {env_var}: {raw!r}"
        ) from None


def _safe_float(env_var: str, default: str) -> float:
    """Parse a float from an env var with a clear error on bad values."""
    raw = os.getenv(env_var, default)
    try:
        return float(raw)
    except (ValueError, TypeError):
        raise ValueError(
            f"Invalid float for {env_var}: {raw!r}"
        ) from None


def _csv_tuple(env_var: str, default: str) -> tuple[str, ...]:
    raw = os.getenv(env_var, default)
    return tuple(part.strip().lower() for part in raw.split(",") if part.strip())


@dataclass(frozen=True)
class DriverConfig:
    """Profile of the single driver operating the service."""

    name: str = os.getenv("DRIVER_NAME", "Ismael")
    phone: str = os.getenv("DRIVER_PHONE", "(82) 99651-8468")
    pix: str = os.getenv("DRIVER_PIX", "609.950.773-63")
    vehicle_model: str = os.getenv("DRIVER_VEHICLE_MODEL", "Sandero Branco")
    vehicle_plate: str = os.getenv("DRIVER_VEHICLE_PLATE", "QBI9I82")
    city: str = os.getenv("DRIVER_CITY", "Planalto da Serra - MT")
    country_code: str = os.getenv("DRIVER_COUNTRY_CODE", "55")


@dataclass(frozen=True)
class WhatsAppConfig:
    """WhatsApp Cloud API credentials and webhook secret."""

    access_token: str = os.getenv("WHATSAPP_TOKEN", "")
    phone_number_id: str = os.getenv("WHATSAPP_PHONE_NUMBER_ID", "")
    api_version: str = os.getenv("WHATSAPP_API_VERSION", "v19.0")
    verify_token: str = os.getenv("VERIFY_TOKEN", "")
    graph_base_url: str = os.getenv("WHATSAPP_GRAPH_URL", "https://graph.facebook.com")
    timeout_seconds: float = _safe_float("WHATSAPP_TIMEOUT_SECONDS", "10")


@dataclass(frozen=True)
class StoreConfig:
    """Key-value store backend for sessions and booking records."""

    backend: str = os.getenv("STORE_BACKEND", "memory").lower()
    redis_url: str = os.getenv("REDIS_URL", "")
    session_ttl_seconds: int = _safe_int("SESSION_TTL_SECONDS", "86400")
    booking_key_prefix: str = os.getenv("BOOKING_KEY_PREFIX", "booking:")


@dataclass(frozen=True)
class ConversationConfig:
    """Input handling settings for the booking conversation."""

    cancel_keywords: tuple[str, ...] = _csv_tuple("CANCEL_KEYWORDS", "cancelar,cancel")
    max_text_length: int = _safe_int("MAX_TEXT_LENGTH", "300")
    display_utc_offset_hours: int = _safe_int("DISPLAY_UTC_OFFSET_HOURS", "-4")


@dataclass(frozen=True)
class AppConfig:
    """Root configuration aggregating all sub-configs."""

    driver: DriverConfig = field(default_factory=DriverConfig)
    whatsapp: WhatsAppConfig = field(default_factory=WhatsAppConfig)
    store: StoreConfig = field(default_factory=StoreConfig)
    conversation: ConversationConfig = field(default_factory=ConversationConfig)
    log_level: str = os.getenv("LOG_LEVEL", "INFO")
    app_name: str = os.getenv("APP_NAME", "ride-booking-bot")


def _validate_config(config: AppConfig) -> None:
    """Validate configuration values are within acceptable ranges."""
    if config.store.backend not in VALID_STORE_BACKENDS:
        raise ValueError(
            f"STORE_BACKEND must be one of {VALID_STORE_BACKENDS}, got {config.store.backend!r}"
        )
    if config.store.backend == "redis" and not config.store.redis_url:
        raise ValueError("REDIS_URL is required when STORE_BACKEND is 'redis'")
    if config.store.session_ttl_seconds < 0:
        raise ValueError(
            f"SESSION_TTL_SECONDS must be >= 0, got {config.store.session_ttl_seconds}"
        )
    if not config.store.booking_key_prefix:
        raise ValueError("BOOKING_KEY_PREFIX must not be empty")
    if config.conversation.max_text_length < 1:
        raise ValueError(
            f"MAX_TEXT_LENGTH must be >= 1, got {config.conversation.max_text_length}"
        )
    if not config.conversation.cancel_keywords:
        raise ValueError("CANCEL_KEYWORDS must contain at least one keyword")
    if not -12 <= config.conversation.display_utc_offset_hours <= 14:
        raise ValueError(
            "DISPLAY_UTC_OFFSET_HOURS must be between -12 and 14, "
            f"got {config.conversation.display_utc_offset_hours}"
        )
    if config.whatsapp.timeout_seconds <= 0:
        raise ValueError(
            f"WHATSAPP_TIMEOUT_SECONDS must be > 0, got {config.whatsapp.timeout_seconds}"
        )
    if not any(ch.isdigit() for ch in config.driver.phone):
        raise ValueError(f"DRIVER_PHONE must contain digits, got {config.driver.phone!r}")


def load_config() -> AppConfig:
    """Load and validate application configuration."""
    config = AppConfig()
    _validate_config(config)
    configure_logging(config.log_level)
    if not config.whatsapp.verify_token:
        logger.warning("VERIFY_TOKEN not set; webhook verification will always fail")
    logger.info("Configuration loaded for driver '%s'", config.driver.name)
    return config


# Singleton instance
settings = load_config()
