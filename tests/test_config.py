"""Tests for configuration loading and validation."""

from dataclasses import replace

import pytest

from src.config import (
    AppConfig,
    ConversationConfig,
    DriverConfig,
    StoreConfig,
    WhatsAppConfig,
    _csv_tuple,
    _safe_float,
    _safe_int,
    _validate_config,
)


def with_store(**changes) -> AppConfig:
    return replace(AppConfig(), store=replace(StoreConfig(), **changes))


def with_conversation(**changes) -> AppConfig:
    return replace(AppConfig(), conversation=replace(ConversationConfig(), **changes))


class TestConfigValidation:
    def test_default_config_passes_validation(self):
        _validate_config(with_store(backend="memory"))  # should not raise

    def test_unknown_backend(self):
        with pytest.raises(ValueError, match="STORE_BACKEND"):
            _validate_config(with_store(backend="sqlite"))

    def test_redis_requires_url(self):
        with pytest.raises(ValueError, match="REDIS_URL"):
            _validate_config(with_store(backend="redis", redis_url=""))

    def test_redis_with_url(self):
        _validate_config(with_store(backend="redis", redis_url="redis://localhost:6379/0"))

    def test_negative_ttl(self):
        with pytest.raises(ValueError, match="SESSION_TTL_SECONDS"):
            _validate_config(with_store(backend="memory", session_ttl_seconds=-1))

    def test_empty_booking_prefix(self):
        with pytest.raises(ValueError, match="BOOKING_KEY_PREFIX"):
            _validate_config(with_store(backend="memory", booking_key_prefix=""))

    def test_max_text_length_zero(self):
        config = replace(with_conversation(max_text_length=0), store=StoreConfig(backend="memory"))
        with pytest.raises(ValueError, match="MAX_TEXT_LENGTH"):
            _validate_config(config)

    def test_no_cancel_keywords(self):
        config = replace(with_conversation(cancel_keywords=()), store=StoreConfig(backend="memory"))
        with pytest.raises(ValueError, match="CANCEL_KEYWORDS"):
            _validate_config(config)

    @pytest.mark.parametrize("offset", [-13, 15])
    def test_offset_out_of_range(self, offset):
        config = replace(
            with_conversation(display_utc_offset_hours=offset), store=StoreConfig(backend="memory")
        )
        with pytest.raises(ValueError, match="DISPLAY_UTC_OFFSET_HOURS"):
            _validate_config(config)

    def test_zero_timeout(self):
        config = replace(
            AppConfig(),
            store=StoreConfig(backend="memory"),
            whatsapp=replace(WhatsAppConfig(), timeout_seconds=0),
        )
        with pytest.raises(ValueError, match="WHATSAPP_TIMEOUT_SECONDS"):
            _validate_config(config)

    def test_driver_phone_without_digits(self):
        config = replace(
            AppConfig(),
            store=StoreConfig(backend="memory"),
            driver=replace(DriverConfig(), phone="n/a"),
        )
        with pytest.raises(ValueError, match="DRIVER_PHONE"):
            _validate_config(config)


class TestEnvParsing:
    def test_safe_int_default(self, monkeypatch):
        monkeypatch.delenv("SOME_TEST_INT", raising=False)
        assert _safe_int("SOME_TEST_INT", "42") == 42

    def test_safe_int_bad_value(self, monkeypatch):
        monkeypatch.setenv("SOME_TEST_INT", "forty")
        with pytest.raises(ValueError, match="SOME_TEST_INT"):
            _safe_int("SOME_TEST_INT", "1")

    def test_safe_float_bad_value(self, monkeypatch):
        monkeypatch.setenv("SOME_TEST_FLOAT", "fast")
        with pytest.raises(ValueError, match="SOME_TEST_FLOAT"):
            _safe_float("SOME_TEST_FLOAT", "1.0")

    def test_csv_tuple_normalizes(self, monkeypatch):
        monkeypatch.setenv("SOME_TEST_CSV", " Cancelar , STOP,, ")
        assert _csv_tuple("SOME_TEST_CSV", "") == ("cancelar", "stop")


class TestImmutability:
    def test_configs_are_frozen(self):
        with pytest.raises(AttributeError):
            StoreConfig().backend = "redis"  # type: ignore[misc]
