"""Tests for sender-aware logging."""

import contextvars
import io
import logging

import pytest

from src.logging_context import (
    LOG_FORMAT,
    NO_SENDER,
    build_log_handler,
    get_sender_id,
    set_sender_id,
)
from tests.conftest import SENDER, select, text


@pytest.fixture
def captured():
    stream = io.StringIO()
    handler = build_log_handler(stream)
    logger = logging.getLogger("tests.sender_format")
    logger.propagate = False
    logger.setLevel(logging.INFO)
    logger.addHandler(handler)
    yield logger, stream
    logger.removeHandler(handler)


class TestLogFormat:
    def test_format_has_sender_field(self):
        assert "%(sender_id)s" in LOG_FORMAT
        assert build_log_handler(io.StringIO()).formatter._fmt == LOG_FORMAT

    def test_sender_id_in_output(self, captured):
        logger, stream = captured

        def emit():
            set_sender_id(SENDER)
            logger.info("hello")

        contextvars.Context().run(emit)
        line = stream.getvalue()
        assert f"[{SENDER}]" in line
        assert "[tests.sender_format] INFO: hello" in line

    def test_placeholder_without_sender(self, captured):
        logger, stream = captured

        contextvars.Context().run(logger.info, "startup")
        assert f"[{NO_SENDER}]" in stream.getvalue()

    def test_plain_loggers_get_sender_too(self, captured):
        _, stream = captured
        other = logging.getLogger("tests.sender_format.child")

        def emit():
            set_sender_id(SENDER)
            other.warning("from a logger without the filter")

        contextvars.Context().run(emit)
        assert f"[{SENDER}]" in stream.getvalue()


class TestConversationRecords:
    @pytest.mark.asyncio
    async def test_records_carry_sender(self, conversation, caplog):
        with caplog.at_level(logging.DEBUG, logger="src.conversation.flow"):
            await conversation.handle_event(text("oi"))

        records = [r for r in caplog.records if r.name == "src.conversation.flow"]
        assert records
        assert all(r.sender_id == SENDER for r in records)
        assert get_sender_id() == SENDER

    @pytest.mark.asyncio
    async def test_step_trace_logged(self, conversation, caplog):
        await conversation.handle_event(text("oi"))
        with caplog.at_level(logging.DEBUG, logger="src.conversation.flow"):
            await conversation.handle_event(select("fazer_cotacao"))

        assert "Steps this event: awaiting_start_choice -> origin_prompt -> awaiting_origin_choice" in caplog.text
