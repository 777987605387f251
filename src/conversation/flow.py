"""
Conversation engine for the ride booking flow.

One call to ``BookingConversation.handle_event`` per inbound message:
load the sender's session, run the input guardrails, dispatch on the
current step, send the next prompt, then save the session. Cancellation
and booking completion delete the session instead of saving it, and only
after every outbound message for that path has been sent.

Any exception while processing an event is logged and answered with a
retry-or-cancel message. The session is not saved in that case, so the
customer can retry the same step.
"""

import asyncio
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from enum import Enum
from typing import AsyncIterator, Awaitable, Callable, Sequence

from src.config import ConversationConfig, DriverConfig
from src.conversation.guardrails import GuardrailPipeline, GuardrailResult
from src.conversation.selection import (
    Action,
    ActionChoice,
    EscapeChoice,
    LocationChoice,
    PassengerChoice,
    parse_selection,
)
from src.conversation.state_machine import (
    ConversationStateMachine,
    Step,
    TEXT_STEPS,
    TransitionTrigger,
)
from src.logging_context import get_sender_logger, set_sender_id
from src.messaging.dispatcher import MessageDispatcher
from src.prompts import prompt_templates as templates
from src.prompts.system_prompts import (
    ASK_CONTACT_TEXT,
    ASK_DESTINATION_TEXT,
    ASK_NAME_TEXT,
    ASK_ORIGIN_TEXT,
    CANCELLATION_TEXT,
    EMPTY_TEXT_HINT,
    PROCESSING_ERROR_TEXT,
    TEXT_TOO_LONG_HINT,
)
from src.schemas.message_schema import DeliveryResult, InboundEvent, OutboundMessage, TextMessage
from src.schemas.session_schema import Session
from src.store.session_store import SessionStore
from src.tools.booking import BookingIdGenerator, Clock, create_booking, utc_now
from src.tools.locations import PricingCatalog
from src.tools.quote import calculate_quote
from src.utils import whatsapp_number

logger = get_sender_logger(__name__)


class EventOutcome(str, Enum):
    """What happened to the session as a result of one event."""
    SAVED = "saved"
    CANCELLED = "cancelled"
    COMPLETED = "completed"
    FAILED = "failed"


@dataclass
class ConversationContext:
    """Everything the engine needs, built once at process start."""
    store: SessionStore
    dispatcher: MessageDispatcher
    driver: DriverConfig
    conversation: ConversationConfig
    catalog: PricingCatalog = field(default_factory=PricingCatalog)
    id_generator: BookingIdGenerator = field(default_factory=BookingIdGenerator)
    clock: Clock = utc_now


@dataclass
class Turn:
    """Working state for a single inbound event."""
    event: InboundEvent
    session: Session
    machine: ConversationStateMachine

    @property
    def sender_id(self) -> str:
        return self.event.sender_id


class SenderLocks:
    """One asyncio.Lock per sender, dropped once nobody holds or waits on it."""

    def __init__(self) -> None:
        self._locks: dict[str, asyncio.Lock] = {}
        self._holders: dict[str, int] = {}

    @asynccontextmanager
    async def hold(self, sender_id: str) -> AsyncIterator[None]:
        lock = self._locks.setdefault(sender_id, asyncio.Lock())
        self._holders[sender_id] = self._holders.get(sender_id, 0) + 1
        try:
            async with lock:
                yield
        finally:
            self._holders[sender_id] -= 1
            if not self._holders[sender_id]:
                del self._holders[sender_id]
                del self._locks[sender_id]

    def __len__(self) -> int:
        return len(self._locks)


StepHandler = Callable[[Turn], Awaitable[None]]


class BookingConversation:
    """Drives each sender's session through the booking steps."""

    def __init__(self, context: ConversationContext) -> None:
        self.ctx = context
        self.guardrails = GuardrailPipeline(context.conversation)
        self.locks = SenderLocks()
        self._handlers: dict[Step, StepHandler] = {
            Step.WELCOME: self._on_welcome,
            Step.AWAITING_START_CHOICE: self._on_start_choice,
            Step.ORIGIN_PROMPT: self._prompt_origin,
            Step.AWAITING_ORIGIN_CHOICE: self._on_origin_choice,
            Step.AWAITING_ORIGIN_TEXT: self._on_origin_text,
            Step.DESTINATION_PROMPT: self._prompt_destination,
            Step.AWAITING_DESTINATION_CHOICE: self._on_destination_choice,
            Step.AWAITING_DESTINATION_TEXT: self._on_destination_text,
            Step.PASSENGER_PROMPT: self._prompt_passengers,
            Step.AWAITING_PASSENGER_CHOICE: self._on_passenger_choice,
            Step.CONFIRMATION: self._on_confirmation,
            Step.AWAITING_NAME: self._on_name,
            Step.AWAITING_CONTACT: self._on_contact,
        }

    # ------------------------------------------------------------------ #
    # Entry point
    # ------------------------------------------------------------------ #

    async def handle_event(self, event: InboundEvent) -> EventOutcome:
        """Process one inbound message for its sender."""
        set_sender_id(event.sender_id)
        async with self.locks.hold(event.sender_id):
            try:
                return await self._process(event)
            except Exception:
                logger.exception("Failed to process %s event from %s", event.kind.value, event.sender_id)
                await self._send(event.sender_id, TextMessage(body=PROCESSING_ERROR_TEXT))
                return EventOutcome.FAILED

    async def _process(self, event: InboundEvent) -> EventOutcome:
        session = await self.ctx.store.load_or_create(event.sender_id)
        turn = Turn(event=event, session=session, machine=ConversationStateMachine(session.step))

        violations = self.guardrails.check_input(session.step, event)
        if any(v.severity == "cancel" for v in violations):
            await self._cancel(turn)
            return EventOutcome.CANCELLED

        if violations:
            logger.info("Input rejected at %s: %s", session.step.value, violations[0].violation_type)
            await self._reprompt(turn, violations)
        else:
            handler = self._handlers.get(session.step)
            if handler is None:
                raise RuntimeError(f"No handler for step '{session.step.value}'")
            await handler(turn)

        logger.debug("Steps this event: %s", " -> ".join(turn.machine.get_step_trace()))
        if turn.machine.is_terminal():
            return EventOutcome.COMPLETED

        session.step = turn.machine.current_step
        session.updated_at = self.ctx.clock()
        await self.ctx.store.save_session(event.sender_id, session)
        return EventOutcome.SAVED

    # ------------------------------------------------------------------ #
    # Sending helpers
    # ------------------------------------------------------------------ #

    async def _send(self, recipient: str, message: OutboundMessage) -> DeliveryResult:
        return await self.ctx.dispatcher.send(recipient, message)

    async def _say(self, turn: Turn, body: str) -> None:
        await self._send(turn.sender_id, TextMessage(body=body))

    async def _send_welcome(self, turn: Turn) -> None:
        await self._send(turn.sender_id, templates.build_welcome(self.ctx.driver))

    # ------------------------------------------------------------------ #
    # Prompt steps: render and move to the matching awaiting step
    # ------------------------------------------------------------------ #

    async def _on_welcome(self, turn: Turn) -> None:
        await self._send_welcome(turn)
        turn.machine.transition(TransitionTrigger.GREETING_SENT)

    async def _prompt_origin(self, turn: Turn) -> None:
        await self._send(turn.sender_id, templates.build_origin_picker(self.ctx.catalog, self.ctx.driver))
        turn.machine.transition(TransitionTrigger.ORIGIN_PROMPTED)

    async def _prompt_destination(self, turn: Turn) -> None:
        await self._send(
            turn.sender_id,
            templates.build_destination_picker(self.ctx.catalog, turn.session.data.origin),
        )
        turn.machine.transition(TransitionTrigger.DESTINATION_PROMPTED)

    async def _prompt_passengers(self, turn: Turn) -> None:
        await self._send(turn.sender_id, templates.build_passenger_picker())
        turn.machine.transition(TransitionTrigger.PASSENGERS_PROMPTED)

    # ------------------------------------------------------------------ #
    # Selection steps
    # ------------------------------------------------------------------ #

    async def _on_start_choice(self, turn: Turn) -> None:
        choice = parse_selection(turn.event.value)
        if choice == ActionChoice(Action.START_QUOTE):
            turn.machine.transition(TransitionTrigger.QUOTE_REQUESTED)
            await self._prompt_origin(turn)
        elif choice == ActionChoice(Action.SHOW_PRICES):
            await self._send(turn.sender_id, templates.build_price_table(self.ctx.catalog))
            await self._send_welcome(turn)
            turn.machine.transition(TransitionTrigger.INFO_SHOWN)
        elif choice == ActionChoice(Action.DIRECT_CONTACT):
            await self._send(turn.sender_id, templates.build_direct_contact(self.ctx.driver))
            await self._send_welcome(turn)
            turn.machine.transition(TransitionTrigger.INFO_SHOWN)
        else:
            await self._reprompt(turn)

    async def _on_origin_choice(self, turn: Turn) -> None:
        choice = parse_selection(turn.event.value)
        if isinstance(choice, EscapeChoice):
            turn.machine.transition(TransitionTrigger.ORIGIN_ESCAPE)
            await self._say(turn, ASK_ORIGIN_TEXT)
        elif isinstance(choice, LocationChoice):
            turn.session.data.origin = choice.name
            turn.machine.transition(TransitionTrigger.ORIGIN_CHOSEN)
            await self._prompt_destination(turn)
        else:
            await self._reprompt(turn)

    async def _on_destination_choice(self, turn: Turn) -> None:
        choice = parse_selection(turn.event.value)
        if isinstance(choice, EscapeChoice):
            turn.machine.transition(TransitionTrigger.DESTINATION_ESCAPE)
            await self._say(turn, ASK_DESTINATION_TEXT)
        elif isinstance(choice, LocationChoice):
            turn.session.data.destination = choice.name
            turn.machine.transition(TransitionTrigger.DESTINATION_CHOSEN)
            await self._prompt_passengers(turn)
        else:
            await self._reprompt(turn)

    async def _on_passenger_choice(self, turn: Turn) -> None:
        choice = parse_selection(turn.event.value)
        if not isinstance(choice, PassengerChoice):
            await self._reprompt(turn)
            return
        data = turn.session.data
        data.passenger_count = choice.count
        data.quote = calculate_quote(data.destination or "", choice.count, self.ctx.catalog)
        logger.info(
            "Quote for %s -> %s (%d pax): total %.2f",
            data.origin, data.destination, choice.count, data.quote.total,
        )
        turn.machine.transition(TransitionTrigger.QUOTE_PRESENTED)
        await self._send(turn.sender_id, templates.build_quote_summary(data))

    async def _on_confirmation(self, turn: Turn) -> None:
        choice = parse_selection(turn.event.value)
        if choice == ActionChoice(Action.CONFIRM_TRIP):
            turn.machine.transition(TransitionTrigger.TRIP_CONFIRMED)
            await self._say(turn, ASK_NAME_TEXT)
        elif choice == ActionChoice(Action.START_QUOTE):
            turn.session.reset()
            turn.machine.transition(TransitionTrigger.QUOTE_RESTARTED)
            await self._on_welcome(turn)
        else:
            await self._reprompt(turn)

    # ------------------------------------------------------------------ #
    # Free-text steps
    # ------------------------------------------------------------------ #

    async def _on_origin_text(self, turn: Turn) -> None:
        turn.session.data.origin = turn.event.value
        turn.machine.transition(TransitionTrigger.ORIGIN_CHOSEN)
        await self._prompt_destination(turn)

    async def _on_destination_text(self, turn: Turn) -> None:
        turn.session.data.destination = turn.event.value
        turn.machine.transition(TransitionTrigger.DESTINATION_CHOSEN)
        await self._prompt_passengers(turn)

    async def _on_name(self, turn: Turn) -> None:
        name = turn.event.value.strip()
        turn.session.data.customer_name = name
        turn.machine.transition(TransitionTrigger.NAME_RECEIVED)
        await self._send(turn.sender_id, templates.build_ask_contact(name))

    async def _on_contact(self, turn: Turn) -> None:
        turn.session.data.customer_contact = turn.event.value.strip()
        await self._finalize(turn)
        turn.machine.transition(TransitionTrigger.CONTACT_RECEIVED)

    # ------------------------------------------------------------------ #
    # Exits
    # ------------------------------------------------------------------ #

    async def _finalize(self, turn: Turn) -> None:
        """Persist the booking, tell customer and driver, then drop the session."""
        record = await create_booking(
            self.ctx.store,
            turn.sender_id,
            turn.session.data,
            self.ctx.id_generator,
            clock=self.ctx.clock,
        )
        await self._send(turn.sender_id, templates.build_booking_confirmation(record, self.ctx.driver))

        driver_number = whatsapp_number(self.ctx.driver.phone, self.ctx.driver.country_code)
        notified = await self._send(
            driver_number,
            templates.build_driver_notification(record, self.ctx.conversation.display_utc_offset_hours),
        )
        if not notified.delivered:
            logger.error("Driver was not notified of booking %s: %s", record.id, notified.reason)

        await self.ctx.store.delete_session(turn.sender_id)

    async def _cancel(self, turn: Turn) -> None:
        await self._say(turn, CANCELLATION_TEXT)
        await self.ctx.store.delete_session(turn.sender_id)
        logger.info("Session cancelled at step %s", turn.session.step.value)

    async def _reprompt(self, turn: Turn, violations: Sequence[GuardrailResult] = ()) -> None:
        """Repeat the question for the current step without changing any data."""
        step = turn.machine.current_step
        for violation in violations:
            if violation.violation_type == "empty_text":
                await self._say(turn, EMPTY_TEXT_HINT)
            elif violation.violation_type == "text_too_long":
                await self._say(
                    turn, TEXT_TOO_LONG_HINT.format(max_length=self.ctx.conversation.max_text_length)
                )

        data = turn.session.data
        if step == Step.AWAITING_START_CHOICE:
            await self._send_welcome(turn)
        elif step == Step.AWAITING_ORIGIN_CHOICE:
            await self._send(turn.sender_id, templates.build_origin_picker(self.ctx.catalog, self.ctx.driver))
        elif step == Step.AWAITING_DESTINATION_CHOICE:
            await self._send(turn.sender_id, templates.build_destination_picker(self.ctx.catalog, data.origin))
        elif step == Step.AWAITING_PASSENGER_CHOICE:
            await self._send(turn.sender_id, templates.build_passenger_picker())
        elif step == Step.CONFIRMATION:
            await self._send(turn.sender_id, templates.build_quote_summary(data))
        elif step in TEXT_STEPS:
            await self._say(turn, _TEXT_QUESTIONS[step])
        else:
            raise RuntimeError(f"Nothing to repeat at step '{step.value}'")


_TEXT_QUESTIONS: dict[Step, str] = {
    Step.AWAITING_ORIGIN_TEXT: ASK_ORIGIN_TEXT,
    Step.AWAITING_DESTINATION_TEXT: ASK_DESTINATION_TEXT,
    Step.AWAITING_NAME: ASK_NAME_TEXT,
    Step.AWAITING_CONTACT: ASK_CONTACT_TEXT,
}
