"""
Offline console demo: runs the booking conversation without WhatsApp.

Uses the real conversation engine, guardrails and quote calculator with
an in-memory store and a transport that prints messages to the terminal.
No API keys, no network calls.

Buttons and list rows are numbered; type the number to pick one, or type
free text when the bot asks for it.

Usage:
    python console_demo.py
    python console_demo.py --scenario booking
    python console_demo.py --scenario other_address
"""

import argparse
import asyncio
from typing import Optional

from src.config import settings
from src.conversation.flow import BookingConversation, ConversationContext
from src.messaging.dispatcher import MessageDispatcher
from src.schemas.message_schema import (
    ButtonMessage,
    InboundEvent,
    InputKind,
    ListMessage,
    OutboundMessage,
    TextMessage,
)
from src.store.kv_store import InMemoryKeyValueStore
from src.store.session_store import SessionStore
from src.utils import whatsapp_number

BLUE = "\033[94m"
GREEN = "\033[92m"
YELLOW = "\033[93m"
RED = "\033[91m"
DIM = "\033[2m"
RESET = "\033[0m"
BOLD = "\033[1m"

CONSOLE_SENDER = "5565999990000"


class ConsoleTransport:
    """Prints outbound messages and remembers the customer's last options."""

    def __init__(self, customer_id: str) -> None:
        self.customer_id = customer_id
        self.options: list[str] = []

    async def send(self, recipient: str, message: OutboundMessage) -> Optional[str]:
        label = "Bot" if recipient == self.customer_id else f"Bot -> {recipient}"
        color = GREEN if recipient == self.customer_id else YELLOW
        print(f"\n{color}{BOLD}[{label}]{RESET} {color}{_body(message)}{RESET}")

        if recipient != self.customer_id:
            return None
        if isinstance(message, ButtonMessage):
            self.options = [option.id for option in message.options]
            for i, option in enumerate(message.options, start=1):
                print(f"   {BOLD}{i}.{RESET} {option.title}")
        elif isinstance(message, ListMessage):
            self.options = message.row_ids()
            i = 1
            for section in message.sections:
                print(f"   {DIM}{section.title}{RESET}")
                for row in section.rows:
                    print(f"   {BOLD}{i}.{RESET} {row.title}")
                    i += 1
        return None

    async def close(self) -> None:
        pass


def _body(message: OutboundMessage) -> str:
    if isinstance(message, TextMessage):
        return message.body
    if isinstance(message, ListMessage):
        return f"{message.header}\n{message.body}"
    return message.body


class ConsoleSession:
    """Feeds typed lines into the conversation engine as WhatsApp events."""

    # Pre-scripted scenarios for --scenario flag. Numbers pick options.
    SCENARIOS: dict[str, list[str]] = {
        "booking": ["oi", "1", "1", "15", "2", "1", "Maria Souza", "11999999999"],
        "other_address": ["oi", "1", "15", "Rua das Flores, 120", "16", "3", "1", "João", "65999990000"],
        "prices": ["oi", "2", "3", "cancelar"],
        "new_quote": ["oi", "1", "2", "3", "1", "2", "1", "1", "16", "1", "1", "Ana", "65988887777"],
    }

    def __init__(self) -> None:
        self.transport = ConsoleTransport(CONSOLE_SENDER)
        self.kv = InMemoryKeyValueStore()
        self.store = SessionStore(self.kv, booking_prefix=settings.store.booking_key_prefix)
        self.conversation = BookingConversation(
            ConversationContext(
                store=self.store,
                dispatcher=MessageDispatcher(self.transport),
                driver=settings.driver,
                conversation=settings.conversation,
            )
        )

    def system_log(self, text: str) -> None:
        print(f"{DIM}  >> {text}{RESET}")

    def _to_event(self, text: str) -> InboundEvent:
        if text.isdigit() and 1 <= int(text) <= len(self.transport.options):
            return InboundEvent(
                sender_id=CONSOLE_SENDER,
                kind=InputKind.SELECTION,
                value=self.transport.options[int(text) - 1],
            )
        return InboundEvent(sender_id=CONSOLE_SENDER, kind=InputKind.TEXT, value=text)

    async def send_line(self, text: str) -> None:
        event = self._to_event(text)
        outcome = await self.conversation.handle_event(event)
        session = await self.store.get_session(CONSOLE_SENDER)
        step = session.step.value if session else "-"
        self.system_log(f"{event.kind.value}={event.value!r} -> {outcome.value}, step: {step}")

    def _banner(self, title: str) -> None:
        print()
        print(f"{BOLD}{'=' * 60}{RESET}")
        print(f"{BOLD}  RIDE BOOKING BOT - {title}{RESET}")
        print(f"{BOLD}  Driver: {settings.driver.name} ({settings.driver.city}){RESET}")
        print(f"{BOLD}  Driver WhatsApp: {whatsapp_number(settings.driver.phone, settings.driver.country_code)}{RESET}")
        print(f"{BOLD}{'=' * 60}{RESET}")

    async def run_scenario(self, scenario: str) -> None:
        """Auto-play a pre-scripted scenario for demo purposes."""
        lines = self.SCENARIOS.get(scenario)
        if not lines:
            print(f"{RED}Unknown scenario: {scenario}{RESET}")
            return

        self._banner(f"Scenario: {scenario}")
        for line in lines:
            print(f"\n{BLUE}[Customer] {RESET}{line}")
            await self.send_line(line)

        bookings = [key for key in self.kv.keys() if key.startswith(self.store.booking_prefix)]
        print(f"\n{BOLD}{'=' * 60}{RESET}")
        print(f"{BOLD}  Scenario '{scenario}' complete.{RESET}")
        print(f"{DIM}  Bookings stored: {bookings or 'none'}{RESET}")
        print(f"{BOLD}{'=' * 60}{RESET}")

    async def run(self) -> None:
        self._banner("Console Demo")
        print(f"{BOLD}  Type 'quit' to exit{RESET}")

        while True:
            line = (await asyncio.to_thread(input, f"\n{BLUE}[Customer] {RESET}")).strip()
            if not line:
                continue
            if line.lower() in ("quit", "exit", "q"):
                print(f"\n{DIM}Session ended.{RESET}")
                break
            await self.send_line(line)


def main() -> None:
    parser = argparse.ArgumentParser(description="Offline console demo")
    parser.add_argument(
        "--scenario",
        choices=sorted(ConsoleSession.SCENARIOS),
        default=None,
        help="Auto-play a pre-scripted scenario instead of interactive mode",
    )
    args = parser.parse_args()

    session = ConsoleSession()
    if args.scenario:
        asyncio.run(session.run_scenario(args.scenario))
    else:
        asyncio.run(session.run())


if __name__ == "__main__":
    main()
