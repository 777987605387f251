"""
Finite state machine for the ride booking conversation.

Defines the conversation steps and the explicit transitions between them.
Every step change made by the conversation engine goes through this table,
so a handler can never move a session somewhere the flow does not allow.

Usage:
    sm = ConversationStateMachine(Step.AWAITING_START_CHOICE)
    sm.transition(TransitionTrigger.QUOTE_REQUESTED)
    assert sm.current_step == Step.ORIGIN_PROMPT
"""

import logging
from enum import Enum
from dataclasses import dataclass

logger = logging.getLogger(__name__)


class Step(str, Enum):
    """All positions a session can be in."""
    WELCOME = "welcome"
    AWAITING_START_CHOICE = "awaiting_start_choice"
    ORIGIN_PROMPT = "origin_prompt"
    AWAITING_ORIGIN_CHOICE = "awaiting_origin_choice"
    AWAITING_ORIGIN_TEXT = "awaiting_origin_text"
    DESTINATION_PROMPT = "destination_prompt"
    AWAITING_DESTINATION_CHOICE = "awaiting_destination_choice"
    AWAITING_DESTINATION_TEXT = "awaiting_destination_text"
    PASSENGER_PROMPT = "passenger_prompt"
    AWAITING_PASSENGER_CHOICE = "awaiting_passenger_choice"
    CONFIRMATION = "confirmation"
    AWAITING_NAME = "awaiting_name"
    AWAITING_CONTACT = "awaiting_contact"
    COMPLETED = "completed"


# Steps that only take typed text. All others take selection ids.
TEXT_STEPS: frozenset[Step] = frozenset({
    Step.AWAITING_ORIGIN_TEXT,
    Step.AWAITING_DESTINATION_TEXT,
    Step.AWAITING_NAME,
    Step.AWAITING_CONTACT,
})

# Steps that only render a prompt and move on, whatever the input.
PROMPT_STEPS: frozenset[Step] = frozenset({
    Step.WELCOME,
    Step.ORIGIN_PROMPT,
    Step.DESTINATION_PROMPT,
    Step.PASSENGER_PROMPT,
})


class TransitionTrigger(str, Enum):
    """Events that cause step transitions."""
    GREETING_SENT = "greeting_sent"
    INFO_SHOWN = "info_shown"
    QUOTE_REQUESTED = "quote_requested"
    ORIGIN_PROMPTED = "origin_prompted"
    ORIGIN_ESCAPE = "origin_escape"
    ORIGIN_CHOSEN = "origin_chosen"
    DESTINATION_PROMPTED = "destination_prompted"
    DESTINATION_ESCAPE = "destination_escape"
    DESTINATION_CHOSEN = "destination_chosen"
    PASSENGERS_PROMPTED = "passengers_prompted"
    QUOTE_PRESENTED = "quote_presented"
    TRIP_CONFIRMED = "trip_confirmed"
    QUOTE_RESTARTED = "quote_restarted"
    NAME_RECEIVED = "name_received"
    CONTACT_RECEIVED = "contact_received"


@dataclass
class Transition:
    """A single valid step transition."""
    from_step: Step
    to_step: Step
    trigger: TransitionTrigger


class InvalidTransitionError(Exception):
    """Raised when a transition is not valid from the current step."""


class ConversationStateMachine:
    """
    Step tracker for one inbound event.

    Built from the step stored in the session, driven by the engine's
    handlers, and read back to persist the resulting step.
    """

    TRANSITIONS: list[Transition] = [
        # --- Greeting ---
        Transition(Step.WELCOME, Step.AWAITING_START_CHOICE, TransitionTrigger.GREETING_SENT),

        # --- Start menu ---
        Transition(Step.AWAITING_START_CHOICE, Step.ORIGIN_PROMPT,
                   TransitionTrigger.QUOTE_REQUESTED),
        Transition(Step.AWAITING_START_CHOICE, Step.AWAITING_START_CHOICE,
                   TransitionTrigger.INFO_SHOWN),

        # --- Origin ---
        Transition(Step.ORIGIN_PROMPT, Step.AWAITING_ORIGIN_CHOICE,
                   TransitionTrigger.ORIGIN_PROMPTED),
        Transition(Step.AWAITING_ORIGIN_CHOICE, Step.AWAITING_ORIGIN_TEXT,
                   TransitionTrigger.ORIGIN_ESCAPE),
        Transition(Step.AWAITING_ORIGIN_CHOICE, Step.DESTINATION_PROMPT,
                   TransitionTrigger.ORIGIN_CHOSEN),
        Transition(Step.AWAITING_ORIGIN_TEXT, Step.DESTINATION_PROMPT,
                   TransitionTrigger.ORIGIN_CHOSEN),

        # --- Destination ---
        Transition(Step.DESTINATION_PROMPT, Step.AWAITING_DESTINATION_CHOICE,
                   TransitionTrigger.DESTINATION_PROMPTED),
        Transition(Step.AWAITING_DESTINATION_CHOICE, Step.AWAITING_DESTINATION_TEXT,
                   TransitionTrigger.DESTINATION_ESCAPE),
        Transition(Step.AWAITING_DESTINATION_CHOICE, Step.PASSENGER_PROMPT,
                   TransitionTrigger.DESTINATION_CHOSEN),
        Transition(Step.AWAITING_DESTINATION_TEXT, Step.PASSENGER_PROMPT,
                   TransitionTrigger.DESTINATION_CHOSEN),

        # --- Passengers and quote ---
        Transition(Step.PASSENGER_PROMPT, Step.AWAITING_PASSENGER_CHOICE,
                   TransitionTrigger.PASSENGERS_PROMPTED),
        Transition(Step.AWAITING_PASSENGER_CHOICE, Step.CONFIRMATION,
                   TransitionTrigger.QUOTE_PRESENTED),

        # --- Confirmation gate ---
        Transition(Step.CONFIRMATION, Step.AWAITING_NAME, TransitionTrigger.TRIP_CONFIRMED),
        Transition(Step.CONFIRMATION, Step.WELCOME, TransitionTrigger.QUOTE_RESTARTED),

        # --- Customer details ---
        Transition(Step.AWAITING_NAME, Step.AWAITING_CONTACT, TransitionTrigger.NAME_RECEIVED),
        Transition(Step.AWAITING_CONTACT, Step.COMPLETED, TransitionTrigger.CONTACT_RECEIVED),
    ]

    def __init__(self, step: Step = Step.WELCOME) -> None:
        self._current_step = step
        self._visited: list[Step] = [step]

    @property
    def current_step(self) -> Step:
        return self._current_step

    def transition(self, trigger: TransitionTrigger) -> Step:
        """
        Execute a step transition.

        Args:
            trigger: The event triggering the transition.

        Returns:
            The new step.

        Raises:
            InvalidTransitionError: If no valid transition exists.
        """
        for t in self.TRANSITIONS:
            if t.from_step == self._current_step and t.trigger == trigger:
                old_step = self._current_step
                self._current_step = t.to_step
                self._visited.append(self._current_step)

                logger.debug(
                    "Step transition: %s -> %s (trigger: %s)",
                    old_step.value, self._current_step.value, trigger.value,
                )
                return self._current_step

        valid = [t.value for t in self.get_valid_triggers()]
        raise InvalidTransitionError(
            f"No valid transition from '{self._current_step.value}' "
            f"with trigger '{trigger.value}'. Valid triggers: {valid}"
        )

    def get_valid_triggers(self) -> list[TransitionTrigger]:
        """Return all triggers valid from the current step."""
        return [t.trigger for t in self.TRANSITIONS if t.from_step == self._current_step]

    def get_step_trace(self) -> list[str]:
        """Return ordered list of step names visited."""
        return [step.value for step in self._visited]

    def is_terminal(self) -> bool:
        """Check if the booking has been completed."""
        return self._current_step == Step.COMPLETED
