"""Tests for the booking conversation state machine."""

import pytest

from src.conversation.state_machine import (
    ConversationStateMachine,
    InvalidTransitionError,
    TEXT_STEPS,
    Step,
    TransitionTrigger,
)


class TestInitialState:
    def test_starts_at_welcome(self, state_machine):
        assert state_machine.current_step == Step.WELCOME

    def test_can_start_from_stored_step(self):
        sm = ConversationStateMachine(Step.CONFIRMATION)
        assert sm.current_step == Step.CONFIRMATION

    def test_initial_trace_has_one_entry(self, state_machine):
        assert state_machine.get_step_trace() == ["welcome"]

    def test_not_terminal_at_start(self, state_machine):
        assert not state_machine.is_terminal()


class TestWelcomeAndStartMenu:
    def test_greeting_moves_to_start_choice(self, state_machine):
        new = state_machine.transition(TransitionTrigger.GREETING_SENT)
        assert new == Step.AWAITING_START_CHOICE

    def test_quote_requested_goes_to_origin_prompt(self):
        sm = ConversationStateMachine(Step.AWAITING_START_CHOICE)
        assert sm.transition(TransitionTrigger.QUOTE_REQUESTED) == Step.ORIGIN_PROMPT

    def test_info_shown_stays_on_start_choice(self):
        sm = ConversationStateMachine(Step.AWAITING_START_CHOICE)
        assert sm.transition(TransitionTrigger.INFO_SHOWN) == Step.AWAITING_START_CHOICE

    def test_invalid_trigger_from_welcome(self, state_machine):
        with pytest.raises(InvalidTransitionError):
            state_machine.transition(TransitionTrigger.QUOTE_REQUESTED)


class TestLocationSteps:
    def test_origin_escape_goes_to_text(self):
        sm = ConversationStateMachine(Step.AWAITING_ORIGIN_CHOICE)
        assert sm.transition(TransitionTrigger.ORIGIN_ESCAPE) == Step.AWAITING_ORIGIN_TEXT

    def test_origin_chosen_from_list_or_text(self):
        for start in (Step.AWAITING_ORIGIN_CHOICE, Step.AWAITING_ORIGIN_TEXT):
            sm = ConversationStateMachine(start)
            assert sm.transition(TransitionTrigger.ORIGIN_CHOSEN) == Step.DESTINATION_PROMPT

    def test_destination_chosen_from_list_or_text(self):
        for start in (Step.AWAITING_DESTINATION_CHOICE, Step.AWAITING_DESTINATION_TEXT):
            sm = ConversationStateMachine(start)
            assert sm.transition(TransitionTrigger.DESTINATION_CHOSEN) == Step.PASSENGER_PROMPT

    def test_destination_escape_not_valid_at_origin(self):
        sm = ConversationStateMachine(Step.AWAITING_ORIGIN_CHOICE)
        with pytest.raises(InvalidTransitionError, match="Valid triggers"):
            sm.transition(TransitionTrigger.DESTINATION_ESCAPE)


class TestConfirmationGate:
    def test_trip_confirmed_asks_name(self):
        sm = ConversationStateMachine(Step.CONFIRMATION)
        assert sm.transition(TransitionTrigger.TRIP_CONFIRMED) == Step.AWAITING_NAME

    def test_quote_restarted_returns_to_welcome(self):
        sm = ConversationStateMachine(Step.CONFIRMATION)
        assert sm.transition(TransitionTrigger.QUOTE_RESTARTED) == Step.WELCOME

    def test_contact_received_is_terminal(self):
        sm = ConversationStateMachine(Step.AWAITING_CONTACT)
        sm.transition(TransitionTrigger.CONTACT_RECEIVED)
        assert sm.is_terminal()


class TestFullPath:
    def test_happy_path_trace(self, state_machine):
        for trigger in [
            TransitionTrigger.GREETING_SENT,
            TransitionTrigger.QUOTE_REQUESTED,
            TransitionTrigger.ORIGIN_PROMPTED,
            TransitionTrigger.ORIGIN_CHOSEN,
            TransitionTrigger.DESTINATION_PROMPTED,
            TransitionTrigger.DESTINATION_CHOSEN,
            TransitionTrigger.PASSENGERS_PROMPTED,
            TransitionTrigger.QUOTE_PRESENTED,
            TransitionTrigger.TRIP_CONFIRMED,
            TransitionTrigger.NAME_RECEIVED,
            TransitionTrigger.CONTACT_RECEIVED,
        ]:
            state_machine.transition(trigger)

        assert state_machine.is_terminal()
        assert state_machine.get_step_trace() == [
            "welcome",
            "awaiting_start_choice",
            "origin_prompt",
            "awaiting_origin_choice",
            "destination_prompt",
            "awaiting_destination_choice",
            "passenger_prompt",
            "awaiting_passenger_choice",
            "confirmation",
            "awaiting_name",
            "awaiting_contact",
            "completed",
        ]


class TestInputRegime:
    @pytest.mark.parametrize("step", [
        Step.AWAITING_ORIGIN_TEXT,
        Step.AWAITING_DESTINATION_TEXT,
        Step.AWAITING_NAME,
        Step.AWAITING_CONTACT,
    ])
    def test_text_steps_accept_free_text(self, step):
        assert step in TEXT_STEPS

    @pytest.mark.parametrize("step", [
        Step.AWAITING_START_CHOICE,
        Step.AWAITING_ORIGIN_CHOICE,
        Step.AWAITING_PASSENGER_CHOICE,
        Step.CONFIRMATION,
    ])
    def test_choice_steps_do_not(self, step):
        assert step not in TEXT_STEPS

    def test_completed_has_no_outgoing_transitions(self):
        assert ConversationStateMachine(Step.COMPLETED).get_valid_triggers() == []
