from src.conversation.guardrails import GuardrailPipeline
from src.conversation.selection import InvalidSelectionError, parse_selection
from src.conversation.state_machine import (
    ConversationStateMachine,
    Step,
    TransitionTrigger,
)

__all__ = [
    "ConversationStateMachine",
    "Step",
    "TransitionTrigger",
    "GuardrailPipeline",
    "InvalidSelectionError",
    "parse_selection",
]
