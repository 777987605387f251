"""
Input guardrails applied to every inbound event before step dispatch.

Three independent checks, each covering a different concern:
1. CancellationGuardrail: the cancel keyword, honoured at every step
2. InputKindGuardrail: text vs selection acceptance per step
3. TextLengthGuardrail: empty or oversized free text

These are composed into a GuardrailPipeline that the conversation
engine consults once per event.
"""

import logging
from dataclasses import dataclass
from typing import Iterable, Optional

from src.config import ConversationConfig
from src.conversation.state_machine import PROMPT_STEPS, TEXT_STEPS, Step
from src.schemas.message_schema import InboundEvent, InputKind

logger = logging.getLogger(__name__)


@dataclass
class GuardrailResult:
    """Outcome of a single guardrail check."""
    passed: bool
    violation_type: Optional[str] = None
    message: Optional[str] = None
    severity: str = "reprompt"  # "reprompt" | "cancel"


class CancellationGuardrail:
    """Detects the cancellation keyword in any kind of input."""

    def __init__(self, keywords: Iterable[str]) -> None:
        self.keywords = frozenset(k.strip().lower() for k in keywords if k.strip())

    def check(self, event: InboundEvent) -> GuardrailResult:
        if event.value.strip().lower() in self.keywords:
            logger.info("Cancellation keyword received")
            return GuardrailResult(
                passed=False,
                violation_type="cancellation",
                message="Customer asked to cancel.",
                severity="cancel",
            )
        return GuardrailResult(passed=True)


class InputKindGuardrail:
    """Rejects text at selection steps and selections at text steps."""

    def check(self, step: Step, event: InboundEvent) -> GuardrailResult:
        if step in PROMPT_STEPS:
            return GuardrailResult(passed=True)
        expects_text = step in TEXT_STEPS
        if expects_text and event.kind != InputKind.TEXT:
            return GuardrailResult(
                passed=False,
                violation_type="selection_at_text_step",
                message=f"Step '{step.value}' expects typed text.",
            )
        if not expects_text and event.kind != InputKind.SELECTION:
            return GuardrailResult(
                passed=False,
                violation_type="text_at_selection_step",
                message=f"Step '{step.value}' expects a button or list selection.",
            )
        return GuardrailResult(passed=True)


class TextLengthGuardrail:
    """Keeps free-text answers non-empty and within a sane length."""

    def __init__(self, max_length: int) -> None:
        self.max_length = max_length

    def check(self, step: Step, event: InboundEvent) -> GuardrailResult:
        if step not in TEXT_STEPS or event.kind != InputKind.TEXT:
            return GuardrailResult(passed=True)
        text = event.value.strip()
        if not text:
            return GuardrailResult(
                passed=False,
                violation_type="empty_text",
                message="Free-text answer is empty.",
            )
        if len(text) > self.max_length:
            return GuardrailResult(
                passed=False,
                violation_type="text_too_long",
                message=f"Free-text answer exceeds {self.max_length} characters.",
            )
        return GuardrailResult(passed=True)


class GuardrailPipeline:
    """Composes all input guardrails for one inbound event."""

    def __init__(self, config: ConversationConfig) -> None:
        self.cancellation = CancellationGuardrail(config.cancel_keywords)
        self.input_kind = InputKindGuardrail()
        self.text_length = TextLengthGuardrail(config.max_text_length)

    def check_input(self, step: Step, event: InboundEvent) -> list[GuardrailResult]:
        """Return failed checks. Cancellation short-circuits everything else."""
        cancel = self.cancellation.check(event)
        if not cancel.passed:
            return [cancel]
        results = [
            self.input_kind.check(step, event),
            self.text_length.check(step, event),
        ]
        return [r for r in results if not r.passed]
