"""Rule-based decision on whether to point the user at human support.

Deliberately conservative: a needless support prompt is cheaper than leaving
a user stuck with an unhelpful answer.
"""

from __future__ import annotations

ESCALATION_KEYWORDS = (
    # support / complaints
    "contact support",
    "escalate",
    "complaint",
    "cannot help",
    "not available",
    "unable to",
    # dissatisfaction
    "dissatisfied",
    "unhappy",
    # billing / payment
    "refund",
    "billing",
    "payment issue",
    # cancellation policy
    "cancellation policy",
    # errors
    "technical issue",
    "error",
    "problem",
    "issue",
)

HEDGING_PHRASES = (
    "i don't know",
    "i'm not sure",
    "unable to determine",
)

GENERIC_ANSWER_MAX_CHARS = 50
MIN_CONFIDENT_RETRIEVALS = 2


def _normalize(text: str) -> str:
    return text.lower().replace("’", "'")


def has_escalation_keyword(text: str) -> bool:
    lowered = _normalize(text)
    return any(keyword in lowered for keyword in ESCALATION_KEYWORDS)


def is_generic_answer(answer: str) -> bool:
    lowered = _normalize(answer)
    return len(answer.strip()) < GENERIC_ANSWER_MAX_CHARS or any(
        phrase in lowered for phrase in HEDGING_PHRASES
    )


def should_escalate(question: str, answer: str, retrieved_count: int) -> bool:
    if has_escalation_keyword(question) or has_escalation_keyword(answer):
        return True
    return retrieved_count < MIN_CONFIDENT_RETRIEVALS and is_generic_answer(answer)
