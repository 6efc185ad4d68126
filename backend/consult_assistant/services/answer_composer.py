"""Prompt assembly and answer generation over retrieved consultations."""

from __future__ import annotations

import logging
from collections.abc import Sequence

from consult_assistant.errors import RemoteServiceError
from consult_assistant.models.rag import ChatMessage, ComposedAnswer, RetrievalResult
from consult_assistant.services.generator import TextGenerator
from consult_assistant.services.sanitizer import sanitize

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = """\
You are a helpful assistant for a healthcare consultation app. You help \
patients answer questions about their past consultations.

Your role:
- Answer clearly and accurately, based only on the consultation data provided
- Be empathetic and professional
- If the information is not in the consultations, say so
- Never make up or guess information
- Format dates and times naturally (e.g., "December 24, 2025 at 4:00 PM")

FORMATTING RULES:
- Use bullet points (- or •) when listing multiple items
- Use **text** to bold important details (dates, doctor names, amounts, status)
- DO NOT use markdown headers (###, ##, #)
- DO NOT use code blocks or inline code
- DO NOT use links
"""

USER_PROMPT_TEMPLATE = """\
Based on the following consultation history, answer this question clearly \
and naturally.

Question: {question}

Consultation History:
{context}

Give a well-formatted answer with bullet points where helpful and **bold** \
text for key details."""

PASSAGE_SEPARATOR = "\n\n---\n\n"

FALLBACK_ANSWER = (
    "I apologize, but I couldn't generate an answer right now. "
    "Please try again in a moment."
)


def build_context(results: Sequence[RetrievalResult], max_chars: int) -> str:
    """Join passages best-first, stopping once ``max_chars`` would be exceeded.

    The first passage is always included, truncated if it alone is too long.
    """
    blocks: list[str] = []
    used = 0
    for r in results:
        block = f"Consultation {r.source_id}:\n{r.passage.passage_text}"
        cost = len(block) + (len(PASSAGE_SEPARATOR) if blocks else 0)
        if used + cost > max_chars:
            if not blocks:
                blocks.append(block[:max_chars])
            break
        blocks.append(block)
        used += cost
    return PASSAGE_SEPARATOR.join(blocks)


class AnswerComposer:
    def __init__(self, generator: TextGenerator, max_context_chars: int = 6000) -> None:
        self.generator = generator
        self.max_context_chars = max_context_chars

    def build_messages(
        self,
        question: str,
        results: Sequence[RetrievalResult],
        user_display_name: str | None = None,
    ) -> list[ChatMessage]:
        system = SYSTEM_PROMPT
        if user_display_name:
            system += f"\nThe patient's name is {user_display_name}.\n"
        context = build_context(results, self.max_context_chars)
        return [
            ChatMessage(role="system", content=system),
            ChatMessage(
                role="user",
                content=USER_PROMPT_TEMPLATE.format(question=question, context=context),
            ),
        ]

    async def compose(
        self,
        question: str,
        results: Sequence[RetrievalResult],
        user_display_name: str | None = None,
    ) -> ComposedAnswer:
        """Generate and sanitize an answer.

        Generation failures and empty output both give ``FALLBACK_ANSWER``
        with ``is_fallback=True``; callers must escalate those.
        """
        messages = self.build_messages(question, results, user_display_name)
        logger.info(
            "Composing answer from %d passages (%d prompt chars)",
            len(results),
            sum(len(m.content) for m in messages),
        )
        try:
            raw = await self.generator.generate(messages)
        except RemoteServiceError as e:
            logger.warning("Generation failed, using fallback answer: %s", e.message)
            return ComposedAnswer(text=FALLBACK_ANSWER, is_fallback=True)

        text = sanitize(raw)
        if not text:
            logger.warning("Generation returned empty content, using fallback answer")
            return ComposedAnswer(text=FALLBACK_ANSWER, is_fallback=True)
        return ComposedAnswer(text=text)
