"""Generation client: turns an ordered chat transcript into answer text."""

from __future__ import annotations

import asyncio
import logging

import httpx
from google import genai
from google.genai import errors as genai_errors
from google.genai import types

from consult_assistant.errors import RemoteServiceError
from consult_assistant.models.rag import ChatMessage

logger = logging.getLogger(__name__)

# Gemini names the assistant role "model".
_ROLE_MAP = {"user": "user", "assistant": "model"}


class TextGenerator:
    """Hosted generation model wrapper."""

    def __init__(
        self,
        client: genai.Client,
        model: str,
        temperature: float = 0.7,
        max_output_tokens: int = 800,
        timeout: float = 30.0,
    ) -> None:
        self._client = client
        self.model = model
        self.temperature = temperature
        self.max_output_tokens = max_output_tokens
        self.timeout = timeout

    async def generate(self, messages: list[ChatMessage]) -> str:
        """Generate a reply. Returns "" when the model produced no text."""
        system_parts = [m.content for m in messages if m.role == "system"]
        contents = [
            types.Content(
                role=_ROLE_MAP[m.role],
                parts=[types.Part.from_text(text=m.content)],
            )
            for m in messages
            if m.role != "system"
        ]
        config = types.GenerateContentConfig(
            system_instruction="\n\n".join(system_parts) or None,
            temperature=self.temperature,
            max_output_tokens=self.max_output_tokens,
        )

        logger.info(
            "Generating answer: model=%s messages=%d max_output_tokens=%d",
            self.model,
            len(contents),
            self.max_output_tokens,
        )
        try:
            response = await asyncio.wait_for(
                self._client.aio.models.generate_content(
                    model=self.model,
                    contents=contents,
                    config=config,
                ),
                timeout=self.timeout,
            )
        except TimeoutError:
            raise RemoteServiceError(
                f"Generation request timed out after {self.timeout:g}s"
            )
        except genai_errors.APIError as e:
            raise RemoteServiceError(
                f"Generation request failed: {e.message or e}", status=e.code
            )
        except httpx.HTTPError as e:
            raise RemoteServiceError(f"Generation service unreachable: {e}")

        text = response.text or ""
        logger.debug("Generated %d chars", len(text))
        return text
