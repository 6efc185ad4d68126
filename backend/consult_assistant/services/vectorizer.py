"""Embedding client: turns passage and query text into vectors."""

from __future__ import annotations

import asyncio
import logging

import httpx
from google import genai
from google.genai import errors as genai_errors
from google.genai import types

from consult_assistant.errors import RemoteServiceError

logger = logging.getLogger(__name__)


def create_genai_client(api_key: str) -> genai.Client:
    """Create a Google GenAI client for the Gemini API.

    The same client instance exposes both sync (client.models) and async
    (client.aio.models) interfaces; the assistant only uses the async one.
    """
    return genai.Client(api_key=api_key)


def _preview(text: str) -> str:
    return text[:100] + ("..." if len(text) > 100 else "")


class Vectorizer:
    """Hosted embedding model wrapper.

    Passages and queries go through the same model and dimensionality; the
    ``model_tag`` is stored with every passage so vectors from a different
    model are never compared against each other.
    """

    def __init__(
        self,
        client: genai.Client,
        model: str,
        dimensions: int,
        timeout: float = 30.0,
    ) -> None:
        self._client = client
        self.model = model
        self.dimensions = dimensions
        self.timeout = timeout

    @property
    def model_tag(self) -> str:
        return f"{self.model}:{self.dimensions}"

    async def embed_passage(self, text: str) -> list[float]:
        """Embed a consultation passage for indexing."""
        return await self._embed(text, "RETRIEVAL_DOCUMENT")

    async def embed_query(self, text: str) -> list[float]:
        """Embed a user question for search."""
        return await self._embed(text, "RETRIEVAL_QUERY")

    async def _embed(self, text: str, task_type: str) -> list[float]:
        logger.debug(
            "Embedding %s (%d chars): %r", task_type, len(text), _preview(text)
        )
        try:
            response = await asyncio.wait_for(
                self._client.aio.models.embed_content(
                    model=self.model,
                    contents=[text],
                    config=types.EmbedContentConfig(
                        output_dimensionality=self.dimensions,
                        task_type=task_type,
                    ),
                ),
                timeout=self.timeout,
            )
        except TimeoutError:
            raise RemoteServiceError(
                f"Embedding request timed out after {self.timeout:g}s"
            )
        except genai_errors.APIError as e:
            raise RemoteServiceError(
                f"Embedding request failed: {e.message or e}", status=e.code
            )
        except httpx.HTTPError as e:
            raise RemoteServiceError(f"Embedding service unreachable: {e}")

        embeddings = getattr(response, "embeddings", None)
        if not embeddings or not embeddings[0].values:
            raise RemoteServiceError("Embedding response contained no vector")
        vector = [float(v) for v in embeddings[0].values]
        if len(vector) != self.dimensions:
            raise RemoteServiceError(
                f"Embedding has {len(vector)} dimensions, expected {self.dimensions}"
            )
        logger.debug("Embedded %s -> %d-dim vector", task_type, len(vector))
        return vector
