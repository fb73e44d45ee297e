"""
Embedding clients for corpus passages (offline) and queries (online).

Two providers:
  - OpenAI embeddings API (default, matches the hosted index)
  - a local SentenceTransformer model, run on a worker thread
"""

from __future__ import annotations

import asyncio
import threading
from typing import Any, Protocol

from openai import AsyncOpenAI

from transcript_search.core.config import settings
from transcript_search.services.llm import create_openai_client
from transcript_search.utils.logging import get_logger

logger = get_logger("transcript_search.services.embedding")

__all__ = [
    "EmbeddingClient",
    "OpenAIEmbeddingClient",
    "SentenceTransformerEmbeddingClient",
    "create_embedding_client",
]


class EmbeddingClient(Protocol):
    async def embed(self, text: str) -> list[float]:
        ...

    async def embed_batch(self, texts: list[str]) -> list[list[float]]:
        ...


class OpenAIEmbeddingClient:
    def __init__(self, client: AsyncOpenAI | None = None, *, model: str | None = None):
        self._client = client or create_openai_client()
        self.model = model or settings.embedding_model

    async def embed(self, text: str) -> list[float]:
        vectors = await self.embed_batch([text])
        return vectors[0]

    async def embed_batch(self, texts: list[str]) -> list[list[float]]:
        if not texts:
            return []
        response = await self._client.embeddings.create(model=self.model, input=texts)
        # The API may return items out of order; index is authoritative.
        data = sorted(response.data, key=lambda d: d.index)
        return [list(d.embedding) for d in data]


class SentenceTransformerEmbeddingClient:
    """
    Local embedding model.  The model is loaded lazily on first use and
    shared by every call on this instance.
    """

    def __init__(self, model_name: str | None = None):
        self.model_name = model_name or settings.sentence_transformer_model
        self._model: Any | None = None
        self._lock = threading.Lock()

    def _get_model(self) -> Any:
        if self._model is None:
            with self._lock:
                if self._model is None:
                    from sentence_transformers import SentenceTransformer

                    self._model = SentenceTransformer(self.model_name)
                    logger.info("Loaded SentenceTransformer model %s", self.model_name)
        return self._model

    def _encode(self, texts: list[str]) -> list[list[float]]:
        # show_progress_bar=False keeps tqdm away from stderr
        return self._get_model().encode(texts, show_progress_bar=False).tolist()

    async def embed(self, text: str) -> list[float]:
        vectors = await self.embed_batch([text])
        return vectors[0]

    async def embed_batch(self, texts: list[str]) -> list[list[float]]:
        if not texts:
            return []
        return await asyncio.to_thread(self._encode, texts)


def create_embedding_client(provider: str | None = None) -> EmbeddingClient:
    """Build the embedding client named by ``provider`` (or settings)."""
    name = (provider or settings.embedding_provider).lower()
    if name == "openai":
        return OpenAIEmbeddingClient()
    if name in ("sentence_transformers", "sentence-transformers", "local"):
        return SentenceTransformerEmbeddingClient()
    raise ValueError(f"Unknown embedding provider: {name}")
