"""
Embedding batcher.

Validates, truncates and embeds texts through async embedding functions,
batch by batch, returning vectors in input order regardless of the order
in which concurrent calls complete. Document texts and search queries go
through separate functions so retrieval models can embed each in its own
task mode.

Dependencies: asyncio, langchain_core (Embeddings adapter)
System role: Third stage of document ingestion pipeline, query embedding
"""

import asyncio
import logging
from typing import Awaitable, Callable, Sequence

from langchain_core.embeddings import Embeddings

from knowledge_assistant.configs.ingestion import IngestionSettings
from knowledge_assistant.core.exceptions import (
    EmbeddingFailedError,
    EmptyInputError,
    InvalidConfigError,
)

logger = logging.getLogger(__name__)

EmbeddingFunction = Callable[[str], Awaitable[list[float]]]


def document_embedding_function(embeddings: Embeddings) -> EmbeddingFunction:
    """Embed one text through ``aembed_documents`` (document task mode)."""

    async def embed_document(text: str) -> list[float] | None:
        vectors = await embeddings.aembed_documents([text])
        return vectors[0] if vectors else None

    return embed_document


class EmbeddingBatcher:
    """Order-preserving batched embedding over async embedding functions."""

    def __init__(
        self,
        embed_fn: EmbeddingFunction,
        dimension: int,
        batch_size: int = 100,
        max_tokens: int = 2048,
        chars_per_token: int = 4,
        document_embed_fn: EmbeddingFunction | None = None,
    ) -> None:
        """
        Initialize embedding batcher.

        Args:
            embed_fn: Async callable returning one vector per query text
            dimension: Expected vector length
            batch_size: Texts embedded concurrently per batch
            max_tokens: Token ceiling of the embedding model
            chars_per_token: Characters per token for the truncation ceiling
            document_embed_fn: Async callable for document texts (embed_fn if None)

        Raises:
            InvalidConfigError: When any size is not positive
        """
        for name, value in (
            ("dimension", dimension),
            ("batch_size", batch_size),
            ("max_tokens", max_tokens),
            ("chars_per_token", chars_per_token),
        ):
            if value <= 0:
                raise InvalidConfigError(f"{name} must be positive, got {value}", field=name)

        self._embed_fn = embed_fn
        self._document_embed_fn = document_embed_fn or embed_fn
        self._dimension = dimension
        self._batch_size = batch_size
        self._max_chars = max_tokens * chars_per_token

    @classmethod
    def from_langchain(cls, embeddings: Embeddings, dimension: int, **kwargs) -> "EmbeddingBatcher":
        """Queries go through ``aembed_query``, documents through ``aembed_documents``."""
        return cls(
            embeddings.aembed_query,
            dimension,
            document_embed_fn=document_embedding_function(embeddings),
            **kwargs,
        )

    @classmethod
    def from_settings(
        cls,
        settings: IngestionSettings,
        embeddings: Embeddings | None = None,
    ) -> "EmbeddingBatcher":
        """
        Build a batcher from ingestion settings.

        Uses FixedDimensionEmbeddings (Gemini) when no embeddings are given.
        """
        if embeddings is None:
            from knowledge_assistant.core.document_processing.embeddings_wrapper import (
                FixedDimensionEmbeddings,
            )

            embeddings = FixedDimensionEmbeddings(
                model=settings.embedding_model,
                output_dimensionality=settings.embedding_dimension,
            )
        return cls.from_langchain(
            embeddings,
            settings.embedding_dimension,
            batch_size=settings.embedding_batch_size,
            max_tokens=settings.max_embedding_tokens,
            chars_per_token=settings.chars_per_token,
        )

    @property
    def dimension(self) -> int:
        return self._dimension

    @property
    def max_chars(self) -> int:
        return self._max_chars

    async def embed_one(self, text: str, timeout: float | None = None) -> list[float]:
        """
        Embed a single search query through the query embedding function.

        Raises:
            EmptyInputError: When text is None or blank
            EmbeddingFailedError: When the embedding function fails or times out
        """
        vectors = await self._run([text], self._embed_fn, timeout)
        return vectors[0]

    async def embed_many(
        self,
        texts: Sequence[str],
        timeout: float | None = None,
    ) -> list[list[float]]:
        """
        Embed document texts, output index i matching input index i.

        All texts are validated before any call is made. Batches run one
        after another; items inside a batch run concurrently. The first
        failure cancels the rest of its batch and aborts the whole call.

        Args:
            texts: Texts to embed
            timeout: Optional deadline in seconds for the whole call

        Returns:
            list[list[float]]: One vector per text

        Raises:
            EmptyInputError: When any text is None or blank
            EmbeddingFailedError: On any embedding failure, wrong dimension or timeout
        """
        if not texts:
            return []
        return await self._run(texts, self._document_embed_fn, timeout)

    async def _run(
        self,
        texts: Sequence[str],
        embed_fn: EmbeddingFunction,
        timeout: float | None,
    ) -> list[list[float]]:
        prepared = self._prepare(texts)

        if timeout is None:
            return await self._embed_batches(prepared, embed_fn)

        try:
            return await asyncio.wait_for(
                self._embed_batches(prepared, embed_fn), timeout=timeout
            )
        except asyncio.TimeoutError as e:
            raise EmbeddingFailedError(
                f"Embedding timed out after {timeout}s",
                details={"timeout": timeout, "text_count": len(prepared)},
            ) from e

    def _prepare(self, texts: Sequence[str]) -> list[str]:
        prepared: list[str] = []
        for index, text in enumerate(texts):
            if text is None or not text.strip():
                raise EmptyInputError(
                    f"Text at index {index} cannot be empty",
                    field="text",
                    details={"index": index},
                )
            if len(text) > self._max_chars:
                logger.warning(
                    f"{__name__}:_prepare - Text at index {index} truncated from "
                    f"{len(text)} to {self._max_chars} characters"
                )
                text = text[: self._max_chars]
            prepared.append(text)
        return prepared

    async def _embed_batches(
        self, texts: list[str], embed_fn: EmbeddingFunction
    ) -> list[list[float]]:
        vectors: list[list[float]] = []
        for offset in range(0, len(texts), self._batch_size):
            batch = texts[offset : offset + self._batch_size]
            vectors.extend(await self._embed_batch(offset, batch, embed_fn))
        return vectors

    async def _embed_batch(
        self, offset: int, batch: list[str], embed_fn: EmbeddingFunction
    ) -> list[list[float]]:
        tasks = [
            asyncio.ensure_future(self._embed_at(offset + i, text, embed_fn))
            for i, text in enumerate(batch)
        ]
        try:
            return list(await asyncio.gather(*tasks))
        except BaseException:
            for task in tasks:
                task.cancel()
            await asyncio.gather(*tasks, return_exceptions=True)
            raise

    async def _embed_at(self, index: int, text: str, embed_fn: EmbeddingFunction) -> list[float]:
        try:
            vector = await embed_fn(text)
        except asyncio.CancelledError:
            raise
        except Exception as e:
            logger.error(
                f"{__name__}:_embed_at - Embedding failed at index {index}: "
                f"{type(e).__name__}: {e}"
            )
            raise EmbeddingFailedError(
                f"Embedding failed for text at index {index}: {e}",
                index=index,
                details={"error_type": type(e).__name__},
            ) from e

        if vector is None or len(vector) != self._dimension:
            raise EmbeddingFailedError(
                f"Embedding at index {index} has dimension "
                f"{0 if vector is None else len(vector)}, expected {self._dimension}",
                index=index,
            )
        return [float(value) for value in vector]
