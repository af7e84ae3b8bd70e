"""
Text chunking task using a sliding token window.

Splits normalized text into overlapping, token-bounded chunks with
character offsets back into the normalized text.

Dependencies: pydantic
System role: Second stage of document ingestion pipeline
"""

import logging
import math

from pydantic import BaseModel, Field

from knowledge_assistant.configs.ingestion import IngestionSettings
from knowledge_assistant.core.document_processing.tasks.parsing_task import normalize_text
from knowledge_assistant.core.exceptions import EmptyInputError, InvalidConfigError
from knowledge_assistant.models.chunk import KnowledgeChunk

logger = logging.getLogger(__name__)


class ChunkingConfig(BaseModel):
    """Window sizes, in whitespace tokens."""

    chunk_size: int = Field(default=500, description="Maximum tokens per window")
    overlap: int = Field(default=50, description="Tokens shared by consecutive windows")
    min_chunk_size: int = Field(default=100, description="Smallest tail emitted on its own")
    tokens_per_word: float = Field(default=1.3, description="Token estimate multiplier")

    @property
    def step(self) -> int:
        return self.chunk_size - self.overlap


class ChunkingTask:
    """Split text into overlapping token windows."""

    def __init__(self, config: ChunkingConfig | None = None) -> None:
        """
        Initialize chunking task.

        Args:
            config: Window configuration, defaults to 500/50/100

        Raises:
            InvalidConfigError: When the window sizes are inconsistent
        """
        self._config = config or ChunkingConfig()
        self._validate_config(self._config)

    @classmethod
    def from_settings(cls, settings: IngestionSettings) -> "ChunkingTask":
        return cls(
            ChunkingConfig(
                chunk_size=settings.chunk_size,
                overlap=settings.chunk_overlap,
                min_chunk_size=settings.min_chunk_size,
                tokens_per_word=settings.tokens_per_word,
            )
        )

    @staticmethod
    def _validate_config(config: ChunkingConfig) -> None:
        context = config.model_dump()
        if config.overlap < 0:
            raise InvalidConfigError("Overlap cannot be negative", field="overlap", details=context)
        if config.min_chunk_size < 0:
            raise InvalidConfigError(
                "Min chunk size cannot be negative", field="min_chunk_size", details=context
            )
        if config.overlap >= config.chunk_size:
            raise InvalidConfigError(
                "Overlap must be less than chunk size", field="overlap", details=context
            )
        if config.chunk_size <= config.min_chunk_size:
            raise InvalidConfigError(
                "Chunk size must be greater than min chunk size",
                field="chunk_size",
                details=context,
            )
        if config.tokens_per_word <= 0:
            raise InvalidConfigError(
                "Tokens per word must be positive", field="tokens_per_word", details=context
            )

    def chunk(self, text: str | None) -> list[KnowledgeChunk]:
        """
        Split text into chunks.

        Windows of ``chunk_size`` tokens advance by ``chunk_size - overlap``.
        A trailing remainder shorter than ``min_chunk_size`` is merged into
        the previous chunk instead of being emitted on its own.

        Args:
            text: Raw or already normalized text

        Returns:
            list[KnowledgeChunk]: Chunks in gapless position order

        Raises:
            EmptyInputError: When text is None or blank
        """
        if text is None or not text.strip():
            raise EmptyInputError("Text cannot be empty", field="text")

        tokens = normalize_text(text).split()
        size = self._config.chunk_size
        step = self._config.step
        chunks: list[KnowledgeChunk] = []

        start = 0
        char_index = 0
        while start < len(tokens):
            end = min(start + size, len(tokens))
            content = " ".join(tokens[start:end])
            chunks.append(
                KnowledgeChunk(
                    content=content,
                    position=len(chunks),
                    token_count=end - start,
                    start_index=char_index,
                    end_index=char_index + len(content),
                )
            )

            if end >= len(tokens):
                break

            char_index += sum(len(token) + 1 for token in tokens[start : start + step])
            start += step

            remaining = len(tokens) - start
            if 0 < remaining < self._config.min_chunk_size:
                # Only tokens past the previous window are new.
                tail = tokens[end:]
                previous = chunks[-1]
                merged = f"{previous.content} {' '.join(tail)}"
                chunks[-1] = previous.model_copy(
                    update={
                        "content": merged,
                        "token_count": previous.token_count + len(tail),
                        "end_index": previous.start_index + len(merged),
                    }
                )
                break

        logger.debug(
            f"{__name__}:chunk - Split {len(tokens)} tokens into {len(chunks)} chunks "
            f"(size={size}, overlap={self._config.overlap})"
        )
        return chunks

    def estimate_tokens(self, text: str | None) -> int:
        """Approximate token count as ceil(words * tokens_per_word); 0 for blank text."""
        if not text:
            return 0
        words = len(text.split())
        return math.ceil(words * self._config.tokens_per_word)

    def get_config(self) -> ChunkingConfig:
        return self._config.model_copy()
