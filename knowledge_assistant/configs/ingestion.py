"""
Ingestion pipeline configuration.

Chunking window sizes, token-estimation heuristics and embedding limits
for the parse -> chunk -> embed pipeline.

Dependencies: pydantic, pydantic_settings
System role: Centralized ingestion configuration
"""

from pydantic import Field
from pydantic_settings import SettingsConfigDict

from knowledge_assistant.configs.base import BaseSettings


class IngestionSettings(BaseSettings):
    """Settings for document ingestion."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="INGESTION_",
        case_sensitive=False,
        extra="ignore",
    )

    # Chunking (all sizes in whitespace tokens)
    chunk_size: int = Field(default=500, description="Maximum tokens per chunk window")
    chunk_overlap: int = Field(default=50, description="Tokens shared by consecutive chunks")
    min_chunk_size: int = Field(
        default=100,
        description="Trailing windows smaller than this are merged into the previous chunk",
    )
    tokens_per_word: float = Field(
        default=1.3,
        gt=0,
        description="Multiplier for word-count based token estimates (not a real tokenizer)",
    )

    # Embedding
    embedding_model: str = Field(
        default="models/gemini-embedding-001",
        description="Google Gemini embedding model ID",
    )
    embedding_dimension: int = Field(default=768, description="Embedding vector dimension")
    embedding_batch_size: int = Field(default=100, description="Texts per embedding batch")
    max_embedding_tokens: int = Field(
        default=2048,
        description="Token ceiling of the embedding model",
    )
    chars_per_token: int = Field(
        default=4,
        description="Characters per token used to derive the truncation ceiling",
    )
