"""
RAG query configuration.

Generation model, retrieval defaults and bounds, evaluation thresholds
and optional query expansion.

Dependencies: pydantic, pydantic_settings
System role: Retrieval and generation configuration for the query pipeline
"""

from pydantic import Field, model_validator
from pydantic_settings import SettingsConfigDict

from knowledge_assistant.configs.base import BaseSettings


class RagSettings(BaseSettings):
    """Retrieval-augmented generation configuration."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="RAG_",
        case_sensitive=False,
        extra="ignore",
    )

    llm_model: str = Field(default="gemini-2.5-flash", description="Generation model ID")
    temperature: float = Field(default=0.3, ge=0.0, le=2.0, description="Answer temperature")
    max_output_tokens: int = Field(default=2048, description="Answer token budget")

    default_max_results: int = Field(default=5, ge=1, description="Fragments retrieved by default")
    max_results_limit: int = Field(default=10, ge=1, description="Upper bound for max_results")
    default_min_similarity: float = Field(
        default=0.7,
        ge=0.0,
        le=1.0,
        description="Default minimum similarity passed to vector search",
    )

    enable_evaluation: bool = Field(default=True, description="Run faithfulness/relevancy judge")
    faithfulness_threshold: float = Field(default=0.6, ge=0.0, le=1.0)
    relevancy_threshold: float = Field(default=0.6, ge=0.0, le=1.0)
    evaluator_temperature: float = Field(default=0.1, ge=0.0, le=2.0)

    enable_query_expansion: bool = Field(
        default=False,
        description="Rewrite short queries with the LLM before embedding",
    )
    query_expansion_word_threshold: int = Field(default=10, ge=1)
    max_expanded_query_length: int = Field(default=500, ge=1)

    enable_llm_fallback: bool = Field(
        default=True,
        description="Generate the no-context reply with the LLM instead of static text",
    )

    @model_validator(mode="after")
    def _check_result_bounds(self) -> "RagSettings":
        if self.default_max_results > self.max_results_limit:
            raise ValueError("default_max_results cannot exceed max_results_limit")
        return self
