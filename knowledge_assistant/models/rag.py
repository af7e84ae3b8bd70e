"""
RAG domain models.

Search options, retrieved sources, the structured answer schema used for
LLM structured output, evaluation scores and the orchestrator's answer.

Dependencies: pydantic
System role: Retrieval and generation data contracts
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Literal

from pydantic import BaseModel, Field


class SearchOptions(BaseModel):
    """Retrieval knobs accepted per query."""

    max_results: int = Field(
        default=5,
        ge=1,
        description="Fragments to retrieve, clamped to the configured limit",
    )
    min_similarity: float = Field(
        default=0.7,
        ge=0.0,
        le=1.0,
        description="Minimum similarity passed through to vector search",
    )


class RagSource(BaseModel):
    """A retrieved fragment in collaborator ranking order."""

    fragment_id: str
    content: str
    source_id: str
    similarity: float = Field(description="Score exactly as returned by vector search")
    metadata: dict[str, Any] = Field(default_factory=dict)


class ResponseType(str, Enum):
    ANSWER = "answer"
    NO_CONTEXT = "no_context"
    ERROR = "error"


class ResponseSection(BaseModel):
    """One section of a structured answer."""

    title: str = Field(description="Section title")
    content: str = Field(description="Section content (supports markdown)")
    type: Literal["info", "steps", "warning", "tip"] = Field(
        description=(
            'Section type: "info" for general information, "steps" for procedures, '
            '"warning" for important notes, "tip" for helpful advice'
        )
    )


class StructuredResponse(BaseModel):
    """Structured answer requested from the LLM."""

    summary: str = Field(description="Brief 1-2 sentence answer directly addressing the question")
    sections: list[ResponseSection] = Field(
        default_factory=list,
        description="Detailed information organized into logical sections",
    )
    key_points: list[str] | None = Field(default=None, description="Key takeaways as bullet points")
    related_topics: list[str] | None = Field(
        default=None,
        description="Related topics the user might want to explore",
    )


class EvaluationStatus(str, Enum):
    PASS = "PASS"
    FAIL = "FAIL"
    UNKNOWN = "UNKNOWN"


class EvaluationScore(BaseModel):
    """LLM-as-judge verdict for one metric."""

    score: float = Field(ge=0.0, le=1.0)
    status: EvaluationStatus
    reasoning: str = ""


class EvaluationResult(BaseModel):
    faithfulness: EvaluationScore
    relevancy: EvaluationScore


class GenerationMetadata(BaseModel):
    model: str
    temperature: float
    fragments_retrieved: int = 0
    fragments_used: int = 0


class RagAnswer(BaseModel):
    """Result of one retrieval-augmented answer."""

    response_text: str
    response_type: ResponseType
    sources: list[RagSource] = Field(default_factory=list)
    structured: StructuredResponse | None = None
    evaluation: EvaluationResult | None = None
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    generation: GenerationMetadata | None = None
