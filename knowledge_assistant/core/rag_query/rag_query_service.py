"""
RAG query orchestrator.

Embeds the question, retrieves sector-scoped fragments, generates a
grounded answer (structured when the model cooperates) and optionally
judges it. An empty retrieval is answered with a fallback reply and is
not an error.

Dependencies: asyncio, knowledge_assistant.boundary (vdb, llm),
    knowledge_assistant.core.document_processing (embedding batcher)
System role: Retrieval + generation step of the query pipeline
"""

import asyncio
import logging
from typing import Awaitable, TypeVar

from knowledge_assistant.boundary.llm.text_generator import TextGenerator
from knowledge_assistant.boundary.vdb.vector_schemas import VectorMatch
from knowledge_assistant.boundary.vdb.vector_store_client import VectorSearchClient
from knowledge_assistant.configs.rag import RagSettings
from knowledge_assistant.core.document_processing.tasks.embedding_task import EmbeddingBatcher
from knowledge_assistant.core.exceptions import (
    GenerationError,
    ValidationError,
    VectorStoreError,
)
from knowledge_assistant.core.rag_query.rag_evaluator import RagEvaluator
from knowledge_assistant.core.rag_query.rag_query_prompt import (
    STATIC_FALLBACK_RESPONSE,
    build_answer_prompt,
    build_fallback_prompt,
    build_query_expansion_prompt,
)
from knowledge_assistant.models.rag import (
    EvaluationResult,
    GenerationMetadata,
    RagAnswer,
    RagSource,
    ResponseType,
    SearchOptions,
    StructuredResponse,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")

FALLBACK_MAX_TOKENS = 256
EXPANSION_MAX_TOKENS = 100


class RagQueryService:
    """Answer questions from a sector's knowledge base."""

    def __init__(
        self,
        batcher: EmbeddingBatcher,
        vector_search: VectorSearchClient,
        generator: TextGenerator,
        evaluator: RagEvaluator | None = None,
        settings: RagSettings | None = None,
    ) -> None:
        """
        Initialize RAG query service.

        Args:
            batcher: Embeds the (possibly expanded) question
            vector_search: Sector-scoped similarity search
            generator: LLM for answers, fallback replies and expansion
            evaluator: Optional faithfulness/relevancy judge
            settings: RAG settings (defaults if None)
        """
        self._batcher = batcher
        self._vector_search = vector_search
        self._generator = generator
        self._evaluator = evaluator
        self._settings = settings or RagSettings()

    async def answer(
        self,
        query: str,
        sector_id: str,
        conversation_context: str = "",
        search_options: SearchOptions | None = None,
        timeout: float | None = None,
        sector_name: str | None = None,
    ) -> RagAnswer:
        """
        Produce a grounded answer for a question.

        Args:
            query: Question, possibly prefixed with conversation context
            sector_id: Isolation key for retrieval
            conversation_context: Extra history rendered into the prompt
            search_options: Retrieval knobs (settings defaults if None)
            timeout: Overall deadline in seconds for network-bound steps
            sector_name: Display name used in the fallback reply

        Returns:
            RagAnswer: answer with ranked sources, or no_context with none

        Raises:
            ValidationError: When query or sector_id is blank
            EmbeddingFailedError: When the question cannot be embedded
            VectorStoreError: When vector search fails
            GenerationError: When answer generation fails or times out
        """
        if not query or not query.strip():
            raise ValidationError("Query cannot be blank", field="query")
        if not sector_id or not sector_id.strip():
            raise ValidationError("Sector ID cannot be blank", field="sector_id")

        deadline = self._deadline(timeout)
        options = self._resolve_options(search_options)

        search_query = await self._maybe_expand_query(query, deadline)
        vector = await self._batcher.embed_one(search_query, timeout=self._remaining(deadline))
        matches = await self._search(vector, sector_id, options)
        sources = [self._to_source(match) for match in matches]

        logger.info(
            f"{__name__}:answer - Retrieved {len(sources)} fragments for sector {sector_id} "
            f"(max_results={options.max_results}, min_similarity={options.min_similarity})"
        )

        if not sources:
            response_text = await self._generate_fallback(query, deadline, sector_name)
            return RagAnswer(
                response_text=response_text,
                response_type=ResponseType.NO_CONTEXT,
                sources=[],
                generation=self._generation_metadata(0),
            )

        prompt = build_answer_prompt(query, sources, conversation_context)
        structured, response_text = await self._generate_answer(prompt, deadline)
        evaluation = await self._run_evaluation(query, response_text, sources, deadline)

        return RagAnswer(
            response_text=response_text,
            response_type=ResponseType.ANSWER,
            sources=sources,
            structured=structured,
            evaluation=evaluation,
            generation=self._generation_metadata(len(sources)),
        )

    def _resolve_options(self, search_options: SearchOptions | None) -> SearchOptions:
        if search_options is None:
            return SearchOptions(
                max_results=self._settings.default_max_results,
                min_similarity=self._settings.default_min_similarity,
            )
        if search_options.max_results > self._settings.max_results_limit:
            return search_options.model_copy(
                update={"max_results": self._settings.max_results_limit}
            )
        return search_options

    @staticmethod
    def _deadline(timeout: float | None) -> float | None:
        if timeout is None:
            return None
        return asyncio.get_running_loop().time() + timeout

    @staticmethod
    def _remaining(deadline: float | None) -> float | None:
        if deadline is None:
            return None
        return max(deadline - asyncio.get_running_loop().time(), 0.0)

    async def _call(self, awaitable: Awaitable[T], deadline: float | None, stage: str) -> T:
        remaining = self._remaining(deadline)
        if remaining is None:
            return await awaitable
        try:
            return await asyncio.wait_for(awaitable, timeout=remaining)
        except asyncio.TimeoutError as e:
            raise GenerationError("Generation timed out", stage=stage) from e

    async def _maybe_expand_query(self, query: str, deadline: float | None) -> str:
        """Rewrite short queries for better recall; any problem keeps the original."""
        if not self._settings.enable_query_expansion:
            return query
        if len(query.split()) >= self._settings.query_expansion_word_threshold:
            return query

        try:
            expanded = await self._call(
                self._generator.generate(
                    build_query_expansion_prompt(query),
                    max_output_tokens=EXPANSION_MAX_TOKENS,
                ),
                deadline,
                "expansion",
            )
        except asyncio.CancelledError:
            raise
        except Exception as e:
            logger.warning(f"{__name__}:_maybe_expand_query - Expansion failed, using original: {e}")
            return query

        expanded = (expanded or "").strip()
        if 0 < len(expanded) < self._settings.max_expanded_query_length:
            logger.debug(f"{__name__}:_maybe_expand_query - Expanded query: {expanded[:100]}")
            return expanded
        return query

    async def _search(
        self,
        vector: list[float],
        sector_id: str,
        options: SearchOptions,
    ) -> list[VectorMatch]:
        try:
            return await self._vector_search.search(
                vector,
                sector_id,
                options.max_results,
                options.min_similarity,
            )
        except VectorStoreError:
            raise
        except Exception as e:
            raise VectorStoreError(
                f"Vector search failed: {e}",
                operation="search",
                details={"sector_id": sector_id, "error_type": type(e).__name__},
            ) from e

    @staticmethod
    def _to_source(match: VectorMatch) -> RagSource:
        payload = dict(match.payload)
        content = str(payload.pop("content", ""))
        source_id = str(payload.pop("source_id", ""))
        return RagSource(
            fragment_id=match.id,
            content=content,
            source_id=source_id,
            similarity=match.score,
            metadata=payload,
        )

    async def _generate_fallback(
        self,
        query: str,
        deadline: float | None,
        sector_name: str | None,
    ) -> str:
        if not self._settings.enable_llm_fallback:
            return STATIC_FALLBACK_RESPONSE
        try:
            text = await self._call(
                self._generator.generate(
                    build_fallback_prompt(query, sector_name),
                    max_output_tokens=FALLBACK_MAX_TOKENS,
                ),
                deadline,
                "fallback",
            )
        except asyncio.CancelledError:
            raise
        except Exception as e:
            logger.warning(f"{__name__}:_generate_fallback - Using static fallback: {e}")
            return STATIC_FALLBACK_RESPONSE
        return text.strip() or STATIC_FALLBACK_RESPONSE

    async def _generate_answer(
        self,
        prompt: str,
        deadline: float | None,
    ) -> tuple[StructuredResponse | None, str]:
        """Structured output first; plain text if that fails."""
        try:
            structured = await self._call(
                self._generator.generate_structured(prompt, StructuredResponse),
                deadline,
                "structured",
            )
            if structured is not None and structured.summary.strip():
                return structured, structured.summary
            logger.warning(f"{__name__}:_generate_answer - Structured output had no summary")
        except asyncio.CancelledError:
            raise
        except Exception as e:
            logger.warning(
                f"{__name__}:_generate_answer - Structured output failed, "
                f"falling back to plain text: {type(e).__name__}: {e}"
            )

        try:
            text = await self._call(self._generator.generate(prompt), deadline, "answer")
        except GenerationError:
            raise
        except asyncio.CancelledError:
            raise
        except Exception as e:
            raise GenerationError(
                f"Answer generation failed: {e}",
                stage="answer",
                details={"error_type": type(e).__name__},
            ) from e
        return None, text

    async def _run_evaluation(
        self,
        query: str,
        response_text: str,
        sources: list[RagSource],
        deadline: float | None,
    ) -> EvaluationResult | None:
        if self._evaluator is None or not self._settings.enable_evaluation:
            return None
        try:
            return await self._call(
                self._evaluator.evaluate(query, response_text, [s.content for s in sources]),
                deadline,
                "evaluation",
            )
        except asyncio.CancelledError:
            raise
        except Exception as e:
            logger.warning(f"{__name__}:_run_evaluation - Evaluation skipped: {type(e).__name__}: {e}")
            return None

    def _generation_metadata(self, fragments: int) -> GenerationMetadata:
        return GenerationMetadata(
            model=getattr(self._generator, "model_name", "unknown"),
            temperature=getattr(self._generator, "temperature", self._settings.temperature),
            fragments_retrieved=fragments,
            fragments_used=fragments,
        )
