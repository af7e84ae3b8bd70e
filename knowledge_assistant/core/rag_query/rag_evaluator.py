"""
LLM-as-judge evaluation of RAG answers.

Scores a generated answer on two dimensions:
- Faithfulness: are the answer's claims supported by the retrieved context?
- Relevancy: does the answer address the question?

Both metrics run concurrently. A metric that cannot be evaluated yields an
UNKNOWN score instead of an error.

Dependencies: langchain_core.prompts, knowledge_assistant.boundary.llm
System role: Optional quality pass of the RAG query orchestrator
"""

import asyncio
import json
import logging

from langchain_core.prompts import PromptTemplate

from knowledge_assistant.boundary.llm.text_generator import TextGenerator
from knowledge_assistant.configs.rag import RagSettings
from knowledge_assistant.models.rag import EvaluationResult, EvaluationScore, EvaluationStatus

logger = logging.getLogger(__name__)

EVALUATOR_MAX_TOKENS = 512

FAITHFULNESS_TEMPLATE = PromptTemplate.from_template(
    """You are an expert evaluator assessing the FAITHFULNESS of an AI assistant's response.

FAITHFULNESS measures whether the response is factually grounded in the provided context documents.
A faithful response only contains claims that are supported by the context.

CONTEXT DOCUMENTS:
{context}

USER QUESTION:
{question}

AI RESPONSE:
{response}

EVALUATION CRITERIA:
- Score 1.0: All claims in the response are directly supported by the context
- Score 0.8: Most claims are supported; minor inferences are reasonable
- Score 0.6: Some claims are supported but there are unsupported inferences
- Score 0.4: Significant claims lack context support
- Score 0.2: Most claims are not grounded in the context
- Score 0.0: The response is entirely fabricated or contradicts the context

Special cases:
- If the response says it doesn't have information, and the context truly doesn't contain relevant info, score 1.0
- If the context is empty, any substantive response should score 0.0

Evaluate the faithfulness and respond with a JSON object containing:
- "score": a number between 0.0 and 1.0
- "status": "PASS" if score >= {threshold}, "FAIL" if score < {threshold}
- "reasoning": a brief explanation (1-2 sentences) of your assessment"""
)

RELEVANCY_TEMPLATE = PromptTemplate.from_template(
    """You are an expert evaluator assessing the RELEVANCY of an AI assistant's response.

RELEVANCY measures whether the response directly addresses the user's question.
A relevant response is on-topic, answers what was asked, and doesn't include excessive unrelated information.

USER QUESTION:
{question}

AI RESPONSE:
{response}

EVALUATION CRITERIA:
- Score 1.0: Directly and completely answers the question
- Score 0.8: Answers the question well with minor tangential information
- Score 0.6: Partially addresses the question but misses some aspects
- Score 0.4: Only tangentially related to the question
- Score 0.2: Mostly off-topic with only minor relevance
- Score 0.0: Completely unrelated to the question

Special cases:
- If the response appropriately says it cannot answer, score based on whether that's the correct behavior
- A partial answer is better than no answer (score accordingly)

Evaluate the relevancy and respond with a JSON object containing:
- "score": a number between 0.0 and 1.0
- "status": "PASS" if score >= {threshold}, "FAIL" if score < {threshold}
- "reasoning": a brief explanation (1-2 sentences) of your assessment"""
)


def extract_json(text: str) -> str:
    """
    Pull a JSON object out of an LLM reply.

    Handles ```json fences and prose around a bare object.
    """
    trimmed = text.strip()

    fence_start = trimmed.find("```")
    if fence_start != -1:
        content_start = trimmed.find("\n", fence_start)
        if content_start != -1:
            fence_end = trimmed.find("```", content_start)
            if fence_end != -1:
                return trimmed[content_start + 1 : fence_end].strip()

    first_brace = trimmed.find("{")
    last_brace = trimmed.rfind("}")
    if first_brace != -1 and last_brace > first_brace:
        return trimmed[first_brace : last_brace + 1]

    return trimmed


def unknown_score(reason: str) -> EvaluationScore:
    return EvaluationScore(
        score=0.0,
        status=EvaluationStatus.UNKNOWN,
        reasoning=f"Evaluation failed: {reason}",
    )


class RagEvaluator:
    """Faithfulness and relevancy judge."""

    def __init__(
        self,
        generator: TextGenerator,
        faithfulness_threshold: float = 0.6,
        relevancy_threshold: float = 0.6,
        temperature: float = 0.1,
    ) -> None:
        """
        Initialize evaluator.

        Args:
            generator: LLM used as the judge
            faithfulness_threshold: Minimum faithfulness score to PASS
            relevancy_threshold: Minimum relevancy score to PASS
            temperature: Judge sampling temperature
        """
        self._generator = generator
        self._faithfulness_threshold = faithfulness_threshold
        self._relevancy_threshold = relevancy_threshold
        self._temperature = temperature

    @classmethod
    def from_settings(cls, generator: TextGenerator, settings: RagSettings) -> "RagEvaluator":
        return cls(
            generator,
            faithfulness_threshold=settings.faithfulness_threshold,
            relevancy_threshold=settings.relevancy_threshold,
            temperature=settings.evaluator_temperature,
        )

    async def evaluate(self, query: str, response: str, context: list[str]) -> EvaluationResult:
        """
        Score an answer on faithfulness and relevancy concurrently.

        Args:
            query: Question the answer responds to
            response: Generated answer text
            context: Retrieved fragment texts the answer was grounded on

        Returns:
            EvaluationResult: UNKNOWN for any metric that could not be judged
        """
        context_block = "\n\n".join(
            f"[Document {i}]:\n{text}" for i, text in enumerate(context, start=1)
        )
        faithfulness, relevancy = await asyncio.gather(
            self._judge(
                "faithfulness",
                FAITHFULNESS_TEMPLATE.format(
                    context=context_block,
                    question=query,
                    response=response,
                    threshold=self._faithfulness_threshold,
                ),
                self._faithfulness_threshold,
            ),
            self._judge(
                "relevancy",
                RELEVANCY_TEMPLATE.format(
                    question=query,
                    response=response,
                    threshold=self._relevancy_threshold,
                ),
                self._relevancy_threshold,
            ),
        )
        logger.info(
            f"{__name__}:evaluate - faithfulness={faithfulness.score:.2f} ({faithfulness.status.value}), "
            f"relevancy={relevancy.score:.2f} ({relevancy.status.value})"
        )
        return EvaluationResult(faithfulness=faithfulness, relevancy=relevancy)

    async def _judge(self, metric: str, prompt: str, threshold: float) -> EvaluationScore:
        try:
            text = await self._generator.generate(
                prompt,
                temperature=self._temperature,
                max_output_tokens=EVALUATOR_MAX_TOKENS,
            )
            return self._parse(text, threshold)
        except asyncio.CancelledError:
            raise
        except Exception as e:
            logger.warning(f"{__name__}:_judge - {metric} evaluation failed: {type(e).__name__}: {e}")
            return unknown_score(str(e) or type(e).__name__)

    @staticmethod
    def _parse(text: str, threshold: float) -> EvaluationScore:
        data = json.loads(extract_json(text))
        if not isinstance(data, dict):
            raise ValueError("Judge reply is not a JSON object")
        score = float(data["score"])
        if not 0.0 <= score <= 1.0:
            raise ValueError(f"Judge score out of range: {score}")
        status = EvaluationStatus.PASS if score >= threshold else EvaluationStatus.FAIL
        return EvaluationScore(
            score=score,
            status=status,
            reasoning=str(data.get("reasoning", "")),
        )
