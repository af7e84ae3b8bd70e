"""
Gemini text generator.

Wraps ChatGoogleGenerativeAI behind the TextGenerator contract, including
structured output via ``with_structured_output``.

Dependencies: langchain_google_genai, langchain_core
System role: Production LLM collaborator
"""

import logging
from typing import Any

from langchain_core.messages import HumanMessage
from langchain_google_genai import ChatGoogleGenerativeAI

from knowledge_assistant.boundary.llm.text_generator import SchemaT
from knowledge_assistant.configs.rag import RagSettings
from knowledge_assistant.core.exceptions import GenerationError

logger = logging.getLogger(__name__)


def message_text(content: Any) -> str:
    """Flatten AIMessage content (str or list of parts) to text."""
    if isinstance(content, str):
        return content
    if isinstance(content, list):
        parts = []
        for part in content:
            if isinstance(part, str):
                parts.append(part)
            elif isinstance(part, dict) and part.get("type") == "text":
                parts.append(part.get("text", ""))
        return "".join(parts)
    return str(content)


class GeminiTextGenerator:
    """TextGenerator backed by Google Gemini chat models."""

    def __init__(
        self,
        model_name: str = "gemini-2.5-flash",
        temperature: float = 0.3,
        max_output_tokens: int = 2048,
    ) -> None:
        """
        Initialize generator.

        Args:
            model_name: Gemini model ID
            temperature: Default sampling temperature
            max_output_tokens: Default output token budget
        """
        self.model_name = model_name
        self.temperature = temperature
        self._max_output_tokens = max_output_tokens
        self._models: dict[tuple[float, int], ChatGoogleGenerativeAI] = {}
        logger.info(
            f"{__name__}:__init__ - Initialized with model={model_name}, temperature={temperature}"
        )

    @classmethod
    def from_settings(cls, settings: RagSettings) -> "GeminiTextGenerator":
        return cls(
            model_name=settings.llm_model,
            temperature=settings.temperature,
            max_output_tokens=settings.max_output_tokens,
        )

    def _model(
        self,
        temperature: float | None = None,
        max_output_tokens: int | None = None,
    ) -> ChatGoogleGenerativeAI:
        key = (
            self.temperature if temperature is None else temperature,
            max_output_tokens or self._max_output_tokens,
        )
        if key not in self._models:
            self._models[key] = ChatGoogleGenerativeAI(
                model=self.model_name,
                temperature=key[0],
                max_output_tokens=key[1],
            )
        return self._models[key]

    async def generate(
        self,
        prompt: str,
        *,
        temperature: float | None = None,
        max_output_tokens: int | None = None,
    ) -> str:
        try:
            response = await self._model(temperature, max_output_tokens).ainvoke(
                [HumanMessage(content=prompt)]
            )
        except Exception as e:
            raise GenerationError(
                f"Gemini generation failed: {e}",
                details={"model": self.model_name, "error_type": type(e).__name__},
            ) from e
        return message_text(response.content)

    async def generate_structured(self, prompt: str, schema: type[SchemaT]) -> SchemaT:
        try:
            structured_model = self._model().with_structured_output(schema)
            result = await structured_model.ainvoke([HumanMessage(content=prompt)])
        except Exception as e:
            raise GenerationError(
                f"Gemini structured generation failed: {e}",
                stage="structured",
                details={"model": self.model_name, "schema": schema.__name__},
            ) from e

        if result is None:
            raise GenerationError(
                "Gemini returned no structured output",
                stage="structured",
                details={"model": self.model_name, "schema": schema.__name__},
            )
        if isinstance(result, dict):
            return schema.model_validate(result)
        return result
