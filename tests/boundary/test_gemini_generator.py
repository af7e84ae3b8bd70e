"""
Test suite for GeminiTextGenerator.

The chat model factory is patched; no network calls are made.
"""

from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from langchain_core.messages import AIMessage, HumanMessage

from knowledge_assistant.boundary.llm.gemini_generator import GeminiTextGenerator, message_text
from knowledge_assistant.boundary.llm.text_generator import TextGenerator
from knowledge_assistant.configs.rag import RagSettings
from knowledge_assistant.core.exceptions import GenerationError
from knowledge_assistant.models.rag import StructuredResponse


@pytest.fixture
def generator() -> GeminiTextGenerator:
    return GeminiTextGenerator(model_name="gemini-test", temperature=0.2, max_output_tokens=64)


class TestMessageText:
    def test_string_content(self) -> None:
        assert message_text("hello") == "hello"

    def test_part_list_content(self) -> None:
        parts = [{"type": "text", "text": "a"}, {"type": "image_url", "url": "x"}, "b"]

        assert message_text(parts) == "ab"


class TestGenerate:
    def test_satisfies_protocol(self, generator) -> None:
        assert isinstance(generator, TextGenerator)

    def test_from_settings(self) -> None:
        generator = GeminiTextGenerator.from_settings(RagSettings(llm_model="gemini-x", temperature=0.5))

        assert generator.model_name == "gemini-x"
        assert generator.temperature == 0.5

    @pytest.mark.asyncio
    async def test_generate_returns_text(self, generator) -> None:
        # Arrange
        model = MagicMock()
        model.ainvoke = AsyncMock(return_value=AIMessage(content="answer"))

        # Act
        with patch.object(generator, "_model", return_value=model) as factory:
            text = await generator.generate("prompt", temperature=0.0, max_output_tokens=10)

        # Assert
        assert text == "answer"
        factory.assert_called_once_with(0.0, 10)
        sent = model.ainvoke.await_args.args[0]
        assert isinstance(sent[0], HumanMessage) and sent[0].content == "prompt"

    @pytest.mark.asyncio
    async def test_generate_failure_wrapped(self, generator) -> None:
        model = MagicMock()
        model.ainvoke = AsyncMock(side_effect=RuntimeError("429 quota"))

        with patch.object(generator, "_model", return_value=model):
            with pytest.raises(GenerationError) as exc_info:
                await generator.generate("prompt")

        assert exc_info.value.details["model"] == "gemini-test"


class TestGenerateStructured:
    @pytest.mark.asyncio
    async def test_dict_result_validated(self, generator) -> None:
        # Arrange
        structured_model = MagicMock()
        structured_model.ainvoke = AsyncMock(return_value={"summary": "short answer"})
        model = MagicMock()
        model.with_structured_output.return_value = structured_model

        # Act
        with patch.object(generator, "_model", return_value=model):
            result = await generator.generate_structured("prompt", StructuredResponse)

        # Assert
        assert isinstance(result, StructuredResponse)
        assert result.summary == "short answer"
        model.with_structured_output.assert_called_once_with(StructuredResponse)

    @pytest.mark.asyncio
    async def test_none_result_raises(self, generator) -> None:
        structured_model = MagicMock()
        structured_model.ainvoke = AsyncMock(return_value=None)
        model = MagicMock()
        model.with_structured_output.return_value = structured_model

        with patch.object(generator, "_model", return_value=model):
            with pytest.raises(GenerationError) as exc_info:
                await generator.generate_structured("prompt", StructuredResponse)

        assert exc_info.value.details["stage"] == "structured"
