"""
LLM boundary.

Text generation contract and the Gemini implementation.
"""

from knowledge_assistant.boundary.llm.gemini_generator import GeminiTextGenerator
from knowledge_assistant.boundary.llm.text_generator import TextGenerator

__all__ = ["GeminiTextGenerator", "TextGenerator"]
