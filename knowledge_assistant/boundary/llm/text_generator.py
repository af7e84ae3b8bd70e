"""
Text generation collaborator contract.

Dependencies: pydantic
System role: Narrow interface to the LLM used by the RAG orchestrator
"""

from typing import Protocol, TypeVar, runtime_checkable

from pydantic import BaseModel

SchemaT = TypeVar("SchemaT", bound=BaseModel)


@runtime_checkable
class TextGenerator(Protocol):
    """Prompt in, text (or a schema instance) out."""

    model_name: str
    temperature: float

    async def generate(
        self,
        prompt: str,
        *,
        temperature: float | None = None,
        max_output_tokens: int | None = None,
    ) -> str:
        """Plain text completion."""
        ...

    async def generate_structured(self, prompt: str, schema: type[SchemaT]) -> SchemaT:
        """Completion parsed into ``schema``. Callers treat this as best-effort."""
        ...
