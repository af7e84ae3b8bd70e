"""
RAG query module.

Retrieval-augmented answer generation with optional evaluation.
"""

from knowledge_assistant.core.rag_query.rag_evaluator import RagEvaluator
from knowledge_assistant.core.rag_query.rag_query_service import RagQueryService

__all__ = ["RagEvaluator", "RagQueryService"]
