"""
Document processing module.

Ingestion pipeline: parse -> chunk -> embed -> upsert.
"""

from knowledge_assistant.core.document_processing.entrypoint import DocumentPipeline

__all__ = ["DocumentPipeline"]
