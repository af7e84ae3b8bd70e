"""
Sector Knowledge Assistant.

Document ingestion (parse, chunk, embed) and conversational RAG querying
scoped by sector.
"""

__version__ = "0.1.0"
