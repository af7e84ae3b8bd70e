"""
Boundary layer.

Adapters to external systems: relational database, vector index and LLM.
"""
