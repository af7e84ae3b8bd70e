"""
Application layer.

Use case orchestration on top of the core: the query assistant, the
conversation service and the persistence adapters they depend on.
"""
