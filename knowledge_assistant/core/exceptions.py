"""
Exception hierarchy for the Knowledge Assistant.

Provides layered exception structure for domain-specific errors.
All exceptions include context for observability and debugging.

Dependencies: None (pure domain layer)
System role: Centralized exception handling across ingestion and query pipelines
"""

from typing import Any


class KnowledgeAssistantException(Exception):
    """Base exception for all Knowledge Assistant errors."""

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        """
        Initialize base exception with message and optional context.

        Args:
            message: Human-readable error message
            details: Optional dictionary of additional context for debugging
        """
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def __str__(self) -> str:
        """Return string representation including details."""
        if self.details:
            return f"{self.message} | Details: {self.details}"
        return self.message


class ValidationError(KnowledgeAssistantException):
    """Raised when caller input validation fails. Never retried."""

    def __init__(
        self,
        message: str,
        field: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """
        Initialize validation error.

        Args:
            message: Error message
            field: Field name that failed validation
            details: Additional context
        """
        details = details or {}
        if field:
            details["field"] = field
        super().__init__(message, details)


class InvalidConfigError(ValidationError):
    """Raised when a component is constructed with an invalid configuration."""

    pass


class EmptyInputError(ValidationError):
    """Raised when required text input is None or blank."""

    pass


class InvalidRoleError(ValidationError):
    """Raised when a message role is not user, assistant or system."""

    def __init__(self, role: Any, details: dict[str, Any] | None = None) -> None:
        """
        Initialize invalid role error.

        Args:
            role: The rejected role value
            details: Additional context
        """
        details = details or {}
        details["role"] = str(role)
        super().__init__(
            f"Invalid message role: {role!r}. Must be one of user, assistant, system",
            field="role",
            details=details,
        )


class NotFoundError(KnowledgeAssistantException):
    """Raised when a referenced entity does not exist."""

    pass


class ConversationNotFoundError(NotFoundError):
    """Raised when a conversation cannot be found."""

    def __init__(self, conversation_id: Any, details: dict[str, Any] | None = None) -> None:
        """
        Initialize conversation not found error.

        Args:
            conversation_id: ID of the missing conversation
            details: Additional context
        """
        details = details or {}
        details["conversation_id"] = str(conversation_id)
        super().__init__(f"Conversation not found: {conversation_id}", details)


class DocumentProcessingError(KnowledgeAssistantException):
    """Base exception for document ingestion errors."""

    def __init__(
        self,
        message: str,
        document_id: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """
        Initialize document processing error.

        Args:
            message: Error message
            document_id: ID of the document that failed
            details: Additional context
        """
        details = details or {}
        if document_id:
            details["document_id"] = document_id
        super().__init__(message, details)


class ParsingError(DocumentProcessingError):
    """Raised when document parsing fails."""

    def __init__(
        self,
        message: str,
        document_id: str | None = None,
        file_type: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """
        Initialize parsing error.

        Args:
            message: Error message
            document_id: ID of the document
            file_type: Declared format that failed parsing
            details: Additional context
        """
        details = details or {}
        if file_type:
            details["file_type"] = file_type
        super().__init__(message, document_id, details)


class UnsupportedFormatError(ParsingError):
    """Raised when the declared document format has no parser."""

    pass


class MalformedInputError(ParsingError):
    """Raised when a payload cannot be decoded as its declared format."""

    pass


class EmbeddingFailedError(DocumentProcessingError):
    """Raised when the embedding function fails for any item of a call."""

    def __init__(
        self,
        message: str,
        index: int | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """
        Initialize embedding failure.

        Args:
            message: Error message
            index: Input position of the text that failed
            details: Additional context
        """
        details = details or {}
        if index is not None:
            details["index"] = index
        super().__init__(message, details=details)


class GenerationError(KnowledgeAssistantException):
    """Raised when the text-generation collaborator fails."""

    def __init__(
        self,
        message: str,
        stage: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """
        Initialize generation error.

        Args:
            message: Error message
            stage: Pipeline stage that was generating (answer, fallback, ...)
            details: Additional context
        """
        details = details or {}
        if stage:
            details["stage"] = stage
        super().__init__(message, details)


class VectorStoreError(KnowledgeAssistantException):
    """Raised when vector store operations fail."""

    def __init__(
        self,
        message: str,
        operation: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """
        Initialize vector store error.

        Args:
            message: Error message
            operation: Operation that failed (upsert, search, delete)
            details: Additional context
        """
        details = details or {}
        if operation:
            details["operation"] = operation
        super().__init__(message, details)


class PersistenceError(KnowledgeAssistantException):
    """Raised when the conversation store cannot complete an operation."""

    def __init__(
        self,
        message: str,
        operation: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        details = details or {}
        if operation:
            details["operation"] = operation
        super().__init__(message, details)
