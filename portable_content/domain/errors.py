"""
Exception taxonomy for the content library.

Sanitizers and validators report problems as data (ValidationResult);
the exceptions below are raised for structural input errors, domain
construction errors, and persistence failures.
"""

from __future__ import annotations

from typing import Any


class ContentError(Exception):
    """Base class for all content library errors."""


# --- Domain construction ---


class InvalidContentError(ContentError, ValueError):
    """Raised when an aggregate or block cannot be built."""

    @classmethod
    def empty_type(cls) -> InvalidContentError:
        return cls("Content type cannot be empty")

    @classmethod
    def empty_block_source(cls) -> InvalidContentError:
        return cls("Block source cannot be empty")

    @classmethod
    def invalid_block_type(cls, block: Any) -> InvalidContentError:
        return cls(f"Expected Block implementation, got {type(block).__name__}")


# --- Strategy registries ---


class DuplicateStrategyError(ContentError, ValueError):
    """Raised when a second strategy is registered for the same block kind."""

    def __init__(self, kind: str, role: str = "strategy") -> None:
        self.kind = kind
        self.role = role
        super().__init__(f"Block {role} for kind '{kind}' is already registered")


class UnknownBlockKindError(ContentError, LookupError):
    """Raised when no strategy is registered for a block kind."""

    def __init__(self, kind: str, role: str = "strategy", index: int | None = None) -> None:
        self.kind = kind
        self.role = role
        self.index = index
        msg = f"No {role} registered for block kind '{kind}'"
        if index is not None:
            msg += f" (block {index})"
        super().__init__(msg)


# --- Sanitization (structural input errors) ---


class SanitizationError(ContentError, ValueError):
    """Input is structurally broken and cannot be sanitized."""


class MalformedBlockError(SanitizationError):
    """A block entry is not a record or lacks a usable kind."""

    def __init__(self, message: str, index: int | None = None) -> None:
        self.index = index
        if index is not None:
            message = f"Invalid block data at index {index}: {message}"
        super().__init__(message)


# --- Validation ---


class ValidationFailedError(ContentError, ValueError):
    """Raised by the content service when input fails validation."""

    def __init__(self, errors: dict[str, list[str]]) -> None:
        self.errors = errors
        count = sum(len(messages) for messages in errors.values())
        super().__init__(f"Validation failed with {count} error(s)")

    def field_errors(self, field: str) -> list[str]:
        return self.errors.get(field, [])

    def all_messages(self) -> list[str]:
        return [f"{field}: {msg}" for field, messages in self.errors.items() for msg in messages]


class ContentNotFoundError(ContentError, LookupError):
    """Raised when an operation requires content that does not exist."""

    def __init__(self, content_id: str) -> None:
        self.content_id = content_id
        super().__init__(f"Content with ID '{content_id}' not found")


# --- Persistence ---


class RepositoryError(ContentError, RuntimeError):
    """Base class for storage failures. Always raised after a rollback attempt."""

    def __init__(self, message: str, reason: str) -> None:
        self.reason = reason
        super().__init__(message)


class SaveError(RepositoryError):
    def __init__(self, content_id: str, reason: str) -> None:
        self.content_id = content_id
        self.operation = "save"
        super().__init__(f"Failed to save content '{content_id}': {reason}", reason)


class DeleteError(RepositoryError):
    def __init__(self, content_id: str, reason: str) -> None:
        self.content_id = content_id
        self.operation = "delete"
        super().__init__(f"Failed to delete content '{content_id}': {reason}", reason)


class QueryError(RepositoryError):
    def __init__(self, operation: str, reason: str) -> None:
        self.operation = operation
        super().__init__(f"Failed to execute {operation}: {reason}", reason)


class TransactionError(RepositoryError):
    def __init__(self, reason: str, operation: str = "transaction") -> None:
        self.operation = operation
        super().__init__(f"Transaction failed during {operation}: {reason}", reason)
