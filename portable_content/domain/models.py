"""
Value objects passed between the sanitize, validate and build stages.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field, replace
from typing import Any

# --- Block data ---


@dataclass(frozen=True)
class BlockData:
    """A block's kind and raw source before a concrete Block exists."""

    kind: str
    source: str

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> BlockData:
        kind = data.get("kind")
        source = data.get("source")
        if not isinstance(kind, str) or not isinstance(source, str):
            raise ValueError("Block data requires string 'kind' and 'source' fields")
        return cls(kind=kind, source=source)

    @classmethod
    def markdown(cls, source: str) -> BlockData:
        return cls(kind="markdown", source=source)

    def to_dict(self) -> dict[str, str]:
        return {"kind": self.kind, "source": self.source}

    def is_empty(self) -> bool:
        return self.source.strip() == ""

    def is_markdown(self) -> bool:
        return self.kind == "markdown"

    @property
    def content_length(self) -> int:
        """Length of the source in UTF-8 bytes."""
        return len(self.source.encode("utf-8"))

    @property
    def word_count(self) -> int:
        return len(self.source.split())

    @property
    def line_count(self) -> int:
        if self.source == "":
            return 0
        return self.source.count("\n") + 1

    def with_source(self, source: str) -> BlockData:
        return replace(self, source=source)

    def with_kind(self, kind: str) -> BlockData:
        return replace(self, kind=kind)

    def contains(self, text: str) -> bool:
        return text in self.source

    def startswith(self, text: str) -> bool:
        return self.source.startswith(text)

    def endswith(self, text: str) -> bool:
        return self.source.endswith(text)

    def preview(self, length: int = 100) -> str:
        if len(self.source) <= length:
            return self.source
        return self.source[:length] + "..."


@dataclass(frozen=True)
class ContentCreationRequest:
    """Typed view of validated creation data, ready for aggregate construction."""

    type: str
    title: str | None = None
    summary: str | None = None
    blocks: tuple[BlockData, ...] = ()

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> ContentCreationRequest:
        return cls(
            type=data["type"],
            title=data.get("title"),
            summary=data.get("summary"),
            blocks=tuple(BlockData.from_dict(b) for b in data.get("blocks", [])),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "type": self.type,
            "title": self.title,
            "summary": self.summary,
            "blocks": [b.to_dict() for b in self.blocks],
        }

    @property
    def block_count(self) -> int:
        return len(self.blocks)

    def has_title(self) -> bool:
        return self.title is not None and self.title.strip() != ""

    def has_summary(self) -> bool:
        return self.summary is not None and self.summary.strip() != ""

    def blocks_of_kind(self, kind: str) -> list[BlockData]:
        return [b for b in self.blocks if b.kind == kind]

    def has_blocks_of_kind(self, kind: str) -> bool:
        return bool(self.blocks_of_kind(kind))

    @property
    def total_content_length(self) -> int:
        return sum(b.content_length for b in self.blocks)

    def is_empty(self) -> bool:
        if self.has_title() or self.has_summary():
            return False
        return not self.blocks or self.total_content_length == 0

    def with_title(self, title: str | None) -> ContentCreationRequest:
        return replace(self, title=title)

    def with_summary(self, summary: str | None) -> ContentCreationRequest:
        return replace(self, summary=summary)

    def with_block(self, block: BlockData) -> ContentCreationRequest:
        return replace(self, blocks=(*self.blocks, block))

    def with_blocks(self, blocks: list[BlockData]) -> ContentCreationRequest:
        return replace(self, blocks=tuple(blocks))


# --- Validation result ---


@dataclass(frozen=True)
class ValidationResult:
    """
    Outcome of a validation call.

    Either valid (optionally carrying the validated data) or invalid with
    a mapping of field name to ordered error messages. Nested block
    errors use keys such as ``blocks[2].source``.
    """

    is_valid: bool
    errors: dict[str, list[str]] = field(default_factory=dict)
    data: dict[str, Any] | None = None

    def __post_init__(self) -> None:
        if self.is_valid and self.errors:
            raise ValueError("A successful result cannot carry errors")
        if not self.is_valid and not self.errors:
            raise ValueError("A failed result must carry at least one error")
        if not self.is_valid and self.data is not None:
            raise ValueError("A failed result cannot carry data")

    @classmethod
    def success(cls) -> ValidationResult:
        return cls(is_valid=True)

    @classmethod
    def success_with_data(cls, data: dict[str, Any]) -> ValidationResult:
        return cls(is_valid=True, data=data)

    @classmethod
    def failure(cls, errors: Mapping[str, list[str]]) -> ValidationResult:
        return cls(is_valid=False, errors={k: list(v) for k, v in errors.items()})

    @classmethod
    def single_error(cls, field_name: str, message: str) -> ValidationResult:
        return cls(is_valid=False, errors={field_name: [message]})

    @classmethod
    def from_errors(
        cls, errors: Mapping[str, list[str]], data: dict[str, Any] | None = None
    ) -> ValidationResult:
        """Failure if any errors were collected, otherwise success carrying ``data``."""
        if any(errors.values()):
            return cls.failure({k: v for k, v in errors.items() if v})
        if data is None:
            return cls.success()
        return cls.success_with_data(data)

    def merge(self, other: ValidationResult) -> ValidationResult:
        if self.is_valid and other.is_valid:
            return ValidationResult.success()

        merged: dict[str, list[str]] = {k: list(v) for k, v in self.errors.items()}
        for field_name, messages in other.errors.items():
            merged.setdefault(field_name, []).extend(messages)
        return ValidationResult.failure(merged)

    def field_errors(self, field_name: str) -> list[str]:
        return self.errors.get(field_name, [])

    def has_field_errors(self, field_name: str) -> bool:
        return bool(self.errors.get(field_name))

    def all_messages(self) -> list[str]:
        return [f"{name}: {msg}" for name, messages in self.errors.items() for msg in messages]

    @property
    def error_count(self) -> int:
        return sum(len(messages) for messages in self.errors.values())

    @property
    def fields_with_errors(self) -> list[str]:
        return list(self.errors)

    def has_errors(self) -> bool:
        return bool(self.errors)

    def to_dict(self) -> dict[str, Any]:
        return {
            "is_valid": self.is_valid,
            "errors": self.errors,
            "error_count": self.error_count,
            "fields_with_errors": self.fields_with_errors,
        }


# --- Diagnostics ---


@dataclass(frozen=True)
class SanitizationStats:
    """What sanitization did to one input."""

    fields_processed: int = 0
    fields_modified: int = 0
    blocks_processed: int = 0
    blocks_modified: int = 0
    total_content_length_before: int = 0
    total_content_length_after: int = 0


@dataclass(frozen=True)
class ProcessingDetails:
    """Full trace of one sanitize + validate run."""

    sanitized_data: dict[str, Any]
    stats: SanitizationStats | None
    validation_result: ValidationResult
    final_result: ValidationResult
