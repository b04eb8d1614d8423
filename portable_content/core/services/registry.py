"""
Per-kind strategy registries for block sanitizers and validators.

Adding a block kind means registering one sanitizer and one validator;
orchestration code does not change. One strategy per kind, no overriding.

Batch behaviour differs on purpose:
- sanitize_blocks stops at the first structurally broken block and
  reports its index (sanitization is a precondition for validation);
- validate_blocks runs every block and merges every error.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence
from typing import Any

from portable_content.domain.errors import (
    DuplicateStrategyError,
    MalformedBlockError,
    UnknownBlockKindError,
)
from portable_content.domain.models import ValidationResult
from portable_content.ports.blocks import BlockSanitizerPort, BlockValidatorPort


def _lookup_kind(kind: str) -> str:
    return kind.strip().lower()


class BlockSanitizerRegistry:
    def __init__(self, sanitizers: Iterable[BlockSanitizerPort] = ()):
        self._sanitizers: dict[str, BlockSanitizerPort] = {}
        for sanitizer in sanitizers:
            self.register(sanitizer)

    def register(self, sanitizer: BlockSanitizerPort) -> None:
        kind = sanitizer.block_kind
        if kind in self._sanitizers:
            raise DuplicateStrategyError(kind, role="sanitizer")
        self._sanitizers[kind] = sanitizer

    def get_sanitizer(self, kind: str) -> BlockSanitizerPort:
        try:
            return self._sanitizers[kind]
        except KeyError:
            raise UnknownBlockKindError(kind, role="sanitizer") from None

    def has_sanitizer(self, kind: str) -> bool:
        return kind in self._sanitizers

    def supported_kinds(self) -> list[str]:
        return list(self._sanitizers)

    def all_sanitizers(self) -> list[BlockSanitizerPort]:
        return list(self._sanitizers.values())

    def sanitize(self, block_data: Any) -> dict[str, Any]:
        """
        Sanitize one block with the strategy for its kind.

        Raises:
            MalformedBlockError: not a mapping, or no string ``kind``.
            UnknownBlockKindError: no sanitizer for the kind.
        """
        if not isinstance(block_data, Mapping):
            raise MalformedBlockError(f"expected a mapping, got {type(block_data).__name__}")

        kind = block_data.get("kind")
        if not isinstance(kind, str):
            raise MalformedBlockError('block data must contain a string "kind" field')

        return self.get_sanitizer(_lookup_kind(kind)).sanitize(block_data)

    def sanitize_blocks(self, blocks: Sequence[Any]) -> list[dict[str, Any]]:
        """Sanitize in order; the first failing block aborts with its index."""
        sanitized = []
        for index, block_data in enumerate(blocks):
            try:
                sanitized.append(self.sanitize(block_data))
            except MalformedBlockError as e:
                raise MalformedBlockError(str(e), index=index) from e
            except UnknownBlockKindError as e:
                raise UnknownBlockKindError(e.kind, role=e.role, index=index) from e
        return sanitized


class BlockValidatorRegistry:
    def __init__(self, validators: Iterable[BlockValidatorPort] = ()):
        self._validators: dict[str, BlockValidatorPort] = {}
        for validator in validators:
            self.register(validator)

    def register(self, validator: BlockValidatorPort) -> None:
        kind = validator.block_kind
        if kind in self._validators:
            raise DuplicateStrategyError(kind, role="validator")
        self._validators[kind] = validator

    def get_validator(self, kind: str) -> BlockValidatorPort:
        try:
            return self._validators[kind]
        except KeyError:
            raise UnknownBlockKindError(kind, role="validator") from None

    def has_validator(self, kind: str) -> bool:
        return kind in self._validators

    def supported_kinds(self) -> list[str]:
        return list(self._validators)

    def all_validators(self) -> list[BlockValidatorPort]:
        return list(self._validators.values())

    def validate_block(self, block_data: Any) -> ValidationResult:
        if not isinstance(block_data, Mapping):
            return ValidationResult.single_error(
                "kind", f"Block must be an object, got {type(block_data).__name__}"
            )

        kind = block_data.get("kind")
        if not isinstance(kind, str) or not kind.strip():
            return ValidationResult.single_error("kind", "Block kind is required")

        try:
            validator = self.get_validator(kind)
        except UnknownBlockKindError as e:
            return ValidationResult.single_error("kind", str(e))

        return validator.validate(block_data)

    def validate_blocks(self, blocks: Sequence[Any], prefix: str = "blocks") -> ValidationResult:
        """
        Validate every block and merge all errors.

        Error keys are attributed to the block, e.g. ``blocks[1].source``.
        """
        errors: dict[str, list[str]] = {}
        for index, block_data in enumerate(blocks):
            result = self.validate_block(block_data)
            for field_name, messages in result.errors.items():
                errors.setdefault(f"{prefix}[{index}].{field_name}", []).extend(messages)
        return ValidationResult.from_errors(errors)
