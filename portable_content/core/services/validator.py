"""
ContentValidator - rule enforcement over sanitized content.

Two entry points share the field rules:
- validate_content_creation: ``type`` and ``blocks`` required
- validate_content_update: every field optional; present fields obey
  the same bounds

All rules run and all errors are collected; validation never changes
the data it inspects, and success hands the same mapping back.
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from typing import Any

from portable_content.core.services.registry import BlockValidatorRegistry
from portable_content.domain.blocks import MarkdownBlockValidator
from portable_content.domain.models import ValidationResult
from portable_content.rules.models import Rules


class ContentValidator:
    def __init__(
        self,
        rules: Rules | None = None,
        block_validators: BlockValidatorRegistry | None = None,
    ):
        self.rules = rules or Rules()
        if block_validators is None:
            block_validators = BlockValidatorRegistry(
                [MarkdownBlockValidator(self.rules.blocks.markdown)]
            )
        self.block_validators = block_validators
        self._type_pattern = re.compile(self.rules.content.type.pattern)

    def validate_content_creation(self, data: Mapping[str, Any]) -> ValidationResult:
        return self._validate(data, creation=True)

    def validate_content_update(self, data: Mapping[str, Any]) -> ValidationResult:
        return self._validate(data, creation=False)

    def _validate(self, data: Mapping[str, Any], *, creation: bool) -> ValidationResult:
        errors: dict[str, list[str]] = {}

        # Closed schema
        allowed = set(self.rules.content.allowed_fields)
        for key in data:
            if key not in allowed:
                errors.setdefault(key, []).append(f"Field '{key}' is not allowed")

        if data.get("type") is not None:
            errors["type"] = self._check_type(data["type"])
        elif creation:
            errors["type"] = ["Type is required"]

        text_rules = {"title": self.rules.content.title, "summary": self.rules.content.summary}
        for name, rule in text_rules.items():
            if data.get(name) is not None:
                errors[name] = self._check_text(name, data[name], rule.max)

        blocks_result = ValidationResult.success()
        if data.get("blocks") is not None:
            errors["blocks"] = self._check_block_count(data["blocks"])
            if isinstance(data["blocks"], list | tuple):
                blocks_result = self.block_validators.validate_blocks(data["blocks"])
        elif creation:
            errors["blocks"] = ["At least one block is required"]

        result = ValidationResult.from_errors(errors).merge(blocks_result)
        if result.is_valid:
            return ValidationResult.success_with_data(dict(data))
        return result

    def _check_type(self, value: Any) -> list[str]:
        rule = self.rules.content.type
        if not isinstance(value, str):
            return ["Type must be a string"]
        if not value.strip():
            return ["Type is required"]

        messages = []
        if len(value) > rule.max:
            messages.append(f"Type must be {rule.max} characters or less")
        if not self._type_pattern.fullmatch(value):
            messages.append("Type must contain only letters, numbers, and underscores")
        return messages

    def _check_text(self, name: str, value: Any, max_length: int) -> list[str]:
        label = name.capitalize()
        if not isinstance(value, str):
            return [f"{label} must be a string"]
        if len(value) > max_length:
            return [f"{label} must be {max_length} characters or less"]
        return []

    def _check_block_count(self, blocks: Any) -> list[str]:
        if not isinstance(blocks, list | tuple):
            return ["Blocks must be a list"]

        min_blocks = self.rules.blocks.min_blocks_per_item
        max_blocks = self.rules.blocks.max_blocks_per_item
        if len(blocks) < min_blocks:
            if min_blocks == 1:
                return ["At least one block is required"]
            return [f"At least {min_blocks} blocks are required"]
        if len(blocks) > max_blocks:
            return [f"Maximum {max_blocks} blocks allowed (got {len(blocks)})"]
        return []
