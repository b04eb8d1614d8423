"""
ContentSanitizer - normalizes top-level content fields.

- type: trimmed, characters outside [A-Za-z0-9_] removed (case kept)
- title / summary: control characters removed, line endings normalized,
  blank-line runs collapsed, trimmed; dropped if nothing is left
- blocks: delegated to the block sanitizer registry
- any other field passes through untouched for the validator to reject

Structural problems with ``blocks`` raise SanitizationError, which the
validation service reports under the ``sanitization`` field.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from portable_content.core.services.registry import BlockSanitizerRegistry
from portable_content.domain.errors import SanitizationError, UnknownBlockKindError
from portable_content.domain.models import SanitizationStats
from portable_content.domain.sanitize import (
    MarkdownBlockSanitizer,
    normalize_type,
    sanitize_text,
)

TEXT_FIELDS = ("title", "summary")
SCALAR_FIELDS = ("type", *TEXT_FIELDS)


def _as_text(value: Any) -> str | None:
    """Scalars become strings; anything else cannot be cleaned."""
    if isinstance(value, str):
        return value
    if isinstance(value, int | float) and not isinstance(value, bool):
        return str(value)
    return None


class ContentSanitizer:
    def __init__(self, block_sanitizers: BlockSanitizerRegistry | None = None):
        if block_sanitizers is None:
            block_sanitizers = BlockSanitizerRegistry([MarkdownBlockSanitizer()])
        self.block_sanitizers = block_sanitizers

    def sanitize(self, data: Mapping[str, Any]) -> dict[str, Any]:
        sanitized: dict[str, Any] = {}

        for key, value in data.items():
            if value is None:
                continue
            if key == "type":
                text = _as_text(value)
                sanitized["type"] = normalize_type(text) if text is not None else ""
            elif key in TEXT_FIELDS:
                text = _as_text(value)
                cleaned = sanitize_text(text) if text is not None else ""
                if cleaned:
                    sanitized[key] = cleaned
            elif key == "blocks":
                sanitized["blocks"] = self._sanitize_blocks(value)
            else:
                sanitized[key] = value

        return sanitized

    def _sanitize_blocks(self, blocks: Any) -> list[dict[str, Any]]:
        if not isinstance(blocks, list | tuple):
            raise SanitizationError(f"Blocks must be a list, got {type(blocks).__name__}")
        try:
            return self.block_sanitizers.sanitize_blocks(blocks)
        except UnknownBlockKindError as e:
            raise SanitizationError(str(e)) from e

    def stats(self, original: Mapping[str, Any], sanitized: Mapping[str, Any]) -> SanitizationStats:
        """Compare raw and sanitized input field by field."""
        fields_processed = 0
        fields_modified = 0
        before = 0
        after = 0

        for name in SCALAR_FIELDS:
            if original.get(name) is None:
                continue
            fields_processed += 1
            raw = _as_text(original[name]) or ""
            clean = _as_text(sanitized.get(name, "")) or ""
            if raw != clean:
                fields_modified += 1
            before += len(raw)
            after += len(clean)

        blocks_processed = 0
        blocks_modified = 0
        raw_blocks = original.get("blocks")
        clean_blocks = sanitized.get("blocks")
        if isinstance(raw_blocks, list | tuple):
            blocks_processed = len(raw_blocks)
            if isinstance(clean_blocks, list):
                for raw_block, clean_block in zip(raw_blocks, clean_blocks, strict=False):
                    raw_source = _block_source(raw_block)
                    clean_source = _block_source(clean_block)
                    if raw_source != clean_source:
                        blocks_modified += 1
                    before += len(raw_source)
                    after += len(clean_source)

        return SanitizationStats(
            fields_processed=fields_processed,
            fields_modified=fields_modified,
            blocks_processed=blocks_processed,
            blocks_modified=blocks_modified,
            total_content_length_before=before,
            total_content_length_after=after,
        )


def _block_source(block: Any) -> str:
    if isinstance(block, Mapping):
        return _as_text(block.get("source")) or ""
    return ""
