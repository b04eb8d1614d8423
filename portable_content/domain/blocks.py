import re
from collections.abc import Mapping
from typing import Any

from portable_content.domain.models import ValidationResult
from portable_content.rules.models import MarkdownRules

CODE_FENCE = "```"
# Every "](" opens a link target, however the link text nests brackets
LINK_TARGET_RE = re.compile(r"\]\(\s*<?([^)\s>]*)")


class MarkdownBlockValidator:
    """Business rules for sanitized ``markdown`` blocks."""

    block_kind = "markdown"

    def __init__(self, rules: MarkdownRules | None = None):
        self.rules = rules or MarkdownRules()

    def supports(self, kind: str) -> bool:
        return kind == self.block_kind

    def validate(self, block_data: Mapping[str, Any]) -> ValidationResult:
        """
        Validate one block. Every failed rule is reported; nothing stops early.

        Checks kind, presence and type of source, non-blank source, size in
        bytes, balanced code fences and link targets.
        """
        errors: dict[str, list[str]] = {}

        # 1. Kind
        kind = block_data.get("kind")
        if kind is None:
            errors.setdefault("kind", []).append("Block kind is required")
        elif kind != self.block_kind:
            errors.setdefault("kind", []).append("This validator only handles markdown blocks")

        # 2. Source
        source = block_data.get("source")
        if source is None:
            errors.setdefault("source", []).append("Block source is required")
        elif not isinstance(source, str):
            errors.setdefault("source", []).append("Block source must be a string")
        else:
            errors.setdefault("source", []).extend(self._check_source(source))

        return ValidationResult.from_errors(errors)

    def _check_source(self, source: str) -> list[str]:
        messages = []

        if not source.strip():
            messages.append("Block source cannot be empty after trimming")

        size = len(source.encode("utf-8"))
        if size > self.rules.max_bytes:
            messages.append(
                f"Block source cannot exceed {self.rules.max_bytes} bytes (got {size})"
            )

        if source.count(CODE_FENCE) % 2 != 0:
            messages.append("Unbalanced code blocks (``` markers)")

        targets = LINK_TARGET_RE.findall(source)
        bad_targets = [t for t in targets if not self._is_allowed_target(t)]
        if bad_targets:
            messages.append(
                f"Links must use valid URLs or relative paths (got '{bad_targets[0][:50]}')"
            )

        return messages

    def _is_allowed_target(self, target: str) -> bool:
        return target.startswith(tuple(self.rules.allowed_link_prefixes))
