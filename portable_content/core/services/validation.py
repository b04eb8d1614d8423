"""
ContentValidationService - sanitize, then validate.

Every public entry point returns a ValidationResult; structural input
errors become a ``sanitization`` field error instead of an exception.
On success the result carries the sanitized data, ready for
ContentCreationRequest.from_dict and aggregate construction.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping
from typing import Any

from portable_content.core.services.registry import (
    BlockSanitizerRegistry,
    BlockValidatorRegistry,
)
from portable_content.core.services.sanitizer import ContentSanitizer
from portable_content.core.services.validator import ContentValidator
from portable_content.domain.blocks import MarkdownBlockValidator
from portable_content.domain.errors import SanitizationError
from portable_content.domain.models import ProcessingDetails, ValidationResult
from portable_content.domain.sanitize import MarkdownBlockSanitizer
from portable_content.rules.models import Rules

logger = logging.getLogger(__name__)

SANITIZATION_FIELD = "sanitization"


class ContentValidationService:
    def __init__(self, sanitizer: ContentSanitizer, validator: ContentValidator):
        self.sanitizer = sanitizer
        self.validator = validator

    def validate_content_creation(self, data: Mapping[str, Any]) -> ValidationResult:
        return self._run(data, self.validator.validate_content_creation)

    def validate_content_update(self, data: Mapping[str, Any]) -> ValidationResult:
        return self._run(data, self.validator.validate_content_update)

    def sanitize_content(self, data: Mapping[str, Any]) -> dict[str, Any]:
        """Sanitize only. Raises SanitizationError on structurally broken input."""
        return self.sanitizer.sanitize(data)

    def validate_sanitized_content(self, data: Mapping[str, Any]) -> ValidationResult:
        """Validate already-sanitized data against the creation rules."""
        return self.validator.validate_content_creation(data)

    # Staged aliases
    sanitize_only = sanitize_content
    validate_sanitized_only = validate_sanitized_content

    def process_with_details(self, data: Mapping[str, Any]) -> ProcessingDetails:
        """Run the creation pipeline and keep every intermediate result."""
        try:
            sanitized = self.sanitizer.sanitize(data)
        except SanitizationError as e:
            error = ValidationResult.single_error(SANITIZATION_FIELD, str(e))
            return ProcessingDetails(
                sanitized_data={},
                stats=None,
                validation_result=error,
                final_result=error,
            )

        stats = self.sanitizer.stats(data, sanitized)
        validation_result = self.validator.validate_content_creation(sanitized)
        final_result = (
            ValidationResult.success_with_data(sanitized)
            if validation_result.is_valid
            else validation_result
        )
        return ProcessingDetails(
            sanitized_data=sanitized,
            stats=stats,
            validation_result=validation_result,
            final_result=final_result,
        )

    def _run(
        self,
        data: Mapping[str, Any],
        validate: Callable[[Mapping[str, Any]], ValidationResult],
    ) -> ValidationResult:
        try:
            sanitized = self.sanitizer.sanitize(data)
        except SanitizationError as e:
            logger.debug("Sanitization rejected input: %s", e)
            return ValidationResult.single_error(SANITIZATION_FIELD, str(e))

        result = validate(sanitized)
        if result.is_valid:
            return ValidationResult.success_with_data(sanitized)
        return result


def create_validation_service(rules: Rules | None = None) -> ContentValidationService:
    """Build the default pipeline with the built-in markdown strategies."""
    rules = rules or Rules()
    sanitizers = BlockSanitizerRegistry([MarkdownBlockSanitizer()])
    validators = BlockValidatorRegistry([MarkdownBlockValidator(rules.blocks.markdown)])
    return ContentValidationService(
        ContentSanitizer(sanitizers),
        ContentValidator(rules, validators),
    )
