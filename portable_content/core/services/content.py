"""
ContentService - validated create/update on top of a content repository.

Raw input goes through the validation service; only validated, sanitized
data reaches aggregate construction and the repository.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from portable_content.core.services.validation import ContentValidationService
from portable_content.domain.entities import ContentItem, create_block
from portable_content.domain.errors import ContentNotFoundError, ValidationFailedError
from portable_content.domain.models import BlockData, ContentCreationRequest, ValidationResult
from portable_content.ports.repo import ContentRepoPort


def build_content_item(request: ContentCreationRequest) -> ContentItem:
    """Materialize a new aggregate from validated request data."""
    return ContentItem.create(
        type=request.type,
        title=request.title,
        summary=request.summary,
        blocks=[create_block(b) for b in request.blocks],
    )


def _require_valid(result: ValidationResult) -> dict[str, Any]:
    if not result.is_valid:
        raise ValidationFailedError(result.errors)
    return result.data or {}


class ContentService:
    def __init__(self, repo: ContentRepoPort, validation: ContentValidationService):
        self.repo = repo
        self.validation = validation

    def create(self, data: Mapping[str, Any]) -> ContentItem:
        """
        Validate raw input, build a new item and persist it.

        Raises:
            ValidationFailedError: input failed sanitization or validation.
            RepositoryError: the save failed.
        """
        validated = _require_valid(self.validation.validate_content_creation(data))
        item = build_content_item(ContentCreationRequest.from_dict(validated))
        self.repo.save(item)
        return item

    def update(self, content_id: str, data: Mapping[str, Any]) -> ContentItem:
        """Apply a partial update; absent fields are left as they are."""
        validated = _require_valid(self.validation.validate_content_update(data))
        item = self.get_or_raise(content_id)

        if "type" in validated:
            item.set_type(validated["type"])
        if "title" in validated:
            item.set_title(validated["title"])
        if "summary" in validated:
            item.set_summary(validated["summary"])
        if "blocks" in validated:
            item.set_blocks(create_block(BlockData.from_dict(b)) for b in validated["blocks"])

        self.repo.save(item)
        return item

    def get(self, content_id: str) -> ContentItem | None:
        return self.repo.find_by_id(content_id)

    def get_or_raise(self, content_id: str) -> ContentItem:
        item = self.repo.find_by_id(content_id)
        if item is None:
            raise ContentNotFoundError(content_id)
        return item

    def list(self, limit: int = 20, offset: int = 0) -> list[ContentItem]:
        return self.repo.find_all(limit=limit, offset=offset)

    def count(self) -> int:
        return self.repo.count()

    def delete(self, content_id: str) -> None:
        self.repo.delete(content_id)
