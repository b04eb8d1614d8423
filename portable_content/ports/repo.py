from typing import Protocol

from portable_content.domain.entities import ContentItem


class ContentRepoPort(Protocol):
    def save(self, item: ContentItem) -> None:
        ...

    def find_by_id(self, content_id: str) -> ContentItem | None:
        """Return the item, or None if it does not exist."""
        ...

    def find_all(self, limit: int = 20, offset: int = 0) -> list[ContentItem]:
        """Newest first."""
        ...

    def delete(self, content_id: str) -> None:
        """Delete the item and its blocks. Missing ids are a no-op."""
        ...

    def count(self) -> int:
        ...

    def exists(self, content_id: str) -> bool:
        ...
