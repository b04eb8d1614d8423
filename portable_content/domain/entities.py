from __future__ import annotations

import re
from abc import ABC, abstractmethod
from collections.abc import Iterable
from datetime import UTC, datetime
from typing import Any, ClassVar
from uuid import uuid4

from pydantic import BaseModel, Field, model_validator

from portable_content.domain.errors import InvalidContentError, UnknownBlockKindError
from portable_content.domain.models import BlockData

_TAG_RE = re.compile(r"<[^>]*>")


def utc_now() -> datetime:
    return datetime.now(UTC)


def new_id() -> str:
    return str(uuid4())


# --- Blocks ---


class Block(BaseModel, ABC):
    """
    Base for every block variant owned by a ContentItem.

    Abstract: subclasses set ``kind``, expose their text through
    ``content`` and build themselves in ``from_block_data``.
    """

    kind: ClassVar[str] = ""

    id: str = Field(default_factory=new_id)
    created_at: datetime = Field(default_factory=utc_now)

    @property
    @abstractmethod
    def content(self) -> str:
        ...

    def is_empty(self) -> bool:
        return self.content.strip() == ""

    def word_count(self) -> int:
        return len(self.content.split())

    @classmethod
    @abstractmethod
    def from_block_data(cls, data: BlockData) -> Block:
        ...


class MarkdownBlock(Block):
    kind: ClassVar[str] = "markdown"

    source: str

    @classmethod
    def create(cls, source: str) -> MarkdownBlock:
        if not source.strip():
            raise InvalidContentError.empty_block_source()
        return cls(source=source)

    @classmethod
    def from_block_data(cls, data: BlockData) -> MarkdownBlock:
        return cls.create(data.source)

    @property
    def content(self) -> str:
        return self.source

    def set_source(self, source: str) -> None:
        self.source = source

    def word_count(self) -> int:
        # Tags are not words
        return len(_TAG_RE.sub(" ", self.source).split())


BLOCK_TYPES: dict[str, type[Block]] = {
    MarkdownBlock.kind: MarkdownBlock,
}


def create_block(data: BlockData) -> Block:
    """Materialize a concrete block from sanitized, validated block data."""
    block_cls = BLOCK_TYPES.get(data.kind)
    if block_cls is None:
        raise UnknownBlockKindError(data.kind, role="block type")
    return block_cls.from_block_data(data)


def _check_blocks(blocks: Iterable[Any]) -> list[Block]:
    checked = []
    for block in blocks:
        if not isinstance(block, Block):
            raise InvalidContentError.invalid_block_type(block)
        checked.append(block)
    return checked


# --- Aggregate ---


class ContentItem(BaseModel):
    """
    A piece of content: metadata plus an ordered list of blocks.

    Build new items with ``create``; construct directly only when
    reconstructing from storage. Every mutator refreshes ``updated_at``
    through ``touch``. Length and pattern rules are enforced by the
    validators, not here.
    """

    id: str
    type: str
    title: str | None = None
    summary: str | None = None
    blocks: list[Block] = Field(default_factory=list)
    created_at: datetime
    updated_at: datetime

    @model_validator(mode="after")
    def _check_timestamps(self) -> ContentItem:
        if self.updated_at < self.created_at:
            raise ValueError("updated_at cannot precede created_at")
        return self

    @classmethod
    def create(
        cls,
        type: str,
        title: str | None = None,
        summary: str | None = None,
        blocks: Iterable[Any] = (),
    ) -> ContentItem:
        if not type.strip():
            raise InvalidContentError.empty_type()
        checked = _check_blocks(blocks)
        now = utc_now()
        return cls(
            id=new_id(),
            type=type.strip(),
            title=title.strip() if title else None,
            summary=summary.strip() if summary else None,
            blocks=checked,
            created_at=now,
            updated_at=now,
        )

    def touch(self) -> datetime:
        self.updated_at = max(utc_now(), self.created_at)
        return self.updated_at

    def set_type(self, type: str) -> None:
        if not type.strip():
            raise InvalidContentError.empty_type()
        self.type = type.strip()
        self.touch()

    def set_title(self, title: str | None) -> None:
        self.title = title
        self.touch()

    def set_summary(self, summary: str | None) -> None:
        self.summary = summary
        self.touch()

    def set_blocks(self, blocks: Iterable[Any]) -> None:
        self.blocks = _check_blocks(blocks)
        self.touch()

    def add_block(self, block: Any) -> None:
        self.set_blocks([*self.blocks, block])

    @property
    def block_count(self) -> int:
        return len(self.blocks)
