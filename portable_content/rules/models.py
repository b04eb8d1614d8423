from pydantic import BaseModel, Field


class RangeRule(BaseModel):
    min: int = 0
    max: int


class RegexRule(RangeRule):
    pattern: str


class ContentRules(BaseModel):
    type: RegexRule = Field(
        default_factory=lambda: RegexRule(min=1, max=50, pattern=r"^[A-Za-z0-9_]+$")
    )
    title: RangeRule = Field(default_factory=lambda: RangeRule(max=255))
    summary: RangeRule = Field(default_factory=lambda: RangeRule(max=1000))
    allowed_fields: list[str] = Field(
        default_factory=lambda: ["type", "title", "summary", "blocks"]
    )


class MarkdownRules(BaseModel):
    max_bytes: int = 100_000
    allowed_link_prefixes: list[str] = Field(
        default_factory=lambda: ["http://", "https://", "/", "#"]
    )


class BlocksRules(BaseModel):
    min_blocks_per_item: int = 1
    max_blocks_per_item: int = 10
    markdown: MarkdownRules = Field(default_factory=MarkdownRules)


class StorageRules(BaseModel):
    db_path: str = "storage/content.db"
    migrations_dir: str | None = None  # None: migrations bundled with the package


class Rules(BaseModel):
    content: ContentRules = Field(default_factory=ContentRules)
    blocks: BlocksRules = Field(default_factory=BlocksRules)
    storage: StorageRules = Field(default_factory=StorageRules)


DEFAULT_RULES = Rules()
