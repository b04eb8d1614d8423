"""
Portable content - content items made of typed blocks.

Untrusted input is sanitized, validated, turned into a ContentItem
aggregate, and persisted to SQLite.
"""

from portable_content.adapters.sqlite.database import connect, connect_in_memory, initialize
from portable_content.adapters.sqlite.migrator import get_table_info, run_migrations
from portable_content.adapters.sqlite.repos import SQLiteContentRepo
from portable_content.core.services.content import ContentService, build_content_item
from portable_content.core.services.registry import (
    BlockSanitizerRegistry,
    BlockValidatorRegistry,
)
from portable_content.core.services.sanitizer import ContentSanitizer
from portable_content.core.services.validation import (
    ContentValidationService,
    create_validation_service,
)
from portable_content.core.services.validator import ContentValidator
from portable_content.domain.blocks import MarkdownBlockValidator
from portable_content.domain.entities import Block, ContentItem, MarkdownBlock
from portable_content.domain.errors import (
    ContentError,
    ContentNotFoundError,
    DeleteError,
    DuplicateStrategyError,
    InvalidContentError,
    MalformedBlockError,
    QueryError,
    RepositoryError,
    SanitizationError,
    SaveError,
    TransactionError,
    UnknownBlockKindError,
    ValidationFailedError,
)
from portable_content.domain.models import (
    BlockData,
    ContentCreationRequest,
    ProcessingDetails,
    SanitizationStats,
    ValidationResult,
)
from portable_content.domain.sanitize import MarkdownBlockSanitizer
from portable_content.rules.loader import load_rules
from portable_content.rules.models import Rules

__version__ = "0.1.0"

__all__ = [
    # Domain
    "Block",
    "ContentItem",
    "MarkdownBlock",
    "BlockData",
    "ContentCreationRequest",
    "ValidationResult",
    "SanitizationStats",
    "ProcessingDetails",
    # Strategies
    "MarkdownBlockSanitizer",
    "MarkdownBlockValidator",
    "BlockSanitizerRegistry",
    "BlockValidatorRegistry",
    # Services
    "ContentSanitizer",
    "ContentValidator",
    "ContentValidationService",
    "create_validation_service",
    "ContentService",
    "build_content_item",
    # Storage
    "SQLiteContentRepo",
    "connect",
    "connect_in_memory",
    "initialize",
    "run_migrations",
    "get_table_info",
    # Config
    "Rules",
    "load_rules",
    # Errors
    "ContentError",
    "ContentNotFoundError",
    "DeleteError",
    "DuplicateStrategyError",
    "InvalidContentError",
    "MalformedBlockError",
    "QueryError",
    "RepositoryError",
    "SanitizationError",
    "SaveError",
    "TransactionError",
    "UnknownBlockKindError",
    "ValidationFailedError",
]
