from collections.abc import Mapping
from typing import Any, Protocol

from portable_content.domain.models import ValidationResult


class BlockSanitizerPort(Protocol):
    """Normalizes the raw fields of one block kind."""

    block_kind: str

    def supports(self, kind: str) -> bool:
        ...

    def sanitize(self, block_data: Mapping[str, Any]) -> dict[str, Any]:
        ...


class BlockValidatorPort(Protocol):
    """Enforces business rules on the sanitized fields of one block kind."""

    block_kind: str

    def supports(self, kind: str) -> bool:
        ...

    def validate(self, block_data: Mapping[str, Any]) -> ValidationResult:
        ...
