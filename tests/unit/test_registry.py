import pytest

from portable_content.core.services.registry import (
    BlockSanitizerRegistry,
    BlockValidatorRegistry,
)
from portable_content.domain.blocks import MarkdownBlockValidator
from portable_content.domain.errors import (
    DuplicateStrategyError,
    MalformedBlockError,
    UnknownBlockKindError,
)
from portable_content.domain.sanitize import MarkdownBlockSanitizer


@pytest.fixture
def sanitizers():
    return BlockSanitizerRegistry([MarkdownBlockSanitizer()])


@pytest.fixture
def validators():
    return BlockValidatorRegistry([MarkdownBlockValidator()])


class TestBlockSanitizerRegistry:
    def test_duplicate_registration_rejected(self, sanitizers):
        with pytest.raises(DuplicateStrategyError) as exc:
            sanitizers.register(MarkdownBlockSanitizer())
        assert exc.value.kind == "markdown"

    def test_lookup(self, sanitizers):
        assert sanitizers.has_sanitizer("markdown")
        assert not sanitizers.has_sanitizer("image")
        assert sanitizers.supported_kinds() == ["markdown"]
        assert isinstance(sanitizers.get_sanitizer("markdown"), MarkdownBlockSanitizer)
        assert len(sanitizers.all_sanitizers()) == 1

    def test_unknown_kind(self, sanitizers):
        with pytest.raises(UnknownBlockKindError, match="image"):
            sanitizers.get_sanitizer("image")

    def test_sanitize_dispatches_on_normalized_kind(self, sanitizers):
        result = sanitizers.sanitize({"kind": "  MARKDOWN ", "source": "-  x"})
        assert result == {"kind": "markdown", "source": "- x"}

    def test_sanitize_requires_mapping(self, sanitizers):
        with pytest.raises(MalformedBlockError):
            sanitizers.sanitize("markdown")

    def test_sanitize_requires_string_kind(self, sanitizers):
        with pytest.raises(MalformedBlockError, match='"kind"'):
            sanitizers.sanitize({"source": "x"})

    def test_batch_reports_failing_index(self, sanitizers):
        blocks = [
            {"kind": "markdown", "source": "ok"},
            {"kind": "markdown", "source": "ok"},
            {"source": "no kind"},
            {"kind": "image"},
        ]
        with pytest.raises(MalformedBlockError) as exc:
            sanitizers.sanitize_blocks(blocks)
        assert exc.value.index == 2
        assert "index 2" in str(exc.value)

    def test_batch_unknown_kind_carries_index(self, sanitizers):
        with pytest.raises(UnknownBlockKindError) as exc:
            sanitizers.sanitize_blocks([{"kind": "markdown", "source": "a"}, {"kind": "video"}])
        assert exc.value.index == 1
        assert exc.value.kind == "video"

    def test_batch_keeps_order(self, sanitizers):
        blocks = [{"kind": "markdown", "source": f"  block {i}  "} for i in range(3)]
        assert [b["source"] for b in sanitizers.sanitize_blocks(blocks)] == [
            "block 0",
            "block 1",
            "block 2",
        ]


class TestBlockValidatorRegistry:
    def test_duplicate_registration_rejected(self, validators):
        with pytest.raises(DuplicateStrategyError):
            validators.register(MarkdownBlockValidator())

    def test_lookup(self, validators):
        assert validators.has_validator("markdown")
        assert validators.supported_kinds() == ["markdown"]
        assert len(validators.all_validators()) == 1
        with pytest.raises(UnknownBlockKindError):
            validators.get_validator("image")

    def test_unknown_kind_is_a_validation_error(self, validators):
        result = validators.validate_block({"kind": "image", "source": "x"})
        assert not result.is_valid
        assert "image" in result.field_errors("kind")[0]

    def test_non_mapping_block(self, validators):
        result = validators.validate_block(["markdown"])
        assert result.has_field_errors("kind")

    def test_batch_accumulates_with_indexed_keys(self, validators):
        blocks = [
            {"kind": "markdown", "source": "fine"},
            {"kind": "markdown", "source": "```"},
            {"kind": "image", "source": "x"},
            {"kind": "markdown", "source": "[x](javascript:alert(1))"},
        ]
        result = validators.validate_blocks(blocks)
        assert not result.is_valid
        assert result.fields_with_errors == [
            "blocks[1].source",
            "blocks[2].kind",
            "blocks[3].source",
        ]

    def test_batch_valid(self, validators):
        result = validators.validate_blocks([{"kind": "markdown", "source": "a"}] * 3)
        assert result.is_valid
