import dataclasses

import pytest

from portable_content.domain.models import BlockData, ContentCreationRequest, ValidationResult


class TestValidationResult:
    def test_success(self):
        result = ValidationResult.success()
        assert result.is_valid
        assert result.errors == {}
        assert result.data is None
        assert not result.has_errors()

    def test_success_with_data(self):
        assert ValidationResult.success_with_data({"a": 1}).data == {"a": 1}

    def test_failure(self):
        result = ValidationResult.failure({"type": ["a", "b"], "title": ["c"]})
        assert not result.is_valid
        assert result.error_count == 3
        assert result.fields_with_errors == ["type", "title"]
        assert result.all_messages() == ["type: a", "type: b", "title: c"]

    def test_single_error(self):
        result = ValidationResult.single_error("blocks", "bad")
        assert result.field_errors("blocks") == ["bad"]
        assert result.field_errors("type") == []

    def test_invalid_states_rejected(self):
        with pytest.raises(ValueError):
            ValidationResult(is_valid=True, errors={"x": ["y"]})
        with pytest.raises(ValueError):
            ValidationResult(is_valid=False)
        with pytest.raises(ValueError):
            ValidationResult(is_valid=False, errors={"x": ["y"]}, data={})

    def test_from_errors_drops_empty_lists(self):
        assert ValidationResult.from_errors({"type": [], "title": []}).is_valid
        result = ValidationResult.from_errors({"type": [], "title": ["too long"]})
        assert result.fields_with_errors == ["title"]

    def test_merge(self):
        a = ValidationResult.single_error("type", "one")
        b = ValidationResult.failure({"type": ["two"], "title": ["three"]})
        merged = a.merge(b)
        assert merged.errors == {"type": ["one", "two"], "title": ["three"]}
        assert ValidationResult.success().merge(ValidationResult.success()).is_valid
        assert not ValidationResult.success().merge(a).is_valid

    def test_to_dict(self):
        result = ValidationResult.single_error("type", "bad")
        assert result.to_dict() == {
            "is_valid": False,
            "errors": {"type": ["bad"]},
            "error_count": 1,
            "fields_with_errors": ["type"],
        }

    def test_immutable(self):
        with pytest.raises(dataclasses.FrozenInstanceError):
            ValidationResult.success().is_valid = False


class TestBlockData:
    def test_from_dict(self):
        data = BlockData.from_dict({"kind": "markdown", "source": "x", "extra": 1})
        assert data == BlockData(kind="markdown", source="x")
        assert data.to_dict() == {"kind": "markdown", "source": "x"}

    def test_from_dict_requires_strings(self):
        with pytest.raises(ValueError):
            BlockData.from_dict({"kind": "markdown"})

    def test_metrics(self):
        data = BlockData.markdown("héllo world\nsecond line")
        assert data.is_markdown()
        assert data.content_length == len("héllo world\nsecond line".encode())
        assert data.word_count == 4
        assert data.line_count == 2
        assert BlockData.markdown("").line_count == 0

    def test_helpers(self):
        data = BlockData.markdown("# Title body")
        assert data.startswith("# ")
        assert data.endswith("body")
        assert data.contains("Title")
        assert not data.is_empty()
        assert data.with_source("   ").is_empty()
        assert data.with_kind("image").kind == "image"

    def test_preview(self):
        assert BlockData.markdown("a" * 150).preview() == "a" * 100 + "..."
        assert BlockData.markdown("short").preview() == "short"


class TestContentCreationRequest:
    def test_from_dict(self):
        request = ContentCreationRequest.from_dict(
            {"type": "note", "title": "T", "blocks": [{"kind": "markdown", "source": "a"}]}
        )
        assert request.type == "note"
        assert request.summary is None
        assert request.blocks == (BlockData.markdown("a"),)
        assert request.has_title()
        assert not request.has_summary()

    def test_from_dict_requires_type(self):
        with pytest.raises(KeyError):
            ContentCreationRequest.from_dict({"blocks": []})

    def test_blocks_of_kind(self):
        request = ContentCreationRequest(
            type="note", blocks=(BlockData.markdown("a"), BlockData(kind="image", source="b"))
        )
        assert request.block_count == 2
        assert request.blocks_of_kind("image") == [BlockData(kind="image", source="b")]
        assert request.has_blocks_of_kind("markdown")
        assert not request.has_blocks_of_kind("video")
        assert request.total_content_length == 2

    def test_is_empty(self):
        assert ContentCreationRequest(type="note").is_empty()
        assert ContentCreationRequest(type="note", blocks=(BlockData.markdown(""),)).is_empty()
        assert not ContentCreationRequest(type="note", title="T").is_empty()

    def test_with_helpers_return_copies(self):
        request = ContentCreationRequest(type="note")
        updated = request.with_title("T").with_summary("S").with_block(BlockData.markdown("a"))
        assert request.title is None
        assert updated.title == "T"
        assert updated.summary == "S"
        assert updated.block_count == 1
        assert updated.with_blocks([]).block_count == 0

    def test_to_dict(self):
        request = ContentCreationRequest(type="note", blocks=(BlockData.markdown("a"),))
        assert request.to_dict() == {
            "type": "note",
            "title": None,
            "summary": None,
            "blocks": [{"kind": "markdown", "source": "a"}],
        }
