from portable_content.core.services.validation import (
    SANITIZATION_FIELD,
    ContentValidationService,
    create_validation_service,
)
from portable_content.domain.models import ContentCreationRequest


def test_factory_builds_default_pipeline():
    service = create_validation_service()
    assert isinstance(service, ContentValidationService)
    assert service.sanitizer.block_sanitizers.supported_kinds() == ["markdown"]
    assert service.validator.block_validators.supported_kinds() == ["markdown"]


def test_creation_returns_sanitized_data(validation):
    result = validation.validate_content_creation(
        {
            "type": "  NOTE  ",
            "title": "  Hello ",
            "blocks": [{"kind": "  MARKDOWN  ", "source": "  # Hi  \n\n\n\nBody  "}],
        }
    )
    assert result.is_valid
    assert result.data == {
        "type": "NOTE",
        "title": "Hello",
        "blocks": [{"kind": "markdown", "source": "# Hi\n\nBody"}],
    }


def test_valid_data_feeds_request(validation, valid_data):
    result = validation.validate_content_creation(valid_data)
    request = ContentCreationRequest.from_dict(result.data)
    assert request.type == "note"
    assert request.block_count == 1
    assert request.blocks[0].source == "# Hi\n\nBody"


def test_validation_errors_returned(validation):
    result = validation.validate_content_creation({"type": "note", "blocks": []})
    assert not result.is_valid
    assert result.data is None
    assert result.has_field_errors("blocks")


def test_sanitization_failure_becomes_field_error(validation):
    result = validation.validate_content_creation(
        {"type": "note", "blocks": [{"kind": "markdown", "source": "ok"}, "not a block"]}
    )
    assert not result.is_valid
    assert result.fields_with_errors == [SANITIZATION_FIELD]
    assert "index 1" in result.field_errors(SANITIZATION_FIELD)[0]


def test_unknown_kind_becomes_sanitization_error(validation):
    result = validation.validate_content_creation(
        {"type": "note", "blocks": [{"kind": "image", "source": "x"}]}
    )
    assert result.has_field_errors(SANITIZATION_FIELD)


def test_update_pipeline(validation):
    result = validation.validate_content_update({"title": "  New title  "})
    assert result.is_valid
    assert result.data == {"title": "New title"}


def test_staged_calls(validation, valid_data):
    sanitized = validation.sanitize_content(valid_data)
    assert validation.validate_sanitized_content(sanitized).is_valid
    assert validation.sanitize_only(valid_data) == sanitized
    assert validation.validate_sanitized_only(sanitized).data == sanitized


class TestProcessWithDetails:
    def test_success(self, validation):
        details = validation.process_with_details(
            {"type": " note ", "blocks": [{"kind": "markdown", "source": "  text  "}]}
        )
        assert details.final_result.is_valid
        assert details.final_result.data == details.sanitized_data
        assert details.validation_result.is_valid
        assert details.stats is not None
        assert details.stats.fields_modified == 1
        assert details.stats.blocks_modified == 1

    def test_validation_failure(self, validation):
        details = validation.process_with_details({"type": "note"})
        assert details.sanitized_data == {"type": "note"}
        assert not details.final_result.is_valid
        assert details.final_result is details.validation_result

    def test_sanitization_failure(self, validation):
        details = validation.process_with_details({"blocks": 3})
        assert details.stats is None
        assert details.sanitized_data == {}
        assert details.final_result.has_field_errors(SANITIZATION_FIELD)
