"""Tests for request options and response models."""

import pytest
from pydantic import ValidationError as PydanticValidationError

from safecomms import (
    ImageModerationOptions,
    ModerationOptions,
    ModerationResult,
    ReplaceSeverity,
    UsageReport,
)


def test_empty_options_produce_empty_payload():
    assert ModerationOptions().to_payload() == {}
    assert ImageModerationOptions().to_payload() == {}


def test_options_payload_uses_enum_values():
    options = ModerationOptions(replace=True, replace_severity=ReplaceSeverity.MEDIUM)
    assert options.to_payload() == {"replace": True, "replace_severity": "Medium"}


def test_plain_string_severity_passes_through():
    options = ModerationOptions(replace_severity="Critical")
    assert options.to_payload() == {"replace_severity": "Critical"}


def test_merged_ignores_none_and_returns_copy():
    base = ModerationOptions(language="en", pii=True)
    same = base.merged(language=None, pii=None)
    changed = base.merged(pii=False)

    assert same is base
    assert changed.pii is False
    assert changed.language == "en"
    assert base.pii is True


def test_merged_rejects_unknown_fields():
    with pytest.raises(TypeError):
        ModerationOptions().merged(enable_ocr=True)


def test_options_are_frozen():
    options = ModerationOptions()
    with pytest.raises(AttributeError):
        options.pii = True  # type: ignore[misc]


def test_image_form_encodes_booleans():
    options = ImageModerationOptions(language="de", enable_ocr=True, enhanced_ocr=False)
    assert options.to_form() == {"language": "de", "enableOcr": "true", "enhancedOcr": "false"}


def test_result_accepts_both_key_styles():
    assert ModerationResult.model_validate({"is_clean": True}).is_clean is True
    assert ModerationResult.model_validate({"isClean": False}).is_clean is False


def test_result_requires_boolean_is_clean():
    with pytest.raises(PydanticValidationError):
        ModerationResult.model_validate({"is_clean": "false"})
    with pytest.raises(PydanticValidationError):
        ModerationResult.model_validate({})


def test_result_dump_uses_field_names():
    result = ModerationResult.model_validate({"isClean": True, "safeContent": "hi"})
    assert result.model_dump(exclude_none=True) == {
        "is_clean": True,
        "is_bypass_attempt": False,
        "safe_content": "hi",
    }


def test_usage_report_extra_fields_preserved():
    report = UsageReport.model_validate({"tokensUsed": 3, "periodEnd": "2026-11-01"})
    assert report.tokens_used == 3
    assert report.model_extra == {"periodEnd": "2026-11-01"}


def test_image_payload_uses_camel_case_keys():
    options = ImageModerationOptions(moderation_profile_id="p", extract_metadata=True)
    assert options.to_payload() == {"moderationProfileId": "p", "extractMetadata": True}


def test_usage_report_requires_integer_tokens_used():
    with pytest.raises(PydanticValidationError):
        UsageReport.model_validate({"tokensUsed": "42"})
