"""Tests for token redaction."""

from pii_redaction.models.entities import ModelOrigin, PIIEntity, PIIType, RegexOrigin
from pii_redaction.redactors.text_redactor import (
    REPLACEMENT_TOKENS,
    TextRedactor,
    redact_pii,
    round_half_up,
)

_TEXT = "Contact me at jane@example.com or 406-555-1212"


def _entity(type_, start, end, text=_TEXT):
    return PIIEntity(type_, text[start:end], start, end, 0.95, RegexOrigin(type_.lower()))


class TestRedact:
    def test_tokens_replace_spans(self):
        result = redact_pii(_TEXT, [_entity("EMAIL", 14, 30), _entity("PHONE", 34, 46)])
        assert result.redacted_text == "Contact me at [EMAIL] or [PHONE]"
        assert result.original_text == _TEXT
        assert result.redaction_count == 2
        # 28 of 46 characters
        assert result.redaction_percentage == 61

    def test_input_order_does_not_matter(self):
        entities = [_entity("PHONE", 34, 46), _entity("EMAIL", 14, 30)]
        assert redact_pii(_TEXT, entities).redacted_text == "Contact me at [EMAIL] or [PHONE]"

    def test_short_tokens_for_long_type_names(self):
        text = "card 4111111111111111 and MRN 1234567"
        result = redact_pii(
            text, [_entity("CREDIT_CARD", 5, 21, text), _entity("MEDICAL_RECORD", 26, 37, text)]
        )
        assert result.redacted_text == "card [CC] and [MRN]"

    def test_unknown_type_uses_bracketed_type(self):
        text = "Witness: Officer Dale"
        entity = PIIEntity("WITNESS", "Officer Dale", 9, 21, 0.8, ModelOrigin(0.8))
        assert redact_pii(text, [entity]).redacted_text == "Witness: [WITNESS]"

    def test_no_entities_leaves_text_unchanged(self):
        result = redact_pii(_TEXT, [])
        assert result.redacted_text == _TEXT
        assert result.redaction_count == 0
        assert result.redaction_percentage == 0

    def test_empty_text(self):
        result = redact_pii("", [])
        assert result.redacted_text == ""
        assert result.redaction_percentage == 0

    def test_whole_text_redacted(self):
        text = "123-45-6789"
        result = redact_pii(text, [_entity("SSN", 0, 11, text)])
        assert result.redacted_text == "[SSN]"
        assert result.redaction_percentage == 100

    def test_custom_token_table(self):
        redactor = TextRedactor(tokens={"EMAIL": "<email>"})
        result = redactor.redact(_TEXT, [_entity("EMAIL", 14, 30), _entity("PHONE", 34, 46)])
        assert result.redacted_text == "Contact me at <email> or [PHONE]"


class TestTokens:
    def test_every_known_type_has_a_token(self):
        assert set(REPLACEMENT_TOKENS) == {t.value for t in PIIType}


class TestRoundHalfUp:
    def test_half_rounds_up(self):
        assert round_half_up(0.5) == 1
        assert round_half_up(2.5) == 3

    def test_below_half_rounds_down(self):
        assert round_half_up(60.4) == 60
        assert round_half_up(0) == 0
