"""Unit tests for handle format validation."""

import pytest

from domain.services.handle_validator import (
    display_handle,
    format_handle,
    normalize_handle,
    validate_handle,
)


class TestNormalization:
    def test_strips_whitespace_and_one_at_sign(self):
        assert normalize_handle("  @TomK  ") == "tomk"

    def test_only_one_leading_at_is_removed(self):
        assert normalize_handle("@@tomk") == "@tomk"

    def test_display_form_keeps_casing(self):
        assert display_handle(" @TomK") == "TomK"

    def test_format_handle_adds_at_prefix(self):
        assert format_handle("tomk") == "@tomk"
        assert format_handle("@tomk") == "@tomk"
        assert format_handle(None) == ""


class TestValidateHandle:
    @pytest.mark.parametrize(
        "raw",
        ["abc", "TomK", "@tomk", "tom.k", "tom_k", "t.o_m", "a" * 20, "123", " tomk "],
    )
    def test_accepts_valid_handles(self, raw: str):
        result = validate_handle(raw)

        assert result.valid
        assert result.reason is None
        assert result.normalized == normalize_handle(raw)

    @pytest.mark.parametrize("raw", [None, "", "   ", "@"])
    def test_requires_a_value(self, raw):
        result = validate_handle(raw)

        assert not result.valid
        assert result.reason == "Handle is required"

    def test_rejects_too_short(self):
        result = validate_handle("ab")

        assert not result.valid
        assert result.reason == "Handle must be at least 3 characters long"

    def test_rejects_too_long(self):
        result = validate_handle("a" * 21)

        assert not result.valid
        assert result.reason == "Handle must be 20 characters or less"

    @pytest.mark.parametrize("raw", ["_tom", ".tom", "tom_", "tom.", "tom-k", "tom k", "tom!"])
    def test_rejects_bad_characters_and_edges(self, raw: str):
        result = validate_handle(raw)

        assert not result.valid
        assert "must start and end with a letter or number" in (result.reason or "")

    @pytest.mark.parametrize("raw", ["tom..k", "tom__k", "tom._k", "tom_.k"])
    def test_rejects_consecutive_separators(self, raw: str):
        result = validate_handle(raw)

        assert not result.valid
        assert result.reason == "Handle cannot have consecutive dots or underscores"

    @pytest.mark.parametrize("raw", ["tom\u00e9", "\u212aelvin", "tom\u00a0k"])
    def test_rejects_non_ascii(self, raw: str):
        result = validate_handle(raw)

        assert not result.valid
        assert result.reason == "Handle can only contain letters, numbers, dots, and underscores"
