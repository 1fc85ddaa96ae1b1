"""Tests for gallerycms.core.values — boolean and presentation helpers."""

from __future__ import annotations

import pytest

from gallerycms.core.values import display_name, humanize_key, is_enabled, normalize_boolean


class TestNormalizeBoolean:
    """Boolean settings are written as "1" / "0"."""

    @pytest.mark.parametrize("value", ["1", "true", "TRUE", "True", "yes", "on", True, 1])
    def test_truthy_values(self, value):
        assert normalize_boolean(value) == "1"

    @pytest.mark.parametrize("value", ["0", "false", "FALSE", "no", "off", "", "  ", None, False, 0])
    def test_falsy_values(self, value):
        assert normalize_boolean(value) == "0"

    def test_unknown_non_empty_string_is_true(self):
        """A stray value never silently disables a section."""
        assert normalize_boolean("enabled") == "1"

    def test_is_enabled(self):
        assert is_enabled("true") is True
        assert is_enabled("0") is False
        assert is_enabled(None) is False


class TestDisplayName:
    """Category names are title-cased only for presentation."""

    def test_single_word(self):
        assert display_name("blog") == "Blog"

    def test_multiple_words(self):
        assert display_name("limited editions") == "Limited Editions"

    def test_does_not_mutate_lowercase_identity(self):
        name = "oil paintings"
        display_name(name)
        assert name == "oil paintings"


class TestHumanizeKey:
    def test_underscores_become_spaces(self):
        assert humanize_key("show_stats") == "Show Stats"

    def test_repeated_underscores_ignored(self):
        assert humanize_key("primary__button") == "Primary Button"
