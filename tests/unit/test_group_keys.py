"""Tests for gallerycms.core.group_keys — the ``<kind><index>_<field>`` convention."""

from __future__ import annotations

import pytest

from gallerycms.core.group_keys import (
    GROUP_FIELDS,
    GROUP_KINDS,
    KeyMatch,
    group_key,
    match_group_key,
    next_group_index,
)


class TestMatchGroupKey:
    """Split keys into (kind, index, field)."""

    def test_card_key(self):
        assert match_group_key("card3_title") == KeyMatch("card", 3, "title")

    @pytest.mark.parametrize("kind", GROUP_KINDS)
    def test_every_kind_matches(self, kind):
        assert match_group_key(f"{kind}12_some_field") == KeyMatch(kind, 12, "some_field")

    def test_non_digit_index_does_not_match(self):
        assert match_group_key("cardabc_title") is None

    def test_missing_field_does_not_match(self):
        assert match_group_key("faq1_") is None
        assert match_group_key("faq1") is None

    def test_index_zero_does_not_match(self):
        assert match_group_key("faq0_question") is None

    def test_unknown_kind_does_not_match(self):
        assert match_group_key("slide1_title") is None

    def test_prefix_must_start_the_key(self):
        assert match_group_key("my_card1_title") is None

    @pytest.mark.parametrize(
        "key", ["show_faq", "studio_address", "email_address", "phone_number", "social_instagram"]
    )
    def test_reserved_prefixes_never_match(self, key):
        assert match_group_key(key) is None

    def test_empty_key(self):
        assert match_group_key("") is None


class TestNextGroupIndex:
    """New members get one past the highest existing index."""

    def test_empty_section_starts_at_one(self):
        assert next_group_index([], "faq") == 1

    def test_gaps_are_not_reused(self):
        keys = ["faq2_question", "faq2_answer", "faq5_question"]
        assert next_group_index(keys, "faq") == 6

    def test_other_kinds_are_ignored(self):
        keys = ["card9_title", "faq1_question", "show_faq"]
        assert next_group_index(keys, "faq") == 2


class TestGroupFields:
    def test_faq_fields(self):
        assert [name for name, _ in GROUP_FIELDS["faq"]] == ["question", "answer"]

    def test_every_kind_has_fields(self):
        assert set(GROUP_FIELDS) == set(GROUP_KINDS)

    def test_group_key_roundtrip(self):
        assert match_group_key(group_key("stat", 4, "label")) == KeyMatch("stat", 4, "label")
