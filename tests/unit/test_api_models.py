"""Tests for gallerycms.api.models — Pydantic request models.

Tests cover:
- Required field validation on each request body.
- Default values for optional fields.
- Length limits on category and alt-text fields.
"""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from gallerycms.api.models import (
    AssetUpdateRequest,
    BatchUpdateRequest,
    CategoryCreateRequest,
    CategoryRenameRequest,
    ReorderRequest,
)


class TestBatchUpdateRequest:
    """Test BatchUpdateRequest Pydantic model."""

    def test_valid_batch(self):
        req = BatchUpdateRequest(settings=[{"id": 1, "value": "Hello"}, {"id": 2}])
        assert [s.id for s in req.settings] == [1, 2]
        assert req.settings[1].value is None  # Default value.

    def test_missing_settings_raises(self):
        with pytest.raises(ValidationError):
            BatchUpdateRequest()

    def test_item_without_id_raises(self):
        with pytest.raises(ValidationError):
            BatchUpdateRequest(settings=[{"value": "x"}])

    def test_empty_batch_is_valid(self):
        assert BatchUpdateRequest(settings=[]).settings == []


class TestReorderRequest:
    def test_order_is_list_of_ints(self):
        assert ReorderRequest(order=[3, 1, 2]).order == [3, 1, 2]

    def test_non_integer_rejected(self):
        with pytest.raises(ValidationError):
            ReorderRequest(order=["first"])


class TestAssetUpdateRequest:
    """Test AssetUpdateRequest Pydantic model."""

    def test_all_fields_optional(self):
        req = AssetUpdateRequest()
        assert req.category is None
        assert req.alt_text is None

    def test_alt_text_too_long(self):
        with pytest.raises(ValidationError):
            AssetUpdateRequest(alt_text="x" * 256)


class TestCategoryRequests:
    def test_create_requires_name(self):
        with pytest.raises(ValidationError):
            CategoryCreateRequest(name="")

    def test_rename_too_long(self):
        with pytest.raises(ValidationError):
            CategoryRenameRequest(new_name="x" * 101)

    def test_rename_valid(self):
        assert CategoryRenameRequest(new_name="news").new_name == "news"
