"""Pydantic request models for the Gallery CMS API.

These models define the JSON schema for every API endpoint that takes a
body.  FastAPI uses them for automatic request validation and OpenAPI
documentation generation.

Models
------
SettingUpdate / BatchUpdateRequest
    Payload for ``PATCH /api/settings`` — one atomic batch of value edits.
ReorderRequest
    Payload for ``PUT /api/collections/{collection}/assets/order``.
AssetUpdateRequest
    Payload for ``PATCH /api/collections/{collection}/assets/{id}``.
CategoryCreateRequest / CategoryRenameRequest
    Payloads for the category registry endpoints.
"""

from __future__ import annotations

from pydantic import BaseModel, Field


class SettingUpdate(BaseModel):
    """One value edit inside a settings batch.

    Attributes:
        id: Immutable setting id.
        value: New string value.  ``None`` is stored as an empty string.
    """

    id: int = Field(..., description="Setting id.")
    value: str | None = Field(default=None, description="New string-encoded value.")


class BatchUpdateRequest(BaseModel):
    """Request body for ``PATCH /api/settings``.

    The whole list is applied atomically: one invalid item rejects the
    batch.
    """

    settings: list[SettingUpdate] = Field(..., description="Value edits to apply together.")


class ReorderRequest(BaseModel):
    """Request body for reordering a collection.

    Attributes:
        order: Every asset id of the collection, in the new display order.
    """

    order: list[int] = Field(..., description="Complete ordered list of asset ids.")


class AssetUpdateRequest(BaseModel):
    """Request body for updating image metadata.

    Attributes:
        category: Registry category name, or ``None`` to leave unchanged.
        alt_text: Alternative text, or ``None`` to leave unchanged.
    """

    category: str | None = Field(default=None, max_length=100)
    alt_text: str | None = Field(default=None, max_length=255)


class CategoryCreateRequest(BaseModel):
    """Request body for ``POST /api/categories``."""

    name: str = Field(..., min_length=1, max_length=100, description="New category name.")


class CategoryRenameRequest(BaseModel):
    """Request body for ``PUT /api/categories/{name}``."""

    new_name: str = Field(..., min_length=1, max_length=100, description="Replacement name.")
