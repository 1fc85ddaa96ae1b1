"""Data models for the editing core."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any

from .errors import InvariantViolationError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Setting:
    """One persisted page setting.

    ``id`` never changes once the server has created the setting; ``value``
    is always a string, whatever the setting type.
    """

    id: int
    page: str
    section: str
    key: str
    type: str = "text"
    value: str = ""
    description: str = ""
    sort_order: int = 0

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Setting:
        """Build a setting from an API payload."""
        return cls(
            id=data["id"],
            page=data["page"],
            section=data["section"],
            key=data["key"],
            type=data.get("type", "text"),
            value=data.get("value") or "",
            description=data.get("description", ""),
            sort_order=data.get("sort_order", 0),
        )

    def with_value(self, value: str) -> Setting:
        return replace(self, value=value)


class AssetState(str, Enum):
    """Lifecycle of an asset: ``uploading -> present -> deleted``."""

    UPLOADING = "uploading"
    PRESENT = "present"
    DELETED = "deleted"


_TRANSITIONS: dict[AssetState, frozenset[AssetState]] = {
    AssetState.UPLOADING: frozenset({AssetState.PRESENT}),
    AssetState.PRESENT: frozenset({AssetState.DELETED}),
    AssetState.DELETED: frozenset(),
}


@dataclass(frozen=True)
class Asset:
    """One image of a collection.

    Whether an asset is the primary image is not stored here: it is owned by
    :class:`~gallerycms.editor.assets.AssetSequence` together with the order.
    """

    id: int
    filename: str
    original_name: str = ""
    category: str = "uncategorized"
    alt_text: str = ""
    width: int = 0
    height: int = 0
    file_size: int = 0
    rendition_urls: dict[str, str] = field(default_factory=dict, compare=False)
    state: AssetState = AssetState.PRESENT

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Asset:
        """Build a present asset from an API payload."""
        return cls(
            id=data["id"],
            filename=data["filename"],
            original_name=data.get("original_name", ""),
            category=data.get("category", "uncategorized"),
            alt_text=data.get("alt_text", ""),
            width=data.get("width", 0),
            height=data.get("height", 0),
            file_size=data.get("file_size", 0),
            rendition_urls=dict(data.get("rendition_urls") or {}),
        )

    @classmethod
    def placeholder(cls, temp_id: int, original_name: str, category: str | None = None) -> Asset:
        """Create the local stand-in shown while a file is uploading."""
        return cls(
            id=temp_id,
            filename="",
            original_name=original_name,
            category=category or "uncategorized",
            state=AssetState.UPLOADING,
        )

    def transition(self, state: AssetState) -> Asset:
        """Return a copy of this asset in ``state``.

        Raises:
            InvariantViolationError: If the lifecycle does not allow the move
        """
        if state not in _TRANSITIONS[self.state]:
            raise InvariantViolationError(
                f"Image {self.id} cannot go from {self.state.value} to {state.value}"
            )
        return replace(self, state=state)

    def confirm(self, data: dict[str, Any]) -> Asset:
        """Turn an uploading placeholder into the asset the server created."""
        self.transition(AssetState.PRESENT)
        return Asset.from_dict(data)
