"""Ordered image collections with exactly one primary image.

:class:`AssetSequence` owns the order and the primary designation together:
every operation returns a new sequence with both updated, so a non-empty
sequence without exactly one primary cannot be constructed.

:class:`AssetCollection` keeps two sequences.  ``confirmed`` is what the
server last acknowledged; ``draft`` exists only while a drag-reorder is in
progress or its persist failed.  On a successful drop the draft collapses
into ``confirmed``; on failure it stays on screen with ``reorder_failed``
set until the user retries or refreshes.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

from .client import CmsClient
from .errors import CmsError, InvariantViolationError
from .models import Asset, AssetState
from .notifications import Notifier

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AssetSequence:
    """Immutable ordered assets plus the position of the primary one."""

    items: tuple[Asset, ...] = ()
    primary: int | None = None

    def __post_init__(self):
        if self.items:
            if self.primary is None or not 0 <= self.primary < len(self.items):
                raise InvariantViolationError("A non-empty collection needs exactly one primary image")
        elif self.primary is not None:
            raise InvariantViolationError("An empty collection cannot have a primary image")

        ids = [asset.id for asset in self.items]
        if len(set(ids)) != len(ids):
            raise InvariantViolationError(f"Duplicate image ids in collection: {ids}")
        for asset in self.items:
            if asset.state is not AssetState.PRESENT:
                raise InvariantViolationError(f"Image {asset.id} is {asset.state.value}")

    @classmethod
    def from_records(cls, records: list[dict[str, Any]]) -> AssetSequence:
        """Build a sequence from API records carrying ``order`` and ``is_primary``.

        Raises:
            InvariantViolationError: If the records flag zero or several
                primaries for a non-empty collection
        """
        ordered = sorted(records, key=lambda r: (r.get("order", 0), r["id"]))
        flagged = [i for i, record in enumerate(ordered) if record.get("is_primary")]
        if ordered and len(flagged) != 1:
            raise InvariantViolationError(
                f"Server listed {len(flagged)} primary images for {len(ordered)} image(s)"
            )
        return cls(tuple(Asset.from_dict(r) for r in ordered), flagged[0] if flagged else None)

    def __len__(self) -> int:
        return len(self.items)

    def __iter__(self):
        return iter(self.items)

    def __contains__(self, asset_id: int) -> bool:
        return any(asset.id == asset_id for asset in self.items)

    @property
    def ids(self) -> list[int]:
        return [asset.id for asset in self.items]

    @property
    def primary_asset(self) -> Asset | None:
        return self.items[self.primary] if self.primary is not None else None

    @property
    def primary_id(self) -> int | None:
        asset = self.primary_asset
        return asset.id if asset is not None else None

    def is_primary(self, asset_id: int) -> bool:
        return self.primary_id == asset_id

    def index_of(self, asset_id: int) -> int:
        for position, asset in enumerate(self.items):
            if asset.id == asset_id:
                return position
        raise InvariantViolationError(f"Image {asset_id} is not in this collection")

    def append(self, assets: list[Asset]) -> AssetSequence:
        """Add assets at the end.  Into an empty sequence the first becomes primary."""
        if not assets:
            return self
        primary = self.primary if self.items else 0
        return AssetSequence(self.items + tuple(assets), primary)

    def remove(self, asset_id: int) -> AssetSequence:
        """Drop one asset.  If it was primary, the new first asset takes over."""
        position = self.index_of(asset_id)
        items = self.items[:position] + self.items[position + 1 :]
        if not items:
            return AssetSequence()
        if position == self.primary:
            primary = 0
        elif position < self.primary:
            primary = self.primary - 1
        else:
            primary = self.primary
        return AssetSequence(items, primary)

    def with_primary(self, asset_id: int) -> AssetSequence:
        return AssetSequence(self.items, self.index_of(asset_id))

    def reordered(self, ordered_ids: list[int]) -> AssetSequence:
        """Return the same assets in a new order; the primary follows its asset.

        Raises:
            InvariantViolationError: If ``ordered_ids`` is not a permutation of
                the current ids
        """
        if len(ordered_ids) != len(self.items) or set(ordered_ids) != set(self.ids):
            raise InvariantViolationError(
                f"New order {list(ordered_ids)} is not a permutation of {self.ids}"
            )
        by_id = {asset.id: asset for asset in self.items}
        items = tuple(by_id[asset_id] for asset_id in ordered_ids)
        primary_id = self.primary_id
        return AssetSequence(items, ordered_ids.index(primary_id) if items else None)

    def replace(self, asset: Asset) -> AssetSequence:
        """Swap in updated metadata for an asset already in the sequence."""
        position = self.index_of(asset.id)
        items = self.items[:position] + (asset,) + self.items[position + 1 :]
        return AssetSequence(items, self.primary)

    def rebased(self, onto: AssetSequence) -> AssetSequence:
        """Carry this sequence's order over to a freshly loaded one.

        Assets keep their position here and take their metadata and the
        primary designation from ``onto``.  Assets gone from ``onto`` are
        dropped; new ones are appended.
        """
        fresh = {asset.id: asset for asset in onto.items}
        kept = [fresh[asset_id] for asset_id in self.ids if asset_id in fresh]
        kept_ids = {asset.id for asset in kept}
        items = tuple(kept) + tuple(a for a in onto.items if a.id not in kept_ids)
        if not items:
            return AssetSequence()
        return AssetSequence(items, [a.id for a in items].index(onto.primary_id))

    def records(self) -> list[dict[str, Any]]:
        """Render the sequence as ``{id, order, is_primary, ...}`` dictionaries."""
        return [
            {
                "id": asset.id,
                "filename": asset.filename,
                "order": position,
                "is_primary": position == self.primary,
                "category": asset.category,
                "alt_text": asset.alt_text,
                "rendition_urls": asset.rendition_urls,
            }
            for position, asset in enumerate(self.items)
        ]


class AssetCollection:
    """One collection's images as the editor sees them.

    Args:
        client: API client
        collection: Collection name (e.g. an artwork slug)
        notifier: Receives one notification per operation
    """

    def __init__(self, client: CmsClient, collection: str, notifier: Notifier):
        self.client = client
        self.collection = collection
        self.notifier = notifier
        self.confirmed = AssetSequence()
        self.draft: AssetSequence | None = None
        self.reorder_failed = False
        self.uploading: tuple[Asset, ...] = ()
        self._reorder_pending = False
        self._next_temp_id = -1

    @property
    def visible(self) -> AssetSequence:
        """The sequence to render: the draft if one exists, else confirmed."""
        return self.draft if self.draft is not None else self.confirmed

    @property
    def reorder_pending(self) -> bool:
        return self._reorder_pending

    def _apply(self, change) -> None:
        """Apply a structural change to ``confirmed`` and to any open draft."""
        self.confirmed = change(self.confirmed)
        if self.draft is not None:
            self.draft = change(self.draft)

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------

    async def reload(self, keep_draft: bool = False) -> AssetSequence:
        """Re-fetch the confirmed state.

        The draft is dropped unless ``keep_draft`` is set or a drop is still
        being saved; a kept draft keeps its order and picks up the fresh
        metadata, and a failed reorder stays flagged.

        Raises:
            CmsError: If the request fails or the server state is invalid
        """
        records = await self.client.list_assets(self.collection)
        self.confirmed = AssetSequence.from_records(records)
        if self.draft is not None and (keep_draft or self._reorder_pending):
            self.draft = self.draft.rebased(self.confirmed)
        else:
            self.draft = None
            self.reorder_failed = False
        return self.confirmed

    async def refresh(self) -> bool:
        """Like :meth:`reload`, reporting failures as a notification.

        This is the user's refresh: a failed reorder is abandoned.
        """
        try:
            await self.reload()
        except CmsError as e:
            self.notifier.error(f"Could not load images for {self.collection}", e)
            return False
        return True

    # ------------------------------------------------------------------
    # Upload / delete / primary / metadata
    # ------------------------------------------------------------------

    async def upload(self, files: list[tuple[str, bytes]], category: str | None = None) -> list[Asset]:
        """Upload files to the end of the collection.

        Returns:
            The created assets, or an empty list if the upload was rejected
        """
        placeholders = []
        for name, _ in files:
            placeholders.append(Asset.placeholder(self._next_temp_id, name, category))
            self._next_temp_id -= 1
        self.uploading = self.uploading + tuple(placeholders)

        try:
            records = await self.client.upload_assets(self.collection, files, category=category)
            if len(records) != len(placeholders):
                raise InvariantViolationError(
                    f"Server created {len(records)} image(s) for {len(placeholders)} file(s)"
                )
            created = [p.confirm(record) for p, record in zip(placeholders, records)]
            self._apply(lambda seq: seq.append(created))
        except CmsError as e:
            self.notifier.error(f"Could not upload {len(files)} image(s)", e)
            return []
        finally:
            self.uploading = tuple(a for a in self.uploading if a not in placeholders)

        self.notifier.success(f"{len(created)} image(s) uploaded")
        return created

    async def delete(self, asset_id: int) -> Asset | None:
        """Delete an image.  If it was primary, the new first image becomes primary.

        Returns:
            The removed asset in its ``deleted`` state, or ``None`` on failure
        """
        try:
            asset = self.confirmed.items[self.confirmed.index_of(asset_id)]
            deleted = asset.transition(AssetState.DELETED)
            await self.client.delete_asset(self.collection, asset_id)
            self._apply(lambda seq: seq.remove(asset_id) if asset_id in seq else seq)
        except CmsError as e:
            self.notifier.error("Could not delete image", e)
            return None

        self.notifier.success("Image deleted")
        return deleted

    async def set_primary(self, asset_id: int) -> bool:
        try:
            self.confirmed.index_of(asset_id)
            await self.client.set_primary(self.collection, asset_id)
            self._apply(lambda seq: seq.with_primary(asset_id))
        except CmsError as e:
            self.notifier.error("Could not set primary image", e)
            return False

        self.notifier.success("Primary image updated")
        return True

    async def update_metadata(
        self, asset_id: int, category: str | None = None, alt_text: str | None = None
    ) -> Asset | None:
        """Change an image's category and/or alt text."""
        try:
            self.confirmed.index_of(asset_id)
            record = await self.client.update_asset(
                self.collection, asset_id, category=category, alt_text=alt_text
            )
            updated = Asset.from_dict(record)
            self._apply(lambda seq: seq.replace(updated))
        except CmsError as e:
            self.notifier.error("Could not update image", e)
            return None

        self.notifier.success("Image updated")
        return updated

    # ------------------------------------------------------------------
    # Drag reorder
    # ------------------------------------------------------------------

    def begin_drag(self) -> bool:
        """Open a draft for a drag gesture.

        Refused while a previous drop is still being saved.  After a failed
        save the gesture continues from the draft still on screen.
        """
        if self._reorder_pending:
            self.notifier.info("Please wait for the previous order to finish saving")
            return False
        self.draft = self.visible
        return True

    def drag_over(self, ordered_ids: list[int]) -> bool:
        """Update the draft while dragging."""
        if self.draft is None or self._reorder_pending:
            return False
        try:
            self.draft = self.draft.reordered(ordered_ids)
        except InvariantViolationError as e:
            self.notifier.error("Invalid image order", e)
            return False
        return True

    async def drop(self) -> bool:
        """Persist the draft order in one request."""
        if self.draft is None or self._reorder_pending:
            return False
        return await self._persist_order()

    async def retry_reorder(self) -> bool:
        """Re-send a draft whose persist failed."""
        if not self.reorder_failed or self.draft is None or self._reorder_pending:
            return False
        return await self._persist_order()

    async def _persist_order(self) -> bool:
        draft = self.draft
        self._reorder_pending = True
        try:
            await self.client.reorder(self.collection, draft.ids)
        except CmsError as e:
            self.reorder_failed = True
            self.notifier.error("Could not save the new image order", e)
            return False
        finally:
            self._reorder_pending = False

        # Changes applied while the request was in flight already reached
        # the draft; keep them.
        self.confirmed = self.draft if self.draft is not None else draft
        self.draft = None
        self.reorder_failed = False
        self.notifier.success("Image order saved")
        return True
