"""Category registry as seen by the editor."""

from __future__ import annotations

import logging

from gallerycms.core.values import display_name

from .assets import AssetCollection
from .client import CmsClient
from .errors import CmsError, ConflictError, ValidationError
from .notifications import Notifier

logger = logging.getLogger(__name__)

UNCATEGORIZED = "uncategorized"


def normalize_name(name: str) -> str:
    """Lowercase and collapse whitespace; category identity is case-insensitive.

    Raises:
        ValidationError: If nothing is left
    """
    normalized = " ".join((name or "").split()).lower()
    if not normalized:
        raise ValidationError("Category name cannot be empty")
    return normalized


class TaxonomyManager:
    """Add, rename and remove categories.

    The server rewrites tagged images in the same transaction as the
    registry change.  Afterwards every attached :class:`AssetCollection` is
    reloaded so no image is shown with a category that no longer exists.
    """

    def __init__(self, client: CmsClient, notifier: Notifier):
        self.client = client
        self.notifier = notifier
        self.names: tuple[str, ...] = ()
        self._collections: list[AssetCollection] = []

    def __contains__(self, name: str) -> bool:
        return " ".join((name or "").split()).lower() in self.names

    def attach(self, collection: AssetCollection) -> None:
        if collection not in self._collections:
            self._collections.append(collection)

    def detach(self, collection: AssetCollection) -> None:
        if collection in self._collections:
            self._collections.remove(collection)

    def choices(self) -> list[tuple[str, str]]:
        """Return ``(name, display name)`` pairs for a category picker."""
        return [(name, display_name(name)) for name in self.names]

    async def load(self) -> bool:
        try:
            self.names = tuple(await self.client.list_categories())
        except CmsError as e:
            self.notifier.error("Could not load categories", e)
            return False
        return True

    async def add(self, name: str) -> bool:
        """Create a category.  Duplicates are rejected, never merged."""
        try:
            name = normalize_name(name)
            if name in self.names:
                raise ConflictError(f"Category '{name}' already exists")
            self.names = tuple(await self.client.create_category(name))
        except CmsError as e:
            self.notifier.error("Could not add category", e)
            return False

        self.notifier.success(f"Category '{display_name(name)}' added")
        return True

    async def rename(self, old_name: str, new_name: str) -> bool:
        """Rename a category; every image tagged with it follows."""
        try:
            old_name = normalize_name(old_name)
            new_name = normalize_name(new_name)
            if old_name == UNCATEGORIZED:
                raise ValidationError("The 'uncategorized' category cannot be renamed")
            if new_name != old_name and new_name in self.names:
                raise ConflictError(f"Category '{new_name}' already exists")
            self.names = tuple(await self.client.rename_category(old_name, new_name))
        except CmsError as e:
            self.notifier.error(f"Could not rename category '{old_name}'", e)
            return False

        await self._reload_collections(f"Category renamed to '{display_name(new_name)}'")
        return True

    async def remove(self, name: str) -> bool:
        """Delete a category; its images move to ``uncategorized``."""
        try:
            name = normalize_name(name)
            if name == UNCATEGORIZED:
                raise ValidationError("The 'uncategorized' category cannot be removed")
            self.names = tuple(await self.client.delete_category(name))
        except CmsError as e:
            self.notifier.error(f"Could not remove category '{name}'", e)
            return False

        await self._reload_collections(f"Category '{display_name(name)}' removed")
        return True

    async def _reload_collections(self, done: str) -> None:
        """Refresh attached collections after a committed change and report it.

        Drafts are kept so a failed reorder stays on screen.  A collection
        that cannot be reloaded turns the success into an info notification;
        the change itself is already saved.
        """
        stale = []
        for collection in self._collections:
            try:
                await collection.reload(keep_draft=True)
            except CmsError as e:
                logger.warning(f"Collection {collection.collection} not reloaded: {e}")
                stale.append(collection.collection)

        if stale:
            self.notifier.info(f"{done}, but images in {', '.join(stale)} could not be refreshed")
            return
        if self._collections:
            logger.debug(f"Reloaded {len(self._collections)} collection(s) after category change")
        self.notifier.success(done)
