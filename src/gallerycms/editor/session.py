"""One editing session for one page.

:class:`PageEditor` wires the editing core together: the settings working
copy, change tracking, group add/remove, the category registry and any
image collections the page shows.

Usage Example
-------------
    async with CmsClient() as client:
        editor = PageEditor(client, "contact")
        await editor.open()

        faq = editor.section("faq")
        await editor.groups.add_group("faq", "faq")
        editor.edit(faq.other[0].id, "0")
        await editor.save()
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable

from .assets import AssetCollection
from .client import CmsClient
from .errors import CmsError
from .groups import GroupLifecycle, ParsedSection, parse_section
from .models import Setting
from .notifications import Notifier
from .settings import SettingsStore
from .taxonomy import TaxonomyManager
from .tracker import ChangeTracker

logger = logging.getLogger(__name__)


class PageEditor:
    """Facade over the editing components for one page."""

    def __init__(
        self,
        client: CmsClient,
        page: str,
        notifier: Notifier | None = None,
        warmup_seconds: float | None = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.client = client
        self.page = page
        self.notifier = notifier or Notifier()
        self.store = SettingsStore(client, page)
        self.tracker = ChangeTracker(self.store, self.notifier, warmup_seconds, clock)
        self.groups = GroupLifecycle(client, self.store, self.notifier, self.tracker)
        self.taxonomy = TaxonomyManager(client, self.notifier)
        self.collections: dict[str, AssetCollection] = {}

    async def open(self) -> bool:
        """Load settings and categories, then take the baseline."""
        try:
            await self.store.load()
        except CmsError as e:
            self.notifier.error(f"Could not load the {self.page} page", e)
            return False

        await self.taxonomy.load()
        self.tracker.capture()
        logger.info(f"Opened {self.page} with {len(self.store)} setting(s)")
        return True

    def sections(self) -> dict[str, ParsedSection]:
        return {name: self.section(name) for name in self.store.sections()}

    def section(self, name: str) -> ParsedSection:
        return parse_section(self.store.section(name))

    def edit(self, setting_id: int, value: str | bool) -> Setting:
        """Apply a value edit locally; it is sent with the next save."""
        return self.tracker.record_edit(setting_id, value)

    @property
    def is_dirty(self) -> bool:
        return self.tracker.is_dirty()

    async def save(self) -> bool:
        return await self.tracker.save()

    async def discard(self) -> bool:
        return await self.tracker.discard()

    def allow_navigation(self, confirm: Callable[[], bool]) -> bool:
        return self.tracker.allow_navigation(confirm)

    async def collection(self, name: str) -> AssetCollection:
        """Return the named image collection, loading it on first use."""
        if name not in self.collections:
            collection = AssetCollection(self.client, name, self.notifier)
            self.collections[name] = collection
            self.taxonomy.attach(collection)
            await collection.refresh()
        return self.collections[name]
