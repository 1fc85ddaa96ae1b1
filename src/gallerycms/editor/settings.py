"""Client-side working copy of a page's settings."""

from __future__ import annotations

import logging

from gallerycms.core.values import normalize_boolean

from .client import CmsClient
from .errors import InvariantViolationError
from .models import Setting

logger = logging.getLogger(__name__)


class SettingsStore:
    """Hold the live (possibly edited) settings of one page.

    Value edits are applied locally and only reach the server through
    :meth:`save_all`.  Reloading a single section keeps local edits of the
    settings that still exist, so a group add/remove never throws away
    unsaved work elsewhere in the section.
    """

    def __init__(self, client: CmsClient, page: str):
        self.client = client
        self.page = page
        self._settings: dict[int, Setting] = {}

    def __len__(self) -> int:
        return len(self._settings)

    def __contains__(self, setting_id: int) -> bool:
        return setting_id in self._settings

    def all(self) -> list[Setting]:
        return list(self._settings.values())

    def sections(self) -> list[str]:
        """Return section names in the order the server listed them."""
        return list(dict.fromkeys(s.section for s in self._settings.values()))

    def section(self, section: str) -> list[Setting]:
        return [s for s in self._settings.values() if s.section == section]

    def get(self, setting_id: int) -> Setting:
        try:
            return self._settings[setting_id]
        except KeyError:
            raise InvariantViolationError(f"Unknown setting {setting_id}") from None

    def find(self, section: str, key: str) -> Setting | None:
        for setting in self._settings.values():
            if setting.section == section and setting.key == key:
                return setting
        return None

    def values(self) -> dict[int, str]:
        """Return ``setting id -> live value``."""
        return {setting_id: s.value for setting_id, s in self._settings.items()}

    async def load(self) -> list[Setting]:
        """Replace the working copy with the server's settings."""
        records = await self.client.list_settings(self.page)
        self._settings = {record["id"]: Setting.from_dict(record) for record in records}
        logger.debug(f"Loaded {len(self._settings)} settings for {self.page}")
        return self.all()

    async def refresh_section(self, section: str) -> list[Setting]:
        """Reload one section, keeping local values of surviving settings."""
        records = await self.client.list_settings(self.page, section=section)
        fresh = {}
        for record in records:
            setting = Setting.from_dict(record)
            local = self._settings.get(setting.id)
            fresh[setting.id] = setting if local is None else setting.with_value(local.value)

        # Rebuild in server order: other sections first as they were, this one
        # reinserted where it used to be.
        rebuilt: dict[int, Setting] = {}
        inserted = False
        for setting_id, setting in self._settings.items():
            if setting.section == section:
                if not inserted:
                    rebuilt.update(fresh)
                    inserted = True
                continue
            rebuilt[setting_id] = setting
        if not inserted:
            rebuilt.update(fresh)

        self._settings = rebuilt
        return self.section(section)

    def set_value(self, setting_id: int, value: str | bool) -> Setting:
        """Apply a local edit.  Boolean settings are kept in ``"1"``/``"0"`` form."""
        setting = self.get(setting_id)
        if setting.type == "boolean":
            value = normalize_boolean(value)
        updated = setting.with_value("" if value is None else str(value))
        self._settings[setting_id] = updated
        return updated

    async def save_all(self) -> list[Setting]:
        """Send every live setting in one atomic batch.

        Server-normalized values are merged back unless the setting was
        edited again while the request was in flight.

        Returns:
            The settings as the server stored them
        """
        sent = self.values()
        records = await self.client.batch_update(list(sent.items()))

        saved = []
        for record in records:
            setting = Setting.from_dict(record)
            saved.append(setting)
            local = self._settings.get(setting.id)
            if local is not None and local.value == sent.get(setting.id):
                self._settings[setting.id] = local.with_value(setting.value)
        return saved
