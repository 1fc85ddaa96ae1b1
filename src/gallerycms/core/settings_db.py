"""Flat key/value page settings backed by SQLite."""

from __future__ import annotations

import logging
import sqlite3

from .database import ContentDatabase
from .errors import BatchUpdateError, InvalidOperationError
from .group_keys import GROUP_FIELDS, group_key, match_group_key, next_group_index
from .values import normalize_boolean

logger = logging.getLogger(__name__)

SETTING_TYPES = ("text", "richtext", "plaintext", "boolean", "number")

# Canonical section order per page.  Sections not listed follow in name order.
SECTION_ORDERS: dict[str, list[str]] = {
    "home": ["hero", "stats", "featured", "about", "contact_cta"],
    "gallery": ["header", "controls", "empty_state", "cta"],
    "about": ["hero", "story", "philosophy", "process", "cta"],
    "contact": ["hero", "form", "info", "faq", "cta"],
    "global": ["site", "contact", "social", "images"],
}


def _row_to_setting(row: sqlite3.Row) -> dict:
    return {
        "id": row["id"],
        "page": row["page"],
        "section": row["section"],
        "key": row["key"],
        "value": row["value"],
        "type": row["type"],
        "description": row["description"],
        "sort_order": row["sort_order"],
        "is_active": bool(row["is_active"]),
    }


class SettingsDB:
    """Read and write page settings.

    Every public method runs in its own transaction, so a batch update or a
    group add/remove is applied entirely or not at all.
    """

    def __init__(self, db: ContentDatabase):
        self.db = db

    def list(self, page: str, section: str | None = None) -> list[dict]:
        """Return the active settings of a page, optionally one section.

        Args:
            page: Page key (``home``, ``about``, ``global``...)
            section: Optional section key

        Returns:
            Settings ordered by section, then ``sort_order``, then id
        """
        query = "SELECT * FROM settings WHERE page = ? AND is_active = 1"
        params: list = [page]
        if section is not None:
            query += " AND section = ?"
            params.append(section)
        query += " ORDER BY section, sort_order, id"

        with self.db.reader() as conn:
            rows = conn.execute(query, params).fetchall()
        return [_row_to_setting(row) for row in rows]

    def grouped_by_section(self, page: str) -> dict[str, list[dict]]:
        """Return a page's settings keyed by section in canonical order."""
        by_section: dict[str, list[dict]] = {}
        for setting in self.list(page):
            by_section.setdefault(setting["section"], []).append(setting)

        known = SECTION_ORDERS.get(page, [])
        ordered = [name for name in known if name in by_section]
        ordered += sorted(name for name in by_section if name not in known)
        return {name: by_section[name] for name in ordered}

    def pages_overview(self) -> list[dict]:
        """Summarise every page with its setting and section counts."""
        with self.db.reader() as conn:
            rows = conn.execute(
                """
                SELECT page, COUNT(*) AS settings_count,
                       COUNT(DISTINCT section) AS sections_count
                FROM settings
                WHERE is_active = 1
                GROUP BY page
                ORDER BY page
                """
            ).fetchall()
        return [
            {
                "page": row["page"],
                "settings_count": row["settings_count"],
                "sections_count": row["sections_count"],
                "sections": self._section_names(row["page"]),
            }
            for row in rows
        ]

    def _section_names(self, page: str) -> list[str]:
        return list(self.grouped_by_section(page))

    def count(self) -> int:
        """Return the total number of stored settings."""
        with self.db.reader() as conn:
            return conn.execute("SELECT COUNT(*) FROM settings").fetchone()[0]

    def create(
        self,
        page: str,
        section: str,
        key: str,
        value: str = "",
        setting_type: str = "text",
        description: str = "",
        sort_order: int | None = None,
    ) -> dict:
        """Insert one setting.

        Args:
            page: Page key
            section: Section key
            key: Setting key, unique within the page/section
            value: Initial string value
            setting_type: One of :data:`SETTING_TYPES`
            description: Help text shown to operators
            sort_order: Position in the section (default: after the last one)

        Returns:
            The created setting

        Raises:
            InvalidOperationError: If the type is unknown
            sqlite3.IntegrityError: If the key already exists in the section
        """
        if setting_type not in SETTING_TYPES:
            raise InvalidOperationError(f"Unknown setting type: {setting_type}")

        with self.db.transaction() as conn:
            return self._insert(
                conn, page, section, key, value, setting_type, description, sort_order
            )

    def _insert(
        self,
        conn: sqlite3.Connection,
        page: str,
        section: str,
        key: str,
        value: str,
        setting_type: str,
        description: str,
        sort_order: int | None,
    ) -> dict:
        if sort_order is None:
            sort_order = self._max_sort_order(conn, page, section) + 1
        if setting_type == "boolean":
            value = normalize_boolean(value)

        cursor = conn.execute(
            """
            INSERT INTO settings (page, section, key, value, type, description, sort_order)
            VALUES (?, ?, ?, ?, ?, ?, ?)
            """,
            (page, section, key, value, setting_type, description, sort_order),
        )
        row = conn.execute("SELECT * FROM settings WHERE id = ?", (cursor.lastrowid,)).fetchone()
        return _row_to_setting(row)

    @staticmethod
    def _max_sort_order(conn: sqlite3.Connection, page: str, section: str) -> int:
        result = conn.execute(
            "SELECT MAX(sort_order) FROM settings WHERE page = ? AND section = ?",
            (page, section),
        ).fetchone()[0]
        return result or 0

    def batch_update(self, updates: list[dict]) -> list[dict]:
        """Apply value updates to many settings atomically.

        Every referenced id must exist and every value must be a string (or
        ``None``, stored as ``""``).  If any item is invalid nothing is
        written and the per-item errors are raised together.  Boolean
        settings are stored in their ``"1"``/``"0"`` form.

        Args:
            updates: Items with ``id`` and ``value``

        Returns:
            The updated settings in request order

        Raises:
            BatchUpdateError: If any item is rejected
        """
        with self.db.transaction() as conn:
            errors: list[dict] = []
            resolved: list[tuple[int, str]] = []

            for item in updates:
                setting_id = item.get("id")
                value = item.get("value")
                row = conn.execute(
                    "SELECT type FROM settings WHERE id = ?", (setting_id,)
                ).fetchone()

                if row is None:
                    errors.append({"id": setting_id, "message": "Setting not found"})
                    continue
                if value is None:
                    value = ""
                if not isinstance(value, str):
                    errors.append({"id": setting_id, "message": "Value must be a string"})
                    continue
                if row["type"] == "boolean":
                    value = normalize_boolean(value)
                resolved.append((setting_id, value))

            if errors:
                logger.warning(f"Rejected settings batch: {errors}")
                raise BatchUpdateError(errors)

            conn.executemany(
                "UPDATE settings SET value = ?, updated_at = CURRENT_TIMESTAMP WHERE id = ?",
                [(value, setting_id) for setting_id, value in resolved],
            )

            updated = []
            for setting_id, _ in resolved:
                row = conn.execute("SELECT * FROM settings WHERE id = ?", (setting_id,)).fetchone()
                updated.append(_row_to_setting(row))

        logger.info(f"Updated {len(updated)} setting(s)")
        return updated

    def add_group_member(self, page: str, section: str, kind: str) -> list[dict]:
        """Create the minimal field set for a new member of a group kind.

        The new index is one past the highest existing index for the kind in
        the section; gaps below that maximum are never refilled.

        Args:
            page: Page key
            section: Section key
            kind: Group kind (``faq``, ``card``...)

        Returns:
            The created settings

        Raises:
            InvalidOperationError: If the kind is unknown
        """
        if kind not in GROUP_FIELDS:
            raise InvalidOperationError(f"Unknown group kind: {kind}")

        with self.db.transaction() as conn:
            keys = [
                row["key"]
                for row in conn.execute(
                    "SELECT key FROM settings WHERE page = ? AND section = ?", (page, section)
                )
            ]
            index = next_group_index(keys, kind)
            sort_order = self._max_sort_order(conn, page, section)

            label = "FAQ" if kind == "faq" else kind.capitalize()
            created = []
            for offset, (field, setting_type) in enumerate(GROUP_FIELDS[kind], start=1):
                created.append(
                    self._insert(
                        conn,
                        page,
                        section,
                        group_key(kind, index, field),
                        "",
                        setting_type,
                        f"{label} {index} {field}",
                        sort_order + offset,
                    )
                )

        logger.info(f"Added {kind}{index} to {page}/{section}")
        return created

    def remove_group_member(self, page: str, section: str, kind: str, index: int) -> int:
        """Delete every setting of one group member.

        Remaining members keep their indices.  Removing an absent member is
        a no-op.

        Returns:
            Number of settings deleted
        """
        with self.db.transaction() as conn:
            rows = conn.execute(
                "SELECT id, key FROM settings WHERE page = ? AND section = ?", (page, section)
            ).fetchall()
            doomed = []
            for row in rows:
                match = match_group_key(row["key"])
                if match is not None and match.kind == kind and match.index == index:
                    doomed.append(row["id"])

            conn.executemany("DELETE FROM settings WHERE id = ?", [(i,) for i in doomed])

        if doomed:
            logger.info(f"Removed {kind}{index} ({len(doomed)} settings) from {page}/{section}")
        else:
            logger.debug(f"{kind}{index} not present in {page}/{section}")
        return len(doomed)
