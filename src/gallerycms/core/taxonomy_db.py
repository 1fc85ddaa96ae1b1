"""Category registry for tagging images.

Names are stored lowercase and compared case-insensitively.  ``uncategorized``
always exists: it cannot be renamed or deleted, and it receives the images
of any deleted category.
"""

from __future__ import annotations

import logging
import sqlite3

from .database import ContentDatabase
from .errors import ConflictError, InvalidOperationError, NotFoundError

logger = logging.getLogger(__name__)

UNCATEGORIZED = "uncategorized"
MAX_NAME_LENGTH = 100


def normalize_category_name(name: str) -> str:
    """Case-fold and trim a category name, rejecting empty or oversized names.

    Raises:
        InvalidOperationError: If the name is empty or too long
    """
    normalized = " ".join((name or "").split()).lower()
    if not normalized:
        raise InvalidOperationError("Category name cannot be empty")
    if len(normalized) > MAX_NAME_LENGTH:
        raise InvalidOperationError(
            f"Category name is too long ({len(normalized)} characters). "
            f"Maximum is {MAX_NAME_LENGTH} characters."
        )
    return normalized


class TaxonomyDB:
    """Create, rename, and delete categories.

    Rename and delete rewrite the referencing assets in the same transaction
    as the registry change, so an asset never points at a missing category.
    """

    def __init__(self, db: ContentDatabase):
        self.db = db

    def list(self) -> list[str]:
        """Return every category name in alphabetical order."""
        with self.db.reader() as conn:
            return self._names(conn)

    @staticmethod
    def _names(conn: sqlite3.Connection) -> list[str]:
        return [row["name"] for row in conn.execute("SELECT name FROM categories ORDER BY name")]

    @staticmethod
    def _exists(conn: sqlite3.Connection, name: str) -> bool:
        return conn.execute("SELECT 1 FROM categories WHERE name = ?", (name,)).fetchone() is not None

    def usage(self) -> dict[str, int]:
        """Count how many assets reference each category."""
        with self.db.reader() as conn:
            counts = {name: 0 for name in self._names(conn)}
            for row in conn.execute("SELECT category, COUNT(*) AS n FROM assets GROUP BY category"):
                counts[row["category"]] = row["n"]
        return counts

    def create(self, name: str) -> list[str]:
        """Add a category.

        Returns:
            The registry after the change

        Raises:
            ConflictError: If the name exists (case-insensitively)
        """
        name = normalize_category_name(name)
        with self.db.transaction() as conn:
            if self._exists(conn, name):
                raise ConflictError(f"Category '{name}' already exists")
            conn.execute("INSERT INTO categories (name) VALUES (?)", (name,))
            names = self._names(conn)

        logger.info(f"Created category '{name}'")
        return names

    def rename(self, old_name: str, new_name: str) -> list[str]:
        """Rename a category and relabel every asset that uses it.

        Returns:
            The registry after the change

        Raises:
            NotFoundError: If ``old_name`` does not exist
            ConflictError: If ``new_name`` already exists
            InvalidOperationError: If ``old_name`` is ``uncategorized``
        """
        old_name = normalize_category_name(old_name)
        new_name = normalize_category_name(new_name)
        if old_name == UNCATEGORIZED:
            raise InvalidOperationError("The 'uncategorized' category cannot be renamed")

        with self.db.transaction() as conn:
            if not self._exists(conn, old_name):
                raise NotFoundError(f"Category '{old_name}' not found")
            if old_name == new_name:
                return self._names(conn)
            if self._exists(conn, new_name):
                raise ConflictError(f"Category '{new_name}' already exists")

            conn.execute("INSERT INTO categories (name) VALUES (?)", (new_name,))
            relabelled = conn.execute(
                "UPDATE assets SET category = ? WHERE category = ?", (new_name, old_name)
            ).rowcount
            conn.execute("DELETE FROM categories WHERE name = ?", (old_name,))
            names = self._names(conn)

        logger.info(f"Renamed category '{old_name}' to '{new_name}' ({relabelled} image(s))")
        return names

    def delete(self, name: str) -> list[str]:
        """Delete a category, moving its assets to ``uncategorized``.

        Returns:
            The registry after the change

        Raises:
            NotFoundError: If the category does not exist
            InvalidOperationError: If the category is ``uncategorized``
        """
        name = normalize_category_name(name)
        if name == UNCATEGORIZED:
            raise InvalidOperationError("The 'uncategorized' category cannot be deleted")

        with self.db.transaction() as conn:
            if not self._exists(conn, name):
                raise NotFoundError(f"Category '{name}' not found")
            reassigned = conn.execute(
                "UPDATE assets SET category = ? WHERE category = ?", (UNCATEGORIZED, name)
            ).rowcount
            conn.execute("DELETE FROM categories WHERE name = ?", (name,))
            names = self._names(conn)

        logger.info(f"Deleted category '{name}' ({reassigned} image(s) moved to uncategorized)")
        return names
