"""Ordered image collections with exactly one primary image.

Each collection (typically one artwork) is an ordered list of assets.  Every
mutating method runs in one transaction that ends by re-densifying positions
and checking the primary designation, so no reader ever observes a
collection with zero or several primaries, or with gaps in its order.
"""

from __future__ import annotations

import logging
import sqlite3
from pathlib import Path

from .database import ContentDatabase
from .errors import InvalidOperationError, NotFoundError, PermutationError
from .media import file_exists, rendition_urls, validate_collection_name

logger = logging.getLogger(__name__)


def _row_to_asset(row: sqlite3.Row) -> dict:
    return {
        "id": row["id"],
        "collection": row["collection"],
        "filename": row["filename"],
        "original_name": row["original_name"],
        "order": row["position"],
        "is_primary": bool(row["is_primary"]),
        "category": row["category"],
        "alt_text": row["alt_text"],
        "width": row["width"],
        "height": row["height"],
        "file_size": row["file_size"],
        "uploaded_at": row["uploaded_at"],
        "rendition_urls": rendition_urls(row["collection"], row["filename"]),
    }


class AssetDB:
    """Persist asset collections."""

    def __init__(self, db: ContentDatabase):
        self.db = db

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def list(self, collection: str) -> list[dict]:
        """Return a collection's assets in display order."""
        validate_collection_name(collection)
        with self.db.reader() as conn:
            rows = conn.execute(
                "SELECT * FROM assets WHERE collection = ? ORDER BY position, id",
                (collection,),
            ).fetchall()
        return [_row_to_asset(row) for row in rows]

    def get(self, collection: str, asset_id: int) -> dict:
        """Return one asset.

        Raises:
            NotFoundError: If the asset is not part of the collection
        """
        with self.db.reader() as conn:
            row = self._fetch(conn, collection, asset_id)
        return _row_to_asset(row)

    @staticmethod
    def _fetch(conn: sqlite3.Connection, collection: str, asset_id: int) -> sqlite3.Row:
        row = conn.execute(
            "SELECT * FROM assets WHERE collection = ? AND id = ?", (collection, asset_id)
        ).fetchone()
        if row is None:
            raise NotFoundError("Image not found")
        return row

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def add(self, collection: str, files: list[dict]) -> list[dict]:
        """Append uploaded files to the end of a collection.

        The first file uploaded into an empty collection becomes primary;
        every other new asset starts as non-primary.

        Args:
            collection: Collection name
            files: Items with ``filename`` and optionally ``original_name``,
                ``category``, ``alt_text``, ``width``, ``height``, ``file_size``

        Returns:
            The created assets

        Raises:
            InvalidOperationError: If a category is not in the registry
        """
        validate_collection_name(collection)
        with self.db.transaction() as conn:
            count = conn.execute(
                "SELECT COUNT(*) FROM assets WHERE collection = ?", (collection,)
            ).fetchone()[0]

            created_ids = []
            for offset, item in enumerate(files):
                category = (item.get("category") or "uncategorized").strip().lower()
                self._require_category(conn, category)
                cursor = conn.execute(
                    """
                    INSERT INTO assets (collection, filename, original_name, position,
                                        is_primary, category, alt_text, width, height, file_size)
                    VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                    """,
                    (
                        collection,
                        item["filename"],
                        item.get("original_name", ""),
                        count + offset,
                        1 if count == 0 and offset == 0 else 0,
                        category,
                        item.get("alt_text", ""),
                        item.get("width", 0),
                        item.get("height", 0),
                        item.get("file_size", 0),
                    ),
                )
                created_ids.append(cursor.lastrowid)

            self._settle(conn, collection)
            created = [_row_to_asset(self._fetch(conn, collection, i)) for i in created_ids]

        logger.info(f"Uploaded {len(created)} image(s) to {collection}")
        return created

    def delete(self, collection: str, asset_id: int) -> dict:
        """Remove an asset, promoting the new first asset if it was primary.

        Returns:
            The deleted asset (so the caller can remove its file)

        Raises:
            NotFoundError: If the asset is not part of the collection
        """
        with self.db.transaction() as conn:
            row = self._fetch(conn, collection, asset_id)
            conn.execute("DELETE FROM assets WHERE id = ?", (asset_id,))
            self._settle(conn, collection)

        logger.info(f"Deleted image {asset_id} from {collection}")
        return _row_to_asset(row)

    def set_primary(self, collection: str, asset_id: int) -> list[dict]:
        """Make one asset the primary and clear the flag on all others.

        Returns:
            The collection after the change

        Raises:
            NotFoundError: If the asset is not part of the collection
        """
        with self.db.transaction() as conn:
            self._fetch(conn, collection, asset_id)
            conn.execute(
                "UPDATE assets SET is_primary = CASE WHEN id = ? THEN 1 ELSE 0 END "
                "WHERE collection = ?",
                (asset_id, collection),
            )
            self._settle(conn, collection)

        logger.info(f"Primary image for {collection} set to {asset_id}")
        return self.list(collection)

    def reorder(self, collection: str, ordered_ids: list[int]) -> list[dict]:
        """Persist a complete new order for a collection.

        Args:
            collection: Collection name
            ordered_ids: Every asset id of the collection, each exactly once

        Returns:
            The collection in its new order

        Raises:
            PermutationError: If ``ordered_ids`` is not a permutation of the
                collection's ids (missing, extra, or repeated ids)
        """
        with self.db.transaction() as conn:
            existing = [
                row["id"]
                for row in conn.execute(
                    "SELECT id FROM assets WHERE collection = ?", (collection,)
                )
            ]
            if len(ordered_ids) != len(existing) or set(ordered_ids) != set(existing):
                missing = sorted(set(existing) - set(ordered_ids))
                unknown = sorted(set(ordered_ids) - set(existing))
                raise PermutationError(
                    "Order must list every image exactly once "
                    f"(missing: {missing}, unknown: {unknown}, "
                    f"received {len(ordered_ids)} of {len(existing)})"
                )

            conn.executemany(
                "UPDATE assets SET position = ? WHERE id = ?",
                [(position, asset_id) for position, asset_id in enumerate(ordered_ids)],
            )
            self._settle(conn, collection)

        logger.info(f"Images reordered for {collection}: {ordered_ids}")
        return self.list(collection)

    def update(
        self,
        collection: str,
        asset_id: int,
        *,
        category: str | None = None,
        alt_text: str | None = None,
    ) -> dict:
        """Update an asset's category and/or alt text.

        Raises:
            NotFoundError: If the asset is not part of the collection
            InvalidOperationError: If the category is not in the registry
        """
        with self.db.transaction() as conn:
            self._fetch(conn, collection, asset_id)
            if category is not None:
                category = category.strip().lower()
                self._require_category(conn, category)
                conn.execute("UPDATE assets SET category = ? WHERE id = ?", (category, asset_id))
            if alt_text is not None:
                conn.execute("UPDATE assets SET alt_text = ? WHERE id = ?", (alt_text, asset_id))
            row = self._fetch(conn, collection, asset_id)

        return _row_to_asset(row)

    def reconcile(self, collection: str, media_dir: Path) -> list[dict]:
        """Drop assets whose files were removed from the media directory.

        Users may delete files by hand; those rows are pruned exactly as if
        they had been deleted through the API, including primary promotion.

        Returns:
            The pruned assets
        """
        assets = self.list(collection)
        stale = [a for a in assets if not file_exists(media_dir, collection, a["filename"])]
        if not stale:
            return []

        with self.db.transaction() as conn:
            conn.executemany("DELETE FROM assets WHERE id = ?", [(a["id"],) for a in stale])
            self._settle(conn, collection)

        logger.warning(f"Pruned {len(stale)} image(s) with missing files from {collection}")
        return stale

    # ------------------------------------------------------------------
    # Invariants
    # ------------------------------------------------------------------

    @staticmethod
    def _require_category(conn: sqlite3.Connection, category: str) -> None:
        exists = conn.execute("SELECT 1 FROM categories WHERE name = ?", (category,)).fetchone()
        if exists is None:
            raise InvalidOperationError(f"Unknown category: {category}")

    @staticmethod
    def _settle(conn: sqlite3.Connection, collection: str) -> None:
        """Re-densify positions and leave exactly one primary.

        If the primary was removed, the first asset in order takes over.  If
        several are flagged, the first flagged one in order wins.
        """
        rows = conn.execute(
            "SELECT id, is_primary FROM assets WHERE collection = ? ORDER BY position, id",
            (collection,),
        ).fetchall()
        if not rows:
            return

        flagged = [row["id"] for row in rows if row["is_primary"]]
        primary_id = flagged[0] if flagged else rows[0]["id"]

        conn.executemany(
            "UPDATE assets SET position = ?, is_primary = ? WHERE id = ?",
            [
                (position, 1 if row["id"] == primary_id else 0, row["id"])
                for position, row in enumerate(rows)
            ],
        )
