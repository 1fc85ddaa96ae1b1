"""SQLite database holding settings, assets, and the category registry.

One file backs the whole CMS.  Keeping assets and categories in the same
database is what lets a category rename or delete rewrite every referencing
asset in the same transaction as the registry change.
"""

import logging
import sqlite3
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path

logger = logging.getLogger(__name__)

SCHEMA = """
CREATE TABLE IF NOT EXISTS settings (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    page TEXT NOT NULL,
    section TEXT NOT NULL,
    key TEXT NOT NULL,
    value TEXT NOT NULL DEFAULT '',
    type TEXT NOT NULL DEFAULT 'text',
    description TEXT NOT NULL DEFAULT '',
    sort_order INTEGER NOT NULL DEFAULT 0,
    is_active INTEGER NOT NULL DEFAULT 1,
    updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
    UNIQUE (page, section, key)
);

CREATE INDEX IF NOT EXISTS idx_settings_page_section
ON settings(page, section);

CREATE TABLE IF NOT EXISTS assets (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    collection TEXT NOT NULL,
    filename TEXT NOT NULL,
    original_name TEXT NOT NULL DEFAULT '',
    position INTEGER NOT NULL,
    is_primary INTEGER NOT NULL DEFAULT 0,
    category TEXT NOT NULL DEFAULT 'uncategorized',
    alt_text TEXT NOT NULL DEFAULT '',
    width INTEGER NOT NULL DEFAULT 0,
    height INTEGER NOT NULL DEFAULT 0,
    file_size INTEGER NOT NULL DEFAULT 0,
    uploaded_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
);

CREATE INDEX IF NOT EXISTS idx_assets_collection_position
ON assets(collection, position);

CREATE INDEX IF NOT EXISTS idx_assets_category
ON assets(category);

CREATE TABLE IF NOT EXISTS categories (
    name TEXT PRIMARY KEY,
    created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
);
"""


class ContentDatabase:
    """Own the SQLite file and hand out transactional connections.

    The table-specific classes (:class:`~gallerycms.core.settings_db.SettingsDB`,
    :class:`~gallerycms.core.asset_db.AssetDB`,
    :class:`~gallerycms.core.taxonomy_db.TaxonomyDB`) share one instance.
    """

    def __init__(self, db_path: Path, default_categories: list[str] | None = None):
        """Initialize the database, creating the schema if needed.

        Args:
            db_path: Path to SQLite database file
            default_categories: Registry to create when no category exists yet
        """
        self.db_path = Path(db_path)
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        self._initialize_db(default_categories or [])
        logger.info(f"Initialized content database at {self.db_path}")

    def _initialize_db(self, default_categories: list[str]) -> None:
        """Create database schema and the starting category registry."""
        with self.transaction() as conn:
            # executescript() would commit the open transaction, so run
            # the statements one by one.
            for statement in SCHEMA.split(";"):
                if statement.strip():
                    conn.execute(statement)

            count = conn.execute("SELECT COUNT(*) FROM categories").fetchone()[0]
            if count == 0:
                names = {name.strip().lower() for name in default_categories if name.strip()}
                names.add("uncategorized")
                conn.executemany(
                    "INSERT INTO categories (name) VALUES (?)",
                    [(name,) for name in sorted(names)],
                )
                logger.info(f"Created category registry: {sorted(names)}")

    @contextmanager
    def transaction(self) -> Iterator[sqlite3.Connection]:
        """Yield a connection inside one write transaction.

        ``BEGIN IMMEDIATE`` takes the write lock up front so the reads an
        operation performs before writing cannot go stale underneath it.
        The transaction commits when the block exits normally and rolls back
        on any exception, which is then re-raised.
        """
        conn = sqlite3.connect(self.db_path, isolation_level=None)
        conn.row_factory = sqlite3.Row
        try:
            conn.execute("BEGIN IMMEDIATE")
            try:
                yield conn
            except BaseException:
                conn.execute("ROLLBACK")
                raise
            conn.execute("COMMIT")
        finally:
            conn.close()

    @contextmanager
    def reader(self) -> Iterator[sqlite3.Connection]:
        """Yield a connection for read-only queries."""
        conn = sqlite3.connect(self.db_path)
        conn.row_factory = sqlite3.Row
        try:
            yield conn
        finally:
            conn.close()
