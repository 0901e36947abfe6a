# maydiv/app/seo/storage.py
"""
Storage gateway for the `seo` table.

A SeoStorage owns one database alias (a local sqlite file). It must be
initialized once at startup: that opens the file, creating it if absent,
makes sure the table exists and applies the additive schema upgrades.
Every other operation refuses to run before that.
"""
import logging
from collections import namedtuple
from pathlib import Path

from django.db import OperationalError, connections, transaction

from .models import SeoRecord

logger = logging.getLogger(__name__)


class StorageNotInitialized(RuntimeError):
    pass


CREATE_TABLE_SQL = """
CREATE TABLE IF NOT EXISTS seo (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    pagePath TEXT UNIQUE NOT NULL,
    pageTitle TEXT NOT NULL,
    metaTitle TEXT NOT NULL,
    metaDescription TEXT NOT NULL,
    content TEXT,
    keywords TEXT,
    canonicalUrl TEXT,
    ogTitle TEXT,
    ogDescription TEXT,
    ogImage TEXT,
    twitterTitle TEXT,
    twitterDescription TEXT,
    twitterImage TEXT,
    robots TEXT DEFAULT 'index, follow',
    seoScore INTEGER DEFAULT 0,
    isPublished BOOLEAN DEFAULT 0,
    createdAt DATETIME DEFAULT CURRENT_TIMESTAMP,
    updatedAt DATETIME DEFAULT CURRENT_TIMESTAMP
)
"""

SchemaUpgrade = namedtuple('SchemaUpgrade', ['name', 'column', 'sql'])

# Applied in order on every startup. Each one adds a column that older
# database files may lack; an existing column means "already applied".
SCHEMA_UPGRADES = [
    SchemaUpgrade('add-content-column', 'content', 'ALTER TABLE seo ADD COLUMN content TEXT'),
]


class SeoStorage:

    def __init__(self, alias='default', upgrades=None):
        self.alias = alias
        self.upgrades = list(SCHEMA_UPGRADES if upgrades is None else upgrades)
        self._initialized = False

    def __repr__(self):
        state = 'ready' if self.is_initialized else 'uninitialized'
        return f"<SeoStorage alias={self.alias!r} {state}>"

    @property
    def is_initialized(self):
        return self._initialized

    def initialize(self):
        """
        Open the backing file and ensure the schema.

        Open and DDL failures propagate: the caller is expected to abort
        startup. Returns self so it can be chained at construction time.
        """
        connection = connections[self.alias]
        try:
            self._ensure_parent_dir(connection)
            connection.ensure_connection()
            with connection.cursor() as cursor:
                cursor.execute(CREATE_TABLE_SQL)
            for upgrade in self.upgrades:
                self._apply_upgrade(connection, upgrade)
        except Exception as e:
            logger.error(f"[storage] Database initialization error ({self.alias}): {e}")
            raise

        self._initialized = True
        logger.info(f"[storage] Database initialized successfully ({connection.settings_dict['NAME']})")
        return self

    def handle(self):
        """The live connection handle of the calling thread."""
        self._require_initialized()
        return connections[self.alias]

    def records(self):
        """A SeoRecord queryset bound to this store."""
        self._require_initialized()
        return SeoRecord.objects.using(self.alias)

    def close(self):
        """ Closes the calling thread's connection and marks the store uninitialized. """
        if self._initialized:
            connections[self.alias].close()
            self._initialized = False
            logger.info(f"[storage] Connection closed ({self.alias}).")

    # --- helpers ---

    def _require_initialized(self):
        if not self._initialized:
            raise StorageNotInitialized(
                'Database not initialized. Call initialize() first.'
            )

    @staticmethod
    def _ensure_parent_dir(connection):
        if connection.vendor != 'sqlite' or connection.is_in_memory_db():
            return
        Path(connection.settings_dict['NAME']).parent.mkdir(parents=True, exist_ok=True)

    def _apply_upgrade(self, connection, upgrade):
        with connection.cursor() as cursor:
            columns = {
                col.name for col in connection.introspection.get_table_description(cursor, 'seo')
            }
        if upgrade.column in columns:
            logger.info(f"[storage] Schema upgrade '{upgrade.name}' already applied.")
            return

        try:
            # Savepoint so a rejected ALTER does not poison an outer transaction.
            with transaction.atomic(using=self.alias):
                with connection.cursor() as cursor:
                    cursor.execute(upgrade.sql)
        except OperationalError as e:
            if 'duplicate column' not in str(e).lower():
                raise
            logger.info(f"[storage] Schema upgrade '{upgrade.name}' already applied.")
            return
        logger.info(f"[storage] Schema upgrade '{upgrade.name}' applied.")
