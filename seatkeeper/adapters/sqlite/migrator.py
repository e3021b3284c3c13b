"""SQLite schema migrations.

Migration files live in one directory as `NNN_name.sql` and are applied in
filename order. Each file starts with its Up section; anything after a
`-- Down` marker is kept for manual rollback and never executed here.
"""

import logging
import sqlite3
from pathlib import Path

logger = logging.getLogger(__name__)

DOWN_MARKER = "-- Down"


class SQLiteMigrator:
    def __init__(self, db_path: str | Path, migrations_dir: str | Path):
        self.db_path = str(db_path)
        self.migrations_dir = Path(migrations_dir)

    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self.db_path)
        # Readers in worker threads keep going while an issuance holds the write lock
        conn.execute("PRAGMA journal_mode=WAL")
        conn.execute("""
            CREATE TABLE IF NOT EXISTS schema_migrations (
                filename TEXT PRIMARY KEY,
                applied_at TEXT NOT NULL DEFAULT CURRENT_TIMESTAMP
            )
        """)
        return conn

    def _available(self) -> list[Path]:
        return sorted(self.migrations_dir.glob("*.sql"))

    def pending_migrations(self) -> list[str]:
        """Filenames not yet applied to the database, in apply order."""
        conn = self._connect()
        try:
            applied = {row[0] for row in conn.execute("SELECT filename FROM schema_migrations")}
        finally:
            conn.close()
        return [path.name for path in self._available() if path.name not in applied]

    def run_migrations(self) -> list[str]:
        """Apply all pending migrations. Returns the filenames applied."""
        pending = self.pending_migrations()
        if not pending:
            logger.debug("Schema of %s is current", self.db_path)
            return []

        conn = self._connect()
        try:
            for filename in pending:
                logger.info("Applying migration %s to %s", filename, self.db_path)
                self._apply(conn, filename)
        finally:
            conn.close()
        return pending

    def _apply(self, conn: sqlite3.Connection, filename: str) -> None:
        up_script = (self.migrations_dir / filename).read_text().split(DOWN_MARKER, 1)[0]
        try:
            conn.executescript(up_script)
            conn.execute("INSERT INTO schema_migrations (filename) VALUES (?)", (filename,))
            conn.commit()
        except sqlite3.Error as e:
            conn.rollback()
            raise RuntimeError(f"Migration {filename} failed: {e}") from e
