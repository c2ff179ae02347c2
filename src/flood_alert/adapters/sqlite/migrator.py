"""
SQLite schema migrator.

Applies the `-- Up` part of each `*.sql` file in the migrations directory
once, in filename order, and records it in `_migrations`.

The web app and both cron jobs migrate on startup, so several processes can
race on a fresh database. Each migration runs in its own BEGIN IMMEDIATE
transaction and the applied set is re-read once the write lock is held; a
process that loses the race skips the file instead of failing.
"""

import logging
import os
import sqlite3
from pathlib import Path

logger = logging.getLogger(__name__)

DEFAULT_MIGRATIONS_DIR = str(Path(__file__).resolve().parents[2] / "migrations")
DOWN_MARKER = "-- Down"


def split_statements(script: str) -> list[str]:
    """Split a SQL script into complete statements, dropping comment-only tails."""
    statements: list[str] = []
    buffer = ""
    for line in script.splitlines(keepends=True):
        buffer += line
        if sqlite3.complete_statement(buffer):
            statements.append(buffer.strip())
            buffer = ""

    leftover = [
        ln for ln in buffer.splitlines() if ln.strip() and not ln.strip().startswith("--")
    ]
    if leftover:
        # Let SQLite report the incomplete statement
        statements.append(buffer.strip())
    return statements


class SQLiteMigrator:
    def __init__(
        self,
        db_path: str,
        migrations_dir: str = DEFAULT_MIGRATIONS_DIR,
        timeout: float = 30.0,
    ):
        self.db_path = db_path
        self.migrations_dir = migrations_dir
        self.timeout = timeout

    def _get_connection(self) -> sqlite3.Connection:
        # Autocommit; transactions are opened explicitly per migration
        conn = sqlite3.connect(self.db_path, timeout=self.timeout, isolation_level=None)
        conn.execute("PRAGMA journal_mode = WAL;")
        conn.execute("PRAGMA foreign_keys = ON;")
        return conn

    def _ensure_migration_table(self, conn: sqlite3.Connection) -> None:
        conn.execute("""
            CREATE TABLE IF NOT EXISTS _migrations (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                filename TEXT UNIQUE NOT NULL,
                applied_at DATETIME DEFAULT CURRENT_TIMESTAMP
            );
        """)

    def _is_applied(self, conn: sqlite3.Connection, filename: str) -> bool:
        row = conn.execute("SELECT 1 FROM _migrations WHERE filename = ?", (filename,)).fetchone()
        return row is not None

    def _migration_files(self) -> list[str]:
        return sorted(f for f in os.listdir(self.migrations_dir) if f.endswith(".sql"))

    def run_migrations(self) -> list[str]:
        """Apply all pending migrations; returns the filenames this call applied."""
        conn = self._get_connection()
        try:
            self._ensure_migration_table(conn)

            newly_applied = []
            for filename in self._migration_files():
                if self._is_applied(conn, filename):
                    continue
                if self._apply_migration(conn, filename):
                    newly_applied.append(filename)

            if newly_applied:
                logger.info("Applied %d migration(s): %s", len(newly_applied), ", ".join(newly_applied))
            else:
                logger.debug("Database schema is up to date")
            return newly_applied
        finally:
            conn.close()

    def _read_up_script(self, filename: str) -> str:
        path = os.path.join(self.migrations_dir, filename)
        with open(path) as f:
            content = f.read()
        return content.split(DOWN_MARKER, 1)[0]

    def _apply_migration(self, conn: sqlite3.Connection, filename: str) -> bool:
        """
        Apply one migration under the database write lock.

        Returns False if another process recorded it first.
        """
        statements = split_statements(self._read_up_script(filename))
        try:
            conn.execute("BEGIN IMMEDIATE")
        except sqlite3.Error as e:
            raise RuntimeError(f"Migration {filename} failed: {e}") from e

        try:
            if self._is_applied(conn, filename):
                conn.execute("ROLLBACK")
                logger.info("Migration %s was applied by another process", filename)
                return False

            logger.info("Applying migration: %s", filename)
            for statement in statements:
                conn.execute(statement)
            conn.execute("INSERT INTO _migrations (filename) VALUES (?)", (filename,))
            conn.execute("COMMIT")
            return True
        except sqlite3.Error as e:
            if conn.in_transaction:
                conn.execute("ROLLBACK")
            raise RuntimeError(f"Migration {filename} failed: {e}") from e
