"""
SQLite Database Adapter.

Implements the subscriber and tide repository ports using SQLite.

Every conditional state change is a single SQL statement (upsert with a
WHERE clause, UPDATE ... RETURNING) so concurrent requests cannot
interleave a read and a write. The tide window replacement runs its
DELETE and INSERTs inside one transaction.

Datetimes:
- users.created_at / updated_at: UTC ISO strings
- tides.prediction_time: station-local "YYYY-MM-DD HH:MM:SS" strings,
  compared lexically
"""

from __future__ import annotations

import sqlite3
from datetime import UTC, datetime
from typing import Any

from flood_alert.components.subscribers.component import generate_token, new_subscriber_id
from flood_alert.components.subscribers.models import (
    Subscriber,
    SubscriberConflictError,
    SubscriberNotFoundError,
)
from flood_alert.components.tides.models import TidePrediction, TideType
from flood_alert.core.ports.db import StoreError

# -----------------------------------------------------------------------------
# Helper functions
# -----------------------------------------------------------------------------


def dict_factory(cursor: sqlite3.Cursor, row: tuple[Any, ...]) -> dict[str, Any]:
    """Convert SQLite row to dictionary."""
    return {col[0]: row[idx] for idx, col in enumerate(cursor.description)}


def parse_dt(s: str | None) -> datetime | None:
    """Parse ISO datetime string."""
    return datetime.fromisoformat(s) if s else None


def format_local(dt: datetime) -> str:
    """Station-local datetime as stored in tides.prediction_time."""
    return dt.isoformat(sep=" ")


# -----------------------------------------------------------------------------
# Base SQLite Repository
# -----------------------------------------------------------------------------


class SQLiteRepoBase:
    """Base class for SQLite repositories."""

    def __init__(self, db_path: str, timeout: float = 5.0):
        self.db_path = db_path
        self.timeout = timeout

    def _get_conn(self) -> sqlite3.Connection:
        """Open a connection; busy writers wait up to `timeout` seconds."""
        try:
            conn = sqlite3.connect(self.db_path, timeout=self.timeout)
        except sqlite3.Error as e:
            raise StoreError("connect", str(e)) from e
        conn.row_factory = dict_factory
        conn.execute("PRAGMA foreign_keys = ON;")
        return conn


# -----------------------------------------------------------------------------
# Subscriber Repository
# -----------------------------------------------------------------------------

_USER_COLUMNS = "id, email, verification_token, is_verified, is_subscribed, created_at, updated_at"


class SQLiteSubscriberRepo(SQLiteRepoBase):
    """SQLite implementation of SubscriberRepoPort."""

    def upsert_pending_signup(self, email: str) -> Subscriber:
        now = datetime.now(UTC).isoformat()
        conn = self._get_conn()
        try:
            rows = conn.execute(
                f"""
                INSERT INTO users (
                    id, email, verification_token, is_verified, is_subscribed,
                    created_at, updated_at
                ) VALUES (?, ?, ?, 0, 0, ?, ?)
                ON CONFLICT(email) DO UPDATE SET
                    verification_token = excluded.verification_token,
                    is_verified = 0,
                    is_subscribed = 0,
                    updated_at = excluded.updated_at
                WHERE NOT (users.is_verified = 1 AND users.is_subscribed = 1)
                RETURNING {_USER_COLUMNS}
                """,
                (new_subscriber_id(), email, generate_token(), now, now),
            ).fetchall()
            conn.commit()
        except sqlite3.Error as e:
            raise StoreError("upsert_pending_signup", str(e)) from e
        finally:
            conn.close()

        if not rows:
            raise SubscriberConflictError(email)
        return self._map_row(rows[0])

    def verify(self, token: str) -> Subscriber:
        now = datetime.now(UTC).isoformat()
        conn = self._get_conn()
        try:
            rows = conn.execute(
                f"""
                UPDATE users
                SET is_verified = 1, is_subscribed = 1, updated_at = ?
                WHERE verification_token = ? AND is_verified = 0
                RETURNING {_USER_COLUMNS}
                """,
                (now, token),
            ).fetchall()
            conn.commit()
        except sqlite3.Error as e:
            raise StoreError("verify", str(e)) from e
        finally:
            conn.close()

        if not rows:
            raise SubscriberNotFoundError()
        return self._map_row(rows[0])

    def unsubscribe(self, subscriber_id: str) -> bool:
        now = datetime.now(UTC).isoformat()
        conn = self._get_conn()
        try:
            cursor = conn.execute(
                """
                UPDATE users SET is_subscribed = 0, updated_at = ?
                WHERE id = ? AND is_subscribed = 1
                """,
                (now, subscriber_id),
            )
            conn.commit()
            return cursor.rowcount > 0
        except sqlite3.Error as e:
            raise StoreError("unsubscribe", str(e)) from e
        finally:
            conn.close()

    def list_active_recipients(self) -> list[Subscriber]:
        conn = self._get_conn()
        try:
            rows = conn.execute(
                f"""
                SELECT {_USER_COLUMNS} FROM users
                WHERE is_verified = 1 AND is_subscribed = 1
                ORDER BY id ASC
                """
            ).fetchall()
            return [self._map_row(r) for r in rows]
        except sqlite3.Error as e:
            raise StoreError("list_active_recipients", str(e)) from e
        finally:
            conn.close()

    def get_by_id(self, subscriber_id: str) -> Subscriber | None:
        return self._get_one("id", subscriber_id)

    def get_by_email(self, email: str) -> Subscriber | None:
        return self._get_one("email", email)

    def _get_one(self, column: str, value: str) -> Subscriber | None:
        conn = self._get_conn()
        try:
            row = conn.execute(
                f"SELECT {_USER_COLUMNS} FROM users WHERE {column} = ?", (value,)
            ).fetchone()
            return self._map_row(row) if row else None
        except sqlite3.Error as e:
            raise StoreError(f"get_by_{column}", str(e)) from e
        finally:
            conn.close()

    def _map_row(self, row: dict[str, Any]) -> Subscriber:
        return Subscriber(
            id=row["id"],
            email=row["email"],
            verification_token=row["verification_token"],
            is_verified=bool(row["is_verified"]),
            is_subscribed=bool(row["is_subscribed"]),
            created_at=parse_dt(row["created_at"]) or datetime.now(UTC),
            updated_at=parse_dt(row["updated_at"]) or datetime.now(UTC),
        )


# -----------------------------------------------------------------------------
# Tide Repository
# -----------------------------------------------------------------------------


class SQLiteTideRepo(SQLiteRepoBase):
    """SQLite implementation of TideRepoPort."""

    def replace_window(
        self,
        start: datetime,
        end: datetime,
        predictions: list[TidePrediction],
    ) -> int:
        now = datetime.now(UTC).isoformat()
        params = [
            (format_local(p.time), p.height_ft, p.tide_type.value, now) for p in predictions
        ]

        conn = self._get_conn()
        try:
            conn.execute(
                "DELETE FROM tides WHERE prediction_time >= ? AND prediction_time <= ?",
                (format_local(start), format_local(end)),
            )
            conn.executemany(
                """
                INSERT INTO tides (prediction_time, height_ft, tide_type, last_updated)
                VALUES (?, ?, ?, ?)
                """,
                params,
            )
            conn.commit()
            return len(params)
        except sqlite3.Error as e:
            conn.rollback()
            raise StoreError("replace_window", str(e)) from e
        finally:
            conn.close()

    def list_between(
        self,
        start: datetime,
        end: datetime,
        min_height_ft: float | None = None,
    ) -> list[TidePrediction]:
        query = """
            SELECT prediction_time, height_ft, tide_type FROM tides
            WHERE prediction_time >= ? AND prediction_time <= ?
        """
        params: list[Any] = [format_local(start), format_local(end)]
        if min_height_ft is not None:
            query += " AND height_ft >= ?"
            params.append(min_height_ft)
        query += " ORDER BY prediction_time ASC"

        conn = self._get_conn()
        try:
            rows = conn.execute(query, params).fetchall()
            return [self._map_row(r) for r in rows]
        except sqlite3.Error as e:
            raise StoreError("list_between", str(e)) from e
        finally:
            conn.close()

    def _map_row(self, row: dict[str, Any]) -> TidePrediction:
        return TidePrediction(
            time=datetime.fromisoformat(row["prediction_time"]),
            height_ft=float(row["height_ft"]),
            tide_type=TideType(row["tide_type"]),
        )
