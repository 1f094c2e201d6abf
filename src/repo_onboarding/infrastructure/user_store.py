"""SQLite-backed user store.

Schema:
  users  — one row per GitHub identity; ``github_id`` is the upsert key.

The connection is opened lazily through :class:`SingleFlight`, so a burst of
first requests shares one connection attempt and a failed attempt is
retried by the next caller.
"""

from __future__ import annotations

import asyncio
import logging
import sqlite3

from repo_onboarding.domain.entities import UserRecord
from repo_onboarding.infrastructure.single_flight import SingleFlight

logger = logging.getLogger(__name__)

_SCHEMA = """
CREATE TABLE IF NOT EXISTS users (
    github_id   TEXT PRIMARY KEY,
    name        TEXT NOT NULL,
    email       TEXT NOT NULL,
    image       TEXT DEFAULT ''
);
"""

DEFAULT_NAME = "GitHub User"


class SQLiteUserStore:
    """Stores signed-in users in a local SQLite database file."""

    def __init__(self, db_path: str) -> None:
        self._db_path = db_path
        self._conn = SingleFlight(self._connect)
        self._lock = asyncio.Lock()

    async def _connect(self) -> sqlite3.Connection:
        def _open() -> sqlite3.Connection:
            conn = sqlite3.connect(self._db_path, check_same_thread=False)
            conn.row_factory = sqlite3.Row
            conn.executescript(_SCHEMA)
            conn.commit()
            return conn

        try:
            conn = await asyncio.to_thread(_open)
        except sqlite3.Error:
            logger.exception("Error connecting to user database at %s", self._db_path)
            raise
        logger.info("Connected to user database at %s", self._db_path)
        return conn

    async def upsert(
        self,
        github_id: str,
        name: str | None = None,
        email: str | None = None,
        image: str | None = None,
    ) -> tuple[UserRecord, bool]:
        conn = await self._conn.get()
        async with self._lock:
            return await asyncio.to_thread(self._upsert, conn, github_id, name, email, image)

    @staticmethod
    def _upsert(
        conn: sqlite3.Connection,
        github_id: str,
        name: str | None,
        email: str | None,
        image: str | None,
    ) -> tuple[UserRecord, bool]:
        row = conn.execute("SELECT * FROM users WHERE github_id=?", (github_id,)).fetchone()
        if row is not None:
            record = UserRecord(
                github_id=github_id,
                name=name or row["name"],
                email=email or row["email"],
                image=image or row["image"] or "",
            )
            conn.execute(
                "UPDATE users SET name=?, email=?, image=? WHERE github_id=?",
                (record.name, record.email, record.image, github_id),
            )
            conn.commit()
            return record, False

        record = UserRecord(
            github_id=github_id,
            name=name or DEFAULT_NAME,
            email=email or f"{github_id}@github.com",
            image=image or "",
        )
        conn.execute(
            "INSERT INTO users (github_id, name, email, image) VALUES (?, ?, ?, ?)",
            (record.github_id, record.name, record.email, record.image),
        )
        conn.commit()
        return record, True

    async def close(self) -> None:
        conn = self._conn.peek()
        if conn is not None:
            conn.close()
        self._conn.reset()
