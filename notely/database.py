"""SQLite-backed storage for users and notes."""

from __future__ import annotations

import sqlite3
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import astuple, dataclass

_CREATE_NOTE = """
INSERT INTO notes (id, created_at, updated_at, note, user_id)
VALUES (?, ?, ?, ?, ?)
"""

_GET_NOTE = """
SELECT id, created_at, updated_at, note, user_id FROM notes WHERE id = ?
"""

_GET_NOTES_FOR_USER = """
SELECT id, created_at, updated_at, note, user_id FROM notes WHERE user_id = ?
"""

_CREATE_USER = """
INSERT INTO users (id, created_at, updated_at, name, api_key)
VALUES (?, ?, ?, ?, ?)
"""

_GET_USER = """
SELECT id, created_at, updated_at, name, api_key FROM users WHERE api_key = ?
"""


class RecordNotFoundError(LookupError):
    """Raised when a query that expects one row finds none."""


@dataclass(frozen=True)
class NoteRecord:
    """A note row as stored, timestamps kept as text."""

    id: str
    created_at: str
    updated_at: str
    note: str
    user_id: str


@dataclass(frozen=True)
class UserRecord:
    """A user row as stored, timestamps kept as text."""

    id: str
    created_at: str
    updated_at: str
    name: str
    api_key: str


def connect(url: str) -> sqlite3.Connection:
    """Open a SQLite connection from a path, ':memory:' or a 'file:' URI."""
    if "://" in url and not url.startswith("file:"):
        raise ValueError(f"unsupported database URL: {url}")
    return sqlite3.connect(url, uri=url.startswith("file:"), check_same_thread=False)


class Queries:
    """The queries the application runs against its database."""

    def __init__(self, conn: sqlite3.Connection) -> None:
        self._conn = conn
        self._in_transaction = False

    @contextmanager
    def transaction(self) -> Iterator[Queries]:
        """Run queries in one transaction, committed on success, rolled back on error."""
        if self._in_transaction:
            yield self
            return
        tx = Queries(self._conn)
        tx._in_transaction = True
        try:
            yield tx
        except BaseException:
            self._conn.rollback()
            raise
        else:
            self._conn.commit()

    def _execute(self, sql: str, params: tuple) -> None:
        try:
            self._conn.execute(sql, params)
        except BaseException:
            if not self._in_transaction:
                self._conn.rollback()
            raise
        if not self._in_transaction:
            self._conn.commit()

    def create_note(self, note: NoteRecord) -> None:
        """Insert a note."""
        self._execute(_CREATE_NOTE, astuple(note))

    def get_note(self, note_id: str) -> NoteRecord:
        """Return the note with the given id."""
        row = self._conn.execute(_GET_NOTE, (note_id,)).fetchone()
        if row is None:
            raise RecordNotFoundError(f"no note with id {note_id!r}")
        return NoteRecord(*row)

    def get_notes_for_user(self, user_id: str) -> list[NoteRecord]:
        """Return every note belonging to the given user."""
        cursor = self._conn.execute(_GET_NOTES_FOR_USER, (user_id,))
        try:
            return [NoteRecord(*row) for row in cursor]
        finally:
            cursor.close()

    def create_user(self, user: UserRecord) -> None:
        """Insert a user."""
        self._execute(_CREATE_USER, astuple(user))

    def get_user(self, api_key: str) -> UserRecord:
        """Return the user owning the given API key."""
        row = self._conn.execute(_GET_USER, (api_key,)).fetchone()
        if row is None:
            raise RecordNotFoundError("no user with that api key")
        return UserRecord(*row)