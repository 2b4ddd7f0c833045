"""Request handlers for the users, notes and readiness endpoints."""

from __future__ import annotations

import hashlib
import json
import secrets
import sqlite3
import uuid
from collections.abc import Callable
from datetime import datetime, timezone

from flask import Response, request

from notely.auth import AuthError, get_api_key
from notely.database import NoteRecord, Queries, RecordNotFoundError, UserRecord
from notely.models import note_from_record, notes_from_records, user_from_record
from notely.responses import respond_with_error, respond_with_json

_DB_ERRORS = (sqlite3.Error, RecordNotFoundError)
_JSON_WHITESPACE = " \t\n\r"
_DECODER = json.JSONDecoder()

AuthedHandler = Callable[[UserRecord], Response]


def generate_api_key() -> str:
    """Return the hex SHA-256 digest of 32 random bytes."""
    return hashlib.sha256(secrets.token_bytes(32)).hexdigest()


def readiness() -> Response:
    """Report that the service is up."""
    return respond_with_json(200, {"status": "ok"})


def _now_rfc3339() -> str:
    return datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")


def _decode_string_field(name: str) -> str:
    """Read one string field from the first JSON value in the request body.

    Keys match the field name case-insensitively, the last match winning;
    a missing or null field is the empty string.
    """
    text = request.get_data(as_text=True).lstrip(_JSON_WHITESPACE)
    value, _ = _DECODER.raw_decode(text)
    if value is None:
        return ""
    if not isinstance(value, dict):
        raise ValueError("request body is not a JSON object")
    result = ""
    for key, item in value.items():
        if key.lower() != name.lower() or item is None:
            continue
        if not isinstance(item, str):
            raise ValueError(f"field {key!r} is not a string")
        result = item
    return result


class ApiConfig:
    """Handlers bound to the database they work against."""

    def __init__(self, db: Queries | None) -> None:
        self.db = db

    def require_auth(self, handler: AuthedHandler) -> Callable[[], Response]:
        """Wrap a handler so it receives the user owning the request's API key."""

        def authed() -> Response:
            try:
                api_key = get_api_key(request.headers)
            except AuthError as exc:
                return respond_with_error(401, "Couldn't find api key", exc)
            try:
                user = self.db.get_user(api_key)
            except _DB_ERRORS as exc:
                return respond_with_error(404, "Couldn't get user", exc)
            return handler(user)

        return authed

    def users_create(self) -> Response:
        """Create a user from {"name": ...} and return it with its API key."""
        try:
            name = _decode_string_field("name")
        except ValueError as exc:
            return respond_with_error(500, "Couldn't decode parameters", exc)

        try:
            api_key = generate_api_key()
        except OSError as exc:
            return respond_with_error(500, "Couldn't gen apikey", exc)

        now = _now_rfc3339()
        try:
            self.db.create_user(
                UserRecord(
                    id=str(uuid.uuid4()),
                    created_at=now,
                    updated_at=now,
                    name=name,
                    api_key=api_key,
                )
            )
        except sqlite3.Error as exc:
            return respond_with_error(500, "Couldn't create user", exc)

        try:
            record = self.db.get_user(api_key)
        except _DB_ERRORS as exc:
            return respond_with_error(500, "Couldn't get user", exc)

        try:
            user = user_from_record(record)
        except ValueError as exc:
            return respond_with_error(500, "Couldn't convert user", exc)
        return respond_with_json(201, user.to_dict())

    def users_get(self, user: UserRecord) -> Response:
        """Return the authenticated user."""
        try:
            converted = user_from_record(user)
        except ValueError as exc:
            return respond_with_error(500, "Couldn't convert user", exc)
        return respond_with_json(200, converted.to_dict())

    def notes_get(self, user: UserRecord) -> Response:
        """Return every note of the authenticated user."""
        try:
            records = self.db.get_notes_for_user(user.id)
        except sqlite3.Error as exc:
            return respond_with_error(500, "Couldn't get posts for user", exc)

        try:
            notes = notes_from_records(records)
        except ValueError as exc:
            return respond_with_error(500, "Couldn't convert posts", exc)
        return respond_with_json(200, [note.to_dict() for note in notes])

    def notes_create(self, user: UserRecord) -> Response:
        """Create a note from {"note": ...} for the authenticated user."""
        try:
            text = _decode_string_field("note")
        except ValueError as exc:
            return respond_with_error(500, "Couldn't decode parameters", exc)

        note_id = str(uuid.uuid4())
        now = _now_rfc3339()
        try:
            self.db.create_note(
                NoteRecord(
                    id=note_id,
                    created_at=now,
                    updated_at=now,
                    note=text,
                    user_id=user.id,
                )
            )
        except sqlite3.Error as exc:
            return respond_with_error(500, "Couldn't create note", exc)

        try:
            record = self.db.get_note(note_id)
        except _DB_ERRORS as exc:
            return respond_with_error(404, "Couldn't get note", exc)

        try:
            note = note_from_record(record)
        except ValueError as exc:
            return respond_with_error(500, "Couldn't convert note", exc)
        return respond_with_json(201, note.to_dict())