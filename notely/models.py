"""API-facing user and note models with parsed timestamps."""

from __future__ import annotations

import re
from collections.abc import Iterable
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

from notely.database import NoteRecord, UserRecord

_RFC3339 = re.compile(
    r"^(\d{4})-(\d{2})-(\d{2})T(\d{2}):(\d{2}):(\d{2})(?:\.(\d+))?(Z|[+-]\d{2}:\d{2})$"
)


def _parse_rfc3339(text: str) -> datetime:
    match = _RFC3339.match(text)
    if match is None:
        raise ValueError(f"invalid RFC 3339 timestamp: {text!r}")
    year, month, day, hour, minute, second, fraction, offset = match.groups()
    micros = int((fraction or "0")[:6].ljust(6, "0"))
    if offset == "Z":
        tz = timezone.utc
    else:
        sign = -1 if offset[0] == "-" else 1
        hours, minutes = int(offset[1:3]), int(offset[4:6])
        if hours > 23 or minutes > 59:
            raise ValueError(f"invalid time zone offset in {text!r}")
        delta = timedelta(hours=hours, minutes=minutes)
        tz = timezone.utc if not delta else timezone(sign * delta)
    return datetime(
        int(year), int(month), int(day), int(hour), int(minute), int(second), micros, tzinfo=tz
    )


def _format_rfc3339(value: datetime) -> str:
    text = value.strftime("%Y-%m-%dT%H:%M:%S")
    if value.microsecond:
        text += "." + f"{value.microsecond:06d}".rstrip("0")
    offset = value.utcoffset()
    if not offset:
        return text + "Z"
    total = int(offset.total_seconds())
    sign = "-" if total < 0 else "+"
    hours, rem = divmod(abs(total), 3600)
    return f"{text}{sign}{hours:02d}:{rem // 60:02d}"


@dataclass(frozen=True)
class User:
    """A user as returned by the API."""

    id: str
    created_at: datetime
    updated_at: datetime
    name: str
    api_key: str

    def to_dict(self) -> dict[str, str]:
        """Return the JSON-ready representation."""
        return {
            "id": self.id,
            "created_at": _format_rfc3339(self.created_at),
            "updated_at": _format_rfc3339(self.updated_at),
            "name": self.name,
            "api_key": self.api_key,
        }


@dataclass(frozen=True)
class Note:
    """A note as returned by the API."""

    id: str
    created_at: datetime
    updated_at: datetime
    note: str
    user_id: str

    def to_dict(self) -> dict[str, str]:
        """Return the JSON-ready representation."""
        return {
            "id": self.id,
            "created_at": _format_rfc3339(self.created_at),
            "updated_at": _format_rfc3339(self.updated_at),
            "note": self.note,
            "user_id": self.user_id,
        }


def user_from_record(record: UserRecord) -> User:
    """Build a User from a stored row; raises ValueError on a bad timestamp."""
    return User(
        id=record.id,
        created_at=_parse_rfc3339(record.created_at),
        updated_at=_parse_rfc3339(record.updated_at),
        name=record.name,
        api_key=record.api_key,
    )


def note_from_record(record: NoteRecord) -> Note:
    """Build a Note from a stored row; raises ValueError on a bad timestamp."""
    return Note(
        id=record.id,
        created_at=_parse_rfc3339(record.created_at),
        updated_at=_parse_rfc3339(record.updated_at),
        note=record.note,
        user_id=record.user_id,
    )


def notes_from_records(records: Iterable[NoteRecord]) -> list[Note]:
    """Convert every stored note, failing on the first bad one."""
    return [note_from_record(record) for record in records]