# notely

notely provides the pieces of a small JSON HTTP service that stores
users and their notes. Each user gets a randomly generated API key when
created, and that key authenticates every later request for the user's
data. The package holds Flask request handlers, SQLite-backed storage,
the API models and the API-key check.

## What the package does not do

notely has no command to run and no ready-made server or application
object. It does not register routes, read configuration from the
environment, or serve an index page. It also does not create the
database tables. To serve the API, create a Flask application yourself
and attach the handlers to it, as shown below.

## Modules

### `notely.auth`

`get_api_key(headers)` takes a mapping of request headers, such as
Flask's `request.headers` or a plain `dict`. It returns the key from a
header of the form

    Authorization: ApiKey placeholder

The header name is matched case-insensitively. If the value is a list,
the first entry is used. The function raises:

- `NoAuthHeaderIncludedError` when there is no `Authorization` header,
  or when the header is empty;
- `MalformedAuthHeaderError` when the value does not start with
  `ApiKey` followed by a space and a key.

Both errors are subclasses of `AuthError`.

### `notely.database`

`connect(url)` opens a SQLite connection. The URL may be a file path,
`":memory:"`, or a `file:` URI. Any other URL containing `://` raises
`ValueError`.

`Queries(conn)` runs the application's queries on that connection:

- `create_user(UserRecord)` inserts a user.
- `get_user(api_key)` returns the user that owns an API key.
- `create_note(NoteRecord)` inserts a note.
- `get_note(note_id)` returns one note.
- `get_notes_for_user(user_id)` returns a list of a user's notes.

Lookups that find no row raise `RecordNotFoundError`, which is a
`LookupError`. Each insert is committed on its own.

`with queries.transaction() as tx:` groups several calls into one
transaction. It commits when the block ends normally and rolls back if
the block raises.

The queries expect these tables to exist already:

- `users(id, created_at, updated_at, name, api_key)`
- `notes(id, created_at, updated_at, note, user_id)`

`UserRecord` and `NoteRecord` are frozen dataclasses for the stored
rows. Their timestamps are kept as text.

### `notely.models`

`User` and `Note` are the objects the API returns. Their timestamps are
parsed into timezone-aware `datetime` values.

- `user_from_record(record)` and `note_from_record(record)` convert a
  stored record. They raise `ValueError` if a timestamp is not valid
  RFC 3339.
- `notes_from_records(records)` converts a sequence of records and
  fails on the first bad one.
- `to_dict()` on `User` or `Note` gives the JSON shape. Timestamps are
  written back in RFC 3339, with `Z` for UTC.

A user in JSON:

    {"id": "…", "created_at": "2024-01-01T00:00:00Z",
     "updated_at": "2024-01-01T00:00:00Z", "name": "…", "api_key": "…"}

A note in JSON:

    {"id": "…", "created_at": "2024-01-01T00:00:00Z",
     "updated_at": "2024-01-01T00:00:00Z", "note": "…", "user_id": "…"}

### `notely.responses`

`respond_with_json(code, payload)` returns a Flask `Response` with the
payload serialised as compact JSON. A payload that cannot be serialised
gives an empty `500` response.

`respond_with_error(code, msg, log_err=None)` logs the cause, and also
logs any status above 499. It answers with `{"error": msg}`.

### `notely.handlers`

- `readiness()` answers `200` with `{"status": "ok"}`.
- `generate_api_key()` returns the hex SHA-256 digest of 32 random
  bytes.

`ApiConfig(db)` binds the data handlers to a `Queries` object. The
handlers read Flask's `request`, so they must run inside a request:

- `users_create()` reads `{"name": ...}`, creates the user with a new
  API key, and answers `201` with the user.
- `require_auth(handler)` wraps a handler that takes a `UserRecord`. It
  answers `401` when the API key is missing or malformed, and `404`
  when no user owns the key.
- `users_get(user)` answers `200` with the authenticated user.
- `notes_get(user)` answers `200` with a list of the user's notes.
- `notes_create(user)` reads `{"note": ...}` and answers `201` with the
  new note.

A request body that cannot be decoded answers `500` with
`{"error": "Couldn't decode parameters"}`.

## Wiring the handlers into Flask

```python
import sqlite3

from flask import Flask

from notely.database import Queries, connect
from notely.handlers import ApiConfig, readiness

conn = connect(":memory:")
conn.executescript(
    "CREATE TABLE users (id TEXT PRIMARY KEY, created_at TEXT, updated_at TEXT,"
    " name TEXT, api_key TEXT UNIQUE);"
    "CREATE TABLE notes (id TEXT PRIMARY KEY, created_at TEXT, updated_at TEXT,"
    " note TEXT, user_id TEXT);"
)
cfg = ApiConfig(Queries(conn))

app = Flask(__name__)
app.add_url_rule("/v1/healthz", "healthz", readiness, methods=["GET"])
app.add_url_rule("/v1/users", "users_create", cfg.users_create, methods=["POST"])
app.add_url_rule("/v1/users", "users_get", cfg.require_auth(cfg.users_get), methods=["GET"])
app.add_url_rule("/v1/notes", "notes_get", cfg.require_auth(cfg.notes_get), methods=["GET"])
app.add_url_rule(
    "/v1/notes", "notes_create", cfg.require_auth(cfg.notes_create), methods=["POST"]
)
```

## Tests

    pip install -e ".[test]"
    pytest