"""In-memory stand-in for the Supabase client used by behavioral tests.

Implements the slice of the PostgREST query builder the services use:
select/insert/upsert/update/delete, eq/contains filters, order, limit.
"""

import copy
import uuid
from datetime import datetime, timedelta, timezone
from typing import Any, Optional


PRIMARY_KEYS = {
    "listings": ("id",),
    "conversations": ("id",),
    "messages": ("id",),
    "saved_listings": ("user_id", "listing_id"),
    "profiles": ("user_id",),
}

GENERATED_IDS = {"listings", "messages"}


class FakeResponse:
    def __init__(self, data: list[dict]):
        self.data = data


class FakeQuery:
    def __init__(self, db: "FakeSupabase", table: str):
        self.db = db
        self.table_name = table
        self.operation = "select"
        self.columns: Optional[list[str]] = None
        self.payload: Any = None
        self.on_conflict: Optional[str] = None
        self.filters: list = []
        self.orders: list[tuple[str, bool]] = []
        self.row_limit: Optional[int] = None

    # operations
    def select(self, columns: str = "*"):
        self.operation = "select"
        if columns.strip() != "*":
            self.columns = [c.strip() for c in columns.split(",")]
        return self

    def insert(self, data):
        self.operation = "insert"
        self.payload = data
        return self

    def upsert(self, data, on_conflict: Optional[str] = None, **kwargs):
        self.operation = "upsert"
        self.payload = data
        self.on_conflict = on_conflict
        return self

    def update(self, data):
        self.operation = "update"
        self.payload = data
        return self

    def delete(self):
        self.operation = "delete"
        return self

    # filters
    def eq(self, column: str, value: Any):
        self.filters.append(lambda row: row.get(column) == value)
        return self

    def contains(self, column: str, values: list):
        self.filters.append(lambda row: all(v in (row.get(column) or []) for v in values))
        return self

    def order(self, column: str, desc: bool = False, **kwargs):
        self.orders.append((column, desc))
        return self

    def limit(self, count: int):
        self.row_limit = count
        return self

    def _matches(self, row: dict) -> bool:
        return all(check(row) for check in self.filters)

    def execute(self) -> FakeResponse:
        self.db.calls.append((self.table_name, self.operation))
        if self.table_name in self.db.failing_tables:
            raise Exception("connection refused")

        rows = self.db.tables.setdefault(self.table_name, [])
        handler = getattr(self, f"_execute_{self.operation}")
        return FakeResponse(copy.deepcopy(handler(rows)))

    def _execute_select(self, rows: list[dict]) -> list[dict]:
        result = [row for row in rows if self._matches(row)]
        # Apply secondary keys first so the primary order wins
        for column, desc in reversed(self.orders):
            result.sort(key=lambda r: (r.get(column) is None, r.get(column) or ""), reverse=desc)
        if self.row_limit is not None:
            result = result[:self.row_limit]
        if self.columns:
            result = [{c: row.get(c) for c in self.columns} for row in result]
        return result

    def _key(self, row: dict, key_columns: tuple) -> tuple:
        return tuple(row.get(c) for c in key_columns)

    def _execute_insert(self, rows: list[dict]) -> list[dict]:
        new_rows = self.payload if isinstance(self.payload, list) else [self.payload]
        key_columns = PRIMARY_KEYS.get(self.table_name, ("id",))
        inserted = []
        for new_row in new_rows:
            row = self.db.with_defaults(self.table_name, dict(new_row))
            key = self._key(row, key_columns)
            if any(self._key(existing, key_columns) == key for existing in rows):
                raise Exception(f'duplicate key value violates unique constraint "{self.table_name}_pkey"')
            rows.append(row)
            inserted.append(row)
        return inserted

    def _execute_upsert(self, rows: list[dict]) -> list[dict]:
        new_rows = self.payload if isinstance(self.payload, list) else [self.payload]
        key_columns = tuple(c.strip() for c in self.on_conflict.split(",")) if self.on_conflict \
            else PRIMARY_KEYS.get(self.table_name, ("id",))
        written = []
        for new_row in new_rows:
            key = self._key(new_row, key_columns)
            existing = next((r for r in rows if self._key(r, key_columns) == key), None)
            if existing is not None:
                existing.update(new_row)
                written.append(existing)
            else:
                row = self.db.with_defaults(self.table_name, dict(new_row))
                rows.append(row)
                written.append(row)
        return written

    def _execute_update(self, rows: list[dict]) -> list[dict]:
        updated = []
        for row in rows:
            if self._matches(row):
                row.update(self.payload)
                updated.append(row)
        return updated

    def _execute_delete(self, rows: list[dict]) -> list[dict]:
        deleted = [row for row in rows if self._matches(row)]
        rows[:] = [row for row in rows if not self._matches(row)]
        return deleted


class FakeBucket:
    def __init__(self, storage: "FakeStorage", name: str):
        self.storage = storage
        self.name = name

    def upload(self, path: str, content: bytes, file_options: Optional[dict] = None):
        self.storage.objects[(self.name, path)] = content
        return {"path": path}

    def get_public_url(self, path: str) -> str:
        return f"https://test.supabase.co/storage/v1/object/public/{self.name}/{path}"


class FakeStorage:
    def __init__(self):
        self.objects: dict[tuple[str, str], bytes] = {}

    def from_(self, bucket: str) -> FakeBucket:
        return FakeBucket(self, bucket)


class FakeSupabase:
    """Fake Supabase client backed by dicts."""

    def __init__(self):
        self.tables: dict[str, list[dict]] = {}
        self.calls: list[tuple[str, str]] = []
        self.failing_tables: set[str] = set()
        self.storage = FakeStorage()
        self._clock = datetime(2024, 12, 9, 12, 0, 0, tzinfo=timezone.utc)

    def table(self, name: str) -> FakeQuery:
        return FakeQuery(self, name)

    def tick(self) -> str:
        """Database now(); strictly increasing so ordering is deterministic."""
        self._clock += timedelta(seconds=1)
        return self._clock.isoformat()

    def with_defaults(self, table: str, row: dict) -> dict:
        if table in GENERATED_IDS and not row.get("id"):
            row["id"] = uuid.uuid4().hex
        if not row.get("created_at"):
            row["created_at"] = self.tick()
        return row

    def rows(self, table: str) -> list[dict]:
        return self.tables.get(table, [])

    def seed(self, table: str, rows: list[dict]) -> None:
        self.tables.setdefault(table, []).extend(copy.deepcopy(rows))


class FakeChannel:
    """Realtime channel double; emit() plays a postgres change."""

    def __init__(self, topic: str):
        self.topic = topic
        self.callbacks = []
        self.filter: Optional[str] = None
        self.subscribed = False

    def on_postgres_changes(self, event, callback, table="*", schema="public", filter=None):
        self.callbacks.append(callback)
        self.filter = filter
        return self

    async def subscribe(self, callback=None):
        self.subscribed = True
        return self

    def emit(self, payload: Optional[dict] = None) -> None:
        for callback in self.callbacks:
            callback(payload or {})


class FakeRealtimeClient:
    def __init__(self):
        self.channels: list[FakeChannel] = []
        self.removed: list[FakeChannel] = []

    def channel(self, topic: str) -> FakeChannel:
        channel = FakeChannel(topic)
        self.channels.append(channel)
        return channel

    async def remove_channel(self, channel: FakeChannel) -> None:
        channel.subscribed = False
        self.removed.append(channel)
