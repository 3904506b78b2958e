"""In-memory stand-in for the supabase-py Client, covering the query surface the services use."""
import copy
import itertools
import uuid
from datetime import datetime, timedelta, timezone
from types import SimpleNamespace

_EPOCH = datetime(2024, 1, 1, tzinfo=timezone.utc)


class FakeResponse:
    def __init__(self, data):
        self.data = data


class FakeQuery:
    def __init__(self, db, table):
        self.db = db
        self.table = table
        self.action = "select"
        self.payload = None
        self.filters = []
        self.order_by = None
        self.limit_n = None
        self.offset_n = 0
        self.single_mode = None

    def select(self, *columns):
        self.action = "select"
        return self

    def insert(self, rows):
        self.action = "insert"
        self.payload = rows
        return self

    def update(self, values):
        self.action = "update"
        self.payload = values
        return self

    def delete(self):
        self.action = "delete"
        return self

    def eq(self, column, value):
        self.filters.append(lambda r: r.get(column) == value)
        return self

    def neq(self, column, value):
        self.filters.append(lambda r: r.get(column) != value)
        return self

    def in_(self, column, values):
        values = list(values)
        self.filters.append(lambda r: r.get(column) in values)
        return self

    def order(self, column, desc=False):
        self.order_by = (column, desc)
        return self

    def limit(self, n):
        self.limit_n = n
        return self

    def offset(self, n):
        self.offset_n = n
        return self

    def single(self):
        self.single_mode = "single"
        return self

    def maybe_single(self):
        self.single_mode = "maybe"
        return self

    def _matching(self):
        rows = self.db.tables.setdefault(self.table, [])
        return [r for r in rows if all(f(r) for f in self.filters)]

    def execute(self):
        self.db.calls.append((self.action, self.table))
        if (self.action, self.table) in self.db.fail_on:
            raise Exception(f"simulated failure: {self.action} on {self.table}")

        rows = self.db.tables.setdefault(self.table, [])
        if self.action == "insert":
            payload = self.payload if isinstance(self.payload, list) else [self.payload]
            inserted = []
            for row in payload:
                row = dict(row)
                row.setdefault("id", str(uuid.uuid4()))
                row.setdefault("created_at", self.db.next_timestamp())
                rows.append(row)
                inserted.append(copy.deepcopy(row))
            return FakeResponse(inserted)

        matched = self._matching()
        if self.action == "update":
            for row in matched:
                row.update(self.payload)
            return FakeResponse(copy.deepcopy(matched))
        if self.action == "delete":
            for row in matched:
                rows.remove(row)
            return FakeResponse(copy.deepcopy(matched))

        if self.order_by:
            column, desc = self.order_by
            matched = sorted(
                matched,
                key=lambda r: (r.get(column) is not None, r.get(column) or ""),
                reverse=desc,
            )
        matched = matched[self.offset_n:]
        if self.limit_n is not None:
            matched = matched[:self.limit_n]
        data = copy.deepcopy(matched)

        if self.single_mode == "maybe":
            return FakeResponse(data[0]) if data else None
        if self.single_mode == "single":
            if len(data) != 1:
                raise Exception("JSON object requested, multiple (or no) rows returned")
            return FakeResponse(data[0])
        return FakeResponse(data)


class FakeRpc:
    def __init__(self, db, name, params):
        self.db = db
        self.name = name
        self.params = params

    def execute(self):
        self.db.rpc_calls.append((self.name, self.params))
        handler = self.db.rpc_handlers.get(self.name)
        if handler is None:
            raise Exception(f"function {self.name} does not exist")
        result = handler(self.params)
        if isinstance(result, Exception):
            raise result
        return FakeResponse(result)


class FakeBucket:
    def __init__(self, db, name):
        self.db = db
        self.name = name

    def upload(self, path, content, file_options=None):
        if ("upload", self.name) in self.db.fail_on:
            raise Exception("simulated storage failure")
        self.db.objects[(self.name, path)] = content
        return SimpleNamespace(path=path)

    def get_public_url(self, path):
        return f"https://storage.test/{self.name}/{path}"

    def remove(self, paths):
        for path in paths:
            self.db.objects.pop((self.name, path), None)


class FakeStorage:
    def __init__(self, db):
        self.db = db

    def from_(self, bucket):
        return FakeBucket(self.db, bucket)


class FakeSupabase:
    def __init__(self):
        self.tables = {}
        self.fail_on = set()
        self.rpc_handlers = {}
        self.rpc_calls = []
        self.calls = []
        self.objects = {}
        self.storage = FakeStorage(self)
        self._clock = itertools.count(1)

    def next_timestamp(self):
        return (_EPOCH + timedelta(seconds=next(self._clock))).isoformat()

    def table(self, name):
        return FakeQuery(self, name)

    def rpc(self, name, params=None):
        return FakeRpc(self, name, params or {})

    def rows(self, name, **filters):
        return [r for r in self.tables.get(name, []) if all(r.get(k) == v for k, v in filters.items())]

    def seed(self, name, *rows):
        stored = []
        for row in rows:
            row = dict(row)
            row.setdefault("id", str(uuid.uuid4()))
            row.setdefault("created_at", self.next_timestamp())
            self.tables.setdefault(name, []).append(row)
            stored.append(row)
        return stored[0] if len(stored) == 1 else stored
