"""Shared fixtures: environment defaults and an in-memory Supabase stand-in.

``FakeSupabase`` answers the subset of the PostgREST query builder the
services use (select with embedded resources, eq/or_ filters, order, limit,
insert/update/delete) against plain dicts, so service and API tests can
check stored state directly.
"""
import os
import re
from copy import deepcopy
from datetime import datetime, timedelta, timezone
from types import SimpleNamespace
from uuid import uuid4

import pytest

os.environ.setdefault("SUPABASE_URL", "https://test.supabase.co")
os.environ.setdefault("SUPABASE_SERVICE_KEY", "test-service-key")

# (table, embedded resource) -> (local column, remote column, one-to-many)
RELATIONS = {
    ("schedule_of_values", "jobs"): ("job_id", "id", False),
    ("schedule_of_values", "estimates"): ("estimate_id", "id", False),
    ("schedule_of_values", "sov_line_items"): ("id", "sov_id", True),
    ("sov_line_items", "cost_codes"): ("cost_code_id", "id", False),
}

TABLE_DEFAULTS = {
    "schedule_of_values": {
        "status": "draft",
        "version": 1,
        "total_contract_amount": 0,
        "approved_at": None,
        "approved_by": None,
        "notes": None,
    },
    "sov_line_items": {
        "cost_code_id": None,
        "estimate_line_item_id": None,
        "scheduled_value": 0,
        "approved_changes": 0,
        "revised_value": 0,
        "previous_billed": 0,
        "current_billed": 0,
        "total_billed": 0,
        "percent_complete": 0,
        "balance_to_finish": 0,
        "retainage_percent": 10,
        "retainage_held": 0,
        "sort_order": 0,
        "notes": None,
    },
}


def _split_columns(columns: str) -> list[str]:
    parts, depth, current = [], 0, ""
    for ch in columns:
        if ch == "(":
            depth += 1
        elif ch == ")":
            depth -= 1
        if ch == "," and depth == 0:
            parts.append(current.strip())
            current = ""
        else:
            current += ch
    if current.strip():
        parts.append(current.strip())
    return parts


class FakeQuery:
    def __init__(self, db: "FakeSupabase", table: str):
        self.db = db
        self.table = table
        self.op = "select"
        self.columns = "*"
        self.payload = None
        self.filters = []
        self.orders = []
        self.limit_n = None

    def select(self, columns: str = "*"):
        self.op = "select"
        self.columns = columns
        return self

    def insert(self, payload):
        self.op = "insert"
        self.payload = payload
        return self

    def update(self, payload: dict):
        self.op = "update"
        self.payload = payload
        return self

    def delete(self):
        self.op = "delete"
        return self

    def eq(self, column: str, value):
        self.filters.append(lambda row: row.get(column) == value)
        return self

    def or_(self, expression: str):
        clauses = []
        for clause in expression.split(","):
            column, _, raw = clause.split(".", 2)
            value = {"true": True, "false": False}.get(raw, raw)
            clauses.append((column, value))
        self.filters.append(lambda row: any(row.get(c) == v for c, v in clauses))
        return self

    def order(self, column: str, desc: bool = False):
        self.orders.append((column, desc))
        return self

    def limit(self, n: int):
        self.limit_n = n
        return self

    def _matches(self, row: dict) -> bool:
        return all(f(row) for f in self.filters)

    def _project(self, table: str, row: dict, columns: str) -> dict:
        out = {}
        for part in _split_columns(columns):
            embedded = re.match(r"^(\w+)(?:!inner)?\((.*)\)$", part)
            if part == "*":
                out.update(deepcopy(row))
            elif embedded:
                name, sub = embedded.groups()
                local, remote, many = RELATIONS[(table, name)]
                related = [r for r in self.db.tables.get(name, []) if r.get(remote) == row.get(local)]
                if many:
                    if sub.strip() == "count":
                        out[name] = [{"count": len(related)}]
                    else:
                        out[name] = [self._project(name, r, sub) for r in related]
                else:
                    out[name] = self._project(name, related[0], sub) if related else None
            else:
                out[part] = deepcopy(row.get(part))
        return out

    def execute(self):
        if (self.table, self.op) in self.db.failures:
            raise Exception(self.db.failures[(self.table, self.op)])
        self.db.calls.append((self.table, self.op))
        rows = self.db.tables.setdefault(self.table, [])

        if self.op == "insert":
            payload = self.payload if isinstance(self.payload, list) else [self.payload]
            inserted = []
            for item in payload:
                row = {**deepcopy(TABLE_DEFAULTS.get(self.table, {})), **deepcopy(item)}
                row.setdefault("id", str(uuid4()))
                stamp = self.db.tick()
                row.setdefault("created_at", stamp)
                if self.table == "schedule_of_values":
                    row.setdefault("updated_at", stamp)
                rows.append(row)
                inserted.append(deepcopy(row))
            return SimpleNamespace(data=inserted)

        matched = [row for row in rows if self._matches(row)]

        if self.op == "update":
            for row in matched:
                row.update(deepcopy(self.payload))
            return SimpleNamespace(data=deepcopy(matched))

        if self.op == "delete":
            self.db.tables[self.table] = [row for row in rows if not self._matches(row)]
            return SimpleNamespace(data=deepcopy(matched))

        for column, desc in reversed(self.orders):
            matched.sort(
                key=lambda r: (r.get(column) is None, r.get(column) if r.get(column) is not None else 0),
                reverse=desc,
            )
        if self.limit_n is not None:
            matched = matched[: self.limit_n]
        return SimpleNamespace(data=[self._project(self.table, r, self.columns) for r in matched])


class FakeSupabase:
    def __init__(self):
        self.tables: dict[str, list[dict]] = {}
        self.failures: dict[tuple[str, str], str] = {}
        self.calls: list[tuple[str, str]] = []
        self._clock = datetime(2026, 1, 1, tzinfo=timezone.utc)

    def tick(self) -> str:
        self._clock += timedelta(seconds=1)
        return self._clock.isoformat()

    def table(self, name: str) -> FakeQuery:
        return FakeQuery(self, name)

    def rows(self, name: str) -> list[dict]:
        return self.tables.get(name, [])

    def row(self, name: str, row_id: str) -> dict | None:
        return next((r for r in self.rows(name) if r["id"] == row_id), None)

    def seed(self, name: str, *rows: dict) -> None:
        for row in rows:
            self.tables.setdefault(name, []).append({"id": str(uuid4()), **row})

    def fail(self, table: str, op: str, message: str) -> None:
        self.failures[(table, op)] = message


PATCHED_MODULES = (
    "app.services.estimate_source",
    "app.services.recalculation",
    "app.services.line_items",
    "app.services.sov_service",
    "app.data.csi_masterformat",
    "app.routers.cost_codes",
)


@pytest.fixture
def db(monkeypatch):
    fake = FakeSupabase()
    for module in PATCHED_MODULES:
        monkeypatch.setattr(f"{module}.get_supabase", lambda: fake)
    fake.seed("jobs", {"id": "J1", "name": "Harbor View Remodel"})
    return fake
