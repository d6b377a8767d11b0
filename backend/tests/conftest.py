"""
Sales Tracker - shared test fixtures

In-memory stand-in for the motor collections used by the routes, plus
helpers to build authenticated TestClients.
"""

import copy
import re
from datetime import datetime, timezone, timedelta

import pytest
from fastapi.testclient import TestClient


# ═══════════════════════════════════════════════════════════════
# IN-MEMORY COLLECTIONS
# ═══════════════════════════════════════════════════════════════

_MISSING = object()


def _get_path(doc, path):
    value = doc
    for part in path.split("."):
        if not isinstance(value, dict) or part not in value:
            return _MISSING
        value = value[part]
    return value


def _set_path(doc, path, value):
    *parents, last = path.split(".")
    for part in parents:
        doc = doc.setdefault(part, {})
    doc[last] = value


def _match_condition(value, condition):
    if isinstance(condition, dict) and any(k.startswith("$") for k in condition):
        for op, arg in condition.items():
            present = value is not _MISSING
            if op == "$exists":
                if present != bool(arg):
                    return False
                continue
            if op == "$nin":
                if present and value in arg:
                    return False
                continue
            if op == "$in":
                if not present or value not in arg:
                    return False
                continue
            if not present or value is None:
                return False
            if op == "$gte" and not value >= arg:
                return False
            if op == "$gt" and not value > arg:
                return False
            if op == "$lte" and not value <= arg:
                return False
            if op == "$lt" and not value < arg:
                return False
            if op == "$regex" and not re.search(arg, value):
                return False
        return True
    return value is not _MISSING and value == condition


def _matches(doc, query):
    return all(_match_condition(_get_path(doc, k), c) for k, c in (query or {}).items())


def _project(doc, projection):
    doc = copy.deepcopy(doc)
    if not projection:
        return doc
    included = [k for k, v in projection.items() if v and k != "_id"]
    if included:
        doc = {k: doc[k] for k in included if k in doc}
    for k, v in projection.items():
        if not v:
            doc.pop(k, None)
    return doc


def _sort_docs(docs, sort):
    for key, direction in reversed(sort):
        # None / missing sort first ascending, like Mongo
        docs.sort(
            key=lambda d: (_get_path(d, key) not in (None, _MISSING), _get_path(d, key)
                           if _get_path(d, key) not in (None, _MISSING) else ""),
            reverse=direction == -1,
        )
    return docs


class FakeCursor:
    def __init__(self, docs):
        self._docs = docs
        self._skip = 0
        self._limit = None

    def sort(self, key, direction=1):
        _sort_docs(self._docs, [(key, direction)])
        return self

    def skip(self, n):
        self._skip = n
        return self

    def limit(self, n):
        self._limit = n
        return self

    async def to_list(self, length=None):
        docs = self._docs[self._skip:]
        if self._limit:
            docs = docs[:self._limit]
        if length:
            docs = docs[:length]
        return docs


class FakeCollection:
    def __init__(self):
        self.docs = []

    async def insert_one(self, doc):
        doc["_id"] = f"oid-{len(self.docs)}"
        self.docs.append(copy.deepcopy(doc))

    async def find_one(self, query=None, projection=None, sort=None):
        docs = [d for d in self.docs if _matches(d, query)]
        if sort:
            docs = _sort_docs(list(docs), sort)
        return _project(docs[0], projection) if docs else None

    def find(self, query=None, projection=None):
        return FakeCursor([_project(d, projection) for d in self.docs if _matches(d, query)])

    async def update_one(self, query, update):
        for doc in self.docs:
            if _matches(doc, query):
                for key, value in update.get("$set", {}).items():
                    _set_path(doc, key, copy.deepcopy(value))
                for key, value in update.get("$push", {}).items():
                    doc.setdefault(key, []).append(copy.deepcopy(value))
                return

    async def delete_one(self, query):
        for i, doc in enumerate(self.docs):
            if _matches(doc, query):
                del self.docs[i]
                return

    async def count_documents(self, query):
        return len([d for d in self.docs if _matches(d, query)])

    async def distinct(self, key, query=None):
        values = []
        for doc in self.docs:
            value = _get_path(doc, key)
            if value is not _MISSING and value not in values and _matches(doc, query):
                values.append(value)
        return values

    async def create_index(self, *args, **kwargs):
        return None


class FakeDB:
    def __init__(self):
        self._collections = {}

    def __getattr__(self, name):
        if name.startswith("_"):
            raise AttributeError(name)
        return self._collections.setdefault(name, FakeCollection())


# ═══════════════════════════════════════════════════════════════
# FIXTURES
# ═══════════════════════════════════════════════════════════════

MANAGER = {"id": "g-1", "email": "manager@roofing.test", "displayName": "Mara Manager", "role": "manager"}
SALES_ANA = {"id": "g-2", "email": "ana@roofing.test", "displayName": "Ana Sales", "role": "salesperson"}
SALES_BEN = {"id": "g-3", "email": "ben@roofing.test", "displayName": "Ben Sales", "role": "salesperson"}

DB_MODULES = [
    "config",
    "routes.auth",
    "routes.leads",
    "routes.sales_logs",
    "routes.kpi",
    "routes.ytd",
    "services.activity_logger",
]


@pytest.fixture
def fake_db(monkeypatch):
    import importlib
    db = FakeDB()
    for name in DB_MODULES:
        monkeypatch.setattr(importlib.import_module(name), "db", db)
    return db


@pytest.fixture
def app(fake_db):
    from server import app
    yield app
    app.dependency_overrides.clear()


@pytest.fixture
def client_as(app):
    """client_as(user) -> TestClient authenticated as that user."""
    from routes.auth import get_current_user

    def _client(user):
        app.dependency_overrides[get_current_user] = lambda: dict(user)
        return TestClient(app)

    return _client


def iso_days_from_now(days, now=None):
    now = now or datetime.now(timezone.utc)
    return (now + timedelta(days=days)).isoformat()


def make_log(**overrides):
    """Sales-log document with every field at its default."""
    doc = {
        "id": overrides.pop("id", "log-1"),
        "leadNumber": 1,
        "pmName": "Pat",
        "clientName": "Client",
        "leadType": "Warm",
        "salesProcess": {
            "isGhosted": False,
            "mcOnly": False,
            "mcAndDemo": False,
            "sepMcAndDemo": False,
            "emailedProposal": False,
        },
        "results": {"status": "Pending", "bidAmount": 0, "soldAmount": 0},
        "nextFollowUpDate": None,
        "assignedUserId": SALES_ANA["email"],
        "createdAt": datetime.now(timezone.utc).isoformat(),
    }
    for key, value in overrides.items():
        if isinstance(value, dict) and isinstance(doc.get(key), dict):
            doc[key] = {**doc[key], **value}
        else:
            doc[key] = value
    return doc
