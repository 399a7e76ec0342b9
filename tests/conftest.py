"""Shared test fixtures for brewlog."""

from __future__ import annotations

import sys
from pathlib import Path
from typing import Any, Optional

import pytest

# Add src to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from records.models import Record  # noqa: E402
from errors import StoreError  # noqa: E402


def make_record(record_id: str, **fields: Any) -> Record:
    return Record(id=record_id, fields=fields)


class FakeStore:
    """In-memory stand-in for RecordStoreClient that records every call."""

    def __init__(self, tables: Optional[dict[str, list[Record]]] = None, base_id="appMAIN", api_key="patMAIN"):
        self.base_id = base_id
        self.api_key = api_key
        self.tables: dict[tuple[str, str], list[Record]] = {}
        for table, records in (tables or {}).items():
            self.tables[(base_id, table)] = list(records)
        self.calls: list[tuple] = []
        self.fail_on: dict[str, Exception] = {}
        self._next_id = 1

    def seed(self, table: str, records: list[Record], base_id: Optional[str] = None):
        self.tables[(base_id or self.base_id, table)] = list(records)

    def _check(self, op: str, table: str):
        err = self.fail_on.get(f"{op}:{table}")
        if err:
            raise err

    async def list(self, table, filter_formula=None, sort=None, base_id=None, api_key=None):
        self.calls.append(("list", table, filter_formula, base_id))
        self._check("list", table)
        return list(self.tables.get((base_id or self.base_id, table), []))

    async def get(self, table, record_id, base_id=None, api_key=None):
        self.calls.append(("get", table, record_id, base_id))
        self._check("get", table)
        for record in self.tables.get((base_id or self.base_id, table), []):
            if record.id == record_id:
                return record
        raise StoreError("Could not find record", status_code=404)

    async def create(self, table, fields, base_id=None, api_key=None):
        self.calls.append(("create", table, fields, base_id))
        self._check("create", table)
        record = Record(id=f"rec{self._next_id:03d}", fields=dict(fields))
        self._next_id += 1
        self.tables.setdefault((base_id or self.base_id, table), []).append(record)
        return record

    @property
    def mutations(self) -> list[tuple]:
        return [c for c in self.calls if c[0] == "create"]


class FakeVerifier:
    """TokenVerifier double: accepts any bearer token as ``email``."""

    def __init__(self, email: str = "barista@example.com", error: Optional[Exception] = None):
        self.email = email
        self.error = error
        self.calls = 0

    async def verify_header(self, authorization):
        from web.auth import bearer_token

        self.calls += 1
        bearer_token(authorization)
        if self.error:
            raise self.error
        return {"email": self.email}


@pytest.fixture
def fake_store():
    return FakeStore()


@pytest.fixture
def brew_records():
    """Mixed history: snapshot brews, lookup-era brews and one with no coffee."""
    return [
        make_record(
            "recB1",
            **{
                "Coffee Name": "Kiamabara",
                "Coffee Varietal": "SL28",
                "Brewer": "V60",
                "Created By": "ana@example.com",
                "Brew Date": "2025-03-02T08:00:00.000Z",
                "Dose": 15,
                "Drink Weight": 250,
                "Enjoyment Rating": 8,
            },
        ),
        make_record(
            "recB2",
            **{
                "Coffee Name": "Kiamabara",
                "Coffee Varietal": "SL28",
                "Brewer": "Origami",
                "Created By": "ben@example.com",
                "Enjoyment Rating": 6,
            },
        ),
        make_record(
            "recB3",
            **{
                "Coffee": ["recC9"],
                "Name/Producer (from Coffee)": ["Finca Deborah"],
                "Varietal (from Coffee)": ["Gesha"],
                "Brewer": "V60",
                "Created By": "ana@example.com",
            },
        ),
        make_record("recB4", **{"Brewer": "Aeropress", "Created By": "  "}),
    ]


@pytest.fixture(name="make_record")
def make_record_fixture():
    return make_record


@pytest.fixture
def store_factory():
    return FakeStore


@pytest.fixture
def verifier_factory():
    return FakeVerifier
