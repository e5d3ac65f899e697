import copy
import json
from datetime import datetime, timezone as dt_timezone
from decimal import Decimal

import pytest
from django.core.cache import cache
from django.core.serializers.json import DjangoJSONEncoder

from finance.config import FinanceConfig
from finance.exceptions import PersistenceFailure


class InMemoryLedgerStore:
    """Ledger store double with the same four operations as the Supabase one.

    Rows go through a JSON round-trip so Decimals come back as strings, as
    they do from PostgREST. ``fail_on`` holds ``(operation, collection)``
    pairs that must raise ``PersistenceFailure``.
    """

    unique_keys = {"closed_months": "monthYear"}

    def __init__(self):
        self.tables = {"clients": [], "services": [], "expenses": [], "closed_months": []}
        self.fail_on = set()
        self.calls = []

    def _check(self, operation, collection):
        self.calls.append((operation, collection))
        if (operation, collection) in self.fail_on:
            raise PersistenceFailure(
                f"{operation} {collection} failed", collection=collection, operation=operation, status_code=503
            )

    @staticmethod
    def _encode(row):
        return json.loads(json.dumps(row, cls=DjangoJSONEncoder))

    def seed(self, collection, records):
        for record in records:
            self.tables[collection].append(self._encode(record.to_row()))

    def list_all(self, collection):
        self._check("list_all", collection)
        return copy.deepcopy(self.tables[collection])

    def insert(self, collection, record):
        self._check("insert", collection)
        row = self._encode(record)
        rows = self.tables[collection]
        if any(r["id"] == row["id"] for r in rows):
            raise PersistenceFailure("duplicate id", collection=collection, operation="insert", status_code=409)
        unique = self.unique_keys.get(collection)
        if unique and any(r[unique] == row[unique] for r in rows):
            raise PersistenceFailure(
                f"duplicate {unique}", collection=collection, operation="insert", status_code=409
            )
        rows.append(row)
        return copy.deepcopy(row)

    def upsert_many(self, collection, records):
        self._check("upsert_many", collection)
        rows = self.tables[collection]
        for record in records:
            row = self._encode(record)
            for i, existing in enumerate(rows):
                if existing["id"] == row["id"]:
                    rows[i] = row
                    break
            else:
                rows.append(row)

    def delete_by_key(self, collection, key, value):
        self._check("delete_by_key", collection)
        rows = self.tables[collection]
        deleted = [r for r in rows if str(r.get(key)) == str(value)]
        self.tables[collection] = [r for r in rows if str(r.get(key)) != str(value)]
        return deleted

    def row(self, collection, row_id):
        return next(r for r in self.tables[collection] if r["id"] == row_id)


@pytest.fixture
def store():
    return InMemoryLedgerStore()


@pytest.fixture
def config():
    return FinanceConfig(partner_service_rate=Decimal("100"), fixed_monthly_salary=Decimal("5000"))


@pytest.fixture
def fixed_now():
    return datetime(2024, 4, 2, 9, 30, tzinfo=dt_timezone.utc)


@pytest.fixture(autouse=True)
def clear_cache():
    cache.clear()
    yield
    cache.clear()
