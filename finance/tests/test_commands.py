from decimal import Decimal
from io import StringIO

import pytest
from django.core.management import call_command
from django.core.management.base import CommandError

from .factories import ExpenseFactory, ServiceRecordFactory


@pytest.fixture
def cli_store(store, monkeypatch):
    monkeypatch.setattr("finance.management.commands.close_month.get_ledger_store", lambda: store)
    monkeypatch.setattr("finance.management.commands.reopen_month.get_ledger_store", lambda: store)
    store.seed("services", [ServiceRecordFactory(id="s1", hectares=Decimal("40"))])
    store.seed("expenses", [ExpenseFactory(id="e1", amount=Decimal("1000"))])
    return store


def test_close_month_command(cli_store):
    out = StringIO()

    call_command("close_month", "--month", "3", "--year", "2024", stdout=out)

    assert "Closed Março 2024 (3/2024)" in out.getvalue()
    assert len(cli_store.tables["closed_months"]) == 1
    assert cli_store.row("services", "s1")["closed"] is True


def test_close_month_dry_run_writes_nothing(cli_store):
    out = StringIO()

    call_command("close_month", "--month", "3", "--year", "2024", "--dry-run", stdout=out)

    output = out.getvalue()
    assert "Março 2024 [open]" in output
    assert "Revenue:  R$ 6000.00" in output
    assert "(capital call)" not in output
    assert cli_store.tables["closed_months"] == []
    assert not any(op in {"insert", "upsert_many"} for op, _ in cli_store.calls)


def test_close_month_twice_fails(cli_store):
    call_command("close_month", "--month", "3", "--year", "2024", stdout=StringIO())

    with pytest.raises(CommandError, match="3/2024"):
        call_command("close_month", "--month", "3", "--year", "2024", stdout=StringIO())


def test_close_month_invalid_month(cli_store):
    with pytest.raises(CommandError, match="Invalid month"):
        call_command("close_month", "--month", "13", "--year", "2024")


def test_close_month_store_failure(cli_store):
    cli_store.fail_on.add(("insert", "closed_months"))

    with pytest.raises(CommandError, match="Ledger store failure"):
        call_command("close_month", "--month", "3", "--year", "2024", stdout=StringIO())


def test_reopen_month_command(cli_store):
    call_command("close_month", "--month", "3", "--year", "2024", stdout=StringIO())
    out = StringIO()

    call_command("reopen_month", "3/2024", stdout=out)

    assert "Reopened Março 2024" in out.getvalue()
    assert cli_store.tables["closed_months"] == []
    assert cli_store.row("services", "s1")["closed"] is False


@pytest.mark.parametrize("key", ["2024-03", "5/2024"])
def test_reopen_month_errors(cli_store, key):
    with pytest.raises(CommandError):
        call_command("reopen_month", key)
