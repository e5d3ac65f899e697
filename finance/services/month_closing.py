import logging
import uuid
from dataclasses import dataclass
from datetime import datetime

from django.utils import timezone

from ..config import FinanceConfig
from ..exceptions import MonthAlreadyClosed, MonthNotClosed, PersistenceFailure
from ..records import Client, ClosedMonth, Expense, PartnerSummary, ServiceRecord
from ..utils.cache_helpers import clear_dashboard_cache
from ..utils.date_helpers import MonthKey
from .client_registry import partner_links
from .period_aggregation import PeriodTotals, aggregate
from .profit_distribution import distribute

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LedgerSnapshot:
    """Everything read from the store at one point in time."""

    clients: tuple[Client, ...]
    services: tuple[ServiceRecord, ...]
    expenses: tuple[Expense, ...]
    closed_months: tuple[ClosedMonth, ...]

    def archive_for(self, key: MonthKey) -> ClosedMonth | None:
        return next((cm for cm in self.closed_months if cm.month_key == key), None)


@dataclass(frozen=True)
class ClosingPreview:
    totals: PeriodTotals
    partner_summaries: tuple[PartnerSummary, ...]
    is_closed: bool

    @property
    def service_count(self) -> int:
        return len(self.totals.period_services)


class MonthClosingService:
    """Open/closed lifecycle of a month.

    A month is closed iff a ``closed_months`` row with its key exists.
    Closing writes that archive first and only then flags the month's
    services and expenses as closed; reopening deletes the archive and
    clears the flags of the records it held.
    """

    def __init__(self, store, config=None, clock=None):
        self.store = store
        self.config = config or FinanceConfig.from_settings()
        self.clock = clock or timezone.now

    def load_snapshot(self) -> LedgerSnapshot:
        return LedgerSnapshot(
            clients=tuple(Client.from_row(r) for r in self.store.list_all("clients")),
            services=tuple(ServiceRecord.from_row(r) for r in self.store.list_all("services")),
            expenses=tuple(Expense.from_row(r) for r in self.store.list_all("expenses")),
            closed_months=tuple(
                ClosedMonth.from_row(r) for r in self.store.list_all("closed_months")
            ),
        )

    def history(self) -> list[ClosedMonth]:
        """Archives, newest month first."""
        archives = (ClosedMonth.from_row(r) for r in self.store.list_all("closed_months"))
        return sorted(archives, key=lambda cm: cm.month_key, reverse=True)

    def is_closed(self, month: int, year: int) -> bool:
        key = MonthKey(year=year, month=month)
        return any(cm.month_key == key for cm in self.history())

    def compute(self, month, year, snapshot, *, active_only=False):
        totals = aggregate(
            month, year, snapshot.services, snapshot.expenses, self.config, active_only=active_only
        )
        summaries = distribute(
            totals.total_revenue,
            totals.total_expenses,
            totals.period_services,
            partner_links(snapshot.clients, self.config),
            self.config,
        )
        return totals, tuple(summaries)

    def preview(self, month: int, year: int, *, active_only: bool = True) -> ClosingPreview:
        """Figures shown before confirming a close (live cycle by default)."""
        snapshot = self.load_snapshot()
        totals, summaries = self.compute(month, year, snapshot, active_only=active_only)
        key = MonthKey(year=year, month=month)
        return ClosingPreview(
            totals=totals,
            partner_summaries=summaries,
            is_closed=snapshot.archive_for(key) is not None,
        )

    def build_archive(self, totals: PeriodTotals, summaries, closed_at: datetime) -> ClosedMonth:
        return ClosedMonth(
            id=uuid.uuid4().hex,
            month_year=str(totals.month_key),
            label=totals.month_key.label,
            total_revenue=totals.total_revenue,
            total_expenses=totals.total_expenses,
            net_profit=totals.net_profit,
            hectares=totals.total_hectares,
            closed_at=closed_at,
            services=totals.period_services,
            expenses=totals.period_expenses,
            partner_summaries=tuple(summaries),
        )

    def close(self, month: int, year: int) -> ClosedMonth:
        key = MonthKey(year=year, month=month)
        snapshot = self.load_snapshot()
        if snapshot.archive_for(key) is not None:
            raise MonthAlreadyClosed(key)

        totals, summaries = self.compute(month, year, snapshot)
        archive = self.build_archive(totals, summaries, self.clock())

        # Nothing is touched before the archive write succeeds.
        self.store.insert("closed_months", archive.to_row())
        logger.info(
            "Closed month %s: revenue=%s expenses=%s services=%s",
            key, archive.total_revenue, archive.total_expenses, len(archive.services),
        )

        try:
            self._set_closed_flags(totals.period_services, totals.period_expenses, True)
        except PersistenceFailure:
            logger.error("Flagging records for %s failed; removing archive", key)
            self._rollback_close(archive, totals)
            raise

        clear_dashboard_cache()
        return archive

    def reopen(self, month_key) -> ClosedMonth:
        key = MonthKey.parse(month_key)
        archive = next((cm for cm in self.history() if cm.month_key == key), None)
        if archive is None:
            raise MonthNotClosed(key)

        # Stored keys may be padded ("03/2024"); delete by the stored value.
        deleted = self.store.delete_by_key("closed_months", "monthYear", archive.month_year)
        if not deleted:
            raise PersistenceFailure(
                f"Archive {archive.month_year} was not deleted",
                collection="closed_months",
                operation="DELETE",
            )
        logger.info("Reopened month %s (archive %s deleted)", key, archive.id)

        try:
            # Reopen restores mutability of the records the archive held.
            snapshot = self.load_snapshot()
            service_ids = {s.id for s in archive.services}
            expense_ids = {e.id for e in archive.expenses}
            self._set_closed_flags(
                [s for s in snapshot.services if s.id in service_ids],
                [e for e in snapshot.expenses if e.id in expense_ids],
                False,
            )
        finally:
            clear_dashboard_cache()
        return archive

    def _set_closed_flags(self, services, expenses, closed: bool) -> None:
        self.store.upsert_many("services", [s.with_closed(closed).to_row() for s in services])
        self.store.upsert_many("expenses", [e.with_closed(closed).to_row() for e in expenses])

    def _rollback_close(self, archive: ClosedMonth, totals: PeriodTotals) -> None:
        try:
            self.store.delete_by_key("closed_months", "monthYear", archive.month_year)
            self.store.upsert_many("services", [s.to_row() for s in totals.period_services])
            self.store.upsert_many("expenses", [e.to_row() for e in totals.period_expenses])
        except PersistenceFailure:
            logger.exception("Rollback of month %s failed; store needs manual review", archive.month_year)
