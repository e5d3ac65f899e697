from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Callable, Iterable

from django.utils import timezone

from ..config import FinanceConfig
from ..records import Expense, ServiceRecord
from ..utils.date_helpers import MonthKey


@dataclass(frozen=True)
class PeriodTotals:
    month_key: MonthKey
    total_revenue: Decimal
    total_expenses: Decimal
    total_hectares: Decimal
    period_services: tuple[ServiceRecord, ...]
    period_expenses: tuple[Expense, ...]

    @property
    def net_profit(self) -> Decimal:
        return self.total_revenue - self.total_expenses

    @property
    def variable_expenses(self) -> Decimal:
        return sum((e.amount for e in self.period_expenses), Decimal("0"))


def aggregate(
    month: int,
    year: int,
    services: Iterable[ServiceRecord],
    expenses: Iterable[Expense],
    config: FinanceConfig,
    *,
    active_only: bool = False,
) -> PeriodTotals:
    """Sum revenue, costs and hectares for one calendar month.

    With ``active_only`` records already flagged ``closed`` are skipped
    (live dashboard cycle); otherwise every record dated inside the month
    counts (closing snapshot / history). The fixed monthly salary is added
    to the expenses once per call.
    """
    key = MonthKey(year=year, month=month)

    period_services = tuple(
        s for s in services
        if key.contains(s.date) and not (active_only and s.closed)
    )
    period_expenses = tuple(
        e for e in expenses
        if key.contains(e.date) and not (active_only and e.closed)
    )

    total_revenue = sum((s.total_value for s in period_services), Decimal("0"))
    total_hectares = sum((s.hectares for s in period_services), Decimal("0"))
    total_expenses = (
        sum((e.amount for e in period_expenses), Decimal("0")) + config.fixed_monthly_salary
    )

    return PeriodTotals(
        month_key=key,
        total_revenue=total_revenue,
        total_expenses=total_expenses,
        total_hectares=total_hectares,
        period_services=period_services,
        period_expenses=period_expenses,
    )


def aggregate_current_cycle(
    services: Iterable[ServiceRecord],
    expenses: Iterable[Expense],
    config: FinanceConfig,
    clock: Callable[[], date] = timezone.localdate,
) -> PeriodTotals:
    """Active cycle of the month ``clock()`` falls in."""
    today = clock()
    return aggregate(today.month, today.year, services, expenses, config, active_only=True)
