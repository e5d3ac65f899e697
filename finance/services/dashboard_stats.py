from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Iterable

from ..config import FinanceConfig
from ..records import ClosedMonth, Expense, ServiceRecord
from ..utils.date_helpers import MonthKey, months_of_year
from .period_aggregation import aggregate


@dataclass(frozen=True)
class DashboardStats:
    hectares_month: Decimal
    hectares_year: Decimal
    balance_month: Decimal
    balance_year: Decimal
    bank_balance: Decimal


@dataclass(frozen=True)
class MonthlyReportRow:
    month_key: MonthKey
    revenue: Decimal
    costs: Decimal

    @property
    def balance(self) -> Decimal:
        return self.revenue - self.costs


def build_dashboard_stats(
    services: Iterable[ServiceRecord],
    expenses: Iterable[Expense],
    closed_months: Iterable[ClosedMonth],
    config: FinanceConfig,
    today: date,
) -> DashboardStats:
    """Headline numbers: active month cycle plus the calendar year so far.

    The year balance charges the fixed salary once for every month elapsed
    (January counts as one). ``bank_balance`` is what the reserve fund has
    accumulated across archived months.
    """
    services = tuple(services)
    expenses = tuple(expenses)
    current = aggregate(today.month, today.year, services, expenses, config, active_only=True)

    year_services = [s for s in services if s.date.year == today.year]
    year_expenses = [e for e in expenses if e.date.year == today.year]
    year_revenue = sum((s.total_value for s in year_services), Decimal("0"))
    year_costs = (
        sum((e.amount for e in year_expenses), Decimal("0"))
        + config.fixed_monthly_salary * today.month
    )

    reserve = config.reserve_partner
    bank_balance = Decimal("0")
    if reserve is not None:
        for archive in closed_months:
            for summary in archive.partner_summaries:
                if summary.name == reserve.full_name:
                    bank_balance += summary.net_profit

    return DashboardStats(
        hectares_month=current.total_hectares,
        hectares_year=sum((s.hectares for s in year_services), Decimal("0")),
        balance_month=current.net_profit,
        balance_year=year_revenue - year_costs,
        bank_balance=bank_balance,
    )


def build_yearly_report(
    year: int,
    services: Iterable[ServiceRecord],
    expenses: Iterable[Expense],
    config: FinanceConfig,
) -> list[MonthlyReportRow]:
    services = tuple(services)
    expenses = tuple(expenses)
    rows = []
    for key in months_of_year(year):
        totals = aggregate(key.month, key.year, services, expenses, config)
        rows.append(MonthlyReportRow(key, totals.total_revenue, totals.total_expenses))
    return rows
