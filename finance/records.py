"""Ledger records exchanged with the Supabase tables.

Rows come back from PostgREST as plain dicts with the camelCase column
names used by the web front-end; ``from_row``/``to_row`` translate them.
Money and hectares are kept as ``Decimal``.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from datetime import date, datetime
from decimal import Decimal
from enum import Enum

from dateutil.parser import isoparse

from .utils.date_helpers import MonthKey, parse_day

logger = logging.getLogger(__name__)


def to_decimal(value) -> Decimal:
    if value is None or value == "":
        return Decimal("0")
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


class ApplicationType(str, Enum):
    SPRAYING = "Pulverização"
    SOLID_DISPERSION = "Dispersão de Sólidos"

    @classmethod
    def coerce(cls, value) -> "ApplicationType | str":
        """Known types become members; anything else is kept as the raw text."""
        if not value:
            return cls.SPRAYING
        try:
            return cls(value)
        except ValueError:
            logger.warning("Unknown application type %r kept as-is", value)
            return value


@dataclass(frozen=True)
class Area:
    id: str
    name: str
    hectares: Decimal = Decimal("0")

    @classmethod
    def from_row(cls, row: dict) -> "Area":
        return cls(id=str(row["id"]), name=row.get("name", ""), hectares=to_decimal(row.get("hectares")))

    def to_row(self) -> dict:
        return {"id": self.id, "name": self.name, "hectares": self.hectares}


@dataclass(frozen=True)
class Client:
    id: str
    name: str
    contact: str = ""
    areas: tuple[Area, ...] = ()
    is_partner: bool = False
    partner_name: str | None = None

    @classmethod
    def from_row(cls, row: dict) -> "Client":
        return cls(
            id=str(row["id"]),
            name=row.get("name", ""),
            contact=row.get("contact") or "",
            areas=tuple(Area.from_row(a) for a in row.get("areas") or ()),
            is_partner=bool(row.get("isPartner")),
            partner_name=row.get("partnerName") or None,
        )

    def to_row(self) -> dict:
        row = {
            "id": self.id,
            "name": self.name,
            "contact": self.contact,
            "areas": [a.to_row() for a in self.areas],
            "isPartner": self.is_partner,
        }
        if self.partner_name:
            row["partnerName"] = self.partner_name
        return row


@dataclass(frozen=True)
class ServiceRecord:
    """One billable drone application."""

    id: str
    date: date
    client_id: str
    hectares: Decimal
    unit_price: Decimal
    total_value: Decimal
    type: ApplicationType | str = ApplicationType.SPRAYING
    client_name: str = ""
    area_id: str = ""
    area_name: str = ""
    closed: bool = False

    @classmethod
    def from_row(cls, row: dict) -> "ServiceRecord":
        hectares = to_decimal(row.get("hectares"))
        unit_price = to_decimal(row.get("unitPrice"))
        total = row.get("totalValue")
        return cls(
            id=str(row["id"]),
            date=parse_day(row["date"]),
            client_id=str(row.get("clientId") or ""),
            client_name=row.get("clientName") or "",
            area_id=str(row.get("areaId") or ""),
            area_name=row.get("areaName") or "",
            hectares=hectares,
            type=ApplicationType.coerce(row.get("type")),
            unit_price=unit_price,
            total_value=to_decimal(total) if total is not None else hectares * unit_price,
            closed=bool(row.get("closed")),
        )

    def to_row(self) -> dict:
        return {
            "id": self.id,
            "date": self.date.isoformat(),
            "clientId": self.client_id,
            "clientName": self.client_name,
            "areaId": self.area_id,
            "areaName": self.area_name,
            "hectares": self.hectares,
            "type": getattr(self.type, "value", self.type),
            "unitPrice": self.unit_price,
            "totalValue": self.total_value,
            "closed": self.closed,
        }

    def with_closed(self, closed: bool) -> "ServiceRecord":
        return replace(self, closed=closed)


@dataclass(frozen=True)
class Expense:
    id: str
    date: date
    description: str
    amount: Decimal
    category: str = ""
    closed: bool = False

    @classmethod
    def from_row(cls, row: dict) -> "Expense":
        return cls(
            id=str(row["id"]),
            date=parse_day(row["date"]),
            description=row.get("description") or "",
            amount=to_decimal(row.get("amount")),
            category=row.get("category") or "",
            closed=bool(row.get("closed")),
        )

    def to_row(self) -> dict:
        return {
            "id": self.id,
            "date": self.date.isoformat(),
            "description": self.description,
            "amount": self.amount,
            "category": self.category,
            "closed": self.closed,
        }

    def with_closed(self, closed: bool) -> "Expense":
        return replace(self, closed=closed)


@dataclass(frozen=True)
class PartnerSummary:
    name: str
    gross_profit: Decimal
    deductions: Decimal
    net_profit: Decimal
    salary: Decimal | None = None

    @property
    def total_to_receive(self) -> Decimal:
        return self.net_profit + (self.salary or Decimal("0"))

    @property
    def capital_call(self) -> bool:
        """Partner owes money back to the company ("aporte necessário")."""
        return self.total_to_receive < 0

    @classmethod
    def from_row(cls, row: dict) -> "PartnerSummary":
        salary = row.get("salary")
        return cls(
            name=row.get("name", ""),
            gross_profit=to_decimal(row.get("grossProfit")),
            deductions=to_decimal(row.get("deductions")),
            net_profit=to_decimal(row.get("netProfit")),
            salary=to_decimal(salary) if salary is not None else None,
        )

    def to_row(self) -> dict:
        row = {
            "name": self.name,
            "grossProfit": self.gross_profit,
            "deductions": self.deductions,
            "netProfit": self.net_profit,
        }
        if self.salary is not None:
            row["salary"] = self.salary
        return row


@dataclass(frozen=True)
class ClosedMonth:
    """Immutable archive of a closed month."""

    id: str
    month_year: str
    label: str
    total_revenue: Decimal
    total_expenses: Decimal
    net_profit: Decimal
    hectares: Decimal
    closed_at: datetime
    services: tuple[ServiceRecord, ...] = field(default_factory=tuple)
    expenses: tuple[Expense, ...] = field(default_factory=tuple)
    partner_summaries: tuple[PartnerSummary, ...] = field(default_factory=tuple)

    @property
    def month_key(self) -> MonthKey:
        return MonthKey.parse(self.month_year)

    @classmethod
    def from_row(cls, row: dict) -> "ClosedMonth":
        closed_at = row.get("closedAt")
        return cls(
            id=str(row["id"]),
            month_year=row["monthYear"],
            label=row.get("label") or MonthKey.parse(row["monthYear"]).label,
            total_revenue=to_decimal(row.get("totalRevenue")),
            total_expenses=to_decimal(row.get("totalExpenses")),
            net_profit=to_decimal(row.get("netProfit")),
            hectares=to_decimal(row.get("hectares")),
            closed_at=closed_at if isinstance(closed_at, datetime) else isoparse(closed_at),
            services=tuple(ServiceRecord.from_row(s) for s in row.get("services") or ()),
            expenses=tuple(Expense.from_row(e) for e in row.get("expenses") or ()),
            partner_summaries=tuple(
                PartnerSummary.from_row(p) for p in row.get("partnerSummaries") or ()
            ),
        )

    def to_row(self) -> dict:
        return {
            "id": self.id,
            "monthYear": self.month_year,
            "label": self.label,
            "totalRevenue": self.total_revenue,
            "totalExpenses": self.total_expenses,
            "netProfit": self.net_profit,
            "hectares": self.hectares,
            "services": [s.to_row() for s in self.services],
            "expenses": [e.to_row() for e in self.expenses],
            "partnerSummaries": [p.to_row() for p in self.partner_summaries],
            "closedAt": self.closed_at.isoformat(),
        }
