from __future__ import annotations

from decimal import Decimal
from typing import Iterable, Mapping

from ..config import FinanceConfig
from ..records import PartnerSummary, ServiceRecord


def partner_deduction(client_id: str | None, period_services: Iterable[ServiceRecord], rate: Decimal) -> Decimal:
    """Hectares the partner contracted as a client, charged at ``rate``."""
    if not client_id:
        return Decimal("0")
    hectares = sum((s.hectares for s in period_services if s.client_id == client_id), Decimal("0"))
    return hectares * rate


def distribute(
    total_revenue: Decimal,
    total_expenses: Decimal,
    period_services: Iterable[ServiceRecord],
    links: Mapping[str, str],
    config: FinanceConfig,
) -> list[PartnerSummary]:
    """Split the month's profit in four equal quotas.

    Client-partners lose ``hectares * partner_service_rate`` for the work
    done on their own land (``links`` maps slot to client id). The technical
    partner's salary is reported apart from ``net_profit``. Net values can
    be negative, meaning the partner owes a capital call.
    """
    period_services = tuple(period_services)
    gross_share = (total_revenue - total_expenses) / len(config.partners)

    summaries = []
    for partner in config.partners:
        deductions = Decimal("0")
        if partner.deduction_eligible:
            deductions = partner_deduction(
                links.get(partner.slot), period_services, config.partner_service_rate
            )
        summaries.append(
            PartnerSummary(
                name=partner.full_name,
                gross_profit=gross_share,
                deductions=deductions,
                net_profit=gross_share - deductions,
                salary=config.fixed_monthly_salary if partner.salaried else None,
            )
        )
    return summaries
