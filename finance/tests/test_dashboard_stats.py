import datetime
from decimal import Decimal

from finance.records import ClosedMonth, PartnerSummary
from finance.services.dashboard_stats import build_dashboard_stats, build_yearly_report

from .factories import ExpenseFactory, ServiceRecordFactory


def _archive(month_year, reserve_net):
    return ClosedMonth(
        id=f"cm-{month_year}",
        month_year=month_year,
        label="",
        total_revenue=Decimal("0"),
        total_expenses=Decimal("0"),
        net_profit=Decimal("0"),
        hectares=Decimal("0"),
        closed_at=datetime.datetime(2024, 3, 1, tzinfo=datetime.timezone.utc),
        partner_summaries=(
            PartnerSummary("Geraldo Júnior", reserve_net, Decimal("0"), reserve_net, Decimal("5000")),
            PartnerSummary("Fundo de Reserva", reserve_net, Decimal("0"), reserve_net),
        ),
    )


def test_dashboard_stats(config):
    today = datetime.date(2024, 3, 15)
    services = [
        ServiceRecordFactory(date=datetime.date(2024, 1, 20), hectares=Decimal("30"), closed=True),
        ServiceRecordFactory(date=datetime.date(2024, 3, 2), hectares=Decimal("10")),
        ServiceRecordFactory(date=datetime.date(2023, 12, 30), hectares=Decimal("99")),
    ]
    expenses = [
        ExpenseFactory(date=datetime.date(2024, 1, 5), amount=Decimal("1000"), closed=True),
        ExpenseFactory(date=datetime.date(2024, 3, 3), amount=Decimal("400")),
    ]
    archives = [_archive("1/2024", Decimal("250")), _archive("2/2024", Decimal("-100"))]

    stats = build_dashboard_stats(services, expenses, archives, config, today)

    assert stats.hectares_month == Decimal("10")
    assert stats.hectares_year == Decimal("40")
    assert stats.balance_month == Decimal("1500") - (Decimal("400") + Decimal("5000"))
    # Revenue 6000 minus expenses 1400 and three months of salary
    assert stats.balance_year == Decimal("6000") - Decimal("1400") - Decimal("15000")
    assert stats.bank_balance == Decimal("150")


def test_yearly_report_has_every_month(config):
    services = [
        ServiceRecordFactory(date=datetime.date(2024, 2, 10), hectares=Decimal("20"), closed=True),
    ]
    expenses = [ExpenseFactory(date=datetime.date(2024, 2, 11), amount=Decimal("1000"))]

    report = build_yearly_report(2024, services, expenses, config)

    assert len(report) == 12
    february = report[1]
    assert str(february.month_key) == "2/2024"
    assert february.revenue == Decimal("3000")
    assert february.costs == Decimal("6000")
    assert february.balance == Decimal("-3000")
    assert report[0].costs == config.fixed_monthly_salary
    assert report[0].revenue == Decimal("0")
