#  finance/views.py

"""
JSON endpoints for the monthly closing and partner split.

Every endpoint reads fresh data from the ledger store; only the dashboard
payloads are cached, and that cache is dropped on close/reopen.
"""

import json
import logging

from django.contrib.auth.decorators import login_required
from django.core.cache import cache
from django.http import HttpResponse, JsonResponse
from django.utils import timezone
from django.views.decorators.http import require_GET, require_POST

from .config import FinanceConfig
from .exceptions import MonthAlreadyClosed, MonthNotClosed, PersistenceFailure
from .records import ClosedMonth, Expense, PartnerSummary, ServiceRecord
from .services.dashboard_stats import build_dashboard_stats, build_yearly_report
from .services.month_closing import MonthClosingService
from .utils.cache_helpers import dashboard_cache_key, dashboard_timeout, remember_dashboard_key
from .utils.date_helpers import MonthKey
from .utils.supabase_rest import get_ledger_store

logger = logging.getLogger(__name__)


def _money(value) -> float:
    return float(value)


def _month_from(params, today) -> MonthKey:
    """Read ``month``/``year`` from a dict, defaulting to the current month."""
    month = params.get("month") or today.month
    year = params.get("year") or today.year
    return MonthKey(year=int(year), month=int(month))


def _summary_payload(summary: PartnerSummary) -> dict:
    return {
        "name": summary.name,
        "gross_profit": _money(summary.gross_profit),
        "deductions": _money(summary.deductions),
        "net_profit": _money(summary.net_profit),
        "salary": _money(summary.salary) if summary.salary is not None else None,
        "total_to_receive": _money(summary.total_to_receive),
        "capital_call": summary.capital_call,
    }


def _service_payload(service: ServiceRecord) -> dict:
    return {
        "id": service.id,
        "date": service.date.isoformat(),
        "client_name": service.client_name,
        "area_name": service.area_name,
        "hectares": _money(service.hectares),
        "total_value": _money(service.total_value),
        "closed": service.closed,
    }


def _expense_payload(expense: Expense) -> dict:
    return {
        "id": expense.id,
        "date": expense.date.isoformat(),
        "description": expense.description,
        "category": expense.category,
        "amount": _money(expense.amount),
        "closed": expense.closed,
    }


def _archive_payload(archive: ClosedMonth, detail: bool = False) -> dict:
    data = {
        "id": archive.id,
        "month_year": archive.month_year,
        "label": archive.label,
        "total_revenue": _money(archive.total_revenue),
        "total_expenses": _money(archive.total_expenses),
        "net_profit": _money(archive.net_profit),
        "hectares": _money(archive.hectares),
        "closed_at": archive.closed_at.isoformat(),
        "partner_summaries": [_summary_payload(s) for s in archive.partner_summaries],
    }
    if detail:
        data["services"] = [_service_payload(s) for s in archive.services]
        data["expenses"] = [_expense_payload(e) for e in archive.expenses]
    return data


def _closing_service(request) -> MonthClosingService:
    return MonthClosingService(get_ledger_store(request.user), FinanceConfig.from_settings())


def _store_error(request, exc: PersistenceFailure) -> JsonResponse:
    logger.error(f"Ledger store failure for user {request.user.id}: {exc}")
    return JsonResponse({"success": False, "error": str(exc)}, status=502)


@require_GET
@login_required
def closing_preview(request):
    """Totals and partner split for a month (active cycle unless ``scope=full``)."""
    try:
        key = _month_from(request.GET, timezone.localdate())
    except ValueError as e:
        return JsonResponse({"success": False, "error": str(e)}, status=400)

    active_only = request.GET.get("scope", "active") != "full"
    try:
        preview = _closing_service(request).preview(key.month, key.year, active_only=active_only)
    except PersistenceFailure as e:
        return _store_error(request, e)

    totals = preview.totals
    return JsonResponse({
        "success": True,
        "month_year": str(key),
        "label": key.label,
        "scope": "active" if active_only else "full",
        "is_closed": preview.is_closed,
        "total_revenue": _money(totals.total_revenue),
        "total_expenses": _money(totals.total_expenses),
        "net_profit": _money(totals.net_profit),
        "hectares": _money(totals.total_hectares),
        "service_count": preview.service_count,
        "partner_summaries": [_summary_payload(s) for s in preview.partner_summaries],
    })


@require_GET
@login_required
def partner_summary(request):
    """Partner split of the live cycle for the current (or given) month."""
    try:
        key = _month_from(request.GET, timezone.localdate())
    except ValueError as e:
        return JsonResponse({"success": False, "error": str(e)}, status=400)

    try:
        preview = _closing_service(request).preview(key.month, key.year)
    except PersistenceFailure as e:
        return _store_error(request, e)

    return JsonResponse({
        "success": True,
        "month_year": str(key),
        "summaries": [_summary_payload(s) for s in preview.partner_summaries],
    })


@require_POST
@login_required
def close_month(request):
    try:
        data = json.loads(request.body or b"{}")
        key = _month_from(data, timezone.localdate())
    except (ValueError, TypeError, AttributeError) as e:
        return JsonResponse({"success": False, "error": str(e)}, status=400)

    logger.info(f"Closing month {key} (user {request.user.id})")
    try:
        archive = _closing_service(request).close(key.month, key.year)
    except MonthAlreadyClosed as e:
        return JsonResponse({"success": False, "error": str(e)}, status=409)
    except PersistenceFailure as e:
        return _store_error(request, e)

    return JsonResponse({
        "success": True,
        "message": f"Fechamento de {archive.label} concluído",
        "closed_month": _archive_payload(archive),
    }, status=201)


@require_POST
@login_required
def reopen_month(request):
    try:
        data = json.loads(request.body or b"{}")
        key = MonthKey.parse(data.get("month_key", ""))
    except (ValueError, TypeError, AttributeError) as e:
        return JsonResponse({"success": False, "error": str(e)}, status=400)

    logger.info(f"Reopening month {key} (user {request.user.id})")
    try:
        archive = _closing_service(request).reopen(key)
    except MonthNotClosed as e:
        return JsonResponse({"success": False, "error": str(e)}, status=404)
    except PersistenceFailure as e:
        return _store_error(request, e)

    return JsonResponse({
        "success": True,
        "message": f"{archive.label} reaberto",
        "month_year": str(key),
    })


@require_GET
@login_required
def closing_history(request):
    detail = request.GET.get("detail") in {"1", "true", "yes"}
    try:
        archives = _closing_service(request).history()
    except PersistenceFailure as e:
        return _store_error(request, e)

    return JsonResponse({
        "success": True,
        "closed_months": [_archive_payload(a, detail=detail) for a in archives],
    })


@require_GET
@login_required
def dashboard_stats(request):
    today = timezone.localdate()
    cache_key = dashboard_cache_key("stats", today.year, today.month)
    payload = cache.get(cache_key)
    if payload is None:
        service = _closing_service(request)
        try:
            snapshot = service.load_snapshot()
        except PersistenceFailure as e:
            return _store_error(request, e)

        stats = build_dashboard_stats(
            snapshot.services, snapshot.expenses, snapshot.closed_months, service.config, today
        )
        payload = {
            "hectares_month": _money(stats.hectares_month),
            "hectares_year": _money(stats.hectares_year),
            "balance_month": _money(stats.balance_month),
            "balance_year": _money(stats.balance_year),
            "bank_balance": _money(stats.bank_balance),
        }
        cache.set(cache_key, payload, dashboard_timeout())
        remember_dashboard_key(cache_key)

    return JsonResponse({"success": True, "stats": payload})


@require_GET
@login_required
def dashboard_yearly(request):
    try:
        year = int(request.GET.get("year") or timezone.localdate().year)
    except ValueError:
        return JsonResponse({"success": False, "error": "Invalid year"}, status=400)

    cache_key = dashboard_cache_key("yearly", year)
    rows = cache.get(cache_key)
    if rows is None:
        service = _closing_service(request)
        try:
            snapshot = service.load_snapshot()
        except PersistenceFailure as e:
            return _store_error(request, e)

        report = build_yearly_report(year, snapshot.services, snapshot.expenses, service.config)
        rows = [
            {
                "month_year": str(r.month_key),
                "month": r.month_key.label.split(" ")[0],
                "revenue": _money(r.revenue),
                "costs": _money(r.costs),
                "balance": _money(r.balance),
            }
            for r in report
        ]
        cache.set(cache_key, rows, dashboard_timeout())
        remember_dashboard_key(cache_key)

    return JsonResponse({"success": True, "year": year, "months": rows})


def healthz(_request):
    """
    Lightweight health endpoint used by external monitors.
    Must not touch the ledger store.
    """
    response = HttpResponse("ok", content_type="text/plain", status=200)
    response["Cache-Control"] = "no-store, no-cache, must-revalidate, max-age=0"
    return response
