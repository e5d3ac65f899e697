from django.urls import path

from . import views

urlpatterns = [
    # Closing
    path("api/closing/preview/", views.closing_preview, name="closing_preview"),
    path("api/closing/close/", views.close_month, name="close_month"),
    path("api/closing/reopen/", views.reopen_month, name="reopen_month"),
    path("api/closing/history/", views.closing_history, name="closing_history"),

    # Partners
    path("api/partners/summary/", views.partner_summary, name="partner_summary"),

    # Dashboard
    path("api/dashboard/stats/", views.dashboard_stats, name="dashboard_stats"),
    path("api/dashboard/yearly/", views.dashboard_yearly, name="dashboard_yearly"),

    # Health check
    path("healthz", views.healthz, name="healthz"),
]
