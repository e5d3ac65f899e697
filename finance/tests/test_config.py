from decimal import Decimal

import pytest
from django.core.exceptions import ImproperlyConfigured

from finance.config import DEFAULT_PARTNERS, FinanceConfig, Partner, PartnerRole


def test_from_settings_reads_droneflow_dict(settings):
    settings.DRONEFLOW = {
        "PARTNER_SERVICE_RATE": "120",
        "FIXED_MONTHLY_SALARY": "4500.50",
        "TABLES": {"services": "servicos"},
    }

    config = FinanceConfig.from_settings()

    assert config.partner_service_rate == Decimal("120")
    assert config.fixed_monthly_salary == Decimal("4500.50")
    assert config.partners == DEFAULT_PARTNERS
    assert config.table("services") == "servicos"
    assert config.table("closed_months") == "closed_months"


def test_roster_roles():
    config = FinanceConfig()

    assert [p.slot for p in config.deduction_partners] == ["Kaká", "Patrick"]
    assert config.reserve_partner.full_name == "Fundo de Reserva"
    assert [p.slot for p in config.partners if p.salaried] == ["Geraldo"]


def test_roster_must_have_four_slots():
    with pytest.raises(ImproperlyConfigured):
        FinanceConfig(partners=DEFAULT_PARTNERS[:3])


def test_invalid_partner_role_in_settings(settings):
    settings.DRONEFLOW = {"PARTNERS": [{"slot": "X", "role": "investor"}] * 4}

    with pytest.raises(ImproperlyConfigured):
        FinanceConfig.from_settings()


def test_unknown_collection():
    with pytest.raises(ImproperlyConfigured):
        FinanceConfig().table("agenda")


def test_single_salaried_partner():
    partners = DEFAULT_PARTNERS[:3] + (Partner("Outro", "Outro", PartnerRole.TECHNICAL),)

    with pytest.raises(ImproperlyConfigured):
        FinanceConfig(partners=partners)
