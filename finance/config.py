"""Business configuration for the closing engine.

The values come from ``settings.DRONEFLOW`` but are handed to the
aggregator, calculator and closing service as an explicit
``FinanceConfig`` so tests can build their own.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum

from django.conf import settings
from django.core.exceptions import ImproperlyConfigured

ROSTER_SIZE = 4


class PartnerRole(str, Enum):
    TECHNICAL = "technical"            # Responsável técnico, recebe salário fixo
    CLIENT_PARTNER = "client_partner"  # Sócio/cliente, sofre dedução por hectare
    RESERVE = "reserve"                # Fundo de reserva institucional


@dataclass(frozen=True)
class Partner:
    slot: str
    full_name: str
    role: PartnerRole

    @property
    def deduction_eligible(self) -> bool:
        return self.role is PartnerRole.CLIENT_PARTNER

    @property
    def salaried(self) -> bool:
        return self.role is PartnerRole.TECHNICAL


DEFAULT_PARTNERS = (
    Partner("Geraldo", "Geraldo Júnior", PartnerRole.TECHNICAL),
    Partner("Kaká", "Kaká Cardoso", PartnerRole.CLIENT_PARTNER),
    Partner("Patrick", "Patrick Brauner", PartnerRole.CLIENT_PARTNER),
    Partner("Reserva", "Fundo de Reserva", PartnerRole.RESERVE),
)

DEFAULT_TABLES = {
    "clients": "clients",
    "services": "services",
    "expenses": "expenses",
    "closed_months": "closed_months",
}


@dataclass(frozen=True)
class FinanceConfig:
    partner_service_rate: Decimal = Decimal("100")
    fixed_monthly_salary: Decimal = Decimal("5000")
    partners: tuple[Partner, ...] = DEFAULT_PARTNERS
    tables: dict = field(default_factory=lambda: dict(DEFAULT_TABLES))

    def __post_init__(self):
        if len(self.partners) != ROSTER_SIZE:
            raise ImproperlyConfigured(
                f"The partner roster must have {ROSTER_SIZE} slots, got {len(self.partners)}"
            )
        slots = [p.slot for p in self.partners]
        if len(set(slots)) != len(slots):
            raise ImproperlyConfigured(f"Duplicate partner slots in roster: {slots}")
        if sum(1 for p in self.partners if p.salaried) > 1:
            raise ImproperlyConfigured("Only one partner can carry the fixed salary")

    @property
    def deduction_partners(self) -> tuple[Partner, ...]:
        return tuple(p for p in self.partners if p.deduction_eligible)

    @property
    def reserve_partner(self) -> Partner | None:
        return next((p for p in self.partners if p.role is PartnerRole.RESERVE), None)

    def table(self, collection: str) -> str:
        try:
            return self.tables[collection]
        except KeyError as exc:
            raise ImproperlyConfigured(f"Unknown ledger collection '{collection}'") from exc

    @classmethod
    def from_settings(cls) -> "FinanceConfig":
        """Build the config from ``settings.DRONEFLOW`` (missing keys keep the defaults)."""
        raw = getattr(settings, "DRONEFLOW", {}) or {}
        kwargs = {}
        if raw.get("PARTNER_SERVICE_RATE") is not None:
            kwargs["partner_service_rate"] = Decimal(str(raw["PARTNER_SERVICE_RATE"]))
        if raw.get("FIXED_MONTHLY_SALARY") is not None:
            kwargs["fixed_monthly_salary"] = Decimal(str(raw["FIXED_MONTHLY_SALARY"]))
        if raw.get("PARTNERS"):
            try:
                kwargs["partners"] = tuple(
                    Partner(p["slot"], p.get("full_name") or p["slot"], PartnerRole(p["role"]))
                    for p in raw["PARTNERS"]
                )
            except (KeyError, ValueError) as exc:
                raise ImproperlyConfigured(f"Invalid DRONEFLOW['PARTNERS'] entry: {exc}") from exc
        if raw.get("TABLES"):
            kwargs["tables"] = {**DEFAULT_TABLES, **raw["TABLES"]}
        return cls(**kwargs)
