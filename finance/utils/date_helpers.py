from __future__ import annotations

from calendar import monthrange
from dataclasses import dataclass
from datetime import date, datetime

from dateutil.parser import isoparse
from dateutil.relativedelta import relativedelta

MONTH_NAMES_PT = (
    "Janeiro", "Fevereiro", "Março", "Abril", "Maio", "Junho",
    "Julho", "Agosto", "Setembro", "Outubro", "Novembro", "Dezembro",
)


def parse_day(value) -> date:
    """Accept a ``date``, ``datetime`` or ISO string ('2024-03-05' or full timestamp)."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return isoparse(str(value)).date()


@dataclass(frozen=True, order=True)
class MonthKey:
    """Calendar month used as the closing key.

    Ordering is chronological (year first). The archive string form is
    ``"M/YYYY"`` with an unpadded month, produced only by ``str()``.
    """

    year: int
    month: int

    def __post_init__(self):
        if not 1 <= self.month <= 12:
            raise ValueError(f"Invalid month: {self.month}")
        if self.year < 1:
            raise ValueError(f"Invalid year: {self.year}")

    def __str__(self) -> str:
        return f"{self.month}/{self.year}"

    @classmethod
    def parse(cls, value: "str | MonthKey") -> "MonthKey":
        """Parse ``"M/YYYY"`` (padded months are tolerated)."""
        if isinstance(value, MonthKey):
            return value
        try:
            month_str, year_str = str(value).strip().split("/")
            return cls(year=int(year_str), month=int(month_str))
        except (TypeError, ValueError) as exc:
            raise ValueError(f"Invalid month key: {value!r}") from exc

    @classmethod
    def of(cls, day: date) -> "MonthKey":
        return cls(year=day.year, month=day.month)

    @property
    def first_day(self) -> date:
        return date(self.year, self.month, 1)

    @property
    def last_day(self) -> date:
        return date(self.year, self.month, monthrange(self.year, self.month)[1])

    @property
    def label(self) -> str:
        """pt-BR label, e.g. 'Março 2024'."""
        return f"{MONTH_NAMES_PT[self.month - 1]} {self.year}"

    def contains(self, day) -> bool:
        return self.first_day <= parse_day(day) <= self.last_day

    def next(self) -> "MonthKey":
        return MonthKey.of(self.first_day + relativedelta(months=1))


def months_of_year(year: int) -> list[MonthKey]:
    return [MonthKey(year=year, month=m) for m in range(1, 13)]
