"""Monthly cashflow schedules for indexed rental contracts.

Index prints are monthly percentage changes (``2.5`` means 2.5%) keyed by
the first day of the month they measure. Prints are published with a lag, so
an adjustment taking effect in month ``m`` can only use prints up to month
``m - 1``.

Two rules for index-linked adjustments are supported:

``COMPOUNDED`` (default)
    rent × ∏(1 + print/100) over every month since the previous adjustment,
    i.e. months ``m - frequency`` .. ``m - 1``.
``PRIOR_MONTH``
    rent × (1 + print(m - 1)/100).
"""

import logging
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from enum import Enum
from typing import Iterable, Optional, Union

from config import settings
from services.exchange_rate_service import CurrencyPair, ExchangeRateResolver
from utils.dates import add_months, month_start
from utils.money import as_percent

logger = logging.getLogger(__name__)

ONE = Decimal("1")
HUNDRED = Decimal("100")


class AdjustmentType(str, Enum):
    INDEX_LINKED = "INDEX_LINKED"
    FIXED_PERCENTAGE = "FIXED_PERCENTAGE"


class IndexCompounding(str, Enum):
    """Which index prints an index-linked adjustment multiplies in."""

    COMPOUNDED = "compounded"
    PRIOR_MONTH = "prior_month"


@dataclass(frozen=True)
class FixedPercentage:
    """Raise the rent by ``rate`` % at every adjustment."""

    rate: Decimal


@dataclass(frozen=True)
class IndexLinked:
    """Raise the rent by the published ``index_type`` prints."""

    index_type: str


Adjustment = Union[FixedPercentage, IndexLinked]


@dataclass(frozen=True)
class ContractTerms:
    start_date: date
    duration_months: int
    initial_rent: Decimal
    currency: str
    adjustment: Adjustment
    adjustment_frequency: int


@dataclass(frozen=True)
class RentalRow:
    """One covered month. Percentages are percent values (3.5 = 3.5%)."""

    month_index: int
    payment_date: date
    amount: Decimal
    currency: str
    amount_local: Decimal | None
    amount_reporting: Decimal | None
    index_monthly: Decimal | None
    adjustment_percent: Decimal | None
    inflation_accumulated: Decimal | None
    fx_rate: Decimal | None
    fx_rate_base: Decimal | None
    fx_rate_month_close: Decimal | None
    devaluation_accumulated: Decimal | None
    is_adjustment: bool
    is_provisional: bool


class IndexSeries:
    """Monthly prints of one index, keyed by first-of-month."""

    def __init__(self, index_type: str, prints: dict[date, Decimal] | None = None):
        self.index_type = index_type
        self._prints = {month_start(d): Decimal(v) for d, v in (prints or {}).items()}

    @classmethod
    def from_points(cls, index_type: str, points: Iterable) -> "IndexSeries":
        """Collect the points of ``index_type`` (objects with type/date/value)."""
        return cls(
            index_type,
            {p.date: p.value for p in points if p.type == index_type},
        )

    def get(self, month: date) -> Decimal | None:
        return self._prints.get(month_start(month))

    @property
    def latest_month(self) -> Optional[date]:
        return max(self._prints) if self._prints else None

    def __len__(self) -> int:
        return len(self._prints)


def inflation_index_for(adjustment: Adjustment) -> str:
    """The index a contract's accumulated inflation is measured with."""
    if isinstance(adjustment, IndexLinked):
        return adjustment.index_type
    return settings.DEFAULT_INFLATION_INDEX


def _index_factor(
    series: IndexSeries, months: list[date]
) -> tuple[Decimal, bool]:
    """Compounded growth over ``months``; missing prints count as 0%."""
    factor = ONE
    complete = True
    for month in months:
        value = series.get(month)
        if value is None:
            complete = False
            continue
        factor *= ONE + value / HUNDRED
    return factor, complete


def _adjustment_factor(
    terms: ContractTerms,
    series: IndexSeries,
    start: date,
    m: int,
    rule: IndexCompounding,
) -> tuple[Decimal, bool]:
    adjustment = terms.adjustment
    if isinstance(adjustment, FixedPercentage):
        return ONE + adjustment.rate / HUNDRED, True
    if isinstance(adjustment, IndexLinked):
        if rule == IndexCompounding.PRIOR_MONTH:
            window = [add_months(start, m - 1)]
        else:
            window = [add_months(start, k) for k in range(m - terms.adjustment_frequency, m)]
        return _index_factor(series, window)
    raise TypeError(f"Unknown adjustment: {adjustment!r}")


def _convert(
    fx: ExchangeRateResolver | None,
    amount: Decimal,
    from_currency: str,
    to_currency: str,
    on: date,
) -> Decimal | None:
    if from_currency.upper() == to_currency.upper():
        return amount
    if fx is None or not fx.has_quotes(CurrencyPair(from_currency.upper(), to_currency.upper())):
        return None
    return fx.convert(amount, from_currency, to_currency, on)


def generate_rental_schedule(
    terms: ContractTerms,
    inflation: IndexSeries,
    fx: ExchangeRateResolver | None = None,
    rule: IndexCompounding | str | None = None,
    local_currency: str | None = None,
    reporting_currency: str | None = None,
    reference_pair: str | CurrencyPair | None = None,
) -> list[RentalRow]:
    """Build one row per covered month, ``duration_months`` rows in total.

    Args:
        terms: Contract terms.
        inflation: Prints of the contract's inflation index (see
            :func:`inflation_index_for`).
        fx: Exchange rates for the normalized amounts and the devaluation
            column. Without quotes those fields are None.
        rule: Index-linked compounding rule; defaults to
            ``settings.INDEX_COMPOUNDING``.
        local_currency / reporting_currency: The two reporting currencies;
            default to the configured ones.
        reference_pair: Pair whose change measures devaluation; defaults to
            ``settings.FX_REFERENCE_PAIR``.

    Raises:
        ValueError: Non-positive duration or adjustment frequency, or a
            negative initial rent.
    """
    if terms.duration_months <= 0:
        raise ValueError("Contract duration must be a positive number of months")
    if terms.adjustment_frequency <= 0:
        raise ValueError("Adjustment frequency must be a positive number of months")
    if terms.initial_rent < 0:
        raise ValueError("Initial rent cannot be negative")

    rule = IndexCompounding(rule or settings.INDEX_COMPOUNDING)
    local_currency = local_currency or settings.LOCAL_CURRENCY
    reporting_currency = reporting_currency or settings.REPORTING_CURRENCY
    pair = CurrencyPair.parse(reference_pair or settings.FX_REFERENCE_PAIR)
    index_linked = isinstance(terms.adjustment, IndexLinked)

    start = month_start(terms.start_date)
    has_fx = fx is not None and fx.has_quotes(pair)
    fx_base = fx.rate(start, pair) if has_fx else None

    rows: list[RentalRow] = []
    rent = terms.initial_rent
    accumulated = ONE
    accumulated_known = True

    for m in range(terms.duration_months):
        payment_date = add_months(start, m)
        is_adjustment = m > 0 and m % terms.adjustment_frequency == 0

        adjustment_percent = None
        adjustment_complete = True
        if is_adjustment:
            factor, adjustment_complete = _adjustment_factor(terms, inflation, start, m, rule)
            rent = rent * factor
            adjustment_percent = as_percent(factor)

        inflation_accumulated = as_percent(accumulated) if accumulated_known else None

        fx_rate = fx_close = devaluation = None
        if has_fx:
            fx_rate = fx.rate(payment_date, pair)
            fx_close = fx.month_close_rate(payment_date, pair)
            # Devaluation stops where inflation data stops, keeping both
            # analytics columns on the same cutoff.
            if inflation_accumulated is not None:
                devaluation = as_percent(fx_rate / fx_base)

        index_monthly = inflation.get(payment_date)
        rows.append(
            RentalRow(
                month_index=m + 1,
                payment_date=payment_date,
                amount=rent,
                currency=terms.currency,
                amount_local=_convert(fx, rent, terms.currency, local_currency, payment_date),
                amount_reporting=_convert(fx, rent, terms.currency, reporting_currency, payment_date),
                index_monthly=index_monthly,
                adjustment_percent=adjustment_percent,
                inflation_accumulated=inflation_accumulated,
                fx_rate=fx_rate,
                fx_rate_base=fx_base,
                fx_rate_month_close=fx_close,
                devaluation_accumulated=devaluation,
                is_adjustment=is_adjustment,
                is_provisional=index_linked and not (accumulated_known and adjustment_complete),
            )
        )

        if index_monthly is None:
            accumulated_known = False
        else:
            accumulated *= ONE + index_monthly / HUNDRED

    if index_linked and rows and rows[-1].is_provisional:
        logger.debug(
            "Rental schedule from %s has provisional months (latest %s print: %s)",
            start,
            inflation.index_type,
            inflation.latest_month,
        )
    return rows
