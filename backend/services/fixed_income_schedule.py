"""Contractual cashflow schedules for bonds and treasuries.

Interest accrues with simple proportional accrual: every regular period earns
``coupon_rate × frequency_months / 12`` of the residual capital. Day-count
conventions (ACT/365, 30/360, leap years) are deliberately not modelled; a
short final period is scaled by its share of a full period's days.
"""

from collections import defaultdict
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from enum import Enum

from services.exceptions import InconsistentAmortizationSchedule
from utils.dates import add_months

ZERO = Decimal("0")
HUNDRED = Decimal("100")
TWELVE = Decimal("12")


class AssetType(str, Enum):
    """Kinds of instruments the tracker holds."""

    BOND = "BOND"
    TREASURY = "TREASURY"
    STOCK = "STOCK"
    ETF = "ETF"
    CEDEAR = "CEDEAR"
    CRYPTO = "CRYPTO"


FIXED_INCOME_TYPES = frozenset({AssetType.BOND, AssetType.TREASURY})


class AmortizationMode(str, Enum):
    """How principal is repaid."""

    BULLET = "BULLET"
    LINEAR = "LINEAR"
    CUSTOM_SCHEDULE = "CUSTOM_SCHEDULE"


class CashflowKind(str, Enum):
    INTEREST = "INTEREST"
    AMORTIZATION = "AMORTIZATION"


@dataclass(frozen=True)
class AmortizationStep:
    """Repay ``percentage`` % of the original principal on ``payment_date``."""

    payment_date: date
    percentage: Decimal


@dataclass(frozen=True)
class InstrumentTerms:
    """Everything the generator needs to know about an instrument."""

    ticker: str
    asset_type: AssetType
    currency: str
    emission_date: date | None = None
    maturity_date: date | None = None
    coupon_rate: Decimal = ZERO
    frequency_months: int | None = None
    amortization: AmortizationMode = AmortizationMode.BULLET
    face_value: Decimal = HUNDRED
    schedule: tuple[AmortizationStep, ...] = ()


@dataclass(frozen=True)
class CashflowRow:
    """One projected payment. ``residual_capital`` is measured after the event."""

    payment_date: date
    amount: Decimal
    currency: str
    kind: CashflowKind
    residual_capital: Decimal
    description: str = ""


def is_fixed_income(asset_type: AssetType | str) -> bool:
    return AssetType(asset_type) in FIXED_INCOME_TYPES


def coupon_dates(emission_date: date, maturity_date: date, frequency_months: int) -> list[date]:
    """Emission + k × frequency for k = 1.., capped by maturity.

    Dates are always computed from the emission date so end-of-month clamping
    never drifts (Jan 31 → Feb 28 → Mar 31). If the last regular date falls
    short of maturity, maturity is appended as a final short period.
    """
    dates = []
    k = 1
    while True:
        payment = add_months(emission_date, k * frequency_months)
        if payment > maturity_date:
            break
        dates.append(payment)
        k += 1
    if not dates or dates[-1] < maturity_date:
        dates.append(maturity_date)
    return dates


def _validate_terms(terms: InstrumentTerms) -> None:
    if terms.emission_date is None or terms.maturity_date is None:
        raise ValueError(f"{terms.ticker}: emission and maturity dates are required")
    if not terms.frequency_months or terms.frequency_months <= 0:
        raise ValueError(f"{terms.ticker}: payment frequency must be a positive number of months")
    if terms.maturity_date <= terms.emission_date:
        raise ValueError(f"{terms.ticker}: maturity must be after emission")
    if terms.coupon_rate < 0:
        raise ValueError(f"{terms.ticker}: coupon rate cannot be negative")
    if terms.face_value <= 0:
        raise ValueError(f"{terms.ticker}: face value must be positive")


def _amortization_percentages(
    terms: InstrumentTerms, coupons: list[date]
) -> dict[date, Decimal]:
    """Percent of original principal repaid on each date."""
    mode = AmortizationMode(terms.amortization)

    if mode == AmortizationMode.BULLET:
        return {terms.maturity_date: HUNDRED}

    if mode == AmortizationMode.LINEAR:
        share = HUNDRED / len(coupons)
        percentages = {d: share for d in coupons[:-1]}
        percentages[coupons[-1]] = HUNDRED - share * (len(coupons) - 1)
        return percentages

    if not terms.schedule:
        raise InconsistentAmortizationSchedule(
            f"{terms.ticker}: CUSTOM_SCHEDULE requires at least one amortization entry",
            total=ZERO,
        )

    total = sum((step.percentage for step in terms.schedule), ZERO)
    if total != HUNDRED:
        raise InconsistentAmortizationSchedule(
            f"{terms.ticker}: amortization entries sum to {total}%, expected 100%",
            total=total,
        )

    coupon_by_month = {(d.year, d.month): d for d in coupons}
    percentages: dict[date, Decimal] = defaultdict(lambda: ZERO)
    for step in terms.schedule:
        if step.percentage <= 0:
            raise InconsistentAmortizationSchedule(
                f"{terms.ticker}: amortization entry on {step.payment_date} must be positive",
                total=total,
            )
        if not terms.emission_date < step.payment_date <= terms.maturity_date:
            raise InconsistentAmortizationSchedule(
                f"{terms.ticker}: amortization entry on {step.payment_date} "
                f"is outside {terms.emission_date}..{terms.maturity_date}",
                total=total,
            )
        # Entries in a coupon month are paid together with that coupon
        key = (step.payment_date.year, step.payment_date.month)
        percentages[coupon_by_month.get(key, step.payment_date)] += step.percentage
    return dict(percentages)


def _accrual_fraction(previous: date, payment: date, frequency_months: int, regular: bool) -> Decimal:
    """Fraction of a year a period earns."""
    full = Decimal(frequency_months) / TWELVE
    if regular:
        return full
    full_days = (add_months(previous, frequency_months) - previous).days
    return full * Decimal((payment - previous).days) / Decimal(full_days)


def generate_fixed_income_schedule(terms: InstrumentTerms) -> list[CashflowRow]:
    """Build every coupon and principal payment from emission to maturity.

    Interest on a date is computed on the residual capital before that
    date's amortization; the residual is reduced right after, so every later
    coupon uses the reduced base.

    Returns an empty list for equity-like instruments, which have no
    contractual cashflows.

    Raises:
        ValueError: Required fixed-income terms are missing or invalid.
        InconsistentAmortizationSchedule: CUSTOM_SCHEDULE entries do not sum
            to 100% or fall outside the instrument's life.
    """
    if not is_fixed_income(terms.asset_type):
        return []
    _validate_terms(terms)

    coupons = coupon_dates(terms.emission_date, terms.maturity_date, terms.frequency_months)
    regular_coupons = set(coupons)
    if add_months(terms.emission_date, len(coupons) * terms.frequency_months) != coupons[-1]:
        regular_coupons.discard(coupons[-1])

    amortizations = _amortization_percentages(terms, coupons)
    last_amortization = max(amortizations)
    coupon_set = set(coupons)
    rate = terms.coupon_rate / HUNDRED

    rows: list[CashflowRow] = []
    residual = terms.face_value
    previous_coupon = terms.emission_date

    for payment in sorted(coupon_set | set(amortizations)):
        if payment in coupon_set:
            fraction = _accrual_fraction(
                previous_coupon, payment, terms.frequency_months, payment in regular_coupons
            )
            previous_coupon = payment
            interest = residual * rate * fraction
            if interest > 0:
                rows.append(
                    CashflowRow(
                        payment_date=payment,
                        amount=interest,
                        currency=terms.currency,
                        kind=CashflowKind.INTEREST,
                        residual_capital=residual,
                        description=f"Interest ({residual / terms.face_value * HUNDRED:.2f}% residual)",
                    )
                )

        percentage = amortizations.get(payment)
        if percentage is None:
            continue
        if payment == last_amortization:
            amount = residual
        else:
            amount = min(terms.face_value * percentage / HUNDRED, residual)
        residual -= amount
        rows.append(
            CashflowRow(
                payment_date=payment,
                amount=amount,
                currency=terms.currency,
                kind=CashflowKind.AMORTIZATION,
                residual_capital=residual,
                description=f"Amortization ({percentage:.2f}%)",
            )
        )

    return rows
