"""Test fixtures and sample data."""
import pytest
from datetime import date
from decimal import Decimal

from sqlalchemy.orm import Session

from models import AmortizationEntry, Contract, IndexPoint, Instrument, Transaction


def add_index_points(
    db: Session,
    index_type: str,
    values: dict[date, Decimal | str],
    is_manual: bool = False,
) -> list[IndexPoint]:
    """Insert one IndexPoint per (date, value) pair."""
    points = [
        IndexPoint(type=index_type, date=d, value=Decimal(str(v)), is_manual=is_manual)
        for d, v in values.items()
    ]
    db.add_all(points)
    db.flush()
    return points


def add_trade(
    db: Session,
    instrument: Instrument,
    trade_date: date,
    side: str,
    quantity: str,
    price: str,
    commission: str = "0",
    currency: str | None = None,
) -> Transaction:
    """Insert a transaction without regenerating anything."""
    tx = Transaction(
        instrument_id=instrument.id,
        trade_date=trade_date,
        side=side,
        quantity=Decimal(quantity),
        price=Decimal(price),
        commission=Decimal(commission),
        currency=currency or instrument.currency,
    )
    db.add(tx)
    db.flush()
    return tx


@pytest.fixture
def equity(db: Session) -> Instrument:
    """An ETF with no contractual cashflows."""
    instrument = Instrument(
        ticker="SPY",
        name="SPDR S&P 500",
        asset_type="ETF",
        currency="USD",
    )
    db.add(instrument)
    db.flush()
    return instrument


@pytest.fixture
def bond(db: Session) -> Instrument:
    """A 2-year semiannual 10% bullet bond with face value 1000."""
    instrument = Instrument(
        ticker="BOND26",
        name="Test Bond 2026",
        asset_type="BOND",
        currency="USD",
        emission_date=date(2024, 1, 15),
        maturity_date=date(2026, 1, 15),
        coupon_rate=Decimal("10"),
        frequency_months=6,
        amortization="BULLET",
        face_value=Decimal("1000"),
    )
    db.add(instrument)
    db.flush()
    return instrument


@pytest.fixture
def custom_bond(db: Session) -> Instrument:
    """A 1-year semiannual 8% bond amortizing 50% / 50%."""
    instrument = Instrument(
        ticker="AMORT25",
        name="Amortizing Bond",
        asset_type="BOND",
        currency="USD",
        emission_date=date(2024, 1, 1),
        maturity_date=date(2025, 1, 1),
        coupon_rate=Decimal("8"),
        frequency_months=6,
        amortization="CUSTOM_SCHEDULE",
        face_value=Decimal("1000"),
    )
    instrument.amortization_entries = [
        AmortizationEntry(payment_date=date(2024, 7, 1), percentage=Decimal("50")),
        AmortizationEntry(payment_date=date(2025, 1, 1), percentage=Decimal("50")),
    ]
    db.add(instrument)
    db.flush()
    return instrument


@pytest.fixture
def ipc_contract(db: Session) -> Contract:
    """A 12-month ARS contract adjusted quarterly by IPC."""
    contract = Contract(
        property_name="Depto Palermo",
        tenant_name="J. Perez",
        start_date=date(2023, 1, 1),
        duration_months=12,
        initial_rent=Decimal("1000"),
        currency="ARS",
        adjustment_type="INDEX_LINKED",
        adjustment_frequency=3,
        index_type="IPC",
    )
    db.add(contract)
    db.flush()
    return contract


@pytest.fixture
def fixed_contract(db: Session) -> Contract:
    """A 6-month USD contract raised 5% every 3 months."""
    contract = Contract(
        property_name="Local Centro",
        start_date=date(2023, 1, 1),
        duration_months=6,
        initial_rent=Decimal("500"),
        currency="USD",
        adjustment_type="FIXED_PERCENTAGE",
        adjustment_frequency=3,
        adjustment_rate=Decimal("5"),
    )
    db.add(contract)
    db.flush()
    return contract


@pytest.fixture
def ipc_points(db: Session) -> list[IndexPoint]:
    """IPC prints for Jan-Mar 2023: 2%, 3%, 1%."""
    return add_index_points(
        db,
        "IPC",
        {date(2023, 1, 1): "2", date(2023, 2, 1): "3", date(2023, 3, 1): "1"},
    )


@pytest.fixture
def usd_ars_points(db: Session) -> list[IndexPoint]:
    """USD/ARS quotes on the first of Jan-Apr 2023: 100, 110, 120, 125."""
    return add_index_points(
        db,
        "FX_USD_ARS",
        {
            date(2023, 1, 1): "100",
            date(2023, 2, 1): "110",
            date(2023, 3, 1): "120",
            date(2023, 4, 1): "125",
        },
    )
