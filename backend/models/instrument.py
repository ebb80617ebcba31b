"""Instrument model - a tradable holding (bond, treasury, ETF, stock, crypto)."""

from datetime import datetime, timezone
from decimal import Decimal

from sqlalchemy import CheckConstraint, Column, Date, DateTime, Integer, Numeric, String
from sqlalchemy.orm import relationship

from database import Base
from models.utils import generate_uuid


class Instrument(Base):
    """An instrument and, for fixed income, its contractual terms.

    Equity-like instruments (STOCK, ETF, CEDEAR, CRYPTO) leave the coupon and
    amortization fields empty; they only take part in FIFO matching.
    """

    __tablename__ = "instruments"
    __table_args__ = (
        CheckConstraint("coupon_rate >= 0", name="ck_instrument_coupon_rate_non_negative"),
        CheckConstraint("frequency_months > 0", name="ck_instrument_frequency_positive"),
        CheckConstraint("face_value > 0", name="ck_instrument_face_value_positive"),
    )

    id = Column(String(36), primary_key=True, default=generate_uuid)
    ticker = Column(String, nullable=False, unique=True)
    name = Column(String, nullable=True)
    asset_type = Column(String, nullable=False)  # BOND / TREASURY / STOCK / ETF / CEDEAR / CRYPTO
    currency = Column(String(3), nullable=False)
    emission_date = Column(Date, nullable=True)
    maturity_date = Column(Date, nullable=True)
    coupon_rate = Column(Numeric(10, 6), nullable=False, default=Decimal("0"))  # annual, in %
    frequency_months = Column(Integer, nullable=True)
    amortization = Column(String, nullable=False, default="BULLET")  # BULLET / LINEAR / CUSTOM_SCHEDULE
    face_value = Column(Numeric(18, 6), nullable=False, default=Decimal("100"))
    created_at = Column(DateTime, default=lambda: datetime.now(timezone.utc))
    updated_at = Column(
        DateTime,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

    # Relationships
    amortization_entries = relationship(
        "AmortizationEntry",
        back_populates="instrument",
        cascade="all, delete-orphan",
        order_by="AmortizationEntry.payment_date",
    )
    transactions = relationship(
        "Transaction", back_populates="instrument", cascade="all, delete-orphan"
    )
    cashflows = relationship("Cashflow", back_populates="instrument", cascade="all, delete-orphan")
    position_lots = relationship("PositionLot", back_populates="instrument", cascade="all, delete-orphan")
    realized_gains = relationship("RealizedGain", back_populates="instrument", cascade="all, delete-orphan")
