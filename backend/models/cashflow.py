"""Cashflow model - a projected coupon or principal payment (derived)."""

from datetime import datetime, timezone

from sqlalchemy import Column, Date, DateTime, ForeignKey, Integer, Numeric, String
from sqlalchemy.orm import relationship

from database import Base
from models.utils import generate_uuid


class Cashflow(Base):
    """A fixed-income schedule row.

    ``sequence`` keeps INTEREST before AMORTIZATION when both fall on the
    same payment date.
    """

    __tablename__ = "cashflows"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    instrument_id = Column(String(36), ForeignKey("instruments.id"), nullable=False, index=True)
    sequence = Column(Integer, nullable=False)
    payment_date = Column(Date, nullable=False, index=True)
    amount = Column(Numeric(18, 2), nullable=False)
    currency = Column(String(3), nullable=False)
    kind = Column(String, nullable=False)  # "INTEREST" / "AMORTIZATION"
    residual_capital = Column(Numeric(18, 2), nullable=False)
    description = Column(String, nullable=True)
    created_at = Column(DateTime, default=lambda: datetime.now(timezone.utc))

    # Relationships
    instrument = relationship("Instrument", back_populates="cashflows")
