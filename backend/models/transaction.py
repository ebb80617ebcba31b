"""Transaction model - a BUY or SELL trade of an instrument."""

from datetime import datetime, timezone
from decimal import Decimal

from sqlalchemy import CheckConstraint, Column, Date, DateTime, ForeignKey, Numeric, String
from sqlalchemy.orm import relationship

from database import Base
from models.utils import generate_uuid


class Transaction(Base):
    """A trade. The only source fact the FIFO matcher consumes.

    Editing or deleting a transaction forces a full re-match of its
    instrument; derived lots and gains are never adjusted in place.
    """

    __tablename__ = "transactions"
    __table_args__ = (
        CheckConstraint("quantity > 0", name="ck_transaction_quantity_positive"),
        CheckConstraint("price >= 0", name="ck_transaction_price_non_negative"),
        CheckConstraint("commission >= 0", name="ck_transaction_commission_non_negative"),
    )

    id = Column(String(36), primary_key=True, default=generate_uuid)
    instrument_id = Column(String(36), ForeignKey("instruments.id"), nullable=False, index=True)
    trade_date = Column(Date, nullable=False, index=True)
    side = Column(String, nullable=False)  # "BUY" / "SELL"
    quantity = Column(Numeric(18, 8), nullable=False)
    price = Column(Numeric(18, 6), nullable=False)
    commission = Column(Numeric(18, 6), nullable=False, default=Decimal("0"))
    currency = Column(String(3), nullable=False)
    notes = Column(String, nullable=True)
    created_at = Column(DateTime, default=lambda: datetime.now(timezone.utc))
    updated_at = Column(
        DateTime,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

    # Relationships
    instrument = relationship("Instrument", back_populates="transactions")
