"""PositionLot model - an open lot left after FIFO matching (derived)."""

from datetime import datetime, timezone
from decimal import Decimal

from sqlalchemy import CheckConstraint, Column, Date, DateTime, ForeignKey, Numeric, String
from sqlalchemy.orm import relationship

from database import Base
from models.utils import generate_uuid


class PositionLot(Base):
    """Unsold remainder of a BUY transaction.

    Rows are replaced wholesale by the regeneration service every time the
    instrument's transactions change.
    """

    __tablename__ = "position_lots"
    __table_args__ = (
        CheckConstraint("quantity > 0", name="ck_position_lot_quantity_positive"),
    )

    id = Column(String(36), primary_key=True, default=generate_uuid)
    instrument_id = Column(String(36), ForeignKey("instruments.id"), nullable=False, index=True)
    transaction_id = Column(String(36), nullable=True)
    acquired_on = Column(Date, nullable=False)
    quantity = Column(Numeric(18, 8), nullable=False)
    original_quantity = Column(Numeric(18, 8), nullable=False)
    unit_cost = Column(Numeric(18, 6), nullable=False)
    commission = Column(Numeric(18, 2), nullable=False, default=Decimal("0"))
    currency = Column(String(3), nullable=False)
    created_at = Column(DateTime, default=lambda: datetime.now(timezone.utc))

    # Relationships
    instrument = relationship("Instrument", back_populates="position_lots")
