"""RealizedGain model - a SELL matched against earlier BUYs (derived)."""

from datetime import date, datetime, timezone

from sqlalchemy import Column, Date, DateTime, ForeignKey, Numeric, String
from sqlalchemy.orm import relationship

from database import Base
from models.utils import generate_uuid


class RealizedGain(Base):
    """One realized-gain event per SELL transaction."""

    __tablename__ = "realized_gains"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    instrument_id = Column(String(36), ForeignKey("instruments.id"), nullable=False, index=True)
    transaction_id = Column(String(36), nullable=True)
    sell_date = Column(Date, nullable=False, index=True)
    buy_dates = Column(String, nullable=False)  # comma-separated ISO dates
    quantity = Column(Numeric(18, 8), nullable=False)
    buy_unit_cost = Column(Numeric(18, 6), nullable=False)
    sell_unit_price = Column(Numeric(18, 6), nullable=False)
    buy_commission = Column(Numeric(18, 2), nullable=False)
    sell_commission = Column(Numeric(18, 2), nullable=False)
    cost_basis = Column(Numeric(18, 2), nullable=False)
    proceeds = Column(Numeric(18, 2), nullable=False)
    gain = Column(Numeric(18, 2), nullable=False)
    gain_percent = Column(Numeric(12, 4), nullable=False)
    currency = Column(String(3), nullable=False)
    created_at = Column(DateTime, default=lambda: datetime.now(timezone.utc))

    # Relationships
    instrument = relationship("Instrument", back_populates="realized_gains")

    @property
    def matched_buy_dates(self) -> list[date]:
        """Buy dates of the lots this sale consumed, oldest first."""
        if not self.buy_dates:
            return []
        return [date.fromisoformat(d) for d in self.buy_dates.split(",")]
