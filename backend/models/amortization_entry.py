"""AmortizationEntry model - one partial principal repayment of a custom schedule."""

from datetime import datetime, timezone

from sqlalchemy import CheckConstraint, Column, Date, DateTime, ForeignKey, Numeric, String, UniqueConstraint
from sqlalchemy.orm import relationship

from database import Base
from models.utils import generate_uuid


class AmortizationEntry(Base):
    """A (date, percentage of original principal) pair for CUSTOM_SCHEDULE instruments."""

    __tablename__ = "amortization_entries"
    __table_args__ = (
        UniqueConstraint("instrument_id", "payment_date", name="uq_amortization_entry_instrument_date"),
        CheckConstraint("percentage > 0", name="ck_amortization_entry_percentage_positive"),
    )

    id = Column(String(36), primary_key=True, default=generate_uuid)
    instrument_id = Column(String(36), ForeignKey("instruments.id"), nullable=False, index=True)
    payment_date = Column(Date, nullable=False)
    percentage = Column(Numeric(10, 6), nullable=False)  # of original principal, in %
    created_at = Column(DateTime, default=lambda: datetime.now(timezone.utc))

    # Relationships
    instrument = relationship("Instrument", back_populates="amortization_entries")
