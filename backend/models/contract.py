"""Contract model - a rental agreement."""

from datetime import datetime, timezone

from sqlalchemy import CheckConstraint, Column, Date, DateTime, Integer, Numeric, String
from sqlalchemy.orm import relationship

from database import Base
from models.utils import generate_uuid


class Contract(Base):
    """A rental contract.

    ``adjustment_type`` selects which of ``adjustment_rate`` (fixed
    percentage) or ``index_type`` (index-linked) applies.
    """

    __tablename__ = "contracts"
    __table_args__ = (
        CheckConstraint("duration_months > 0", name="ck_contract_duration_positive"),
        CheckConstraint("adjustment_frequency > 0", name="ck_contract_adjustment_frequency_positive"),
        CheckConstraint("initial_rent >= 0", name="ck_contract_initial_rent_non_negative"),
    )

    id = Column(String(36), primary_key=True, default=generate_uuid)
    property_name = Column(String, nullable=False)
    tenant_name = Column(String, nullable=True)
    start_date = Column(Date, nullable=False)
    duration_months = Column(Integer, nullable=False)
    initial_rent = Column(Numeric(18, 2), nullable=False)
    currency = Column(String(3), nullable=False)
    adjustment_type = Column(String, nullable=False)  # "INDEX_LINKED" / "FIXED_PERCENTAGE"
    adjustment_frequency = Column(Integer, nullable=False)
    adjustment_rate = Column(Numeric(10, 6), nullable=True)  # in %, fixed-percentage contracts
    index_type = Column(String, nullable=True)  # e.g. "IPC", index-linked contracts
    created_at = Column(DateTime, default=lambda: datetime.now(timezone.utc))
    updated_at = Column(
        DateTime,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

    # Relationships
    rental_cashflows = relationship(
        "RentalCashflow",
        back_populates="contract",
        cascade="all, delete-orphan",
        order_by="RentalCashflow.month_index",
    )
