"""RentalCashflow model - one month of a rental contract (derived)."""

from datetime import datetime, timezone

from sqlalchemy import Boolean, Column, Date, DateTime, ForeignKey, Integer, Numeric, String, UniqueConstraint
from sqlalchemy.orm import relationship

from database import Base
from models.utils import generate_uuid


class RentalCashflow(Base):
    """Indexed rent for one covered month.

    Percentages (index, inflation, devaluation) are stored as percent values,
    e.g. ``3.5`` for 3.5%.
    """

    __tablename__ = "rental_cashflows"
    __table_args__ = (
        UniqueConstraint("contract_id", "month_index", name="uq_rental_cashflow_contract_month"),
    )

    id = Column(String(36), primary_key=True, default=generate_uuid)
    contract_id = Column(String(36), ForeignKey("contracts.id"), nullable=False, index=True)
    month_index = Column(Integer, nullable=False)  # 1-based
    payment_date = Column(Date, nullable=False)
    amount = Column(Numeric(18, 2), nullable=False)
    currency = Column(String(3), nullable=False)
    amount_local = Column(Numeric(18, 2), nullable=True)
    amount_reporting = Column(Numeric(18, 2), nullable=True)
    index_monthly = Column(Numeric(12, 6), nullable=True)
    adjustment_percent = Column(Numeric(12, 6), nullable=True)
    inflation_accumulated = Column(Numeric(12, 6), nullable=True)
    fx_rate = Column(Numeric(18, 6), nullable=True)
    fx_rate_base = Column(Numeric(18, 6), nullable=True)
    fx_rate_month_close = Column(Numeric(18, 6), nullable=True)
    devaluation_accumulated = Column(Numeric(12, 6), nullable=True)
    is_adjustment = Column(Boolean, nullable=False, default=False)
    is_provisional = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime, default=lambda: datetime.now(timezone.utc))

    # Relationships
    contract = relationship("Contract", back_populates="rental_cashflows")
