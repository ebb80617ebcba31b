"""IndexPoint model - an inflation print or an exchange-rate quote."""

from datetime import datetime, timezone

from sqlalchemy import Boolean, Column, Date, DateTime, Numeric, String, UniqueConstraint

from database import Base
from models.utils import generate_uuid


class IndexPoint(Base):
    """A dated value of an economic series.

    Monthly series (``IPC``) are stored on the first of the month; FX series
    (``FX_USD_ARS``) keep the exact quote day. Manual points win over scraped
    ones unless an operator forces the overwrite.
    """

    __tablename__ = "index_points"
    __table_args__ = (
        UniqueConstraint("type", "date", name="uq_index_point_type_date"),
    )

    id = Column(String(36), primary_key=True, default=generate_uuid)
    type = Column(String, nullable=False, index=True)
    date = Column(Date, nullable=False, index=True)
    value = Column(Numeric(18, 6), nullable=False)
    interannual_value = Column(Numeric(18, 6), nullable=True)
    is_manual = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime, default=lambda: datetime.now(timezone.utc))
    updated_at = Column(
        DateTime,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )
