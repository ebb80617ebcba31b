"""Service for economic index points (inflation prints, FX quotes).

Index points are append/upsert only. A value entered by hand is never
replaced by a scraped one unless the operator forces it.
"""

import logging
from dataclasses import dataclass
from datetime import date

from sqlalchemy.orm import Session

from models import IndexPoint
from schemas.index_point import IndexPointCreate
from services.exchange_rate_service import is_fx_index
from utils.dates import month_start

logger = logging.getLogger(__name__)


@dataclass
class UpsertOutcome:
    """What an upsert did to the stored series."""

    point: IndexPoint
    created: bool = False
    changed: bool = False
    kept_manual: bool = False


class IndexPointService:
    """Upserts and queries index points."""

    @staticmethod
    def normalize_date(index_type: str, value: date) -> date:
        """Monthly series live on the first of the month; FX quotes keep their day."""
        if is_fx_index(index_type):
            return value
        return month_start(value)

    @staticmethod
    def upsert(db: Session, data: IndexPointCreate, force: bool = False) -> UpsertOutcome:
        """Insert or update the point for (type, normalized date).

        A scraped value (``is_manual=False``) does not overwrite a manual one
        unless ``force`` is set. ``changed`` tells the caller whether
        dependent schedules need regeneration.
        """
        index_type = data.type.upper()
        day = IndexPointService.normalize_date(index_type, data.date)

        existing = db.query(IndexPoint).filter_by(type=index_type, date=day).first()
        if existing is None:
            point = IndexPoint(
                type=index_type,
                date=day,
                value=data.value,
                interannual_value=data.interannual_value,
                is_manual=data.is_manual,
            )
            db.add(point)
            db.flush()
            logger.info("Created %s point for %s: %s", index_type, day, data.value)
            return UpsertOutcome(point=point, created=True, changed=True)

        if existing.is_manual and not data.is_manual and not force:
            logger.info(
                "Keeping manual %s value for %s (%s); ignoring scraped %s",
                index_type,
                day,
                existing.value,
                data.value,
            )
            return UpsertOutcome(point=existing, kept_manual=True)

        changed = existing.value != data.value
        existing.value = data.value
        if data.interannual_value is not None:
            existing.interannual_value = data.interannual_value
        existing.is_manual = data.is_manual
        db.flush()
        if changed:
            logger.info("Updated %s point for %s: %s", index_type, day, data.value)
        return UpsertOutcome(point=existing, changed=changed)

    @staticmethod
    def list_points(
        db: Session,
        index_type: str,
        start: date | None = None,
        end: date | None = None,
        limit: int | None = None,
    ) -> list[IndexPoint]:
        """Points of one series, newest first."""
        query = db.query(IndexPoint).filter_by(type=index_type.upper())
        if start is not None:
            query = query.filter(IndexPoint.date >= start)
        if end is not None:
            query = query.filter(IndexPoint.date <= end)
        query = query.order_by(IndexPoint.date.desc())
        if limit is not None:
            query = query.limit(limit)
        return query.all()

    @staticmethod
    def latest(db: Session, index_type: str) -> IndexPoint | None:
        return (
            db.query(IndexPoint)
            .filter_by(type=index_type.upper())
            .order_by(IndexPoint.date.desc())
            .first()
        )

    @staticmethod
    def delete_point(db: Session, point_id: str) -> str:
        """Delete a point and return its series type.

        Raises:
            ValueError: If the point does not exist.
        """
        point = db.get(IndexPoint, point_id)
        if point is None:
            raise ValueError(f"Index point not found: {point_id}")
        index_type = point.type
        logger.info("Deleting %s point for %s", index_type, point.date)
        db.delete(point)
        db.flush()
        return index_type
