"""Shared API helpers for route handlers.

Common query patterns and error mapping used across multiple route files.
"""

import logging
from contextlib import contextmanager
from typing import Iterator, TypeVar

from fastapi import HTTPException
from sqlalchemy.orm import Session

from database import Base
from services.exceptions import EngineError, RegenerationFailure

T = TypeVar("T", bound=Base)

logger = logging.getLogger(__name__)


def get_or_404(db: Session, model: type[T], entity_id: str, detail: str = "Not found") -> T:
    """Fetch a single entity by primary key or raise 404.

    Args:
        db: Database session.
        model: SQLAlchemy model class.
        entity_id: Primary key value.
        detail: Error message for the 404 response.

    Returns:
        The entity instance.

    Raises:
        HTTPException: 404 if the entity doesn't exist.
    """
    entity = db.query(model).filter(model.id == entity_id).first()
    if not entity:
        raise HTTPException(status_code=404, detail=detail)
    return entity


@contextmanager
def committing(db: Session) -> Iterator[None]:
    """Commit the mutation made inside the block, or roll it back.

    A mutation whose regeneration is rejected leaves the previous facts and
    derived rows untouched:

    - ``ValueError`` → 400
    - ``RegenerationFailure`` (another regeneration holds the entity) → 409
    - any other ``EngineError`` (oversold position, inconsistent
      amortization schedule, missing exchange rate) → 422
    """
    try:
        yield
        db.commit()
    except ValueError as e:
        db.rollback()
        raise HTTPException(status_code=400, detail=str(e))
    except RegenerationFailure as e:
        db.rollback()
        logger.warning("Mutation rolled back: %s", e)
        raise HTTPException(status_code=409, detail=str(e))
    except EngineError as e:
        db.rollback()
        logger.info("Mutation rejected: %s", e)
        raise HTTPException(status_code=422, detail=str(e))
