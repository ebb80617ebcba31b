"""Explicit regeneration endpoint."""

import logging

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from database import get_db
from schemas.regeneration import RegenerationRequest, RegenerationResponse
from services.regeneration_service import RegenerationService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/regenerate", tags=["regeneration"])


@router.post("", response_model=RegenerationResponse)
def regenerate(request: RegenerationRequest, db: Session = Depends(get_db)):
    """
    Rebuild derived rows for a scope.

    Entities that fail keep their previous rows and are reported in
    ``failures``; the rest are committed.
    """
    result = RegenerationService().regenerate(db, request.to_scope())
    db.commit()
    return RegenerationResponse.from_result(result)
