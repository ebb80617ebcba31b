"""Transaction API endpoints."""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from api.helpers import committing, get_or_404
from database import get_db
from models import Transaction
from schemas.instrument import TransactionResponse, TransactionUpdate
from services.instrument_service import InstrumentService

router = APIRouter(prefix="/api/transactions", tags=["transactions"])


@router.put("/{transaction_id}", response_model=TransactionResponse)
def update_transaction(
    transaction_id: str,
    data: TransactionUpdate,
    db: Session = Depends(get_db),
):
    """Edit a trade. Its instrument is re-matched from the full history."""
    tx = get_or_404(db, Transaction, transaction_id, "Transaction not found")
    with committing(db):
        InstrumentService.update_transaction(db, tx, data)
    db.refresh(tx)
    return tx


@router.delete("/{transaction_id}", status_code=204)
def delete_transaction(transaction_id: str, db: Session = Depends(get_db)):
    """Delete a trade. Rejected with 422 if later SELLs depend on it."""
    tx = get_or_404(db, Transaction, transaction_id, "Transaction not found")
    with committing(db):
        InstrumentService.delete_transaction(db, tx)
