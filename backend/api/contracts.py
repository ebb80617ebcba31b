"""Rental contract API endpoints."""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from api.helpers import committing, get_or_404
from database import get_db
from models import Contract
from schemas.contract import (
    ContractCreate,
    ContractResponse,
    ContractUpdate,
    RentalCashflowResponse,
)
from services.contract_service import ContractService

router = APIRouter(prefix="/api/contracts", tags=["contracts"])


@router.get("", response_model=list[ContractResponse])
def list_contracts(db: Session = Depends(get_db)):
    return ContractService.list_contracts(db)


@router.post("", response_model=ContractResponse, status_code=201)
def create_contract(data: ContractCreate, db: Session = Depends(get_db)):
    """Create a contract and generate its monthly schedule."""
    with committing(db):
        contract = ContractService.create_contract(db, data)
    db.refresh(contract)
    return contract


@router.get("/{contract_id}", response_model=ContractResponse)
def get_contract(contract_id: str, db: Session = Depends(get_db)):
    return get_or_404(db, Contract, contract_id, "Contract not found")


@router.put("/{contract_id}", response_model=ContractResponse)
def update_contract(
    contract_id: str,
    data: ContractUpdate,
    db: Session = Depends(get_db),
):
    """Update contract terms. The monthly schedule is regenerated."""
    contract = get_or_404(db, Contract, contract_id, "Contract not found")
    with committing(db):
        ContractService.update_contract(db, contract, data)
    db.refresh(contract)
    return contract


@router.delete("/{contract_id}", status_code=204)
def delete_contract(contract_id: str, db: Session = Depends(get_db)):
    contract = get_or_404(db, Contract, contract_id, "Contract not found")
    with committing(db):
        ContractService.delete_contract(db, contract)


@router.get("/{contract_id}/cashflows", response_model=list[RentalCashflowResponse])
def get_contract_cashflows(contract_id: str, db: Session = Depends(get_db)):
    """One row per covered month, in month order."""
    get_or_404(db, Contract, contract_id, "Contract not found")
    return ContractService.list_cashflows(db, contract_id)
