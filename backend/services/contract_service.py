"""Rental contract management service."""

import logging

from sqlalchemy.orm import Session

from models import Contract, RentalCashflow
from schemas.contract import ContractCreate, ContractUpdate
from services.regeneration_service import ContractScope, RegenerationService
from services.rental_schedule import AdjustmentType

logger = logging.getLogger(__name__)


class ContractService:
    """Service for rental contract CRUD.

    Creating or editing a contract regenerates its monthly schedule in the
    same transaction.
    """

    @staticmethod
    def list_contracts(db: Session) -> list[Contract]:
        return db.query(Contract).order_by(Contract.start_date, Contract.property_name).all()

    @staticmethod
    def create_contract(db: Session, data: ContractCreate) -> Contract:
        contract = Contract(
            property_name=data.property_name,
            tenant_name=data.tenant_name,
            start_date=data.start_date,
            duration_months=data.duration_months,
            initial_rent=data.initial_rent,
            currency=data.currency,
            adjustment_type=data.adjustment_type.value,
            adjustment_frequency=data.adjustment_frequency,
            adjustment_rate=data.adjustment_rate,
            index_type=data.index_type,
        )
        db.add(contract)
        db.flush()

        RegenerationService().regenerate_or_raise(db, ContractScope(contract.id))
        logger.info("Contract created: %s (id=%s)", contract.property_name, contract.id)
        return contract

    @staticmethod
    def update_contract(db: Session, contract: Contract, data: ContractUpdate) -> Contract:
        """Apply term changes and rebuild the schedule.

        An explicit null is ignored for required terms.

        Raises:
            ValueError: If the resulting terms are incomplete (an index-linked
                contract without an index type, or a fixed-percentage one
                without a rate).
        """
        columns = Contract.__table__.c
        for key, value in data.model_dump(exclude_unset=True).items():
            if value is None and not columns[key].nullable:
                continue
            if key == "adjustment_type":
                value = value.value
            setattr(contract, key, value)

        if contract.adjustment_type == AdjustmentType.INDEX_LINKED.value and not contract.index_type:
            raise ValueError("index_type is required for INDEX_LINKED contracts")
        if contract.adjustment_type == AdjustmentType.FIXED_PERCENTAGE.value and contract.adjustment_rate is None:
            raise ValueError("adjustment_rate is required for FIXED_PERCENTAGE contracts")
        db.flush()

        RegenerationService().regenerate_or_raise(db, ContractScope(contract.id))
        logger.info("Contract updated: %s (id=%s)", contract.property_name, contract.id)
        return contract

    @staticmethod
    def delete_contract(db: Session, contract: Contract) -> None:
        logger.info("Deleting contract %s (id=%s)", contract.property_name, contract.id)
        db.delete(contract)
        db.flush()
        RegenerationService.forget("contract", contract.id)

    @staticmethod
    def list_cashflows(db: Session, contract_id: str) -> list[RentalCashflow]:
        return (
            db.query(RentalCashflow)
            .filter(RentalCashflow.contract_id == contract_id)
            .order_by(RentalCashflow.month_index)
            .all()
        )
