"""Instrument and transaction management service.

Every mutation flushes, then rebuilds the instrument's derived rows in the
same transaction. A rebuild that fails (an oversold position, an
inconsistent amortization schedule) raises so the API can roll the
mutation back.
"""

import logging

from sqlalchemy.orm import Session

from models import AmortizationEntry, Instrument, Transaction
from schemas.instrument import (
    InstrumentCreate,
    InstrumentUpdate,
    TransactionCreate,
    TransactionUpdate,
)
from services.regeneration_service import InstrumentScope, RegenerationService

logger = logging.getLogger(__name__)


class InstrumentService:
    """Service for instrument CRUD and the trades recorded against them."""

    @staticmethod
    def list_instruments(db: Session, asset_type: str | None = None) -> list[Instrument]:
        query = db.query(Instrument)
        if asset_type:
            query = query.filter(Instrument.asset_type == asset_type.upper())
        return query.order_by(Instrument.ticker).all()

    @staticmethod
    def get_by_ticker(db: Session, ticker: str) -> Instrument | None:
        return db.query(Instrument).filter(Instrument.ticker == ticker.upper()).first()

    @staticmethod
    def create_instrument(db: Session, data: InstrumentCreate) -> Instrument:
        """Create an instrument and generate its cashflow schedule.

        Raises:
            ValueError: If the ticker already exists or the terms are invalid.
            InconsistentAmortizationSchedule: If custom entries don't sum to 100%.
        """
        if InstrumentService.get_by_ticker(db, data.ticker):
            raise ValueError(f"Instrument with ticker '{data.ticker}' already exists")

        instrument = Instrument(
            ticker=data.ticker,
            name=data.name,
            asset_type=data.asset_type.value,
            currency=data.currency,
            emission_date=data.emission_date,
            maturity_date=data.maturity_date,
            coupon_rate=data.coupon_rate,
            frequency_months=data.frequency_months,
            amortization=data.amortization.value,
            face_value=data.face_value,
        )
        instrument.amortization_entries = [
            AmortizationEntry(payment_date=e.payment_date, percentage=e.percentage)
            for e in data.amortization_entries
        ]
        db.add(instrument)
        db.flush()

        RegenerationService().regenerate_or_raise(db, InstrumentScope(instrument.id))
        logger.info("Instrument created: %s (id=%s)", instrument.ticker, instrument.id)
        return instrument

    @staticmethod
    def update_instrument(db: Session, instrument: Instrument, data: InstrumentUpdate) -> Instrument:
        """Apply term changes and rebuild the schedule.

        Only fields present in the request are changed, and an explicit null
        is ignored for required terms. Sending ``amortization_entries``
        replaces the whole custom schedule.
        """
        columns = Instrument.__table__.c
        fields = data.model_dump(exclude_unset=True, exclude={"amortization_entries"})
        for key, value in fields.items():
            if value is None and not columns[key].nullable:
                continue
            if key == "amortization":
                value = value.value
            setattr(instrument, key, value)

        if data.amortization_entries is not None:
            # Old rows must be gone before new ones reuse their dates
            instrument.amortization_entries.clear()
            db.flush()
            instrument.amortization_entries = [
                AmortizationEntry(payment_date=e.payment_date, percentage=e.percentage)
                for e in data.amortization_entries
            ]
        db.flush()

        RegenerationService().regenerate_or_raise(db, InstrumentScope(instrument.id))
        logger.info("Instrument updated: %s (id=%s)", instrument.ticker, instrument.id)
        return instrument

    @staticmethod
    def delete_instrument(db: Session, instrument: Instrument) -> None:
        """Delete an instrument with its trades and every derived row."""
        logger.info("Deleting instrument %s (id=%s)", instrument.ticker, instrument.id)
        db.delete(instrument)
        db.flush()
        RegenerationService.forget("instrument", instrument.id)

    @staticmethod
    def list_transactions(db: Session, instrument_id: str) -> list[Transaction]:
        return (
            db.query(Transaction)
            .filter(Transaction.instrument_id == instrument_id)
            .order_by(Transaction.trade_date, Transaction.created_at)
            .all()
        )

    @staticmethod
    def add_transaction(db: Session, instrument: Instrument, data: TransactionCreate) -> Transaction:
        """Record a trade and re-match the instrument.

        Raises:
            InsufficientPosition: If a SELL exceeds what is held on its date.
            NoRateAvailable: If the trade currency cannot be converted.
        """
        tx = Transaction(
            instrument_id=instrument.id,
            trade_date=data.trade_date,
            side=data.side.value,
            quantity=data.quantity,
            price=data.price,
            commission=data.commission,
            currency=data.currency or instrument.currency,
            notes=data.notes,
        )
        db.add(tx)
        db.flush()

        RegenerationService().regenerate_or_raise(db, InstrumentScope(instrument.id))
        logger.info(
            "%s %s %s @ %s recorded (id=%s)",
            tx.side, tx.quantity, instrument.ticker, tx.price, tx.id,
        )
        return tx

    @staticmethod
    def update_transaction(db: Session, tx: Transaction, data: TransactionUpdate) -> Transaction:
        """Edit a trade and re-match its instrument from scratch."""
        for key, value in data.model_dump(exclude_unset=True).items():
            if key == "side" and value is not None:
                value = value.value
            if value is None and key != "notes":
                continue
            setattr(tx, key, value)
        db.flush()

        RegenerationService().regenerate_or_raise(db, InstrumentScope(tx.instrument_id))
        logger.info("Transaction updated (id=%s)", tx.id)
        return tx

    @staticmethod
    def delete_transaction(db: Session, tx: Transaction) -> None:
        """Delete a trade and re-match its instrument.

        Deleting a BUY that later SELLs depend on raises InsufficientPosition.
        """
        instrument_id = tx.instrument_id
        db.delete(tx)
        db.flush()

        RegenerationService().regenerate_or_raise(db, InstrumentScope(instrument_id))
        logger.info("Transaction deleted (id=%s)", tx.id)
