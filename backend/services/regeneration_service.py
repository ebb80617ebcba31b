"""Rebuilds derived rows from source facts.

Every derived table (position lots, realized gains, fixed-income cashflows,
rental cashflows) is a view over transactions, instrument terms, contract
terms and index points. This service is the only code that writes them:
for each affected entity it computes the complete new row set in memory,
then swaps it in inside a SAVEPOINT. If anything fails the savepoint is
rolled back and the entity keeps its previous rows.

Callers own the outer transaction (API layer or script commits).
"""

import logging
import threading
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Union

from sqlalchemy.orm import Session

from config import settings
from models import (
    Cashflow,
    Contract,
    IndexPoint,
    Instrument,
    PositionLot,
    RealizedGain,
    RentalCashflow,
    Transaction,
)
from services.exceptions import EngineError, RegenerationFailure
from services.exchange_rate_service import FX_PREFIX, CurrencyPair, ExchangeRateResolver, is_fx_index
from services.fifo_matcher import Trade, TradeSide, match_fifo, normalize_trades
from services.fixed_income_schedule import (
    AmortizationMode,
    AmortizationStep,
    AssetType,
    InstrumentTerms,
    generate_fixed_income_schedule,
)
from services.rental_schedule import (
    AdjustmentType,
    ContractTerms,
    FixedPercentage,
    IndexLinked,
    IndexSeries,
    generate_rental_schedule,
    inflation_index_for,
)
from utils.money import to_cents, to_rate

logger = logging.getLogger(__name__)


# --- Scopes ---


@dataclass(frozen=True)
class InstrumentScope:
    """Re-match one instrument's trades and rebuild its coupon schedule."""

    instrument_id: str


@dataclass(frozen=True)
class ContractScope:
    """Rebuild one rental contract's monthly schedule."""

    contract_id: str


@dataclass(frozen=True)
class IndexDependentScope:
    """Rebuild every entity that reads ``index_type``.

    Contracts for any series; for an FX series also the instruments whose
    trades are converted through that pair.
    """

    index_type: str


@dataclass(frozen=True)
class AllContractsScope:
    pass


@dataclass(frozen=True)
class AllInstrumentsScope:
    pass


RegenerationScope = Union[
    InstrumentScope,
    ContractScope,
    IndexDependentScope,
    AllContractsScope,
    AllInstrumentsScope,
]


@dataclass
class RegenerationResult:
    """Outcome of one ``regenerate`` call."""

    regenerated: list[str] = field(default_factory=list)
    regenerated_types: dict[str, str] = field(default_factory=dict)
    failures: list[RegenerationFailure] = field(default_factory=list)
    rows_written: int = 0

    @property
    def ok(self) -> bool:
        return not self.failures

    def regenerated_of(self, entity_type: str) -> list[str]:
        return [i for i in self.regenerated if self.regenerated_types.get(i) == entity_type]


# --- ORM -> calculator inputs ---


def trade_from_transaction(tx: Transaction) -> Trade:
    return Trade(
        trade_date=tx.trade_date,
        side=TradeSide(tx.side),
        quantity=Decimal(tx.quantity),
        price=Decimal(tx.price),
        commission=Decimal(tx.commission or 0),
        currency=tx.currency,
        id=tx.id,
        created_at=tx.created_at,
    )


def instrument_terms(instrument: Instrument) -> InstrumentTerms:
    return InstrumentTerms(
        ticker=instrument.ticker,
        asset_type=AssetType(instrument.asset_type),
        currency=instrument.currency,
        emission_date=instrument.emission_date,
        maturity_date=instrument.maturity_date,
        coupon_rate=Decimal(instrument.coupon_rate or 0),
        frequency_months=instrument.frequency_months,
        amortization=AmortizationMode(instrument.amortization or AmortizationMode.BULLET),
        face_value=Decimal(instrument.face_value),
        schedule=tuple(
            AmortizationStep(entry.payment_date, Decimal(entry.percentage))
            for entry in instrument.amortization_entries
        ),
    )


def contract_terms(contract: Contract) -> ContractTerms:
    adjustment_type = AdjustmentType(contract.adjustment_type)
    if adjustment_type == AdjustmentType.INDEX_LINKED:
        if not contract.index_type:
            raise ValueError(f"Index-linked contract {contract.id} has no index type")
        adjustment = IndexLinked(contract.index_type)
    else:
        if contract.adjustment_rate is None:
            raise ValueError(f"Fixed-percentage contract {contract.id} has no adjustment rate")
        adjustment = FixedPercentage(Decimal(contract.adjustment_rate))
    return ContractTerms(
        start_date=contract.start_date,
        duration_months=contract.duration_months,
        initial_rent=Decimal(contract.initial_rent),
        currency=contract.currency,
        adjustment=adjustment,
        adjustment_frequency=contract.adjustment_frequency,
    )


def contracts_for_index(db: Session, index_type: str) -> list[Contract]:
    """Contracts whose schedule reads ``index_type``.

    Every contract converts its rent and measures devaluation with exchange
    rates, so an FX series affects all of them. An inflation series affects
    the contracts indexed to it, plus fixed-percentage contracts when it is
    the default inflation index used for their accumulated-inflation column.
    """
    contracts = db.query(Contract).order_by(Contract.start_date.asc()).all()
    if is_fx_index(index_type):
        return contracts
    return [c for c in contracts if _inflation_index_of(c) == index_type]


def instruments_for_fx(db: Session, index_type: str) -> list[Instrument]:
    """Instruments with trades converted through the ``index_type`` pair."""
    pair = CurrencyPair.from_index_type(index_type)
    if pair is None:
        return []
    currencies = {pair.base, pair.quote}
    return (
        db.query(Instrument)
        .join(Transaction, Transaction.instrument_id == Instrument.id)
        .filter(Instrument.currency.in_(currencies), Transaction.currency.in_(currencies))
        .filter(Transaction.currency != Instrument.currency)
        .distinct()
        .order_by(Instrument.ticker)
        .all()
    )


def _inflation_index_of(contract: Contract) -> str | None:
    if contract.adjustment_type == AdjustmentType.INDEX_LINKED:
        return contract.index_type
    return settings.DEFAULT_INFLATION_INDEX


class _Facts:
    """Source facts shared by every entity of one regeneration call."""

    def __init__(self, db: Session):
        self._db = db
        self._index_points: list[IndexPoint] | None = None
        self._resolver: ExchangeRateResolver | None = None

    @property
    def index_points(self) -> list[IndexPoint]:
        if self._index_points is None:
            self._index_points = (
                self._db.query(IndexPoint)
                .filter(~IndexPoint.type.like(f"{FX_PREFIX}%"))
                .all()
            )
        return self._index_points

    @property
    def resolver(self) -> ExchangeRateResolver:
        if self._resolver is None:
            points = (
                self._db.query(IndexPoint)
                .filter(IndexPoint.type.like(f"{FX_PREFIX}%"))
                .all()
            )
            self._resolver = ExchangeRateResolver.from_points(points)
        return self._resolver


class RegenerationService:
    """Delete-and-rebuild of derived rows, one entity at a time."""

    # Class-level so every instance in the process serializes on the same
    # entity. A multi-process deployment needs a database or file lock.
    _entity_locks: dict[str, threading.Lock] = {}
    _registry_lock = threading.Lock()

    def __init__(self, lock_timeout: float | None = None):
        self.lock_timeout = (
            settings.REGENERATION_LOCK_TIMEOUT if lock_timeout is None else lock_timeout
        )

    @classmethod
    def _lock_for(cls, key: str) -> threading.Lock:
        with cls._registry_lock:
            lock = cls._entity_locks.get(key)
            if lock is None:
                lock = threading.Lock()
                cls._entity_locks[key] = lock
            return lock

    @classmethod
    def forget(cls, entity_type: str, entity_id: str) -> None:
        """Drop the lock of a deleted entity unless a regeneration still holds it."""
        key = f"{entity_type}:{entity_id}"
        with cls._registry_lock:
            lock = cls._entity_locks.get(key)
            if lock is not None and not lock.locked():
                del cls._entity_locks[key]

    def regenerate(self, db: Session, scope: RegenerationScope) -> RegenerationResult:
        """Rebuild the derived rows of every entity in ``scope``.

        A failure in one entity is logged and recorded in the result; the
        remaining entities are still processed. Running the same scope again
        is always safe.
        """
        db.flush()
        facts = _Facts(db)
        result = RegenerationResult()

        if isinstance(scope, InstrumentScope):
            targets = [("instrument", scope.instrument_id)]
        elif isinstance(scope, ContractScope):
            targets = [("contract", scope.contract_id)]
        elif isinstance(scope, IndexDependentScope):
            targets = [("contract", c.id) for c in contracts_for_index(db, scope.index_type)]
            targets += [("instrument", i.id) for i in instruments_for_fx(db, scope.index_type)]
        elif isinstance(scope, AllContractsScope):
            targets = [("contract", cid) for (cid,) in db.query(Contract.id).all()]
        elif isinstance(scope, AllInstrumentsScope):
            targets = [("instrument", iid) for (iid,) in db.query(Instrument.id).all()]
        else:
            raise TypeError(f"Unknown regeneration scope: {scope!r}")

        for entity_type, entity_id in targets:
            self._regenerate_entity(db, entity_type, entity_id, facts, result)

        if len(targets) > 1 or result.failures:
            logger.info(
                "Regeneration of %s: %d ok, %d failed, %d rows written",
                scope,
                len(result.regenerated),
                len(result.failures),
                result.rows_written,
            )
        return result

    def regenerate_or_raise(self, db: Session, scope: RegenerationScope) -> RegenerationResult:
        """Regenerate and raise the first failure instead of collecting it.

        Used right after a fact mutation so the caller can roll the mutation
        back. Engine and validation errors are re-raised as themselves;
        anything else (lock timeouts included) as the RegenerationFailure.
        """
        result = self.regenerate(db, scope)
        if result.failures:
            failure = result.failures[0]
            if isinstance(failure.cause, (EngineError, ValueError)):
                raise failure.cause
            raise failure
        return result

    def _regenerate_entity(
        self,
        db: Session,
        entity_type: str,
        entity_id: str,
        facts: _Facts,
        result: RegenerationResult,
    ) -> None:
        lock = self._lock_for(f"{entity_type}:{entity_id}")
        if not lock.acquire(timeout=self.lock_timeout):
            failure = RegenerationFailure(
                entity_id,
                TimeoutError(f"another regeneration held the lock for {self.lock_timeout}s"),
                entity_type,
            )
            logger.warning("%s", failure)
            result.failures.append(failure)
            return

        try:
            if entity_type == "contract":
                written = self._regenerate_contract(db, entity_id, facts)
            else:
                written = self._regenerate_instrument(db, entity_id, facts)
        except (EngineError, ValueError) as e:
            failure = RegenerationFailure(entity_id, e, entity_type)
            logger.warning("%s", failure)
            result.failures.append(failure)
        except Exception as e:
            # Safety net for unexpected errors
            failure = RegenerationFailure(entity_id, e, entity_type)
            logger.error("%s", failure, exc_info=True)
            result.failures.append(failure)
        else:
            result.regenerated.append(entity_id)
            result.regenerated_types[entity_id] = entity_type
            result.rows_written += written
            logger.info("Regenerated %s %s: %d rows", entity_type, entity_id, written)
        finally:
            lock.release()

    # --- Contracts ---

    @staticmethod
    def _regenerate_contract(db: Session, contract_id: str, facts: _Facts) -> int:
        contract = db.get(Contract, contract_id)
        if contract is None:
            raise ValueError(f"Contract not found: {contract_id}")

        # Stage: compute the full new schedule before touching storage
        terms = contract_terms(contract)
        series = IndexSeries.from_points(inflation_index_for(terms.adjustment), facts.index_points)
        rows = generate_rental_schedule(terms, series, facts.resolver)
        staged = [
            RentalCashflow(
                contract_id=contract_id,
                month_index=row.month_index,
                payment_date=row.payment_date,
                amount=to_cents(row.amount),
                currency=row.currency,
                amount_local=to_cents(row.amount_local),
                amount_reporting=to_cents(row.amount_reporting),
                index_monthly=to_rate(row.index_monthly),
                adjustment_percent=to_rate(row.adjustment_percent),
                inflation_accumulated=to_rate(row.inflation_accumulated),
                fx_rate=to_rate(row.fx_rate),
                fx_rate_base=to_rate(row.fx_rate_base),
                fx_rate_month_close=to_rate(row.fx_rate_month_close),
                devaluation_accumulated=to_rate(row.devaluation_accumulated),
                is_adjustment=row.is_adjustment,
                is_provisional=row.is_provisional,
            )
            for row in rows
        ]

        # Swap
        with db.begin_nested():
            db.query(RentalCashflow).filter(
                RentalCashflow.contract_id == contract_id
            ).delete(synchronize_session=False)
            db.flush()
            db.add_all(staged)
            db.flush()
        db.expire(contract, ["rental_cashflows"])
        return len(staged)

    # --- Instruments ---

    @staticmethod
    def _regenerate_instrument(db: Session, instrument_id: str, facts: _Facts) -> int:
        instrument = db.get(Instrument, instrument_id)
        if instrument is None:
            raise ValueError(f"Instrument not found: {instrument_id}")
        db.refresh(instrument)

        trades = [trade_from_transaction(tx) for tx in instrument.transactions]
        if any(t.currency.upper() != instrument.currency.upper() for t in trades):
            trades = normalize_trades(trades, facts.resolver, instrument.currency)
        fifo = match_fifo(trades, instrument=instrument.ticker)
        schedule = generate_fixed_income_schedule(instrument_terms(instrument))

        staged: list = [
            PositionLot(
                instrument_id=instrument_id,
                transaction_id=lot.transaction_id,
                acquired_on=lot.acquired_on,
                quantity=lot.quantity,
                original_quantity=lot.original_quantity,
                unit_cost=to_rate(lot.unit_cost),
                commission=to_cents(lot.commission),
                currency=lot.currency or instrument.currency,
            )
            for lot in fifo.open_lots
        ]
        staged += [
            RealizedGain(
                instrument_id=instrument_id,
                transaction_id=event.transaction_id,
                sell_date=event.sell_date,
                buy_dates=",".join(d.isoformat() for d in event.buy_dates),
                quantity=event.quantity,
                buy_unit_cost=to_rate(event.buy_unit_cost),
                sell_unit_price=to_rate(event.sell_unit_price),
                buy_commission=to_cents(event.buy_commission),
                sell_commission=to_cents(event.sell_commission),
                cost_basis=to_cents(event.cost_basis),
                proceeds=to_cents(event.proceeds),
                gain=to_cents(event.gain),
                gain_percent=event.gain_percent.quantize(Decimal("0.0001")),
                currency=event.currency or instrument.currency,
            )
            for event in fifo.realized_gains
        ]
        staged += [
            Cashflow(
                instrument_id=instrument_id,
                sequence=sequence,
                payment_date=row.payment_date,
                amount=to_cents(row.amount),
                currency=row.currency,
                kind=row.kind.value,
                residual_capital=to_cents(row.residual_capital),
                description=row.description,
            )
            for sequence, row in enumerate(schedule)
        ]

        with db.begin_nested():
            for model in (PositionLot, RealizedGain, Cashflow):
                db.query(model).filter(
                    model.instrument_id == instrument_id
                ).delete(synchronize_session=False)
            db.flush()
            db.add_all(staged)
            db.flush()
        db.expire(instrument, ["position_lots", "realized_gains", "cashflows"])
        return len(staged)
