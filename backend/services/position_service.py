"""Read-side queries over the derived position rows.

Lots and realized gains are written only by the regeneration service; this
module reads them back and adds totals and, given a market price, the
unrealized gain.
"""

from datetime import date
from decimal import Decimal

from sqlalchemy.orm import Session, joinedload

from models import Cashflow, Instrument, PositionLot, RealizedGain, Transaction
from services.fifo_matcher import TradeSide
from utils.money import to_cents

ZERO = Decimal("0")


def realized_gain_dict(gain: RealizedGain) -> dict:
    """Build a RealizedGainResponse-compatible dict from a RealizedGain."""
    return {
        "id": gain.id,
        "instrument_id": gain.instrument_id,
        "ticker": gain.instrument.ticker if gain.instrument else None,
        "transaction_id": gain.transaction_id,
        "sell_date": gain.sell_date,
        "buy_dates": gain.matched_buy_dates,
        "quantity": gain.quantity,
        "buy_unit_cost": gain.buy_unit_cost,
        "sell_unit_price": gain.sell_unit_price,
        "buy_commission": gain.buy_commission,
        "sell_commission": gain.sell_commission,
        "cost_basis": gain.cost_basis,
        "proceeds": gain.proceeds,
        "gain": gain.gain,
        "gain_percent": gain.gain_percent,
        "currency": gain.currency,
    }


class PositionService:
    """Service for position and realized-gain queries."""

    @staticmethod
    def get_position(
        db: Session, instrument: Instrument, market_price: Decimal | None = None
    ) -> dict:
        """Current position of one instrument.

        Returns:
            Dict matching the PositionResponse schema. ``unrealized_gain`` is
            market value minus open cost basis minus the buy commission the
            open lots still carry, and is None without a market price.
        """
        lots = (
            db.query(PositionLot)
            .filter(PositionLot.instrument_id == instrument.id)
            .order_by(PositionLot.acquired_on, PositionLot.created_at)
            .all()
        )
        gains = (
            db.query(RealizedGain)
            .filter(RealizedGain.instrument_id == instrument.id)
            .order_by(RealizedGain.sell_date)
            .all()
        )

        open_quantity = sum((lot.quantity for lot in lots), ZERO)
        open_cost_basis = sum((lot.quantity * lot.unit_cost for lot in lots), ZERO)
        open_commission = sum((lot.commission for lot in lots), ZERO)

        market_value = unrealized = None
        if market_price is not None:
            market_value = market_price * open_quantity
            unrealized = market_value - open_cost_basis - open_commission

        return {
            "instrument_id": instrument.id,
            "ticker": instrument.ticker,
            "currency": instrument.currency,
            "open_quantity": open_quantity,
            "open_cost_basis": open_cost_basis,
            "open_commission": open_commission,
            "average_cost": open_cost_basis / open_quantity if open_quantity else None,
            "realized_gain": sum((g.gain for g in gains), ZERO),
            "market_price": market_price,
            "market_value": market_value,
            "unrealized_gain": unrealized,
            "lots": lots,
            "realized_gains": [realized_gain_dict(g) for g in gains],
        }

    @staticmethod
    def list_realized_gains(
        db: Session,
        start: date | None = None,
        end: date | None = None,
        instrument_id: str | None = None,
    ) -> list[RealizedGain]:
        """Realized gains across instruments, oldest sale first."""
        query = db.query(RealizedGain).options(joinedload(RealizedGain.instrument))
        if start is not None:
            query = query.filter(RealizedGain.sell_date >= start)
        if end is not None:
            query = query.filter(RealizedGain.sell_date <= end)
        if instrument_id is not None:
            query = query.filter(RealizedGain.instrument_id == instrument_id)
        return query.order_by(RealizedGain.sell_date, RealizedGain.created_at).all()

    @staticmethod
    def list_cashflows(
        db: Session,
        instrument_id: str,
        start: date | None = None,
        end: date | None = None,
    ) -> list[Cashflow]:
        query = db.query(Cashflow).filter(Cashflow.instrument_id == instrument_id)
        if start is not None:
            query = query.filter(Cashflow.payment_date >= start)
        if end is not None:
            query = query.filter(Cashflow.payment_date <= end)
        return query.order_by(Cashflow.payment_date, Cashflow.sequence).all()

    @staticmethod
    def list_holder_cashflows(
        db: Session,
        instrument: Instrument,
        start: date | None = None,
        end: date | None = None,
    ) -> list[dict]:
        """Projected payments for the quantity actually held.

        Schedule rows describe one unit of face value. Each row is scaled by
        the net quantity held on its payment date (trades on that date
        included); dates with nothing held, such as those before the first
        purchase, are skipped.

        Returns:
            Dicts matching the CashflowResponse schema, with ``quantity`` set.
        """
        trades = (
            db.query(Transaction)
            .filter(Transaction.instrument_id == instrument.id)
            .order_by(Transaction.trade_date)
            .all()
        )
        projected = []
        for row in PositionService.list_cashflows(db, instrument.id, start, end):
            held = sum(
                (
                    t.quantity if t.side == TradeSide.BUY.value else -t.quantity
                    for t in trades
                    if t.trade_date <= row.payment_date
                ),
                ZERO,
            )
            if held <= 0:
                continue
            projected.append(
                {
                    "id": row.id,
                    "instrument_id": row.instrument_id,
                    "payment_date": row.payment_date,
                    "amount": to_cents(row.amount * held),
                    "currency": row.currency,
                    "kind": row.kind,
                    "residual_capital": to_cents(row.residual_capital * held),
                    "description": row.description,
                    "quantity": held,
                }
            )
        return projected
