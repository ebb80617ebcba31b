"""FIFO lot matching for a single instrument.

Pure functions only: a position is recomputed from the full transaction
history on every call, so the same trades always produce the same lots and
the same realized gains.
"""

from dataclasses import dataclass, replace
from datetime import date, datetime, timezone
from decimal import Decimal
from enum import Enum
from typing import Iterable, Sequence

from services.exceptions import InsufficientPosition

ZERO = Decimal("0")
_NO_TIMESTAMP = datetime.min


class TradeSide(str, Enum):
    """Direction of a trade."""

    BUY = "BUY"
    SELL = "SELL"


@dataclass(frozen=True)
class Trade:
    """A BUY or SELL as the matcher sees it."""

    trade_date: date
    side: TradeSide
    quantity: Decimal
    price: Decimal
    commission: Decimal = ZERO
    currency: str = ""
    id: str | None = None
    created_at: datetime | None = None


@dataclass(frozen=True)
class OpenLot:
    """Unsold remainder of one BUY."""

    acquired_on: date
    quantity: Decimal
    unit_cost: Decimal
    commission: Decimal
    original_quantity: Decimal
    currency: str = ""
    transaction_id: str | None = None

    @property
    def cost_basis(self) -> Decimal:
        return self.quantity * self.unit_cost


@dataclass(frozen=True)
class RealizedGainEvent:
    """A SELL matched against one or more earlier BUY lots."""

    sell_date: date
    buy_dates: tuple[date, ...]
    quantity: Decimal
    buy_unit_cost: Decimal
    sell_unit_price: Decimal
    buy_commission: Decimal
    sell_commission: Decimal
    currency: str = ""
    transaction_id: str | None = None

    @property
    def cost_basis(self) -> Decimal:
        return self.quantity * self.buy_unit_cost

    @property
    def proceeds(self) -> Decimal:
        return self.quantity * self.sell_unit_price

    @property
    def commission(self) -> Decimal:
        return self.buy_commission + self.sell_commission

    @property
    def gain(self) -> Decimal:
        return self.proceeds - self.cost_basis - self.commission

    @property
    def gain_percent(self) -> Decimal:
        """Gain relative to what the lots cost, buy commission included."""
        invested = self.cost_basis + self.buy_commission
        if invested == 0:
            return ZERO
        return self.gain / invested * 100


@dataclass(frozen=True)
class FifoResult:
    """Open lots and realized gains produced by one matching pass."""

    open_lots: tuple[OpenLot, ...]
    realized_gains: tuple[RealizedGainEvent, ...]

    @property
    def open_quantity(self) -> Decimal:
        return sum((lot.quantity for lot in self.open_lots), ZERO)

    @property
    def open_cost_basis(self) -> Decimal:
        return sum((lot.cost_basis for lot in self.open_lots), ZERO)

    @property
    def open_commission(self) -> Decimal:
        return sum((lot.commission for lot in self.open_lots), ZERO)

    @property
    def average_cost(self) -> Decimal | None:
        quantity = self.open_quantity
        if quantity == 0:
            return None
        return self.open_cost_basis / quantity

    @property
    def total_realized_gain(self) -> Decimal:
        return sum((event.gain for event in self.realized_gains), ZERO)

    @property
    def realized_quantity(self) -> Decimal:
        return sum((event.quantity for event in self.realized_gains), ZERO)

    def unrealized_gain(self, market_price: Decimal) -> Decimal:
        """Gain if the open lots were sold at ``market_price`` with no sell fee.

        Buy commission still carried by the open lots counts as cost.
        """
        market_value = market_price * self.open_quantity
        return market_value - self.open_cost_basis - self.open_commission


class _Lot:
    """Mutable queue entry used only inside one matching pass."""

    __slots__ = ("trade", "remaining")

    def __init__(self, trade: Trade):
        self.trade = trade
        self.remaining = trade.quantity

    def commission_for(self, quantity: Decimal) -> Decimal:
        """Share of the BUY's commission attributable to ``quantity`` units."""
        return self.trade.commission * quantity / self.trade.quantity


def _sort_key(indexed: tuple[int, Trade]) -> tuple:
    index, trade = indexed
    created = trade.created_at or _NO_TIMESTAMP
    if created.tzinfo is not None:
        created = created.astimezone(timezone.utc).replace(tzinfo=None)
    return (trade.trade_date, created, index)


def _validate(trade: Trade) -> None:
    if trade.quantity <= 0:
        raise ValueError(
            f"Trade quantity must be positive, got {trade.quantity} on {trade.trade_date}"
        )
    if trade.price < 0:
        raise ValueError(f"Trade price must be non-negative, got {trade.price}")
    if trade.commission < 0:
        raise ValueError(
            f"Trade commission must be non-negative, got {trade.commission}"
        )


def sort_trades(trades: Iterable[Trade]) -> list[Trade]:
    """Chronological order: trade date, then creation time, then input order."""
    return [trade for _, trade in sorted(enumerate(trades), key=_sort_key)]


def match_fifo(trades: Iterable[Trade], instrument: str = "") -> FifoResult:
    """Match SELLs against the oldest open BUY lots.

    Each SELL yields one :class:`RealizedGainEvent` whose buy cost is the
    quantity-weighted average of the lot slices it consumed. Buy commission
    follows the consumed quantity pro rata; the SELL's own commission is
    charged in full to that sale.

    Args:
        trades: Trades of a single instrument, in any order.
        instrument: Label used in error messages.

    Raises:
        InsufficientPosition: A SELL exceeds the quantity held at that point.
        ValueError: A trade has a non-positive quantity or a negative
            price or commission.
    """
    queue: list[_Lot] = []
    head = 0
    gains: list[RealizedGainEvent] = []

    for trade in sort_trades(trades):
        _validate(trade)

        if trade.side == TradeSide.BUY:
            queue.append(_Lot(trade))
            continue

        available = sum((lot.remaining for lot in queue[head:]), ZERO)
        if trade.quantity > available:
            raise InsufficientPosition(
                requested=trade.quantity,
                available=available,
                sell_date=trade.trade_date,
                instrument=instrument,
            )

        to_sell = trade.quantity
        cost_total = ZERO
        buy_commission = ZERO
        buy_dates: list[date] = []

        while to_sell > 0:
            lot = queue[head]
            consumed = min(lot.remaining, to_sell)
            cost_total += consumed * lot.trade.price
            buy_commission += lot.commission_for(consumed)
            if lot.trade.trade_date not in buy_dates:
                buy_dates.append(lot.trade.trade_date)

            lot.remaining -= consumed
            to_sell -= consumed
            if lot.remaining == 0:
                head += 1

        gains.append(
            RealizedGainEvent(
                sell_date=trade.trade_date,
                buy_dates=tuple(buy_dates),
                quantity=trade.quantity,
                buy_unit_cost=cost_total / trade.quantity,
                sell_unit_price=trade.price,
                buy_commission=buy_commission,
                sell_commission=trade.commission,
                currency=trade.currency,
                transaction_id=trade.id,
            )
        )

    open_lots = tuple(
        OpenLot(
            acquired_on=lot.trade.trade_date,
            quantity=lot.remaining,
            unit_cost=lot.trade.price,
            commission=lot.commission_for(lot.remaining),
            original_quantity=lot.trade.quantity,
            currency=lot.trade.currency,
            transaction_id=lot.trade.id,
        )
        for lot in queue[head:]
        if lot.remaining > 0
    )
    return FifoResult(open_lots=open_lots, realized_gains=tuple(gains))


def normalize_trades(
    trades: Sequence[Trade], resolver, currency: str
) -> list[Trade]:
    """Express every trade's price and commission in ``currency``.

    Each trade is converted at the rate known on its own trade date, so the
    cost basis reflects the exchange rate at purchase time.

    Raises:
        NoRateAvailable: A trade's currency has no quotes against ``currency``.
    """
    normalized = []
    for trade in trades:
        if not trade.currency or trade.currency.upper() == currency.upper():
            normalized.append(trade)
            continue
        normalized.append(
            replace(
                trade,
                price=resolver.convert(trade.price, trade.currency, currency, trade.trade_date),
                commission=resolver.convert(
                    trade.commission, trade.currency, currency, trade.trade_date
                ),
                currency=currency.upper(),
            )
        )
    return normalized
