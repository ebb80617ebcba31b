"""Typed exception hierarchy for the calculation engine.

Pure calculators raise these and never recover; only the regeneration
service catches them, logs, and moves on to the next entity.
"""

from datetime import date
from decimal import Decimal


class EngineError(Exception):
    """Base exception for all calculation-engine errors."""

    pass


class InsufficientPosition(EngineError):
    """A SELL asks for more quantity than the open lots hold."""

    def __init__(
        self,
        requested: Decimal,
        available: Decimal,
        sell_date: date | None = None,
        instrument: str = "",
    ):
        self.requested = requested
        self.available = available
        self.sell_date = sell_date
        self.instrument = instrument
        where = f" of {instrument}" if instrument else ""
        when = f" on {sell_date.isoformat()}" if sell_date else ""
        super().__init__(
            f"Cannot sell {requested}{where}{when}: only {available} held"
        )


class NoRateAvailable(EngineError):
    """No quote exists anywhere for the requested currency pair."""

    def __init__(self, pair: str):
        self.pair = pair
        super().__init__(f"No exchange rate available for {pair}")


class InconsistentAmortizationSchedule(EngineError):
    """A CUSTOM_SCHEDULE instrument whose entries cannot be applied as given."""

    def __init__(self, message: str, total: Decimal | None = None):
        self.total = total
        super().__init__(message)


class RegenerationFailure(EngineError):
    """Regeneration of one entity failed; its previous rows were kept.

    Carries the entity id and the underlying exception so batch callers can
    report every failure without aborting sibling entities.
    """

    def __init__(self, entity_id: str, cause: BaseException, entity_type: str = ""):
        self.entity_id = entity_id
        self.entity_type = entity_type
        self.cause = cause
        label = f"{entity_type} {entity_id}" if entity_type else entity_id
        super().__init__(f"Regeneration failed for {label}: {cause}")
