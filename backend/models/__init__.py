"""SQLAlchemy ORM models."""

from .amortization_entry import AmortizationEntry
from .cashflow import Cashflow
from .contract import Contract
from .index_point import IndexPoint
from .instrument import Instrument
from .position_lot import PositionLot
from .realized_gain import RealizedGain
from .rental_cashflow import RentalCashflow
from .transaction import Transaction
from .utils import generate_uuid

__all__ = ["AmortizationEntry", "Cashflow", "Contract", "IndexPoint", "Instrument", "PositionLot", "RealizedGain", "RentalCashflow", "Transaction", "generate_uuid"]
