"""API route handlers."""
from . import contracts, exchange_rates, index_points, instruments, realized_gains, regeneration, transactions

__all__ = [
    "contracts", "exchange_rates", "index_points", "instruments",
    "realized_gains", "regeneration", "transactions",
]
