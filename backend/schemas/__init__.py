"""Pydantic schemas for API request/response validation."""

from .contract import ContractCreate, ContractResponse, ContractUpdate, RentalCashflowResponse
from .index_point import (
    ExchangeRateResponse,
    IndexPointCreate,
    IndexPointResponse,
    IndexPointUpsertResponse,
)
from .instrument import (
    AmortizationEntryInput,
    CashflowResponse,
    InstrumentCreate,
    InstrumentResponse,
    InstrumentUpdate,
    PositionLotResponse,
    PositionResponse,
    RealizedGainResponse,
    TransactionCreate,
    TransactionResponse,
    TransactionUpdate,
)
from .regeneration import RegenerationFailureResponse, RegenerationRequest, RegenerationResponse

__all__ = [
    "AmortizationEntryInput", "CashflowResponse", "ContractCreate", "ContractResponse",
    "ContractUpdate", "ExchangeRateResponse", "IndexPointCreate", "IndexPointResponse",
    "IndexPointUpsertResponse", "InstrumentCreate", "InstrumentResponse", "InstrumentUpdate",
    "PositionLotResponse", "PositionResponse", "RealizedGainResponse", "RegenerationFailureResponse",
    "RegenerationRequest", "RegenerationResponse", "RentalCashflowResponse", "TransactionCreate",
    "TransactionResponse", "TransactionUpdate",
]
