"""Pydantic schemas for instruments, transactions and their derived rows."""

from datetime import date, datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from services.fifo_matcher import TradeSide
from services.fixed_income_schedule import AmortizationMode, AssetType


def _currency_code(v: Optional[str]) -> Optional[str]:
    if v is None:
        return v
    v = v.strip().upper()
    if len(v) != 3 or not v.isalpha():
        raise ValueError(f"Currency must be a 3-letter code, got {v!r}")
    return v


class AmortizationEntryInput(BaseModel):
    """One (date, % of original principal) pair of a custom schedule."""

    payment_date: date
    percentage: Decimal = Field(gt=0, le=100)


class AmortizationEntryResponse(AmortizationEntryInput):
    id: str

    model_config = ConfigDict(from_attributes=True)


class InstrumentCreate(BaseModel):
    """Schema for creating an instrument."""

    ticker: str
    name: Optional[str] = None
    asset_type: AssetType
    currency: str
    emission_date: Optional[date] = None
    maturity_date: Optional[date] = None
    coupon_rate: Decimal = Field(default=Decimal("0"), ge=0)
    frequency_months: Optional[int] = Field(default=None, gt=0)
    amortization: AmortizationMode = AmortizationMode.BULLET
    face_value: Decimal = Field(default=Decimal("100"), gt=0)
    amortization_entries: list[AmortizationEntryInput] = []

    @field_validator("ticker")
    @classmethod
    def normalize_ticker(cls, v: str) -> str:
        v = v.strip().upper()
        if not v:
            raise ValueError("Ticker cannot be empty")
        return v

    @field_validator("currency")
    @classmethod
    def validate_currency(cls, v: str) -> str:
        return _currency_code(v)


class InstrumentUpdate(BaseModel):
    """Schema for updating instrument terms.

    ``amortization_entries`` replaces the whole custom schedule when given.
    """

    name: Optional[str] = None
    currency: Optional[str] = None
    emission_date: Optional[date] = None
    maturity_date: Optional[date] = None
    coupon_rate: Optional[Decimal] = Field(default=None, ge=0)
    frequency_months: Optional[int] = Field(default=None, gt=0)
    amortization: Optional[AmortizationMode] = None
    face_value: Optional[Decimal] = Field(default=None, gt=0)
    amortization_entries: Optional[list[AmortizationEntryInput]] = None

    @field_validator("currency")
    @classmethod
    def validate_currency(cls, v: Optional[str]) -> Optional[str]:
        return _currency_code(v)


class InstrumentResponse(BaseModel):
    """Schema for Instrument API response."""

    id: str
    ticker: str
    name: Optional[str] = None
    asset_type: str
    currency: str
    emission_date: Optional[date] = None
    maturity_date: Optional[date] = None
    coupon_rate: Decimal
    frequency_months: Optional[int] = None
    amortization: str
    face_value: Decimal
    amortization_entries: list[AmortizationEntryResponse] = []
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class CashflowResponse(BaseModel):
    """A projected coupon or amortization payment."""

    id: str
    instrument_id: str
    payment_date: date
    amount: Decimal
    currency: str
    kind: str
    residual_capital: Decimal
    description: Optional[str] = None
    quantity: Optional[Decimal] = None

    model_config = ConfigDict(from_attributes=True)


class TransactionCreate(BaseModel):
    """Schema for recording a trade. Currency defaults to the instrument's."""

    trade_date: date
    side: TradeSide
    quantity: Decimal = Field(gt=0)
    price: Decimal = Field(ge=0)
    commission: Decimal = Field(default=Decimal("0"), ge=0)
    currency: Optional[str] = None
    notes: Optional[str] = None

    @field_validator("currency")
    @classmethod
    def validate_currency(cls, v: Optional[str]) -> Optional[str]:
        return _currency_code(v)


class TransactionUpdate(BaseModel):
    """Schema for editing a trade."""

    trade_date: Optional[date] = None
    side: Optional[TradeSide] = None
    quantity: Optional[Decimal] = Field(default=None, gt=0)
    price: Optional[Decimal] = Field(default=None, ge=0)
    commission: Optional[Decimal] = Field(default=None, ge=0)
    currency: Optional[str] = None
    notes: Optional[str] = None

    @field_validator("currency")
    @classmethod
    def validate_currency(cls, v: Optional[str]) -> Optional[str]:
        return _currency_code(v)


class TransactionResponse(BaseModel):
    """Schema for Transaction API response."""

    id: str
    instrument_id: str
    trade_date: date
    side: str
    quantity: Decimal
    price: Decimal
    commission: Decimal
    currency: str
    notes: Optional[str] = None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class PositionLotResponse(BaseModel):
    """An open lot after FIFO matching."""

    id: str
    transaction_id: Optional[str] = None
    acquired_on: date
    quantity: Decimal
    original_quantity: Decimal
    unit_cost: Decimal
    commission: Decimal
    currency: str

    model_config = ConfigDict(from_attributes=True)


class RealizedGainResponse(BaseModel):
    """A SELL matched against earlier BUY lots."""

    id: str
    instrument_id: str
    ticker: Optional[str] = None
    transaction_id: Optional[str] = None
    sell_date: date
    buy_dates: list[date]
    quantity: Decimal
    buy_unit_cost: Decimal
    sell_unit_price: Decimal
    buy_commission: Decimal
    sell_commission: Decimal
    cost_basis: Decimal
    proceeds: Decimal
    gain: Decimal
    gain_percent: Decimal
    currency: str


class PositionResponse(BaseModel):
    """Current position of an instrument derived from its trades."""

    instrument_id: str
    ticker: str
    currency: str
    open_quantity: Decimal
    open_cost_basis: Decimal
    open_commission: Decimal
    average_cost: Optional[Decimal] = None
    realized_gain: Decimal
    market_price: Optional[Decimal] = None
    market_value: Optional[Decimal] = None
    unrealized_gain: Optional[Decimal] = None
    lots: list[PositionLotResponse] = []
    realized_gains: list[RealizedGainResponse] = []
