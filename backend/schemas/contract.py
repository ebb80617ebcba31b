"""Pydantic schemas for rental contracts and their monthly cashflows."""

from datetime import date, datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from services.rental_schedule import AdjustmentType


class ContractCreate(BaseModel):
    """Schema for creating a rental contract."""

    property_name: str
    tenant_name: Optional[str] = None
    start_date: date
    duration_months: int = Field(gt=0)
    initial_rent: Decimal = Field(ge=0)
    currency: str
    adjustment_type: AdjustmentType
    adjustment_frequency: int = Field(gt=0)
    adjustment_rate: Optional[Decimal] = None
    index_type: Optional[str] = None

    @field_validator("currency")
    @classmethod
    def validate_currency(cls, v: str) -> str:
        v = v.strip().upper()
        if len(v) != 3 or not v.isalpha():
            raise ValueError(f"Currency must be a 3-letter code, got {v!r}")
        return v

    @field_validator("index_type")
    @classmethod
    def normalize_index_type(cls, v: Optional[str]) -> Optional[str]:
        return v.strip().upper() if v else None

    @model_validator(mode="after")
    def check_adjustment_terms(self) -> "ContractCreate":
        """Index-linked contracts name their index; fixed ones their rate."""
        if self.adjustment_type == AdjustmentType.INDEX_LINKED and not self.index_type:
            raise ValueError("index_type is required for INDEX_LINKED contracts")
        if self.adjustment_type == AdjustmentType.FIXED_PERCENTAGE and self.adjustment_rate is None:
            raise ValueError("adjustment_rate is required for FIXED_PERCENTAGE contracts")
        return self


class ContractUpdate(BaseModel):
    """Schema for editing contract terms. Any change regenerates the schedule."""

    property_name: Optional[str] = None
    tenant_name: Optional[str] = None
    start_date: Optional[date] = None
    duration_months: Optional[int] = Field(default=None, gt=0)
    initial_rent: Optional[Decimal] = Field(default=None, ge=0)
    currency: Optional[str] = None
    adjustment_type: Optional[AdjustmentType] = None
    adjustment_frequency: Optional[int] = Field(default=None, gt=0)
    adjustment_rate: Optional[Decimal] = None
    index_type: Optional[str] = None

    @field_validator("currency")
    @classmethod
    def validate_currency(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return v
        v = v.strip().upper()
        if len(v) != 3 or not v.isalpha():
            raise ValueError(f"Currency must be a 3-letter code, got {v!r}")
        return v

    @field_validator("index_type")
    @classmethod
    def normalize_index_type(cls, v: Optional[str]) -> Optional[str]:
        return v.strip().upper() if v else None


class ContractResponse(BaseModel):
    """Schema for Contract API response."""

    id: str
    property_name: str
    tenant_name: Optional[str] = None
    start_date: date
    duration_months: int
    initial_rent: Decimal
    currency: str
    adjustment_type: str
    adjustment_frequency: int
    adjustment_rate: Optional[Decimal] = None
    index_type: Optional[str] = None
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class RentalCashflowResponse(BaseModel):
    """One month of a contract's schedule."""

    id: str
    contract_id: str
    month_index: int
    payment_date: date
    amount: Decimal
    currency: str
    amount_local: Optional[Decimal] = None
    amount_reporting: Optional[Decimal] = None
    index_monthly: Optional[Decimal] = None
    adjustment_percent: Optional[Decimal] = None
    inflation_accumulated: Optional[Decimal] = None
    fx_rate: Optional[Decimal] = None
    fx_rate_base: Optional[Decimal] = None
    fx_rate_month_close: Optional[Decimal] = None
    devaluation_accumulated: Optional[Decimal] = None
    is_adjustment: bool
    is_provisional: bool

    model_config = ConfigDict(from_attributes=True)
