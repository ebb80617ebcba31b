"""Pydantic schemas for index points and exchange-rate lookups."""

from datetime import date, datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, ConfigDict, field_validator, model_validator

from schemas.regeneration import RegenerationFailureResponse

# A monthly inflation print outside this band is almost certainly a typo
# (e.g. 350 entered for 3.5).
MAX_MONTHLY_PRINT = Decimal("50")


class IndexPointCreate(BaseModel):
    """Schema for creating or overwriting an index point."""

    type: str
    date: date
    value: Decimal
    interannual_value: Optional[Decimal] = None
    is_manual: bool = True

    @field_validator("type")
    @classmethod
    def normalize_type(cls, v: str) -> str:
        v = v.strip().upper()
        if not v:
            raise ValueError("Index type cannot be empty")
        return v

    @field_validator("date")
    @classmethod
    def not_in_future(cls, v: date) -> date:
        if v > date.today():
            raise ValueError("Cannot record index values for future dates")
        return v

    @model_validator(mode="after")
    def check_value_range(self) -> "IndexPointCreate":
        """FX quotes must be positive; inflation prints stay within ±50%."""
        if self.type.startswith("FX_"):
            if self.value <= 0:
                raise ValueError("Exchange rates must be positive")
        elif abs(self.value) > MAX_MONTHLY_PRINT:
            raise ValueError(
                f"Monthly index value must be between -{MAX_MONTHLY_PRINT}% and {MAX_MONTHLY_PRINT}%"
            )
        return self


class IndexPointResponse(BaseModel):
    """Schema for IndexPoint API response."""

    id: str
    type: str
    date: date
    value: Decimal
    interannual_value: Optional[Decimal] = None
    is_manual: bool
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class IndexPointUpsertResponse(BaseModel):
    """Result of saving an index point and regenerating dependents."""

    point: IndexPointResponse
    created: bool
    changed: bool
    kept_manual: bool
    regenerated_contracts: int = 0
    regenerated_instruments: int = 0
    failures: list[RegenerationFailureResponse] = []


class ExchangeRateResponse(BaseModel):
    """Resolved rate for a pair on a date."""

    pair: str
    date: date
    rate: Decimal
