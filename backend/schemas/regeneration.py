"""Pydantic schemas for explicit regeneration requests."""

from typing import Literal, Optional

from pydantic import BaseModel, model_validator

from services.exceptions import RegenerationFailure
from services.regeneration_service import (
    AllContractsScope,
    AllInstrumentsScope,
    ContractScope,
    IndexDependentScope,
    InstrumentScope,
    RegenerationResult,
    RegenerationScope,
)


class RegenerationRequest(BaseModel):
    """Which derived rows to rebuild."""

    scope: Literal["instrument", "contract", "index", "all_contracts", "all_instruments"]
    entity_id: Optional[str] = None
    index_type: Optional[str] = None

    @model_validator(mode="after")
    def check_scope_arguments(self) -> "RegenerationRequest":
        if self.scope in ("instrument", "contract") and not self.entity_id:
            raise ValueError(f"entity_id is required for scope {self.scope!r}")
        if self.scope == "index" and not self.index_type:
            raise ValueError("index_type is required for scope 'index'")
        return self

    def to_scope(self) -> RegenerationScope:
        if self.scope == "instrument":
            return InstrumentScope(self.entity_id)
        if self.scope == "contract":
            return ContractScope(self.entity_id)
        if self.scope == "index":
            return IndexDependentScope(self.index_type.upper())
        if self.scope == "all_contracts":
            return AllContractsScope()
        return AllInstrumentsScope()


class RegenerationFailureResponse(BaseModel):
    entity_id: str
    entity_type: str
    error: str

    @classmethod
    def from_failure(cls, failure: RegenerationFailure) -> "RegenerationFailureResponse":
        return cls(
            entity_id=failure.entity_id,
            entity_type=failure.entity_type,
            error=str(failure.cause),
        )


class RegenerationResponse(BaseModel):
    regenerated: list[str]
    rows_written: int
    failures: list[RegenerationFailureResponse] = []

    @classmethod
    def from_result(cls, result: RegenerationResult) -> "RegenerationResponse":
        return cls(
            regenerated=result.regenerated,
            rows_written=result.rows_written,
            failures=[RegenerationFailureResponse.from_failure(f) for f in result.failures],
        )
