"""Pydantic models served by the customer API."""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class Customer(BaseModel):
    """A named customer identified by a store-assigned id."""

    model_config = ConfigDict(frozen=True)

    id: int = Field(..., description="Identifier assigned by the store on insert")
    name: str = Field(..., description="Free-form display name")

    def __str__(self) -> str:
        return f"Customer(id={self.id}, name={self.name})"


class HealthReport(BaseModel):
    """Readiness report returned by the health probe."""

    status: str = Field(..., description="UP once the service is serving, DOWN otherwise")
    state: str = Field(..., description="Current lifecycle state")
    customers: Optional[int] = Field(None, description="Number of stored customers when UP")
