"""
Typed results of command interpretation.

The model reply is validated against these shapes at the trust boundary;
anything that does not fit exactly one of them is rejected.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Annotated, Any, Literal

from pydantic import BaseModel, Field, field_validator, model_validator

from intellectory.core.entities.bins import MovementType


class AddParameters(BaseModel):
    name: str = Field(..., min_length=1)
    quantity: float = Field(..., gt=0)
    price: float = Field(..., ge=0)
    supplier: str | None = None

    @field_validator("name", mode="before")
    @classmethod
    def strip_name(cls, v: Any) -> Any:
        return v.strip() if isinstance(v, str) else v

    @field_validator("supplier", mode="before")
    @classmethod
    def blank_supplier_is_cash(cls, v: Any) -> str | None:
        if v is None:
            return None
        text = str(v).strip()
        return text or None


class UpdateParameters(BaseModel):
    name: str = Field(..., min_length=1)
    packed: float | None = None
    lost: float | None = None
    added: float | None = None

    @model_validator(mode="after")
    def needs_a_counter(self) -> "UpdateParameters":
        if self.packed is None and self.lost is None and self.added is None:
            raise ValueError("UPDATE needs at least one of packed, lost, added")
        return self


class AddCommand(BaseModel):
    action: Literal["ADD"]
    parameters: AddParameters
    reasoning: str = ""
    answer: str | None = None


class UpdateCommand(BaseModel):
    action: Literal["UPDATE"]
    parameters: UpdateParameters
    reasoning: str = ""
    answer: str | None = None


class QueryCommand(BaseModel):
    action: Literal["QUERY"]
    parameters: dict[str, Any] = Field(default_factory=dict)
    reasoning: str = ""
    answer: str = Field(..., min_length=1)


class UnknownCommand(BaseModel):
    action: Literal["UNKNOWN"]
    parameters: dict[str, Any] = Field(default_factory=dict)
    reasoning: str = ""
    answer: str | None = None


InterpretedCommand = Annotated[
    AddCommand | UpdateCommand | QueryCommand | UnknownCommand,
    Field(discriminator="action"),
]


@dataclass(frozen=True)
class DateRange:
    """Inclusive reporting window."""

    start: datetime
    end: datetime
    title: str

    def contains(self, moment: datetime) -> bool:
        return self.start <= moment <= self.end


@dataclass(frozen=True)
class BinMovementCommand:
    """A bin movement recognised from free text, before the bin name is resolved."""

    movement_type: MovementType
    quantity: int
    bin_name: str
    party_name: str
