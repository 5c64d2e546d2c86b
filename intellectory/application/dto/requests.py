"""Request DTOs for API endpoints.

Pydantic v2 models for API request validation.
Numeric business rules (positive quantities, non-negative counts) are
checked by the domain services so they surface as 400 VALIDATION_ERROR.
"""

from datetime import date

from pydantic import BaseModel, Field

from intellectory.core.entities.bins import (
    BinCategory,
    BinStatus,
    MixedSubCategory,
    MovementType,
    Partition,
)
from intellectory.core.entities.stock import StockField
from intellectory.core.services.stock_service import PriceDecision


# Teams
class SetupTeamRequest(BaseModel):
    """Create a team owned by the caller."""

    name: str = Field(..., min_length=1, description="Team name", examples=["Groenkloof Packhouse"])


class RenameTeamRequest(BaseModel):
    name: str = Field(..., min_length=1, description="New team name")


# Stock
class AddStockRequest(BaseModel):
    """Add quantity to an item, creating it when no item matches the name.

    Resubmit with `price_decision` after a 409 price confirmation.
    """

    name: str = Field(..., min_length=1, description="Item name (matched case-insensitively)")
    quantity: float = Field(..., description="Units added")
    price: float = Field(..., description="Unit price")
    supplier: str | None = Field(
        default=None,
        description="Supplier name when bought on credit",
        examples=["Deons"],
    )
    alert_level: float | None = Field(default=None, description="Low stock threshold for new items")
    color: str | None = Field(default=None, description="Display color for new items")
    category: str = Field(default="", description="Category for new items")
    price_decision: PriceDecision | None = Field(
        default=None,
        description="keep: add quantity only; update: also overwrite the price",
    )


class UpdateStockFieldRequest(BaseModel):
    field: StockField = Field(..., description="Numeric field to set")
    value: float = Field(..., description="New value")


class EditStockDetailsRequest(BaseModel):
    name: str = Field(..., min_length=1)
    category: str = ""
    color: str = Field(..., description="Hex color", examples=["#3B82F6"])


# Bins
class RecordMovementRequest(BaseModel):
    """A sent/received/returned movement of bins."""

    movement_type: MovementType = Field(..., description="sent, received or returned")
    quantity: int = Field(..., description="Number of bins, must be positive")
    bin_type_id: str = Field(..., min_length=1)
    party_name: str = Field(
        ...,
        min_length=1,
        description="Party name; matched case-insensitively or created",
        examples=["Ziyard"],
    )
    transporter: str | None = Field(default=None, description="Carrier, if any")
    contents: str | None = Field(default=None, description="What the bins held")


class DirectEditRequest(BaseModel):
    """Overwrite a displayed balance. Resubmit with `confirmed` after a 409."""

    party_id: str
    bin_type_id: str
    new_value: int = Field(..., description="Displayed (non-negative) magnitude")
    confirmed: bool = False
    partition: Partition | None = Field(
        default=None,
        description="Side of the ledger the value was edited on; inferred when omitted",
    )


class StatusCountRequest(BaseModel):
    status: BinStatus = Field(..., description="full, inFridge, broken or dump")
    bin_type_id: str
    quantity: int


class AddPartyRequest(BaseModel):
    name: str = Field(..., min_length=1)


class AddBinTypeRequest(BaseModel):
    name: str = Field(..., min_length=1)
    color: str = Field(..., examples=["#3B82F6"])
    category: BinCategory = BinCategory.STANDARD
    sub_category: MixedSubCategory | None = Field(
        default=None, description="Required for mixed bin types"
    )


class AddCustomTypeRequest(BaseModel):
    name: str = Field(..., min_length=1)
    sub_category: MixedSubCategory
    color: str = "#71717A"


class UpdateColorRequest(BaseModel):
    color: str = Field(..., min_length=1)


class OurBinsRequest(BaseModel):
    bin_type_id: str
    quantity: int


class NotesRequest(BaseModel):
    text: str
    immediate: bool = Field(
        default=False,
        description="Write now instead of coalescing with following edits",
    )


class RolloverRequest(BaseModel):
    new_date: date = Field(..., description="Day whose opening totals are computed")


class ResetRequest(BaseModel):
    confirmed: bool = False


# Commands
class CommandRequest(BaseModel):
    command: str = Field(
        ...,
        min_length=1,
        max_length=1000,
        description="Free-text command",
        examples=["we packed 50 of the 1.8kg boxes and lost 5", "send 10 chep plastic to Ziyard"],
    )
