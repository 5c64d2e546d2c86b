"""Data transfer objects for the API layer."""

from intellectory.application.dto.requests import (
    AddBinTypeRequest,
    AddCustomTypeRequest,
    AddPartyRequest,
    AddStockRequest,
    CommandRequest,
    DirectEditRequest,
    EditStockDetailsRequest,
    NotesRequest,
    OurBinsRequest,
    RecordMovementRequest,
    RenameTeamRequest,
    ResetRequest,
    RolloverRequest,
    SetupTeamRequest,
    StatusCountRequest,
    UpdateColorRequest,
    UpdateStockFieldRequest,
)
from intellectory.application.dto.responses import (
    ActivityLogEntryResponse,
    ActivityReportResponse,
    BinSnapshotResponse,
    CommandResponse,
    CreditTransactionResponse,
    ErrorResponse,
    HealthResponse,
    NotesScheduledResponse,
    ProviderHealthResponse,
    SessionResponse,
    StockItemResponse,
    StockStateResponse,
    StockSummaryResponse,
    SupplierResponse,
    TeamMemberResponse,
    TeamResponse,
)

__all__ = [
    # Requests
    "SetupTeamRequest",
    "RenameTeamRequest",
    "AddStockRequest",
    "UpdateStockFieldRequest",
    "EditStockDetailsRequest",
    "RecordMovementRequest",
    "DirectEditRequest",
    "StatusCountRequest",
    "AddPartyRequest",
    "AddBinTypeRequest",
    "AddCustomTypeRequest",
    "UpdateColorRequest",
    "OurBinsRequest",
    "NotesRequest",
    "RolloverRequest",
    "ResetRequest",
    "CommandRequest",
    # Responses
    "ErrorResponse",
    "HealthResponse",
    "ProviderHealthResponse",
    "TeamResponse",
    "TeamMemberResponse",
    "SessionResponse",
    "StockItemResponse",
    "StockSummaryResponse",
    "StockStateResponse",
    "ActivityLogEntryResponse",
    "SupplierResponse",
    "CreditTransactionResponse",
    "BinSnapshotResponse",
    "NotesScheduledResponse",
    "ActivityReportResponse",
    "CommandResponse",
]
