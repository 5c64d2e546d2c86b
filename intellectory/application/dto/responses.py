"""Response DTOs for API endpoints.

Pydantic v2 models for API response serialization. Mutation endpoints
always answer with a freshly reloaded aggregate plus any non-fatal
warnings (for example a failed audit write).
"""

from datetime import date, datetime
from typing import Any

from pydantic import BaseModel, Field

from intellectory.core.entities.bins import (
    BinHistoryEntry,
    BinParty,
    BinStockSnapshot,
    BinTypeDefinition,
    CustomBinType,
    DailyTotalsRow,
    PartyPosition,
    TodaysMovements,
)
from intellectory.core.entities.reports import ActivityReport, ReportSummary
from intellectory.core.entities.stock import (
    ActivityLogEntry,
    CreditTransaction,
    StockItem,
    StockSummary,
    Supplier,
)
from intellectory.core.entities.team import SessionContext, Team, TeamMember


# Teams
class TeamResponse(BaseModel):
    id: str
    name: str
    owner_id: str
    created_at: datetime

    @classmethod
    def from_entity(cls, team: Team) -> "TeamResponse":
        return cls(id=team.id or "", name=team.name, owner_id=team.owner_id, created_at=team.created_at)


class TeamMemberResponse(BaseModel):
    user_id: str
    role: str

    @classmethod
    def from_entity(cls, member: TeamMember) -> "TeamMemberResponse":
        return cls(user_id=member.user_id, role=member.role.value)


class SessionResponse(BaseModel):
    """The resolved session context."""

    user_id: str
    team_id: str
    team_name: str
    role: str

    @classmethod
    def from_context(cls, ctx: SessionContext) -> "SessionResponse":
        return cls(
            user_id=ctx.user_id,
            team_id=ctx.team_id,
            team_name=ctx.team_name,
            role=ctx.role.value,
        )


# Stock
class StockItemResponse(BaseModel):
    """Stock item with its derived figures."""

    id: str = Field(..., description="Item ID")
    name: str
    category: str = ""
    opening_stock: float
    added_today: float
    packed: float
    lost: float
    used: float = Field(..., description="packed + lost")
    remaining: float = Field(..., description="opening + added - used, may be negative")
    alert_level: float
    price: float = Field(..., description="Unit price")
    stock_value: float = Field(..., description="remaining * price")
    is_low_stock: bool
    color: str

    @classmethod
    def from_entity(cls, item: StockItem) -> "StockItemResponse":
        return cls(
            id=item.id or "",
            name=item.name,
            category=item.category,
            opening_stock=item.opening_stock,
            added_today=item.added_today,
            packed=item.packed,
            lost=item.lost,
            used=item.used,
            remaining=item.remaining,
            alert_level=item.alert_level,
            price=item.price,
            stock_value=item.stock_value,
            is_low_stock=item.is_low_stock,
            color=item.color,
        )


class StockSummaryResponse(BaseModel):
    total_remaining: float
    total_stock_value: float
    low_stock_count: int
    total_items: int

    @classmethod
    def from_entity(cls, summary: StockSummary) -> "StockSummaryResponse":
        return cls(**summary.model_dump())


class CreditTransactionResponse(BaseModel):
    id: str
    supplier_id: str
    stock_item_name: str
    quantity: float
    total_value: float
    created_at: datetime

    @classmethod
    def from_entity(cls, transaction: CreditTransaction) -> "CreditTransactionResponse":
        return cls(
            id=transaction.id or "",
            supplier_id=transaction.supplier_id,
            stock_item_name=transaction.stock_item_name,
            quantity=transaction.quantity,
            total_value=transaction.total_value,
            created_at=transaction.created_at,
        )


class StockStateResponse(BaseModel):
    """Reloaded stock list after a read or mutation."""

    items: list[StockItemResponse] = Field(default_factory=list)
    summary: StockSummaryResponse
    changed: bool = Field(default=True, description="False when the mutation was a no-op")
    transaction: CreditTransactionResponse | None = Field(
        default=None, description="Credit transaction recorded by the mutation"
    )
    warnings: list[str] = Field(default_factory=list)

    @classmethod
    def build(
        cls,
        items: list[StockItem],
        changed: bool = True,
        transaction: CreditTransaction | None = None,
        warnings: list[str] | None = None,
    ) -> "StockStateResponse":
        return cls(
            items=[StockItemResponse.from_entity(item) for item in items],
            summary=StockSummaryResponse.from_entity(StockSummary.from_items(items)),
            changed=changed,
            transaction=(
                CreditTransactionResponse.from_entity(transaction) if transaction else None
            ),
            warnings=warnings or [],
        )


class ActivityLogEntryResponse(BaseModel):
    id: str
    user_id: str | None = None
    item_name: str
    change_description: str
    timestamp: datetime

    @classmethod
    def from_entity(cls, entry: ActivityLogEntry) -> "ActivityLogEntryResponse":
        return cls(
            id=entry.id or "",
            user_id=entry.user_id,
            item_name=entry.item_name,
            change_description=entry.change_description,
            timestamp=entry.timestamp,
        )


class SupplierResponse(BaseModel):
    id: str
    name: str
    balance: float = Field(..., description="Outstanding credit")

    @classmethod
    def from_entity(cls, supplier: Supplier) -> "SupplierResponse":
        return cls(id=supplier.id or "", name=supplier.name, balance=supplier.balance)


# Bins
class BinSnapshotResponse(BaseModel):
    """Full bin ledger aggregate for the team."""

    bin_types: list[BinTypeDefinition] = Field(default_factory=list)
    custom_bin_types: list[CustomBinType] = Field(default_factory=list)
    parties: list[BinParty] = Field(default_factory=list)
    statuses: dict[str, dict[str, int]] = Field(
        default_factory=dict, description="status -> bin type id -> count, total derived"
    )
    owed_to_us: list[PartyPosition] = Field(default_factory=list)
    we_owe: list[PartyPosition] = Field(default_factory=list)
    history: list[BinHistoryEntry] = Field(default_factory=list, description="Newest first")
    notes: str = ""
    our_bins: dict[str, int] = Field(default_factory=dict)
    daily_totals: list[DailyTotalsRow] = Field(default_factory=list)
    totals_date: date | None = None
    todays_movements: TodaysMovements = Field(
        default_factory=TodaysMovements, description="Today's movements by direction"
    )
    warnings: list[str] = Field(default_factory=list)

    @classmethod
    def from_snapshot(
        cls, snapshot: BinStockSnapshot, warnings: list[str] | None = None
    ) -> "BinSnapshotResponse":
        return cls(**snapshot.model_dump(), warnings=warnings or [])


class NotesScheduledResponse(BaseModel):
    """A debounced notes write that has not reached the store yet."""

    scheduled: bool = True
    delay_seconds: float


# Reports
class ActivityReportResponse(BaseModel):
    title: str
    date_range: str = Field(..., description="YYYY-MM-DD - YYYY-MM-DD")
    start: datetime
    end: datetime
    summary: ReportSummary
    detailed_log: list[ActivityLogEntryResponse] = Field(default_factory=list)

    @classmethod
    def from_report(cls, report: ActivityReport) -> "ActivityReportResponse":
        return cls(
            title=report.title,
            date_range=report.date_range,
            start=report.start,
            end=report.end,
            summary=report.summary,
            detailed_log=[ActivityLogEntryResponse.from_entity(e) for e in report.detailed_log],
        )


# Commands
class CommandResponse(BaseModel):
    """Outcome of a free-text command.

    `pending` holds a request awaiting confirmation; resubmit it to the
    matching endpoint once the user agrees.
    """

    kind: str = Field(..., description="What the command did or is waiting for")
    message: str = ""
    report: ActivityReportResponse | None = None
    items: list[StockItemResponse] = Field(default_factory=list)
    pending: dict[str, Any] | None = None
    suggestion: str | None = None
    snapshot: BinSnapshotResponse | None = None
    warnings: list[str] = Field(default_factory=list)


# Health
class ProviderHealthResponse(BaseModel):
    """Provider health status."""

    name: str
    available: bool
    latency_ms: float | None = None
    error: str | None = None


class HealthResponse(BaseModel):
    """Health check response."""

    status: str
    version: str = "1.0.0"
    uptime_seconds: float
    llm: ProviderHealthResponse | None = None
    database: ProviderHealthResponse | None = None


class ErrorResponse(BaseModel):
    """Standardized error response DTO.

    Every error response includes:
    - error_code: machine-readable code (e.g. CONFIRMATION_REQUIRED)
    - message: human-readable description
    - hint: suggested recovery action
    - path: request path that triggered the error

    Confirmation errors also carry `details` with the pending request.
    """

    error_code: str = Field(..., description="Machine-readable error code")
    message: str = Field(..., description="Human-readable error description")
    hint: str | None = Field(default=None, description="Suggested recovery action")
    detail: str | None = Field(default=None, description="Additional details")
    details: dict[str, Any] | None = Field(default=None, description="Structured error context")
    path: str | None = Field(default=None, description="Request path")
    timestamp: datetime = Field(default_factory=datetime.now)
