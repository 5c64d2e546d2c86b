"""Domain entities."""

from intellectory.core.entities.bins import (
    BinBalance,
    BinCategory,
    BinHistoryEntry,
    BinParty,
    BinStatus,
    BinStockSnapshot,
    BinTypeDefinition,
    CustomBinType,
    DailyBinTotal,
    DailyTotalsRow,
    HistoryEntryType,
    MixedSubCategory,
    MovementType,
    Partition,
    PartyPosition,
    TodaysMovements,
)
from intellectory.core.entities.commands import (
    AddCommand,
    AddParameters,
    BinMovementCommand,
    DateRange,
    InterpretedCommand,
    QueryCommand,
    UnknownCommand,
    UpdateCommand,
    UpdateParameters,
)
from intellectory.core.entities.reports import ActivityReport, ReportSummary
from intellectory.core.entities.stock import (
    ActivityLogEntry,
    CreditTransaction,
    StockField,
    StockItem,
    StockSummary,
    Supplier,
)
from intellectory.core.entities.team import SessionContext, Team, TeamMember, TeamRole

__all__ = [
    # Stock
    "StockItem",
    "StockField",
    "StockSummary",
    "ActivityLogEntry",
    "Supplier",
    "CreditTransaction",
    # Bins
    "BinCategory",
    "MixedSubCategory",
    "BinStatus",
    "MovementType",
    "HistoryEntryType",
    "Partition",
    "BinTypeDefinition",
    "CustomBinType",
    "BinParty",
    "BinBalance",
    "TodaysMovements",
    "DailyBinTotal",
    "DailyTotalsRow",
    "BinHistoryEntry",
    "PartyPosition",
    "BinStockSnapshot",
    # Commands
    "AddParameters",
    "UpdateParameters",
    "AddCommand",
    "UpdateCommand",
    "QueryCommand",
    "UnknownCommand",
    "InterpretedCommand",
    "DateRange",
    "BinMovementCommand",
    # Reports
    "ActivityReport",
    "ReportSummary",
    # Team
    "Team",
    "TeamMember",
    "TeamRole",
    "SessionContext",
]
