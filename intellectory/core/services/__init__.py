"""Domain services."""

from intellectory.core.services.bin_ledger import BinLedgerService, LedgerResult
from intellectory.core.services.command_interpreter import (
    CommandInterpreter,
    CommandOutcome,
    OutcomeKind,
)
from intellectory.core.services.date_ranges import parse_date_range
from intellectory.core.services.fuzzy_match import find_supplier, levenshtein_distance
from intellectory.core.services.notes_debouncer import NotesDebouncer
from intellectory.core.services.report_builder import ReportService, build_report
from intellectory.core.services.session_service import SessionService
from intellectory.core.services.stock_service import PriceDecision, StockChange, StockService

__all__ = [
    "BinLedgerService",
    "LedgerResult",
    "CommandInterpreter",
    "CommandOutcome",
    "OutcomeKind",
    "NotesDebouncer",
    "ReportService",
    "build_report",
    "SessionService",
    "StockService",
    "StockChange",
    "PriceDecision",
    "parse_date_range",
    "find_supplier",
    "levenshtein_distance",
]
