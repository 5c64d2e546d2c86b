"""
Service factory functions for dependency injection.

This module wires infrastructure implementations (table-backed stores,
LLM provider) to core services. Routes and use cases import from here.

Clean Architecture: Application layer orchestrates DI, not core layer.
"""

from typing import TYPE_CHECKING

from intellectory.config import get_settings
from intellectory.core.services import (
    BinLedgerService,
    CommandInterpreter,
    NotesDebouncer,
    ReportService,
    SessionService,
    StockService,
)

if TYPE_CHECKING:
    from intellectory.core.interfaces import ILLMProvider, ITableClient


# Singleton service instances
_stock_service: StockService | None = None
_bin_ledger_service: BinLedgerService | None = None
_report_service: ReportService | None = None
_session_service: SessionService | None = None
_command_interpreter: CommandInterpreter | None = None
_notes_debouncer: NotesDebouncer | None = None


def get_stock_service(client: "ITableClient | None" = None) -> StockService:
    """
    Get or create StockService instance.

    Args:
        client: Optional table client override (not cached)
    """
    global _stock_service

    if _stock_service is not None and client is None:
        return _stock_service

    # Lazy import infrastructure to avoid circular imports
    from intellectory.infrastructure.storage.stores import (
        TableActivityLogStore,
        TableStockStore,
        TableSupplierStore,
    )

    settings = get_settings()
    service = StockService(
        stock_store=TableStockStore(client),
        activity_store=TableActivityLogStore(client),
        supplier_store=TableSupplierStore(client),
        price_tolerance=settings.stock.price_tolerance,
        default_alert_level=settings.stock.default_alert_level,
    )

    if client is None:
        _stock_service = service

    return service


def get_bin_ledger_service(client: "ITableClient | None" = None) -> BinLedgerService:
    """Get or create BinLedgerService instance."""
    global _bin_ledger_service

    if _bin_ledger_service is not None and client is None:
        return _bin_ledger_service

    from intellectory.infrastructure.storage.stores import TableBinStore

    service = BinLedgerService(
        bin_store=TableBinStore(client),
        history_limit=get_settings().bins.history_limit,
    )

    if client is None:
        _bin_ledger_service = service

    return service


def get_report_service(client: "ITableClient | None" = None) -> ReportService:
    """Get or create ReportService instance."""
    global _report_service

    if _report_service is not None and client is None:
        return _report_service

    from intellectory.infrastructure.storage.stores import TableActivityLogStore

    service = ReportService(activity_store=TableActivityLogStore(client))

    if client is None:
        _report_service = service

    return service


def get_session_service(client: "ITableClient | None" = None) -> SessionService:
    """
    Get or create SessionService instance.

    New teams are seeded with default bin types through the bin ledger.
    """
    global _session_service

    if _session_service is not None and client is None:
        return _session_service

    from intellectory.infrastructure.storage.stores import TableTeamStore

    settings = get_settings()
    service = SessionService(
        team_store=TableTeamStore(client),
        bin_ledger=get_bin_ledger_service(client),
        check_timeout=settings.auth.session_check_timeout,
        seed_default_types=settings.bins.seed_default_types,
    )

    if client is None:
        _session_service = service

    return service


def get_command_interpreter(
    llm_provider: "ILLMProvider | None" = None,
) -> CommandInterpreter:
    """
    Get or create CommandInterpreter instance.

    The LLM provider is resolved lazily from settings; report phrases and
    bin commands never reach it.
    """
    global _command_interpreter

    if _command_interpreter is not None and llm_provider is None:
        return _command_interpreter

    # Lazy import infrastructure
    from intellectory.infrastructure.llm import get_llm_provider

    settings = get_settings()
    interpreter = CommandInterpreter(
        llm=llm_provider or get_llm_provider(),
        stock_service=get_stock_service(),
        bin_ledger=get_bin_ledger_service(),
        report_service=get_report_service(),
        supplier_match_distance=settings.stock.supplier_match_distance,
        temperature=settings.llm.temperature,
    )

    if llm_provider is None:
        _command_interpreter = interpreter

    return interpreter


def get_notes_debouncer() -> NotesDebouncer:
    """Get or create the per-process notes debouncer."""
    global _notes_debouncer

    if _notes_debouncer is None:
        ledger = get_bin_ledger_service()
        _notes_debouncer = NotesDebouncer(
            writer=ledger.update_notes,
            delay=get_settings().bins.notes_debounce_seconds,
        )

    return _notes_debouncer


async def flush_pending_writes() -> None:
    """Write debounced notes still waiting for their delay (shutdown hook)."""
    if _notes_debouncer is not None:
        await _notes_debouncer.flush()


def reset_services() -> None:
    """Drop cached service instances (for testing)."""
    global _stock_service, _bin_ledger_service, _report_service
    global _session_service, _command_interpreter, _notes_debouncer

    _stock_service = None
    _bin_ledger_service = None
    _report_service = None
    _session_service = None
    _command_interpreter = None
    _notes_debouncer = None
