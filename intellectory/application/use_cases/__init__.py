"""Application use cases."""

from intellectory.application.use_cases.add_stock import AddStockResult, AddStockUseCase
from intellectory.application.use_cases.generate_report import GenerateReportUseCase
from intellectory.application.use_cases.interpret_command import (
    InterpretBinCommandUseCase,
    InterpretStockCommandUseCase,
)
from intellectory.application.use_cases.record_bin_movement import RecordBinMovementUseCase
from intellectory.application.use_cases.setup_team import SetupTeamResult, SetupTeamUseCase

__all__ = [
    "SetupTeamUseCase",
    "SetupTeamResult",
    "AddStockUseCase",
    "AddStockResult",
    "RecordBinMovementUseCase",
    "InterpretStockCommandUseCase",
    "InterpretBinCommandUseCase",
    "GenerateReportUseCase",
]
