"""Interpret Command Use Cases: free-text stock and bin commands."""

from datetime import date

from intellectory.application.dto.requests import CommandRequest
from intellectory.application.dto.responses import (
    ActivityReportResponse,
    BinSnapshotResponse,
    CommandResponse,
    StockItemResponse,
)
from intellectory.core.entities.team import SessionContext
from intellectory.core.services import CommandInterpreter, CommandOutcome


class _CommandUseCase:
    def __init__(self, interpreter: CommandInterpreter | None = None):
        self._interpreter = interpreter

    def _get_interpreter(self) -> CommandInterpreter:
        if self._interpreter is None:
            from intellectory.application.services import get_command_interpreter

            self._interpreter = get_command_interpreter()
        return self._interpreter

    def to_response(self, result: CommandOutcome) -> CommandResponse:
        return CommandResponse(
            kind=result.kind.value,
            message=result.message,
            report=ActivityReportResponse.from_report(result.report) if result.report else None,
            items=[StockItemResponse.from_entity(item) for item in result.items],
            pending=result.pending,
            suggestion=result.suggestion,
            snapshot=(
                BinSnapshotResponse.from_snapshot(result.snapshot) if result.snapshot else None
            ),
            warnings=result.warnings,
        )


class InterpretStockCommandUseCase(_CommandUseCase):
    """
    Report phrases are answered locally; anything else is interpreted by the
    LLM. An off-contract model reply raises LLMResponseError and changes
    nothing.
    """

    async def execute(
        self, ctx: SessionContext, request: CommandRequest, today: date | None = None
    ) -> CommandOutcome:
        return await self._get_interpreter().interpret_stock(ctx, request.command, today=today)


class InterpretBinCommandUseCase(_CommandUseCase):
    """Pattern-matched bin movement commands; never calls the LLM."""

    async def execute(self, ctx: SessionContext, request: CommandRequest) -> CommandOutcome:
        return await self._get_interpreter().interpret_bins(ctx, request.command)
