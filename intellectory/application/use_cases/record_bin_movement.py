"""Record Bin Movement Use Case: sent/received/returned bins for a party."""

from intellectory.application.dto.requests import RecordMovementRequest
from intellectory.application.dto.responses import BinSnapshotResponse
from intellectory.config import get_logger
from intellectory.core.entities.team import SessionContext
from intellectory.core.services import BinLedgerService, LedgerResult

logger = get_logger(__name__)


class RecordBinMovementUseCase:
    """Apply a movement to the party's balance and audit it."""

    def __init__(self, bin_ledger: BinLedgerService | None = None):
        self._bin_ledger = bin_ledger

    def _get_bin_ledger(self) -> BinLedgerService:
        if self._bin_ledger is None:
            from intellectory.application.services import get_bin_ledger_service

            self._bin_ledger = get_bin_ledger_service()
        return self._bin_ledger

    async def execute(self, ctx: SessionContext, request: RecordMovementRequest) -> LedgerResult:
        logger.info(
            "record_movement_started",
            team_id=ctx.team_id,
            movement_type=request.movement_type.value,
            quantity=request.quantity,
        )

        return await self._get_bin_ledger().record_movement(
            ctx,
            request.movement_type,
            request.quantity,
            request.bin_type_id,
            request.party_name,
            transporter=request.transporter,
            contents=request.contents,
        )

    def to_response(self, result: LedgerResult) -> BinSnapshotResponse:
        return BinSnapshotResponse.from_snapshot(result.snapshot, result.warnings)
