"""
Free-text command interpreter.

Stock commands: report phrases are answered locally; everything else goes
to the configured LLM and the validated reply is dispatched to the stock
service. Bin commands are matched by pattern only and never reach the
model.
"""

import json
from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import Any

from intellectory.config import get_logger
from intellectory.core.entities.bins import BinStockSnapshot
from intellectory.core.entities.commands import (
    AddCommand,
    InterpretedCommand,
    QueryCommand,
    UpdateCommand,
)
from intellectory.core.entities.reports import ActivityReport
from intellectory.core.entities.stock import StockField, StockItem, Supplier
from intellectory.core.entities.team import SessionContext
from intellectory.core.exceptions import ConfirmationRequiredError, LLMResponseError
from intellectory.core.interfaces.llm import ILLMProvider
from intellectory.core.services.bin_calculations import describe_movement
from intellectory.core.services.bin_ledger import BinLedgerService
from intellectory.core.services.command_parsing import (
    BIN_COMMAND_HELP,
    UNKNOWN_COMMAND_MESSAGE,
    parse_bin_command,
    parse_model_reply,
)
from intellectory.core.services.date_ranges import parse_date_range
from intellectory.core.services.fuzzy_match import MAX_SUGGESTION_DISTANCE, find_supplier
from intellectory.core.services.report_builder import ReportService
from intellectory.core.services.stock_service import StockService

logger = get_logger(__name__)

STOCK_SYSTEM_PROMPT = """You interpret commands for a small-business inventory app.

Available actions are:
1. 'ADD': For adding new stock. Requires 'name', 'quantity', 'price' (unit price). Optional: 'supplier' if it's a credit transaction.
2. 'UPDATE': For changing existing stock. Requires 'name', and one or more of 'packed', 'lost', 'added'.
3. 'QUERY': For asking a question about the inventory. The response should be a natural language answer.
4. 'UNKNOWN': If the command is unclear.

For ADD/UPDATE actions, the 'name' must be an exact match from the provided stock list if possible. If it's a new item, use the name provided.
For QUERY, just answer the question based on the provided data context.

Respond ONLY with a single JSON object in the following format:
{ "action": "ADD|UPDATE|QUERY|UNKNOWN", "parameters": { ... }, "reasoning": "A brief explanation of why you chose this action.", "answer": "A natural language answer if the action is QUERY." }

Example for 'add 100 1.5kg boxes for 250 from deons on credit':
{ "action": "ADD", "parameters": { "name": "1.5kg Narjie boxes", "quantity": 100, "price": 2.50, "supplier": "Deons" }, "reasoning": "Identified 'add' keyword, quantity, total price (250/100=2.50), supplier, and matched '1.5kg boxes' to the closest item name." }

Example for 'we packed 50 of the 1.8kg boxes and lost 5':
{ "action": "UPDATE", "parameters": { "name": "1.8kg Boxes", "packed": 50, "lost": 5 }, "reasoning": "Identified 'packed' and 'lost' keywords and matched the item name." }

Example for 'what is the total value of groenkloof stock?':
{ "action": "QUERY", "parameters": {}, "reasoning": "User is asking a question.", "answer": "The total stock value for items in the 'Groenkloof' category is R28,800.00." }
"""

# UPDATE parameter -> stock field it increments
_UPDATE_FIELDS = {
    "packed": StockField.PACKED,
    "lost": StockField.LOST,
    "added": StockField.ADDED_TODAY,
}


class OutcomeKind(str, Enum):
    REPORT = "report"
    ADDED = "added"
    UPDATED = "updated"
    ANSWER = "answer"
    UNKNOWN = "unknown"
    NOT_FOUND = "not_found"
    SUPPLIER_CONFIRMATION = "supplier_confirmation"
    PRICE_CONFIRMATION = "price_confirmation"
    BIN_MOVEMENT = "bin_movement"


@dataclass
class CommandOutcome:
    """What a command did, or what it is waiting for."""

    kind: OutcomeKind
    message: str = ""
    report: ActivityReport | None = None
    items: list[StockItem] = field(default_factory=list)
    pending: dict[str, Any] | None = None
    suggestion: str | None = None
    snapshot: BinStockSnapshot | None = None
    warnings: list[str] = field(default_factory=list)


def build_stock_prompt(command: str, items: list[StockItem], suppliers: list[Supplier]) -> str:
    """User prompt with the command and the current data context (ids stripped)."""
    inventory = [item.model_dump(exclude={"id", "team_id"}) for item in items]
    names = [s.name for s in suppliers]
    return (
        "The user provided the following command for their inventory management app: "
        f'"{command}".\n'
        "Based on this command, determine the action and parameters.\n\n"
        f"Here is the current inventory data:\n{json.dumps(inventory, indent=2)}\n\n"
        f"Here are the current suppliers:\n{json.dumps(names, indent=2)}\n"
    )


class CommandInterpreter:
    """Interprets stock and bin commands."""

    def __init__(
        self,
        llm: ILLMProvider,
        stock_service: StockService,
        bin_ledger: BinLedgerService,
        report_service: ReportService,
        supplier_match_distance: int = MAX_SUGGESTION_DISTANCE,
        temperature: float | None = None,
    ):
        self._llm = llm
        self._stock = stock_service
        self._bins = bin_ledger
        self._reports = report_service
        self._supplier_match_distance = supplier_match_distance
        self._temperature = temperature

    async def interpret_stock(
        self,
        ctx: SessionContext,
        command: str,
        today: date | None = None,
    ) -> CommandOutcome:
        """
        Run a stock command.

        Raises:
            LLMResponseError: the model reply did not fit the command
                contract; nothing was changed.
            LLMError: the model could not be reached.
        """
        command = command.strip()

        date_range = parse_date_range(command, today=today)
        if date_range is not None:
            report = await self._reports.generate(ctx.team_id, date_range)
            return CommandOutcome(kind=OutcomeKind.REPORT, message=report.title, report=report)

        items = await self._stock.list_items(ctx)
        suppliers = await self._stock.suppliers(ctx)

        try:
            response = await self._llm.generate(
                build_stock_prompt(command, items, suppliers),
                system_prompt=STOCK_SYSTEM_PROMPT,
                temperature=self._temperature,
                json_mode=True,
            )
            interpreted = parse_model_reply(response.text)
        except LLMResponseError as e:
            logger.warning(
                "command_dropped",
                team_id=ctx.team_id,
                command=command[:100],
                reason=e.details.get("reason"),
            )
            raise

        logger.info(
            "command_interpreted",
            team_id=ctx.team_id,
            action=interpreted.action,
            reasoning=interpreted.reasoning[:200],
        )
        return await self._dispatch(ctx, interpreted, suppliers)

    async def interpret_bins(self, ctx: SessionContext, command: str) -> CommandOutcome:
        """Run a `send|receive|return <qty> <bin> to|from <party>` command."""
        parsed = parse_bin_command(command)
        if parsed is None:
            return CommandOutcome(kind=OutcomeKind.UNKNOWN, message=BIN_COMMAND_HELP)

        bin_type = await self._bins.find_bin_type_by_name(ctx, parsed.bin_name)
        if bin_type is None:
            return CommandOutcome(
                kind=OutcomeKind.NOT_FOUND,
                message=f'Could not find a bin type named "{parsed.bin_name}".',
            )

        result = await self._bins.record_movement(
            ctx,
            parsed.movement_type,
            parsed.quantity,
            bin_type.id or "",
            parsed.party_name,
        )
        return CommandOutcome(
            kind=OutcomeKind.BIN_MOVEMENT,
            message=describe_movement(
                parsed.movement_type, parsed.quantity, bin_type.name, parsed.party_name
            ),
            snapshot=result.snapshot,
            warnings=result.warnings,
        )

    async def _dispatch(
        self,
        ctx: SessionContext,
        interpreted: InterpretedCommand,
        suppliers: list[Supplier],
    ) -> CommandOutcome:
        if isinstance(interpreted, AddCommand):
            return await self._add(ctx, interpreted, suppliers)
        if isinstance(interpreted, UpdateCommand):
            return await self._update(ctx, interpreted)
        if isinstance(interpreted, QueryCommand):
            return CommandOutcome(kind=OutcomeKind.ANSWER, message=interpreted.answer)
        return CommandOutcome(kind=OutcomeKind.UNKNOWN, message=UNKNOWN_COMMAND_MESSAGE)

    async def _add(
        self,
        ctx: SessionContext,
        command: AddCommand,
        suppliers: list[Supplier],
    ) -> CommandOutcome:
        params = command.parameters
        supplier_name = params.supplier
        pending = {
            "name": params.name,
            "quantity": params.quantity,
            "price": params.price,
            "supplier": supplier_name,
        }

        if supplier_name:
            match = find_supplier(supplier_name, suppliers, self._supplier_match_distance)
            if match.supplier is not None:
                supplier_name = match.supplier.name
            elif match.suggestion is not None:
                return CommandOutcome(
                    kind=OutcomeKind.SUPPLIER_CONFIRMATION,
                    message=f'Did you mean the supplier "{match.suggestion}"?',
                    pending={**pending, "supplier": match.suggestion},
                    suggestion=match.suggestion,
                )

        try:
            change = await self._stock.add_stock(
                ctx, params.name, params.quantity, params.price, supplier=supplier_name
            )
        except ConfirmationRequiredError as e:
            return CommandOutcome(
                kind=OutcomeKind.PRICE_CONFIRMATION,
                message=e.message,
                pending=e.details.get("pending"),
            )

        return CommandOutcome(
            kind=OutcomeKind.ADDED,
            message=f"Added {params.name}.",
            items=[change.item] if change.item else [],
            warnings=change.warnings,
        )

    async def _update(self, ctx: SessionContext, command: UpdateCommand) -> CommandOutcome:
        params = command.parameters
        item = await self._stock.find_item(ctx, params.name)
        if item is None:
            return CommandOutcome(
                kind=OutcomeKind.NOT_FOUND,
                message=f'Could not find a stock item named "{params.name}".',
            )

        warnings: list[str] = []
        updated = item
        for key, stock_field in _UPDATE_FIELDS.items():
            delta = getattr(params, key)
            if delta is None:
                continue
            new_value = getattr(item, stock_field.value) + delta
            change = await self._stock.update_field(ctx, item.id or "", stock_field, new_value)
            warnings.extend(change.warnings)
            if change.item is not None:
                updated = change.item

        return CommandOutcome(
            kind=OutcomeKind.UPDATED,
            message=f"Updated {item.name}.",
            items=[updated],
            warnings=warnings,
        )
