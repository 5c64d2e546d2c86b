"""
Bin ledger service.

Translates movements, direct balance edits, status counts and
administrative changes into store writes. Every write is followed by a
full reload of the bin aggregate; nothing is merged locally.

The balance write and its audit entry are two independent store calls.
A failed balance write aborts before any audit entry is written. A failed
audit write after a successful balance write is logged and surfaced as a
warning on the result rather than undoing the balance.
"""

from dataclasses import dataclass, field
from datetime import date, timedelta
from typing import Any

from intellectory.config import get_logger
from intellectory.core.entities.bins import (
    BinBalance,
    BinCategory,
    BinHistoryEntry,
    BinParty,
    BinStatus,
    BinStockSnapshot,
    BinTypeDefinition,
    DailyBinTotal,
    HistoryEntryType,
    MixedSubCategory,
    MovementType,
    Partition,
)
from intellectory.core.entities.team import SessionContext
from intellectory.core.exceptions import (
    BinTypeNotFoundError,
    ConfirmationRequiredError,
    PartyNotFoundError,
    StorageError,
    ValidationError,
)
from intellectory.core.interfaces.stores import IBinStore
from intellectory.core.services.bin_calculations import (
    apply_movement,
    describe_movement,
    now_total,
    partition_parties,
    resolve_partition,
    to_stored_balance,
)

logger = get_logger(__name__)

# (name, color, category, sub_category)
DEFAULT_BIN_TYPES: list[tuple[str, str, BinCategory, MixedSubCategory | None]] = [
    ("Chep Plastic", "#3B82F6", BinCategory.STANDARD, None),
    ("Chep Wood", "#A16207", BinCategory.STANDARD, None),
    ("F1 Wood", "#854d0e", BinCategory.STANDARD, None),
    ("ALG", "#16A34A", BinCategory.STANDARD, None),
    ("C/Select", "#6D28D9", BinCategory.STANDARD, None),
    ("M Jackson", "#1F2937", BinCategory.STANDARD, None),
    ("Mixed Wood", "#78716C", BinCategory.MIXED, MixedSubCategory.MIXED_WOOD),
    ("Mixed Plastic", "#71717A", BinCategory.MIXED, MixedSubCategory.MIXED_PLASTIC),
]


@dataclass
class LedgerResult:
    """Reloaded aggregate after a write, plus non-fatal problems."""

    snapshot: BinStockSnapshot
    warnings: list[str] = field(default_factory=list)


class BinLedgerService:
    """All bin movement, balance, status and administrative operations."""

    def __init__(self, bin_store: IBinStore, history_limit: int = 200) -> None:
        self._store = bin_store
        self._history_limit = history_limit

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    async def snapshot(
        self, ctx: SessionContext, totals_date: date | None = None
    ) -> BinStockSnapshot:
        return await self._store.load_snapshot(
            ctx.team_id,
            history_limit=self._history_limit,
            totals_date=totals_date,
        )

    async def find_bin_type_by_name(
        self, ctx: SessionContext, name: str
    ) -> BinTypeDefinition | None:
        """Case-insensitive lookup among standard and mixed types."""
        wanted = name.strip().lower()
        for bin_type in await self._store.list_bin_types(ctx.team_id):
            if bin_type.category is not BinCategory.CUSTOM and bin_type.name.lower() == wanted:
                return bin_type
        return None

    # ------------------------------------------------------------------
    # Movements and balances
    # ------------------------------------------------------------------

    async def record_movement(
        self,
        ctx: SessionContext,
        movement_type: MovementType,
        quantity: int,
        bin_type_id: str,
        party_name: str,
        transporter: str | None = None,
        contents: str | None = None,
    ) -> LedgerResult:
        """Apply a sent/received/returned movement to the (party, bin) balance."""
        if quantity <= 0:
            raise ValidationError("quantity", "must be greater than zero", quantity)
        party_name = party_name.strip()
        if not party_name:
            raise ValidationError("party_name", "is required")

        bin_type = await self._require_bin_type(ctx, bin_type_id)

        party = await self._store.find_party_by_name(ctx.team_id, party_name)
        if party is None:
            party = await self._store.create_party(BinParty(team_id=ctx.team_id, name=party_name))
            logger.info("bin_party_created", team_id=ctx.team_id, party=party.name)

        current = await self._store.get_balance(ctx.team_id, party.id or "", bin_type_id)
        old_balance = current.balance if current else 0
        new_balance = apply_movement(old_balance, movement_type, quantity)

        await self._store.upsert_balance(
            BinBalance(
                team_id=ctx.team_id,
                party_id=party.id or "",
                bin_type_id=bin_type_id,
                balance=new_balance,
            )
        )

        transporter = transporter.strip() if transporter else None
        contents = contents.strip() if contents else None
        description = describe_movement(
            movement_type, quantity, bin_type.name, party_name, transporter, contents
        )
        warnings = await self._audit(
            ctx,
            HistoryEntryType.MOVEMENT,
            description,
            {
                "movement_type": movement_type.value,
                "quantity": quantity,
                "bin_name": bin_type.name,
                "party_name": party_name,
                "transporter": transporter,
                "bin_contents": contents,
            },
        )

        logger.info(
            "bin_movement_recorded",
            team_id=ctx.team_id,
            movement_type=movement_type.value,
            quantity=quantity,
            bin_type_id=bin_type_id,
            party=party_name,
            old_balance=old_balance,
            new_balance=new_balance,
        )
        return LedgerResult(snapshot=await self.snapshot(ctx), warnings=warnings)

    async def direct_edit(
        self,
        ctx: SessionContext,
        party_id: str,
        bin_type_id: str,
        new_value: int,
        confirmed: bool = False,
        partition: Partition | None = None,
    ) -> LedgerResult:
        """
        Overwrite a party's displayed balance for one bin type.

        `new_value` is the positive, displayed count. For a party on the
        "we owe" side the stored balance is its negation.

        Raises:
            ConfirmationRequiredError: when `confirmed` is not set; carries
                the old and new values for the caller to show.
        """
        if new_value < 0:
            raise ValidationError("new_value", "displayed balances are never negative", new_value)

        party = await self._require_party(ctx, party_id)
        bin_type = await self._require_bin_type(ctx, bin_type_id)

        current = await self._store.get_balance(ctx.team_id, party_id, bin_type_id)
        current_balance = current.balance if current else 0
        if partition is None:
            balances = await self._store.list_balances(ctx.team_id, party_id=party_id)
            owed_to_us, we_owe = partition_parties([party], balances)
            partition = resolve_partition(party_id, current_balance, owed_to_us, we_owe)
        old_value = abs(current_balance)

        if not confirmed:
            raise ConfirmationRequiredError(
                f"Are you sure you want to manually update {party.name}'s balance for "
                f"{bin_type.name} from {old_value} to {new_value}?",
                reason="direct_edit",
                pending={
                    "party_id": party_id,
                    "bin_type_id": bin_type_id,
                    "new_value": new_value,
                    "partition": partition.value,
                },
                old_value=old_value,
                new_value=new_value,
            )

        stored = to_stored_balance(new_value, partition)
        await self._store.upsert_balance(
            BinBalance(
                team_id=ctx.team_id,
                party_id=party_id,
                bin_type_id=bin_type_id,
                balance=stored,
            )
        )

        # Audited even when the value did not change
        warnings = await self._audit(
            ctx,
            HistoryEntryType.EDIT,
            f"Manually changed {bin_type.name} for {party.name} from {old_value} to {new_value}.",
            {
                "party_name": party.name,
                "bin_name": bin_type.name,
                "old_value": old_value,
                "new_value": new_value,
                "partition": partition.value,
            },
        )

        logger.info(
            "bin_balance_edited",
            team_id=ctx.team_id,
            party_id=party_id,
            bin_type_id=bin_type_id,
            stored_balance=stored,
        )
        return LedgerResult(snapshot=await self.snapshot(ctx), warnings=warnings)

    async def update_status_count(
        self,
        ctx: SessionContext,
        status: BinStatus,
        bin_type_id: str,
        quantity: int,
    ) -> LedgerResult:
        """Set one (status, bin type) count. The total row is derived and cannot be set."""
        if status is BinStatus.TOTAL:
            raise ValidationError(
                "status", "'total' is derived from full, inFridge, broken and dump", status.value
            )
        if quantity < 0:
            raise ValidationError("quantity", "must not be negative", quantity)

        await self._require_bin_type(ctx, bin_type_id)
        await self._store.upsert_status_count(ctx.team_id, bin_type_id, status, quantity)

        logger.info(
            "bin_status_updated",
            team_id=ctx.team_id,
            status=status.value,
            bin_type_id=bin_type_id,
            quantity=quantity,
        )
        return LedgerResult(snapshot=await self.snapshot(ctx))

    # ------------------------------------------------------------------
    # Parties
    # ------------------------------------------------------------------

    async def add_party(self, ctx: SessionContext, name: str) -> LedgerResult:
        name = name.strip()
        if not name:
            raise ValidationError("name", "is required")
        if await self._store.find_party_by_name(ctx.team_id, name):
            raise ValidationError("name", "a party with this name already exists", name)

        party = await self._store.create_party(BinParty(team_id=ctx.team_id, name=name))
        warnings = await self._audit(
            ctx, HistoryEntryType.PARTY, f"Added party {party.name}.", {"party_name": party.name}
        )
        logger.info("bin_party_added", team_id=ctx.team_id, party=party.name)
        return LedgerResult(snapshot=await self.snapshot(ctx), warnings=warnings)

    async def remove_party(
        self, ctx: SessionContext, party_id: str, confirmed: bool = False
    ) -> LedgerResult:
        """Delete a party and, by cascade, all its balances. Irreversible."""
        party = await self._require_party(ctx, party_id)
        balances = [b for b in await self._store.list_balances(ctx.team_id, party_id=party_id) if b.balance]

        if not confirmed:
            raise ConfirmationRequiredError(
                f"Are you sure you want to remove {party.name}? All their bin balances "
                f"will be cleared. This action cannot be undone.",
                reason="remove_party",
                pending={"party_id": party_id},
                outstanding_balances=len(balances),
            )

        names = {bt.id: bt.name for bt in await self._store.list_bin_types(ctx.team_id)}
        cleared = {names.get(b.bin_type_id, b.bin_type_id): b.balance for b in balances}

        await self._store.delete_party(ctx.team_id, party_id)
        warnings = await self._audit(
            ctx,
            HistoryEntryType.PARTY,
            f"Removed party {party.name} and cleared {len(cleared)} balance(s).",
            {"party_name": party.name, "cleared_balances": cleared},
        )
        logger.warning("bin_party_removed", team_id=ctx.team_id, party=party.name, cleared=cleared)
        return LedgerResult(snapshot=await self.snapshot(ctx), warnings=warnings)

    # ------------------------------------------------------------------
    # Bin types
    # ------------------------------------------------------------------

    async def add_bin_type(
        self,
        ctx: SessionContext,
        name: str,
        color: str,
        category: BinCategory = BinCategory.STANDARD,
        sub_category: MixedSubCategory | None = None,
    ) -> LedgerResult:
        """Add a standard or mixed bin type. Custom leaf types use add_custom_type."""
        if category is BinCategory.CUSTOM:
            raise ValidationError("category", "use the custom type endpoint for leaf types")
        if category is BinCategory.MIXED and sub_category is None:
            raise ValidationError("sub_category", "is required for mixed bin types")
        if category is BinCategory.STANDARD:
            sub_category = None

        bin_type = await self._create_type(
            ctx,
            BinTypeDefinition(
                team_id=ctx.team_id,
                name=name.strip(),
                color=color,
                category=category,
                sub_category=sub_category,
            ),
        )
        warnings = await self._audit(
            ctx,
            HistoryEntryType.CONFIG,
            f"Added {category.value} bin type {bin_type.name}.",
            {"bin_name": bin_type.name, "category": category.value},
        )
        return LedgerResult(snapshot=await self.snapshot(ctx), warnings=warnings)

    async def add_custom_type(
        self,
        ctx: SessionContext,
        name: str,
        sub_category: MixedSubCategory,
        color: str = "#71717A",
    ) -> LedgerResult:
        """Add a leaf type that rolls up into a mixed bucket."""
        bin_type = await self._create_type(
            ctx,
            BinTypeDefinition(
                team_id=ctx.team_id,
                name=name.strip(),
                color=color,
                category=BinCategory.CUSTOM,
                sub_category=sub_category,
            ),
        )
        warnings = await self._audit(
            ctx,
            HistoryEntryType.CONFIG,
            f"Added custom bin type {bin_type.name} under {sub_category.value}.",
            {"bin_name": bin_type.name, "sub_category": sub_category.value},
        )
        return LedgerResult(snapshot=await self.snapshot(ctx), warnings=warnings)

    async def remove_bin_type(self, ctx: SessionContext, bin_type_id: str) -> LedgerResult:
        """
        Remove a bin type or custom type.

        Nonzero balances do not block removal; they are recorded in the
        audit entry instead.
        """
        bin_type = await self._require_bin_type(ctx, bin_type_id)
        outstanding = {
            b.party_id: b.balance
            for b in await self._store.list_balances(ctx.team_id)
            if b.bin_type_id == bin_type_id and b.balance
        }

        await self._store.delete_bin_type(ctx.team_id, bin_type_id)
        if outstanding:
            logger.warning(
                "bin_type_removed_with_balances",
                team_id=ctx.team_id,
                bin_type_id=bin_type_id,
                outstanding=outstanding,
            )

        warnings = await self._audit(
            ctx,
            HistoryEntryType.CONFIG,
            f"Removed bin type {bin_type.name}.",
            {"bin_name": bin_type.name, "outstanding_balances": outstanding},
        )
        return LedgerResult(snapshot=await self.snapshot(ctx), warnings=warnings)

    async def update_color(self, ctx: SessionContext, bin_type_id: str, color: str) -> LedgerResult:
        bin_type = await self._require_bin_type(ctx, bin_type_id)
        await self._store.update_bin_type(ctx.team_id, bin_type_id, {"color": color})
        warnings = await self._audit(
            ctx,
            HistoryEntryType.CONFIG,
            f"Changed color of {bin_type.name} to {color}.",
            {"bin_name": bin_type.name, "old_color": bin_type.color, "new_color": color},
        )
        return LedgerResult(snapshot=await self.snapshot(ctx), warnings=warnings)

    async def seed_default_types(self, team_id: str) -> list[BinTypeDefinition]:
        """Create the built-in bin types for a new team."""
        return await self._store.create_bin_types(
            [
                BinTypeDefinition(
                    team_id=team_id,
                    name=name,
                    color=color,
                    category=category,
                    is_default=True,
                    sub_category=sub_category,
                )
                for name, color, category, sub_category in DEFAULT_BIN_TYPES
            ]
        )

    # ------------------------------------------------------------------
    # Owned bins, notes, rollover, reset
    # ------------------------------------------------------------------

    async def set_our_bins(self, ctx: SessionContext, bin_type_id: str, quantity: int) -> LedgerResult:
        """Set how many bins of a type the company itself owns."""
        if quantity < 0:
            raise ValidationError("quantity", "must not be negative", quantity)
        bin_type = await self._require_bin_type(ctx, bin_type_id)
        await self._store.upsert_our_bins(ctx.team_id, bin_type_id, quantity)
        warnings = await self._audit(
            ctx,
            HistoryEntryType.CONFIG,
            f"Set company-owned {bin_type.name} to {quantity}.",
            {"bin_name": bin_type.name, "quantity": quantity},
        )
        return LedgerResult(snapshot=await self.snapshot(ctx), warnings=warnings)

    async def update_notes(self, ctx: SessionContext, text: str) -> LedgerResult:
        """Upsert the team's single note entry."""
        existing = await self._store.get_note(ctx.team_id)
        if existing is not None and existing.id:
            await self._store.update_history_text(ctx.team_id, existing.id, text)
        else:
            await self._store.add_history(
                BinHistoryEntry(
                    team_id=ctx.team_id,
                    user_id=ctx.user_id,
                    type=HistoryEntryType.NOTE,
                    change_description=text,
                )
            )
        logger.info("bin_notes_saved", team_id=ctx.team_id, length=len(text))
        return LedgerResult(snapshot=await self.snapshot(ctx))

    async def rollover(self, ctx: SessionContext, new_date: date) -> LedgerResult:
        """
        Carry the previous day's now-total forward as `new_date`'s opening total.

        Re-running for the same date recomputes from the same source data
        and overwrites the stored opening totals.
        """
        previous_date = new_date - timedelta(days=1)

        bin_types = await self._store.list_bin_types(ctx.team_id)
        balances = await self._store.list_balances(ctx.team_id)
        our_bins = await self._store.list_our_bins(ctx.team_id)
        previous = {
            total.bin_type_id: total.opening_total
            for total in await self._store.list_daily_totals(ctx.team_id, previous_date)
        }

        totals: list[DailyBinTotal] = []
        for bin_type in bin_types:
            bin_type_id = bin_type.id or ""
            totals.append(
                DailyBinTotal(
                    team_id=ctx.team_id,
                    bin_type_id=bin_type_id,
                    day=new_date,
                    opening_total=now_total(
                        previous.get(bin_type_id, 0),
                        (b.balance for b in balances if b.bin_type_id == bin_type_id),
                        our_bins.get(bin_type_id, 0),
                    ),
                )
            )

        await self._store.upsert_daily_totals(totals)

        warnings = await self._audit(
            ctx,
            HistoryEntryType.CONFIG,
            f"Daily rollover from {previous_date.isoformat()} to {new_date.isoformat()} "
            f"by {ctx.user_id}.",
            {
                "actor": ctx.user_id,
                "previous_date": previous_date.isoformat(),
                "new_date": new_date.isoformat(),
                "opening_totals": {t.bin_type_id: t.opening_total for t in totals},
            },
        )

        logger.info(
            "bin_rollover_completed",
            team_id=ctx.team_id,
            previous_date=previous_date.isoformat(),
            new_date=new_date.isoformat(),
            bin_types=len(totals),
        )
        return LedgerResult(
            snapshot=await self.snapshot(ctx, totals_date=new_date),
            warnings=warnings,
        )

    async def reset(self, ctx: SessionContext, confirmed: bool = False) -> LedgerResult:
        """Clear all bin ledger data of the team. Bin types are kept."""
        if not confirmed:
            raise ConfirmationRequiredError(
                "This deletes all bin parties, balances and history. Your bin type "
                "configuration is kept. This action cannot be undone.",
                reason="reset_bins",
                pending={},
            )
        await self._store.reset(ctx.team_id)
        logger.warning("bin_data_reset", team_id=ctx.team_id, user_id=ctx.user_id)
        return LedgerResult(snapshot=await self.snapshot(ctx))

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    async def _require_bin_type(self, ctx: SessionContext, bin_type_id: str) -> BinTypeDefinition:
        bin_type = await self._store.get_bin_type(ctx.team_id, bin_type_id)
        if bin_type is None:
            raise BinTypeNotFoundError(bin_type_id)
        return bin_type

    async def _require_party(self, ctx: SessionContext, party_id: str) -> BinParty:
        party = await self._store.get_party(ctx.team_id, party_id)
        if party is None:
            raise PartyNotFoundError(party_id)
        return party

    async def _create_type(
        self, ctx: SessionContext, bin_type: BinTypeDefinition
    ) -> BinTypeDefinition:
        if not bin_type.name:
            raise ValidationError("name", "is required")
        existing = await self._store.list_bin_types(ctx.team_id)
        if any(bt.name.lower() == bin_type.name.lower() for bt in existing):
            raise ValidationError("name", "a bin type with this name already exists", bin_type.name)
        created = (await self._store.create_bin_types([bin_type]))[0]
        logger.info(
            "bin_type_added",
            team_id=ctx.team_id,
            name=created.name,
            category=created.category.value,
        )
        return created

    async def _audit(
        self,
        ctx: SessionContext,
        entry_type: HistoryEntryType,
        description: str,
        details: dict[str, Any],
    ) -> list[str]:
        """Write a history entry. Failure is reported, not raised."""
        try:
            await self._store.add_history(
                BinHistoryEntry(
                    team_id=ctx.team_id,
                    user_id=ctx.user_id,
                    type=entry_type,
                    change_description=description,
                    details=details,
                )
            )
        except StorageError as e:
            logger.error(
                "audit_write_failed",
                team_id=ctx.team_id,
                entry_type=entry_type.value,
                description=description,
                error=e.message,
            )
            return [f"The change was saved but its history entry was not: {e.message}"]
        return []
