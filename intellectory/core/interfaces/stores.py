"""Abstract interfaces for the aggregate stores."""

from abc import ABC, abstractmethod
from datetime import date
from typing import Any

from intellectory.core.entities.bins import (
    BinBalance,
    BinHistoryEntry,
    BinParty,
    BinStatus,
    BinStockSnapshot,
    BinTypeDefinition,
    DailyBinTotal,
)
from intellectory.core.entities.stock import (
    ActivityLogEntry,
    CreditTransaction,
    StockItem,
    Supplier,
)
from intellectory.core.entities.team import Team, TeamMember


class IStockStore(ABC):
    """Interface for stock item persistence."""

    @abstractmethod
    async def list_items(self, team_id: str) -> list[StockItem]:
        """List all stock items of a team ordered by name."""
        pass

    @abstractmethod
    async def get_item(self, team_id: str, item_id: str) -> StockItem | None:
        """Get a stock item by ID."""
        pass

    @abstractmethod
    async def find_by_name(self, team_id: str, name: str) -> StockItem | None:
        """Case-insensitive exact name lookup."""
        pass

    @abstractmethod
    async def create_item(self, item: StockItem) -> StockItem:
        """Create a new stock item."""
        pass

    @abstractmethod
    async def update_item(
        self, team_id: str, item_id: str, values: dict[str, Any]
    ) -> StockItem:
        """Update the given columns of a stock item."""
        pass

    @abstractmethod
    async def upsert_items(self, items: list[StockItem]) -> list[StockItem]:
        """Write many items in one batch."""
        pass

    @abstractmethod
    async def delete_item(self, team_id: str, item_id: str) -> None:
        """Delete a stock item."""
        pass

    @abstractmethod
    async def delete_all(self, team_id: str) -> None:
        """Delete every stock item of a team."""
        pass


class IActivityLogStore(ABC):
    """Interface for the stock audit trail."""

    @abstractmethod
    async def add_entry(self, entry: ActivityLogEntry) -> ActivityLogEntry:
        pass

    @abstractmethod
    async def list_entries(
        self, team_id: str, limit: int | None = None
    ) -> list[ActivityLogEntry]:
        """Entries newest first."""
        pass

    @abstractmethod
    async def delete_all(self, team_id: str) -> None:
        pass


class ISupplierStore(ABC):
    """Interface for suppliers and credit transactions."""

    @abstractmethod
    async def list_suppliers(self, team_id: str) -> list[Supplier]:
        pass

    @abstractmethod
    async def create_supplier(self, supplier: Supplier) -> Supplier:
        pass

    @abstractmethod
    async def set_balance(self, team_id: str, supplier_id: str, balance: float) -> Supplier:
        pass

    @abstractmethod
    async def add_transaction(self, transaction: CreditTransaction) -> CreditTransaction:
        pass

    @abstractmethod
    async def list_transactions(self, team_id: str) -> list[CreditTransaction]:
        pass

    @abstractmethod
    async def delete_all(self, team_id: str) -> None:
        """Delete suppliers and their credit transactions."""
        pass


class IBinStore(ABC):
    """
    Interface for the bin ledger aggregate.

    `load_snapshot` is the single refresh call issued after every write.
    """

    # Aggregate
    @abstractmethod
    async def load_snapshot(
        self,
        team_id: str,
        history_limit: int = 200,
        totals_date: date | None = None,
    ) -> BinStockSnapshot:
        """Reload the full bin aggregate from the store."""
        pass

    # Bin types (standard, mixed and custom rows)
    @abstractmethod
    async def list_bin_types(self, team_id: str) -> list[BinTypeDefinition]:
        pass

    @abstractmethod
    async def get_bin_type(self, team_id: str, bin_type_id: str) -> BinTypeDefinition | None:
        pass

    @abstractmethod
    async def create_bin_types(
        self, bin_types: list[BinTypeDefinition]
    ) -> list[BinTypeDefinition]:
        pass

    @abstractmethod
    async def update_bin_type(
        self, team_id: str, bin_type_id: str, values: dict[str, Any]
    ) -> BinTypeDefinition:
        pass

    @abstractmethod
    async def delete_bin_type(self, team_id: str, bin_type_id: str) -> None:
        pass

    # Parties
    @abstractmethod
    async def list_parties(self, team_id: str) -> list[BinParty]:
        pass

    @abstractmethod
    async def get_party(self, team_id: str, party_id: str) -> BinParty | None:
        pass

    @abstractmethod
    async def find_party_by_name(self, team_id: str, name: str) -> BinParty | None:
        """Case-insensitive exact name lookup."""
        pass

    @abstractmethod
    async def create_party(self, party: BinParty) -> BinParty:
        pass

    @abstractmethod
    async def delete_party(self, team_id: str, party_id: str) -> None:
        """Delete a party; its balances go with it."""
        pass

    # Balances
    @abstractmethod
    async def list_balances(
        self, team_id: str, party_id: str | None = None
    ) -> list[BinBalance]:
        pass

    @abstractmethod
    async def get_balance(
        self, team_id: str, party_id: str, bin_type_id: str
    ) -> BinBalance | None:
        pass

    @abstractmethod
    async def upsert_balance(self, balance: BinBalance) -> BinBalance:
        pass

    # Status counts, owned bins, daily totals
    @abstractmethod
    async def upsert_status_count(
        self, team_id: str, bin_type_id: str, status: BinStatus, quantity: int
    ) -> None:
        pass

    @abstractmethod
    async def list_our_bins(self, team_id: str) -> dict[str, int]:
        pass

    @abstractmethod
    async def upsert_our_bins(self, team_id: str, bin_type_id: str, quantity: int) -> None:
        pass

    @abstractmethod
    async def list_daily_totals(self, team_id: str, day: date) -> list[DailyBinTotal]:
        pass

    @abstractmethod
    async def upsert_daily_totals(self, totals: list[DailyBinTotal]) -> None:
        pass

    # History
    @abstractmethod
    async def add_history(self, entry: BinHistoryEntry) -> BinHistoryEntry:
        pass

    @abstractmethod
    async def get_note(self, team_id: str) -> BinHistoryEntry | None:
        pass

    @abstractmethod
    async def update_history_text(self, team_id: str, entry_id: str, text: str) -> None:
        pass

    # Bulk
    @abstractmethod
    async def reset(self, team_id: str) -> None:
        """Clear balances, counts, history, parties, owned bins and daily totals."""
        pass


class ITeamStore(ABC):
    """Interface for teams and memberships."""

    @abstractmethod
    async def create_team(self, team: Team) -> Team:
        pass

    @abstractmethod
    async def get_team(self, team_id: str) -> Team | None:
        pass

    @abstractmethod
    async def rename_team(self, team_id: str, name: str) -> Team:
        pass

    @abstractmethod
    async def add_member(self, member: TeamMember) -> TeamMember:
        pass

    @abstractmethod
    async def get_membership(self, user_id: str) -> TeamMember | None:
        """First membership of a user, if any."""
        pass

    @abstractmethod
    async def list_members(self, team_id: str) -> list[TeamMember]:
        pass
