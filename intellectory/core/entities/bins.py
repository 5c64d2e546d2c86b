"""Bin ledger domain entities."""

from datetime import date, datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, Field


class BinCategory(str, Enum):
    """Bin type taxonomy: counted directly, aggregate bucket, or leaf of a bucket."""

    STANDARD = "standard"
    MIXED = "mixed"
    CUSTOM = "custom"


class MixedSubCategory(str, Enum):
    """The two mixed buckets custom types roll up into."""

    MIXED_WOOD = "mixedWood"
    MIXED_PLASTIC = "mixedPlastic"


class BinStatus(str, Enum):
    """Physical status rows of the stock take. TOTAL is always derived."""

    TOTAL = "total"
    FULL = "full"
    IN_FRIDGE = "inFridge"
    BROKEN = "broken"
    DUMP = "dump"

    @classmethod
    def editable(cls) -> list["BinStatus"]:
        return [cls.FULL, cls.IN_FRIDGE, cls.BROKEN, cls.DUMP]


class MovementType(str, Enum):
    """Direction of a bin movement relative to the team."""

    SENT = "sent"
    RECEIVED = "received"
    RETURNED = "returned"

    @property
    def sign(self) -> int:
        """+1 when the party owes us more afterwards, -1 otherwise."""
        return 1 if self is MovementType.SENT else -1

    @property
    def preposition(self) -> str:
        return "to" if self is MovementType.SENT else "from"


class HistoryEntryType(str, Enum):
    MOVEMENT = "movement"
    EDIT = "edit"
    PARTY = "party"
    CONFIG = "config"
    NOTE = "note"


class Partition(str, Enum):
    """Which side of the ledger a party is shown on for a bin type."""

    OWED_TO_US = "owed_to_us"
    WE_OWE = "we_owe"


class BinTypeDefinition(BaseModel):
    """A standard or mixed bin type."""

    id: str | None = None
    team_id: str
    name: str
    color: str
    category: BinCategory = BinCategory.STANDARD
    is_default: bool = False
    sub_category: MixedSubCategory | None = None


class CustomBinType(BaseModel):
    """Leaf type that rolls up into one of the mixed buckets."""

    id: str | None = None
    team_id: str
    name: str
    sub_category: MixedSubCategory
    color: str = "#71717A"


class BinParty(BaseModel):
    """External counterpart bins are exchanged with."""

    id: str | None = None
    team_id: str
    name: str


class BinBalance(BaseModel):
    """Signed count per (party, bin type). Positive: the party owes the team."""

    id: str | None = None
    team_id: str
    party_id: str
    bin_type_id: str
    balance: int = 0


class DailyBinTotal(BaseModel):
    id: str | None = None
    team_id: str
    bin_type_id: str
    day: date
    opening_total: int = 0


class BinHistoryEntry(BaseModel):
    """Audit record for the bin ledger. Notes live here as a single upserted entry."""

    id: str | None = None
    team_id: str
    user_id: str | None = None
    timestamp: datetime = Field(default_factory=datetime.now)
    type: HistoryEntryType
    change_description: str
    details: dict[str, Any] = Field(default_factory=dict)


class PartyPosition(BaseModel):
    """A party as shown in one partition; counts are positive magnitudes."""

    id: str
    name: str
    bins: dict[str, int] = Field(default_factory=dict)


class DailyTotalsRow(BaseModel):
    bin_type_id: str
    opening_total: int = 0
    now_total: int = 0


class TodaysMovements(BaseModel):
    """Today's movement history entries, split by direction."""

    sent: list[BinHistoryEntry] = Field(default_factory=list)
    received: list[BinHistoryEntry] = Field(default_factory=list)
    returned: list[BinHistoryEntry] = Field(default_factory=list)


class BinStockSnapshot(BaseModel):
    """Fully reloaded bin aggregate for one team."""

    bin_types: list[BinTypeDefinition] = Field(default_factory=list)
    custom_bin_types: list[CustomBinType] = Field(default_factory=list)
    parties: list[BinParty] = Field(default_factory=list)
    statuses: dict[str, dict[str, int]] = Field(default_factory=dict)
    owed_to_us: list[PartyPosition] = Field(default_factory=list)
    we_owe: list[PartyPosition] = Field(default_factory=list)
    history: list[BinHistoryEntry] = Field(default_factory=list)
    notes: str = ""
    our_bins: dict[str, int] = Field(default_factory=dict)
    daily_totals: list[DailyTotalsRow] = Field(default_factory=list)
    totals_date: date | None = None
    todays_movements: TodaysMovements = Field(default_factory=TodaysMovements)

    def matching_parties(self, query: str | None) -> "BinStockSnapshot":
        """Copy with both partitions narrowed to parties whose name contains `query`."""
        needle = (query or "").strip().lower()
        if not needle:
            return self
        return self.model_copy(
            update={
                "owed_to_us": [p for p in self.owed_to_us if needle in p.name.lower()],
                "we_owe": [p for p in self.we_owe if needle in p.name.lower()],
            }
        )
