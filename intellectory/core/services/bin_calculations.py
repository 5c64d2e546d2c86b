"""
Pure bin ledger arithmetic.

Sign convention: a positive balance means the party owes the team bins,
a negative balance means the team owes the party. Displayed counts are
always magnitudes; zero balances are never displayed.
"""

from collections.abc import Iterable
from datetime import date

from intellectory.core.entities.bins import (
    BinBalance,
    BinHistoryEntry,
    BinParty,
    BinStatus,
    BinTypeDefinition,
    CustomBinType,
    HistoryEntryType,
    MovementType,
    Partition,
    PartyPosition,
    TodaysMovements,
)


def apply_movement(current: int, movement_type: MovementType, quantity: int) -> int:
    """Signed balance after a movement: sent adds, received and returned subtract."""
    return current + movement_type.sign * quantity


def describe_movement(
    movement_type: MovementType,
    quantity: int,
    bin_name: str,
    party_name: str,
    transporter: str | None = None,
    contents: str | None = None,
) -> str:
    contents_part = f" ({contents})" if contents else ""
    transporter_part = f" via {transporter}" if transporter else ""
    return (
        f"{movement_type.value.capitalize()} {quantity} {bin_name}{contents_part} "
        f"{movement_type.preposition} {party_name}{transporter_part}."
    )


def partition_parties(
    parties: Iterable[BinParty],
    balances: Iterable[BinBalance],
) -> tuple[list[PartyPosition], list[PartyPosition]]:
    """
    Split parties into (owed_to_us, we_owe).

    A party lands in a list only when it has at least one strictly positive
    (resp. negative) balance, so it can appear in both or in neither.
    """
    by_party: dict[str, list[BinBalance]] = {}
    for balance in balances:
        by_party.setdefault(balance.party_id, []).append(balance)

    owed_to_us: list[PartyPosition] = []
    we_owe: list[PartyPosition] = []
    for party in parties:
        owed: dict[str, int] = {}
        owing: dict[str, int] = {}
        for balance in by_party.get(party.id or "", []):
            if balance.balance > 0:
                owed[balance.bin_type_id] = balance.balance
            elif balance.balance < 0:
                owing[balance.bin_type_id] = -balance.balance
        if owed:
            owed_to_us.append(PartyPosition(id=party.id or "", name=party.name, bins=owed))
        if owing:
            we_owe.append(PartyPosition(id=party.id or "", name=party.name, bins=owing))
    return owed_to_us, we_owe


def mixed_total(
    parent: BinTypeDefinition,
    custom_types: Iterable[CustomBinType],
    counts: dict[str, int],
) -> int:
    """Sum of the parent's custom sub-types when any is nonzero, else its raw count."""
    sub_counts = [
        counts.get(custom.id or "", 0)
        for custom in custom_types
        if custom.sub_category == parent.sub_category
    ]
    if any(count != 0 for count in sub_counts):
        return sum(sub_counts)
    return counts.get(parent.id or "", 0)


def apply_mixed_totals(
    bin_types: Iterable[BinTypeDefinition],
    custom_types: list[CustomBinType],
    counts: dict[str, int],
    keep_zero: bool = False,
) -> dict[str, int]:
    """Return a copy of `counts` with every mixed parent replaced by its rolled-up total."""
    result = dict(counts)
    for bin_type in bin_types:
        if bin_type.sub_category is None or bin_type.id is None:
            continue
        total = mixed_total(bin_type, custom_types, counts)
        if total or keep_zero:
            result[bin_type.id] = total
        else:
            result.pop(bin_type.id, None)
    return result


def status_table(
    raw_counts: dict[str, dict[str, int]],
    bin_type_ids: Iterable[str],
) -> dict[str, dict[str, int]]:
    """Status rows keyed by status name, with `total` derived as the sum of the others."""
    table = {status.value: dict(raw_counts.get(status.value, {})) for status in BinStatus}
    table[BinStatus.TOTAL.value] = {
        bin_type_id: sum(table[status.value].get(bin_type_id, 0) for status in BinStatus.editable())
        for bin_type_id in bin_type_ids
    }
    return table


def now_total(opening_total: int, signed_balances: Iterable[int], our_bins: int) -> int:
    """Opening plus what parties owe us, minus what we owe them, plus company-owned bins."""
    return opening_total + sum(signed_balances) + our_bins


def resolve_partition(
    party_id: str,
    current_balance: int | None,
    owed_to_us: list[PartyPosition],
    we_owe: list[PartyPosition],
) -> Partition:
    """
    Which side a direct edit for this party targets.

    The sign of the existing balance for the pair decides; with no balance,
    a party listed only under "we owe" is treated as we-owe.
    """
    if current_balance:
        return Partition.OWED_TO_US if current_balance > 0 else Partition.WE_OWE
    in_owed = any(p.id == party_id for p in owed_to_us)
    in_we_owe = any(p.id == party_id for p in we_owe)
    if in_we_owe and not in_owed:
        return Partition.WE_OWE
    return Partition.OWED_TO_US


def to_stored_balance(displayed: int, partition: Partition) -> int:
    """Displayed counts are positive; we-owe balances are stored negated."""
    return -displayed if partition is Partition.WE_OWE else displayed


def group_todays_movements(history: Iterable[BinHistoryEntry], today: date) -> TodaysMovements:
    """Movement entries from `today` onwards, bucketed by their recorded movement type."""
    grouped = TodaysMovements()
    buckets = {
        MovementType.SENT.value: grouped.sent,
        MovementType.RECEIVED.value: grouped.received,
        MovementType.RETURNED.value: grouped.returned,
    }
    for entry in history:
        if entry.type is not HistoryEntryType.MOVEMENT or entry.timestamp.date() < today:
            continue
        bucket = buckets.get(entry.details.get("movement_type"))
        if bucket is not None:
            bucket.append(entry)
    return grouped
