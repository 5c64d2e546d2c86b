"""
Supplier name matching.

Exact case-insensitive match first, then the nearest known supplier by
edit distance. A near miss is only ever offered as a suggestion; the
caller decides whether to use it.
"""

from dataclasses import dataclass

from intellectory.core.entities.stock import Supplier

# Largest edit distance still offered as a suggestion
MAX_SUGGESTION_DISTANCE = 3


def levenshtein_distance(a: str, b: str) -> int:
    """Case-insensitive edit distance; insert, delete and substitute each cost 1."""
    a = a.lower()
    b = b.lower()
    if len(a) < len(b):
        a, b = b, a

    previous = list(range(len(b) + 1))
    for i, char_a in enumerate(a, start=1):
        current = [i]
        for j, char_b in enumerate(b, start=1):
            substitution = previous[j - 1] + (char_a != char_b)
            current.append(min(previous[j] + 1, current[j - 1] + 1, substitution))
        previous = current
    return previous[-1]


@dataclass
class SupplierMatch:
    """Outcome of matching a typed supplier name against known suppliers."""

    supplier: Supplier | None = None  # exact match
    suggestion: str | None = None  # near miss needing confirmation
    distance: int | None = None

    @property
    def is_new(self) -> bool:
        return self.supplier is None and self.suggestion is None


def find_supplier(
    name: str,
    suppliers: list[Supplier],
    max_distance: int = MAX_SUGGESTION_DISTANCE,
) -> SupplierMatch:
    """Match `name` against `suppliers`."""
    wanted = name.strip().lower()
    for supplier in suppliers:
        if supplier.name.lower() == wanted:
            return SupplierMatch(supplier=supplier, distance=0)

    if not suppliers:
        return SupplierMatch()

    # min() keeps the first of equally distant candidates
    best = min(suppliers, key=lambda s: levenshtein_distance(wanted, s.name))
    distance = levenshtein_distance(wanted, best.name)
    if distance <= max_distance:
        return SupplierMatch(suggestion=best.name, distance=distance)
    return SupplierMatch(distance=distance)
