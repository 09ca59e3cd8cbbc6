# app/billing/pricing.py
from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Optional

from app.billing.errors import NoTierMatched


@dataclass(frozen=True)
class PriceTier:
    min_liter: int
    # None = no upper bound
    max_liter: Optional[int]
    price_per_liter: int

    def contains(self, liters: int, *, unbounded: bool = False) -> bool:
        if liters < self.min_liter:
            return False
        if unbounded or self.max_liter is None:
            return True
        return liters <= self.max_liter


DEFAULT_PRICE_TIERS: tuple[PriceTier, ...] = (
    PriceTier(min_liter=0, max_liter=50, price_per_liter=7000),
    PriceTier(min_liter=51, max_liter=100, price_per_liter=7500),
    PriceTier(min_liter=101, max_liter=None, price_per_liter=8000),
)


def validate_tiers(tiers: Iterable[PriceTier]) -> list[str]:
    """
    Shape checks only. Overlaps and gaps are allowed and resolved by
    first-match at lookup time.
    """
    problems: list[str] = []
    for i, tier in enumerate(tiers):
        if tier.min_liter < 0:
            problems.append(f"tier {i}: min_liter must be >= 0")
        if tier.max_liter is not None and tier.max_liter < tier.min_liter:
            problems.append(f"tier {i}: max_liter must be >= min_liter")
        if tier.price_per_liter < 0:
            problems.append(f"tier {i}: price_per_liter must be >= 0")
    return problems


class PricingTable:
    """
    Immutable tier lookup. Tiers are scanned in ascending min_liter order
    (ties keep their given order) and the first containing tier wins. The
    highest tier's upper bound is treated as unbounded.
    """

    def __init__(self, tiers: Iterable[PriceTier]):
        self._tiers: tuple[PriceTier, ...] = tuple(sorted(tiers, key=lambda t: t.min_liter))

    @property
    def tiers(self) -> tuple[PriceTier, ...]:
        return self._tiers

    def __len__(self) -> int:
        return len(self._tiers)

    def tier_for(self, liters: int) -> PriceTier:
        if not self._tiers:
            raise NoTierMatched("price table is empty")
        if liters < 0:
            raise NoTierMatched(f"no tier for negative liters: {liters}")

        last = len(self._tiers) - 1
        for i, tier in enumerate(self._tiers):
            if tier.contains(liters, unbounded=(i == last)):
                return tier
        raise NoTierMatched(f"no tier matched {liters} liters")

    def rate_for(self, liters: int) -> int:
        return self.tier_for(liters).price_per_liter


def default_pricing_table() -> PricingTable:
    return PricingTable(DEFAULT_PRICE_TIERS)
