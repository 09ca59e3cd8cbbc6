# app/customers/referrals.py
from __future__ import annotations

from typing import Iterable, Mapping, Optional

from app.customers.model import Customer

# affiliate payout is single-level
AFFILIATE_DEPTH = 1
# hard cap for any upward walk; malformed data may contain cycles
MAX_TRAVERSAL_DEPTH = 64


class ReferralGraph:
    """
    Read-only adjacency view over customer records.

    Only `referrer_of` is used for payout attribution. The upward walks are
    bounded by depth and by a visited set so a cyclic chain still terminates.
    """

    def __init__(self, customers: Mapping[str, Customer]):
        self._customers = dict(customers)

    @classmethod
    def from_customers(cls, customers: Iterable[Customer]) -> "ReferralGraph":
        return cls({c.id: c for c in customers})

    def get(self, customer_id: str) -> Optional[Customer]:
        return self._customers.get(customer_id)

    def referrer_of(self, customer_id: str) -> Optional[Customer]:
        customer = self._customers.get(customer_id)
        if customer is None or not customer.referred_by:
            return None
        if customer.referred_by == customer_id:
            return None
        # dangling referrer ids attribute nothing
        return self._customers.get(customer.referred_by)

    def ancestors(self, customer_id: str, *, max_depth: int = AFFILIATE_DEPTH) -> list[Customer]:
        depth = max(0, min(max_depth, MAX_TRAVERSAL_DEPTH))
        out: list[Customer] = []
        seen = {customer_id}
        current = customer_id
        for _ in range(depth):
            parent = self.referrer_of(current)
            if parent is None or parent.id in seen:
                break
            out.append(parent)
            seen.add(parent.id)
            current = parent.id
        return out

    def downline_of(self, customer_id: str) -> list[Customer]:
        return [c for c in self._customers.values() if c.referred_by == customer_id and c.id != customer_id]

    def would_create_cycle(self, customer_id: str, referrer_id: str) -> bool:
        if customer_id == referrer_id:
            return True
        chain = self.ancestors(referrer_id, max_depth=MAX_TRAVERSAL_DEPTH)
        return any(c.id == customer_id for c in chain)

    def has_cycle(self, customer_id: str) -> bool:
        seen = {customer_id}
        current = customer_id
        for _ in range(MAX_TRAVERSAL_DEPTH):
            customer = self._customers.get(current)
            if customer is None or not customer.referred_by:
                return False
            if customer.referred_by in seen:
                return True
            seen.add(customer.referred_by)
            current = customer.referred_by
        # deeper than the cap counts as malformed
        return True
