from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Optional

from app.orders.model import CustomerSnapshot

# editable through profile updates; liters and referral links are not
PROFILE_FIELDS = ("name", "phone", "address", "district", "city", "bank_account", "share_location")


@dataclass(frozen=True)
class Customer:
    id: str
    name: str
    phone: str
    address: str
    district: str
    city: str
    bank_account: str
    share_location: str = ""
    total_liters: int = 0
    referred_by: Optional[str] = None
    downline: tuple[str, ...] = field(default_factory=tuple)

    def snapshot(self) -> CustomerSnapshot:
        return CustomerSnapshot(
            customer_id=self.id,
            name=self.name,
            phone=self.phone,
            district=self.district,
            city=self.city,
        )

    def with_collected_liters(self, liters: int) -> "Customer":
        if liters < 0:
            raise ValueError("collected liters cannot decrease")
        return replace(self, total_liters=self.total_liters + liters)
