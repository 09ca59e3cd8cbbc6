# schemas.py
from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field
from datetime import datetime
from typing import Optional, List

from app.billing.pricing import PriceTier
from app.billing.settlement import Settlement
from app.customers.model import Customer
from app.orders.model import Order, OrderEvent, OrderStatus, Role, Transition


# -------- ORDERS --------
class CreateOrderRequest(BaseModel):
    model_config = ConfigDict(extra="forbid")
    customer_id: str = Field(min_length=1, max_length=64)
    estimated_liters: int = Field(gt=0)


class TransitionRequest(BaseModel):
    model_config = ConfigDict(extra="forbid")
    transition: Transition
    courier_id: Optional[str] = Field(default=None, max_length=64)
    # strict: "22" or 22.0 is not a liter count
    actual_liters: Optional[int] = Field(default=None, strict=True)
    pickup_evidence_ref: Optional[str] = Field(default=None, max_length=500)
    payment_evidence_ref: Optional[str] = Field(default=None, max_length=500)


class OrderItem(BaseModel):
    id: str
    customer_id: str
    customer_name: str
    customer_phone: str
    customer_district: str
    customer_city: str
    estimated_liters: int
    actual_liters: Optional[int] = None
    status: OrderStatus
    courier_id: Optional[str] = None
    created_at: datetime
    pickup_evidence_ref: Optional[str] = None
    payment_evidence_ref: Optional[str] = None
    available_transitions: List[Transition] = []

    @classmethod
    def from_order(cls, order: Order, available: Optional[List[Transition]] = None) -> "OrderItem":
        return cls(
            id=order.id,
            customer_id=order.customer_id,
            customer_name=order.customer_name,
            customer_phone=order.customer_phone,
            customer_district=order.customer_district,
            customer_city=order.customer_city,
            estimated_liters=order.estimated_liters,
            actual_liters=order.actual_liters,
            status=order.status,
            courier_id=order.courier_id,
            created_at=order.created_at,
            pickup_evidence_ref=order.pickup_evidence_ref,
            payment_evidence_ref=order.payment_evidence_ref,
            available_transitions=list(available or []),
        )


class OrderListResponse(BaseModel):
    items: List[OrderItem]


class OrderEventItem(BaseModel):
    transition: Transition
    from_status: OrderStatus
    to_status: OrderStatus
    actor_id: str
    actor_role: Role
    created_at: datetime

    @classmethod
    def from_event(cls, event: OrderEvent) -> "OrderEventItem":
        return cls(
            transition=event.transition,
            from_status=event.from_status,
            to_status=event.to_status,
            actor_id=event.actor_id,
            actor_role=event.actor_role,
            created_at=event.created_at,
        )


class OrderEventListResponse(BaseModel):
    order_id: str
    items: List[OrderEventItem]


# -------- BILLING --------
class SettlementResponse(BaseModel):
    order_id: str
    customer_id: str
    courier_id: Optional[str] = None
    liters: int
    unit_price: int
    customer_payout: int
    courier_fee: int
    affiliate_fee: int
    affiliate_recipient: Optional[str] = None
    affiliate_name: Optional[str] = None

    @classmethod
    def from_settlement(cls, s: Settlement) -> "SettlementResponse":
        return cls(
            order_id=s.order_id,
            customer_id=s.customer_id,
            courier_id=s.courier_id,
            liters=s.liters,
            unit_price=s.unit_price,
            customer_payout=s.customer_payout,
            courier_fee=s.courier_fee,
            affiliate_fee=s.affiliate_fee,
            affiliate_recipient=s.affiliate_recipient,
            affiliate_name=s.affiliate_name,
        )


class BillingItem(BaseModel):
    order_id: str
    customer_name: str
    status: OrderStatus
    settlement: Optional[SettlementResponse] = None
    # settlement error code when the order could not be priced
    error: Optional[str] = None


class BillingListResponse(BaseModel):
    items: List[BillingItem]


class CourierEarningsResponse(BaseModel):
    courier_id: str
    total_liters: int
    total_earnings: int
    orders: List[OrderItem]


class PriceTierItem(BaseModel):
    model_config = ConfigDict(extra="forbid")
    min_liter: int = Field(ge=0)
    # null = unbounded top tier
    max_liter: Optional[int] = Field(default=None, ge=0)
    price_per_liter: int = Field(ge=0)

    @classmethod
    def from_tier(cls, tier: PriceTier) -> "PriceTierItem":
        return cls(min_liter=tier.min_liter, max_liter=tier.max_liter, price_per_liter=tier.price_per_liter)

    def to_tier(self) -> PriceTier:
        return PriceTier(min_liter=self.min_liter, max_liter=self.max_liter, price_per_liter=self.price_per_liter)


class PriceTierListRequest(BaseModel):
    model_config = ConfigDict(extra="forbid")
    tiers: List[PriceTierItem] = Field(min_length=1)


class PriceTierListResponse(BaseModel):
    tiers: List[PriceTierItem]
    courier_fee_per_liter: int
    affiliate_fee_per_liter: int


# -------- CUSTOMERS --------
class RegisterCustomerRequest(BaseModel):
    model_config = ConfigDict(extra="forbid")
    name: str = Field(min_length=1, max_length=200)
    phone: str = Field(min_length=6, max_length=20)
    address: str = Field(min_length=1, max_length=500)
    district: str = Field(min_length=1, max_length=100)
    city: str = Field(min_length=1, max_length=100)
    bank_account: str = Field(min_length=1, max_length=100)
    share_location: str = Field(default="", max_length=500)
    referred_by: Optional[str] = Field(default=None, max_length=64)


class UpdateCustomerRequest(BaseModel):
    # liters and referral links are not part of the profile
    model_config = ConfigDict(extra="forbid")
    name: Optional[str] = Field(default=None, min_length=1, max_length=200)
    phone: Optional[str] = Field(default=None, min_length=6, max_length=20)
    address: Optional[str] = Field(default=None, min_length=1, max_length=500)
    district: Optional[str] = Field(default=None, min_length=1, max_length=100)
    city: Optional[str] = Field(default=None, min_length=1, max_length=100)
    bank_account: Optional[str] = Field(default=None, min_length=1, max_length=100)
    share_location: Optional[str] = Field(default=None, max_length=500)


class CustomerItem(BaseModel):
    id: str
    name: str
    phone: str
    address: str
    district: str
    city: str
    share_location: str
    bank_account: str
    total_liters: int
    referred_by: Optional[str] = None
    downline: List[str] = []

    @classmethod
    def from_customer(cls, c: Customer) -> "CustomerItem":
        return cls(
            id=c.id,
            name=c.name,
            phone=c.phone,
            address=c.address,
            district=c.district,
            city=c.city,
            share_location=c.share_location,
            bank_account=c.bank_account,
            total_liters=c.total_liters,
            referred_by=c.referred_by,
            downline=list(c.downline),
        )


class CustomerListResponse(BaseModel):
    items: List[CustomerItem]


class CustomerSummaryResponse(BaseModel):
    customer_id: str
    total_liters: int
    open_orders: int
    total_orders: int


class QuickPickupRequest(BaseModel):
    model_config = ConfigDict(extra="forbid")
    phone: str = Field(min_length=6, max_length=20)
    estimated_liters: int = Field(gt=0)
    # required only when the phone is not registered yet
    registration: Optional[RegisterCustomerRequest] = None


class QuickPickupResponse(BaseModel):
    customer: CustomerItem
    order: OrderItem
    customer_created: bool
