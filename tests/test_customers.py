import pytest

from app.customers.service import Registration, normalize_phone, quick_pickup, register_customer, update_customer_profile
from app.orders.errors import CustomerNotFound, RoleDenied, ValidationError
from app.orders.model import Actor, OrderStatus, Role

ADMIN = Actor("user-1", Role.ADMIN)


def _registration(phone="085700001111", referred_by=None, **overrides) -> Registration:
    fields = dict(
        name="Warung Pak Budi",
        phone=phone,
        address="Jl. Dago No. 7",
        district="Coblong",
        city="Bandung",
        bank_account="BRI 5555",
        share_location="https://maps.google.com/abc",
        referred_by=referred_by,
    )
    fields.update(overrides)
    return Registration(**fields)


def test_normalize_phone():
    assert normalize_phone("0857-0000 1111") == "085700001111"
    assert normalize_phone("+62 857 0000 1111") == "+6285700001111"


def test_register_customer(store):
    customer = register_customer(store, _registration(phone="0857 0000 1111"))
    assert customer.id.startswith("cust-")
    assert customer.phone == "085700001111"
    assert customer.total_liters == 0
    assert store.find_customer_by_phone("085700001111") == customer


def test_register_with_referrer_links_downline(store):
    customer = register_customer(store, _registration(referred_by="cust-1"))
    assert customer.referred_by == "cust-1"
    assert customer.id in store.get_customer("cust-1").downline


def test_register_rejects_unknown_referrer(store):
    with pytest.raises(ValidationError):
        register_customer(store, _registration(referred_by="cust-404"))


def test_register_rejects_duplicate_phone(store):
    with pytest.raises(ValidationError):
        register_customer(store, _registration(phone="081234567890"))


def test_register_rejects_missing_fields(store):
    with pytest.raises(ValidationError) as exc:
        register_customer(store, _registration(bank_account="  "))
    assert "bank_account" in str(exc.value)


def test_quick_pickup_existing_customer(store):
    result = quick_pickup(store, phone="0812-3456-7890", estimated_liters=12, actor=ADMIN)
    assert result.customer_created is False
    assert result.customer.id == "cust-1"
    assert result.order.status == OrderStatus.PENDING
    assert result.order.estimated_liters == 12


def test_quick_pickup_registers_new_customer(store):
    result = quick_pickup(
        store,
        phone="085799998888",
        estimated_liters=8,
        actor=ADMIN,
        registration=_registration(phone="085799998888"),
    )
    assert result.customer_created is True
    assert result.order.customer_id == result.customer.id
    assert store.find_customer_by_phone("085799998888") is not None


def test_quick_pickup_unknown_phone_without_registration(store):
    with pytest.raises(CustomerNotFound):
        quick_pickup(store, phone="085799998888", estimated_liters=8, actor=ADMIN)


def test_quick_pickup_is_admin_only(store):
    with pytest.raises(RoleDenied):
        quick_pickup(store, phone="081234567890", estimated_liters=8, actor=Actor("user-2", Role.COURIER))


def test_quick_pickup_rejects_bad_liters(store):
    with pytest.raises(ValidationError):
        quick_pickup(store, phone="081234567890", estimated_liters=0, actor=ADMIN)


def test_update_profile_keeps_liters_and_referrals(store):
    before = store.get_customer("cust-3")
    updated = update_customer_profile(store, "cust-3", {"name": " Katering Ibu Ani ", "city": "Cimahi"}, ADMIN)
    assert updated.name == "Katering Ibu Ani"
    assert updated.city == "Cimahi"
    assert updated.total_liters == before.total_liters
    assert updated.referred_by == before.referred_by
    assert store.get_customer("cust-2").downline == ("cust-3",)


def test_update_profile_rejects_locked_and_empty_fields(store):
    with pytest.raises(ValidationError):
        update_customer_profile(store, "cust-1", {"total_liters": 999}, ADMIN)
    with pytest.raises(ValidationError):
        update_customer_profile(store, "cust-1", {"referred_by": "cust-2"}, ADMIN)
    with pytest.raises(ValidationError):
        update_customer_profile(store, "cust-1", {"name": "   "}, ADMIN)


def test_update_profile_phone_must_stay_unique(store):
    with pytest.raises(ValidationError):
        update_customer_profile(store, "cust-1", {"phone": "0898 7654 3210"}, ADMIN)
    # re-saving the customer's own number is fine
    same = update_customer_profile(store, "cust-1", {"phone": "0812-3456-7890"}, ADMIN)
    assert same.phone == "081234567890"


def test_update_profile_scoped_to_actor(store):
    me = Actor("user-5", Role.CUSTOMER, customer_id="cust-1")
    assert update_customer_profile(store, "cust-1", {"district": "Dago"}, me).district == "Dago"
    with pytest.raises(CustomerNotFound):
        update_customer_profile(store, "cust-2", {"district": "Dago"}, me)
    with pytest.raises(RoleDenied):
        update_customer_profile(store, "cust-1", {"district": "Dago"}, Actor("user-4", Role.WAREHOUSE))
    with pytest.raises(CustomerNotFound):
        update_customer_profile(store, "cust-404", {"district": "Dago"}, ADMIN)
