from datetime import datetime, timezone

import pytest

from app.orders.errors import PayloadInvalid, RoleDenied, StateMismatch, TransitionRejected, ValidationError
from app.orders.model import (
    Actor,
    CustomerSnapshot,
    OrderStatus,
    Role,
    Transition,
    TransitionPayload,
)
from app.orders.state_machine import (
    apply_transition,
    assert_status_advance,
    available_transitions,
    create_order,
)

ADMIN = Actor("user-1", Role.ADMIN)
COURIER = Actor("user-2", Role.COURIER)
OTHER_COURIER = Actor("user-3", Role.COURIER)
WAREHOUSE = Actor("user-4", Role.WAREHOUSE)
CUSTOMER = Actor("user-5", Role.CUSTOMER, customer_id="cust-1")

SNAPSHOT = CustomerSnapshot(
    customer_id="cust-1",
    name="Warung Bu Siti",
    phone="081234567890",
    district="Coblong",
    city="Bandung",
)


def _pending():
    return create_order(SNAPSHOT, 20, created_at=datetime(2026, 1, 1, tzinfo=timezone.utc))


def _assigned():
    return apply_transition(_pending(), Transition.ASSIGN, ADMIN, TransitionPayload(courier_id="user-2"))


def _in_progress():
    return apply_transition(_assigned(), Transition.START, COURIER)


def _completed(liters=22):
    return apply_transition(
        _in_progress(),
        Transition.COMPLETE,
        COURIER,
        TransitionPayload(actual_liters=liters, pickup_evidence_ref="evidence/p.jpg"),
    )


def _verified():
    return apply_transition(_completed(), Transition.VERIFY, WAREHOUSE)


def _paid():
    return apply_transition(_verified(), Transition.MARK_PAID, ADMIN, TransitionPayload(payment_evidence_ref="evidence/pay.jpg"))


def test_create_order_starts_pending():
    order = _pending()
    assert order.status == OrderStatus.PENDING
    assert order.id.startswith("ORD-")
    assert len(order.id) == 14
    assert order.actual_liters is None
    assert order.courier_id is None
    assert order.customer_name == "Warung Bu Siti"


@pytest.mark.parametrize("liters", [0, -3, True, 1.5, "10", None])
def test_create_order_rejects_bad_estimate(liters):
    with pytest.raises(ValidationError):
        create_order(SNAPSHOT, liters)


def test_create_order_rejects_incomplete_snapshot():
    snap = CustomerSnapshot(customer_id="cust-1", name="  ", phone="0812", district="Coblong", city="Bandung")
    with pytest.raises(ValidationError) as exc:
        create_order(snap, 10)
    assert "name" in str(exc.value)


def test_full_lifecycle():
    order = _paid()
    assert order.status == OrderStatus.PAID
    assert order.courier_id == "user-2"
    assert order.actual_liters == 22
    assert order.pickup_evidence_ref == "evidence/p.jpg"
    assert order.payment_evidence_ref == "evidence/pay.jpg"


def test_input_order_is_never_mutated():
    pending = _pending()
    assigned = apply_transition(pending, Transition.ASSIGN, ADMIN, TransitionPayload(courier_id="user-2"))
    assert pending.status == OrderStatus.PENDING
    assert pending.courier_id is None
    assert assigned is not pending


def test_courier_claims_order_for_themselves():
    order = apply_transition(_pending(), Transition.ASSIGN, COURIER)
    assert order.status == OrderStatus.ASSIGNED
    assert order.courier_id == "user-2"


def test_courier_cannot_assign_someone_else():
    with pytest.raises(RoleDenied):
        apply_transition(_pending(), Transition.ASSIGN, COURIER, TransitionPayload(courier_id="user-3"))


def test_admin_assign_requires_courier():
    with pytest.raises(PayloadInvalid):
        apply_transition(_pending(), Transition.ASSIGN, ADMIN)


def test_only_assigned_courier_may_start():
    with pytest.raises(RoleDenied) as exc:
        apply_transition(_assigned(), Transition.START, OTHER_COURIER)
    assert exc.value.check == "role"


def test_verify_on_pending_is_state_mismatch():
    with pytest.raises(StateMismatch) as exc:
        apply_transition(_pending(), Transition.VERIFY, ADMIN)
    assert exc.value.retryable is True
    assert exc.value.check == "state"


def test_mark_paid_on_completed_is_state_mismatch():
    with pytest.raises(StateMismatch):
        apply_transition(_completed(), Transition.MARK_PAID, ADMIN, TransitionPayload(payment_evidence_ref="x"))


def test_denied_role_reported_before_state():
    # customer on a paid order: role check wins over the state check
    with pytest.raises(RoleDenied):
        apply_transition(_paid(), Transition.ASSIGN, CUSTOMER)


def test_complete_requires_evidence():
    order = _in_progress()
    with pytest.raises(PayloadInvalid) as exc:
        apply_transition(order, Transition.COMPLETE, COURIER, TransitionPayload(actual_liters=22))
    assert isinstance(exc.value, ValidationError)
    assert exc.value.check == "payload"
    assert order.status == OrderStatus.IN_PROGRESS
    assert order.actual_liters is None


@pytest.mark.parametrize("liters", [0, -1, None, True, "22", 22.0])
def test_complete_rejects_bad_liters(liters):
    with pytest.raises(PayloadInvalid):
        apply_transition(
            _in_progress(),
            Transition.COMPLETE,
            COURIER,
            TransitionPayload(actual_liters=liters, pickup_evidence_ref="evidence/p.jpg"),
        )


def test_mark_paid_requires_payment_evidence():
    with pytest.raises(PayloadInvalid):
        apply_transition(_verified(), Transition.MARK_PAID, ADMIN, TransitionPayload(payment_evidence_ref="   "))


def test_unknown_transition_is_validation_error():
    with pytest.raises(ValidationError) as exc:
        apply_transition(_pending(), "CANCEL", ADMIN)
    assert not isinstance(exc.value, TransitionRejected)


def test_transition_accepts_string_names():
    order = apply_transition(_pending(), "ASSIGN", ADMIN, TransitionPayload(courier_id="user-2"))
    assert order.status == OrderStatus.ASSIGNED


@pytest.mark.parametrize("actor", [ADMIN, COURIER, OTHER_COURIER, WAREHOUSE, CUSTOMER])
@pytest.mark.parametrize("transition", list(Transition))
def test_paid_is_terminal(actor, transition):
    paid = _paid()
    payload = TransitionPayload(
        courier_id=actor.actor_id,
        actual_liters=5,
        pickup_evidence_ref="e",
        payment_evidence_ref="e",
    )
    with pytest.raises(TransitionRejected):
        apply_transition(paid, transition, actor, payload)


def test_status_never_moves_backwards_or_skips():
    assert_status_advance(OrderStatus.PENDING, OrderStatus.ASSIGNED)
    with pytest.raises(StateMismatch):
        assert_status_advance(OrderStatus.PENDING, OrderStatus.COMPLETED)
    with pytest.raises(StateMismatch):
        assert_status_advance(OrderStatus.VERIFIED, OrderStatus.COMPLETED)


def test_available_transitions():
    assert available_transitions(_pending(), ADMIN) == [Transition.ASSIGN]
    assert available_transitions(_pending(), COURIER) == [Transition.ASSIGN]
    assert available_transitions(_pending(), WAREHOUSE) == []
    assert available_transitions(_assigned(), COURIER) == [Transition.START]
    assert available_transitions(_assigned(), OTHER_COURIER) == []
    assert available_transitions(_completed(), WAREHOUSE) == [Transition.VERIFY]
    assert available_transitions(_paid(), ADMIN) == []
