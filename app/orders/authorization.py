# app/orders/authorization.py
from __future__ import annotations

from enum import Enum

from app.orders.model import Role, Transition


class Grant(str, Enum):
    DENY = "DENY"
    ALLOW = "ALLOW"
    # acting courier must be the order's assigned courier
    OWNER = "OWNER"
    # courier may only assign the order to themselves
    SELF = "SELF"


AUTHORIZATION_TABLE: dict[Transition, dict[Role, Grant]] = {
    Transition.ASSIGN: {
        Role.ADMIN: Grant.ALLOW,
        Role.COURIER: Grant.SELF,
        Role.WAREHOUSE: Grant.DENY,
        Role.CUSTOMER: Grant.DENY,
    },
    Transition.START: {
        Role.ADMIN: Grant.DENY,
        Role.COURIER: Grant.OWNER,
        Role.WAREHOUSE: Grant.DENY,
        Role.CUSTOMER: Grant.DENY,
    },
    Transition.COMPLETE: {
        Role.ADMIN: Grant.DENY,
        Role.COURIER: Grant.OWNER,
        Role.WAREHOUSE: Grant.DENY,
        Role.CUSTOMER: Grant.DENY,
    },
    Transition.VERIFY: {
        Role.ADMIN: Grant.ALLOW,
        Role.COURIER: Grant.DENY,
        Role.WAREHOUSE: Grant.ALLOW,
        Role.CUSTOMER: Grant.DENY,
    },
    Transition.MARK_PAID: {
        Role.ADMIN: Grant.ALLOW,
        Role.COURIER: Grant.DENY,
        Role.WAREHOUSE: Grant.DENY,
        Role.CUSTOMER: Grant.DENY,
    },
}


def missing_grants(table: dict[Transition, dict[Role, Grant]] = AUTHORIZATION_TABLE) -> list[tuple[str, str]]:
    missing: list[tuple[str, str]] = []
    for transition in Transition:
        row = table.get(transition, {})
        for role in Role:
            if role not in row:
                missing.append((transition.value, role.value))
    return missing


def assert_table_total(table: dict[Transition, dict[Role, Grant]] = AUTHORIZATION_TABLE) -> None:
    missing = missing_grants(table)
    if missing:
        raise RuntimeError(f"Authorization table incomplete: {missing}")


def grant_for(role: Role, transition: Transition) -> Grant:
    return AUTHORIZATION_TABLE[transition][role]


def is_permitted(role: Role, transition: Transition) -> bool:
    """Role-level answer only; OWNER/SELF still need the identity check."""
    return grant_for(role, transition) != Grant.DENY


def allowed_roles(transition: Transition) -> list[Role]:
    return [role for role, grant in AUTHORIZATION_TABLE[transition].items() if grant != Grant.DENY]


assert_table_total()
