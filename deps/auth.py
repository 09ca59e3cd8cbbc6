# deps/auth.py
from fastapi import Depends, HTTPException
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from app.orders.model import Actor, Role
from security import decode_token
from services.observability import set_actor

bearer = HTTPBearer(auto_error=False)


async def get_current_actor(
    creds: HTTPAuthorizationCredentials = Depends(bearer),
) -> Actor:
    if not creds:
        raise HTTPException(status_code=401, detail="UNAUTHORIZED")

    # must be "Bearer"
    if (creds.scheme or "").lower() != "bearer":
        raise HTTPException(status_code=401, detail="UNAUTHORIZED")

    payload = decode_token(creds.credentials)
    sub = str(payload.get("sub") or "").strip()
    if not sub:
        raise HTTPException(status_code=401, detail="UNAUTHORIZED")

    try:
        role = Role(str(payload.get("role") or "").strip().upper())
    except ValueError:
        raise HTTPException(status_code=401, detail="UNAUTHORIZED")

    customer_id = payload.get("customer_id")
    if role == Role.CUSTOMER and not customer_id:
        # customer logins must be linked to a customer record
        raise HTTPException(status_code=401, detail="UNAUTHORIZED")

    set_actor(sub, role.value)
    return Actor(actor_id=sub, role=role, customer_id=(str(customer_id) if customer_id else None))


def require_roles(*roles: Role):
    allowed = set(roles)

    def _dep(actor: Actor = Depends(get_current_actor)) -> Actor:
        if actor.role not in allowed:
            raise HTTPException(status_code=403, detail={"error": "ROLE_DENIED", "retryable": False})
        return actor

    return _dep
