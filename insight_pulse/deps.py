"""Request-scoped capabilities and the auth gate."""
from typing import Optional

from fastapi import Depends, HTTPException, Request, status

from insight_pulse.sessions import SessionStore

SESSION_ID_KEY = "sid"
ADMIN_ROLE = "Admin"


def get_session_store(request: Request) -> SessionStore:
    return request.app.state.session_store


async def get_current_user(
    request: Request, store: SessionStore = Depends(get_session_store)
) -> Optional[dict]:
    session_id = request.session.get(SESSION_ID_KEY)
    if not session_id:
        return None
    return await store.get(session_id)


async def require_auth(user: Optional[dict] = Depends(get_current_user)) -> dict:
    if not user:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Authentication required")
    return user


async def require_admin(user: Optional[dict] = Depends(get_current_user)) -> dict:
    # Resolves the session on its own; a missing session is simply not an admin.
    if not user or user.get("role") != ADMIN_ROLE:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Admin access required")
    return user
