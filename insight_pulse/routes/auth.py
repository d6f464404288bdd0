import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Request, status
from fastapi.responses import JSONResponse
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.concurrency import run_in_threadpool

from insight_pulse import models
from insight_pulse.db import get_session
from insight_pulse.deps import SESSION_ID_KEY, get_current_user, get_session_store
from insight_pulse.schemas import AuthStatus, LoginRequest, SessionUser
from insight_pulse.security import dummy_verify, new_session_id, verify_password
from insight_pulse.sessions import SessionStore, SessionStoreError

logger = logging.getLogger(__name__)
router = APIRouter(tags=["auth"])

INVALID_CREDENTIALS = "Invalid username or password"


@router.post("/login", response_model=SessionUser)
async def login(
    payload: LoginRequest,
    request: Request,
    session: AsyncSession = Depends(get_session),
    store: SessionStore = Depends(get_session_store),
):
    try:
        result = await session.execute(
            select(models.User).where(models.User.username == payload.username, models.User.is_active.is_(True))
        )
        user = result.scalars().first()
    except SQLAlchemyError:
        logger.exception("User lookup failed during login")
        raise HTTPException(status_code=500, detail="Internal server error")

    if user is None:
        # Same cost and same answer as a wrong password
        await run_in_threadpool(dummy_verify)
        logger.info("Rejected login for unknown or inactive user %r", payload.username)
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=INVALID_CREDENTIALS)

    if not await run_in_threadpool(verify_password, payload.password, user.password_hash):
        logger.info("Rejected login for %r: bad password", payload.username)
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=INVALID_CREDENTIALS)

    projection = user.to_session()
    session_id = new_session_id()
    try:
        previous = request.session.get(SESSION_ID_KEY)
        if previous:
            await store.destroy(previous)
        await store.set(session_id, projection)
    except SessionStoreError:
        logger.exception("Could not store session for %r", payload.username)
        raise HTTPException(status_code=500, detail="Internal server error")

    request.session[SESSION_ID_KEY] = session_id
    logger.info("User %r logged in", user.username)
    return projection


@router.post("/logout")
async def logout(request: Request, store: SessionStore = Depends(get_session_store)):
    session_id = request.session.get(SESSION_ID_KEY)
    if session_id:
        try:
            await store.destroy(session_id)
        except SessionStoreError:
            logger.exception("Logout error")
            raise HTTPException(status_code=500, detail="Failed to logout")
    # An emptied session makes SessionMiddleware expire the cookie
    request.session.clear()
    return {"message": "Logged out successfully"}


@router.get("/verify_auth", response_model=AuthStatus)
async def verify_auth(user: Optional[dict] = Depends(get_current_user)):
    if user:
        return {"isAuthenticated": True, "user": user}
    return JSONResponse(status_code=status.HTTP_401_UNAUTHORIZED, content={"isAuthenticated": False, "user": None})
