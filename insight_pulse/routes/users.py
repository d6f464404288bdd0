import datetime as dt
import logging
from typing import List

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.concurrency import run_in_threadpool

from insight_pulse import models
from insight_pulse.db import get_session
from insight_pulse.deps import require_admin
from insight_pulse.schemas import UserCreate, UserSummary, UserUpdate
from insight_pulse.security import get_password_hash

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/users", tags=["users"], dependencies=[Depends(require_admin)])

DUPLICATE_USER = "Username or email already exists"


@router.get("", response_model=List[UserSummary])
async def list_users(session: AsyncSession = Depends(get_session)):
    try:
        result = await session.execute(select(models.User).order_by(models.User.name))
        users = result.scalars().all()
    except SQLAlchemyError:
        logger.exception("Database error while listing users")
        raise HTTPException(status_code=500, detail="Failed to fetch users")
    return [
        {
            "id": u.id,
            "username": u.username,
            "name": u.name,
            "email": u.email,
            "department": u.department,
            "role": u.role,
            "status": "Active" if u.is_active else "Inactive",
        }
        for u in users
    ]


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_user(payload: UserCreate, session: AsyncSession = Depends(get_session)):
    try:
        password_hash = await run_in_threadpool(get_password_hash, payload.password)
    except (TypeError, ValueError):
        logger.exception("Password hashing failed for %r", payload.username)
        raise HTTPException(status_code=500, detail="Failed to create user")

    user = models.User(
        username=payload.username,
        password_hash=password_hash,
        name=payload.name,
        email=payload.email,
        department=payload.department,
        role=payload.role,
        is_active=True,
    )
    session.add(user)
    try:
        await session.commit()
    except IntegrityError:
        await session.rollback()
        raise HTTPException(status_code=400, detail=DUPLICATE_USER)
    except SQLAlchemyError:
        await session.rollback()
        logger.exception("Database error while creating user %r", payload.username)
        raise HTTPException(status_code=500, detail="Failed to create user")

    logger.info("User %r created with role %s", user.username, user.role)
    return {"id": user.id, "message": "User created successfully"}


@router.put("/{user_id}")
async def update_user(user_id: int, payload: UserUpdate, session: AsyncSession = Depends(get_session)):
    try:
        user = await session.get(models.User, user_id)
        if user is None:
            raise HTTPException(status_code=404, detail="User not found")
        user.name = payload.name
        user.email = payload.email
        user.department = payload.department
        user.role = payload.role
        if payload.is_active is not None:
            user.is_active = payload.is_active
        user.updated_at = dt.datetime.utcnow()
        await session.commit()
    except IntegrityError:
        await session.rollback()
        raise HTTPException(status_code=400, detail=DUPLICATE_USER)
    except SQLAlchemyError:
        await session.rollback()
        logger.exception("Database error while updating user %s", user_id)
        raise HTTPException(status_code=500, detail="Failed to update user")
    return {"message": "User updated successfully"}


@router.delete("/{user_id}")
async def delete_user(user_id: int, session: AsyncSession = Depends(get_session)):
    try:
        result = await session.execute(delete(models.User).where(models.User.id == user_id))
        await session.commit()
    except SQLAlchemyError:
        await session.rollback()
        logger.exception("Database error while deleting user %s", user_id)
        raise HTTPException(status_code=500, detail="Failed to delete user")
    if result.rowcount == 0:
        raise HTTPException(status_code=404, detail="User not found")
    logger.info("User %s deleted", user_id)
    return {"message": "User deleted successfully"}
