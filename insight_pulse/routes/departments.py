import logging
from typing import List

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from insight_pulse import models
from insight_pulse.db import get_session
from insight_pulse.deps import require_admin
from insight_pulse.schemas import DepartmentCreate, DepartmentOut

logger = logging.getLogger(__name__)
router = APIRouter(tags=["departments"])


@router.get("/departments", response_model=List[DepartmentOut])
async def list_departments(session: AsyncSession = Depends(get_session)):
    try:
        result = await session.execute(select(models.Department).order_by(models.Department.name))
        return result.scalars().all()
    except SQLAlchemyError:
        logger.exception("Database error while listing departments")
        raise HTTPException(status_code=500, detail="Failed to fetch departments")


@router.post("/departments", status_code=status.HTTP_201_CREATED)
async def create_department(
    payload: DepartmentCreate,
    session: AsyncSession = Depends(get_session),
    admin: dict = Depends(require_admin),
):
    department = models.Department(name=payload.name)
    session.add(department)
    try:
        await session.commit()
    except IntegrityError:
        await session.rollback()
        raise HTTPException(status_code=400, detail="Department already exists")
    except SQLAlchemyError:
        await session.rollback()
        logger.exception("Database error while creating department %r", payload.name)
        raise HTTPException(status_code=500, detail="Failed to create department")

    logger.info("Department %r created by %s", department.name, admin["username"])
    return {"id": department.id, "name": department.name, "message": "Department created successfully"}
