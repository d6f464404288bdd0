import logging
from typing import Any, List

from fastapi import APIRouter, Body, Depends, HTTPException
from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import aliased

from insight_pulse import models
from insight_pulse.db import get_session
from insight_pulse.deps import require_admin
from insight_pulse.schemas import PermissionOut, PermissionReplace

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/permissions", tags=["permissions"])


@router.get("", response_model=List[PermissionOut])
async def list_permissions(session: AsyncSession = Depends(get_session)):
    from_dept = aliased(models.Department)
    to_dept = aliased(models.Department)
    stmt = (
        select(models.Permission, from_dept.name, to_dept.name)
        .join(from_dept, models.Permission.from_department_id == from_dept.id)
        .join(to_dept, models.Permission.to_department_id == to_dept.id)
        .order_by(from_dept.name, to_dept.name)
    )
    try:
        rows = (await session.execute(stmt)).all()
    except SQLAlchemyError:
        logger.exception("Database error while listing permissions")
        raise HTTPException(status_code=500, detail="Failed to fetch permissions")
    return [
        {
            "id": perm.id,
            "from_department_id": perm.from_department_id,
            "to_department_id": perm.to_department_id,
            "can_survey_self": perm.can_survey_self,
            "start_date": perm.start_date,
            "end_date": perm.end_date,
            "from_department_name": from_name,
            "to_department_name": to_name,
        }
        for perm, from_name, to_name in rows
    ]


@router.post("")
async def replace_permissions(
    payload: PermissionReplace,
    session: AsyncSession = Depends(get_session),
    admin: dict = Depends(require_admin),
):
    """Swap the whole permission set for ``allowed_pairs``.

    Pairs left out of the payload are revoked. Delete and insert share one
    transaction, so readers see either the old set or the new one.
    """
    rows = [
        models.Permission(
            from_department_id=pair.from_dept_id,
            to_department_id=pair.to_dept_id,
            can_survey_self=pair.can_survey_self,
            start_date=payload.start_date,
            end_date=payload.end_date,
        )
        for pair in payload.allowed_pairs
    ]
    try:
        async with session.begin():
            await session.execute(delete(models.Permission))
            session.add_all(rows)
    except IntegrityError:
        logger.warning("Permission replace rejected by storage constraints", exc_info=True)
        raise HTTPException(status_code=400, detail="Invalid department in allowed pairs")
    except SQLAlchemyError:
        logger.exception("Database error while saving permissions")
        raise HTTPException(status_code=500, detail="Failed to save permissions")

    logger.info(
        "%s replaced permissions with %d pairs (%s to %s)",
        admin["username"], len(rows), payload.start_date, payload.end_date,
    )
    return {"message": "Permissions saved successfully"}


@router.post("/mail-alert", dependencies=[Depends(require_admin)])
async def mail_alert(payload: Any = Body(default=None)):
    # Delivery is not implemented; nothing leaves the server.
    logger.info("Mail alert requested with data: %s", payload)
    return {"message": "Mail alert recorded; email delivery is not yet implemented", "delivered": 0}
