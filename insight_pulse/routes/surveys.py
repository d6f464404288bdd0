import logging
from typing import List

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import aliased

from insight_pulse import fixtures, models
from insight_pulse.db import get_session
from insight_pulse.deps import require_auth
from insight_pulse.schemas import SubmissionOut, SurveySubmit

logger = logging.getLogger(__name__)
router = APIRouter(tags=["surveys"])


@router.get("/surveys")
async def list_surveys():
    return fixtures.list_surveys()


@router.get("/surveys/{survey_id}")
async def get_survey(survey_id: int):
    return fixtures.get_survey(survey_id)


@router.post("/submit-survey")
async def submit_survey(
    payload: SurveySubmit,
    session: AsyncSession = Depends(get_session),
    user: dict = Depends(require_auth),
):
    try:
        result = await session.execute(
            select(models.Department).where(models.Department.name == user["department"])
        )
        department = result.scalars().first()
    except SQLAlchemyError:
        logger.exception("Database error while resolving department %r", user["department"])
        department = None
    if department is None:
        logger.error("No department named %r for user %s", user["department"], user["username"])
        raise HTTPException(status_code=500, detail="Failed to find user department")

    submission = models.SurveySubmission(
        survey_id=payload.survey_id,
        submitter_user_id=user["id"],
        submitter_department_id=department.id,
        rated_department_id=payload.rated_department_id,
        overall_customer_rating=payload.overall_customer_rating,
        suggestions=payload.suggestions,
    )
    session.add(submission)
    try:
        await session.commit()
    except IntegrityError:
        await session.rollback()
        raise HTTPException(status_code=400, detail="Unknown rated department")
    except SQLAlchemyError:
        await session.rollback()
        logger.exception("Database error while saving submission for %s", user["username"])
        raise HTTPException(status_code=500, detail="Failed to submit survey")

    return {"message": "Survey submitted successfully", "submission_id": submission.id}


@router.get("/user-submissions", response_model=List[SubmissionOut])
async def user_submissions(session: AsyncSession = Depends(get_session), user: dict = Depends(require_auth)):
    submitter_dept = aliased(models.Department)
    rated_dept = aliased(models.Department)
    stmt = (
        select(models.SurveySubmission, submitter_dept.name, rated_dept.name)
        .join(submitter_dept, models.SurveySubmission.submitter_department_id == submitter_dept.id)
        .join(rated_dept, models.SurveySubmission.rated_department_id == rated_dept.id)
        .where(models.SurveySubmission.submitter_user_id == user["id"])
        .order_by(models.SurveySubmission.submitted_at.desc(), models.SurveySubmission.id.desc())
    )
    try:
        rows = (await session.execute(stmt)).all()
    except SQLAlchemyError:
        logger.exception("Database error while listing submissions for %s", user["username"])
        raise HTTPException(status_code=500, detail="Failed to fetch submissions")
    return [
        {
            "id": s.id,
            "survey_id": s.survey_id,
            "submitter_user_id": s.submitter_user_id,
            "submitter_department_id": s.submitter_department_id,
            "rated_department_id": s.rated_department_id,
            "overall_customer_rating": s.overall_customer_rating,
            "suggestions": s.suggestions,
            "submitted_at": s.submitted_at,
            "submitter_department_name": submitter_name,
            "rated_department_name": rated_name,
        }
        for s, submitter_name, rated_name in rows
    ]
