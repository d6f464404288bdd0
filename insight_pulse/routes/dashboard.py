import logging
from typing import List

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from insight_pulse import fixtures, models
from insight_pulse.config import settings
from insight_pulse.db import get_session
from insight_pulse.schemas import DepartmentMetric, OverallStats

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/dashboard", tags=["dashboard"])

LATEST_LIMIT = 5


def _rounded(value):
    return round(float(value), 2) if value is not None else None


@router.get("/overall-stats", response_model=OverallStats)
async def overall_stats(session: AsyncSession = Depends(get_session)):
    Submission = models.SurveySubmission
    latest_stmt = (
        select(Submission, models.Department.name, models.User.name)
        .join(models.Department, Submission.rated_department_id == models.Department.id)
        .outerjoin(models.User, Submission.submitter_user_id == models.User.id)
        .order_by(Submission.submitted_at.desc(), Submission.id.desc())
        .limit(LATEST_LIMIT)
    )
    try:
        total, average = (
            await session.execute(select(func.count(Submission.id), func.avg(Submission.overall_customer_rating)))
        ).one()
        latest = (await session.execute(latest_stmt)).all()
    except SQLAlchemyError:
        logger.exception("Database error while computing dashboard stats")
        raise HTTPException(status_code=500, detail="Failed to fetch dashboard stats")

    return {
        "totalSurveysSubmitted": total or 0,
        "averageOverallRating": _rounded(average),
        "latestSubmissions": [
            {
                "responseId": s.id,
                "surveyTitle": fixtures.survey_title(s.survey_id) or f"Survey #{s.survey_id}",
                "ratedDepartmentName": rated_name,
                "overallRating": s.overall_customer_rating,
                "submittedBy": submitter_name or "Former user",
                "submittedAt": s.submitted_at,
            }
            for s, rated_name, submitter_name in latest
        ],
    }


@router.get("/department-metrics", response_model=List[DepartmentMetric])
async def department_metrics(session: AsyncSession = Depends(get_session)):
    Submission = models.SurveySubmission
    stmt = (
        select(
            models.Department.id,
            models.Department.name,
            func.avg(Submission.overall_customer_rating),
            func.count(Submission.id),
        )
        .outerjoin(Submission, Submission.rated_department_id == models.Department.id)
        .group_by(models.Department.id, models.Department.name)
        .order_by(models.Department.name)
    )
    try:
        rows = (await session.execute(stmt)).all()
    except SQLAlchemyError:
        logger.exception("Database error while computing department metrics")
        raise HTTPException(status_code=500, detail="Failed to fetch department metrics")

    placeholder = settings.metrics_placeholder_rating
    return [
        {
            "department_id": dept_id,
            "department_name": name,
            "average_rating": _rounded(average) if count else placeholder,
            "total_surveys": count,
        }
        for dept_id, name, average, count in rows
    ]
