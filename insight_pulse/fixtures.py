"""Fixed payloads for capabilities that have no storage behind them yet.

Survey definitions are not modelled in the database; the catalog below is
what ``/api/surveys`` serves until they are.
"""
import copy
from typing import List, Optional

CATALOG_CREATED_AT = "2024-01-01T00:00:00Z"

SURVEY_TEMPLATE = {
    "id": 1,
    "title": "Department Satisfaction Survey",
    "description": "Rate your experience with other departments",
    "rated_dept_name": "IT",
    "managing_dept_name": "HR",
    "rated_department_id": 1,
    "managing_department_id": 2,
    "created_at": CATALOG_CREATED_AT,
    "questions": [
        {
            "id": 1,
            "text": "How satisfied are you with the response time?",
            "type": "rating",
            "order": 1,
            "category": "Service Quality",
        },
        {
            "id": 2,
            "text": "How would you rate the overall service quality?",
            "type": "rating",
            "order": 2,
            "category": "Service Quality",
        },
    ],
}

SURVEYS = [SURVEY_TEMPLATE]


def list_surveys() -> List[dict]:
    return copy.deepcopy(SURVEYS)


def get_survey(survey_id: int) -> dict:
    """Return the catalog entry, or the template re-labelled with ``survey_id``."""
    for survey in SURVEYS:
        if survey["id"] == survey_id:
            return copy.deepcopy(survey)
    survey = copy.deepcopy(SURVEY_TEMPLATE)
    survey["id"] = survey_id
    return survey


def survey_title(survey_id: int) -> Optional[str]:
    for survey in SURVEYS:
        if survey["id"] == survey_id:
            return survey["title"]
    return None
