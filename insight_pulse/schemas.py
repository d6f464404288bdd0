from datetime import date, datetime
from typing import Annotated, List, Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field, StringConstraints, model_validator

NonEmptyStr = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1)]


class RequestBody(BaseModel):
    model_config = ConfigDict(extra="forbid")


# Auth

class LoginRequest(RequestBody):
    username: NonEmptyStr
    password: str = Field(..., min_length=1)


class SessionUser(BaseModel):
    id: int
    username: str
    name: str
    email: str
    department: str
    role: str
    is_active: bool


class AuthStatus(BaseModel):
    isAuthenticated: bool
    user: Optional[SessionUser] = None


# Departments

class DepartmentCreate(RequestBody):
    name: NonEmptyStr


class DepartmentOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str


# Users

class UserCreate(RequestBody):
    username: NonEmptyStr
    password: str = Field(..., min_length=6)
    name: NonEmptyStr
    email: EmailStr
    department: NonEmptyStr
    role: NonEmptyStr


class UserUpdate(RequestBody):
    name: NonEmptyStr
    email: EmailStr
    department: NonEmptyStr
    role: NonEmptyStr
    is_active: Optional[bool] = None


class UserSummary(BaseModel):
    id: int
    username: str
    name: str
    email: str
    department: str
    role: str
    status: str


# Permissions

class PermissionPair(RequestBody):
    from_dept_id: int
    to_dept_id: int
    can_survey_self: bool = False


class PermissionReplace(RequestBody):
    allowed_pairs: List[PermissionPair]
    start_date: date
    end_date: date

    @model_validator(mode="after")
    def check_window(self):
        if self.end_date < self.start_date:
            raise ValueError("end_date must not be before start_date")
        return self


class PermissionOut(BaseModel):
    id: int
    from_department_id: int
    to_department_id: int
    can_survey_self: bool
    start_date: date
    end_date: date
    from_department_name: str
    to_department_name: str


# Surveys

class SurveySubmit(RequestBody):
    survey_id: int
    rated_department_id: int
    overall_customer_rating: int = Field(..., ge=1, le=100)
    suggestions: Optional[str] = None


class SubmissionOut(BaseModel):
    id: int
    survey_id: int
    submitter_user_id: int
    submitter_department_id: int
    rated_department_id: int
    overall_customer_rating: int
    suggestions: Optional[str] = None
    submitted_at: datetime
    submitter_department_name: str
    rated_department_name: str


# Dashboard

class LatestSubmission(BaseModel):
    responseId: int
    surveyTitle: str
    ratedDepartmentName: str
    overallRating: int
    submittedBy: str
    submittedAt: datetime


class OverallStats(BaseModel):
    totalSurveysSubmitted: int
    averageOverallRating: Optional[float] = None
    latestSubmissions: List[LatestSubmission]


class DepartmentMetric(BaseModel):
    department_id: int
    department_name: str
    average_rating: Optional[float] = None
    total_surveys: int
