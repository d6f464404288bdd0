import datetime as dt

from sqlalchemy import Boolean, Column, Date, DateTime, ForeignKey, Integer, String, Text

from insight_pulse.db import Base


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True)
    username = Column(String(150), unique=True, nullable=False)
    password_hash = Column(String(255), nullable=False)
    name = Column(String(255), nullable=False)
    email = Column(String(255), unique=True, nullable=False)
    # Department name, resolved against departments.name when needed
    department = Column(String(255), nullable=False)
    role = Column(String(50), nullable=False)
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime, nullable=False, default=dt.datetime.utcnow)
    updated_at = Column(DateTime, nullable=False, default=dt.datetime.utcnow, onupdate=dt.datetime.utcnow)

    def to_session(self) -> dict:
        """Public projection kept in the session and returned on login."""
        return {
            "id": self.id,
            "username": self.username,
            "name": self.name,
            "email": self.email,
            "department": self.department,
            "role": self.role,
            "is_active": bool(self.is_active),
        }


class Department(Base):
    __tablename__ = "departments"

    id = Column(Integer, primary_key=True)
    name = Column(String(255), unique=True, nullable=False)
    created_at = Column(DateTime, nullable=False, default=dt.datetime.utcnow)


class Permission(Base):
    __tablename__ = "permissions"

    id = Column(Integer, primary_key=True)
    from_department_id = Column(Integer, ForeignKey("departments.id", ondelete="CASCADE"), nullable=False)
    to_department_id = Column(Integer, ForeignKey("departments.id", ondelete="CASCADE"), nullable=False)
    can_survey_self = Column(Boolean, nullable=False, default=False)
    start_date = Column(Date, nullable=False)
    end_date = Column(Date, nullable=False)
    created_at = Column(DateTime, nullable=False, default=dt.datetime.utcnow)


class SurveySubmission(Base):
    __tablename__ = "survey_submissions"

    id = Column(Integer, primary_key=True)
    survey_id = Column(Integer, nullable=False)
    # Not a foreign key: submissions outlive a deleted submitter
    submitter_user_id = Column(Integer, nullable=False, index=True)
    submitter_department_id = Column(Integer, ForeignKey("departments.id"), nullable=False)
    rated_department_id = Column(Integer, ForeignKey("departments.id"), nullable=False)
    overall_customer_rating = Column(Integer, nullable=False)
    suggestions = Column(Text, nullable=True)
    submitted_at = Column(DateTime, nullable=False, default=dt.datetime.utcnow)
