from typing import List, Optional

from pydantic import Field
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    secret_key: str = Field(default="change_me", alias="SECRET_KEY")
    database_url: str = Field(default="sqlite+aiosqlite:///./insight_pulse.db", alias="DATABASE_URL")
    app_host: str = Field(default="0.0.0.0", alias="APP_HOST")
    app_port: int = Field(default=5000, alias="APP_PORT")
    environment: str = Field(default="development", alias="ENVIRONMENT")
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")

    frontend_origin: str = Field(default="http://localhost:8080", alias="FRONTEND_ORIGIN")
    session_cookie: str = Field(default="insight_pulse_session", alias="SESSION_COOKIE")
    session_max_age: int = Field(default=60 * 60 * 24, alias="SESSION_MAX_AGE")  # 24 hours

    admin_username: str = Field(default="admin", alias="ADMIN_USERNAME")
    admin_password: str = Field(default="changeme123", alias="ADMIN_PASSWORD")
    admin_email: str = Field(default="admin@example.com", alias="ADMIN_EMAIL")
    admin_department: str = Field(default="Administration", alias="ADMIN_DEPARTMENT")
    default_departments: List[str] = Field(
        default=["Administration", "HR", "IT", "Sales"], alias="DEFAULT_DEPARTMENTS"
    )

    # Rating reported for departments nobody has rated yet; None reports null.
    metrics_placeholder_rating: Optional[float] = Field(default=None, alias="METRICS_PLACEHOLDER_RATING")

    class Config:
        env_file = ".env"
        case_sensitive = False
        populate_by_name = True


settings = Settings()
