import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.middleware.sessions import SessionMiddleware

from insight_pulse import models
from insight_pulse.config import settings
from insight_pulse.db import Base, SessionLocal, engine
from insight_pulse.deps import ADMIN_ROLE
from insight_pulse.logging_config import configure_logging
from insight_pulse.routes import api_router, auth_router
from insight_pulse.security import get_password_hash
from insight_pulse.sessions import MemorySessionStore

configure_logging(settings.log_level)
logger = logging.getLogger(__name__)

app = FastAPI(title="Insight Pulse")
app.add_middleware(
    SessionMiddleware,
    secret_key=settings.secret_key,
    session_cookie=settings.session_cookie,
    max_age=settings.session_max_age,
    same_site="lax",
    https_only=settings.environment == "production",
)
app.add_middleware(
    CORSMiddleware,
    allow_origins=[settings.frontend_origin],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.state.session_store = MemorySessionStore(ttl_seconds=settings.session_max_age)

app.include_router(auth_router)
app.include_router(api_router)


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    errors = []
    for err in exc.errors():
        if err.get("type") == "json_invalid":
            # loc holds a character offset here, not a field
            field = "body"
        else:
            field = ".".join(str(part) for part in err.get("loc", ()) if part != "body")
        errors.append({"field": field or "body", "message": err.get("msg", "Invalid value")})
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"detail": "Validation failed", "errors": errors},
    )


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(status_code=500, content={"detail": "Internal server error"})


async def init_db() -> None:
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


@app.on_event("startup")
async def startup_event():
    await init_db()
    async with SessionLocal() as session:
        await ensure_departments(session)
        await ensure_admin_user(session)
        await session.commit()


async def ensure_departments(session: AsyncSession) -> None:
    result = await session.execute(select(func.count(models.Department.id)))
    if result.scalar_one() > 0:
        return
    names = list(dict.fromkeys(settings.default_departments + [settings.admin_department]))
    session.add_all([models.Department(name=name) for name in names])
    logger.info("Seeded departments: %s", ", ".join(names))


async def ensure_admin_user(session: AsyncSession) -> None:
    result = await session.execute(select(models.User).where(models.User.role == ADMIN_ROLE))
    if result.scalars().first():
        return
    session.add(
        models.User(
            username=settings.admin_username,
            password_hash=get_password_hash(settings.admin_password),
            name="Administrator",
            email=settings.admin_email,
            department=settings.admin_department,
            role=ADMIN_ROLE,
            is_active=True,
        )
    )
    logger.info("Created initial admin user %r", settings.admin_username)


@app.get("/health")
async def healthcheck():
    return {"status": "ok"}
