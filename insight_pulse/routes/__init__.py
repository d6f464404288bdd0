from fastapi import APIRouter, Depends

from insight_pulse.deps import require_auth
from insight_pulse.routes import auth, dashboard, departments, permissions, surveys, users

# Everything under /api needs a session; admin-only routes add require_admin.
api_router = APIRouter(prefix="/api", dependencies=[Depends(require_auth)])
api_router.include_router(departments.router)
api_router.include_router(users.router)
api_router.include_router(permissions.router)
api_router.include_router(surveys.router)
api_router.include_router(dashboard.router)

auth_router = auth.router

__all__ = ["api_router", "auth_router"]
