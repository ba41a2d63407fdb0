from __future__ import annotations

from app.api.routes.forms import router as forms_router
from app.api.routes.health import router as health_router
from app.api.routes.quota import router as quota_router
from app.api.routes.submissions import router as submissions_router

__all__ = ["forms_router", "health_router", "quota_router", "submissions_router"]
