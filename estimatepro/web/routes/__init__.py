"""EstiMate Pro API route modules.

Each module exports a `router` object (APIRouter instance) which
estimatepro.web.app includes. Shared dependencies live in
estimatepro.web.dependencies and request/response models in
estimatepro.web.models.

Usage:
    from estimatepro.web.routes import leads
    app.include_router(leads.router)
"""

from estimatepro.web.routes import (
    account,
    admin,
    auth,
    dashboard,
    health,
    leads,
    pricing,
    quotes,
    surveys,
)

__all__ = [
    "auth",
    "account",
    "pricing",
    "dashboard",
    "leads",
    "quotes",
    "surveys",
    "admin",
    "health",
]
